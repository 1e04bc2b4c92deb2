"""Application layer - Path-addressed bindings for configuration trees."""

import inspect
import logging
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, Set, Tuple, get_origin, get_type_hints

from pydantic import BaseModel

from miraveja_wiring.application.resolver import unwrap_optional
from miraveja_wiring.domain import BindingPath, ConfigurationError, IContainer

logger = logging.getLogger(__name__)

_NON_DECLARING = (object, BaseModel)


def declaring_package(cls: type) -> str:
    """Package a class is declared in, or its module when it is top level."""
    package, _, _ = cls.__module__.rpartition(".")
    return package or cls.__module__


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _declaring_classes(cls: type) -> List[type]:
    """The class and its ancestors, ancestors first."""
    return [
        klass
        for klass in reversed(cls.__mro__)
        if klass not in _NON_DECLARING and klass.__module__ not in ("typing", "pydantic.main")
    ]


def _model_fields(klass: type) -> Optional[Dict[str, Any]]:
    fields = getattr(klass, "model_fields", None)
    return fields if isinstance(fields, dict) else None


def _own_fields(klass: type) -> List[str]:
    names = [name for name in inspect.get_annotations(klass) if not name.startswith("_")]
    model_fields = _model_fields(klass)
    if model_fields is not None:
        # Class variables and private attributes of a model are not fields
        names = [name for name in names if name in model_fields]
    return names


def _field_type(klass: type, name: str) -> Any:
    model_fields = _model_fields(klass)
    if model_fields is not None and name in model_fields:
        return model_fields[name].annotation
    try:
        hint = get_type_hints(klass)[name]
    except Exception as e:
        raise ConfigurationError(f"Unable to resolve type of field {name} on {qualified_name(klass)}: {e}") from e
    return hint


def declared_fields(cls: type) -> Dict[str, Tuple[type, Any]]:
    """Enumerate the fields of a class and its ancestors.

    Returns:
        Field name to ``(declaring class, field type)``, ancestors' fields first.
        A field redeclared by a subclass keeps its position and takes the
        subclass's type.
    """
    fields: Dict[str, Tuple[type, Any]] = {}
    for klass in _declaring_classes(cls):
        for name in _own_fields(klass):
            hint = _field_type(klass, name)
            if hint is ClassVar or get_origin(hint) is ClassVar:
                continue
            field_type, _ = unwrap_optional(hint)
            fields[name] = (klass, field_type)
    return fields


def find_field(cls: type, name: str) -> type:
    """Find the class declaring ``name``, searching ``cls`` then its ancestors.

    Raises:
        ConfigurationError: If no class up to ``object`` declares the field.
    """
    for search in cls.__mro__:
        if search in _NON_DECLARING:
            break
        if name in inspect.get_annotations(search):
            return search
    raise ConfigurationError(f"Unable to find field {name} on {qualified_name(cls)}")


class ConfigurationPathBinder:
    """Turns every reachable field of a configuration type into a named binding.

    Each field is addressed by its dotted path from the root (``"db"``,
    ``"db.host"``) and bound under ``DependencyKey(field_type, path)``. Field
    types are recursed into only when they belong to one of the configuration
    packages and are not enums. Each type is expanded at most once, so cyclic
    graphs terminate; later occurrences still get their own binding.

    The binder never holds the configuration itself: values are read through
    the supplier given to ``install`` each time a binding is resolved.

    Attributes:
        config_class: The root configuration type.
        config_packages: Package prefixes eligible for recursion.
    """

    def __init__(self, config_class: type, config_packages: Iterable[str] = ()) -> None:
        self.config_class = config_class
        self.config_packages: Tuple[str, ...] = tuple(p for p in config_packages if p) or (
            declaring_package(config_class),
        )
        self._paths: List[BindingPath] = []
        self._bind_fields(config_class, None, {config_class})
        for binding_path in self._paths:
            self._validate(binding_path)
        self._accessors: Dict[str, Callable[[Any], Any]] = {p.name: p.read for p in self._paths}

    @property
    def paths(self) -> List[BindingPath]:
        return list(self._paths)

    @property
    def accessors(self) -> Dict[str, Callable[[Any], Any]]:
        """Path name to getter over a live configuration value."""
        return dict(self._accessors)

    def is_config_object(self, field_type: Any) -> bool:
        """Whether a field type should be recursed into."""
        if not inspect.isclass(field_type) or issubclass(field_type, Enum):
            return False
        name = qualified_name(field_type)
        return any(name.startswith(package) for package in self.config_packages)

    def _bind_fields(self, cls: type, parent: Optional[BindingPath], visited: Set[type]) -> None:
        for name, (declaring, field_type) in declared_fields(cls).items():
            if parent is None:
                binding_path = BindingPath(segments=(name,), declaring_types=(declaring,), leaf_type=field_type)
            else:
                binding_path = parent.child(name, declaring, field_type)
            self._paths.append(binding_path)

            if self.is_config_object(field_type) and field_type not in visited:
                visited.add(field_type)
                self._bind_fields(field_type, binding_path, visited)

    def _validate(self, binding_path: BindingPath) -> None:
        cls = self.config_class
        for segment in binding_path.segments:
            declaring = find_field(cls, segment)
            cls, _ = unwrap_optional(_field_type(declaring, segment))

    def accessor(self, dotted_path: str) -> Callable[[Any], Any]:
        """Build a getter for an arbitrary dotted path.

        Raises:
            ConfigurationError: If any segment does not exist on its type.
        """
        if dotted_path in self._accessors:
            return self._accessors[dotted_path]
        binding_path: Optional[BindingPath] = None
        cls: Any = self.config_class
        for segment in dotted_path.split("."):
            if not inspect.isclass(cls):
                raise ConfigurationError(f"Unable to find field {segment} on {cls}")
            declaring = find_field(cls, segment)
            field_type, _ = unwrap_optional(_field_type(declaring, segment))
            if binding_path is None:
                binding_path = BindingPath(segments=(segment,), declaring_types=(declaring,), leaf_type=field_type)
            else:
                binding_path = binding_path.child(segment, declaring, field_type)
            cls = field_type
        return binding_path.read

    def install(self, container: IContainer, configuration_supplier: Callable[[], Any]) -> None:
        """Register one deferred binding per path.

        Args:
            container: The unsealed stage receiving the bindings.
            configuration_supplier: Returns the live configuration on each read.
        """
        for binding_path in self._paths:
            container.register_transients({binding_path.key: self._provider(binding_path, configuration_supplier)})
            logger.debug("Bound configuration path %s as %s", binding_path.name, binding_path.key)
        logger.info("Bound %d configuration paths of %s", len(self._paths), qualified_name(self.config_class))

    @staticmethod
    def _provider(binding_path: BindingPath, supplier: Callable[[], Any]) -> Callable[[IContainer], Any]:
        def provide(container: IContainer) -> Any:
            return binding_path.read(supplier())

        return provide
