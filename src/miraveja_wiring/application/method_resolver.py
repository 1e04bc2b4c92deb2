"""Application layer - Invoking marked methods with resolved arguments."""

import inspect
import logging
from typing import Any, Callable, Dict, List, Tuple, get_type_hints

from miraveja_wiring.application.resolver import derive_key
from miraveja_wiring.domain import (
    ConfigurationError,
    DependencyKey,
    IContainer,
    ResolutionError,
    UnresolvableError,
)
from miraveja_wiring.domain.markers import is_entry_point, is_inject_method

logger = logging.getLogger(__name__)

ParameterSpec = Tuple[str, DependencyKey, bool]


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class MethodCallResolver:
    """Calls a method whose parameters are resolved from a container.

    Keys are derived from each parameter's type hint. ``Annotated[X, Named("n")]``
    requests the binding named ``n``; ``Optional[X]`` accepts an absent value;
    parameters with defaults keep them. Every failure is collected before
    anything is raised, so one error reports all bad parameters.
    """

    def find_entry_point(self, cls: type) -> Tuple[str, Callable[..., Any]]:
        """Locate the ``@run`` method, searching the class then its ancestors.

        Returns:
            The method name and the marked function.

        Raises:
            ConfigurationError: If no class in the hierarchy has one, or a
                class marks more than one.
        """
        for klass in cls.__mro__:
            if klass is object:
                break
            marked = [(name, member) for name, member in vars(klass).items() if is_entry_point(member)]
            if len(marked) > 1:
                names = ", ".join(name for name, _ in marked)
                raise ConfigurationError(f"{_qualified_name(klass)} marks more than one entry point: {names}")
            if marked:
                return marked[0]
        raise ConfigurationError(
            f"No entry point found on {_qualified_name(cls)}. The @run marker must be applied to a method."
        )

    def parameter_keys(self, func: Callable[..., Any]) -> List[ParameterSpec]:
        """Derive the key of every injectable parameter.

        Raises:
            ResolutionError: With one message per parameter whose key cannot be derived.
        """
        try:
            type_hints = get_type_hints(func, include_extras=True)
        except Exception as e:
            raise ResolutionError(func, [f"Unable to read type hints: {e}"]) from e

        errors: List[str] = []
        specs: List[ParameterSpec] = []
        for param_name, param in inspect.signature(func).parameters.items():
            if param_name == "self":
                continue
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.default is not inspect.Parameter.empty:
                continue
            if param_name not in type_hints:
                errors.append(f"Parameter '{param_name}' lacks a type hint")
                continue
            try:
                key, optional = derive_key(type_hints[param_name])
            except ValueError as e:
                errors.append(f"Parameter '{param_name}' has {e}")
                continue
            specs.append((param_name, key, optional))

        if errors:
            raise ResolutionError(func, errors)
        return specs

    def resolve_arguments(self, func: Callable[..., Any], container: IContainer) -> Dict[str, Any]:
        """Resolve every parameter of ``func``, aggregating failures.

        NotYetAvailableError is not aggregated: it propagates immediately.
        """
        arguments: Dict[str, Any] = {}
        errors: List[str] = []
        for param_name, key, optional in self.parameter_keys(func):
            try:
                arguments[param_name] = container.resolve_optional(key) if optional else container.resolve(key)
            except UnresolvableError as e:
                errors.append(f"Parameter '{param_name}' ({key}): {e}")

        if errors:
            raise ResolutionError(func, errors)
        return arguments

    def run_entry_point(self, obj: Any, container: IContainer) -> Any:
        """Find the entry point of ``obj`` and invoke it with resolved arguments.

        Args:
            obj: The object to run, typically a command.
            container: The container to resolve parameters from.

        Returns:
            Whatever the entry point returns.

        Raises:
            ConfigurationError: If ``obj`` has no entry point.
            ResolutionError: If any parameter cannot be resolved.
        """
        name, func = self.find_entry_point(type(obj))
        arguments = self.resolve_arguments(func, container)
        logger.debug("Running %s.%s", _qualified_name(type(obj)), name)
        return getattr(obj, name)(**arguments)

    def inject_members(self, obj: Any, container: IContainer) -> None:
        """Call every ``@inject`` method of ``obj``, base classes first.

        A method overridden without the marker is not called. Objects with no
        marked method are left untouched.
        """
        cls = type(obj)
        seen: List[str] = []
        for klass in reversed(cls.__mro__):
            for name, member in vars(klass).items():
                if is_inject_method(member) and name not in seen:
                    seen.append(name)

        for name in seen:
            func = inspect.getattr_static(obj, name)
            if not is_inject_method(func):
                continue
            getattr(obj, name)(**self.resolve_arguments(func, container))
