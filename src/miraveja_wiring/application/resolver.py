import inspect
import types
from typing import Annotated, Any, Tuple, Union, get_args, get_origin, get_type_hints

from miraveja_wiring.domain import (
    CircularDependencyError,
    DependencyKey,
    IContainer,
    IResolver,
    MissingValueError,
    Named,
    NotYetAvailableError,
    UnresolvableError,
)

_UNION_TYPES = (Union, types.UnionType)


def unwrap_optional(hint: Any) -> Tuple[Any, bool]:
    """Strip ``Optional[...]`` from a hint.

    Returns:
        The inner type and whether the hint allowed None.
    """
    if get_origin(hint) in _UNION_TYPES:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1 and len(args) != len(get_args(hint)):
            return args[0], True
    return hint, False


def derive_key(hint: Any) -> Tuple[DependencyKey, bool]:
    """Derive the dependency key requested by a parameter hint.

    ``Annotated[X, Named("n")]`` qualifies the key with ``n``; ``Optional[X]``
    (inside or outside the annotation) marks the request as optional.

    Returns:
        The key and whether the parameter accepts an absent value.

    Raises:
        ValueError: If more than one qualifier is attached to the hint.
    """
    hint, optional = unwrap_optional(hint)
    name = None
    if get_origin(hint) is Annotated:
        base, *metadata = get_args(hint)
        qualifiers = [item for item in metadata if isinstance(item, Named)]
        if len(qualifiers) > 1:
            raise ValueError(f"more than one qualifier: {', '.join(q.name for q in qualifiers)}")
        if qualifiers:
            name = qualifiers[0].name
        hint, inner_optional = unwrap_optional(base)
        optional = optional or inner_optional
    return DependencyKey(dependency_type=hint, name=name), optional


class DependencyResolver(IResolver):
    """Resolves dependencies using constructor introspection and type hints.

    Uses Python's inspect module to analyze constructor signatures and
    automatically resolve dependencies based on type hints. Qualified
    parameters (``Annotated[X, Named(...)]``) are resolved by name.
    """

    def resolve_dependencies(self, dependency_type: type, container: IContainer) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The type to instantiate.
            container: The container to resolve dependencies from.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If any dependency cannot be resolved or lacks type hint.
            NotYetAvailableError: If a dependency is read before its slot is set.
            MissingValueError: If a required dependency resolved to an absent value.
        """
        try:
            signature = inspect.signature(dependency_type.__init__)
            type_hints = get_type_hints(dependency_type.__init__, include_extras=True)

            kwargs = {}
            for param_name, param in signature.parameters.items():
                if param_name == "self":
                    continue

                if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                    continue

                # Parameters with defaults keep their default values
                if param.default is not inspect.Parameter.empty:
                    continue

                if param_name not in type_hints:
                    raise UnresolvableError(
                        dependency_type,
                        f"Parameter '{param_name}' lacks type hint and has no default value.",
                    )

                try:
                    key, optional = derive_key(type_hints[param_name])
                    if optional:
                        kwargs[param_name] = container.resolve_optional(key)
                    else:
                        kwargs[param_name] = container.resolve(key)
                except (NotYetAvailableError, CircularDependencyError, MissingValueError):
                    raise
                except Exception as e:
                    raise UnresolvableError(
                        dependency_type,
                        f"Failed to resolve dependency for parameter '{param_name}': {e}",
                    ) from e

            return dependency_type(**kwargs)

        except (UnresolvableError, NotYetAvailableError, CircularDependencyError):
            raise
        except Exception as e:
            raise UnresolvableError(
                dependency_type,
                f"Failed to auto-wire constructor for {dependency_type}: {e}",
            ) from e
