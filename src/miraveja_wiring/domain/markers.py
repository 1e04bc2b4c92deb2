"""Markers placed on methods and classes to drive discovery and invocation.

Method markers:
    run: the single entry point of an injected command.
    inject: a member-injection method called with resolved arguments.

Class markers:
    provider: registers the class with the request-dispatch registry.
    path: marks a resource class served under a URL prefix.

Parameter qualifier:
    Named: used inside ``Annotated[...]`` to request a named binding.
"""

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional, TypeVar

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

ENTRY_POINT_ATTRIBUTE = "__wiring_entry_point__"
INJECT_ATTRIBUTE = "__wiring_inject__"
CLASS_MARKERS_ATTRIBUTE = "__wiring_markers__"
RESOURCE_PATH_ATTRIBUTE = "__wiring_path__"

PROVIDER = "provider"
PATH = "path"


@dataclass(frozen=True)
class Named:
    """Qualifier selecting a named binding.

    Example:
        >>> @run
        ... def execute(self, host: Annotated[str, Named("db.host")]) -> None:
        ...     ...
    """

    name: str


def run(func: F) -> F:
    """Mark the method invoked, with resolved parameters, when a command runs."""
    setattr(func, ENTRY_POINT_ATTRIBUTE, True)
    return func


def inject(func: F) -> F:
    """Mark a method that receives resolved dependencies after construction."""
    setattr(func, INJECT_ATTRIBUTE, True)
    return func


def is_entry_point(member: Any) -> bool:
    return callable(member) and getattr(member, ENTRY_POINT_ATTRIBUTE, False) is True


def is_inject_method(member: Any) -> bool:
    return callable(member) and getattr(member, INJECT_ATTRIBUTE, False) is True


def _add_marker(cls: C, marker: str) -> C:
    # Stored on the class itself; subclasses do not inherit class markers.
    existing: FrozenSet[str] = cls.__dict__.get(CLASS_MARKERS_ATTRIBUTE, frozenset())
    setattr(cls, CLASS_MARKERS_ATTRIBUTE, existing | {marker})
    return cls


def provider(cls: C) -> C:
    """Mark a class as a request-dispatch provider."""
    return _add_marker(cls, PROVIDER)


def path(prefix: str) -> Callable[[C], C]:
    """Mark a class as a resource served under ``prefix``."""

    def decorator(cls: C) -> C:
        setattr(cls, RESOURCE_PATH_ATTRIBUTE, prefix)
        return _add_marker(cls, PATH)

    return decorator


def class_markers(cls: type) -> FrozenSet[str]:
    return cls.__dict__.get(CLASS_MARKERS_ATTRIBUTE, frozenset())


def resource_path(cls: type) -> Optional[str]:
    return cls.__dict__.get(RESOURCE_PATH_ATTRIBUTE)
