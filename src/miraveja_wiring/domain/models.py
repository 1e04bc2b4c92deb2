from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field

from miraveja_wiring.domain.enums import Capability, Lifetime
from miraveja_wiring.domain.exceptions import EnvironmentNotAvailableError, StageError

if TYPE_CHECKING:
    from miraveja_wiring.domain.interfaces import IContainer


class _Absent:
    """Sentinel type for a deferred value that resolved to nothing."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def _type_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or getattr(target, "__name__", None) or str(target)


class DependencyKey(BaseModel):
    """Identifies a binding: a target type plus an optional qualifier name.

    Attributes:
        dependency_type: The type being bound or requested.
        name: Optional qualifier; configuration paths use the dotted path here.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dependency_type: Any = Field(..., description="The type being bound or requested.")
    name: Optional[str] = Field(default=None, description="Optional qualifier name.")

    @classmethod
    def of(cls, target: Any) -> "DependencyKey":
        """Normalize a bare type or an existing key into a DependencyKey."""
        if isinstance(target, DependencyKey):
            return target
        return cls(dependency_type=target)

    @classmethod
    def named(cls, dependency_type: Any, name: str) -> "DependencyKey":
        return cls(dependency_type=dependency_type, name=name)

    def __str__(self) -> str:
        rendered = _type_name(self.dependency_type)
        if self.name is not None:
            rendered += f"@{self.name}"
        return rendered


class Registration(BaseModel):
    """Value object representing a dependency registration.

    Attributes:
        key: The key being registered.
        builder: Factory function that receives container and returns instance.
        lifetime: How long the instance should live.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: DependencyKey = Field(..., description="The dependency key to be registered.")
    builder: Callable[["IContainer"], Any] = Field(
        ..., description="The builder function to create an instance of the dependency."
    )
    lifetime: Lifetime = Field(..., description="The lifetime of the registered dependency.")


class DependencyMetadata(BaseModel):
    """Tracks registration details and resolution statistics.

    Attributes:
        registration: The original registration configuration.
        resolution_count: Number of times this dependency has been resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    registration: Registration = Field(..., description="The registration details of the dependency.")
    resolution_count: int = Field(
        default=0,
        description="Number of times this dependency has been resolved.",
    )


class ComponentDescriptor(BaseModel):
    """A discovered type together with the capability it was classified under."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    component_type: Type = Field(..., description="The discovered class.")
    capability: Optional[Capability] = Field(
        default=None,
        description="Capability category, or None for ad hoc queries.",
    )

    @property
    def qualified_name(self) -> str:
        return f"{self.component_type.__module__}.{self.component_type.__qualname__}"


class BindingPath(BaseModel):
    """One reachable field of a configuration tree.

    Attributes:
        segments: Field names from the root configuration to the leaf.
        declaring_types: The class each segment is read from.
        leaf_type: Declared type of the last field.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    segments: Tuple[str, ...] = Field(..., min_length=1)
    declaring_types: Tuple[Any, ...] = Field(...)
    leaf_type: Any = Field(...)

    @property
    def name(self) -> str:
        """Dotted path, also used as the binding's qualifier name."""
        return ".".join(self.segments)

    @property
    def key(self) -> DependencyKey:
        return DependencyKey.named(self.leaf_type, self.name)

    def child(self, segment: str, declaring_type: Any, leaf_type: Any) -> "BindingPath":
        return BindingPath(
            segments=self.segments + (segment,),
            declaring_types=self.declaring_types + (declaring_type,),
            leaf_type=leaf_type,
        )

    def read(self, root: Any) -> Any:
        """Traverse the path on a live value.

        Returns:
            The leaf value, or ABSENT when any value along the way is None.
        """
        value = root
        if value is None or value is ABSENT:
            return ABSENT
        for segment in self.segments:
            value = getattr(value, segment)
            if value is None:
                return ABSENT
        return value


_UNSET = object()


class Slot:
    """A value written at most once per run and read by deferred providers.

    A slot is unset until either `set` or `mark_absent` is called. Reading an
    unset slot raises EnvironmentNotAvailableError; reading an absent slot
    returns ABSENT.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._value: Any = _UNSET

    @property
    def is_set(self) -> bool:
        return self._value is not _UNSET

    @property
    def has_value(self) -> bool:
        return self.is_set and self._value is not ABSENT

    def set(self, value: Any) -> None:
        if self.is_set:
            raise StageError(f"Slot '{self.name}' has already been written for this run")
        self._value = ABSENT if value is None else value

    def mark_absent(self) -> None:
        self.set(ABSENT)

    def get(self) -> Any:
        if self._value is _UNSET:
            raise EnvironmentNotAvailableError(self.name)
        return self._value

    def __repr__(self) -> str:
        state = "unset" if not self.is_set else repr(self._value)
        return f"Slot({self.name}={state})"
