from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, TypeVar

from miraveja_wiring.domain.enums import ContainerStage
from miraveja_wiring.domain.models import DependencyKey, DependencyMetadata

T = TypeVar("T")


class IContainer(ABC):
    """Abstract interface for one stage of the layered container."""

    @property
    @abstractmethod
    def stage(self) -> ContainerStage:
        """The stage this container represents."""

    @property
    @abstractmethod
    def parent(self) -> Optional["IContainer"]:
        """The container one stage below, or None for the Init stage."""

    @abstractmethod
    def register_singletons(self, dependencies: Dict[Any, Callable[["IContainer"], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: A dictionary mapping types or keys to their builder functions.
        """

    @abstractmethod
    def register_transients(self, dependencies: Dict[Any, Callable[["IContainer"], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Args:
            dependencies: A dictionary mapping types or keys to their builder functions.
        """

    @abstractmethod
    def register_scoped(self, dependencies: Dict[Any, Callable[["IContainer"], Any]]) -> None:
        """Register multiple scoped dependencies at once.

        Args:
            dependencies: A dictionary mapping types or keys to their builder functions.
        """

    @abstractmethod
    def register_instances(self, instances: Dict[Any, Any]) -> None:
        """Bind already-built instances.

        Args:
            instances: A dictionary mapping types or keys to instances.
        """

    @abstractmethod
    def resolve(self, key: Any) -> Any:
        """Resolve and return the value bound to a type or key.

        Args:
            key: The type or DependencyKey to resolve.
        """

    @abstractmethod
    def resolve_optional(self, key: Any) -> Any:
        """Resolve a type or key, returning None when the bound value is absent."""

    @abstractmethod
    def seal(self) -> None:
        """Freeze the binding set of this stage."""

    @abstractmethod
    def create_scope(self) -> "IContainer":
        """Create and return a new scoped container instance."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached instance held by this container."""

    @abstractmethod
    def get_registry_copy(self) -> Dict[DependencyKey, DependencyMetadata]:
        """Get a copy of the bindings owned by this stage."""


class IModule(ABC):
    """A unit of bindings installed into a stage before it is sealed."""

    @abstractmethod
    def configure(self, container: IContainer) -> None:
        """Register this module's bindings.

        Args:
            container: The unsealed stage being built.
        """


class IResolver(ABC):
    """Abstract interface for dependency resolution operations."""

    @abstractmethod
    def resolve_dependencies(
        self,
        dependency_type: type,
        container: IContainer,
    ) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The type to resolve.
            container: The container to use for resolving dependencies.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If a dependency cannot be resolved.
        """


class ILifetimeManager(ABC):
    """Abstract interface for managing dependency lifetimes."""

    @abstractmethod
    def get_or_create(
        self,
        metadata: DependencyMetadata,
        factory: Callable[[], Any],
    ) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            metadata: The dependency metadata containing registration info.
            factory: A callable to create a new instance if needed.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""

    @abstractmethod
    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instances cache."""
