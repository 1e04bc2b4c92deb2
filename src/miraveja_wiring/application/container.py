import inspect
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from miraveja_wiring.application.circular_detector import CircularDependencyDetector
from miraveja_wiring.application.lifetime_manager import LifetimeManager
from miraveja_wiring.application.resolver import DependencyResolver
from miraveja_wiring.domain import (
    ABSENT,
    ConfigurationError,
    ContainerStage,
    DependencyKey,
    DependencyMetadata,
    IContainer,
    IModule,
    IResolver,
    Lifetime,
    LifetimeError,
    MissingValueError,
    Registration,
    ScopeError,
    StageError,
    StagePolicy,
    UnresolvableError,
)

logger = logging.getLogger(__name__)


class DIContainer(IContainer):
    """One stage of the layered dependency container.

    A container owns the bindings of its stage and delegates lookups it cannot
    satisfy to its parent stage. A binding defined in a child stage shadows a
    binding with the same key in any parent stage. Once sealed, the binding set
    no longer changes.

    Attributes:
        _registry: Dictionary mapping dependency keys to their metadata.
        _parent: The stage below this one, if any.
        _resolver: Component responsible for auto-wiring dependencies.
        _lifetime_manager: Component managing instance lifetimes.
        _circular_detector: Cycle detector shared with the whole hierarchy.
    """

    def __init__(
        self,
        stage: ContainerStage = ContainerStage.INIT,
        parent: Optional["DIContainer"] = None,
        policy: StagePolicy = StagePolicy.DEVELOPMENT,
        is_scope: bool = False,
    ) -> None:
        """Initialize an unsealed stage.

        Args:
            stage: The stage this container represents.
            parent: The stage to delegate unresolved lookups to.
            policy: Stage policy; PRODUCTION creates singletons when sealed.
            is_scope: Whether this container is a per-request scope.
        """
        self._stage = stage
        self._parent = parent
        self._policy = policy
        self._is_scope = is_scope
        self._sealed = False
        self._registry: Dict[DependencyKey, DependencyMetadata] = {}
        self._resolver: IResolver = DependencyResolver()
        self._lifetime_manager = LifetimeManager()
        self._circular_detector = parent._circular_detector if parent else CircularDependencyDetector()

    @property
    def stage(self) -> ContainerStage:
        return self._stage

    @property
    def parent(self) -> Optional["DIContainer"]:
        return self._parent

    @property
    def policy(self) -> StagePolicy:
        return self._policy

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def is_scope(self) -> bool:
        return self._is_scope

    def _register(
        self,
        dependency: Any,
        builder: Callable[[IContainer], Any],
        lifetime: Lifetime,
    ) -> None:
        """Internal registration method with validation.

        Raises:
            StageError: If the stage is already sealed.
            LifetimeError: If already registered with a different lifetime.
        """
        if self._sealed:
            raise StageError(f"Cannot register {dependency} on sealed {self._stage} stage")

        key = DependencyKey.of(dependency)
        if key in self._registry:
            existing = self._registry[key]
            if existing.registration.lifetime != lifetime:
                raise LifetimeError(
                    f"Dependency {key} is already registered "
                    f"with lifetime {existing.registration.lifetime.value}, "
                    f"cannot re-register with {lifetime.value}"
                )
            return  # Skip if already registered with same lifetime

        registration = Registration(key=key, builder=builder, lifetime=lifetime)
        self._registry[key] = DependencyMetadata(registration=registration)

    def register_singletons(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Singletons are created once and cached by this stage.

        Args:
            dependencies: Dictionary mapping types or keys to builder functions.
                         Each builder receives the owning container and returns an instance.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DependencyKey.named(str, "region"): lambda c: "eu-west-1",
            ... })
        """
        for dependency, builder in dependencies.items():
            self._register(dependency, builder, Lifetime.SINGLETON)

    def register_transients(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register multiple transient dependencies at once.

        The builder runs on every resolution, which makes transients the
        natural carrier for deferred values.

        Args:
            dependencies: Dictionary mapping types or keys to builder functions.
        """
        for dependency, builder in dependencies.items():
            self._register(dependency, builder, Lifetime.TRANSIENT)

    def register_scoped(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register dependencies cached once per scope container.

        Args:
            dependencies: Dictionary mapping types or keys to builder functions.
        """
        for dependency, builder in dependencies.items():
            self._register(dependency, builder, Lifetime.SCOPED)

    def register_instances(self, instances: Dict[Any, Any]) -> None:
        """Bind existing instances as singletons."""
        for dependency, instance in instances.items():
            self._register(dependency, lambda c, value=instance: value, Lifetime.SINGLETON)

    def install(self, *modules: IModule) -> None:
        """Let each module register its bindings on this stage."""
        for module in modules:
            module.configure(self)

    def seal(self) -> None:
        """Freeze the binding set.

        Under the PRODUCTION policy every singleton of this stage is created here.
        """
        if self._sealed:
            return
        self._sealed = True
        if self._policy == StagePolicy.PRODUCTION:
            for key, metadata in self._registry.items():
                if metadata.registration.lifetime == Lifetime.SINGLETON:
                    self.resolve(key)
        logger.debug("Sealed %s stage with %d bindings", self._stage, len(self._registry))

    def _lookup(self, key: DependencyKey) -> Optional[Tuple["DIContainer", DependencyMetadata]]:
        container: Optional[DIContainer] = self
        while container is not None:
            metadata = container._registry.get(key)
            if metadata is not None:
                return container, metadata
            container = container._parent
        return None

    def _nearest_scope(self) -> Optional["DIContainer"]:
        container: Optional[DIContainer] = self
        while container is not None:
            if container._is_scope:
                return container
            container = container._parent
        return None

    def _can_autowire(self, key: DependencyKey) -> bool:
        target = key.dependency_type
        return (
            key.name is None
            and inspect.isclass(target)
            and not inspect.isabstract(target)
            and target.__module__ != "builtins"
        )

    def _resolve(self, key: DependencyKey) -> Any:
        self._circular_detector.push(key)

        try:
            found = self._lookup(key)
            if found is not None:
                owner, metadata = found
                lifetime = metadata.registration.lifetime
                if lifetime == Lifetime.SCOPED:
                    scope = self._nearest_scope()
                    if scope is None:
                        raise ScopeError(f"Cannot resolve scoped dependency {key} outside a scope container")
                    holder = scope
                elif lifetime == Lifetime.SINGLETON:
                    holder = owner
                else:
                    holder = self
                instance = holder._lifetime_manager.get_or_create(
                    metadata,
                    lambda: metadata.registration.builder(holder),
                )
                metadata.resolution_count += 1
                return instance

            if key.name is None and key.dependency_type in (IContainer, DIContainer):
                return self

            if not self._can_autowire(key):
                raise UnresolvableError(key, f"No binding found in {self._stage} stage or its parents")

            # Auto-wire if not registered
            return self._resolver.resolve_dependencies(key.dependency_type, self)

        finally:
            self._circular_detector.pop()

    def resolve(self, key: Any) -> Any:
        """Resolve the value bound to a type or key.

        Searches this stage, then each parent stage. Unqualified concrete
        classes with no binding are auto-wired through their constructor.

        Args:
            key: The type or DependencyKey to resolve.

        Returns:
            The bound value.

        Raises:
            UnresolvableError: If nothing is bound and the key cannot be auto-wired.
            MissingValueError: If the binding produced an absent value.
            NotYetAvailableError: If a deferred binding was read before its slot was set.
            CircularDependencyError: If a circular dependency is detected.

        Example:
            >>> host = container.resolve(DependencyKey.named(str, "db.host"))
        """
        key = DependencyKey.of(key)
        instance = self._resolve(key)
        if instance is ABSENT:
            raise MissingValueError(key)
        return instance

    def resolve_optional(self, key: Any) -> Any:
        """Resolve a type or key, mapping an absent value to None."""
        instance = self._resolve(DependencyKey.of(key))
        return None if instance is ABSENT else instance

    def has_binding(self, key: Any) -> bool:
        """Whether this stage or one of its parents binds the key."""
        return self._lookup(DependencyKey.of(key)) is not None

    def get_registry_copy(self) -> Dict[DependencyKey, DependencyMetadata]:
        """Get a copy of the bindings owned by this stage."""
        return self._registry.copy()

    def create_child(self, stage: ContainerStage, modules: Iterable[IModule]) -> "DIContainer":
        """Create, configure and seal the next stage on top of this one.

        Args:
            stage: The stage the child represents.
            modules: Modules installing the child's bindings.

        Returns:
            The sealed child container.
        """
        child = DIContainer(stage=stage, parent=self, policy=self._policy)
        child.install(*modules)
        child.seal()
        logger.info("Created %s stage on top of %s stage", stage, self._stage)
        return child

    def create_scope(self) -> "DIContainer":
        """Create a child container for scoped lifetime.

        Scoped containers see every binding of their parent and keep their own
        cache for scoped dependencies. Useful for per-request state.

        Example:
            >>> scoped = container.create_scope()
            >>> ctx1 = scoped.resolve(RequestContext)
            >>> ctx2 = scoped.resolve(RequestContext)
            >>> assert ctx1 is ctx2
        """
        scope = DIContainer(stage=self._stage, parent=self, policy=self._policy, is_scope=True)
        scope._sealed = True
        return scope

    def clear(self) -> None:
        """Drop cached instances.

        Bindings of a sealed stage are never removed; an unsealed stage also
        forgets its registrations.
        """
        if not self._sealed:
            self._registry.clear()
        self._lifetime_manager.clear_cache()
        self._circular_detector.clear()


def create_container(
    policy: Optional[StagePolicy],
    modules: Iterable[IModule] = (),
    stage: ContainerStage = ContainerStage.INIT,
) -> DIContainer:
    """Create, configure and seal a root stage.

    Args:
        policy: Stage policy applied to the whole hierarchy.
        modules: Modules installing the stage's bindings.
        stage: The stage the root represents.

    Raises:
        ConfigurationError: If no policy is supplied.
    """
    if policy is None:
        raise ConfigurationError("A stage policy is required to create a container")
    container = DIContainer(stage=stage, policy=policy)
    container.install(*modules)
    container.seal()
    logger.info("Created %s stage (%s)", stage, policy)
    return container
