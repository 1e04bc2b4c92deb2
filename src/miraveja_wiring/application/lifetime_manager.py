from typing import Any, Callable, Dict

from miraveja_wiring.domain import (
    CircularDependencyError,
    DependencyKey,
    DependencyMetadata,
    ILifetimeManager,
    Lifetime,
    NotYetAvailableError,
    UnresolvableError,
)

_PROPAGATED = (UnresolvableError, CircularDependencyError, NotYetAvailableError)


class LifetimeManager(ILifetimeManager):
    """Manages instance lifetimes for singleton, transient, and scoped dependencies.

    Each stage owns one manager. Singletons are cached by the stage that owns
    the binding; scoped instances by the scope container that requested them.

    Attributes:
        _singleton_cache: Cache for singleton instances.
        _scoped_cache: Cache for scoped instances.
    """

    def __init__(self) -> None:
        self._singleton_cache: Dict[DependencyKey, Any] = {}
        self._scoped_cache: Dict[DependencyKey, Any] = {}

    def get_or_create(self, metadata: DependencyMetadata, factory: Callable[[], Any]) -> Any:
        """Get existing instance or create new one based on lifetime.

        Args:
            metadata: Registration metadata containing lifetime info.
            factory: Function to create new instance if needed.

        Returns:
            Instance according to lifetime rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always calls the factory
            - Scoped: Returns cached instance within scope or creates new one

        Raises:
            UnresolvableError: If the factory fails with any other error.
            NotYetAvailableError: Propagated unchanged from deferred providers.
        """
        lifetime = metadata.registration.lifetime
        key = metadata.registration.key

        if lifetime == Lifetime.SINGLETON:
            return self._cached(self._singleton_cache, key, factory)

        if lifetime == Lifetime.SCOPED:
            return self._cached(self._scoped_cache, key, factory)

        return self._create(key, factory)

    def _cached(self, cache: Dict[DependencyKey, Any], key: DependencyKey, factory: Callable[[], Any]) -> Any:
        if key not in cache:
            cache[key] = self._create(key, factory)
        return cache[key]

    @staticmethod
    def _create(key: DependencyKey, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except _PROPAGATED:
            raise
        except Exception as e:
            raise UnresolvableError(key, f"Failed to create instance: {str(e)}") from e

    def is_cached(self, key: DependencyKey) -> bool:
        return key in self._singleton_cache or key in self._scoped_cache

    def clear_cache(self) -> None:
        """Clear all cached instances (singletons and scoped)."""
        self._singleton_cache.clear()
        self._scoped_cache.clear()

    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instance cache.

        Called when a scope ends (e.g., end of HTTP request).
        """
        self._scoped_cache.clear()
