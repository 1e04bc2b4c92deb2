"""Unit tests for LifetimeManager."""

import pytest

from miraveja_wiring.application.lifetime_manager import LifetimeManager
from miraveja_wiring.domain import (
    DependencyKey,
    DependencyMetadata,
    EnvironmentNotAvailableError,
    ILifetimeManager,
    Lifetime,
    Registration,
    UnresolvableError,
)


class Service:
    pass


def _metadata(lifetime: Lifetime) -> DependencyMetadata:
    registration = Registration(key=DependencyKey.of(Service), builder=lambda c: Service(), lifetime=lifetime)
    return DependencyMetadata(registration=registration)


class TestLifetimeManager:
    """Test cases for LifetimeManager."""

    def test_implements_interface(self):
        """Test that LifetimeManager implements ILifetimeManager."""
        assert isinstance(LifetimeManager(), ILifetimeManager)

    def test_singleton_created_once(self):
        """Test that a singleton factory runs once."""
        manager = LifetimeManager()
        metadata = _metadata(Lifetime.SINGLETON)
        calls = []

        def factory():
            calls.append(1)
            return Service()

        first = manager.get_or_create(metadata, factory)
        second = manager.get_or_create(metadata, factory)

        assert first is second
        assert len(calls) == 1
        assert manager.is_cached(metadata.registration.key)

    def test_transient_created_each_time(self):
        """Test that transients are never cached."""
        manager = LifetimeManager()
        metadata = _metadata(Lifetime.TRANSIENT)

        first = manager.get_or_create(metadata, Service)
        second = manager.get_or_create(metadata, Service)

        assert first is not second
        assert not manager.is_cached(metadata.registration.key)

    def test_scoped_cleared_with_scoped_cache(self):
        """Test that clear_scoped_cache only drops scoped instances."""
        manager = LifetimeManager()
        scoped = _metadata(Lifetime.SCOPED)
        singleton = Registration(
            key=DependencyKey.named(Service, "shared"),
            builder=lambda c: Service(),
            lifetime=Lifetime.SINGLETON,
        )
        shared = manager.get_or_create(DependencyMetadata(registration=singleton), Service)
        first = manager.get_or_create(scoped, Service)

        manager.clear_scoped_cache()

        assert manager.get_or_create(scoped, Service) is not first
        assert manager.get_or_create(DependencyMetadata(registration=singleton), Service) is shared

    def test_clear_cache(self):
        """Test that clear_cache drops every instance."""
        manager = LifetimeManager()
        metadata = _metadata(Lifetime.SINGLETON)
        manager.get_or_create(metadata, Service)
        manager.clear_cache()
        assert not manager.is_cached(metadata.registration.key)

    def test_factory_error_is_wrapped(self):
        """Test that unexpected factory errors become UnresolvableError and are not cached."""
        manager = LifetimeManager()
        metadata = _metadata(Lifetime.SINGLETON)

        def failing():
            raise RuntimeError("boom")

        with pytest.raises(UnresolvableError) as exc_info:
            manager.get_or_create(metadata, failing)

        assert "Failed to create instance: boom" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert not manager.is_cached(metadata.registration.key)

    def test_not_yet_available_is_propagated(self):
        """Test that not-yet-available errors pass through unwrapped."""
        manager = LifetimeManager()
        metadata = _metadata(Lifetime.TRANSIENT)

        def too_early():
            raise EnvironmentNotAvailableError("configuration")

        with pytest.raises(EnvironmentNotAvailableError):
            manager.get_or_create(metadata, too_early)
