"""Unit tests for domain exceptions."""

import pytest

from miraveja_wiring.domain import (
    CircularDependencyError,
    ConfigurationError,
    DependencyKey,
    DIException,
    EnvironmentNotAvailableError,
    LifetimeError,
    MissingValueError,
    NotYetAvailableError,
    ResolutionError,
    ScopeError,
    StageError,
    UnresolvableError,
)


class TestExceptionHierarchy:
    """Test cases for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exception_type",
        [
            ConfigurationError,
            CircularDependencyError,
            UnresolvableError,
            MissingValueError,
            NotYetAvailableError,
            EnvironmentNotAvailableError,
            ResolutionError,
            LifetimeError,
            ScopeError,
            StageError,
        ],
    )
    def test_inherits_from_di_exception(self, exception_type):
        """Test that every error derives from DIException."""
        assert issubclass(exception_type, DIException)

    def test_missing_value_is_unresolvable(self):
        """Test that MissingValueError is a kind of UnresolvableError."""
        assert issubclass(MissingValueError, UnresolvableError)

    def test_not_yet_available_is_not_unresolvable(self):
        """Test that reading too early is distinct from a missing binding."""
        assert not issubclass(NotYetAvailableError, UnresolvableError)
        assert issubclass(EnvironmentNotAvailableError, NotYetAvailableError)


class TestCircularDependencyError:
    """Test cases for CircularDependencyError."""

    def test_message_contains_chain(self):
        """Test that the message renders every key of the chain."""
        chain = [DependencyKey.of(int), DependencyKey.named(str, "name"), DependencyKey.of(int)]
        error = CircularDependencyError(chain)

        assert error.dependency_chain == chain
        assert "int -> str@name -> int" in str(error)


class TestUnresolvableError:
    """Test cases for UnresolvableError."""

    def test_message_with_type(self):
        """Test message for a bare type."""

        class Service:
            pass

        error = UnresolvableError(Service)
        assert error.cls is Service
        assert error.reason is None
        assert str(error) == "Cannot resolve dependency for type: Service"

    def test_message_with_key_and_reason(self):
        """Test message for a qualified key with a reason."""
        error = UnresolvableError(DependencyKey.named(str, "db.host"), "No binding found")
        assert "str@db.host" in str(error)
        assert str(error).endswith("Reason: No binding found")

    def test_missing_value_reason(self):
        """Test that MissingValueError explains the value is absent."""
        error = MissingValueError(DependencyKey.named(str, "cache.host"))
        assert error.reason == "bound value is absent"


class TestEnvironmentNotAvailableError:
    """Test cases for EnvironmentNotAvailableError."""

    def test_message_names_slot(self):
        """Test that the message carries the default text and the slot name."""
        error = EnvironmentNotAvailableError("configuration")
        assert error.slot == "configuration"
        assert str(error).startswith(EnvironmentNotAvailableError.DEFAULT_MESSAGE)
        assert "(slot: configuration)" in str(error)


class TestResolutionError:
    """Test cases for ResolutionError."""

    def test_lists_every_error(self):
        """Test that each failure gets a numbered line."""

        def handler(a, b):
            pass

        error = ResolutionError(handler, ["first failure", "second failure"])

        assert error.target is handler
        assert error.errors == ["first failure", "second failure"]
        message = str(error)
        assert "Unable to resolve parameters of handler" in message
        assert "1) first failure" in message
        assert "2) second failure" in message
