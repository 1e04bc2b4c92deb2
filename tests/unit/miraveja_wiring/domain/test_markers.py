"""Unit tests for method and class markers."""

from miraveja_wiring.domain import Named, inject, path, provider, run
from miraveja_wiring.domain.markers import (
    PATH,
    PROVIDER,
    class_markers,
    is_entry_point,
    is_inject_method,
    resource_path,
)


class TestMethodMarkers:
    """Test cases for @run and @inject."""

    def test_run_marks_function(self):
        """Test that @run marks without wrapping."""

        def execute(self):
            return "ran"

        marked = run(execute)
        assert marked is execute
        assert is_entry_point(marked)
        assert not is_inject_method(marked)

    def test_inject_marks_function(self):
        """Test that @inject marks without wrapping."""

        @inject
        def set_service(self, service):
            pass

        assert is_inject_method(set_service)
        assert not is_entry_point(set_service)

    def test_unmarked_and_non_callables(self):
        """Test that plain members are not markers."""

        def plain(self):
            pass

        assert not is_entry_point(plain)
        assert not is_entry_point("run")
        assert not is_inject_method(None)


class TestClassMarkers:
    """Test cases for @provider and @path."""

    def test_provider_marker(self):
        """Test that @provider records the marker on the class."""

        @provider
        class JsonProvider:
            pass

        assert class_markers(JsonProvider) == frozenset({PROVIDER})

    def test_path_marker(self):
        """Test that @path records the marker and the prefix."""

        @path("/users")
        class UserResource:
            pass

        assert PATH in class_markers(UserResource)
        assert resource_path(UserResource) == "/users"

    def test_markers_combine(self):
        """Test that a class can carry both markers."""

        @provider
        @path("/items")
        class ItemResource:
            pass

        assert class_markers(ItemResource) == frozenset({PROVIDER, PATH})

    def test_markers_not_inherited(self):
        """Test that subclasses do not carry their parent's markers."""

        @provider
        @path("/base")
        class Base:
            pass

        class Derived(Base):
            pass

        assert class_markers(Derived) == frozenset()
        assert resource_path(Derived) is None


class TestNamed:
    """Test cases for the Named qualifier."""

    def test_named_equality(self):
        """Test that qualifiers compare by name."""
        assert Named("db.host") == Named("db.host")
        assert Named("db.host") != Named("db.port")
