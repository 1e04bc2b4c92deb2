from enum import Enum
from typing import Tuple


class Lifetime(str, Enum):
    """Defines the lifetime of a dependency instance.

    Attributes:
        SINGLETON: Single instance shared by every consumer of the owning stage.
        TRANSIENT: New instance (or fresh read) on each resolution.
        SCOPED: Single instance per scope (e.g., per HTTP request).
    """

    TRANSIENT = "transient"
    SCOPED = "scoped"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class StagePolicy(str, Enum):
    """Controls how eagerly a sealed stage instantiates its singletons.

    Attributes:
        PRODUCTION: Singletons are created as soon as the stage is sealed.
        DEVELOPMENT: Singletons are created on first resolution.
        TOOL: Like DEVELOPMENT; used by tooling that only inspects bindings.
    """

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TOOL = "tool"

    def __str__(self) -> str:
        return self.value


class ContainerStage(str, Enum):
    """The three ordered layers of the container hierarchy."""

    INIT = "init"
    ENVIRONMENT = "environment"
    MODULE = "module"

    def __str__(self) -> str:
        return self.value


class Capability(str, Enum):
    """Classification bucket deciding when a discovered component is registered."""

    HEALTH_CHECK = "health_check"
    PROVIDER = "provider"
    INJECTABLE_PROVIDER = "injectable_provider"
    RESOURCE = "resource"
    TASK = "task"
    MANAGED = "managed"
    BUNDLE = "bundle"
    COMMAND = "command"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def run_phase(cls) -> Tuple["Capability", ...]:
        """Registration order of the run phase."""
        return (
            cls.HEALTH_CHECK,
            cls.PROVIDER,
            cls.INJECTABLE_PROVIDER,
            cls.RESOURCE,
            cls.TASK,
            cls.MANAGED,
        )

    @classmethod
    def initialize_phase(cls) -> Tuple["Capability", ...]:
        """Registration order of the initialize phase, which precedes the run phase."""
        return (cls.BUNDLE, cls.COMMAND)
