"""Lifecycle shapes a host application registers components under."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, TextIO

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from miraveja_wiring.host.bootstrap import Bootstrap
    from miraveja_wiring.host.configuration import Configuration
    from miraveja_wiring.host.environment import Environment


class Managed(ABC):
    """An object started with the application and stopped with it."""

    @abstractmethod
    def start(self) -> None:
        """Called before the application starts serving."""

    @abstractmethod
    def stop(self) -> None:
        """Called after the application stops serving."""


class Task(ABC):
    """An administrative task runnable by name."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def execute(self, parameters: Dict[str, List[str]], output: TextIO) -> None:
        """Run the task, writing any report to ``output``."""


class HealthResult(BaseModel):
    """Outcome of a single health check."""

    healthy: bool = Field(..., description="Whether the check passed.")
    message: Optional[str] = Field(default=None, description="Optional detail.")

    @classmethod
    def ok(cls, message: Optional[str] = None) -> "HealthResult":
        return cls(healthy=True, message=message)

    @classmethod
    def failed(cls, message: str) -> "HealthResult":
        return cls(healthy=False, message=message)


class HealthCheck(ABC):
    @abstractmethod
    def check(self) -> HealthResult:
        """Perform the check."""

    def execute(self) -> HealthResult:
        """Run the check, reporting raised exceptions as failures."""
        try:
            return self.check()
        except Exception as e:
            return HealthResult.failed(f"{type(e).__name__}: {e}")


class InjectableHealthCheck(HealthCheck):
    """A health check discovered and built by the container."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Name the check is registered under."""


class InjectableProvider(ABC):
    """Supplies a per-request value for parameters of ``provided_type``."""

    provided_type: Any = None

    @abstractmethod
    def get_value(self, request: Any) -> Any:
        """Produce the value for one request."""


class ContextListener(ABC):
    """Notified when the application context starts and stops."""

    def context_initialized(self) -> None:
        pass

    def context_destroyed(self) -> None:
        pass


class Bundle(ABC):
    """A reusable group of functionality initialized before the application runs."""

    @abstractmethod
    def initialize(self, bootstrap: "Bootstrap") -> None:
        """Called when the bundle is added to the bootstrap."""

    @abstractmethod
    def run(self, environment: "Environment") -> None:
        """Called once the environment exists."""


class ConfiguredBundle(ABC):
    """A bundle that also receives the application configuration."""

    @abstractmethod
    def initialize(self, bootstrap: "Bootstrap") -> None:
        """Called when the bundle is added to the bootstrap."""

    @abstractmethod
    def run(self, configuration: "Configuration", environment: "Environment") -> None:
        """Called once the configuration and environment exist."""
