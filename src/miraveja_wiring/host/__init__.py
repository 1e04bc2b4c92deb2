"""
Host layer - The application lifecycle the wiring core plugs into.

Declares the registration points (health checks, request dispatch, tasks,
managed objects, bundles, commands) and the shapes components implement.
It depends only on the Domain layer.
"""

from .bootstrap import Application, Bootstrap
from .commands import Command, ConfiguredCommand, EnvironmentCommand
from .configuration import Configuration, LoggingFactory, ServerFactory
from .environment import (
    AdminEnvironment,
    DispatchEnvironment,
    Environment,
    FilterRegistration,
    HealthCheckRegistry,
    HttpEnvironment,
    LifecycleEnvironment,
)
from .lifecycle import (
    Bundle,
    ConfiguredBundle,
    ContextListener,
    HealthCheck,
    HealthResult,
    InjectableHealthCheck,
    InjectableProvider,
    Managed,
    Task,
)

__all__ = [
    "Application",
    "Bootstrap",
    "Command",
    "ConfiguredCommand",
    "EnvironmentCommand",
    "Configuration",
    "LoggingFactory",
    "ServerFactory",
    "AdminEnvironment",
    "DispatchEnvironment",
    "Environment",
    "FilterRegistration",
    "HealthCheckRegistry",
    "HttpEnvironment",
    "LifecycleEnvironment",
    "Bundle",
    "ConfiguredBundle",
    "ContextListener",
    "HealthCheck",
    "HealthResult",
    "InjectableHealthCheck",
    "InjectableProvider",
    "Managed",
    "Task",
]
