"""
miraveja-wiring: Staged dependency wiring for FastAPI applications.

Public API exports for the miraveja-wiring package.
"""

# Application exports
from miraveja_wiring.application.commands import (
    ComposedConfiguredCommand,
    InjectedCommand,
    InjectedConfiguredCommand,
    InjectedEnvironmentCommand,
)
from miraveja_wiring.application.composer import StagedComposer
from miraveja_wiring.application.config_binder import ConfigurationPathBinder
from miraveja_wiring.application.container import DIContainer, create_container
from miraveja_wiring.application.discovery import DiscoveryRegistry
from miraveja_wiring.application.method_resolver import MethodCallResolver

# Domain exports
from miraveja_wiring.domain.enums import Capability, ContainerStage, Lifetime, StagePolicy
from miraveja_wiring.domain.exceptions import (
    CircularDependencyError,
    ConfigurationError,
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
from miraveja_wiring.domain.interfaces import IContainer, IModule
from miraveja_wiring.domain.markers import Named, inject, path, provider, run
from miraveja_wiring.domain.models import ABSENT, DependencyKey

__version__ = "0.1.0"

__all__ = [
    # Composer
    "StagedComposer",
    "DiscoveryRegistry",
    "ConfigurationPathBinder",
    "MethodCallResolver",
    # Container
    "DIContainer",
    "create_container",
    "IContainer",
    "IModule",
    "DependencyKey",
    "ABSENT",
    # Commands
    "InjectedCommand",
    "InjectedConfiguredCommand",
    "InjectedEnvironmentCommand",
    "ComposedConfiguredCommand",
    # Markers
    "Named",
    "inject",
    "path",
    "provider",
    "run",
    # Enums
    "Capability",
    "ContainerStage",
    "Lifetime",
    "StagePolicy",
    # Exceptions
    "DIException",
    "ConfigurationError",
    "CircularDependencyError",
    "UnresolvableError",
    "MissingValueError",
    "NotYetAvailableError",
    "EnvironmentNotAvailableError",
    "ResolutionError",
    "LifetimeError",
    "ScopeError",
    "StageError",
]
