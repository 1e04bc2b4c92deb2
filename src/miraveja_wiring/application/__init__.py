"""
Application layer - Use cases and orchestration.

This layer contains the container stages, the resolvers and the composer
that stacks them. It depends on the Domain and Host layers.
"""

from .circular_detector import CircularDependencyDetector
from .commands import (
    ComposedConfiguredCommand,
    ComposerAware,
    InjectedCommand,
    InjectedConfiguredCommand,
    InjectedEnvironmentCommand,
)
from .composer import ComposerBuilder, StagedComposer
from .config_binder import ConfigurationPathBinder
from .container import DIContainer, create_container
from .discovery import DiscoveryRegistry
from .environment_module import EnvironmentContext, EnvironmentModule
from .lifetime_manager import LifetimeManager
from .method_resolver import MethodCallResolver
from .resolver import DependencyResolver

__all__ = [
    "DIContainer",
    "create_container",
    "DependencyResolver",
    "LifetimeManager",
    "CircularDependencyDetector",
    "MethodCallResolver",
    "ConfigurationPathBinder",
    "EnvironmentContext",
    "EnvironmentModule",
    "DiscoveryRegistry",
    "ComposerBuilder",
    "StagedComposer",
    "ComposerAware",
    "InjectedCommand",
    "InjectedConfiguredCommand",
    "InjectedEnvironmentCommand",
    "ComposedConfiguredCommand",
]
