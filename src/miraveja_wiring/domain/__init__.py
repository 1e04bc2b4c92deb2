"""
Domain layer - Core wiring concepts and models.

This layer contains the keys, markers, enums and errors shared by every other layer.
It has no dependencies on other layers.
"""

from .enums import Capability, ContainerStage, Lifetime, StagePolicy
from .exceptions import (
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
from .interfaces import IContainer, ILifetimeManager, IModule, IResolver
from .markers import Named, inject, path, provider, run
from .models import (
    ABSENT,
    BindingPath,
    ComponentDescriptor,
    DependencyKey,
    DependencyMetadata,
    Registration,
    Slot,
)

# Rebuild Pydantic models to resolve forward references
Registration.model_rebuild()

__all__ = [
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
    # Interfaces
    "IContainer",
    "IModule",
    "IResolver",
    "ILifetimeManager",
    # Markers
    "Named",
    "inject",
    "path",
    "provider",
    "run",
    # Models
    "ABSENT",
    "BindingPath",
    "ComponentDescriptor",
    "DependencyKey",
    "DependencyMetadata",
    "Registration",
    "Slot",
]
