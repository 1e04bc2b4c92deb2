from typing import Any, List, Optional


def _describe(target: Any) -> str:
    return getattr(target, "__name__", None) or str(target)


class DIException(Exception):
    """Base exception for wiring-related errors."""


class ConfigurationError(DIException):
    """Raised for fatal setup mistakes detected at startup.

    This occurs when:
    - Discovery is enabled without any base package, or enabled twice.
    - A configuration field path cannot be found on its declaring class.
    - An object has no entry-point method.
    - No stage policy or no module was supplied to the composer.
    """


class CircularDependencyError(DIException):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: List of keys involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Any]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join([str(key) for key in dependency_chain])}"
        super().__init__(message)


class UnresolvableError(DIException):
    """Raised when a dependency cannot be resolved.

    This occurs when:
    - No binding exists for the requested key in the stage or its parents.
    - Constructor parameters lack type hints.
    - A builder failed while creating the instance.

    Attributes:
        cls: The type (or key) that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, cls: Any, reason: Optional[str] = None) -> None:
        self.cls = cls
        self.reason = reason
        message = f"Cannot resolve dependency for type: {_describe(cls)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class MissingValueError(UnresolvableError):
    """Raised when a binding exists but its deferred value is absent.

    A configuration path whose intermediate value is None resolves to an
    absent value; consumers that declared the dependency optional receive None.
    """

    def __init__(self, cls: Any) -> None:
        super().__init__(cls, "bound value is absent")


class NotYetAvailableError(DIException):
    """Raised when a deferred binding is read before its slot has been set.

    Distinct from UnresolvableError: the binding exists, but it was read
    during the wrong phase.
    """


class EnvironmentNotAvailableError(NotYetAvailableError):
    """Raised when configuration, environment, namespace or bootstrap data is read too early."""

    DEFAULT_MESSAGE = (
        "The application environment has not yet been set. This is likely caused by "
        "trying to access the environment during the bootstrap phase."
    )

    def __init__(self, slot: str) -> None:
        self.slot = slot
        super().__init__(f"{self.DEFAULT_MESSAGE} (slot: {slot})")


class ResolutionError(DIException):
    """Raised when one or more method parameters cannot be resolved.

    All failures are collected before the error is raised.

    Attributes:
        target: The method whose parameters failed.
        errors: One message per failing parameter.
    """

    def __init__(self, target: Any, errors: List[str]) -> None:
        self.target = target
        self.errors = errors
        details = "\n".join(f"  {index}) {error}" for index, error in enumerate(errors, start=1))
        super().__init__(f"Unable to resolve parameters of {_describe(target)}:\n{details}")


class LifetimeError(DIException):
    """Raised for invalid lifetime configurations.

    This occurs when:
    - Registering the same key with conflicting lifetimes.
    """


class ScopeError(DIException):
    """Raised for invalid scope operations.

    This occurs when:
    - Attempting to resolve a scoped dependency outside a scope container.
    """


class StageError(DIException):
    """Raised for invalid stage operations.

    This occurs when:
    - Registering a binding on a stage that has already been sealed.
    - Running the composer before its Init stage exists.
    - Writing a per-run slot twice.
    """
