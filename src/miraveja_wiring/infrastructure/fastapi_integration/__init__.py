"""
FastAPI integration module.

Provides the request-scoping filter and dependency helpers used when the
composer serves a FastAPI application.
"""

from .integration import (
    ScopedContainerMiddleware,
    create_fastapi_dependency,
    create_scoped_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_scoped_dependency",
    "ScopedContainerMiddleware",
]
