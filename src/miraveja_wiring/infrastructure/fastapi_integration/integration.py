from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from miraveja_wiring.domain import DependencyKey, IContainer, ScopeError

ContainerProvider = Callable[[], IContainer]


def create_fastapi_dependency(container_provider: ContainerProvider, key: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from the current stage.

    The provider is evaluated on every call, so the dependency always sees the
    most specific stage the composer has built so far.

    Args:
        container_provider: Returns the container to resolve from.
        key: The type or DependencyKey to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_host = create_fastapi_dependency(
        ...     composer.container_provider(),
        ...     DependencyKey.named(str, "db.host"),
        ... )
        >>>
        >>> @app.get("/db")
        >>> async def database(host: str = Depends(get_host)):
        ...     return {"host": host}
    """
    dependency_key = DependencyKey.of(key)

    def dependency() -> Any:
        """Resolve the dependency from the container."""
        return container_provider().resolve(dependency_key)

    return dependency


def create_scoped_dependency(key: Any) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that uses the request-scoped container.

    Requires the ScopedContainerMiddleware to be installed.

    Args:
        key: The type or DependencyKey to resolve from the scoped container.

    Returns:
        A callable that resolves from the request-scoped container.
    """
    dependency_key = DependencyKey.of(key)

    def scoped_dependency(request: Request) -> Any:
        """Resolve from the request's scoped container."""
        if not hasattr(request.state, "di_container"):
            raise ScopeError(
                "Request does not have a scoped DI container. Did you forget to add ScopedContainerMiddleware?"
            )
        scoped_container: IContainer = request.state.di_container
        return scoped_container.resolve(dependency_key)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Request-scoping filter: creates a scope container for each matching request.

    The scope sees every binding of the composed container and caches scoped
    dependencies for the duration of one request. It is accessible via
    `request.state.di_container`.

    Attributes:
        container_provider: Returns the container scopes are created from.
        path_prefix: Only requests at or below this path are scoped.

    Example:
        >>> app.add_middleware(
        ...     ScopedContainerMiddleware,
        ...     container_provider=composer.container_provider(),
        ...     path_prefix="/",
        ... )
    """

    def __init__(self, app: FastAPI, container_provider: ContainerProvider, path_prefix: str = "/"):
        """Initialize the middleware.

        Args:
            app: The FastAPI/Starlette application.
            container_provider: Returns the container to create scopes from.
            path_prefix: Path prefix of the requests to scope.
        """
        super().__init__(app)
        self.container_provider = container_provider
        self.path_prefix = path_prefix

    def matches(self, path: str) -> bool:
        """Whether ``path`` is the prefix itself or lies below it, segment by segment."""
        prefix = self.path_prefix.rstrip("/")
        return path == self.path_prefix or path == prefix or path.startswith(prefix + "/")

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a scoped container for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        if not self.matches(request.url.path):
            return await call_next(request)

        scoped_container = self.container_provider().create_scope()
        request.state.di_container = scoped_container

        try:
            response = await call_next(request)
            return response
        finally:
            # Cleanup scoped instances after request
            scoped_container.clear()
