"""The runtime environment an application registers its components with."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, TextIO, Type

from fastapi import FastAPI

from miraveja_wiring.domain import IContainer, StageError
from miraveja_wiring.host.lifecycle import ContextListener, HealthCheck, HealthResult, Managed, Task

logger = logging.getLogger(__name__)


class HealthCheckRegistry:
    """Named health checks of the application."""

    def __init__(self) -> None:
        self._checks: Dict[str, HealthCheck] = {}

    def register(self, name: str, check: HealthCheck) -> None:
        if name in self._checks:
            raise ValueError(f"A health check named {name} already exists")
        self._checks[name] = check

    @property
    def names(self) -> List[str]:
        return list(self._checks)

    def get(self, name: str) -> HealthCheck:
        return self._checks[name]

    def run_health_checks(self) -> Dict[str, HealthResult]:
        return {name: check.execute() for name, check in sorted(self._checks.items())}


class DispatchEnvironment:
    """Request-dispatch registry: collects providers and resources and owns
    the container request handlers resolve from."""

    def __init__(self, app: FastAPI) -> None:
        self.app = app
        self._components: List[Any] = []
        self._container: Optional[IContainer] = None

    def register(self, component: Any) -> None:
        self._components.append(component)

    @property
    def components(self) -> List[Any]:
        return list(self._components)

    @property
    def container(self) -> Optional[IContainer]:
        return self._container

    def replace(self, container: IContainer) -> None:
        """Make ``container`` the one request handlers resolve from."""
        self._container = container
        self.app.state.di_container = container

    def resolve(self, component: Any) -> Any:
        """Build a registered component through the dispatch container."""
        if self._container is None:
            raise StageError("No dispatch container has been installed yet")
        return self._container.resolve(component)


class AdminEnvironment:
    """Administrative tasks, addressable by name."""

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}

    def add_task(self, task: Task) -> None:
        if task.name in self._tasks:
            raise ValueError(f"A task named {task.name} already exists")
        self._tasks[task.name] = task

    @property
    def tasks(self) -> Dict[str, Task]:
        return dict(self._tasks)

    def run_task(self, name: str, parameters: Dict[str, List[str]], output: TextIO) -> None:
        self._tasks[name].execute(parameters, output)


class LifecycleEnvironment:
    """Managed objects started before serving and stopped in reverse order afterwards."""

    def __init__(self) -> None:
        self._managed: List[Managed] = []
        self._started: List[Managed] = []

    def manage(self, managed: Managed) -> None:
        self._managed.append(managed)

    @property
    def managed_objects(self) -> List[Managed]:
        return list(self._managed)

    def start(self) -> None:
        for managed in self._managed:
            managed.start()
            self._started.append(managed)

    def stop(self) -> None:
        while self._started:
            self._started.pop().stop()


@dataclass
class FilterRegistration:
    name: str
    filter_class: Type[Any]
    url_pattern: str
    options: Dict[str, Any] = field(default_factory=dict)


class HttpEnvironment:
    """Request filters (ASGI middleware) and context listeners."""

    def __init__(self, app: FastAPI, context_path: str = "/") -> None:
        self.app = app
        self.context_path = context_path
        self._filters: List[FilterRegistration] = []
        self._listeners: List[ContextListener] = []

    def add_filter(self, name: str, filter_class: Type[Any], url_pattern: str, **options: Any) -> FilterRegistration:
        self.app.add_middleware(filter_class, **options)
        registration = FilterRegistration(name=name, filter_class=filter_class, url_pattern=url_pattern, options=options)
        self._filters.append(registration)
        logger.debug("Added filter %s for %s", name, url_pattern)
        return registration

    def add_listeners(self, *listeners: ContextListener) -> None:
        self._listeners.extend(listeners)

    @property
    def filters(self) -> List[FilterRegistration]:
        return list(self._filters)

    @property
    def listeners(self) -> List[ContextListener]:
        return list(self._listeners)


class Environment:
    """Everything a running application registers with.

    Wraps a FastAPI application whose lifespan starts managed objects and
    notifies context listeners.

    Attributes:
        name: Application name.
        app: The ASGI application served.
        health_checks: Health check registry.
        dispatch: Request-dispatch registry.
        admin: Administrative tasks.
        lifecycle: Managed objects.
        http: Request filters and context listeners.
    """

    def __init__(self, name: str, context_path: str = "/") -> None:
        self.name = name
        self.app = FastAPI(title=name, lifespan=self._lifespan)
        self.health_checks = HealthCheckRegistry()
        self.dispatch = DispatchEnvironment(self.app)
        self.admin = AdminEnvironment()
        self.lifecycle = LifecycleEnvironment()
        self.http = HttpEnvironment(self.app, context_path)

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        self.lifecycle.start()
        listeners = self.http.listeners
        for listener in listeners:
            listener.context_initialized()
        logger.info("Started %s", self.name)
        try:
            yield
        finally:
            for listener in reversed(listeners):
                listener.context_destroyed()
            self.lifecycle.stop()
            logger.info("Stopped %s", self.name)
