"""Application layer - Bindings of the Environment stage."""

import argparse
from typing import Any, Callable, Iterable

from fastapi import FastAPI

from miraveja_wiring.application.config_binder import ConfigurationPathBinder
from miraveja_wiring.domain import DependencyKey, IContainer, IModule, Slot
from miraveja_wiring.host import Bootstrap, Configuration, Environment


class EnvironmentContext:
    """Per-run slots read by the Environment stage's deferred bindings.

    A fresh context is created for every run; each slot is written at most once.

    Attributes:
        configuration: The application configuration.
        environment: The serving environment; absent during command runs.
        namespace: Parsed command-line arguments.
        bootstrap: The bootstrap the run belongs to.
    """

    def __init__(self) -> None:
        self.configuration = Slot("configuration")
        self.environment = Slot("environment")
        self.namespace = Slot("namespace")
        self.bootstrap = Slot("bootstrap")


def _slot_provider(slot: Slot) -> Callable[[IContainer], Any]:
    def provide(container: IContainer) -> Any:
        return slot.get()

    return provide


class EnvironmentModule(IModule):
    """Binds the configuration, its paths and the run's environment data.

    Every binding is deferred: it reads its slot on each resolution, and raises
    EnvironmentNotAvailableError while the slot is still unset.

    Attributes:
        config_class: Root configuration type.
        context: Slots for the current run.
        binder: Path binder for ``config_class``.
    """

    def __init__(self, config_class: type, context: EnvironmentContext, config_packages: Iterable[str] = ()) -> None:
        self.config_class = config_class
        self.context = context
        self.binder = ConfigurationPathBinder(config_class, config_packages)

    def configure(self, container: IContainer) -> None:
        provide_configuration = _slot_provider(self.context.configuration)
        container.register_transients({self.config_class: provide_configuration})
        if self.config_class is not Configuration:
            container.register_transients({Configuration: provide_configuration})

        self.binder.install(container, self.context.configuration.get)

        container.register_transients(
            {
                Environment: _slot_provider(self.context.environment),
                argparse.Namespace: _slot_provider(self.context.namespace),
                Bootstrap: _slot_provider(self.context.bootstrap),
            }
        )

        # Named to stay clear of any unqualified FastAPI binding a module adds later
        if self.context.environment.has_value:
            environment: Environment = self.context.environment.get()
            container.register_instances({DependencyKey.named(FastAPI, "application"): environment.app})
