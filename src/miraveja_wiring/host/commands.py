"""Command shapes the host can invoke from its command line."""

import argparse
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from miraveja_wiring.host.environment import Environment

if TYPE_CHECKING:
    from miraveja_wiring.host.bootstrap import Application, Bootstrap
    from miraveja_wiring.host.configuration import Configuration


class Command(ABC):
    """A named action run with the bootstrap and parsed arguments."""

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description

    def configure(self, parser: argparse.ArgumentParser) -> None:
        """Add command-specific arguments."""

    @abstractmethod
    def run(self, bootstrap: "Bootstrap", namespace: argparse.Namespace) -> None:
        """Execute the command."""


class ConfiguredCommand(Command):
    """A command that needs the application configuration."""

    def configure(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument("file", nargs="?", help="application configuration file")

    def run(self, bootstrap: "Bootstrap", namespace: argparse.Namespace) -> None:
        configuration = bootstrap.load_configuration(namespace)
        self.run_configured(bootstrap, namespace, configuration)

    @abstractmethod
    def run_configured(
        self,
        bootstrap: "Bootstrap",
        namespace: argparse.Namespace,
        configuration: "Configuration",
    ) -> None:
        """Execute the command with the loaded configuration."""


class EnvironmentCommand(ConfiguredCommand):
    """A command that runs inside a fully built environment.

    Bundles and the application are run first, exactly as when serving.
    """

    def __init__(self, application: "Application", name: str, description: str) -> None:
        super().__init__(name, description)
        self.application = application

    def run_configured(
        self,
        bootstrap: "Bootstrap",
        namespace: argparse.Namespace,
        configuration: "Configuration",
    ) -> None:
        configuration.logging.configure(self.application.name)
        environment = Environment(self.application.name, configuration.server.application_context_path)
        bootstrap.run(configuration, environment)
        self.application.run(configuration, environment)
        self.run_in_environment(environment, namespace, configuration)

    @abstractmethod
    def run_in_environment(
        self,
        environment: Environment,
        namespace: argparse.Namespace,
        configuration: "Configuration",
    ) -> None:
        """Execute the command inside the environment."""
