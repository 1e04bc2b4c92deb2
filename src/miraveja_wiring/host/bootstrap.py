"""Pre-run setup of a host application."""

import argparse
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Type, Union

from miraveja_wiring.host.commands import Command
from miraveja_wiring.host.configuration import Configuration
from miraveja_wiring.host.environment import Environment
from miraveja_wiring.host.lifecycle import Bundle, ConfiguredBundle

logger = logging.getLogger(__name__)

ConfigurationLoader = Callable[[argparse.Namespace], Configuration]


class Application(ABC):
    """A host application.

    Attributes:
        configuration_class: Type instantiated when no loader supplies the configuration.
    """

    configuration_class: Type[Configuration] = Configuration

    @property
    def name(self) -> str:
        return type(self).__name__

    def initialize(self, bootstrap: "Bootstrap") -> None:
        """Add bundles and commands before anything runs."""

    @abstractmethod
    def run(self, configuration: Configuration, environment: Environment) -> None:
        """Register the application's own components with the environment."""


class Bootstrap:
    """Collects bundles and commands before the application runs.

    Attributes:
        application: The application being bootstrapped.
        configuration_loader: Builds the configuration from parsed arguments.
    """

    def __init__(self, application: Application, configuration_loader: Optional[ConfigurationLoader] = None) -> None:
        self.application = application
        self.configuration_loader = configuration_loader
        self._bundles: List[Bundle] = []
        self._configured_bundles: List[ConfiguredBundle] = []
        self._commands: List[Command] = []

    @property
    def bundles(self) -> List[Union[Bundle, ConfiguredBundle]]:
        return [*self._bundles, *self._configured_bundles]

    @property
    def commands(self) -> List[Command]:
        return list(self._commands)

    def add_bundle(self, bundle: Union[Bundle, ConfiguredBundle]) -> None:
        """Initialize a bundle and keep it for the run phase."""
        bundle.initialize(self)
        if isinstance(bundle, ConfiguredBundle):
            self._configured_bundles.append(bundle)
        else:
            self._bundles.append(bundle)

    def add_command(self, command: Command) -> None:
        self._commands.append(command)

    def load_configuration(self, namespace: argparse.Namespace) -> Configuration:
        if self.configuration_loader is not None:
            return self.configuration_loader(namespace)
        return self.application.configuration_class()

    def run(self, configuration: Configuration, environment: Environment) -> None:
        """Run every bundle, plain bundles first."""
        for bundle in self._bundles:
            bundle.run(environment)
        for configured_bundle in self._configured_bundles:
            configured_bundle.run(configuration, environment)
        logger.debug("Ran %d bundles", len(self._bundles) + len(self._configured_bundles))
