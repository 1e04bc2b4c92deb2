"""Application layer - Commands whose entry point is run with injected parameters.

Each command must be registered with a bootstrap that also holds a
StagedComposer; the composer hands itself to the command during initialize.
"""

import argparse
from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from miraveja_wiring.application.method_resolver import MethodCallResolver
from miraveja_wiring.domain import ConfigurationError
from miraveja_wiring.host import Bootstrap, Command, Configuration, ConfiguredCommand, Environment, EnvironmentCommand

if TYPE_CHECKING:
    from miraveja_wiring.application.composer import StagedComposer

_method_resolver = MethodCallResolver()


class ComposerAware:
    """Mixin for commands that receive the composer before they run."""

    _composer: Optional["StagedComposer"] = None

    def set_composer(self, composer: "StagedComposer") -> None:
        self._composer = composer

    @property
    def composer(self) -> Optional["StagedComposer"]:
        return self._composer

    def _require_composer(self) -> "StagedComposer":
        if self._composer is None:
            raise ConfigurationError(
                f"{type(self).__name__} run without a StagedComposer. Was the application initialized correctly?"
            )
        return self._composer


class InjectedCommand(Command, ComposerAware):
    """Runs its ``@run`` method with injected parameters.

    The Bootstrap and argparse Namespace are available for injection; the
    configuration is absent, so no Module stage is built.
    """

    def run(self, bootstrap: Bootstrap, namespace: argparse.Namespace) -> None:
        composer = self._require_composer()
        composer.run_command(bootstrap, namespace=namespace)
        _method_resolver.run_entry_point(self, composer.current_container)


class InjectedConfiguredCommand(ConfiguredCommand, ComposerAware):
    """Runs its ``@run`` method with injected parameters, configuration included."""

    def run_configured(
        self,
        bootstrap: Bootstrap,
        namespace: argparse.Namespace,
        configuration: Configuration,
    ) -> None:
        composer = self._require_composer()
        composer.run_command(bootstrap, namespace=namespace, configuration=configuration)
        _method_resolver.run_entry_point(self, composer.current_container)


class InjectedEnvironmentCommand(EnvironmentCommand, ComposerAware):
    """Runs its ``@run`` method inside a fully built environment.

    The serving run has already composed every stage, so only the namespace
    is added before the entry point is invoked.
    """

    def run_in_environment(
        self,
        environment: Environment,
        namespace: argparse.Namespace,
        configuration: Configuration,
    ) -> None:
        composer = self._require_composer()
        composer.set_namespace(namespace)
        _method_resolver.run_entry_point(self, composer.current_container)


class ComposedConfiguredCommand(ConfiguredCommand, ComposerAware):
    """A configured command whose ``@inject`` methods are filled before ``execute``.

    Without a composer the command still runs, uninjected.
    """

    def run_configured(
        self,
        bootstrap: Bootstrap,
        namespace: argparse.Namespace,
        configuration: Configuration,
    ) -> None:
        if self._composer is not None:
            self._composer.run_command(bootstrap, namespace=namespace, configuration=configuration, command=self)
        self.execute(bootstrap, namespace, configuration)

    @abstractmethod
    def execute(
        self,
        bootstrap: Bootstrap,
        namespace: argparse.Namespace,
        configuration: Configuration,
    ) -> None:
        """Execute the command."""
