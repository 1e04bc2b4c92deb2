"""Unit tests for StagedComposer and ComposerBuilder."""

import argparse

import pytest

from miraveja_wiring.application.composer import ComposerBuilder, StagedComposer
from miraveja_wiring.domain import (
    ConfigurationError,
    ContainerStage,
    DependencyKey,
    IContainer,
    IModule,
    MissingValueError,
    StageError,
    StagePolicy,
)
from miraveja_wiring.host import Application, Bootstrap, Configuration, ContextListener, Environment
from miraveja_wiring.infrastructure.fastapi_integration import ScopedContainerMiddleware
from sample_app.application import SampleApplication
from sample_app.config import DatabaseConfig, SampleConfig
from sample_app.services import Clock, ClockModule, Database, DatabaseModule


class RecordingListener(ContextListener):
    def __init__(self, database: Database) -> None:
        self.database = database


class InitModule(IModule):
    def configure(self, container: IContainer) -> None:
        container.register_instances({DependencyKey.named(str, "build"): "1.2.3"})


def _initialized(composer: StagedComposer) -> Bootstrap:
    bootstrap = Bootstrap(SampleApplication())
    bootstrap.add_bundle(composer)
    return bootstrap


class TestComposerBuilder:
    """Test cases for ComposerBuilder."""

    def test_builder(self):
        """Test that builder() returns a fresh builder."""
        assert isinstance(StagedComposer.builder(), ComposerBuilder)

    def test_build_collects_options(self):
        """Test that every option reaches the composer."""
        module = DatabaseModule()
        init_module = InitModule()

        def generator(container):
            return RecordingListener(container.resolve(Database))

        composer = (
            StagedComposer.builder()
            .add_module(module)
            .add_init_module(init_module)
            .add_context_listener(generator)
            .set_config_class(SampleConfig)
            .set_config_packages("sample_app")
            .build(StagePolicy.DEVELOPMENT)
        )

        assert composer.modules == [module]
        assert composer.init_modules == [init_module]
        assert composer.context_listener_generators == [generator]
        assert composer.config_class is SampleConfig
        assert composer.config_packages == ("sample_app",)
        assert composer.policy == StagePolicy.DEVELOPMENT
        assert composer.auto_config is None

    def test_build_requires_module(self):
        """Test that a composer without modules is rejected."""
        with pytest.raises(ConfigurationError, match="At least one module"):
            StagedComposer.builder().build()

    def test_build_requires_policy(self):
        """Test that a composer without a policy is rejected."""
        with pytest.raises(ConfigurationError, match="policy"):
            StagedComposer.builder().add_module(ClockModule()).build(None)

    def test_none_modules_rejected(self):
        """Test that None modules are rejected."""
        with pytest.raises(ConfigurationError):
            StagedComposer.builder().add_module(None)
        with pytest.raises(ConfigurationError):
            StagedComposer.builder().add_init_module(None)

    def test_config_packages_required(self):
        """Test that set_config_packages needs at least one package."""
        with pytest.raises(ConfigurationError):
            StagedComposer.builder().set_config_packages()

    def test_auto_config_once(self):
        """Test that auto config cannot be enabled twice."""
        builder = StagedComposer.builder().enable_auto_config("sample_app.empty")
        with pytest.raises(ConfigurationError, match="only be enabled once"):
            builder.enable_auto_config("sample_app")


class TestInitialize:
    """Test cases for the Init stage."""

    def test_not_initialized(self):
        """Test that the composer needs initialize before anything else."""
        composer = StagedComposer([ClockModule()])
        with pytest.raises(StageError):
            composer.current_container
        with pytest.raises(StageError):
            composer.run(SampleConfig(), Environment("sample"))
        with pytest.raises(StageError):
            composer.run_command(Bootstrap(SampleApplication()))

    def test_init_stage(self):
        """Test that initialize builds the Init stage with the application bound."""
        composer = StagedComposer([ClockModule()], init_modules=[InitModule()])
        bootstrap = _initialized(composer)

        container = composer.current_container
        assert container.stage == ContainerStage.INIT
        assert container.sealed
        assert container.resolve(Application) is bootstrap.application
        assert container.resolve(SampleApplication) is bootstrap.application
        assert container.resolve(DependencyKey.named(str, "build")) == "1.2.3"

    def test_set_namespace_without_run(self):
        """Test that the namespace slot needs a run in progress."""
        composer = StagedComposer([ClockModule()])
        _initialized(composer)
        with pytest.raises(StageError):
            composer.set_namespace(argparse.Namespace())


class TestServingRun:
    """Test cases for run()."""

    def test_stages_composed(self):
        """Test that run stacks the Environment and Module stages."""
        module = DatabaseModule()
        composer = StagedComposer([module, ClockModule()], init_modules=[InitModule()])
        _initialized(composer)
        configuration = SampleConfig(database=DatabaseConfig(host="db.internal"))
        environment = Environment("sample")

        composer.run(configuration, environment)

        container = composer.current_container
        assert container.stage == ContainerStage.MODULE
        assert container.parent.stage == ContainerStage.ENVIRONMENT
        assert container.parent.parent.stage == ContainerStage.INIT
        assert container.resolve(Database).url == "db://db.internal:5432"
        assert container.resolve(DependencyKey.named(str, "database.url")) == "db://db.internal:5432"
        assert container.resolve(DependencyKey.named(str, "build")) == "1.2.3"
        assert container.resolve(Environment) is environment
        assert isinstance(container.resolve(Clock), Clock)

    def test_modules_injected_from_environment_stage(self):
        """Test that @inject methods of modules receive environment bindings."""
        module = DatabaseModule()
        composer = StagedComposer([module])
        _initialized(composer)
        configuration = SampleConfig()

        composer.run(configuration, Environment("sample"))

        assert module.injected == [configuration]

    def test_host_side_effects(self):
        """Test that the dispatch container and the request filter are installed."""
        composer = StagedComposer([DatabaseModule()])
        _initialized(composer)
        environment = Environment("sample")

        composer.run(SampleConfig(), environment)

        assert environment.dispatch.container is composer.current_container
        assert environment.app.state.di_container is composer.current_container
        [registration] = environment.http.filters
        assert registration.name == "Container Filter"
        assert registration.filter_class is ScopedContainerMiddleware
        assert registration.url_pattern == "/*"
        assert registration.options["path_prefix"] == "/"
        assert registration.options["container_provider"]() is composer.current_container

    def test_context_listeners(self):
        """Test that each generator contributes a listener built from the Module stage."""
        composer = (
            StagedComposer.builder()
            .add_module(DatabaseModule())
            .add_context_listener(lambda c: RecordingListener(c.resolve(Database)))
            .build()
        )
        _initialized(composer)
        environment = Environment("sample")

        composer.run(SampleConfig(), environment)

        [listener] = environment.http.listeners
        assert listener.database is composer.current_container.resolve(Database)

    def test_container_provider_is_lazy(self):
        """Test that the provider follows the current container."""
        composer = StagedComposer([DatabaseModule()])
        _initialized(composer)
        provider = composer.container_provider()
        init_container = provider()

        composer.run(SampleConfig(), Environment("sample"))

        assert provider() is not init_container
        assert provider().stage == ContainerStage.MODULE

    def test_set_namespace(self):
        """Test that the namespace can be supplied after the serving run."""
        composer = StagedComposer([DatabaseModule()])
        _initialized(composer)
        composer.run(SampleConfig(), Environment("sample"))
        namespace = argparse.Namespace(command="check")

        composer.set_namespace(namespace)

        assert composer.current_container.resolve(argparse.Namespace) is namespace


class TestCommandRun:
    """Test cases for run_command()."""

    def test_without_configuration(self):
        """Test that only the Environment stage is built and the environment is absent."""
        composer = StagedComposer([DatabaseModule()])
        bootstrap = _initialized(composer)
        namespace = argparse.Namespace()

        container = composer.run_command(bootstrap, namespace=namespace)

        assert container is composer.current_container
        assert container.stage == ContainerStage.ENVIRONMENT
        assert container.resolve(Bootstrap) is bootstrap
        assert container.resolve(argparse.Namespace) is namespace
        assert container.resolve_optional(Environment) is None
        with pytest.raises(MissingValueError):
            container.resolve(Environment)
        assert container.resolve_optional(Configuration) is None

    def test_with_configuration(self):
        """Test that a configuration value adds the Module stage."""
        composer = StagedComposer([DatabaseModule()])
        bootstrap = _initialized(composer)

        container = composer.run_command(bootstrap, configuration=SampleConfig())

        assert container.stage == ContainerStage.MODULE
        assert container.resolve(Database).url == "db://localhost:5432"

    def test_each_run_is_fresh(self):
        """Test that a second run rebinds against the new configuration."""
        composer = StagedComposer([DatabaseModule()], policy=StagePolicy.DEVELOPMENT)
        bootstrap = _initialized(composer)

        first = composer.run_command(bootstrap, configuration=SampleConfig(database=DatabaseConfig(host="one")))
        second = composer.run_command(bootstrap, configuration=SampleConfig(database=DatabaseConfig(host="two")))

        assert first is not second
        assert first.parent is not second.parent
        assert first.resolve(DependencyKey.named(str, "database.host")) == "one"
        assert second.resolve(DependencyKey.named(str, "database.host")) == "two"

    def test_command_members_injected(self):
        """Test that the command's @inject methods are filled from the result."""
        from sample_app.components.commands import MigrateCommand

        composer = StagedComposer([DatabaseModule()])
        bootstrap = _initialized(composer)
        command = MigrateCommand()

        composer.run_command(bootstrap, configuration=SampleConfig(), command=command)

        assert command.database is composer.current_container.resolve(Database)

    def test_explicit_config_class(self):
        """Test that a configured class is used instead of the value's type."""
        composer = StagedComposer([ClockModule()], config_class=Configuration)
        bootstrap = _initialized(composer)

        container = composer.run_command(bootstrap, configuration=SampleConfig())

        assert not container.has_binding(DependencyKey.named(str, "database.host"))
        assert container.has_binding(DependencyKey.named(str, "server.application_context_path"))
