"""Application layer - Composing the Init, Environment and Module stages."""

import argparse
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from miraveja_wiring.application.commands import ComposerAware
from miraveja_wiring.application.container import DIContainer, create_container
from miraveja_wiring.application.discovery import DiscoveryRegistry
from miraveja_wiring.application.environment_module import EnvironmentContext, EnvironmentModule
from miraveja_wiring.application.method_resolver import MethodCallResolver
from miraveja_wiring.domain import ConfigurationError, ContainerStage, IContainer, IModule, StageError, StagePolicy
from miraveja_wiring.host import Application, Bootstrap, Configuration, ConfiguredBundle, ContextListener, Environment
from miraveja_wiring.infrastructure.fastapi_integration import ScopedContainerMiddleware

logger = logging.getLogger(__name__)

ContextListenerGenerator = Callable[[IContainer], ContextListener]


class _ApplicationModule(IModule):
    """Binds the running application in the Init stage."""

    def __init__(self, bootstrap: Bootstrap) -> None:
        self.bootstrap = bootstrap

    def configure(self, container: IContainer) -> None:
        application = self.bootstrap.application
        instances = {Application: application}
        if type(application) is not Application:
            instances[type(application)] = application
        container.register_instances(instances)


class ComposerBuilder:
    """Collects the options of a StagedComposer.

    Example:
        >>> composer = (
        ...     StagedComposer.builder()
        ...     .add_module(DatabaseModule())
        ...     .set_config_class(AppConfig)
        ...     .enable_auto_config("myapp.components")
        ...     .build()
        ... )
        >>> bootstrap.add_bundle(composer)
    """

    def __init__(self) -> None:
        self._modules: List[IModule] = []
        self._init_modules: List[IModule] = []
        self._context_listener_generators: List[ContextListenerGenerator] = []
        self._config_class: Optional[type] = None
        self._config_packages: Tuple[str, ...] = ()
        self._auto_config: Optional[DiscoveryRegistry] = None

    def add_module(self, module: IModule) -> "ComposerBuilder":
        """Add a module to the Module stage."""
        if module is None:
            raise ConfigurationError("Module cannot be None")
        self._modules.append(module)
        return self

    def add_init_module(self, module: IModule) -> "ComposerBuilder":
        """Add a module to the Init stage."""
        if module is None:
            raise ConfigurationError("Init module cannot be None")
        self._init_modules.append(module)
        return self

    def add_context_listener(self, generator: ContextListenerGenerator) -> "ComposerBuilder":
        self._context_listener_generators.append(generator)
        return self

    def set_config_class(self, config_class: type) -> "ComposerBuilder":
        self._config_class = config_class
        return self

    def set_config_packages(self, *packages: str) -> "ComposerBuilder":
        """Restrict configuration recursion to the given packages."""
        if not packages:
            raise ConfigurationError("At least one configuration package is required")
        self._config_packages = tuple(packages)
        return self

    def enable_auto_config(self, *base_packages: str) -> "ComposerBuilder":
        """Discover components under the given packages.

        Raises:
            ConfigurationError: If auto config was already enabled.
        """
        if self._auto_config is not None:
            raise ConfigurationError("Auto config can only be enabled once")
        self._auto_config = DiscoveryRegistry(*base_packages)
        return self

    def build(self, policy: Optional[StagePolicy] = StagePolicy.PRODUCTION) -> "StagedComposer":
        return StagedComposer(
            modules=self._modules,
            policy=policy,
            init_modules=self._init_modules,
            context_listener_generators=self._context_listener_generators,
            config_class=self._config_class,
            config_packages=self._config_packages,
            auto_config=self._auto_config,
        )


class StagedComposer(ConfiguredBundle):
    """Bundle owning the Init, Environment and Module container stages.

    The Init stage exists after ``initialize``. Every run then stacks a fresh
    Environment stage, bound to the run's configuration and environment, and
    a Module stage holding the application's modules. Code outside the
    composer reads the most specific stage through ``container_provider``.

    Attributes:
        modules: Modules installed into the Module stage.
        policy: Stage policy of every container.
        init_modules: Modules installed into the Init stage.
        auto_config: Discovery registry, when auto config is enabled.
    """

    def __init__(
        self,
        modules: Sequence[IModule],
        policy: Optional[StagePolicy] = StagePolicy.PRODUCTION,
        init_modules: Sequence[IModule] = (),
        context_listener_generators: Sequence[ContextListenerGenerator] = (),
        config_class: Optional[type] = None,
        config_packages: Sequence[str] = (),
        auto_config: Optional[DiscoveryRegistry] = None,
    ) -> None:
        """Initialize the composer.

        Raises:
            ConfigurationError: If no module or no policy is supplied.
        """
        if not modules:
            raise ConfigurationError("At least one module is required")
        if policy is None:
            raise ConfigurationError("A stage policy is required")

        self.modules: List[IModule] = list(modules)
        self.policy = policy
        self.init_modules: List[IModule] = list(init_modules)
        self.context_listener_generators: List[ContextListenerGenerator] = list(context_listener_generators)
        self.config_class = config_class
        self.config_packages: Tuple[str, ...] = tuple(config_packages)
        self.auto_config = auto_config

        self._method_resolver = MethodCallResolver()
        self._bootstrap: Optional[Bootstrap] = None
        self._init_container: Optional[DIContainer] = None
        self._environment_container: Optional[DIContainer] = None
        self._module_container: Optional[DIContainer] = None
        self._context: Optional[EnvironmentContext] = None

    @staticmethod
    def builder() -> ComposerBuilder:
        return ComposerBuilder()

    @property
    def current_container(self) -> DIContainer:
        """The most specific stage created so far.

        Raises:
            StageError: If the composer has not been initialized.
        """
        for container in (self._module_container, self._environment_container, self._init_container):
            if container is not None:
                return container
        raise StageError("The composer has not been initialized")

    def container_provider(self) -> Callable[[], DIContainer]:
        """A callable returning the current container each time it is called."""
        return lambda: self.current_container

    def initialize(self, bootstrap: Bootstrap) -> None:
        self._bootstrap = bootstrap
        self._init_container = create_container(
            self.policy,
            [*self.init_modules, _ApplicationModule(bootstrap)],
        )
        self._environment_container = None
        self._module_container = None

        if self.auto_config is not None:
            self.auto_config.initialize(bootstrap, self._init_container)

        for command in bootstrap.commands:
            if isinstance(command, ComposerAware):
                command.set_composer(self)

    def _require_init(self) -> DIContainer:
        if self._init_container is None:
            raise StageError("The composer must be initialized before it runs")
        return self._init_container

    def _compose(self, context: EnvironmentContext, configuration: Any) -> DIContainer:
        """Build the Environment stage, then the Module stage when a configuration is present."""
        init_container = self._require_init()
        self._context = context
        self._module_container = None

        config_class = self.config_class or (type(configuration) if configuration is not None else Configuration)
        environment_module = EnvironmentModule(config_class, context, self.config_packages)
        self._environment_container = init_container.create_child(ContainerStage.ENVIRONMENT, [environment_module])

        if configuration is None:
            return self._environment_container

        for module in self.modules:
            self._method_resolver.inject_members(module, self._environment_container)
        self._module_container = self._environment_container.create_child(ContainerStage.MODULE, self.modules)
        return self._module_container

    def run(self, configuration: Configuration, environment: Environment) -> None:
        """Compose every stage for a serving run and hook it into the host."""
        self._require_init()
        context = EnvironmentContext()
        context.configuration.set(configuration)
        context.environment.set(environment)
        context.bootstrap.set(self._bootstrap)
        container = self._compose(context, configuration)

        environment.dispatch.replace(container)
        context_path = environment.http.context_path
        environment.http.add_filter(
            "Container Filter",
            ScopedContainerMiddleware,
            context_path.rstrip("/") + "/*",
            container_provider=self.container_provider(),
            path_prefix=context_path,
        )
        for generator in self.context_listener_generators:
            environment.http.add_listeners(generator(container))

        if self.auto_config is not None:
            self.auto_config.run(environment, container)
        logger.info("Composed %s stage for %s", container.stage, environment.name)

    def run_command(
        self,
        bootstrap: Bootstrap,
        namespace: Optional[argparse.Namespace] = None,
        configuration: Optional[Configuration] = None,
        command: Any = None,
    ) -> DIContainer:
        """Compose the stages for a command run.

        No environment exists during a command run, so its slot is absent.
        The Module stage is only created when a configuration is supplied.

        Args:
            bootstrap: The bootstrap of the command run.
            namespace: Parsed command-line arguments, if any.
            configuration: The loaded configuration, if the command has one.
            command: An object whose ``@inject`` methods are filled from the result.

        Returns:
            The most specific stage created.
        """
        self._require_init()
        context = EnvironmentContext()
        context.environment.mark_absent()
        context.bootstrap.set(bootstrap)
        context.configuration.set(configuration)
        if namespace is not None:
            context.namespace.set(namespace)
        container = self._compose(context, configuration)

        logger.info("Composed %s stage for a command run", container.stage)
        if command is not None:
            self._method_resolver.inject_members(command, container)
        return container

    def set_namespace(self, namespace: argparse.Namespace) -> None:
        """Fill the namespace slot of the current run.

        Raises:
            StageError: If no run is in progress, or the namespace is already set.
        """
        if self._context is None:
            raise StageError("No run is in progress")
        self._context.namespace.set(namespace)
