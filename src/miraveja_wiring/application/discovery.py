"""Application layer - Discovering components under base packages."""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from miraveja_wiring.application.commands import (
    InjectedCommand,
    InjectedConfiguredCommand,
    InjectedEnvironmentCommand,
)
from miraveja_wiring.domain import Capability, ComponentDescriptor, ConfigurationError, IContainer
from miraveja_wiring.domain.markers import PATH, PROVIDER, class_markers
from miraveja_wiring.host import (
    Bootstrap,
    Bundle,
    Command,
    ConfiguredCommand,
    Environment,
    EnvironmentCommand,
    InjectableHealthCheck,
    InjectableProvider,
    Managed,
    Task,
)

logger = logging.getLogger(__name__)

# Capabilities recognized by base class. Commands are the union of every shape.
SUBTYPE_CAPABILITIES: Dict[Capability, Tuple[type, ...]] = {
    Capability.HEALTH_CHECK: (InjectableHealthCheck,),
    Capability.INJECTABLE_PROVIDER: (InjectableProvider,),
    Capability.TASK: (Task,),
    Capability.MANAGED: (Managed,),
    Capability.BUNDLE: (Bundle,),
    Capability.COMMAND: (
        Command,
        ConfiguredCommand,
        EnvironmentCommand,
        InjectedCommand,
        InjectedConfiguredCommand,
        InjectedEnvironmentCommand,
    ),
}

# Capabilities recognized by class marker
MARKER_CAPABILITIES: Dict[Capability, str] = {
    Capability.PROVIDER: PROVIDER,
    Capability.RESOURCE: PATH,
}


def _qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def _sorted(descriptors: FrozenSet[ComponentDescriptor]) -> Tuple[ComponentDescriptor, ...]:
    return tuple(sorted(descriptors, key=lambda d: d.qualified_name))


class DiscoveryRegistry:
    """Index of the classes under a set of base packages.

    Packages are imported and walked once, at construction; every class
    whose module starts with one of the prefixes is classified against the
    capability predicates. Queries are answered from memoized results.

    Attributes:
        base_packages: Module-name prefixes that were scanned.
    """

    def __init__(self, *base_packages: str) -> None:
        """Scan the base packages.

        Raises:
            ConfigurationError: If no package, or an empty package name, is supplied.
        """
        if not base_packages or any(not package for package in base_packages):
            raise ConfigurationError("Auto config requires at least one non-empty base package")

        self.base_packages: Tuple[str, ...] = tuple(base_packages)
        self._types: Tuple[type, ...] = self._scan()
        self._subtype_cache: Dict[type, FrozenSet[ComponentDescriptor]] = {}
        self._marker_cache: Dict[str, FrozenSet[ComponentDescriptor]] = {}
        self._by_capability: Dict[Capability, Tuple[ComponentDescriptor, ...]] = {
            capability: self._classify(capability) for capability in Capability
        }

    @property
    def types(self) -> Tuple[type, ...]:
        return self._types

    def _in_packages(self, name: str) -> bool:
        return any(name.startswith(package) for package in self.base_packages)

    def _import_root(self, package: str) -> Optional[ModuleType]:
        """Import the longest importable module named by a prefix."""
        parts = package.split(".")
        for index in range(len(parts), 0, -1):
            name = ".".join(parts[:index])
            try:
                return importlib.import_module(name)
            except ModuleNotFoundError as e:
                if e.name is None or not (name == e.name or name.startswith(e.name + ".")):
                    raise
        return None

    def _modules_under(self, package: str) -> Iterator[ModuleType]:
        root = self._import_root(package)
        if root is None:
            logger.warning("Base package %s could not be imported; nothing discovered", package)
            return
        yield root
        if not hasattr(root, "__path__"):
            return

        def on_error(name: str) -> None:
            raise ConfigurationError(f"Unable to import {name} while scanning {package}")

        for module_info in pkgutil.walk_packages(root.__path__, root.__name__ + ".", onerror=on_error):
            name = module_info.name
            if name.startswith(package) or package.startswith(name + "."):
                try:
                    module = importlib.import_module(name)
                except ImportError as e:
                    raise ConfigurationError(f"Unable to import {name} while scanning {package}") from e
                yield module

    def _scan(self) -> Tuple[type, ...]:
        found: Dict[str, type] = {}
        for package in self.base_packages:
            count = 0
            for module in self._modules_under(package):
                for _, member in inspect.getmembers(module, inspect.isclass):
                    name = _qualified_name(member)
                    if self._in_packages(member.__module__) and name not in found:
                        found[name] = member
                        count += 1
            if count == 0:
                logger.warning("No classes found under base package %s", package)
        return tuple(found[name] for name in sorted(found))

    def _capability_of_base(self, base: type) -> Optional[Capability]:
        for capability, bases in SUBTYPE_CAPABILITIES.items():
            if base in bases:
                return capability
        return None

    def _classify(self, capability: Capability) -> Tuple[ComponentDescriptor, ...]:
        descriptors: FrozenSet[ComponentDescriptor] = frozenset()
        for base in SUBTYPE_CAPABILITIES.get(capability, ()):
            descriptors |= self.subtypes_of(base)
        if capability in MARKER_CAPABILITIES:
            descriptors |= self.annotated_with(MARKER_CAPABILITIES[capability])
        return _sorted(descriptors)

    def subtypes_of(self, base: type) -> FrozenSet[ComponentDescriptor]:
        """Every discovered proper subclass of ``base``."""
        if base not in self._subtype_cache:
            capability = self._capability_of_base(base)
            self._subtype_cache[base] = frozenset(
                ComponentDescriptor(component_type=cls, capability=capability)
                for cls in self._types
                if cls is not base and issubclass(cls, base)
            )
        return self._subtype_cache[base]

    def annotated_with(self, marker: str) -> FrozenSet[ComponentDescriptor]:
        """Every discovered class carrying ``marker`` directly."""
        if marker not in self._marker_cache:
            capability = next((c for c, m in MARKER_CAPABILITIES.items() if m == marker), None)
            self._marker_cache[marker] = frozenset(
                ComponentDescriptor(component_type=cls, capability=capability)
                for cls in self._types
                if marker in class_markers(cls)
            )
        return self._marker_cache[marker]

    def descriptors(self, capability: Capability) -> Tuple[ComponentDescriptor, ...]:
        """Components of one capability, ordered by qualified name."""
        return self._by_capability[capability]

    def _concrete(self, capability: Capability) -> List[type]:
        classes = []
        for descriptor in self.descriptors(capability):
            if inspect.isabstract(descriptor.component_type):
                logger.debug("Skipping abstract %s %s", capability, descriptor.qualified_name)
                continue
            classes.append(descriptor.component_type)
        return classes

    def run(self, environment: Environment, container: IContainer) -> None:
        """Register the run-phase components, in capability order.

        Args:
            environment: The environment receiving the components.
            container: The fully composed container instances are built from.
        """
        registrars: Dict[Capability, Callable[[Environment, IContainer, type], Any]] = {
            Capability.HEALTH_CHECK: self._add_health_check,
            Capability.PROVIDER: self._add_dispatch_component,
            Capability.INJECTABLE_PROVIDER: self._add_dispatch_component,
            Capability.RESOURCE: self._add_dispatch_component,
            Capability.TASK: self._add_task,
            Capability.MANAGED: self._add_managed,
        }
        for capability in Capability.run_phase():
            for cls in self._concrete(capability):
                registrars[capability](environment, container, cls)
                logger.info("Added %s: %s", capability, _qualified_name(cls))

    def initialize(self, bootstrap: Bootstrap, container: IContainer) -> None:
        """Add bundles, then commands not already registered by type.

        Args:
            bootstrap: The bootstrap receiving the components.
            container: The Init stage instances are built from.
        """
        registrars: Dict[Capability, Callable[[Bootstrap, IContainer, type], bool]] = {
            Capability.BUNDLE: self._add_bundle,
            Capability.COMMAND: self._add_command,
        }
        for capability in Capability.initialize_phase():
            for cls in self._concrete(capability):
                if registrars[capability](bootstrap, container, cls):
                    logger.info("Added %s %s during bootstrap", capability, _qualified_name(cls))

    @staticmethod
    def _add_bundle(bootstrap: Bootstrap, container: IContainer, cls: type) -> bool:
        bootstrap.add_bundle(container.resolve(cls))
        return True

    @staticmethod
    def _add_command(bootstrap: Bootstrap, container: IContainer, cls: type) -> bool:
        if any(type(command) is cls for command in bootstrap.commands):
            return False
        bootstrap.add_command(container.resolve(cls))
        return True

    @staticmethod
    def _add_health_check(environment: Environment, container: IContainer, cls: type) -> None:
        health_check = container.resolve(cls)
        environment.health_checks.register(health_check.name, health_check)

    @staticmethod
    def _add_dispatch_component(environment: Environment, container: IContainer, cls: type) -> None:
        environment.dispatch.register(cls)

    @staticmethod
    def _add_task(environment: Environment, container: IContainer, cls: type) -> None:
        environment.admin.add_task(container.resolve(cls))

    @staticmethod
    def _add_managed(environment: Environment, container: IContainer, cls: type) -> None:
        environment.lifecycle.manage(container.resolve(cls))
