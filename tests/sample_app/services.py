from typing import Annotated, List

from miraveja_wiring import DependencyKey, IContainer, IModule, Named, inject
from sample_app.config import SampleConfig


class Database:
    def __init__(self, host: Annotated[str, Named("database.host")], port: Annotated[int, Named("database.port")]):
        self.host = host
        self.port = port

    @property
    def url(self) -> str:
        return f"db://{self.host}:{self.port}"


class Clock:
    def __init__(self) -> None:
        self.ticks = 0


class DatabaseModule(IModule):
    """Binds the database, and records the configuration it was injected with."""

    def __init__(self) -> None:
        self.injected: List[SampleConfig] = []

    @inject
    def set_configuration(self, configuration: SampleConfig) -> None:
        self.injected.append(configuration)

    def configure(self, container: IContainer) -> None:
        container.register_singletons(
            {
                Database: lambda c: Database(
                    c.resolve(DependencyKey.named(str, "database.host")),
                    c.resolve(DependencyKey.named(int, "database.port")),
                ),
                DependencyKey.named(str, "database.url"): lambda c: c.resolve(Database).url,
            }
        )


class ClockModule(IModule):
    def configure(self, container: IContainer) -> None:
        container.register_singletons({Clock: lambda c: Clock()})
