import logging
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class LoggingFactory(BaseModel):
    """Logging section of the application configuration.

    Attributes:
        level: Level applied to the root logger.
        loggers: Per-logger level overrides.
        log_format: Format of the default stream handler.
    """

    level: str = Field(default="INFO", description="Root logger level.")
    loggers: Dict[str, str] = Field(default_factory=dict, description="Per-logger level overrides.")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        description="Format of the default stream handler.",
    )

    def configure(self, name: str) -> None:
        """Apply the levels, installing a stream handler if none exists yet."""
        root = logging.getLogger()
        if not root.handlers:
            logging.basicConfig(format=self.log_format)
        root.setLevel(self.level.upper())
        for logger_name, level in self.loggers.items():
            logging.getLogger(logger_name).setLevel(level.upper())
        logging.getLogger(__name__).debug("Configured logging for %s", name)


class ServerFactory(BaseModel):
    """Server section of the application configuration."""

    application_context_path: str = Field(default="/", description="Path the application is served under.")


class Configuration(BaseModel):
    """Base class of every application configuration.

    Subclass it and declare nested pydantic models for each section; every
    reachable field becomes injectable by its dotted path.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    logging: LoggingFactory = Field(default_factory=LoggingFactory)
    server: ServerFactory = Field(default_factory=ServerFactory)
