"""Typed configuration extraction."""

import logging
from typing import Optional

from .environment import EnvironmentStore
from .models import AppConfig, DatabaseConfig, ObservabilityConfig
from .schema import ConfigSchema

logger = logging.getLogger(__name__)


class TypedConfigExtractor:
    """Reads the merged environment into an ``AppConfig``.

    Missing required values are logged as warnings and passed through as
    empty strings; extraction itself never fails.
    """

    def __init__(self, env: EnvironmentStore, schema: Optional[ConfigSchema] = None):
        self.env = env
        self.schema = schema or ConfigSchema()

    def extract(self) -> AppConfig:
        def read(path: str) -> str:
            return self.schema.read(path, self.env)

        config = AppConfig(
            database=DatabaseConfig(
                connection_string=read("database.connectionString"),
                database_name=read("database.databaseName"),
            ),
            observability=ObservabilityConfig(
                connection_string=read("observability.connectionString"),
                role_name=read("observability.roleName"),
            ),
        )

        for path in self.schema.required_fields():
            if not read(path):
                logger.warning(
                    f"{path} is required but has not been set. "
                    f"Ensure environment variable '{self.schema.spec(path).env}' has been set"
                )

        return config
