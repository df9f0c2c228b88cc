"""Startup pipeline - the single entry point for resolving configuration.

Runs once per process:

    UNINITIALIZED --populate()--> SOURCES_POPULATED --extract()--> EXTRACTED

A fatal source error leaves the pipeline where it was, so the typed
configuration is never built from a partially resolved environment.
"""

import logging
from enum import Enum
from typing import Optional

from .config import PipelineConfig
from .container import Container
from .environment import EnvironmentStore, ProcessEnvironment
from .extractor import TypedConfigExtractor
from .merger import EnvironmentMerger
from .models import AppConfig
from .schema import ConfigSchema

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    UNINITIALIZED = "uninitialized"
    SOURCES_POPULATED = "sources_populated"
    EXTRACTED = "extracted"


class ConfigPipeline:
    """Merges sources into the environment, then extracts ``AppConfig``.

    Usage:
        pipeline = ConfigPipeline(PipelineConfig.from_env())
        app_config = await pipeline.run()

    Args:
        config: Pipeline configuration
        env: Merge target; the real process environment by default
        container: Pre-built source container (tests inject fakes here)
        extractor: Typed extractor; built from ``config.schema_path`` by default
    """

    def __init__(
        self,
        config: PipelineConfig,
        env: Optional[EnvironmentStore] = None,
        container: Optional[Container] = None,
        extractor: Optional[TypedConfigExtractor] = None,
    ):
        self.config = config
        self.env = env if env is not None else ProcessEnvironment()
        self._merger = EnvironmentMerger(config, self.env, container=container)
        self._extractor = extractor
        self._state = PipelineState.UNINITIALIZED
        self._result: Optional[AppConfig] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def result(self) -> Optional[AppConfig]:
        return self._result

    @property
    def extractor(self) -> TypedConfigExtractor:
        """The extractor reading ``env``, built on first use."""
        return self._get_extractor()

    async def populate(self) -> None:
        """Resolve every source into the environment.

        Raises:
            ValueError: If the pipeline configuration is invalid
            RuntimeError: If sources were already populated
            ConfigResolutionError: On fatal source errors
        """
        if self._state != PipelineState.UNINITIALIZED:
            raise RuntimeError(f"Sources already populated (state: {self._state.value})")

        errors = self.config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {errors}")

        logger.info(f"Resolving configuration for runtime mode '{self.config.runtime_mode}'")
        await self._merger.resolve_environment(self.config.runtime_mode)
        self._state = PipelineState.SOURCES_POPULATED

    def extract(self) -> AppConfig:
        """Build the typed configuration from the populated environment."""
        if self._state != PipelineState.SOURCES_POPULATED:
            raise RuntimeError(
                f"Cannot extract configuration in state '{self._state.value}'"
            )

        self._result = self.extractor.extract()
        self._state = PipelineState.EXTRACTED
        return self._result

    async def run(self) -> AppConfig:
        await self.populate()
        return self.extract()

    def _get_extractor(self) -> TypedConfigExtractor:
        if self._extractor is None:
            schema = (
                ConfigSchema.from_file(self.config.schema_path)
                if self.config.schema_path else ConfigSchema()
            )
            self._extractor = TypedConfigExtractor(self.env, schema)
        return self._extractor


async def get_config(
    config: Optional[PipelineConfig] = None,
    env: Optional[EnvironmentStore] = None,
) -> AppConfig:
    """Resolve and return the application configuration.

    Reads pipeline settings from ``env`` (the process environment by
    default) when ``config`` is not given. Fatal errors propagate; the
    caller should exit rather than serve with undefined configuration.
    """
    env = env if env is not None else ProcessEnvironment()
    if config is None:
        config = PipelineConfig.from_env(env.as_dict())
    return await ConfigPipeline(config, env=env).run()
