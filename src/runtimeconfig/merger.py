"""Environment merger.

Precedence rules:
    production-like: Key Vault (optional) < App Configuration, both
        overwriting whatever the process inherited. The vault is listed
        under the combined policy, or when it is the only remote source.
    otherwise: process environment > local .env file.
"""

import logging
from typing import Optional

from .config import MergePolicy, PipelineConfig, is_production_like
from .container import Container
from .environment import EnvironmentStore
from .sources.base import ConfigSource
from .sources.local import load_env_file

logger = logging.getLogger(__name__)


class EnvironmentMerger:
    """Writes resolved values into the environment store.

    Args:
        config: Pipeline configuration
        env: Merge target
        container: Source container; a fresh one is built from ``config``
            when omitted. It is shut down once the merge finishes.
    """

    def __init__(
        self,
        config: PipelineConfig,
        env: EnvironmentStore,
        container: Optional[Container] = None,
    ):
        self.config = config
        self.env = env
        self._container = container

    async def resolve_environment(self, runtime_mode: Optional[str] = None) -> None:
        """Populate the environment for ``runtime_mode``.

        Defaults to the mode in the pipeline configuration. Fatal source
        errors propagate; values applied before the failure stay applied.
        """
        mode = self.config.runtime_mode if runtime_mode is None else runtime_mode

        if not is_production_like(mode, self.config.production_modes):
            logger.info(f"Runtime mode '{mode}' is not production-like; reading {self.config.env_file}")
            load_env_file(self.config.env_file, self.env)
            return

        container = self._container or Container(self.config)
        async with container:
            if self._reads_secret_store():
                await self._apply(container.secret_store)
            await self._apply(container.config_store)

    def _reads_secret_store(self) -> bool:
        """Whether the vault is listed directly, before App Configuration.

        Under the default policy the vault is still read when it is the only
        remote source configured.
        """
        remote = self.config.remote
        if self.config.merge_policy == MergePolicy.SECRET_STORE_AND_CONFIG_STORE:
            return True
        if not remote.key_vault_endpoint:
            return False
        if not remote.app_config_endpoint:
            logger.info(
                "AZURE_APPCONFIGURATION_ENDPOINT has not been set; "
                "reading secrets directly from Azure Key Vault"
            )
            return True
        logger.warning(
            f"AZURE_KEY_VAULT_ENDPOINT is set but merge policy "
            f"'{self.config.merge_policy.value}' does not list it; only secrets "
            f"referenced from Azure App Configuration will be read"
        )
        return False

    async def _apply(self, source: ConfigSource) -> int:
        """Overwrite the environment with every pair from ``source``."""
        count = 0
        async for key, value in source.list_and_resolve_all():
            self.env.set(key, value)
            count += 1
        if count:
            logger.info(f"Applied {count} values from {source.name}")
        return count
