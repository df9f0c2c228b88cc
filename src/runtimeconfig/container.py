"""Source container.

Owns the credential and the remote sources for a single resolution run.
"""

import logging
from typing import Any, Optional

from azure.identity.aio import DefaultAzureCredential

from .config import PipelineConfig
from .sources.appconfig import AppConfigurationSource, ConfigClientFactory
from .sources.keyvault import KeyVaultSecretSource, SecretClientFactory

logger = logging.getLogger(__name__)


class Container:
    """Creates remote sources and manages their lifecycle.

    Usage:
        async with Container(config) as container:
            async for key, value in container.config_store.list_and_resolve_all():
                ...

    A credential passed in is borrowed and left open; one created here
    (``DefaultAzureCredential``) is closed on shutdown.
    """

    def __init__(
        self,
        config: PipelineConfig,
        credential: Any = None,
        secret_client_factory: Optional[SecretClientFactory] = None,
        config_client_factory: Optional[ConfigClientFactory] = None,
    ):
        self.config = config
        self._credential = credential
        self._owns_credential = False
        self._secret_client_factory = secret_client_factory
        self._config_client_factory = config_client_factory
        self._secret_store: Optional[KeyVaultSecretSource] = None
        self._config_store: Optional[AppConfigurationSource] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the credential and sources.

        The secret store is created first because the config store
        dereferences Key Vault references through it.
        """
        if self._initialized:
            return

        remote = self.config.remote
        if self._credential is None and (remote.key_vault_endpoint or remote.app_config_endpoint):
            self._credential = self._create_credential()
            self._owns_credential = True

        self._secret_store = KeyVaultSecretSource(
            remote,
            credential=self._credential,
            client_factory=self._secret_client_factory,
        )
        await self._secret_store.initialize()

        self._config_store = AppConfigurationSource(
            remote,
            secrets=self._secret_store,
            credential=self._credential,
            client_factory=self._config_client_factory,
        )
        await self._config_store.initialize()

        self._initialized = True
        logger.debug("Source container initialized")

    async def shutdown(self) -> None:
        """Close sources in reverse order, then the owned credential."""
        if not self._initialized:
            return

        await self._config_store.shutdown()
        await self._secret_store.shutdown()

        if self._owns_credential and self._credential is not None:
            await self._credential.close()
            self._credential = None
            self._owns_credential = False

        self._initialized = False
        logger.debug("Source container shut down")

    @property
    def secret_store(self) -> KeyVaultSecretSource:
        if not self._secret_store:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._secret_store

    @property
    def config_store(self) -> AppConfigurationSource:
        if not self._config_store:
            raise RuntimeError("Container not initialized. Call initialize() first.")
        return self._config_store

    def _create_credential(self) -> DefaultAzureCredential:
        client_id = self.config.remote.client_id
        logger.debug(
            f"Creating DefaultAzureCredential (managed identity client id: {client_id or 'default'})"
        )
        return DefaultAzureCredential(managed_identity_client_id=client_id)

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()
