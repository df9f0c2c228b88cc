"""Azure Key Vault secret source."""

import asyncio
import logging
from typing import Any, AsyncIterator, Callable, Optional

from azure.core.exceptions import AzureError
from azure.keyvault.secrets.aio import SecretClient

from .base import (
    ConfigSource,
    PERMISSION_HINT,
    call_with_timeout,
    is_access_failure,
    iterate_with_timeout,
)
from ..config.settings import RemoteSourceConfig
from ..errors import SecretStoreAuthError

logger = logging.getLogger(__name__)

# (vault_url, credential) -> client exposing list_properties_of_secrets/get_secret/close
SecretClientFactory = Callable[[str, Any], Any]


def normalize_secret_name(name: str) -> str:
    """Map a vault secret name onto environment variable naming.

    Key Vault does not allow underscores, so ``MY-SECRET`` is stored for
    ``MY_SECRET``. The mapping is lossy: ``A-B`` and ``A_B`` produce the
    same key and the one enumerated last wins.
    """
    return name.replace("-", "_")


def _default_client_factory(vault_url: str, credential: Any) -> SecretClient:
    return SecretClient(vault_url=vault_url, credential=credential)


class KeyVaultSecretSource(ConfigSource[RemoteSourceConfig]):
    """Lists every secret in the configured vault.

    Also serves single-secret reads against any vault, which is how
    App Configuration references are dereferenced. One client is kept per
    vault URL until ``shutdown()``.
    """

    name = "Azure Key Vault"

    def __init__(
        self,
        config: RemoteSourceConfig,
        credential: Any = None,
        client_factory: Optional[SecretClientFactory] = None,
    ):
        super().__init__(config)
        self._credential = credential
        self._client_factory = client_factory or _default_client_factory
        self._clients: dict[str, Any] = {}

    @property
    def endpoint(self) -> Optional[str]:
        return self.config.key_vault_endpoint

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        clients, self._clients = self._clients, {}
        for client in clients.values():
            await client.close()
        self._initialized = False

    def _client_for(self, vault_url: str) -> Any:
        vault_url = vault_url.rstrip("/")
        client = self._clients.get(vault_url)
        if client is None:
            if self._credential is None:
                raise RuntimeError("Key Vault source has no credential")
            client = self._client_factory(vault_url, self._credential)
            self._clients[vault_url] = client
        return client

    async def list_and_resolve_all(self) -> AsyncIterator[tuple[str, str]]:
        """Yield ``(normalized_name, value)`` for every enabled secret.

        Raises:
            SecretStoreAuthError: If the vault rejects the identity or cannot be reached
        """
        if not self.endpoint:
            logger.warning(
                "AZURE_KEY_VAULT_ENDPOINT has not been set. "
                "Configuration will be loaded from current environment."
            )
            return

        logger.info("Populating environment from Azure Key Vault...")
        timeout = self.config.timeout_seconds
        try:
            client = self._client_for(self.endpoint)
            pager = client.list_properties_of_secrets()
            async for properties in iterate_with_timeout(pager, timeout):
                if properties.enabled is False:
                    logger.debug(f"Skipping disabled secret '{properties.name}'")
                    continue
                secret = await call_with_timeout(client.get_secret(properties.name), timeout)
                yield normalize_secret_name(secret.name), secret.value or ""
        except (AzureError, asyncio.TimeoutError) as e:
            auth_error = self._failure(self.endpoint, e)
            if auth_error is None:
                raise
            raise auth_error from e

    async def get_secret_value(
        self,
        vault_url: str,
        secret_name: str,
        version: Optional[str] = None,
    ) -> str:
        """Fetch one secret's current (or pinned) value from ``vault_url``.

        Raises:
            SecretStoreAuthError: If the vault rejects the identity or cannot be reached
        """
        try:
            client = self._client_for(vault_url)
            secret = await call_with_timeout(
                client.get_secret(secret_name, version=version),
                self.config.timeout_seconds,
            )
        except (AzureError, asyncio.TimeoutError) as e:
            auth_error = self._failure(vault_url, e)
            if auth_error is None:
                raise
            raise auth_error from e
        return secret.value or ""

    def _failure(self, vault_url: str, error: BaseException) -> Optional[SecretStoreAuthError]:
        if not is_access_failure(error):
            logger.error(f"Error reading from Azure Key Vault at {vault_url}: {error!r}")
            return None
        logger.error(
            f"Error authenticating with Azure Key Vault at {vault_url}. "
            f"{PERMISSION_HINT} Error: {error!r}"
        )
        return SecretStoreAuthError(
            f"Azure Key Vault access failed for {vault_url}: {error}",
            endpoint=vault_url,
        )
