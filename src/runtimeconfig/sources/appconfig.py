"""Azure App Configuration source.

Settings are returned verbatim unless their value is a Key Vault
reference, i.e. JSON carrying a ``uri`` string:

    {"uri": "https://myvault.vault.azure.net/secrets/mysecret"}

in which case the referenced secret's value is returned instead.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

from azure.appconfiguration.aio import AzureAppConfigurationClient
from azure.core.exceptions import AzureError

from .base import (
    ConfigSource,
    PERMISSION_HINT,
    is_access_failure,
    iterate_with_timeout,
)
from .keyvault import KeyVaultSecretSource
from ..config.settings import RemoteSourceConfig
from ..errors import ConfigStoreAuthError, SecretReferenceError, SecretStoreAuthError

logger = logging.getLogger(__name__)

KEY_VAULT_REFERENCE_CONTENT_TYPE = "application/vnd.microsoft.appconfig.keyvaultref+json"

# (endpoint, credential) -> client exposing list_configuration_settings/close
ConfigClientFactory = Callable[[str, Any], Any]


@dataclass(frozen=True)
class SecretReference:
    """Pointer from a setting to a Key Vault secret."""
    vault_host: str
    secret_name: str
    version: Optional[str] = None

    @property
    def vault_url(self) -> str:
        return f"https://{self.vault_host}"

    @classmethod
    def from_uri(cls, uri: str) -> Optional["SecretReference"]:
        """Parse ``https://{host}/secrets/{name}[/{version}]``.

        Returns None if the host or name segment is missing.
        """
        segments = uri.split("/")
        if len(segments) < 5 or not segments[2] or not segments[4]:
            return None
        version = segments[5] if len(segments) > 5 and segments[5] else None
        return cls(vault_host=segments[2], secret_name=segments[4], version=version)


@dataclass(frozen=True)
class ConfigurationSetting:
    """A single key/value read from App Configuration."""
    key: str
    value: str
    content_type: Optional[str] = None
    label: Optional[str] = None

    @property
    def is_reference(self) -> bool:
        return _reference_uri(self.value) is not None or is_key_vault_content_type(self.content_type)

    @classmethod
    def from_sdk(cls, setting: Any) -> "ConfigurationSetting":
        return cls(
            key=setting.key,
            value=setting.value if setting.value is not None else "",
            content_type=getattr(setting, "content_type", None),
            label=getattr(setting, "label", None),
        )


def is_key_vault_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() == KEY_VAULT_REFERENCE_CONTENT_TYPE


def _reference_uri(value: str) -> Optional[str]:
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, dict) and isinstance(parsed.get("uri"), str):
        return parsed["uri"]
    return None


def parse_secret_reference(setting: ConfigurationSetting) -> Optional[SecretReference]:
    """Return the Key Vault reference carried by ``setting``, if any.

    Any JSON object with a string ``uri`` counts as a reference. Values
    that are not JSON, or JSON without ``uri``, are literals.

    Raises:
        SecretReferenceError: If the setting is typed as a Key Vault
            reference but has no ``uri``, or its ``uri`` has no vault host
            or secret name
    """
    uri = _reference_uri(setting.value)
    if uri is None:
        if is_key_vault_content_type(setting.content_type):
            raise SecretReferenceError(setting.key, "its value has no 'uri' field")
        return None

    reference = SecretReference.from_uri(uri)
    if reference is None:
        raise SecretReferenceError(
            setting.key, f"secret URI {uri!r} is missing the vault host or secret name"
        )
    return reference


def _default_client_factory(endpoint: str, credential: Any) -> AzureAppConfigurationClient:
    return AzureAppConfigurationClient(base_url=endpoint, credential=credential)


class AppConfigurationSource(ConfigSource[RemoteSourceConfig]):
    """Pages through every setting in the configured store.

    Key Vault references are resolved through ``secrets`` one batch of
    ``reference_concurrency`` settings at a time. Pairs are always yielded
    in enumeration order.
    """

    name = "Azure App Configuration"

    def __init__(
        self,
        config: RemoteSourceConfig,
        secrets: KeyVaultSecretSource,
        credential: Any = None,
        client_factory: Optional[ConfigClientFactory] = None,
    ):
        super().__init__(config)
        self._secrets = secrets
        self._credential = credential
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None

    @property
    def endpoint(self) -> Optional[str]:
        return self.config.app_config_endpoint

    async def initialize(self) -> None:
        self._initialized = True

    async def shutdown(self) -> None:
        if self._client:
            await self._client.close()
            self._client = None
        self._initialized = False

    def _get_client(self) -> Any:
        if self._client is None:
            if self._credential is None:
                raise RuntimeError("App Configuration source has no credential")
            self._client = self._client_factory(self.endpoint, self._credential)
        return self._client

    async def list_and_resolve_all(self) -> AsyncIterator[tuple[str, str]]:
        """Yield ``(key, value)`` for every setting, dereferencing secrets.

        Raises:
            ConfigStoreAuthError: If the store, or a vault it references,
                rejects the identity or cannot be reached
            SecretReferenceError: If a reference has no usable secret URI
        """
        if not self.endpoint:
            logger.warning(
                "AZURE_APPCONFIGURATION_ENDPOINT has not been set. "
                "Configuration will be loaded from current environment."
            )
            return

        logger.info("Populating environment from Azure App Configuration...")
        batch_size = max(1, self.config.reference_concurrency)
        try:
            pager = self._get_client().list_configuration_settings()
            batch: list[ConfigurationSetting] = []
            async for item in iterate_with_timeout(pager, self.config.timeout_seconds):
                batch.append(ConfigurationSetting.from_sdk(item))
                if len(batch) >= batch_size:
                    for pair in await self._resolve_batch(batch):
                        yield pair
                    batch = []
            for pair in await self._resolve_batch(batch):
                yield pair
        except SecretStoreAuthError as e:
            logger.error(
                f"Error resolving a Key Vault reference from Azure App Configuration "
                f"at {self.endpoint}. {PERMISSION_HINT} Error: {e}"
            )
            raise ConfigStoreAuthError(
                f"Key Vault reference could not be resolved: {e}",
                endpoint=e.endpoint,
            ) from e
        except (AzureError, asyncio.TimeoutError) as e:
            if not is_access_failure(e):
                logger.error(f"Error reading from Azure App Configuration at {self.endpoint}: {e!r}")
                raise
            logger.error(
                f"Error authenticating with Azure App Configuration at {self.endpoint}. "
                f"{PERMISSION_HINT} Error: {e!r}"
            )
            raise ConfigStoreAuthError(
                f"Azure App Configuration access failed for {self.endpoint}: {e}",
                endpoint=self.endpoint,
            ) from e

    async def _resolve_batch(self, batch: list[ConfigurationSetting]) -> list[tuple[str, str]]:
        if not batch:
            return []
        if len(batch) == 1:
            setting = batch[0]
            return [(setting.key, await self.resolve(setting))]
        # gather keeps argument order, so completion order never leaks out
        tasks = [asyncio.ensure_future(self.resolve(s)) for s in batch]
        try:
            values = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return [(s.key, v) for s, v in zip(batch, values)]

    async def resolve(self, setting: ConfigurationSetting) -> str:
        """Return the literal value, or the referenced secret's value."""
        reference = parse_secret_reference(setting)
        if reference is None:
            return setting.value

        logger.debug(
            f"Resolving '{setting.key}' from secret '{reference.secret_name}' "
            f"in {reference.vault_url}"
        )
        return await self._secrets.get_secret_value(
            reference.vault_url,
            reference.secret_name,
            version=reference.version,
        )
