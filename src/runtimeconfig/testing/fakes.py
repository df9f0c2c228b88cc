"""In-memory stand-ins for the Azure SDK clients.

They expose the subset of the aio client surface the sources use:
paged listing via ``async for``, ``get_secret`` and ``close``.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from azure.core.exceptions import ResourceNotFoundError


@dataclass
class FakeSecretProperties:
    name: str
    enabled: Optional[bool] = True


@dataclass
class FakeSecret:
    name: str
    value: Optional[str]


@dataclass
class FakeConfigurationSetting:
    key: str
    value: Optional[str]
    content_type: Optional[str] = None
    label: Optional[str] = None


class FakeCredential:
    """Stands in for ``DefaultAzureCredential``."""

    def __init__(self):
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakePager:
    """Async iterator that hands out items one page at a time.

    Args:
        items: Items to yield, in order
        page_size: Items per simulated page
        error: Raised when the page at ``fail_on_page`` is requested
        fail_on_page: Zero-based page index that raises ``error``
    """

    def __init__(
        self,
        items: Iterable[Any],
        page_size: int = 2,
        error: Optional[BaseException] = None,
        fail_on_page: int = 0,
    ):
        self._items = list(items)
        self.page_size = page_size
        self.error = error
        self.fail_on_page = fail_on_page
        self.pages_fetched = 0
        self._buffer: list[Any] = []
        self._offset = 0

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._buffer:
            if self.error is not None and self.pages_fetched == self.fail_on_page:
                raise self.error
            if self._offset >= len(self._items):
                raise StopAsyncIteration
            self._buffer = self._items[self._offset:self._offset + self.page_size]
            self._offset += self.page_size
            self.pages_fetched += 1
        return self._buffer.pop(0)


class FakeSecretClient:
    """Fake ``azure.keyvault.secrets.aio.SecretClient``.

    Args:
        secrets: Ordered ``(name, value)`` pairs
        list_error: Raised while listing
        get_errors: Per-secret-name errors raised by ``get_secret``
        delays: Per-secret-name delay in seconds before ``get_secret`` returns
        disabled: Names listed with ``enabled=False``
    """

    def __init__(
        self,
        secrets: Iterable[tuple[str, str]] = (),
        vault_url: str = "https://test-vault.vault.azure.net",
        list_error: Optional[BaseException] = None,
        get_errors: Optional[dict[str, BaseException]] = None,
        delays: Optional[dict[str, float]] = None,
        disabled: Iterable[str] = (),
        page_size: int = 2,
    ):
        self.vault_url = vault_url
        self._secrets = list(secrets)
        self.list_error = list_error
        self.get_errors = get_errors or {}
        self.delays = delays or {}
        self.disabled = set(disabled)
        self.page_size = page_size
        self.get_calls: list[tuple[str, Optional[str]]] = []
        self.pager: Optional[FakePager] = None
        self.closed = False

    def list_properties_of_secrets(self) -> FakePager:
        properties = [
            FakeSecretProperties(name=name, enabled=name not in self.disabled)
            for name, _ in self._secrets
        ]
        self.pager = FakePager(properties, page_size=self.page_size, error=self.list_error)
        return self.pager

    async def get_secret(self, name: str, version: Optional[str] = None) -> FakeSecret:
        self.get_calls.append((name, version))
        if name in self.delays:
            await asyncio.sleep(self.delays[name])
        if name in self.get_errors:
            raise self.get_errors[name]
        for secret_name, value in reversed(self._secrets):
            if secret_name == name:
                return FakeSecret(name=name, value=value)
        raise ResourceNotFoundError(f"Secret not found: {name}")

    async def close(self) -> None:
        self.closed = True


class FakeAppConfigClient:
    """Fake ``azure.appconfiguration.aio.AzureAppConfigurationClient``."""

    def __init__(
        self,
        settings: Iterable[FakeConfigurationSetting] = (),
        list_error: Optional[BaseException] = None,
        fail_on_page: int = 0,
        page_size: int = 2,
    ):
        self._settings = list(settings)
        self.list_error = list_error
        self.fail_on_page = fail_on_page
        self.page_size = page_size
        self.pager: Optional[FakePager] = None
        self.closed = False

    def list_configuration_settings(self) -> FakePager:
        self.pager = FakePager(
            self._settings,
            page_size=self.page_size,
            error=self.list_error,
            fail_on_page=self.fail_on_page,
        )
        return self.pager

    async def close(self) -> None:
        self.closed = True


class FakeClientFactory:
    """Client factory returning pre-built fakes keyed by endpoint.

    Unknown endpoints get an empty client so a test can assert on it later.
    """

    def __init__(self, clients: Optional[dict[str, Any]] = None, default_cls=FakeSecretClient):
        self.clients = {url.rstrip("/"): c for url, c in (clients or {}).items()}
        self.default_cls = default_cls
        self.requested: list[str] = []
        self.credentials: list[Any] = []

    def __call__(self, endpoint: str, credential: Any) -> Any:
        endpoint = endpoint.rstrip("/")
        self.requested.append(endpoint)
        self.credentials.append(credential)
        if endpoint not in self.clients:
            self.clients[endpoint] = self.default_cls()
        return self.clients[endpoint]
