"""Pytest fixtures for runtimeconfig tests."""

import pytest
from azure.core.exceptions import ClientAuthenticationError

from runtimeconfig.config import PipelineConfig
from runtimeconfig.container import Container
from runtimeconfig.environment import InMemoryEnvironment
from runtimeconfig.testing import (
    FakeAppConfigClient,
    FakeClientFactory,
    FakeCredential,
    FakeSecretClient,
)

VAULT_URL = "https://test-vault.vault.azure.net"
CONFIG_URL = "https://test-config.azconfig.io"


@pytest.fixture
def env():
    """Provide an empty in-memory environment."""
    return InMemoryEnvironment()


@pytest.fixture
def pipeline_config():
    """Production-mode configuration with both endpoints set."""
    return PipelineConfig.for_testing()


@pytest.fixture
def credential():
    return FakeCredential()


@pytest.fixture
def auth_error():
    return ClientAuthenticationError(message="credential rejected")


@pytest.fixture
def make_container():
    """Factory building a container wired to fake SDK clients.

    Returns ``(container, secret_factory, config_factory)``.
    """
    def _make(
        config: PipelineConfig,
        secret_clients: dict | None = None,
        config_client: FakeAppConfigClient | None = None,
        credential=None,
    ) -> tuple[Container, FakeClientFactory, FakeClientFactory]:
        secret_factory = FakeClientFactory(secret_clients or {}, default_cls=FakeSecretClient)
        config_factory = FakeClientFactory(
            {CONFIG_URL: config_client or FakeAppConfigClient()},
            default_cls=FakeAppConfigClient,
        )
        container = Container(
            config,
            credential=credential or FakeCredential(),
            secret_client_factory=secret_factory,
            config_client_factory=config_factory,
        )
        return container, secret_factory, config_factory

    return _make
