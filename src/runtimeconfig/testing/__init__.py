"""Testing utilities for runtimeconfig."""

from .fakes import (
    FakeAppConfigClient,
    FakeClientFactory,
    FakeConfigurationSetting,
    FakeCredential,
    FakePager,
    FakeSecretClient,
)

__all__ = [
    "FakeAppConfigClient",
    "FakeClientFactory",
    "FakeConfigurationSetting",
    "FakeCredential",
    "FakePager",
    "FakeSecretClient",
]
