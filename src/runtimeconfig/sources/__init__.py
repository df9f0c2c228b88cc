"""Configuration sources.

Each remote source implements ``ConfigSource`` and yields ``(key, value)``
pairs; the local ``.env`` loader writes directly with no-overwrite rules.
"""

from .base import ConfigSource, is_access_failure
from .local import load_env_file, parse_env_file
from .keyvault import KeyVaultSecretSource, normalize_secret_name
from .appconfig import (
    AppConfigurationSource,
    ConfigurationSetting,
    SecretReference,
    parse_secret_reference,
)

__all__ = [
    "ConfigSource",
    "is_access_failure",
    "load_env_file",
    "parse_env_file",
    "KeyVaultSecretSource",
    "normalize_secret_name",
    "AppConfigurationSource",
    "ConfigurationSetting",
    "SecretReference",
    "parse_secret_reference",
]
