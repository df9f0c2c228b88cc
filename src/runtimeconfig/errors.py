"""Exception types raised while resolving configuration.

Soft failures (unset endpoints, missing values, literal JSON that merely
looks like a reference) are logged and never raised. Everything here is
fatal to startup.
"""


class ConfigResolutionError(Exception):
    """Base class for fatal configuration resolution errors."""


class RemoteSourceAuthError(ConfigResolutionError):
    """A configured remote source rejected us or could not be reached."""

    def __init__(self, message: str, endpoint: str = ""):
        super().__init__(message)
        self.endpoint = endpoint


class SecretStoreAuthError(RemoteSourceAuthError):
    """Listing or reading secrets from Key Vault failed."""


class ConfigStoreAuthError(RemoteSourceAuthError):
    """Listing settings from App Configuration (or a vault it references) failed."""


class SecretReferenceError(ConfigResolutionError):
    """A setting is marked as a Key Vault reference but has no usable secret URI."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Setting '{key}' is a Key Vault reference but {reason}")
        self.key = key
        self.reason = reason
