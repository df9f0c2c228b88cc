"""Pipeline settings."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MergePolicy(Enum):
    """Which remote sources are read in production-like mode."""
    # App Configuration only; it dereferences Key Vault references itself
    CONFIG_STORE = "config_store"
    # Every Key Vault secret first, then App Configuration on top
    SECRET_STORE_AND_CONFIG_STORE = "secret_store_and_config_store"


@dataclass
class RemoteSourceConfig:
    """Connection settings shared by the remote sources.

    Attributes:
        key_vault_endpoint: Vault URL, e.g. https://myvault.vault.azure.net
        app_config_endpoint: App Configuration URL
        client_id: Managed identity client id for DefaultAzureCredential
        timeout_seconds: Bound applied to every remote call
        reference_concurrency: How many Key Vault references to resolve at once
    """
    key_vault_endpoint: Optional[str] = None
    app_config_endpoint: Optional[str] = None
    client_id: Optional[str] = None
    timeout_seconds: float = 30.0
    reference_concurrency: int = 1


@dataclass
class PipelineConfig:
    """Complete pipeline configuration.

    Attributes:
        runtime_mode: Current runtime mode (e.g. "production", "development")
        production_modes: Modes that read from remote sources
        merge_policy: Which remote sources to merge in production-like mode
        env_file: Local KEY=VALUE file read outside production-like mode
        schema_path: Optional YAML schema for the typed extractor
        remote: Remote source settings
    """
    runtime_mode: str = "development"
    production_modes: tuple[str, ...] = ("production",)
    merge_policy: MergePolicy = MergePolicy.CONFIG_STORE
    env_file: str = ".env"
    schema_path: Optional[str] = None
    remote: RemoteSourceConfig = field(default_factory=RemoteSourceConfig)

    @property
    def is_production_like(self) -> bool:
        return is_production_like(self.runtime_mode, self.production_modes)

    @classmethod
    def from_env(
        cls,
        environ: Optional[dict] = None,
        mode_variable: str = "APP_ENV",
        prefix: str = "RUNTIME_CONFIG",
    ) -> "PipelineConfig":
        """Load pipeline configuration from environment variables.

        Environment variables:
            APP_ENV: Runtime mode (name set by ``mode_variable``)
            AZURE_KEY_VAULT_ENDPOINT: Key Vault URL
            AZURE_APPCONFIGURATION_ENDPOINT: App Configuration URL
            AZURE_CLIENT_ID: Managed identity client id

            {prefix}_ENV_FILE: Local .env path
            {prefix}_MERGE_POLICY: config_store|secret_store_and_config_store
            {prefix}_PRODUCTION_MODES: Comma separated production-like modes
            {prefix}_TIMEOUT_SECONDS: Float
            {prefix}_REFERENCE_CONCURRENCY: Int
            {prefix}_SCHEMA: YAML schema path
        """
        source = os.environ if environ is None else environ

        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            return source.get(f"{prefix}_{key}", default)

        def get_float(key: str, default: float) -> float:
            val = get(key)
            return float(val) if val else default

        def get_int(key: str, default: int) -> int:
            val = get(key)
            return int(val) if val else default

        modes = get("PRODUCTION_MODES")
        production_modes = (
            tuple(m.strip() for m in modes.split(",") if m.strip())
            if modes else ("production",)
        )

        remote = RemoteSourceConfig(
            key_vault_endpoint=source.get("AZURE_KEY_VAULT_ENDPOINT") or None,
            app_config_endpoint=source.get("AZURE_APPCONFIGURATION_ENDPOINT") or None,
            client_id=source.get("AZURE_CLIENT_ID") or None,
            timeout_seconds=get_float("TIMEOUT_SECONDS", 30.0),
            reference_concurrency=get_int("REFERENCE_CONCURRENCY", 1),
        )

        return cls(
            runtime_mode=source.get(mode_variable, "development"),
            production_modes=production_modes,
            merge_policy=MergePolicy(get("MERGE_POLICY", "config_store")),
            env_file=get("ENV_FILE", ".env"),
            schema_path=get("SCHEMA"),
            remote=remote,
        )

    @classmethod
    def for_testing(cls, runtime_mode: str = "production") -> "PipelineConfig":
        """Create a configuration pointing at placeholder endpoints.

        Intended to be paired with the fakes in ``runtimeconfig.testing``.
        """
        return cls(
            runtime_mode=runtime_mode,
            remote=RemoteSourceConfig(
                key_vault_endpoint="https://test-vault.vault.azure.net",
                app_config_endpoint="https://test-config.azconfig.io",
                timeout_seconds=5.0,
            ),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.production_modes:
            errors.append("production_modes cannot be empty")

        if self.remote.timeout_seconds <= 0:
            errors.append(
                f"remote.timeout_seconds must be positive, got {self.remote.timeout_seconds}"
            )
        if self.remote.reference_concurrency < 1:
            errors.append(
                f"remote.reference_concurrency must be >= 1, got {self.remote.reference_concurrency}"
            )

        for name in ("key_vault_endpoint", "app_config_endpoint"):
            endpoint = getattr(self.remote, name)
            if endpoint and not endpoint.startswith("https://"):
                errors.append(f"remote.{name} must be an https:// URL, got {endpoint!r}")

        return errors


def is_production_like(runtime_mode: Optional[str], production_modes=("production",)) -> bool:
    """Return True when ``runtime_mode`` should read from remote sources."""
    if not runtime_mode:
        return False
    return runtime_mode.strip().lower() in {m.lower() for m in production_modes}
