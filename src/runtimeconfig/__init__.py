"""Runtime configuration resolution.

Resolves an application's configuration before it starts serving:

1. **Merge**: outside production, a local ``.env`` fills in whatever the
   process environment lacks. In production, Azure App Configuration (and
   optionally every Azure Key Vault secret) overwrites the environment,
   with Key Vault references in App Configuration dereferenced on the way.

2. **Extract**: the merged environment is read through a declarative
   schema into a typed ``AppConfig``. Missing connection strings are
   warned about, never fatal.

Usage:
    from runtimeconfig import get_config

    app_config = await get_config()
    client = MongoClient(app_config.database.connection_string)
"""

from .config import MergePolicy, PipelineConfig, RemoteSourceConfig
from .environment import EnvironmentStore, InMemoryEnvironment, ProcessEnvironment
from .errors import (
    ConfigResolutionError,
    ConfigStoreAuthError,
    RemoteSourceAuthError,
    SecretReferenceError,
    SecretStoreAuthError,
)
from .extractor import TypedConfigExtractor
from .merger import EnvironmentMerger
from .models import AppConfig, DatabaseConfig, ObservabilityConfig
from .pipeline import ConfigPipeline, PipelineState, get_config
from .schema import ConfigSchema, FieldSpec

__all__ = [
    "get_config",
    "ConfigPipeline",
    "PipelineState",
    "PipelineConfig",
    "RemoteSourceConfig",
    "MergePolicy",
    "EnvironmentStore",
    "ProcessEnvironment",
    "InMemoryEnvironment",
    "EnvironmentMerger",
    "TypedConfigExtractor",
    "ConfigSchema",
    "FieldSpec",
    "AppConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "ConfigResolutionError",
    "RemoteSourceAuthError",
    "SecretStoreAuthError",
    "ConfigStoreAuthError",
    "SecretReferenceError",
]
