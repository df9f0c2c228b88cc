"""Pipeline configuration.

Settings that control how configuration is resolved, loaded from
environment variables or constructed programmatically.
"""

from .settings import MergePolicy, PipelineConfig, RemoteSourceConfig, is_production_like

__all__ = [
    "MergePolicy",
    "PipelineConfig",
    "RemoteSourceConfig",
    "is_production_like",
]
