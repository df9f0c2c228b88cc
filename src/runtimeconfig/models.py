"""Resolved configuration consumed by the application."""

from dataclasses import asdict, dataclass, field


REDACTED = "***"


@dataclass(frozen=True)
class DatabaseConfig:
    """Cosmos DB (Mongo API) connection settings."""
    connection_string: str = ""
    database_name: str = ""


@dataclass(frozen=True)
class ObservabilityConfig:
    """Application Insights settings."""
    connection_string: str = ""
    role_name: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Final typed configuration.

    Always fully populated; a required value that could not be resolved is
    the empty string, and it is up to the consumer whether that is fatal.
    """
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def to_dict(self, redact: bool = True) -> dict:
        """Serialize to a plain dict, masking connection strings by default."""
        data = asdict(self)
        if redact:
            for section in data.values():
                if section.get("connection_string"):
                    section["connection_string"] = REDACTED
        return data
