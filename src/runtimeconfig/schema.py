"""Declarative schema mapping configuration fields to environment variables.

A schema file is YAML keyed by section and field name:

    database:
      connectionString:
        env: AZURE_COSMOS_CONNECTION_STRING
        required: true
      databaseName:
        env: AZURE_COSMOS_DATABASE_NAME
        default: Todo

A bare string is shorthand for ``{env: <string>}``. Fields left out of a
file keep the built-in mapping.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

import yaml

from .environment import EnvironmentStore


@dataclass(frozen=True)
class FieldSpec:
    """How one configuration field is read from the environment."""
    env: str
    default: str = ""
    required: bool = False


def _default_fields() -> dict[str, FieldSpec]:
    return {
        "database.connectionString": FieldSpec(
            env="AZURE_COSMOS_CONNECTION_STRING", required=True
        ),
        "database.databaseName": FieldSpec(
            env="AZURE_COSMOS_DATABASE_NAME", default="Todo"
        ),
        "observability.connectionString": FieldSpec(
            env="APPLICATIONINSIGHTS_CONNECTION_STRING", required=True
        ),
        "observability.roleName": FieldSpec(
            env="APPLICATIONINSIGHTS_ROLE_NAME", default="API"
        ),
    }


@dataclass
class ConfigSchema:
    """Field path (``section.field``) to ``FieldSpec``."""
    fields: dict[str, FieldSpec] = field(default_factory=_default_fields)

    @classmethod
    def from_file(cls, path: str | Path) -> "ConfigSchema":
        """Load schema overrides from a YAML file."""
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "ConfigSchema":
        """Create a schema from a nested dict, starting from the defaults.

        Raises:
            ValueError: For unknown sections/fields or entries without ``env``
        """
        schema = cls()
        errors = []

        for section, entries in data.items():
            if not isinstance(entries, dict):
                errors.append(f"section '{section}' must be a mapping")
                continue
            for name, entry in entries.items():
                path = f"{section}.{name}"
                if path not in schema.fields:
                    errors.append(f"unknown field '{path}'")
                    continue
                if isinstance(entry, str):
                    entry = {"env": entry}
                if not isinstance(entry, dict) or not entry.get("env"):
                    errors.append(f"field '{path}' needs an 'env' variable name")
                    continue
                current = schema.fields[path]
                schema.fields[path] = replace(
                    current,
                    env=str(entry["env"]),
                    default=str(entry.get("default", current.default)),
                    required=bool(entry.get("required", current.required)),
                )

        if errors:
            raise ValueError(f"Invalid config schema: {errors}")
        return schema

    def spec(self, path: str) -> FieldSpec:
        return self.fields[path]

    def read(self, path: str, env: EnvironmentStore) -> str:
        """Return the field's value from ``env``, or its default when unset or empty."""
        spec = self.fields[path]
        value: Optional[str] = env.get(spec.env)
        if not value:
            return spec.default
        return value

    def required_fields(self) -> list[str]:
        return [path for path, spec in self.fields.items() if spec.required]
