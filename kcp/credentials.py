"""
Cluster credentials file used by `kcp scan clusters`.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validate

from kcp.exceptions import ConfigurationError, InvalidCredentialsError
from kcp.state import (
    AUTH_IAM,
    AUTH_SASL_SCRAM,
    AUTH_TLS,
    AUTH_UNAUTHENTICATED_PLAINTEXT,
    AUTH_UNAUTHENTICATED_TLS,
)

SCHEMA_FILE = Path(__file__).parent / "schemas" / "credentials.schema.json"

# Order in which enabled auth methods are reported
AUTH_METHOD_ORDER = [
    AUTH_UNAUTHENTICATED_PLAINTEXT,
    AUTH_UNAUTHENTICATED_TLS,
    AUTH_IAM,
    AUTH_SASL_SCRAM,
    AUTH_TLS,
]


@dataclass
class ClusterAuth:
    """Authentication settings for one MSK cluster."""

    name: str
    arn: str
    auth_method: dict[str, dict[str, Any]] = field(default_factory=dict)

    def enabled_auth_methods(self) -> list[str]:
        return [
            method
            for method in AUTH_METHOD_ORDER
            if (self.auth_method.get(method) or {}).get("use", False)
        ]

    def selected_auth_type(self) -> str:
        enabled = self.enabled_auth_methods()
        if not enabled:
            raise ConfigurationError("no authentication method enabled for cluster")
        return enabled[0]

    def settings(self, method: str) -> dict[str, Any]:
        return self.auth_method.get(method) or {}


@dataclass
class RegionAuth:
    name: str
    clusters: list[ClusterAuth] = field(default_factory=list)


@dataclass
class Credentials:
    """Parsed credentials file."""

    regions: list[RegionAuth] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credentials":
        regions = []
        for region in data.get("regions") or []:
            clusters = [
                ClusterAuth(
                    name=cluster.get("name", ""),
                    arn=cluster["arn"],
                    auth_method=cluster.get("auth_method") or {},
                )
                for cluster in region.get("clusters") or []
            ]
            regions.append(RegionAuth(name=region["name"], clusters=clusters))
        return cls(regions=regions)

    def validate(self) -> list[str]:
        """Return a list of problems; empty when the file is usable."""
        errors = []
        for region in self.regions:
            for cluster in region.clusters:
                if len(cluster.enabled_auth_methods()) > 1:
                    errors.append(
                        f"more than one authentication method enabled for {cluster.arn}"
                    )
        return errors


def load_credentials(path: str | Path) -> Credentials:
    """
    Load and validate a credentials YAML file.

    Args:
        path: Path to the credentials YAML file

    Returns:
        Parsed Credentials
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigurationError(f"failed to read credentials file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse credentials YAML {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidCredentialsError(["expected a mapping at the top level"], str(path))

    schema = json.loads(SCHEMA_FILE.read_text())
    try:
        validate(instance=data, schema=schema)
    except SchemaValidationError as e:
        location = ".".join(str(p) for p in e.path) or "<root>"
        raise InvalidCredentialsError([f"{location}: {e.message}"], str(path)) from e

    credentials = Credentials.from_dict(data)
    errors = credentials.validate()
    if errors:
        raise InvalidCredentialsError(errors, str(path))

    return credentials
