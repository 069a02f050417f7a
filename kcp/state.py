"""
State file, terraform state and migration manifest handling.
"""

import json
import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from kcp import __commit__, __date__, __version__
from kcp.exceptions import (
    ClusterNotFoundError,
    StateFileError,
    TerraformStateError,
    ValidationError,
)
from kcp.models.requests import MigrationType
from kcp.util.files import read_json, write_json

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
TERRAFORM_STATE_FILE = "terraform.tfstate"

# Terraform outputs written by the migration infrastructure project
CC_CLUSTER_API_KEY = "confluent_cloud_cluster_api_key"
CC_CLUSTER_API_SECRET = "confluent_cloud_cluster_api_key_secret"
CC_CLUSTER_ID = "confluent_cloud_cluster_id"
CC_CLUSTER_REST_ENDPOINT = "confluent_cloud_cluster_rest_endpoint"
CC_CLUSTER_BOOTSTRAP_ENDPOINT = "confluent_cloud_cluster_bootstrap_endpoint"
CP_CONTROLLER_BOOTSTRAP_SERVER = "confluent_platform_controller_bootstrap_server"
CLUSTER_LINK_NAME = "cluster_link_name"

CLUSTER_LINK_OUTPUTS = [
    CC_CLUSTER_API_KEY,
    CC_CLUSTER_API_SECRET,
    CC_CLUSTER_ID,
    CC_CLUSTER_REST_ENDPOINT,
    CLUSTER_LINK_NAME,
]
JUMP_CLUSTER_OUTPUTS = CLUSTER_LINK_OUTPUTS + [
    CC_CLUSTER_BOOTSTRAP_ENDPOINT,
    CP_CONTROLLER_BOOTSTRAP_SERVER,
]

# Auth types as written in the credentials file
AUTH_UNAUTHENTICATED_PLAINTEXT = "unauthenticated_plaintext"
AUTH_UNAUTHENTICATED_TLS = "unauthenticated_tls"
AUTH_IAM = "iam"
AUTH_TLS = "tls"
AUTH_SASL_SCRAM = "sasl_scram"

_BOOTSTRAP_KEYS = {
    AUTH_UNAUTHENTICATED_PLAINTEXT: ["BootstrapBrokerString"],
    AUTH_UNAUTHENTICATED_TLS: ["BootstrapBrokerStringTls", "BootstrapBrokerStringPublicTls"],
    AUTH_TLS: ["BootstrapBrokerStringTls", "BootstrapBrokerStringPublicTls"],
    AUTH_IAM: ["BootstrapBrokerStringSaslIam", "BootstrapBrokerStringPublicSaslIam"],
    AUTH_SASL_SCRAM: [
        "BootstrapBrokerStringSaslScram",
        "BootstrapBrokerStringPublicSaslScram",
    ],
}


class DiscoveredCluster:
    """View over one cluster entry of the state file.

    Accessors read from and write to the underlying state dictionary, so
    scanner updates are persisted together with the state.
    """

    def __init__(self, data: dict[str, Any]):
        self.data = data

    @property
    def name(self) -> str:
        return self.data.get("name", "")

    @property
    def arn(self) -> str:
        return self.data.get("arn", "")

    @property
    def region(self) -> str:
        return self.data.get("region", "")

    @property
    def aws_client_information(self) -> dict[str, Any]:
        return self.data.setdefault("aws_client_information", {})

    @property
    def kafka_admin_client_information(self) -> dict[str, Any]:
        return self.data.setdefault("kafka_admin_client_information", {})

    @kafka_admin_client_information.setter
    def kafka_admin_client_information(self, value: dict[str, Any]) -> None:
        self.data["kafka_admin_client_information"] = value

    @property
    def msk_cluster_config(self) -> dict[str, Any]:
        return self.aws_client_information.get("msk_cluster_config") or {}

    @property
    def provisioned(self) -> dict[str, Any] | None:
        return self.msk_cluster_config.get("Provisioned")

    @property
    def bootstrap_brokers(self) -> dict[str, str]:
        return self.aws_client_information.get("bootstrap_brokers") or {}

    @property
    def networking(self) -> dict[str, Any]:
        return self.aws_client_information.get("cluster_networking") or {}

    @property
    def vpc_id(self) -> str:
        return self.networking.get("vpc_id", "")

    @property
    def subnet_ids(self) -> list[str]:
        return list(self.networking.get("subnet_ids") or [])

    @property
    def security_groups(self) -> list[str]:
        return list(self.networking.get("security_groups") or [])

    @property
    def subnets(self) -> list[dict[str, Any]]:
        return list(self.networking.get("subnets") or [])

    @property
    def msk_connectors(self) -> list[dict[str, Any]]:
        return list(self.aws_client_information.get("connectors") or [])

    @property
    def cluster_id(self) -> str:
        return self.kafka_admin_client_information.get("cluster_id", "")

    @property
    def topic_details(self) -> list[dict[str, Any]]:
        topics = self.kafka_admin_client_information.get("topics") or {}
        return list(topics.get("details") or [])

    @property
    def acls(self) -> list[dict[str, Any]]:
        return list(self.kafka_admin_client_information.get("acls") or [])

    @property
    def self_managed_connectors(self) -> list[dict[str, Any]]:
        connectors = self.kafka_admin_client_information.get("self_managed_connectors") or {}
        return list(connectors.get("connectors") or [])

    @self_managed_connectors.setter
    def self_managed_connectors(self, connectors: list[dict[str, Any]]) -> None:
        self.kafka_admin_client_information["self_managed_connectors"] = {
            "connectors": connectors
        }

    @property
    def instance_type(self) -> str:
        provisioned = self.provisioned or {}
        return (provisioned.get("BrokerNodeGroupInfo") or {}).get("InstanceType", "")

    @property
    def broker_volume_size(self) -> int:
        provisioned = self.provisioned or {}
        storage = (provisioned.get("BrokerNodeGroupInfo") or {}).get("StorageInfo") or {}
        return int((storage.get("EbsStorageInfo") or {}).get("VolumeSize") or 0)


class State:
    """The kcp discovery state file."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data = data if data is not None else {}
        self.data.setdefault("regions", [])

    @classmethod
    def load(cls, path: str | Path) -> "State":
        """
        Load a state file.

        Args:
            path: Path to the JSON state file

        Returns:
            Loaded State
        """
        path = Path(path)
        try:
            data = read_json(path)
        except OSError as e:
            raise StateFileError(str(path), e.strerror or str(e)) from e
        except json.JSONDecodeError as e:
            raise StateFileError(str(path), f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StateFileError(str(path), "top level value must be an object")

        return cls(data)

    def persist(self, path: str | Path) -> Path:
        """Write the state back to disk with refreshed build info and timestamp."""
        self.data["kcp_build_info"] = {
            "version": __version__,
            "commit": __commit__,
            "date": __date__,
        }
        self.data["timestamp"] = datetime.now(timezone.utc).isoformat()
        written = write_json(path, self.data)
        logger.info(f"State saved to {path}")
        return written

    @property
    def regions(self) -> list[dict[str, Any]]:
        return self.data["regions"]

    @property
    def schema_registries(self) -> list[dict[str, Any]]:
        return self.data.setdefault("schema_registries", [])

    def iter_clusters(self) -> Iterator[DiscoveredCluster]:
        for region in self.regions:
            for cluster in region.get("clusters") or []:
                yield DiscoveredCluster(cluster)

    def get_cluster_by_arn(self, cluster_arn: str) -> DiscoveredCluster:
        for cluster in self.iter_clusters():
            if cluster.arn == cluster_arn:
                return cluster
        raise ClusterNotFoundError(cluster_arn)

    def find_cluster(self, region: str, cluster_arn: str) -> DiscoveredCluster:
        """Look up a cluster within a single region."""
        for region_data in self.regions:
            if region_data.get("name") != region:
                continue
            for cluster in region_data.get("clusters") or []:
                if cluster.get("arn") == cluster_arn:
                    return DiscoveredCluster(cluster)
        raise ClusterNotFoundError(cluster_arn)

    def get_schema_registry(self, url: str) -> dict[str, Any]:
        for registry in self.schema_registries:
            if registry.get("url") == url:
                return registry
        raise ValidationError(
            f"schema registry with URL {url} not found in state file",
            "Scan it first with:\n  kcp scan schema-registry --state-file <file> --url <url>",
        )

    def upsert_schema_registry(self, registry: dict[str, Any]) -> None:
        """Replace the registry with the same URL or append a new one."""
        registries = self.schema_registries
        for i, existing in enumerate(registries):
            if existing.get("url") == registry.get("url"):
                registries[i] = registry
                return
        registries.append(registry)


def get_bootstrap_brokers_for_auth(cluster: DiscoveredCluster, auth_type: str) -> list[str]:
    """
    Pick the bootstrap broker list matching an authentication method.

    Private listeners are preferred over public ones.
    """
    keys = _BOOTSTRAP_KEYS.get(auth_type)
    if keys is None:
        raise ValidationError(f"Auth type: {auth_type} not yet supported")

    brokers = cluster.bootstrap_brokers
    for key in keys:
        value = brokers.get(key)
        if value:
            return [b.strip() for b in value.split(",") if b.strip()]

    raise ValidationError(
        f"no bootstrap brokers found for {auth_type} authentication on cluster {cluster.name}"
    )


def get_bootstrap_brokers_for_migration(
    cluster: DiscoveredCluster, migration_type: MigrationType
) -> str:
    """Return the comma separated bootstrap string the cluster link connects to."""
    if not isinstance(migration_type, MigrationType):
        raise ValidationError(f"invalid target type: {migration_type}")

    brokers = cluster.bootstrap_brokers
    if migration_type == MigrationType.PUBLIC_MSK_ENDPOINTS:
        value = brokers.get("BootstrapBrokerStringPublicSaslScram", "")
    elif migration_type.auth_type == AUTH_IAM:
        value = brokers.get("BootstrapBrokerStringSaslIam", "")
    else:
        value = brokers.get("BootstrapBrokerStringSaslScram", "")

    if not value:
        raise ValidationError(
            f"no bootstrap brokers found for migration type {int(migration_type)} "
            f"on cluster {cluster.name}"
        )
    return value


def parse_terraform_state(path: str | Path, required_fields: list[str]) -> dict[str, str]:
    """
    Read the outputs of a terraform.tfstate file.

    Args:
        path: Path to terraform.tfstate
        required_fields: Output names that must be present and non-empty

    Returns:
        Output values keyed by output name
    """
    path = Path(path)
    try:
        data = read_json(path)
    except OSError as e:
        raise TerraformStateError(f"cannot read {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise TerraformStateError(f"invalid JSON in {path}: {e}") from e

    outputs = data.get("outputs") or {}
    values: dict[str, str] = {}
    for name in required_fields:
        output = outputs.get(name)
        value = output.get("value") if isinstance(output, dict) else None
        if value in (None, ""):
            raise TerraformStateError(f"output '{name}' is missing or empty in {path}")
        values[name] = value

    return values


def write_manifest(folder: str | Path, migration_type: MigrationType) -> Path:
    return write_json(Path(folder) / MANIFEST_FILE, {"migration_infra_type": int(migration_type)})


def read_manifest(folder: str | Path) -> MigrationType:
    """Read the migration type recorded when the migration infra was generated."""
    path = Path(folder) / MANIFEST_FILE
    try:
        data = read_json(path)
    except (OSError, json.JSONDecodeError) as e:
        raise TerraformStateError(f"cannot read migration manifest {path}: {e}") from e

    return MigrationType.parse(data.get("migration_infra_type"))
