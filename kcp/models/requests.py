"""Request objects passed from the CLI layer to the HCL generators.

Requests are populated once from the state file and CLI flags and are then
treated as read-only by every generator.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from kcp.exceptions import ValidationError

SASL_SCRAM = "sasl_scram"
IAM = "iam"


class MigrationType(IntEnum):
    """Migration infrastructure shapes selected with ``--type``."""

    PUBLIC_MSK_ENDPOINTS = 1
    EXTERNAL_OUTBOUND_CLUSTER_LINK = 2
    JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM = 3
    JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM = 4
    JUMP_CLUSTER_NEW_SUBNETS_SASL_SCRAM = 5
    JUMP_CLUSTER_NEW_SUBNETS_IAM = 6

    @classmethod
    def parse(cls, value: str | int) -> "MigrationType":
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            valid = ", ".join(str(t.value) for t in cls)
            raise ValidationError(
                f"invalid --type: {value}",
                f"Migration type must be one of: {valid}",
            ) from None

    @property
    def label(self) -> str:
        return MIGRATION_TYPE_LABELS[self]

    @property
    def uses_jump_clusters(self) -> bool:
        return self >= MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM

    @property
    def reuses_existing_subnets(self) -> bool:
        return self in (
            MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM,
            MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM,
        )

    @property
    def auth_type(self) -> str:
        if self in (
            MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM,
            MigrationType.JUMP_CLUSTER_NEW_SUBNETS_IAM,
        ):
            return IAM
        return SASL_SCRAM


MIGRATION_TYPE_LABELS = {
    MigrationType.PUBLIC_MSK_ENDPOINTS: "Cluster Link [SASL/SCRAM]",
    MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK: "External Outbound Cluster Link [SASL/SCRAM]",
    MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM: (
        "Jump Cluster, Reuse Existing Subnets [SASL/SCRAM]"
    ),
    MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM: (
        "Jump Cluster, Reuse Existing Subnets [IAM]"
    ),
    MigrationType.JUMP_CLUSTER_NEW_SUBNETS_SASL_SCRAM: "Jump Cluster, New Subnets [SASL/SCRAM]",
    MigrationType.JUMP_CLUSTER_NEW_SUBNETS_IAM: "Jump Cluster, New Subnets [IAM]",
}


@dataclass(frozen=True)
class BrokerEndpoint:
    host: str
    port: int
    ip: str


@dataclass(frozen=True)
class ExtOutboundBroker:
    """An MSK broker reachable through the egress private link."""

    id: str
    subnet_id: str
    endpoints: list[BrokerEndpoint]

    def to_hcl(self) -> dict:
        return {
            "id": self.id,
            "subnet_id": self.subnet_id,
            "endpoints": [
                {"host": e.host, "port": e.port, "ip": e.ip} for e in self.endpoints
            ],
        }


@dataclass
class MigrationWizardRequest:
    """Everything needed to generate the migration infrastructure project."""

    migration_type: MigrationType
    msk_region: str
    vpc_id: str
    msk_cluster_id: str
    cluster_link_name: str
    target_cluster_id: str
    target_rest_endpoint: str
    target_environment_id: str = ""
    target_bootstrap_endpoint: str = ""

    msk_sasl_scram_bootstrap_servers: str = ""
    msk_sasl_iam_bootstrap_servers: str = ""

    # External outbound cluster link
    ext_outbound_subnet_id: str = ""
    ext_outbound_security_group_id: str = ""
    ext_outbound_brokers: list[ExtOutboundBroker] = field(default_factory=list)

    # Jump clusters
    jump_cluster_instance_type: str = ""
    jump_cluster_broker_storage: int = 0
    jump_cluster_broker_subnet_cidrs: list[str] = field(default_factory=list)
    jump_cluster_setup_host_subnet_cidr: str = ""
    jump_cluster_iam_auth_role_name: str = ""
    existing_private_link_subnet_ids: list[str] = field(default_factory=list)
    has_existing_internet_gateway: bool = False

    @property
    def has_public_msk_endpoints(self) -> bool:
        return self.migration_type == MigrationType.PUBLIC_MSK_ENDPOINTS

    @property
    def use_jump_clusters(self) -> bool:
        return self.migration_type.uses_jump_clusters

    @property
    def reuse_existing_subnets(self) -> bool:
        return self.migration_type.reuses_existing_subnets

    @property
    def msk_jump_cluster_auth_type(self) -> str:
        return self.migration_type.auth_type

    @property
    def msk_jump_cluster_bootstrap_brokers(self) -> str:
        if self.msk_jump_cluster_auth_type == SASL_SCRAM:
            return self.msk_sasl_scram_bootstrap_servers
        return self.msk_sasl_iam_bootstrap_servers


@dataclass
class ReverseProxyRequest:
    region: str
    vpc_id: str
    public_subnet_cidr: str
    confluent_cloud_cluster_bootstrap_endpoint: str
    security_group_ids: list[str] = field(default_factory=list)


@dataclass
class BastionHostRequest:
    region: str
    vpc_id: str
    public_subnet_cidr: str
    create_igw: bool = False
    security_group_ids: list[str] = field(default_factory=list)


@dataclass
class TargetClusterWizardRequest:
    """Inputs for the target Confluent Cloud environment and cluster."""

    aws_region: str
    vpc_id: str = ""
    needs_environment: bool = True
    environment_name: str = ""
    environment_id: str = ""
    needs_cluster: bool = True
    cluster_name: str = ""
    cluster_type: str = ""
    cluster_id: str = ""
    needs_private_link: bool = False
    subnet_cidr_ranges: list[str] = field(default_factory=list)


@dataclass
class SchemaExporterRequest:
    """Inputs for exporting one source schema registry to Confluent Cloud."""

    source_url: str
    target_url: str
    contexts: list[str] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)
