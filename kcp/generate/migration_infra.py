"""
Migration infrastructure assets.

Builds a MigrationWizardRequest from a discovered cluster plus CLI flags and
writes the resulting Terraform project and migration manifest.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from kcp.exceptions import ValidationError
from kcp.hcl import migration_infra
from kcp.models.requests import (
    IAM,
    BrokerEndpoint,
    ExtOutboundBroker,
    MigrationType,
    MigrationWizardRequest,
)
from kcp.state import DiscoveredCluster, get_bootstrap_brokers_for_migration, write_manifest

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "migration-infra"
DEFAULT_CLUSTER_LINK_NAME = "kcp-msk-to-cc-link"
MSK_SASL_SCRAM_PORT = 9096


@dataclass
class MigrationInfraOptions:
    """CLI flag values for ``create-asset migration-infra``."""

    migration_type: MigrationType
    target_cluster_id: str
    target_rest_endpoint: str
    cluster_link_name: str = DEFAULT_CLUSTER_LINK_NAME
    target_environment_id: str = ""
    target_bootstrap_endpoint: str = ""
    subnet_id: str = ""
    security_group_id: str = ""
    pl_subnet_ids: list[str] = field(default_factory=list)
    jump_cluster_instance_type: str = ""
    jump_cluster_broker_storage: int = 0
    jump_cluster_broker_subnet_cidrs: list[str] = field(default_factory=list)
    jump_cluster_setup_host_subnet_cidr: str = ""
    jump_cluster_iam_auth_role_name: str = ""
    has_existing_internet_gateway: bool = False


def validate_options(options: MigrationInfraOptions) -> None:
    """Check the flags each migration type needs."""
    migration_type = options.migration_type

    if migration_type != MigrationType.PUBLIC_MSK_ENDPOINTS and not options.target_environment_id:
        raise ValidationError(
            f"required flag `--target-environment-id` not set for migration type {int(migration_type)}"
        )

    if not migration_type.uses_jump_clusters:
        return

    if not options.target_bootstrap_endpoint:
        raise ValidationError(
            f"required flag `--target-bootstrap-endpoint` not set for migration type {int(migration_type)}"
        )
    if not options.jump_cluster_setup_host_subnet_cidr:
        raise ValidationError(
            "required flag `--jump-cluster-setup-host-subnet-cidr` not set "
            f"for migration type {int(migration_type)}"
        )
    if not migration_type.reuses_existing_subnets and not options.jump_cluster_broker_subnet_cidrs:
        raise ValidationError(
            "required flag `--jump-cluster-broker-subnet-cidr` not set "
            f"for migration type {int(migration_type)}"
        )
    if migration_type.auth_type == IAM and not options.jump_cluster_iam_auth_role_name:
        raise ValidationError(
            "required flag `--jump-cluster-iam-auth-role-name` not set "
            f"for migration type {int(migration_type)}"
        )


def build_ext_outbound_brokers(cluster: DiscoveredCluster) -> list[ExtOutboundBroker]:
    """
    One broker entry per MSK broker subnet.

    Broker hostnames come from the SASL/SCRAM bootstrap string, sorted so that
    the n-th hostname belongs to broker n.
    """
    bootstrap = cluster.bootstrap_brokers.get("BootstrapBrokerStringSaslScram", "")
    if not bootstrap:
        raise ValidationError("SASL/SCRAM bootstrap brokers not available for this cluster")

    hosts = sorted(
        b.strip().removesuffix(f":{MSK_SASL_SCRAM_PORT}") for b in bootstrap.split(",") if b.strip()
    )

    brokers = []
    for subnet in cluster.subnets:
        broker_id = int(subnet["subnet_msk_broker_id"])
        if broker_id < 1 or broker_id > len(hosts):
            raise ValidationError(
                f"broker {broker_id} has no matching SASL/SCRAM bootstrap broker on cluster {cluster.name}"
            )
        brokers.append(
            ExtOutboundBroker(
                id=str(broker_id),
                subnet_id=subnet["subnet_id"],
                endpoints=[
                    BrokerEndpoint(
                        host=hosts[broker_id - 1],
                        port=MSK_SASL_SCRAM_PORT,
                        ip=subnet.get("private_ip_address", ""),
                    )
                ],
            )
        )
    return brokers


def build_request(
    cluster: DiscoveredCluster, options: MigrationInfraOptions
) -> MigrationWizardRequest:
    """
    Assemble the migration request, filling defaults from the discovered cluster.

    Args:
        cluster: Cluster from the state file
        options: CLI flag values

    Returns:
        Request ready for the HCL generator
    """
    if cluster.provisioned is None:
        raise ValidationError(
            f"cluster {cluster.name} has no provisioned configuration",
            "Serverless clusters are not supported for migration.",
        )

    validate_options(options)
    migration_type = options.migration_type

    request = MigrationWizardRequest(
        migration_type=migration_type,
        msk_region=cluster.region,
        vpc_id=cluster.vpc_id,
        msk_cluster_id=cluster.cluster_id,
        cluster_link_name=options.cluster_link_name or DEFAULT_CLUSTER_LINK_NAME,
        target_cluster_id=options.target_cluster_id,
        target_rest_endpoint=options.target_rest_endpoint,
        target_environment_id=options.target_environment_id,
        target_bootstrap_endpoint=options.target_bootstrap_endpoint,
    )

    bootstrap = get_bootstrap_brokers_for_migration(cluster, migration_type)
    if migration_type.auth_type == IAM:
        request.msk_sasl_iam_bootstrap_servers = bootstrap
    else:
        request.msk_sasl_scram_bootstrap_servers = bootstrap

    if migration_type == MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK:
        request.ext_outbound_subnet_id = options.subnet_id or _first(
            cluster.subnet_ids, "no subnet IDs found in cluster networking information"
        )
        request.ext_outbound_security_group_id = options.security_group_id or _first(
            cluster.security_groups, "no security groups found in cluster networking information"
        )
        request.ext_outbound_brokers = build_ext_outbound_brokers(cluster)

    elif migration_type.uses_jump_clusters:
        request.jump_cluster_instance_type = (
            options.jump_cluster_instance_type or cluster.instance_type.removeprefix("kafka.")
        )
        request.jump_cluster_broker_storage = (
            options.jump_cluster_broker_storage or cluster.broker_volume_size
        )
        request.jump_cluster_setup_host_subnet_cidr = options.jump_cluster_setup_host_subnet_cidr
        request.jump_cluster_iam_auth_role_name = options.jump_cluster_iam_auth_role_name
        request.has_existing_internet_gateway = options.has_existing_internet_gateway

        if migration_type.reuses_existing_subnets:
            request.existing_private_link_subnet_ids = options.pl_subnet_ids or cluster.subnet_ids
        else:
            cidrs = options.jump_cluster_broker_subnet_cidrs
            if cluster.subnet_ids and len(cidrs) != len(cluster.subnet_ids):
                raise ValidationError(
                    f"expected {len(cluster.subnet_ids)} values for "
                    f"`--jump-cluster-broker-subnet-cidr`, got {len(cidrs)}",
                    "Provide one CIDR per MSK broker subnet.",
                )
            request.jump_cluster_broker_subnet_cidrs = list(cidrs)

    return request


def _first(values: list[str], error: str) -> str:
    if not values:
        raise ValidationError(error)
    return values[0]


def generate_migration_infra(
    request: MigrationWizardRequest, output_dir: str | Path = DEFAULT_OUTPUT_DIR
) -> list[Path]:
    """Write the migration infrastructure project and its manifest."""
    output_dir = Path(output_dir)
    logger.info(
        f"Generating migration infrastructure type {int(request.migration_type)} "
        f"({request.migration_type.label}) in {output_dir}"
    )

    project = migration_infra.generate_terraform_project(request)
    written = project.write(output_dir)
    written.append(write_manifest(output_dir, request.migration_type))
    return written
