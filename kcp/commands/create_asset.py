"""
`kcp create-asset`: Terraform projects and scripts for each migration step.
"""

import logging

import typer

from kcp.clients.confluent_cloud import ConfluentCloudClient
from kcp.commands import handle_errors, parse_bool, print_written
from kcp.exceptions import ValidationError
from kcp.generate import (
    bastion_host,
    connector_utility,
    migrate_connectors,
    migrate_schemas,
    migrate_topics,
    migration_infra,
    reverse_proxy,
    target_infra,
)
from kcp.generate.network import resolve_region_and_vpc
from kcp.models.requests import (
    BastionHostRequest,
    MigrationType,
    ReverseProxyRequest,
    TargetClusterWizardRequest,
)
from kcp.state import State
from kcp.util.naming import split_csv
from kcp.util.progress import console, operation_status

logger = logging.getLogger(__name__)

app = typer.Typer(help="Generate assets for the migration (Terraform, scripts, docs)")
connectors_app = typer.Typer(help="Migrate connectors to fully managed Confluent Cloud connectors")
app.add_typer(connectors_app, name="migrate-connectors")


def state_file_option(required: bool = True):
    return typer.Option(
        ... if required else None,
        "--state-file",
        envvar="STATE_FILE",
        help="Path to the kcp state file",
    )


def cluster_arn_option(required: bool = True):
    return typer.Option(
        ... if required else None,
        "--cluster-arn",
        envvar="CLUSTER_ARN",
        help="ARN of the MSK cluster in the state file",
    )


@app.command(name="bastion-host")
@handle_errors
def bastion_host_cmd(
    bastion_host_cidr: str = typer.Option(
        ..., "--bastion-host-cidr", envvar="BASTION_HOST_CIDR", help="CIDR of the public subnet"
    ),
    region: str = typer.Option(None, "--region", envvar="REGION", help="AWS region"),
    vpc_id: str = typer.Option(None, "--vpc-id", envvar="VPC_ID", help="VPC to deploy into"),
    state_file: str = state_file_option(required=False),
    cluster_arn: str = cluster_arn_option(required=False),
    create_igw: bool = typer.Option(
        False, "--create-igw", envvar="CREATE_IGW", help="Create an internet gateway in the VPC"
    ),
    security_group_ids: str = typer.Option(
        None,
        "--security-group-ids",
        envvar="SECURITY_GROUP_IDS",
        help="Existing security groups to use instead of creating one (comma separated)",
    ),
    output_dir: str = typer.Option(
        bastion_host.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create a bastion host in the MSK VPC."""
    region, vpc_id = resolve_region_and_vpc(region, vpc_id, state_file, cluster_arn)
    request = BastionHostRequest(
        region=region,
        vpc_id=vpc_id,
        public_subnet_cidr=bastion_host_cidr,
        create_igw=create_igw,
        security_group_ids=split_csv(security_group_ids),
    )
    with operation_status("Generating bastion host assets"):
        written = bastion_host.generate_bastion_host(request, output_dir)
    print_written(written, output_dir)


@app.command(name="reverse-proxy")
@handle_errors
def reverse_proxy_cmd(
    reverse_proxy_cidr: str = typer.Option(
        ..., "--reverse-proxy-cidr", envvar="REVERSE_PROXY_CIDR", help="CIDR of the public subnet"
    ),
    migration_infra_folder: str = typer.Option(
        ...,
        "--migration-infra-folder",
        envvar="MIGRATION_INFRA_FOLDER",
        help="Applied migration infrastructure folder (holds terraform.tfstate)",
    ),
    region: str = typer.Option(None, "--region", envvar="REGION", help="AWS region"),
    vpc_id: str = typer.Option(None, "--vpc-id", envvar="VPC_ID", help="VPC to deploy into"),
    state_file: str = state_file_option(required=False),
    cluster_arn: str = cluster_arn_option(required=False),
    security_group_ids: str = typer.Option(
        None,
        "--security-group-ids",
        envvar="SECURITY_GROUP_IDS",
        help="Existing security groups to use instead of creating one (comma separated)",
    ),
    output_dir: str = typer.Option(
        reverse_proxy.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create a reverse proxy to reach the private Confluent Cloud cluster."""
    region, vpc_id = resolve_region_and_vpc(region, vpc_id, state_file, cluster_arn)
    request = ReverseProxyRequest(
        region=region,
        vpc_id=vpc_id,
        public_subnet_cidr=reverse_proxy_cidr,
        confluent_cloud_cluster_bootstrap_endpoint=reverse_proxy.read_bootstrap_endpoint(
            migration_infra_folder
        ),
        security_group_ids=split_csv(security_group_ids),
    )
    with operation_status("Generating reverse proxy assets"):
        written = reverse_proxy.generate_reverse_proxy(request, output_dir)
    print_written(written, output_dir)


@app.command(name="migration-infra")
@handle_errors
def migration_infra_cmd(
    state_file: str = state_file_option(),
    cluster_arn: str = cluster_arn_option(),
    migration_type: str = typer.Option(
        ..., "--type", envvar="TYPE", help="Migration infrastructure type (1-6)"
    ),
    target_cluster_id: str = typer.Option(
        ..., "--target-cluster-id", envvar="TARGET_CLUSTER_ID", help="Confluent Cloud cluster ID"
    ),
    target_rest_endpoint: str = typer.Option(
        ...,
        "--target-rest-endpoint",
        envvar="TARGET_REST_ENDPOINT",
        help="Confluent Cloud cluster REST endpoint",
    ),
    cluster_link_name: str = typer.Option(
        migration_infra.DEFAULT_CLUSTER_LINK_NAME,
        "--cluster-link-name",
        envvar="CLUSTER_LINK_NAME",
        help="Name of the cluster link",
    ),
    target_environment_id: str = typer.Option(
        "",
        "--target-environment-id",
        envvar="TARGET_ENVIRONMENT_ID",
        help="Confluent Cloud environment ID (types 2-6)",
    ),
    target_bootstrap_endpoint: str = typer.Option(
        "",
        "--target-bootstrap-endpoint",
        envvar="TARGET_BOOTSTRAP_ENDPOINT",
        help="Confluent Cloud cluster bootstrap endpoint (types 3-6)",
    ),
    subnet_id: str = typer.Option(
        "", "--subnet-id", envvar="SUBNET_ID", help="Subnet for the external outbound link (type 2)"
    ),
    security_group_id: str = typer.Option(
        "",
        "--security-group-id",
        envvar="SECURITY_GROUP_ID",
        help="Security group for the external outbound link (type 2)",
    ),
    pl_subnet_ids: str = typer.Option(
        None,
        "--pl-subnet-ids",
        envvar="PL_SUBNET_IDS",
        help="Existing subnets for the private link endpoint (types 3-4, comma separated)",
    ),
    jump_cluster_instance_type: str = typer.Option(
        "",
        "--jump-cluster-instance-type",
        envvar="JUMP_CLUSTER_INSTANCE_TYPE",
        help="EC2 instance type of the jump cluster brokers (defaults to the MSK broker type)",
    ),
    jump_cluster_broker_storage: int = typer.Option(
        0,
        "--jump-cluster-broker-storage",
        envvar="JUMP_CLUSTER_BROKER_STORAGE",
        help="Jump cluster broker storage in GB (defaults to the MSK broker volume size)",
    ),
    jump_cluster_broker_subnet_cidr: str = typer.Option(
        None,
        "--jump-cluster-broker-subnet-cidr",
        envvar="JUMP_CLUSTER_BROKER_SUBNET_CIDR",
        help="One CIDR per MSK broker subnet for the jump cluster (types 5-6, comma separated)",
    ),
    jump_cluster_setup_host_subnet_cidr: str = typer.Option(
        "",
        "--jump-cluster-setup-host-subnet-cidr",
        envvar="JUMP_CLUSTER_SETUP_HOST_SUBNET_CIDR",
        help="CIDR of the jump cluster setup host subnet (types 3-6)",
    ),
    jump_cluster_iam_auth_role_name: str = typer.Option(
        "",
        "--jump-cluster-iam-auth-role-name",
        envvar="JUMP_CLUSTER_IAM_AUTH_ROLE_NAME",
        help="IAM role the jump cluster uses to read from MSK (types 4 and 6)",
    ),
    has_existing_internet_gateway: bool = typer.Option(
        False,
        "--has-existing-internet-gateway",
        envvar="HAS_EXISTING_INTERNET_GATEWAY",
        help="Reuse the VPC's internet gateway instead of creating one",
    ),
    output_dir: str = typer.Option(
        migration_infra.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create the cluster link infrastructure between MSK and Confluent Cloud."""
    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    options = migration_infra.MigrationInfraOptions(
        migration_type=MigrationType.parse(migration_type),
        target_cluster_id=target_cluster_id,
        target_rest_endpoint=target_rest_endpoint,
        cluster_link_name=cluster_link_name,
        target_environment_id=target_environment_id,
        target_bootstrap_endpoint=target_bootstrap_endpoint,
        subnet_id=subnet_id,
        security_group_id=security_group_id,
        pl_subnet_ids=split_csv(pl_subnet_ids),
        jump_cluster_instance_type=jump_cluster_instance_type,
        jump_cluster_broker_storage=jump_cluster_broker_storage,
        jump_cluster_broker_subnet_cidrs=split_csv(jump_cluster_broker_subnet_cidr),
        jump_cluster_setup_host_subnet_cidr=jump_cluster_setup_host_subnet_cidr,
        jump_cluster_iam_auth_role_name=jump_cluster_iam_auth_role_name,
        has_existing_internet_gateway=has_existing_internet_gateway,
    )
    request = migration_infra.build_request(cluster, options)

    with operation_status(f"Generating migration infrastructure ({request.migration_type.label})"):
        written = migration_infra.generate_migration_infra(request, output_dir)
    print_written(written, output_dir)


@app.command(name="migrate-topics")
@handle_errors
def migrate_topics_cmd(
    state_file: str = state_file_option(),
    cluster_arn: str = cluster_arn_option(),
    migration_infra_folder: str = typer.Option(
        ...,
        "--migration-infra-folder",
        envvar="MIGRATION_INFRA_FOLDER",
        help="Applied migration infrastructure folder (holds manifest.json and terraform.tfstate)",
    ),
    output_dir: str = typer.Option(
        migrate_topics.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create mirror topic scripts for the cluster link."""
    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    with operation_status("Generating mirror topic scripts"):
        written = migrate_topics.generate_migrate_topics(cluster, migration_infra_folder, output_dir)
    print_written(written, output_dir)


@app.command(name="migrate-schemas")
@handle_errors
def migrate_schemas_cmd(
    state_file: str = state_file_option(),
    url: str = typer.Option(
        ..., "--url", envvar="URL", help="Source Schema Registry URL recorded in the state file"
    ),
    cc_sr_rest_endpoint: str = typer.Option(
        ...,
        "--cc-sr-rest-endpoint",
        envvar="CC_SR_REST_ENDPOINT",
        help="Confluent Cloud Schema Registry REST endpoint",
    ),
    output_dir: str = typer.Option(
        migrate_schemas.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create schema exporters from a scanned Schema Registry to Confluent Cloud."""
    request = migrate_schemas.build_request(State.load(state_file), url, cc_sr_rest_endpoint)
    with operation_status("Generating schema exporters"):
        written = migrate_schemas.generate_migrate_schemas(request, output_dir)
    print_written(written, output_dir)


@app.command(name="target-infra")
@handle_errors
def target_infra_cmd(
    state_file: str = state_file_option(required=False),
    cluster_arn: str = cluster_arn_option(required=False),
    aws_region: str = typer.Option(
        None, "--aws-region", envvar="AWS_REGION", help="AWS region (without --state-file)"
    ),
    vpc_id: str = typer.Option(None, "--vpc-id", envvar="VPC_ID", help="VPC ID (without --state-file)"),
    needs_environment: str = typer.Option(
        "false",
        "--needs-environment",
        envvar="NEEDS_ENVIRONMENT",
        help="Create a new environment (true) or use an existing one (false)",
    ),
    env_name: str = typer.Option(
        "", "--env-name", envvar="ENV_NAME", help="Name of the new environment"
    ),
    env_id: str = typer.Option("", "--env-id", envvar="ENV_ID", help="ID of the existing environment"),
    needs_cluster: str = typer.Option(
        "false",
        "--needs-cluster",
        envvar="NEEDS_CLUSTER",
        help="Create a new cluster (true) or use an existing one (false)",
    ),
    cluster_name: str = typer.Option(
        "", "--cluster-name", envvar="CLUSTER_NAME", help="Name of the new cluster"
    ),
    cluster_id: str = typer.Option(
        "", "--cluster-id", envvar="CLUSTER_ID", help="ID of the existing cluster"
    ),
    cluster_type: str = typer.Option(
        "", "--cluster-type", envvar="CLUSTER_TYPE", help="Cluster type (dedicated or enterprise)"
    ),
    needs_private_link: str = typer.Option(
        "false",
        "--needs-private-link",
        envvar="NEEDS_PRIVATE_LINK",
        help="Set up private link; required for enterprise clusters",
    ),
    subnet_cidrs: str = typer.Option(
        None,
        "--subnet-cidrs",
        envvar="SUBNET_CIDRS",
        help="Subnet CIDRs for the private link endpoint (comma separated)",
    ),
    output_dir: str = typer.Option(
        target_infra.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Create the target Confluent Cloud environment, cluster and private link."""
    region, vpc = resolve_region_and_vpc(
        aws_region, vpc_id, state_file, cluster_arn, region_flag="--aws-region"
    )
    request = TargetClusterWizardRequest(
        aws_region=region,
        vpc_id=vpc,
        needs_environment=parse_bool(needs_environment, "--needs-environment"),
        environment_name=env_name,
        environment_id=env_id,
        needs_cluster=parse_bool(needs_cluster, "--needs-cluster"),
        cluster_name=cluster_name,
        cluster_type=cluster_type,
        cluster_id=cluster_id,
        needs_private_link=parse_bool(needs_private_link, "--needs-private-link"),
        subnet_cidr_ranges=split_csv(subnet_cidrs),
    )
    with operation_status("Generating target infrastructure"):
        written = target_infra.generate_target_infra(request, output_dir)
    print_written(written, output_dir)


def _translate_connectors(
    connectors: list[migrate_connectors.Connector],
    cc_environment_id: str,
    cc_cluster_id: str,
    cc_api_key: str,
    cc_api_secret: str,
    output_dir: str,
) -> None:
    client = ConfluentCloudClient(cc_api_key, cc_api_secret)
    written = migrate_connectors.generate_connectors(
        connectors, client, cc_environment_id, cc_cluster_id, output_dir
    )
    if written:
        print_written(written, output_dir)
    if len(written) < len(connectors):
        console.print(
            f"[yellow]⚠ {len(connectors) - len(written)} connector(s) could not be translated, "
            "see kcp.log for details[/yellow]"
        )


def cc_options():
    return {
        "cc_environment_id": typer.Option(
            ..., "--cc-environment-id", envvar="CC_ENVIRONMENT_ID", help="Confluent Cloud environment ID"
        ),
        "cc_cluster_id": typer.Option(
            ..., "--cc-cluster-id", envvar="CC_CLUSTER_ID", help="Confluent Cloud cluster ID"
        ),
        "cc_api_key": typer.Option(
            ..., "--cc-api-key", envvar="CC_API_KEY", help="Confluent Cloud API key"
        ),
        "cc_api_secret": typer.Option(
            ..., "--cc-api-secret", envvar="CC_API_SECRET", help="Confluent Cloud API secret"
        ),
    }


_CC = cc_options()


@connectors_app.command(name="msk")
@handle_errors
def migrate_msk_connectors_cmd(
    state_file: str = state_file_option(),
    cluster_arn: str = cluster_arn_option(),
    cc_environment_id: str = _CC["cc_environment_id"],
    cc_cluster_id: str = _CC["cc_cluster_id"],
    cc_api_key: str = _CC["cc_api_key"],
    cc_api_secret: str = _CC["cc_api_secret"],
    output_dir: str = typer.Option(
        "msk_connectors", "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Translate MSK Connect connectors into Confluent Cloud connector Terraform."""
    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    _translate_connectors(
        migrate_connectors.msk_connectors(cluster),
        cc_environment_id,
        cc_cluster_id,
        cc_api_key,
        cc_api_secret,
        output_dir,
    )


@connectors_app.command(name="self-managed")
@handle_errors
def migrate_self_managed_connectors_cmd(
    state_file: str = state_file_option(),
    cluster_arn: str = cluster_arn_option(),
    cc_environment_id: str = _CC["cc_environment_id"],
    cc_cluster_id: str = _CC["cc_cluster_id"],
    cc_api_key: str = _CC["cc_api_key"],
    cc_api_secret: str = _CC["cc_api_secret"],
    output_dir: str = typer.Option(
        "self_managed_connectors", "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Translate self-managed connectors into Confluent Cloud connector Terraform."""
    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    _translate_connectors(
        migrate_connectors.self_managed_connectors(cluster),
        cc_environment_id,
        cc_cluster_id,
        cc_api_key,
        cc_api_secret,
        output_dir,
    )


@connectors_app.command(name="connector-utility")
@handle_errors
def connector_utility_cmd(
    state_file: str = state_file_option(),
    cluster_arn: str = typer.Option(
        None,
        "--cluster-arn",
        envvar="CLUSTER_ARN",
        help="Only export this cluster (all clusters in the state file otherwise)",
    ),
    output_dir: str = typer.Option(
        connector_utility.DEFAULT_OUTPUT_DIR, "--output-dir", envvar="OUTPUT_DIR", help="Output directory"
    ),
):
    """Export connector configs for the connect-migration-utility."""
    state = State.load(state_file)
    if cluster_arn:
        clusters = [state.get_cluster_by_arn(cluster_arn)]
    else:
        clusters = list(state.iter_clusters())
    if not clusters:
        raise ValidationError(f"no clusters found in state file {state_file}")

    written = connector_utility.generate_connector_utility(clusters, output_dir)
    print_written(written, output_dir)
    console.print("\nSee the README.md file in the output directory for next steps.")
