"""
Module variable and output tables for the generated Terraform projects.

Each table lists the inputs of one module together with where the value comes
from: a root level variable filled from the request, or another module's
output. The root ``variables.tf``, ``inputs.auto.tfvars`` and the ``module``
blocks of the root ``main.tf`` are all derived from these tables.
"""

from typing import Any

from kcp.hcl.writer import Block, Raw, module_output, render, var
from kcp.models.requests import (
    IAM,
    SASL_SCRAM,
    MigrationType,
    MigrationWizardRequest,
    TargetClusterWizardRequest,
)
from kcp.models.terraform import ModuleVariable, TerraformOutput, TerraformVariable

NETWORKING = "networking"
JUMP_CLUSTERS = "jump_clusters"
CONFLUENT_CLOUD = "confluent_cloud"


def _empty(_request: Any) -> str:
    return ""


def _is_iam(request: MigrationWizardRequest) -> bool:
    return request.msk_jump_cluster_auth_type == IAM


def _is_sasl_scram(request: MigrationWizardRequest) -> bool:
    return request.msk_jump_cluster_auth_type == SASL_SCRAM


# Providers


def confluent_provider_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable("confluent_cloud_api_key", "Confluent Cloud API Key"),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_api_secret", "Confluent Cloud API Secret", sensitive=True
            ),
            value_extractor=_empty,
        ),
    ]


def provider_variables() -> list[ModuleVariable]:
    return confluent_provider_variables() + [
        ModuleVariable(
            TerraformVariable("aws_region", "The AWS region"),
            value_extractor=lambda r: r.msk_region,
        ),
    ]


def target_provider_variables() -> list[ModuleVariable]:
    return confluent_provider_variables() + [
        ModuleVariable(
            TerraformVariable("aws_region", "The AWS region"),
            value_extractor=lambda r: r.aws_region,
        ),
    ]


# Migration infrastructure, type 1


def cluster_link_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable("msk_sasl_scram_username", "MSK SASL SCRAM Username"),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable("msk_sasl_scram_password", "MSK SASL SCRAM Password", sensitive=True),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable("confluent_cloud_cluster_api_key", "Confluent Cloud cluster API key"),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_api_secret",
                "Confluent Cloud cluster API secret",
                sensitive=True,
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_rest_endpoint",
                "The REST endpoint of the target Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_rest_endpoint,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_id",
                "The ID of the target Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "cluster_link_name",
                "The name of the cluster link between the source and target clusters.",
            ),
            value_extractor=lambda r: r.cluster_link_name,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_cluster_id", "The ID of the source MSK cluster that data will be migrated from."
            ),
            value_extractor=lambda r: r.msk_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_sasl_scram_bootstrap_servers",
                "The SASL/SCRAM bootstrap servers of the source MSK cluster that data will be migrated from.",
            ),
            value_extractor=lambda r: r.msk_sasl_scram_bootstrap_servers,
        ),
    ]


# Migration infrastructure, type 2


def msk_private_cluster_link_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable(
                "aws_region", "AWS region of the MSK cluster that data will be migrated from."
            ),
            value_extractor=lambda r: r.msk_region,
        ),
        ModuleVariable(
            TerraformVariable("aws_vpc_id", "VPC ID of the MSK cluster that data will be migrated from."),
            value_extractor=lambda r: r.vpc_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "aws_kafka_brokers",
                "Brokers of the MSK cluster that data will be migrated from.",
                type=(
                    "list(object({id=string,subnet_id=string,"
                    "endpoints=list(object({host=string,port=number,ip=string}))}))"
                ),
            ),
            value_extractor=lambda r: [b.to_hcl() for b in r.ext_outbound_brokers],
        ),
        ModuleVariable(
            TerraformVariable("target_environment_id", "ID of the target Confluent Cloud environment."),
            value_extractor=lambda r: r.target_environment_id,
        ),
        ModuleVariable(
            TerraformVariable("target_cluster_id", "ID of the target Confluent Cloud cluster."),
            value_extractor=lambda r: r.target_cluster_id,
        ),
    ]


def external_outbound_cluster_link_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable("subnet_id", "The subnet ID where the EC2 instance will be launched."),
            value_extractor=lambda r: r.ext_outbound_subnet_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "security_group_id", "The security group ID to attach to the EC2 instance."
            ),
            value_extractor=lambda r: r.ext_outbound_security_group_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_api_key",
                "API key of the Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_api_secret",
                "API secret of the Confluent Cloud cluster that data will be migrated to.",
                sensitive=True,
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_rest_endpoint",
                "REST endpoint of the Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_rest_endpoint,
        ),
        ModuleVariable(
            TerraformVariable(
                "target_cluster_id", "ID of the Confluent Cloud cluster that data will be migrated to."
            ),
            value_extractor=lambda r: r.target_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "cluster_link_name",
                "Name of the cluster link between the source and target clusters.",
            ),
            value_extractor=lambda r: r.cluster_link_name,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_cluster_id", "ID of the source MSK cluster that data will be migrated from."
            ),
            value_extractor=lambda r: r.msk_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_cluster_bootstrap_servers",
                "SASL/SCRAM bootstrap brokers of the MSK cluster that data will be migrated from.",
            ),
            value_extractor=lambda r: r.msk_sasl_scram_bootstrap_servers,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_sasl_scram_username",
                "SASL SCRAM username of the source MSK cluster that data will be migrated from.",
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_sasl_scram_password",
                "SASL SCRAM password of the source MSK cluster that data will be migrated from.",
                sensitive=True,
            ),
            value_extractor=_empty,
        ),
    ]


# Migration infrastructure, jump clusters


def networking_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable("vpc_id", "ID of the VPC"),
            value_extractor=lambda r: r.vpc_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_broker_subnet_cidrs",
                "CIDR ranges of the jump cluster broker subnets",
                type="list(string)",
            ),
            value_extractor=lambda r: list(r.jump_cluster_broker_subnet_cidrs),
            condition=lambda r: not r.reuse_existing_subnets,
        ),
        ModuleVariable(
            TerraformVariable(
                "existing_private_link_subnet_ids",
                "IDs of the existing subnets that the jump cluster brokers are deployed to",
                type="list(string)",
            ),
            value_extractor=lambda r: list(r.existing_private_link_subnet_ids),
            condition=lambda r: r.reuse_existing_subnets,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_setup_host_subnet_cidr",
                "CIDR block of the jump cluster setup host subnet",
            ),
            value_extractor=lambda r: r.jump_cluster_setup_host_subnet_cidr,
        ),
    ]


def networking_outputs(request: MigrationWizardRequest) -> list[TerraformOutput]:
    if request.reuse_existing_subnets:
        broker_subnet_ids = "[for s in data.aws_subnet.jump_cluster_broker_subnets : s.id]"
    else:
        broker_subnet_ids = "[for s in aws_subnet.jump_cluster_broker_subnets : s.id]"

    return [
        TerraformOutput(
            "jump_cluster_setup_host_subnet_id",
            "aws_subnet.jump_cluster_setup_host_subnet.id",
            "ID of the subnet that the jump cluster setup host instance is deployed to.",
        ),
        TerraformOutput(
            "jump_cluster_broker_subnet_ids",
            broker_subnet_ids,
            "IDs of the subnets that the jump cluster broker instances are deployed to.",
        ),
        TerraformOutput(
            "jump_cluster_ssh_key_pair_name",
            "aws_key_pair.jump_cluster_ssh_key.key_name",
            "Name of the AWS key pair for the jump cluster (including setup host) instances.",
        ),
        TerraformOutput(
            "private_key",
            "tls_private_key.jump_cluster_ssh_key.private_key_pem",
            "Private SSH key for accessing the jump cluster (including setup host) instances.",
            sensitive=True,
        ),
        TerraformOutput(
            "jump_cluster_security_group_ids",
            "aws_security_group.security_group.id",
            "IDs of the security groups for the jump cluster (including setup host) instances.",
        ),
        TerraformOutput(
            "private_link_security_group_id",
            "aws_security_group.private_link_security_group.id",
            "ID of the security group for the private link connection.",
        ),
    ]


def jump_cluster_setup_host_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_setup_host_subnet_id",
                "ID of the subnet that the jump cluster setup host (Ansible) instance is deployed to.",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_security_group_ids",
                "IDs of the security groups for the jump cluster (including setup host) instances.",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_ssh_key_pair_name",
                "Name of the AWS key pair for SSH access to the jump cluster (including setup host) instances.",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_instances_private_dns",
                "Private DNS addresses of the jump cluster broker instances.",
                type="list(string)",
            ),
            from_module_output=JUMP_CLUSTERS,
        ),
        ModuleVariable(
            TerraformVariable(
                "private_key",
                "Private SSH key for accessing the jump cluster (including setup host) instances.",
                sensitive=True,
            ),
            from_module_output=NETWORKING,
        ),
    ]


def jump_cluster_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_broker_subnet_ids",
                "IDs of the subnets that the jump cluster broker instances are deployed to.",
                type="list(string)",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_instance_type", "Instance type of the jump cluster instances."
            ),
            value_extractor=lambda r: r.jump_cluster_instance_type,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_security_group_ids",
                "IDs of the security groups for the jump cluster (including setup host) instances.",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_ssh_key_pair_name",
                "Name of the AWS key pair for SSH access to the jump cluster (including setup host) instances.",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_iam_auth_role_name",
                "Name of the IAM role that will be attached to the jump cluster instances to "
                "enable IAM authenticated cluster linking between MSK and jump cluster.",
            ),
            value_extractor=lambda r: r.jump_cluster_iam_auth_role_name,
            condition=_is_iam,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_broker_storage",
                "Storage size in GiB of the jump cluster broker instances.",
                type="number",
            ),
            value_extractor=lambda r: r.jump_cluster_broker_storage,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_id",
                "ID of the Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_bootstrap_endpoint",
                "Bootstrap endpoint of the Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_bootstrap_endpoint,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_rest_endpoint",
                "REST endpoint of the Confluent Cloud cluster that data will be migrated to.",
            ),
            value_extractor=lambda r: r.target_rest_endpoint,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_api_key",
                "API key of the Confluent Cloud cluster that data will be migrated to.",
                sensitive=True,
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "confluent_cloud_cluster_api_secret",
                "API secret of the Confluent Cloud cluster that data will be migrated to.",
                sensitive=True,
            ),
            value_extractor=_empty,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_cluster_id", "ID of the MSK cluster that data will be migrated from."
            ),
            value_extractor=lambda r: r.msk_cluster_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_cluster_bootstrap_brokers",
                "Bootstrap brokers of the MSK cluster that data will be migrated from.",
            ),
            value_extractor=lambda r: r.msk_jump_cluster_bootstrap_brokers,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_sasl_scram_username",
                "SASL SCRAM username of the MSK cluster that data will be migrated from.",
            ),
            value_extractor=_empty,
            condition=_is_sasl_scram,
        ),
        ModuleVariable(
            TerraformVariable(
                "msk_sasl_scram_password",
                "SASL SCRAM password of the MSK cluster that data will be migrated from.",
                sensitive=True,
            ),
            value_extractor=_empty,
            condition=_is_sasl_scram,
        ),
        ModuleVariable(
            TerraformVariable(
                "cluster_link_name",
                "Name of the cluster links between MSK and Confluent Cloud through the jump cluster.",
            ),
            value_extractor=lambda r: r.cluster_link_name,
        ),
    ]


def jump_cluster_outputs() -> list[TerraformOutput]:
    return [
        TerraformOutput(
            "jump_cluster_instances_private_dns",
            "values(aws_instance.jump_cluster)[*].private_dns",
            "Private DNS addresses of the jump cluster instances.",
        ),
    ]


MIGRATION_OUTPUT_SOURCES = {
    # output name: (type 1 variable, type 2 variable, jump cluster variable)
    "confluent_cloud_cluster_id": (
        "target_cluster_id",
        "target_cluster_id",
        "confluent_cloud_cluster_id",
    ),
    "confluent_cloud_cluster_rest_endpoint": (
        "target_cluster_rest_endpoint",
        "target_cluster_rest_endpoint",
        "confluent_cloud_cluster_rest_endpoint",
    ),
    "confluent_cloud_cluster_api_key": (
        "confluent_cloud_cluster_api_key",
        "target_cluster_api_key",
        "confluent_cloud_cluster_api_key",
    ),
    "confluent_cloud_cluster_api_key_secret": (
        "confluent_cloud_cluster_api_secret",
        "target_cluster_api_secret",
        "confluent_cloud_cluster_api_secret",
    ),
    "cluster_link_name": ("cluster_link_name", "cluster_link_name", "cluster_link_name"),
}


def migration_root_outputs(request: MigrationWizardRequest) -> list[TerraformOutput]:
    """
    Root outputs read back from terraform.tfstate by the topic migration assets.
    """
    if request.migration_type == MigrationType.PUBLIC_MSK_ENDPOINTS:
        column = 0
    elif request.migration_type == MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK:
        column = 1
    else:
        column = 2

    outputs = [
        TerraformOutput(name, f"var.{sources[column]}", sensitive=name.endswith("secret"))
        for name, sources in MIGRATION_OUTPUT_SOURCES.items()
    ]
    if request.use_jump_clusters:
        outputs += [
            TerraformOutput(
                "confluent_cloud_cluster_bootstrap_endpoint",
                "var.confluent_cloud_cluster_bootstrap_endpoint",
            ),
            TerraformOutput(
                "confluent_platform_controller_bootstrap_server",
                f'join(",", [for host in module.{JUMP_CLUSTERS}.jump_cluster_instances_private_dns'
                ' : "${host}:9092"])',
                "Bootstrap servers of the Confluent Platform jump cluster.",
            ),
        ]
    return outputs


def migration_private_link_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable(
                "aws_region",
                "The AWS region of the VPC that the private link connection is established in.",
            ),
            value_extractor=lambda r: r.msk_region,
        ),
        ModuleVariable(
            TerraformVariable(
                "vpc_id", "The ID of the VPC that the private link connection is established in."
            ),
            value_extractor=lambda r: r.vpc_id,
        ),
        ModuleVariable(
            TerraformVariable(
                "jump_cluster_broker_subnet_ids",
                "The IDs of the subnets that the jump cluster broker instances are deployed to.",
                type="list(string)",
            ),
            from_module_output=NETWORKING,
        ),
        ModuleVariable(
            TerraformVariable(
                "security_group_id",
                "The ID of the security group attached to the private link endpoint.",
            ),
            from_module_output=NETWORKING,
            output_name="private_link_security_group_id",
        ),
        ModuleVariable(
            TerraformVariable("target_environment_id", "The ID of the target environment."),
            value_extractor=lambda r: r.target_environment_id,
        ),
    ]


# Target infrastructure


def confluent_cloud_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable("region", "Region of the cluster"),
            value_extractor=lambda r: r.aws_region,
        ),
        ModuleVariable(
            TerraformVariable("environment_name", "Name of the environment"),
            value_extractor=lambda r: r.environment_name,
            condition=lambda r: r.needs_environment,
        ),
        ModuleVariable(
            TerraformVariable("environment_id", "ID of the environment"),
            value_extractor=lambda r: r.environment_id,
            condition=lambda r: not r.needs_environment,
        ),
        ModuleVariable(
            TerraformVariable("cluster_name", "Name of the cluster"),
            value_extractor=lambda r: r.cluster_name,
            condition=lambda r: r.needs_environment or r.needs_cluster,
        ),
        ModuleVariable(
            TerraformVariable("cluster_type", "Type of the cluster"),
            value_extractor=lambda r: r.cluster_type,
            condition=lambda r: r.needs_environment or r.needs_cluster,
        ),
        ModuleVariable(
            TerraformVariable("cluster_id", "ID of the cluster"),
            value_extractor=lambda r: r.cluster_id,
            condition=lambda r: not r.needs_environment and not r.needs_cluster,
        ),
    ]


def confluent_cloud_outputs(request: TargetClusterWizardRequest) -> list[TerraformOutput]:
    env = "confluent_environment" if request.needs_environment else "data.confluent_environment"
    creates_cluster = request.needs_environment or request.needs_cluster
    cluster = "confluent_kafka_cluster" if creates_cluster else "data.confluent_kafka_cluster"
    return [
        TerraformOutput("environment_id", f"{env}.environment.id", "ID of the environment"),
        TerraformOutput("cluster_id", f"{cluster}.cluster.id", "ID of the cluster"),
        TerraformOutput(
            "cluster_rest_endpoint", f"{cluster}.cluster.rest_endpoint", "REST endpoint of the cluster"
        ),
        TerraformOutput(
            "cluster_bootstrap_endpoint",
            f"{cluster}.cluster.bootstrap_endpoint",
            "Bootstrap endpoint of the cluster",
        ),
        TerraformOutput(
            "kafka_api_key",
            "confluent_api_key.app-manager-kafka-api-key.id",
            "Kafka API key of the app-manager service account",
        ),
        TerraformOutput(
            "kafka_api_secret",
            "confluent_api_key.app-manager-kafka-api-key.secret",
            "Kafka API secret of the app-manager service account",
            sensitive=True,
        ),
        TerraformOutput(
            "schema_registry_api_key",
            "confluent_api_key.env-manager-schema-registry-api-key.id",
            "Schema Registry API key of the env-manager service account",
        ),
        TerraformOutput(
            "schema_registry_api_secret",
            "confluent_api_key.env-manager-schema-registry-api-key.secret",
            "Schema Registry API secret of the env-manager service account",
            sensitive=True,
        ),
        TerraformOutput(
            "schema_registry_rest_endpoint",
            "data.confluent_schema_registry_cluster.schema_registry.rest_endpoint",
            "REST endpoint of the environment schema registry",
        ),
    ]


def target_private_link_variables() -> list[ModuleVariable]:
    return [
        ModuleVariable(
            TerraformVariable(
                "aws_region",
                "The AWS region of the VPC that the private link connection is established in.",
            ),
            value_extractor=lambda r: r.aws_region,
            condition=lambda r: r.needs_private_link,
        ),
        ModuleVariable(
            TerraformVariable(
                "vpc_id", "The ID of the VPC that the private link connection is established in."
            ),
            value_extractor=lambda r: r.vpc_id,
            condition=lambda r: r.needs_private_link,
        ),
        ModuleVariable(
            TerraformVariable(
                "subnet_cidr_ranges",
                "The CIDR ranges of the subnets that the private link connection is established in.",
                type="list(string)",
            ),
            value_extractor=lambda r: list(r.subnet_cidr_ranges),
            condition=lambda r: r.needs_private_link,
        ),
        ModuleVariable(
            TerraformVariable(
                "environment_id",
                "The ID of the environment that the private link connection is established in.",
            ),
            from_module_output=CONFLUENT_CLOUD,
            condition=lambda r: r.needs_private_link,
        ),
    ]


# Variable sets per request


def migration_infra_variables(request: MigrationWizardRequest) -> list[ModuleVariable]:
    """All module inputs of the migration infrastructure project, root first."""
    migration_type = request.migration_type
    if migration_type == MigrationType.PUBLIC_MSK_ENDPOINTS:
        return confluent_provider_variables() + cluster_link_variables()
    if migration_type == MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK:
        return (
            provider_variables()
            + msk_private_cluster_link_variables()
            + external_outbound_cluster_link_variables()
        )
    return (
        provider_variables()
        + networking_variables()
        + jump_cluster_setup_host_variables()
        + jump_cluster_variables()
        + migration_private_link_variables()
    )


def target_infra_variables(request: TargetClusterWizardRequest) -> list[ModuleVariable]:
    return (
        target_provider_variables()
        + confluent_cloud_variables()
        + target_private_link_variables()
    )


def variables_for_request(request: Any) -> list[ModuleVariable]:
    if isinstance(request, MigrationWizardRequest):
        return migration_infra_variables(request)
    if isinstance(request, TargetClusterWizardRequest):
        return target_infra_variables(request)
    raise TypeError(f"no variable tables for {type(request).__name__}")


def root_variable_definitions(
    request: Any, variables: list[ModuleVariable] | None = None
) -> list[TerraformVariable]:
    """
    Variables declared in the root ``variables.tf``.

    Only applicable root level variables are kept, deduplicated by name in
    table order.
    """
    if variables is None:
        variables = variables_for_request(request)

    definitions: dict[str, TerraformVariable] = {}
    for variable in variables:
        if not variable.applies(request) or not variable.is_root_level:
            continue
        definitions.setdefault(variable.name, variable.definition)
    return list(definitions.values())


def root_variable_values(
    request: Any, variables: list[ModuleVariable] | None = None
) -> dict[str, Any]:
    """
    Values written to ``inputs.auto.tfvars``.

    Strings and lists are only written when non-empty; booleans and numbers are
    always written.
    """
    if variables is None:
        variables = variables_for_request(request)

    values: dict[str, Any] = {}
    for variable in variables:
        if not variable.applies(request) or not variable.is_root_level:
            continue
        if variable.name in values:
            continue
        value = variable.value_extractor(request)
        if isinstance(value, bool) or isinstance(value, (int, float)):
            values[variable.name] = value
        elif isinstance(value, (str, list)) and value:
            values[variable.name] = value
    return values


def module_variable_definitions(
    variables: list[ModuleVariable], request: Any
) -> list[TerraformVariable]:
    """Every applicable input of a single module, deduplicated by name."""
    definitions: dict[str, TerraformVariable] = {}
    for variable in variables:
        if variable.applies(request):
            definitions.setdefault(variable.name, variable.definition)
    return list(definitions.values())


def module_arguments(variables: list[ModuleVariable], request: Any) -> dict[str, Raw]:
    """Argument expressions for a root ``module`` block."""
    arguments: dict[str, Raw] = {}
    for variable in variables:
        if not variable.applies(request) or variable.name in arguments:
            continue
        if variable.from_module_output:
            arguments[variable.name] = module_output(
                variable.from_module_output, variable.output_name or variable.name
            )
        else:
            arguments[variable.name] = var(variable.name)
    return arguments


def variable_block(variable: TerraformVariable) -> Block:
    block = Block("variable", variable.name)
    block.set("type", Raw(variable.type))
    if variable.description:
        block.set("description", variable.description)
    if variable.sensitive:
        block.set("sensitive", True)
    return block


def output_block(output: TerraformOutput) -> Block:
    block = Block("output", output.name)
    block.set("value", Raw(output.value))
    if output.description:
        block.set("description", output.description)
    if output.sensitive:
        block.set("sensitive", True)
    return block


def render_variables(variables: list[TerraformVariable]) -> str:
    return render(variable_block(v) for v in variables)


def render_outputs(outputs: list[TerraformOutput]) -> str:
    return render(output_block(o) for o in outputs)
