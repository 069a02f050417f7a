"""
Terraform project for the target Confluent Cloud environment and cluster.
"""

from kcp.hcl import aws, confluent, other
from kcp.hcl.variables import (
    CONFLUENT_CLOUD,
    confluent_cloud_outputs,
    confluent_cloud_variables,
    module_arguments,
    module_variable_definitions,
    render_outputs,
    render_variables,
    root_variable_definitions,
    root_variable_values,
    target_private_link_variables,
)
from kcp.hcl.writer import Block, Raw, ref, render, render_attributes, string_template, var
from kcp.models.requests import TargetClusterWizardRequest
from kcp.models.terraform import TerraformModule, TerraformProject

PRIVATE_LINK = "private_link"

ENVIRONMENT = "environment"
CLUSTER = "cluster"
SCHEMA_REGISTRY = "schema_registry"
SERVICE_ACCOUNT = "app-manager"
SCHEMA_REGISTRY_API_KEY = "env-manager-schema-registry-api-key"
KAFKA_API_KEY = "app-manager-kafka-api-key"
SUBJECT_RESOURCE_OWNER = "subject-resource-owner"
KAFKA_CLUSTER_ADMIN = "app-manager-kafka-cluster-admin"
DATA_STEWARD = "app-manager-kafka-data-steward"

PRIVATE_LINK_ATTACHMENT = "private_link_attachment"
PRIVATE_LINK_ATTACHMENT_CONNECTION = "private_link_attachment_connection"
VPC_ENDPOINT = "cflt_private_link_vpc_endpoint"
ROUTE53_ZONE = "cflt_private_link_zone"
ROUTE53_RECORD = "cflt_route_entries"
SECURITY_GROUP = "cflt_private_link_sg"
SUBNET = "cflt_private_link_subnet"


def generate_terraform_project(request: TargetClusterWizardRequest) -> TerraformProject:
    """
    Build the target infrastructure project.

    The ``confluent_cloud`` module is always generated; the ``private_link``
    module only when a private link connection was requested.
    """
    cloud_variables = confluent_cloud_variables()
    modules = [
        TerraformModule(
            name=CONFLUENT_CLOUD,
            path=f"modules/{CONFLUENT_CLOUD}",
            main_tf=_confluent_cloud_main(request),
            variables_tf=render_variables(module_variable_definitions(cloud_variables, request)),
            outputs_tf=render_outputs(confluent_cloud_outputs(request)),
            versions_tf=render([other.terraform_block(confluent.required_provider())]),
        )
    ]

    main = [_module_block(CONFLUENT_CLOUD, ["confluent"], cloud_variables, request)]

    if request.needs_private_link:
        link_variables = target_private_link_variables()
        main.append(_module_block(PRIVATE_LINK, ["aws", "confluent"], link_variables, request))
        modules.append(
            TerraformModule(
                name=PRIVATE_LINK,
                path=f"modules/{PRIVATE_LINK}",
                main_tf=_private_link_main(request),
                variables_tf=render_variables(module_variable_definitions(link_variables, request)),
                versions_tf=render(
                    [other.terraform_block(confluent.required_provider(), aws.required_provider())]
                ),
            )
        )

    providers = render(
        [
            other.terraform_block(confluent.required_provider(), aws.required_provider()),
            confluent.provider_block(),
            aws.provider_block(),
        ]
    )

    return TerraformProject(
        main_tf=render(main),
        providers_tf=providers,
        variables_tf=render_variables(root_variable_definitions(request)),
        inputs_auto_tfvars=render_attributes(root_variable_values(request)),
        modules=modules,
    )


def _module_block(name, providers, variables, request) -> Block:
    block = Block("module", name)
    block.set("source", f"./modules/{name}")
    block.newline()
    block.set("providers", {p: ref(p) for p in providers})
    block.newline()
    for argument, value in module_arguments(variables, request).items():
        block.set(argument, value)
    return block


def _confluent_cloud_main(request: TargetClusterWizardRequest) -> str:
    creates_cluster = request.needs_environment or request.needs_cluster
    blocks = []

    if request.needs_environment:
        blocks.append(confluent.environment(ENVIRONMENT, var("environment_name")))
    else:
        blocks.append(confluent.environment_data_source(ENVIRONMENT, var("environment_id")))
    env_id = confluent.environment_reference(request.needs_environment, ENVIRONMENT)
    env_resource_name = confluent.environment_reference(
        request.needs_environment, ENVIRONMENT, "resource_name"
    )

    if creates_cluster:
        blocks.append(
            confluent.kafka_cluster(
                CLUSTER, var("cluster_name"), request.cluster_type, var("region"), env_id
            )
        )
        cluster = Raw(f"confluent_kafka_cluster.{CLUSTER}")
    else:
        blocks.append(confluent.kafka_cluster_data_source(CLUSTER, var("cluster_id"), env_id))
        cluster = Raw(f"data.confluent_kafka_cluster.{CLUSTER}")

    principal = string_template(f"User:${{confluent_service_account.{SERVICE_ACCOUNT}.id}}")

    blocks += [
        confluent.schema_registry_data_source(
            SCHEMA_REGISTRY, env_id, [f"confluent_api_key.{KAFKA_API_KEY}"]
        ),
        confluent.service_account(
            SERVICE_ACCOUNT,
            "Service account to manage the migration target environment.",
            display_name=string_template(f"app-manager-${{{cluster.text}.id}}"),
        ),
        confluent.role_binding(
            SUBJECT_RESOURCE_OWNER,
            principal,
            "ResourceOwner",
            string_template(
                f"${{data.confluent_schema_registry_cluster.{SCHEMA_REGISTRY}.resource_name}}/subject=*"
            ),
        ),
        confluent.role_binding(
            KAFKA_CLUSTER_ADMIN, principal, "CloudClusterAdmin", ref(f"{cluster.text}.rbac_crn")
        ),
        confluent.role_binding(DATA_STEWARD, principal, "DataSteward", env_resource_name),
        confluent.schema_registry_api_key(
            SCHEMA_REGISTRY_API_KEY,
            request.environment_name or request.environment_id,
            SERVICE_ACCOUNT,
            SCHEMA_REGISTRY,
            env_id,
        ),
        confluent.kafka_api_key(
            KAFKA_API_KEY,
            request.environment_name or request.environment_id,
            SERVICE_ACCOUNT,
            cluster,
            env_id,
            KAFKA_CLUSTER_ADMIN,
        ),
    ]
    return render(blocks)


def _private_link_main(request: TargetClusterWizardRequest) -> str:
    attachment = f"confluent_private_link_attachment.{PRIVATE_LINK_ATTACHMENT}"
    vpc_id = var("vpc_id")
    connection_name = f"{request.cluster_name or request.cluster_id}_private_link_attachment_connection"

    blocks = [
        confluent.private_link_attachment(
            PRIVATE_LINK_ATTACHMENT,
            "kcp_private_link_attachment",
            var("aws_region"),
            var("environment_id"),
        ),
        aws.availability_zones_data_source("available"),
        aws.security_group(SECURITY_GROUP, [80, 443, 9092], [0], vpc_id),
        aws.subnet_for_each(
            SUBNET, var("subnet_cidr_ranges"), "data.aws_availability_zones.available", vpc_id
        ),
        aws.vpc_endpoint(
            VPC_ENDPOINT,
            vpc_id,
            ref(f"{attachment}.aws[0].vpc_endpoint_service_name"),
            [ref(f"aws_security_group.{SECURITY_GROUP}.id")],
            Raw(f"[for s in aws_subnet.{SUBNET} : s.id]"),
            depends_on=[attachment],
        ),
        confluent.private_link_attachment_connection(
            PRIVATE_LINK_ATTACHMENT_CONNECTION,
            connection_name,
            var("environment_id"),
            ref(f"aws_vpc_endpoint.{VPC_ENDPOINT}.id"),
            ref(f"{attachment}.id"),
        ),
        aws.route53_zone(ROUTE53_ZONE, vpc_id, ref(f"{attachment}.dns_domain")),
        aws.route53_wildcard_record(
            ROUTE53_RECORD,
            ref(f"aws_route53_zone.{ROUTE53_ZONE}.zone_id"),
            ref(f"aws_vpc_endpoint.{VPC_ENDPOINT}.dns_entry[0].dns_name"),
        ),
    ]
    return render(blocks)
