"""
Terraform project for the migration infrastructure.

The shape of the project depends on the migration type:

- Type 1 links Confluent Cloud directly to the public MSK SASL/SCRAM listeners.
- Type 2 reaches the private MSK brokers through an egress private link and
  creates the link from an EC2 instance inside the MSK VPC.
- Types 3 to 6 stand up a jump cluster inside the MSK VPC that links to MSK
  and to Confluent Cloud over a private link attachment.
"""

import logging
from collections.abc import Callable

from kcp.hcl import aws, confluent, other
from kcp.hcl.variables import (
    cluster_link_variables,
    external_outbound_cluster_link_variables,
    jump_cluster_outputs,
    jump_cluster_setup_host_variables,
    jump_cluster_variables,
    migration_private_link_variables,
    migration_root_outputs,
    module_arguments,
    module_variable_definitions,
    msk_private_cluster_link_variables,
    networking_outputs,
    networking_variables,
    render_outputs,
    render_variables,
    root_variable_definitions,
    root_variable_values,
)
from kcp.hcl.writer import Block, Raw, ref, render, render_attributes, string_template, var
from kcp.models.requests import IAM, MigrationType, MigrationWizardRequest
from kcp.models.terraform import ModuleVariable, TerraformModule, TerraformProject
from kcp.util.templates import read_asset

logger = logging.getLogger(__name__)

CLUSTER_LINK_MODULE = "cluster_link"
MSK_PRIVATE_CLUSTER_LINK_MODULE = "msk_private_cluster_link"
EXTERNAL_OUTBOUND_CLUSTER_LINK_MODULE = "external_outbound_cluster_link"
NETWORKING_MODULE = "networking"
JUMP_CLUSTERS_MODULE = "jump_clusters"
JUMP_CLUSTER_SETUP_HOST_MODULE = "jump_cluster_setup_host"
PRIVATE_LINK_CONNECTION_MODULE = "private_link_connection"

SETUP_HOST_USER_DATA = "jump-cluster-setup-host-user-data.tpl"
JUMP_CLUSTER_WITH_LINKS_USER_DATA = "jump-cluster-with-cluster-links-user-data.tpl"
JUMP_CLUSTER_USER_DATA = "jump-cluster-user-data.tpl"
EXTERNAL_OUTBOUND_USER_DATA = "external-outbound-cluster-link-user-data.tpl"

MSK_SASL_SCRAM_PORT = 9096
BROKERS = var("aws_kafka_brokers")
BROKER_MAP = Raw("{ for b in var.aws_kafka_brokers : b.id => b }")


def generate_terraform_project(request: MigrationWizardRequest) -> TerraformProject:
    """
    Build the migration infrastructure project for a request.

    Args:
        request: Populated migration request

    Returns:
        Terraform project ready to be written
    """
    generators: dict[MigrationType, Callable[[MigrationWizardRequest], TerraformProject]] = {
        MigrationType.PUBLIC_MSK_ENDPOINTS: _public_cluster_link_project,
        MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK: _external_outbound_project,
        MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM: _jump_cluster_project,
        MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM: _jump_cluster_project,
        MigrationType.JUMP_CLUSTER_NEW_SUBNETS_SASL_SCRAM: _jump_cluster_project,
        MigrationType.JUMP_CLUSTER_NEW_SUBNETS_IAM: _jump_cluster_project,
    }
    logger.debug(f"Generating migration infrastructure for type {int(request.migration_type)}")
    return generators[request.migration_type](request)


def _root_files(request: MigrationWizardRequest) -> tuple[str, str]:
    variables = render_variables(root_variable_definitions(request))
    tfvars = render_attributes(root_variable_values(request))
    return variables, tfvars


def _module_block(
    name: str,
    variables: list[ModuleVariable],
    request: MigrationWizardRequest,
    providers: list[str] | None = None,
    depends_on: list[str] | None = None,
) -> Block:
    block = Block("module", name)
    block.set("source", f"./modules/{name}")
    if providers:
        block.set("providers", {p: ref(p) for p in providers})
    block.newline()
    for argument, value in module_arguments(variables, request).items():
        block.set(argument, value)
    if depends_on:
        block.newline()
        block.set("depends_on", [ref(f"module.{d}") for d in depends_on])
    return block


def _versions_tf(*providers) -> str:
    return render([other.terraform_block(*providers)])


def _module(
    name: str,
    main: list[Block],
    variables: list[ModuleVariable],
    request: MigrationWizardRequest,
    providers: tuple,
    outputs_tf: str = "",
    additional_files: dict[str, str] | None = None,
    path: str | None = None,
) -> TerraformModule:
    return TerraformModule(
        name=name,
        path=path if path is not None else f"modules/{name}",
        main_tf=render(main),
        variables_tf=render_variables(module_variable_definitions(variables, request)),
        outputs_tf=outputs_tf,
        versions_tf=_versions_tf(*providers),
        additional_files=additional_files or {},
    )


# Type 1


def _public_cluster_link_project(request: MigrationWizardRequest) -> TerraformProject:
    link_variables = cluster_link_variables()

    module = Block("module", CLUSTER_LINK_MODULE)
    module.set("source", f"./{CLUSTER_LINK_MODULE}")
    module.newline()
    for argument, value in module_arguments(link_variables, request).items():
        module.set(argument, value)

    providers = render(
        [
            other.terraform_block(confluent.required_provider(), other.NULL_PROVIDER),
            confluent.provider_block(),
        ]
    )
    variables_tf, tfvars = _root_files(request)

    cluster_link_main = [
        confluent.cluster_link_locals(
            "confluent_cloud_cluster_api_key", "confluent_cloud_cluster_api_secret"
        ),
        confluent.cluster_link_resource(
            rest_endpoint="${var.target_cluster_rest_endpoint}",
            cluster_id="${var.target_cluster_id}",
            link_name="${var.cluster_link_name}",
            source_cluster_id="${var.msk_cluster_id}",
            bootstrap_servers="${var.msk_sasl_scram_bootstrap_servers}",
        ),
    ]

    return TerraformProject(
        main_tf=render([module]),
        providers_tf=providers,
        variables_tf=variables_tf,
        inputs_auto_tfvars=tfvars,
        outputs_tf=render_outputs(migration_root_outputs(request)),
        modules=[
            _module(
                CLUSTER_LINK_MODULE,
                cluster_link_main,
                link_variables,
                request,
                (other.NULL_PROVIDER,),
                path=CLUSTER_LINK_MODULE,
            )
        ],
    )


# Type 2


def _msk_private_cluster_link_main() -> list[Block]:
    gateway = confluent.egress_gateway(
        "egress",
        "kcp-msk-egress-gateway",
        var("aws_region"),
        var("target_environment_id"),
    )
    return [
        gateway,
        aws.broker_load_balancer("broker", BROKERS),
        aws.broker_target_group("broker", BROKERS, var("aws_vpc_id"), MSK_SASL_SCRAM_PORT),
        aws.broker_target_group_attachment("broker", BROKERS, "broker", MSK_SASL_SCRAM_PORT),
        aws.broker_listener("broker", BROKERS, "broker", "broker", MSK_SASL_SCRAM_PORT),
        aws.broker_endpoint_service(
            "broker",
            BROKERS,
            "broker",
            ref("confluent_gateway.egress.aws_egress_private_link_gateway[0].principal_arn"),
        ),
        confluent.access_point_for_each(
            "broker",
            BROKER_MAP,
            var("target_environment_id"),
            ref("confluent_gateway.egress.id"),
            ref("aws_vpc_endpoint_service.broker[each.key].service_name"),
        ),
        confluent.dns_record_for_each(
            "broker",
            BROKER_MAP,
            var("target_environment_id"),
            ref("each.value.endpoints[0].host"),
            ref("confluent_gateway.egress.id"),
            ref("confluent_access_point.broker[each.key].id"),
        ),
    ]


def _external_outbound_cluster_link_main() -> list[Block]:
    user_data = aws.templatefile(
        EXTERNAL_OUTBOUND_USER_DATA,
        {
            "target_cluster_api_key": var("target_cluster_api_key"),
            "target_cluster_api_secret": var("target_cluster_api_secret"),
            "target_cluster_rest_endpoint": var("target_cluster_rest_endpoint"),
            "target_cluster_id": var("target_cluster_id"),
            "cluster_link_name": var("cluster_link_name"),
            "msk_cluster_id": var("msk_cluster_id"),
            "msk_cluster_bootstrap_servers": var("msk_cluster_bootstrap_servers"),
            "msk_sasl_scram_username": var("msk_sasl_scram_username"),
            "msk_sasl_scram_password": var("msk_sasl_scram_password"),
        },
    )
    return [
        aws.amazon_linux_ami(),
        aws.ec2_instance(
            "external_outbound_cluster_link",
            ref("data.aws_ami.amzn_linux_ami.id"),
            "t3.small",
            var("subnet_id"),
            [var("security_group_id")],
            user_data=user_data,
            optional_blocks={
                "metadata_options": {"http_tokens": "required", "http_put_response_hop_limit": 2}
            },
        ),
    ]


def _external_outbound_project(request: MigrationWizardRequest) -> TerraformProject:
    private_link_variables = msk_private_cluster_link_variables()
    outbound_variables = external_outbound_cluster_link_variables()

    main = [
        _module_block(
            MSK_PRIVATE_CLUSTER_LINK_MODULE,
            private_link_variables,
            request,
            providers=["aws", "confluent"],
        ),
        _module_block(
            EXTERNAL_OUTBOUND_CLUSTER_LINK_MODULE,
            outbound_variables,
            request,
            providers=["aws"],
            depends_on=[MSK_PRIVATE_CLUSTER_LINK_MODULE],
        ),
    ]
    providers = render(
        [
            other.terraform_block(confluent.required_provider(), aws.required_provider()),
            confluent.provider_block(),
            aws.provider_block(),
        ]
    )
    variables_tf, tfvars = _root_files(request)

    return TerraformProject(
        main_tf=render(main),
        providers_tf=providers,
        variables_tf=variables_tf,
        inputs_auto_tfvars=tfvars,
        outputs_tf=render_outputs(migration_root_outputs(request)),
        modules=[
            _module(
                MSK_PRIVATE_CLUSTER_LINK_MODULE,
                _msk_private_cluster_link_main(),
                private_link_variables,
                request,
                (aws.required_provider(), confluent.required_provider()),
            ),
            _module(
                EXTERNAL_OUTBOUND_CLUSTER_LINK_MODULE,
                _external_outbound_cluster_link_main(),
                outbound_variables,
                request,
                (aws.required_provider(),),
                additional_files={
                    EXTERNAL_OUTBOUND_USER_DATA: read_asset(EXTERNAL_OUTBOUND_USER_DATA)
                },
            ),
        ],
    )


# Types 3 to 6


def _networking_main(request: MigrationWizardRequest) -> list[Block]:
    vpc_id = var("vpc_id")
    has_igw = request.has_existing_internet_gateway
    zones = "data.aws_availability_zones.available"

    if has_igw:
        igw = aws.internet_gateway_data_source("internet_gateway", vpc_id)
    else:
        igw = aws.internet_gateway("internet_gateway", vpc_id)

    blocks = [
        igw,
        aws.availability_zones_data_source("available"),
        aws.security_group("security_group", [22, 9091, 9092, 9093, 8090, 8081], [0], vpc_id),
    ]

    if request.reuse_existing_subnets:
        blocks.append(
            aws.subnet_data_source_for_each(
                "jump_cluster_broker_subnets", var("existing_private_link_subnet_ids")
            )
        )
    else:
        blocks.append(
            aws.subnet_for_each(
                "jump_cluster_broker_subnets", var("jump_cluster_broker_subnet_cidrs"), zones, vpc_id
            )
        )

    blocks += [
        aws.subnet(
            "jump_cluster_setup_host_subnet",
            var("jump_cluster_setup_host_subnet_cidr"),
            ref(f"{zones}.names[0]"),
            vpc_id,
        ),
        aws.eip("nat_eip"),
        aws.nat_gateway(
            "nat_gw", ref("aws_eip.nat_eip.id"), ref("aws_subnet.jump_cluster_setup_host_subnet.id")
        ),
        aws.route_table(
            "jump_cluster_setup_host_public_rt",
            vpc_id,
            gateway_id=aws.internet_gateway_reference(has_igw, "internet_gateway"),
        ),
        aws.route_table_association(
            "jump_cluster_setup_host_public_rt_association",
            ref("aws_subnet.jump_cluster_setup_host_subnet.id"),
            ref("aws_route_table.jump_cluster_setup_host_public_rt.id"),
        ),
        aws.route_table("private_subnet_rt", vpc_id, nat_gateway_id=ref("aws_nat_gateway.nat_gw.id")),
    ]

    if not request.reuse_existing_subnets:
        blocks.append(
            aws.route_table_association_for_each(
                "jump_cluster_broker_route_table_assoc",
                "aws_subnet.jump_cluster_broker_subnets",
                ref("aws_route_table.private_subnet_rt.id"),
            )
        )

    private_key = other.local_file(
        "jump_cluster_ssh_key_private_key",
        "tls_private_key.jump_cluster_ssh_key.private_key_pem",
        "./.ssh/jump_cluster_ssh_key_private_key_rsa",
        "400",
    )
    public_key = other.local_file(
        "jump_cluster_ssh_key_public_key",
        "tls_private_key.jump_cluster_ssh_key.public_key_openssh",
        "./.ssh/jump_cluster_ssh_key_public_key.pub",
        "400",
    )
    blocks += [
        aws.security_group("private_link_security_group", [80, 443, 9092], [0], vpc_id),
        other.tls_private_key("jump_cluster_ssh_key", "RSA", 4096),
        private_key,
        public_key,
        other.random_string("suffix", 5),
        aws.key_pair(
            "jump_cluster_ssh_key",
            string_template("jump_cluster_ssh_key_${random_string.suffix.result}"),
            ref("tls_private_key.jump_cluster_ssh_key.public_key_openssh"),
        ),
    ]
    return blocks


def _jump_cluster_setup_host_main() -> list[Block]:
    user_data = aws.templatefile(
        SETUP_HOST_USER_DATA,
        {
            "broker_ips": var("jump_cluster_instances_private_dns"),
            "private_key": var("private_key"),
        },
    )
    return [
        aws.amazon_linux_ami(),
        aws.ec2_instance(
            "jump_cluster_setup_host",
            ref("data.aws_ami.amzn_linux_ami.id"),
            "t2.medium",
            var("jump_cluster_setup_host_subnet_id"),
            [var("jump_cluster_security_group_ids")],
            key_name=var("jump_cluster_ssh_key_pair_name"),
            user_data=user_data,
            associate_public_ip_address=True,
        ),
    ]


def _jump_clusters_main(request: MigrationWizardRequest) -> list[Block]:
    template_variables = {
        "confluent_cloud_cluster_id": var("confluent_cloud_cluster_id"),
        "confluent_cloud_cluster_bootstrap_endpoint": var("confluent_cloud_cluster_bootstrap_endpoint"),
        "confluent_cloud_cluster_rest_endpoint": var("confluent_cloud_cluster_rest_endpoint"),
        "confluent_cloud_cluster_key": var("confluent_cloud_cluster_api_key"),
        "confluent_cloud_cluster_secret": var("confluent_cloud_cluster_api_secret"),
        "msk_cluster_id": var("msk_cluster_id"),
        "msk_cluster_bootstrap_brokers": var("msk_cluster_bootstrap_brokers"),
        "cluster_link_name": var("cluster_link_name"),
    }
    blocks = [aws.red_hat_ami()]

    instance_profile = None
    if request.msk_jump_cluster_auth_type == IAM:
        blocks.append(
            aws.iam_instance_profile("jump_cluster", var("jump_cluster_iam_auth_role_name"))
        )
        instance_profile = ref("aws_iam_instance_profile.jump_cluster.name")
    else:
        template_variables["msk_sasl_scram_username"] = var("msk_sasl_scram_username")
        template_variables["msk_sasl_scram_password"] = var("msk_sasl_scram_password")

    blocks.append(
        aws.ec2_instance_for_each(
            "jump_cluster",
            ref("data.aws_ami.red_hat_linux_ami.id"),
            var("jump_cluster_instance_type"),
            var("jump_cluster_broker_subnet_ids"),
            [var("jump_cluster_security_group_ids")],
            var("jump_cluster_ssh_key_pair_name"),
            aws.templatefile(JUMP_CLUSTER_WITH_LINKS_USER_DATA, template_variables),
            aws.templatefile(JUMP_CLUSTER_USER_DATA),
            iam_instance_profile=instance_profile,
            optional_blocks={
                "root_block_device": {
                    "volume_size": var("jump_cluster_broker_storage"),
                    "volume_type": "gp3",
                },
                "metadata_options": {
                    "http_tokens": "required",
                    "http_put_response_hop_limit": 10,
                },
            },
        )
    )
    return blocks


def _private_link_connection_main() -> list[Block]:
    attachment = "confluent_private_link_attachment.jump_cluster_private_link_attachment"
    return [
        confluent.private_link_attachment(
            "jump_cluster_private_link_attachment",
            "jump_cluster_private_link_attachment",
            var("aws_region"),
            var("target_environment_id"),
        ),
        aws.vpc_endpoint(
            "jump_cluster_vpc_endpoint",
            var("vpc_id"),
            ref(f"{attachment}.aws[0].vpc_endpoint_service_name"),
            [var("security_group_id")],
            var("jump_cluster_broker_subnet_ids"),
            depends_on=[attachment],
        ),
        confluent.private_link_attachment_connection(
            "jump_cluster_private_link_connection",
            "jump_cluster_private_link_connection",
            var("target_environment_id"),
            ref("aws_vpc_endpoint.jump_cluster_vpc_endpoint.id"),
            ref(f"{attachment}.id"),
        ),
        aws.route53_zone(
            "jump_cluster_private_link_zone", var("vpc_id"), ref(f"{attachment}.dns_domain")
        ),
        aws.route53_wildcard_record(
            "jump_cluster_private_link_record",
            ref("aws_route53_zone.jump_cluster_private_link_zone.zone_id"),
            ref("aws_vpc_endpoint.jump_cluster_vpc_endpoint.dns_entry[0].dns_name"),
        ),
    ]


def _jump_cluster_links_user_data(request: MigrationWizardRequest) -> str:
    if request.msk_jump_cluster_auth_type == IAM:
        return read_asset("jump-cluster-with-iam-cluster-links-user-data.tpl")
    return read_asset("jump-cluster-with-sasl-scram-cluster-links-user-data.tpl")


def _jump_cluster_project(request: MigrationWizardRequest) -> TerraformProject:
    networking = networking_variables()
    setup_host = jump_cluster_setup_host_variables()
    jump_clusters = jump_cluster_variables()
    private_link = migration_private_link_variables()

    main = [
        _module_block(NETWORKING_MODULE, networking, request, providers=["aws"]),
        _module_block(JUMP_CLUSTERS_MODULE, jump_clusters, request, providers=["aws"]),
        _module_block(
            JUMP_CLUSTER_SETUP_HOST_MODULE,
            setup_host,
            request,
            providers=["aws"],
            depends_on=[JUMP_CLUSTERS_MODULE],
        ),
        _module_block(
            PRIVATE_LINK_CONNECTION_MODULE,
            private_link,
            request,
            providers=["aws", "confluent"],
        ),
    ]
    providers = render(
        [
            other.terraform_block(confluent.required_provider(), aws.required_provider()),
            confluent.provider_block(),
            aws.provider_block(),
        ]
    )
    variables_tf, tfvars = _root_files(request)

    modules = [
        _module(
            NETWORKING_MODULE,
            _networking_main(request),
            networking,
            request,
            (
                aws.required_provider(),
                other.TLS_PROVIDER,
                other.LOCAL_PROVIDER,
                other.RANDOM_PROVIDER,
            ),
            outputs_tf=render_outputs(networking_outputs(request)),
        ),
        _module(
            JUMP_CLUSTERS_MODULE,
            _jump_clusters_main(request),
            jump_clusters,
            request,
            (aws.required_provider(),),
            outputs_tf=render_outputs(jump_cluster_outputs()),
            additional_files={
                JUMP_CLUSTER_WITH_LINKS_USER_DATA: _jump_cluster_links_user_data(request),
                JUMP_CLUSTER_USER_DATA: read_asset(JUMP_CLUSTER_USER_DATA),
            },
        ),
        _module(
            JUMP_CLUSTER_SETUP_HOST_MODULE,
            _jump_cluster_setup_host_main(),
            setup_host,
            request,
            (aws.required_provider(),),
            additional_files={SETUP_HOST_USER_DATA: read_asset(SETUP_HOST_USER_DATA)},
        ),
        _module(
            PRIVATE_LINK_CONNECTION_MODULE,
            _private_link_connection_main(),
            private_link,
            request,
            (aws.required_provider(), confluent.required_provider()),
        ),
    ]

    return TerraformProject(
        main_tf=render(main),
        providers_tf=providers,
        variables_tf=variables_tf,
        inputs_auto_tfvars=tfvars,
        outputs_tf=render_outputs(migration_root_outputs(request)),
        modules=modules,
    )
