"""
Terraform for the reverse proxy that exposes a private Confluent Cloud cluster
to a workstation outside the VPC.
"""

from kcp.hcl import aws, other
from kcp.hcl.variables import variable_block
from kcp.hcl.writer import (
    Block,
    Raw,
    function_call,
    heredoc,
    ref,
    render,
    render_attributes,
    string_template,
    var,
)
from kcp.models.requests import ReverseProxyRequest
from kcp.models.terraform import TerraformProject, TerraformVariable

USER_DATA_TEMPLATE = "reverse-proxy-user-data.tpl"
DNS_ENTRIES_SCRIPT = "generate_dns_entries.sh"

DEFAULT_PUBLIC_SUBNET_CIDR = "10.0.30.0/24"
DEFAULT_AWS_REGION = "us-east-1"


def generate_terraform_project(request: ReverseProxyRequest) -> TerraformProject:
    return TerraformProject(
        main_tf=_main_tf(request),
        providers_tf=_providers_tf(),
        variables_tf=_variables_tf(request),
        inputs_auto_tfvars=_inputs_auto_tfvars(request),
    )


def _main_tf(request: ReverseProxyRequest) -> str:
    vpc_id = var("vpc_id")

    # Extract the hostname from the bootstrap endpoint
    locals_block = Block("locals")
    locals_block.set(
        "cluster_hostname",
        Raw(
            function_call(
                "regex", "(.*):", var("confluent_cloud_cluster_bootstrap_endpoint")
            ).render()
            + "[0]"
        ),
    )

    blocks = [
        locals_block,
        other.random_string("suffix", 4),
        other.tls_private_key("ssh_key", "RSA", 4096),
        *other.ssh_key_files("ssh_key", "./.ssh/reverse_proxy_rsa", "./.ssh/reverse_proxy_rsa.pub"),
        aws.key_pair(
            "deployer",
            string_template("reverse-proxy-ssh-key-${random_string.suffix.result}"),
            ref("tls_private_key.ssh_key.public_key_openssh"),
        ),
        aws.availability_zones_data_source("available"),
        aws.internet_gateway_data_source("existing_internet_gateway", vpc_id),
        aws.route_table(
            "public_rt",
            vpc_id,
            gateway_id=ref("data.aws_internet_gateway.existing_internet_gateway.id"),
        ),
        aws.subnet(
            "public_subnet",
            var("public_subnet_cidr"),
            ref("data.aws_availability_zones.available.names[0]"),
            vpc_id,
            map_public_ip_on_launch=True,
        ),
        aws.route_table_association(
            "public_rt_association",
            ref("aws_subnet.public_subnet.id"),
            ref("aws_route_table.public_rt.id"),
        ),
    ]

    if request.security_group_ids:
        security_group_ids = var("security_group_ids")
    else:
        blocks.append(aws.security_group("public", [22, 443, 9092], [0], vpc_id))
        security_group_ids = [ref("aws_security_group.public.id")]

    blocks.append(aws.ubuntu_ami("ubuntu_ami"))

    instance = aws.ec2_instance(
        "proxy",
        ref("data.aws_ami.ubuntu_ami.id"),
        "t2.micro",
        ref("aws_subnet.public_subnet.id"),
        security_group_ids,
        key_name=ref("aws_key_pair.deployer.key_name"),
        user_data=aws.templatefile(USER_DATA_TEMPLATE),
        associate_public_ip_address=True,
    )
    instance.newline()
    provisioner = instance.block("provisioner", "local-exec")
    provisioner.set("when", Raw("create"))
    provisioner.set("on_failure", Raw("continue"))
    provisioner.set(
        "command",
        heredoc(f"bash ./{DNS_ENTRIES_SCRIPT} ${{self.public_ip}} ${{local.cluster_hostname}}", "EOF"),
    )
    provisioner.set("working_dir", ref("path.module"))
    blocks.append(instance)

    blocks.append(_output("reverse_proxy_public_ip", "aws_instance.proxy.public_ip"))
    return render(blocks)


def _output(name: str, value: str) -> Block:
    block = Block("output", name)
    block.set("value", ref(value))
    return block


def _providers_tf() -> str:
    return render(
        [
            other.terraform_block(
                aws.required_provider(),
                other.TLS_PROVIDER,
                other.LOCAL_PROVIDER,
                other.RANDOM_PROVIDER,
            ),
            aws.provider_block(),
        ]
    )


def _variables_tf(request: ReverseProxyRequest) -> str:
    variables = [
        variable_block(TerraformVariable("vpc_id", "The ID of the VPC")),
        variable_block(TerraformVariable("public_subnet_cidr", "CIDR block for the public subnet")),
        variable_block(
            TerraformVariable(
                "confluent_cloud_cluster_bootstrap_endpoint",
                "The bootstrap endpoint of the Confluent Cloud cluster",
            )
        ),
        variable_block(TerraformVariable("aws_region", "AWS Region")),
    ]
    variables[1].set("default", DEFAULT_PUBLIC_SUBNET_CIDR)
    variables[3].set("default", DEFAULT_AWS_REGION)

    if request.security_group_ids:
        variables.append(
            variable_block(
                TerraformVariable(
                    "security_group_ids",
                    "IDs of existing security groups to attach to the reverse proxy",
                    type="list(string)",
                )
            )
        )
    return render(variables)


def _inputs_auto_tfvars(request: ReverseProxyRequest) -> str:
    values = {
        "aws_region": request.region,
        "public_subnet_cidr": request.public_subnet_cidr,
        "vpc_id": request.vpc_id,
        "confluent_cloud_cluster_bootstrap_endpoint": request.confluent_cloud_cluster_bootstrap_endpoint,
    }
    if request.security_group_ids:
        values["security_group_ids"] = list(request.security_group_ids)
    return render_attributes(values)
