"""
Terraform for a bastion host in a public subnet of the MSK VPC.
"""

from kcp.hcl import aws, other
from kcp.hcl.variables import variable_block
from kcp.hcl.writer import Block, ref, render, render_attributes, string_template, var
from kcp.models.requests import BastionHostRequest
from kcp.models.terraform import TerraformProject, TerraformVariable


def generate_terraform_project(request: BastionHostRequest) -> TerraformProject:
    return TerraformProject(
        main_tf=_main_tf(request),
        providers_tf=_providers_tf(),
        variables_tf=_variables_tf(request),
        outputs_tf=_outputs_tf(),
        inputs_auto_tfvars=_inputs_auto_tfvars(request),
    )


def _main_tf(request: BastionHostRequest) -> str:
    vpc_id = var("vpc_id")

    if request.create_igw:
        igw = aws.internet_gateway("internet_gateway", vpc_id)
    else:
        igw = aws.internet_gateway_data_source("internet_gateway", vpc_id)

    blocks = [
        other.random_string("suffix", 4),
        other.tls_private_key("ssh_key", "RSA", 4096),
        *other.ssh_key_files("ssh_key", "./.ssh/bastion_host_rsa", "./.ssh/bastion_host_rsa.pub"),
        aws.key_pair(
            "bastion_host",
            string_template("bastion-host-ssh-key-${random_string.suffix.result}"),
            ref("tls_private_key.ssh_key.public_key_openssh"),
        ),
        aws.availability_zones_data_source("available"),
        igw,
        aws.subnet(
            "public_subnet",
            var("public_subnet_cidr"),
            ref("data.aws_availability_zones.available.names[0]"),
            vpc_id,
            map_public_ip_on_launch=True,
        ),
        aws.route_table(
            "public_rt",
            vpc_id,
            gateway_id=aws.internet_gateway_reference(not request.create_igw, "internet_gateway"),
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
        blocks.append(aws.security_group("bastion_host", [22], [0], vpc_id))
        security_group_ids = [ref("aws_security_group.bastion_host.id")]

    blocks += [
        aws.amazon_linux_ami(),
        aws.ec2_instance(
            "bastion_host",
            ref("data.aws_ami.amzn_linux_ami.id"),
            "t2.micro",
            ref("aws_subnet.public_subnet.id"),
            security_group_ids,
            key_name=ref("aws_key_pair.bastion_host.key_name"),
            associate_public_ip_address=True,
        ),
    ]
    return render(blocks)


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


def _variables_tf(request: BastionHostRequest) -> str:
    variables = [
        TerraformVariable("aws_region", "AWS region to deploy the bastion host to"),
        TerraformVariable("vpc_id", "ID of the VPC the bastion host is deployed to"),
        TerraformVariable("public_subnet_cidr", "CIDR block of the bastion host public subnet"),
    ]
    if request.security_group_ids:
        variables.append(
            TerraformVariable(
                "security_group_ids",
                "IDs of existing security groups to attach to the bastion host",
                type="list(string)",
            )
        )
    return render(variable_block(v) for v in variables)


def _outputs_tf() -> str:
    output = Block("output", "bastion_host_public_ip")
    output.set("value", ref("aws_instance.bastion_host.public_ip"))
    output.set("description", "Public IP address of the bastion host")
    return render([output])


def _inputs_auto_tfvars(request: BastionHostRequest) -> str:
    values = {
        "aws_region": request.region,
        "vpc_id": request.vpc_id,
        "public_subnet_cidr": request.public_subnet_cidr,
    }
    if request.security_group_ids:
        values["security_group_ids"] = list(request.security_group_ids)
    return render_attributes(values)
