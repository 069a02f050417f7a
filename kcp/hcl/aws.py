"""
AWS resource and data source builders.

Every builder returns a populated :class:`~kcp.hcl.writer.Block`. Arguments that
are plain ``str`` are written as quoted literals; pass :func:`var` / :func:`ref`
expressions for references.
"""

from typing import Any

from kcp.hcl.writer import (
    Block,
    Raw,
    conditional,
    function_call,
    ref,
    string_template,
    var,
)

AWS_PROVIDER_SOURCE = "hashicorp/aws"
AWS_PROVIDER_VERSION = "6.18.0"
VAR_AWS_REGION = "aws_region"

ANY_IPV4 = "0.0.0.0/0"

AMAZON_LINUX_OWNER = "137112412989"
AMAZON_LINUX_NAME = "al2023-ami-2023.*-kernel-6.1-x86_64"
RED_HAT_OWNER = "309956199498"
RED_HAT_NAME = "RHEL-9.6.0_HVM_GA-*"
UBUNTU_OWNER = "099720109477"
UBUNTU_NAME = "ubuntu/images/hvm-ssd/ubuntu-*-amd64-server-*"


def required_provider() -> tuple[str, dict[str, str]]:
    return "aws", {"source": AWS_PROVIDER_SOURCE, "version": AWS_PROVIDER_VERSION}


def provider_block(region: Any = None) -> Block:
    """``provider "aws"``; the region defaults to ``var.aws_region``."""
    block = Block("provider", "aws")
    block.set("region", region if region is not None else var(VAR_AWS_REGION))
    return block


# AMIs and instances


def ami_data_source(name: str, owner: str, image_name: str, architecture: str = "x86_64") -> Block:
    block = Block("data", "aws_ami", name)
    block.set("most_recent", True)
    block.set("owners", [owner])
    block.newline()
    filters = [
        ("name", image_name),
        ("state", "available"),
        ("architecture", architecture),
        ("virtualization-type", "hvm"),
    ]
    for filter_name, value in filters:
        f = block.block("filter")
        f.set("name", filter_name)
        f.set("values", [value])
    return block


def amazon_linux_ami(name: str = "amzn_linux_ami") -> Block:
    return ami_data_source(name, AMAZON_LINUX_OWNER, AMAZON_LINUX_NAME)


def red_hat_ami(name: str = "red_hat_linux_ami") -> Block:
    return ami_data_source(name, RED_HAT_OWNER, RED_HAT_NAME)


def ubuntu_ami(name: str = "ubuntu") -> Block:
    block = Block("data", "aws_ami", name)
    block.set("most_recent", True)
    block.set("owners", [UBUNTU_OWNER])
    block.newline()
    f = block.block("filter")
    f.set("name", "name")
    f.set("values", [UBUNTU_NAME])
    f = block.block("filter")
    f.set("name", "virtualization-type")
    f.set("values", ["hvm"])
    return block


def templatefile(template_name: str, variables: dict[str, Any] | None = None) -> Any:
    """``templatefile("${path.module}/<name>", {...})``."""
    return function_call(
        "templatefile", string_template(f"${{path.module}}/{template_name}"), variables or {}
    )


def ec2_instance(
    name: str,
    ami: Any,
    instance_type: Any,
    subnet_id: Any,
    security_group_ids: Any,
    key_name: Any = None,
    user_data: Any = None,
    associate_public_ip_address: bool = False,
    iam_instance_profile: Any = None,
    optional_blocks: dict[str, dict[str, Any]] | None = None,
    tags: dict[str, Any] | None = None,
) -> Block:
    """
    Build an ``aws_instance`` resource.

    Args:
        name: Terraform resource name
        ami: AMI id expression
        instance_type: Instance type literal or expression
        subnet_id: Subnet id expression
        security_group_ids: List of ids or an expression evaluating to a list
        key_name: Key pair name expression
        user_data: User data expression, usually from :func:`templatefile`
        associate_public_ip_address: Whether to request a public IP
        iam_instance_profile: Optional instance profile expression
        optional_blocks: Nested blocks such as ``root_block_device``
        tags: Resource tags

    Returns:
        The instance block
    """
    block = Block("resource", "aws_instance", name)
    _set_instance_body(
        block,
        ami,
        instance_type,
        subnet_id,
        security_group_ids,
        key_name,
        user_data,
        associate_public_ip_address,
        iam_instance_profile,
        optional_blocks,
        tags if tags is not None else {"Name": name},
    )
    return block


def ec2_instance_for_each(
    name: str,
    ami: Any,
    instance_type: Any,
    subnet_ids: Any,
    security_group_ids: Any,
    key_name: Any,
    first_user_data: Any,
    other_user_data: Any,
    iam_instance_profile: Any = None,
    optional_blocks: dict[str, dict[str, Any]] | None = None,
) -> Block:
    """
    One instance per subnet id.

    The first instance gets ``first_user_data``; every other instance gets
    ``other_user_data``.
    """
    block = Block("resource", "aws_instance", name)
    block.set(
        "for_each",
        Raw(
            "{ for idx, subnet_id in "
            + subnet_ids.render()
            + " : tostring(idx) => subnet_id }"
        ),
    )
    block.newline()
    _set_instance_body(
        block,
        ami,
        instance_type,
        ref("each.value"),
        security_group_ids,
        key_name,
        conditional('each.key == "0"', first_user_data, other_user_data),
        False,
        iam_instance_profile,
        optional_blocks,
        {"Name": string_template(f"{name}_${{each.key}}")},
    )
    return block


def _set_instance_body(
    block: Block,
    ami,
    instance_type,
    subnet_id,
    security_group_ids,
    key_name,
    user_data,
    associate_public_ip_address,
    iam_instance_profile,
    optional_blocks,
    tags,
) -> None:
    block.set("ami", ami)
    block.set("instance_type", instance_type)
    block.set("subnet_id", subnet_id)
    block.set("vpc_security_group_ids", security_group_ids)
    if key_name is not None:
        block.set("key_name", key_name)
    if associate_public_ip_address:
        block.set("associate_public_ip_address", True)
    if iam_instance_profile is not None:
        block.set("iam_instance_profile", iam_instance_profile)

    if user_data is not None:
        block.newline()
        block.set("user_data", user_data)

    for block_type, attributes in (optional_blocks or {}).items():
        block.newline()
        nested = block.block(block_type)
        for key, value in attributes.items():
            nested.set(key, value)

    if tags:
        block.newline()
        block.set("tags", tags)


def iam_instance_profile(name: str, role_name: Any) -> Block:
    block = Block("resource", "aws_iam_instance_profile", name)
    block.set("name_prefix", f"{name}-")
    block.set("role", role_name)
    return block


# Networking


def availability_zones_data_source(name: str = "available") -> Block:
    block = Block("data", "aws_availability_zones", name)
    block.set("state", "available")
    block.newline()
    f = block.block("filter")
    f.set("name", "opt-in-status")
    f.set("values", ["opt-in-not-required"])
    return block


def eip(name: str) -> Block:
    block = Block("resource", "aws_eip", name)
    block.set("domain", "vpc")
    return block


def internet_gateway(name: str, vpc_id: Any) -> Block:
    block = Block("resource", "aws_internet_gateway", name)
    block.set("vpc_id", vpc_id)
    return block


def internet_gateway_data_source(name: str, vpc_id: Any) -> Block:
    """Look up the gateway already attached to the VPC."""
    block = Block("data", "aws_internet_gateway", name)
    f = block.block("filter")
    f.set("name", "attachment.vpc-id")
    f.set("values", [vpc_id])
    return block


def internet_gateway_reference(existing: bool, name: str) -> Raw:
    if existing:
        return ref(f"data.aws_internet_gateway.{name}.id")
    return ref(f"aws_internet_gateway.{name}.id")


def key_pair(name: str, key_name: Any, public_key: Any) -> Block:
    block = Block("resource", "aws_key_pair", name)
    block.set("key_name", key_name)
    block.set("public_key", public_key)
    return block


def nat_gateway(name: str, allocation_id: Any, subnet_id: Any) -> Block:
    block = Block("resource", "aws_nat_gateway", name)
    block.set("allocation_id", allocation_id)
    block.set("subnet_id", subnet_id)
    return block


def route_table(name: str, vpc_id: Any, gateway_id: Any = None, nat_gateway_id: Any = None) -> Block:
    """Route table with a default route through an internet or NAT gateway."""
    block = Block("resource", "aws_route_table", name)
    block.set("vpc_id", vpc_id)
    block.newline()
    route = block.block("route")
    route.set("cidr_block", ANY_IPV4)
    if nat_gateway_id is not None:
        route.set("nat_gateway_id", nat_gateway_id)
    else:
        route.set("gateway_id", gateway_id)
    return block


def route_table_association(name: str, subnet_id: Any, route_table_id: Any) -> Block:
    block = Block("resource", "aws_route_table_association", name)
    block.set("subnet_id", subnet_id)
    block.set("route_table_id", route_table_id)
    return block


def route_table_association_for_each(name: str, subnets: str, route_table_id: Any) -> Block:
    """Associate every instance of a ``for_each`` subnet resource."""
    block = Block("resource", "aws_route_table_association", name)
    block.set("for_each", ref(subnets))
    block.newline()
    block.set("subnet_id", ref("each.value.id"))
    block.set("route_table_id", route_table_id)
    return block


def security_group(
    name: str, ingress_ports: list[int], egress_ports: list[int], vpc_id: Any
) -> Block:
    """TCP ingress from anywhere on each port; egress on each port for all protocols."""
    block = Block("resource", "aws_security_group", name)
    block.set("vpc_id", vpc_id)
    block.newline()
    for port in ingress_ports:
        ingress = block.block("ingress")
        ingress.set("from_port", port)
        ingress.set("to_port", port)
        ingress.set("protocol", "tcp")
        ingress.set("cidr_blocks", [ANY_IPV4])
    for port in egress_ports:
        egress = block.block("egress")
        egress.set("from_port", port)
        egress.set("to_port", port)
        egress.set("protocol", "-1")
        egress.set("cidr_blocks", [ANY_IPV4])
    return block


def subnet(
    name: str,
    cidr_block: Any,
    availability_zone: Any,
    vpc_id: Any,
    map_public_ip_on_launch: bool = False,
) -> Block:
    block = Block("resource", "aws_subnet", name)
    block.set("vpc_id", vpc_id)
    block.set("availability_zone", availability_zone)
    block.set("cidr_block", cidr_block)
    if map_public_ip_on_launch:
        block.set("map_public_ip_on_launch", True)
    return block


def subnet_for_each(name: str, cidr_blocks: Any, availability_zones: str, vpc_id: Any) -> Block:
    """One subnet per CIDR, spread over the available zones."""
    block = Block("resource", "aws_subnet", name)
    block.set(
        "for_each",
        Raw("{ for idx, cidr in " + cidr_blocks.render() + " : tostring(idx) => cidr }"),
    )
    block.newline()
    block.set("vpc_id", vpc_id)
    block.set(
        "availability_zone",
        ref(f"{availability_zones}.names[tonumber(each.key) % length({availability_zones}.names)]"),
    )
    block.set("cidr_block", ref("each.value"))
    return block


def subnet_data_source(name: str, subnet_id: Any) -> Block:
    block = Block("data", "aws_subnet", name)
    block.set("id", subnet_id)
    return block


def subnet_data_source_for_each(name: str, subnet_ids: Any) -> Block:
    block = Block("data", "aws_subnet", name)
    block.set("for_each", function_call("toset", subnet_ids))
    block.set("id", ref("each.value"))
    return block


def vpc_endpoint(
    name: str,
    vpc_id: Any,
    service_name: Any,
    security_group_ids: Any,
    subnet_ids: Any,
    depends_on: list[str] | None = None,
) -> Block:
    block = Block("resource", "aws_vpc_endpoint", name)
    block.set("vpc_id", vpc_id)
    block.set("service_name", service_name)
    block.set("vpc_endpoint_type", "Interface")
    block.set("security_group_ids", security_group_ids)
    block.set("subnet_ids", subnet_ids)
    if depends_on:
        block.newline()
        block.set("depends_on", [ref(d) for d in depends_on])
    return block


def route53_zone(name: str, vpc_id: Any, domain: Any) -> Block:
    block = Block("resource", "aws_route53_zone", name)
    block.set("name", domain)
    block.newline()
    vpc = block.block("vpc")
    vpc.set("vpc_id", vpc_id)
    return block


def route53_wildcard_record(name: str, zone_id: Any, record: Any) -> Block:
    """``*`` CNAME pointing every name in the zone at ``record``."""
    block = Block("resource", "aws_route53_record", name)
    block.set("zone_id", zone_id)
    block.set("name", "*")
    block.set("type", "CNAME")
    block.set("ttl", 60)
    block.set("records", [record])
    return block


# Per broker private link endpoint services


def broker_load_balancer(name: str, brokers: Any) -> Block:
    """Internal network load balancer for each broker, placed in the broker's subnet."""
    block = Block("resource", "aws_lb", name)
    block.set("for_each", Raw("{ for b in " + brokers.render() + " : b.id => b }"))
    block.newline()
    block.set("name", string_template("kcp-msk-broker-${each.key}"))
    block.set("internal", True)
    block.set("load_balancer_type", "network")
    block.set("subnets", [ref("each.value.subnet_id")])
    block.set("enable_cross_zone_load_balancing", False)
    return block


def broker_target_group(name: str, brokers: Any, vpc_id: Any, port: int) -> Block:
    block = Block("resource", "aws_lb_target_group", name)
    block.set("for_each", Raw("{ for b in " + brokers.render() + " : b.id => b }"))
    block.newline()
    block.set("name", string_template("kcp-msk-broker-${each.key}"))
    block.set("port", port)
    block.set("protocol", "TCP")
    block.set("target_type", "ip")
    block.set("vpc_id", vpc_id)
    return block


def broker_target_group_attachment(name: str, brokers: Any, target_group: str, port: int) -> Block:
    block = Block("resource", "aws_lb_target_group_attachment", name)
    block.set("for_each", Raw("{ for b in " + brokers.render() + " : b.id => b }"))
    block.newline()
    block.set("target_group_arn", ref(f"aws_lb_target_group.{target_group}[each.key].arn"))
    block.set("target_id", ref("each.value.endpoints[0].ip"))
    block.set("port", port)
    return block


def broker_listener(name: str, brokers: Any, load_balancer: str, target_group: str, port: int) -> Block:
    block = Block("resource", "aws_lb_listener", name)
    block.set("for_each", Raw("{ for b in " + brokers.render() + " : b.id => b }"))
    block.newline()
    block.set("load_balancer_arn", ref(f"aws_lb.{load_balancer}[each.key].arn"))
    block.set("port", port)
    block.set("protocol", "TCP")
    block.newline()
    action = block.block("default_action")
    action.set("type", "forward")
    action.set("target_group_arn", ref(f"aws_lb_target_group.{target_group}[each.key].arn"))
    return block


def broker_endpoint_service(name: str, brokers: Any, load_balancer: str, allowed_principal: Any) -> Block:
    block = Block("resource", "aws_vpc_endpoint_service", name)
    block.set("for_each", Raw("{ for b in " + brokers.render() + " : b.id => b }"))
    block.newline()
    block.set("acceptance_required", False)
    block.set("network_load_balancer_arns", [ref(f"aws_lb.{load_balancer}[each.key].arn")])
    block.set("allowed_principals", [allowed_principal])
    return block
