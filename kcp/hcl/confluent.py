"""
Confluent Cloud resource and data source builders.
"""

from typing import Any

from kcp.hcl.writer import (
    Block,
    Raw,
    function_call,
    heredoc,
    ref,
    string_template,
    var,
)
from kcp.util.naming import format_hcl_resource_name

CONFLUENT_PROVIDER_SOURCE = "confluentinc/confluent"
CONFLUENT_PROVIDER_VERSION = "2.50.0"

VAR_CLOUD_API_KEY = "confluent_cloud_api_key"
VAR_CLOUD_API_SECRET = "confluent_cloud_api_secret"

KAFKA_CLUSTER = "confluent_kafka_cluster.cluster"
KAFKA_API_KEY = "confluent_api_key.app-manager-kafka-api-key"

CLUSTER_LINK_SASL_MECHANISM = "SCRAM-SHA-512"


def required_provider() -> tuple[str, dict[str, str]]:
    return "confluent", {
        "source": CONFLUENT_PROVIDER_SOURCE,
        "version": CONFLUENT_PROVIDER_VERSION,
    }


def provider_block(with_credentials: bool = True) -> Block:
    block = Block("provider", "confluent")
    if with_credentials:
        block.set("cloud_api_key", var(VAR_CLOUD_API_KEY))
        block.set("cloud_api_secret", var(VAR_CLOUD_API_SECRET))
    return block


# Environments and clusters


def environment(name: str, display_name: Any) -> Block:
    """New environment with ADVANCED stream governance, protected from destroy."""
    block = Block("resource", "confluent_environment", name)
    block.set("display_name", display_name)
    block.newline()
    governance = block.block("stream_governance")
    governance.set("package", "ADVANCED")
    block.newline()
    lifecycle = block.block("lifecycle")
    lifecycle.set("prevent_destroy", True)
    return block


def environment_data_source(name: str, environment_id: Any) -> Block:
    block = Block("data", "confluent_environment", name)
    block.set("id", environment_id)
    return block


def environment_reference(is_new: bool, name: str = "environment", attribute: str = "id") -> Raw:
    if is_new:
        return ref(f"confluent_environment.{name}.{attribute}")
    return ref(f"data.confluent_environment.{name}.{attribute}")


def kafka_cluster(
    name: str, display_name: Any, cluster_type: str, region: Any, environment_id: Any
) -> Block:
    """
    New Kafka cluster in AWS.

    Dedicated clusters get 1 CKU in a single zone; enterprise clusters are
    highly available.
    """
    block = Block("resource", "confluent_kafka_cluster", name)
    block.set("display_name", display_name)
    block.set("cloud", "AWS")
    block.set("region", region)

    if cluster_type == "dedicated":
        # MULTI_ZONE is required once the cluster grows past 1 CKU
        block.set("availability", "SINGLE_ZONE")
        block.newline()
        dedicated = block.block("dedicated")
        dedicated.set("cku", 1)
    elif cluster_type == "enterprise":
        block.set("availability", "HIGH")
        block.newline()
        block.block("enterprise")

    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    return block


def kafka_cluster_data_source(name: str, cluster_id: Any, environment_id: Any) -> Block:
    block = Block("data", "confluent_kafka_cluster", name)
    block.set("id", cluster_id)
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    return block


def kafka_cluster_reference(is_new: bool, name: str = "cluster", attribute: str = "id") -> Raw:
    if is_new:
        return ref(f"confluent_kafka_cluster.{name}.{attribute}")
    return ref(f"data.confluent_kafka_cluster.{name}.{attribute}")


# Identity


def service_account(name: str, description: str, display_name: Any = None) -> Block:
    block = Block("resource", "confluent_service_account", name)
    block.set("display_name", display_name if display_name is not None else name)
    block.set("description", description)
    return block


def role_binding(name: str, principal: Any, role_name: str, crn_pattern: Any) -> Block:
    block = Block("resource", "confluent_role_binding", name)
    block.set("principal", principal)
    block.set("role_name", role_name)
    block.set("crn_pattern", crn_pattern)
    return block


def _owner(block: Block, service_account_name: str) -> None:
    owner = block.block("owner")
    owner.set("id", ref(f"confluent_service_account.{service_account_name}.id"))
    owner.set("api_version", ref(f"confluent_service_account.{service_account_name}.api_version"))
    owner.set("kind", ref(f"confluent_service_account.{service_account_name}.kind"))


def schema_registry_api_key(
    name: str,
    environment_label: str,
    service_account_name: str,
    schema_registry: str,
    environment_id: Any,
) -> Block:
    block = Block("resource", "confluent_api_key", name)
    block.set("display_name", "env-manager-schema-registry-api-key")
    block.set(
        "description",
        f"Schema Registry API Key that is owned by the {environment_label} environment.",
    )
    block.newline()
    _owner(block, service_account_name)
    block.newline()
    managed = block.block("managed_resource")
    managed.set("id", ref(f"data.confluent_schema_registry_cluster.{schema_registry}.id"))
    managed.set(
        "api_version", ref(f"data.confluent_schema_registry_cluster.{schema_registry}.api_version")
    )
    managed.set("kind", ref(f"data.confluent_schema_registry_cluster.{schema_registry}.kind"))
    managed.newline()
    env = managed.block("environment")
    env.set("id", environment_id)
    return block


def kafka_api_key(
    name: str,
    environment_label: str,
    service_account_name: str,
    cluster: Raw,
    environment_id: Any,
    role_binding_name: str,
) -> Block:
    """Kafka API key for the cluster admin service account.

    ``cluster`` is the cluster address, e.g. ``confluent_kafka_cluster.cluster``.
    """
    block = Block("resource", "confluent_api_key", name)
    block.set("display_name", "app-manager-kafka-api-key")
    block.set(
        "description", f"Kafka API Key that has been created by the {environment_label} environment."
    )
    block.newline()
    _owner(block, service_account_name)
    block.newline()
    managed = block.block("managed_resource")
    managed.set("id", ref(f"{cluster.text}.id"))
    managed.set("api_version", ref(f"{cluster.text}.api_version"))
    managed.set("kind", ref(f"{cluster.text}.kind"))
    managed.newline()
    env = managed.block("environment")
    env.set("id", environment_id)
    block.newline()
    block.set("disable_wait_for_ready", True)
    block.set("depends_on", [ref(f"confluent_role_binding.{role_binding_name}")])
    return block


def schema_registry_data_source(name: str, environment_id: Any, depends_on: list[str]) -> Block:
    block = Block("data", "confluent_schema_registry_cluster", name)
    env = block.block("environment")
    env.set("id", environment_id)
    block.newline()
    block.set("depends_on", [ref(d) for d in depends_on])
    return block


# ACLs


def kafka_acl(
    name: str,
    resource_type: str,
    resource_name: str,
    pattern_type: str,
    principal: Any,
    operation: str,
    permission: str = "ALLOW",
    host: str = "*",
    cluster: str = KAFKA_CLUSTER,
    api_key: str = KAFKA_API_KEY,
) -> Block:
    block = Block("resource", "confluent_kafka_acl", name)
    kafka = block.block("kafka_cluster")
    kafka.set("id", ref(f"{cluster}.id"))
    block.newline()
    block.set("resource_type", resource_type)
    block.set("resource_name", resource_name)
    block.set("pattern_type", pattern_type)
    block.set("principal", principal)
    block.set("host", host)
    block.set("operation", operation)
    block.set("permission", permission)
    block.set("rest_endpoint", ref(f"{cluster}.rest_endpoint"))
    block.newline()
    credentials = block.block("credentials")
    credentials.set("key", ref(f"{api_key}.id"))
    credentials.set("secret", ref(f"{api_key}.secret"))
    return block


# Schema exporters

VAR_SOURCE_SR_ID = "source_schema_registry_id"
VAR_SOURCE_SR_URL = "source_schema_registry_url"
VAR_SOURCE_SR_USERNAME = "source_schema_registry_username"
VAR_SOURCE_SR_PASSWORD = "source_schema_registry_password"
VAR_CC_SR_URL = "confluent_cloud_schema_registry_url"
VAR_CC_SR_API_KEY = "confluent_cloud_schema_registry_api_key"
VAR_CC_SR_API_SECRET = "confluent_cloud_schema_registry_api_secret"


def schema_exporter(
    exporter_name: str, subjects: list[str], context_type: str, context: str
) -> Block:
    block = Block("resource", "confluent_schema_exporter", format_hcl_resource_name(exporter_name))
    block.set("name", exporter_name)
    block.newline()
    cluster = block.block("schema_registry_cluster")
    cluster.set("id", var(VAR_SOURCE_SR_ID))
    block.newline()
    block.set("rest_endpoint", var(VAR_SOURCE_SR_URL))
    credentials = block.block("credentials")
    credentials.set("key", var(VAR_SOURCE_SR_USERNAME))
    credentials.set("secret", var(VAR_SOURCE_SR_PASSWORD))
    block.newline()
    block.set("subjects", list(subjects))
    block.set("context_type", context_type)
    if context:
        block.set("context", context)
    block.newline()
    destination = block.block("destination_schema_registry_cluster")
    destination.set("rest_endpoint", var(VAR_CC_SR_URL))
    destination.newline()
    dest_credentials = destination.block("credentials")
    dest_credentials.set("key", var(VAR_CC_SR_API_KEY))
    dest_credentials.set("secret", var(VAR_CC_SR_API_SECRET))
    return block


# Private networking


def private_link_attachment(name: str, display_name: Any, region: Any, environment_id: Any) -> Block:
    block = Block("resource", "confluent_private_link_attachment", name)
    block.set("display_name", display_name)
    block.set("cloud", "AWS")
    block.set("region", region)
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    return block


def private_link_attachment_connection(
    name: str, display_name: Any, environment_id: Any, vpc_endpoint_id: Any, attachment_id: Any
) -> Block:
    block = Block("resource", "confluent_private_link_attachment_connection", name)
    block.set("display_name", display_name)
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    block.newline()
    aws = block.block("aws")
    aws.set("vpc_endpoint_id", vpc_endpoint_id)
    block.newline()
    attachment = block.block("private_link_attachment")
    attachment.set("id", attachment_id)
    return block


def egress_gateway(name: str, display_name: Any, region: Any, environment_id: Any) -> Block:
    """Gateway for egress private link from Confluent Cloud into the customer VPC."""
    block = Block("resource", "confluent_gateway", name)
    block.set("display_name", display_name)
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    block.newline()
    aws = block.block("aws_egress_private_link_gateway")
    aws.set("region", region)
    return block


def access_point_for_each(
    name: str, items: Any, environment_id: Any, gateway_id: Any, endpoint_service_name: Any
) -> Block:
    block = Block("resource", "confluent_access_point", name)
    block.set("for_each", items)
    block.newline()
    block.set("display_name", string_template("kcp-msk-broker-${each.key}"))
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    block.newline()
    gateway = block.block("gateway")
    gateway.set("id", gateway_id)
    block.newline()
    endpoint = block.block("aws_egress_private_link_endpoint")
    endpoint.set("vpc_endpoint_service_name", endpoint_service_name)
    return block


def dns_record_for_each(
    name: str, items: Any, environment_id: Any, domain: Any, gateway_id: Any, access_point_id: Any
) -> Block:
    block = Block("resource", "confluent_dns_record", name)
    block.set("for_each", items)
    block.newline()
    block.set("display_name", string_template("kcp-msk-broker-${each.key}"))
    block.set("domain", domain)
    block.newline()
    env = block.block("environment")
    env.set("id", environment_id)
    block.newline()
    gateway = block.block("gateway")
    gateway.set("id", gateway_id)
    block.newline()
    access_point = block.block("private_link_access_point")
    access_point.set("id", access_point_id)
    return block


# Cluster link

CLUSTER_LINK_COMMAND = """curl --request POST \\
  --url '{rest_endpoint}/kafka/v3/clusters/{cluster_id}/links/?link_name={link_name}' \\
  --header 'Authorization: Basic ${{local.basic_auth_credentials}}' \\
  --header "Content-Type: application/json" \\
  --data '{{
    "source_cluster_id": "{source_cluster_id}",
    "configs": [
      {{
        "name": "bootstrap.servers",
        "value": "{bootstrap_servers}"
      }},
      {{
        "name": "link.mode",
        "value": "DESTINATION"
      }},
      {{
        "name": "security.protocol",
        "value": "SASL_SSL"
      }},
      {{
        "name": "sasl.mechanism",
        "value": "{mechanism}"
      }},
      {{
        "name": "sasl.jaas.config",
        "value": "org.apache.kafka.common.security.scram.ScramLoginModule required username=\\"${{var.msk_sasl_scram_username}}\\" password=\\"${{var.msk_sasl_scram_password}}\\";"
      }}
    ]
  }}'"""


def cluster_link_locals(api_key_var: str, api_secret_var: str) -> Block:
    block = Block("locals")
    block.set(
        "basic_auth_credentials",
        function_call("base64encode", string_template(f"${{var.{api_key_var}}}:${{var.{api_secret_var}}}")),
    )
    return block


def cluster_link_command(
    rest_endpoint: str,
    cluster_id: str,
    link_name: str,
    source_cluster_id: str,
    bootstrap_servers: str,
) -> str:
    return CLUSTER_LINK_COMMAND.format(
        rest_endpoint=rest_endpoint,
        cluster_id=cluster_id,
        link_name=link_name,
        source_cluster_id=source_cluster_id,
        bootstrap_servers=bootstrap_servers,
        mechanism=CLUSTER_LINK_SASL_MECHANISM,
    )


def cluster_link_resource(
    rest_endpoint: str,
    cluster_id: str,
    link_name: str,
    source_cluster_id: str,
    bootstrap_servers: str,
) -> Block:
    """
    Destination-initiated cluster link created through the REST API.

    The ``confluent_cluster_link`` resource only speaks SASL PLAIN, while MSK
    SASL/SCRAM requires SCRAM-SHA-512, so the link is created by a
    ``local-exec`` provisioner on a ``null_resource``.

    Args:
        rest_endpoint: REST endpoint of the Confluent Cloud cluster
        cluster_id: ID of the Confluent Cloud cluster
        link_name: Cluster link name
        source_cluster_id: ID of the MSK cluster
        bootstrap_servers: MSK SASL/SCRAM bootstrap servers

    Returns:
        The null_resource block
    """
    block = Block("resource", "null_resource", "confluent_cluster_link")
    block.set(
        "triggers",
        {
            "source_cluster_id": string_template(source_cluster_id),
            "destination_cluster_id": string_template(cluster_id),
            "bootstrap_servers": string_template(bootstrap_servers),
        },
    )
    block.newline()
    provisioner = block.block("provisioner", "local-exec")
    provisioner.set(
        "command",
        heredoc(
            cluster_link_command(
                rest_endpoint, cluster_id, link_name, source_cluster_id, bootstrap_servers
            )
        ),
    )
    return block
