"""
Kafka admin scanning of MSK clusters using confluent-kafka's AdminClient.
"""

import logging
from typing import Any

from aws_msk_iam_sasl_signer import MSKAuthTokenProvider
from confluent_kafka import KafkaException
from confluent_kafka.admin import (
    AclBindingFilter,
    AclOperation,
    AclPermissionType,
    AdminClient,
    ConfigResource,
    ResourcePatternType,
    ResourceType,
)

from kcp.exceptions import ConfigurationError, KcpError
from kcp.state import (
    AUTH_IAM,
    AUTH_SASL_SCRAM,
    AUTH_TLS,
    AUTH_UNAUTHENTICATED_PLAINTEXT,
    AUTH_UNAUTHENTICATED_TLS,
)
from kcp.util.kafka import calculate_topic_summary

logger = logging.getLogger(__name__)

CLIENT_ID = "kcp-cli"
REQUEST_TIMEOUT = 30
SCRAM_MECHANISM = "SCRAM-SHA-512"


def msk_iam_token_callback(region: str):
    """OAUTHBEARER callback returning a signed MSK IAM token and its expiry in seconds."""

    def oauth_cb(_oauth_config):
        token, expiry_ms = MSKAuthTokenProvider.generate_auth_token(region)
        return token, expiry_ms / 1000

    return oauth_cb


def build_admin_config(
    bootstrap_servers: list[str],
    auth_type: str,
    settings: dict[str, Any],
    client_broker_encryption: str = "TLS",
    region: str | None = None,
) -> dict[str, Any]:
    """
    librdkafka configuration for one authentication method.

    Args:
        bootstrap_servers: Broker host:port list
        auth_type: Credentials file auth method key
        settings: The auth method's settings from the credentials file
        client_broker_encryption: MSK in-transit encryption (TLS, TLS_PLAINTEXT, PLAINTEXT)
        region: AWS region used to sign IAM auth tokens
    """
    config: dict[str, Any] = {
        "bootstrap.servers": ",".join(bootstrap_servers),
        "client.id": CLIENT_ID,
        "socket.timeout.ms": REQUEST_TIMEOUT * 1000,
    }

    if auth_type == AUTH_SASL_SCRAM:
        config.update(
            {
                "security.protocol": "SASL_SSL",
                "sasl.mechanism": SCRAM_MECHANISM,
                "sasl.username": settings.get("username", ""),
                "sasl.password": settings.get("password", ""),
            }
        )
    elif auth_type == AUTH_TLS:
        config.update(
            {
                "security.protocol": "SSL",
                "ssl.ca.location": settings.get("ca_cert", ""),
                "ssl.certificate.location": settings.get("client_cert", ""),
                "ssl.key.location": settings.get("client_key", ""),
            }
        )
    elif auth_type == AUTH_UNAUTHENTICATED_TLS:
        config["security.protocol"] = "SSL"
    elif auth_type == AUTH_UNAUTHENTICATED_PLAINTEXT:
        config["security.protocol"] = (
            "PLAINTEXT" if client_broker_encryption == "PLAINTEXT" else "SSL"
        )
    elif auth_type == AUTH_IAM:
        if not region:
            raise ConfigurationError("IAM authentication needs the cluster region to sign tokens")
        config.update(
            {
                "security.protocol": "SASL_SSL",
                "sasl.mechanism": "OAUTHBEARER",
                "oauth_cb": msk_iam_token_callback(region),
            }
        )
    else:
        raise ConfigurationError(f"Auth type: {auth_type} not yet supported")

    return config


class KafkaAdminScanner:
    """Collects cluster id, topics and ACLs from a Kafka cluster."""

    def __init__(self, config: dict[str, Any], admin_client: AdminClient | None = None):
        if admin_client is None:
            admin_client = AdminClient(config)
            if "oauth_cb" in config:
                # the first token is fetched from poll()
                admin_client.poll(0)
        self.admin = admin_client

    def describe_cluster(self) -> tuple[str, dict[str, Any]]:
        """Cluster id and topic metadata."""
        metadata = self.admin.list_topics(timeout=REQUEST_TIMEOUT)
        return metadata.cluster_id, metadata.topics

    def topic_details(self, topics: dict[str, Any]) -> list[dict[str, Any]]:
        names = sorted(topics)
        if not names:
            return []

        resources = [ConfigResource(ResourceType.TOPIC, name) for name in names]
        futures = self.admin.describe_configs(resources, request_timeout=REQUEST_TIMEOUT)
        configs: dict[str, dict[str, str]] = {}
        for resource, future in futures.items():
            entries = future.result()
            configs[resource.name] = {
                key: entry.value for key, entry in entries.items() if entry.value is not None
            }

        details = []
        for name in names:
            partitions = topics[name].partitions
            first = partitions.get(0) or next(iter(partitions.values()), None)
            details.append(
                {
                    "name": name,
                    "partitions": len(partitions),
                    "replication_factor": len(first.replicas) if first else 0,
                    "configurations": configs.get(name, {}),
                }
            )
        return details

    def acls(self) -> list[dict[str, str]]:
        acl_filter = AclBindingFilter(
            ResourceType.ANY,
            None,
            ResourcePatternType.ANY,
            None,
            None,
            AclOperation.ANY,
            AclPermissionType.ANY,
        )
        bindings = self.admin.describe_acls(acl_filter, request_timeout=REQUEST_TIMEOUT).result()
        return [
            {
                "ResourceType": binding.restype.name,
                "ResourceName": binding.name,
                "ResourcePatternType": binding.resource_pattern_type.name,
                "Principal": binding.principal,
                "Host": binding.host,
                "Operation": binding.operation.name,
                "PermissionType": binding.permission_type.name,
            }
            for binding in bindings
        ]

    def scan(self, serverless: bool = False) -> dict[str, Any]:
        """
        Build the ``kafka_admin_client_information`` entry for a cluster.

        Serverless clusters do not expose ACLs, so the ACL scan is skipped.
        """
        try:
            cluster_id, topics = self.describe_cluster()
            details = self.topic_details(topics)
            acls: list[dict[str, str]] = []
            if serverless:
                logger.warning("Serverless clusters do not support querying Kafka ACLs, skipping")
            else:
                acls = self.acls()
        except KafkaException as e:
            raise KcpError(f"Kafka admin request failed: {e}") from e

        logger.info(f"Found {len(details)} topics and {len(acls)} ACLs on cluster {cluster_id}")
        return {
            "cluster_id": cluster_id,
            "topics": {"summary": calculate_topic_summary(details), "details": details},
            "acls": acls,
        }
