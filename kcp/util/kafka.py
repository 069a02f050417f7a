"""
Kafka version and topic helpers.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_KAFKA_VERSION = "4.0.0"
INTERNAL_TOPIC_PREFIX = "__"


def convert_kafka_version(version: str) -> str:
    """
    Convert an MSK Kafka version label into a plain Apache Kafka version.

    Examples:
        4.0.x.kraft -> 4.0.0
        3.9.x -> 3.9.0
        2.8.2.tiered -> 2.8.2
        3.6.0.1 -> 3.6.0
    """
    if "kraft" in version:
        return version.replace(".x.kraft", ".0")
    if "x" in version:
        return version.replace(".x", ".0")
    if "tiered" in version:
        return version.replace(".tiered", "")
    if version == "3.6.0.1":
        return "3.6.0"
    return version


def get_kafka_version(msk_cluster_config: dict[str, Any]) -> str:
    """Return the Kafka version of a discovered MSK cluster."""
    cluster_type = msk_cluster_config.get("ClusterType")

    if cluster_type == "PROVISIONED":
        provisioned = msk_cluster_config.get("Provisioned") or {}
        software = provisioned.get("CurrentBrokerSoftwareInfo") or {}
        return convert_kafka_version(software.get("KafkaVersion", ""))

    if cluster_type == "SERVERLESS":
        logger.warning(
            f"Serverless clusters do not expose a Kafka version, assuming {DEFAULT_KAFKA_VERSION}"
        )
    else:
        logger.warning(
            f"Unknown cluster type '{cluster_type}', assuming Kafka {DEFAULT_KAFKA_VERSION}"
        )
    return DEFAULT_KAFKA_VERSION


def get_client_broker_encryption(msk_cluster_config: dict[str, Any]) -> str:
    """Return the in-transit encryption setting (TLS, TLS_PLAINTEXT or PLAINTEXT)."""
    provisioned = msk_cluster_config.get("Provisioned") or {}
    encryption = (provisioned.get("EncryptionInfo") or {}).get("EncryptionInTransit") or {}
    return encryption.get("ClientBroker", "TLS")


def is_internal_topic(name: str) -> bool:
    return name.startswith(INTERNAL_TOPIC_PREFIX)


def calculate_topic_summary(details: list[dict[str, Any]]) -> dict[str, int]:
    """
    Aggregate topic details into the summary stored alongside them.

    Args:
        details: Topic detail dictionaries (name, partitions, configurations)

    Returns:
        Summary counts keyed by the state file field names
    """
    summary = {
        "topics": 0,
        "internal_topics": 0,
        "total_partitions": 0,
        "total_internal_partitions": 0,
        "compact_topics": 0,
        "compact_partitions": 0,
        "remote_storage_topics": 0,
    }

    for topic in details:
        partitions = int(topic.get("partitions", 0))
        configurations = topic.get("configurations") or {}

        if is_internal_topic(topic["name"]):
            summary["internal_topics"] += 1
            summary["total_internal_partitions"] += partitions
        else:
            summary["topics"] += 1
            summary["total_partitions"] += partitions

        if "compact" in (configurations.get("cleanup.policy") or ""):
            summary["compact_topics"] += 1
            summary["compact_partitions"] += partitions

        if "true" in (configurations.get("remote.storage.enable") or ""):
            summary["remote_storage_topics"] += 1

    return summary
