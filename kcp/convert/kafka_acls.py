"""
Kafka ACLs scanned from an MSK cluster.
"""

import logging
from pathlib import Path
from typing import Any

from kcp.convert.acls import Acl, to_provider_enum, write_acl_files
from kcp.state import DiscoveredCluster

logger = logging.getLogger(__name__)


def default_output_dir(cluster: DiscoveredCluster) -> str:
    return f"{cluster.name}_acls"


def acl_from_state(entry: dict[str, Any]) -> Acl:
    return Acl(
        principal=entry["Principal"],
        resource_type=to_provider_enum(entry["ResourceType"]),
        resource_name=entry["ResourceName"],
        pattern_type=to_provider_enum(entry["ResourcePatternType"]),
        operation=to_provider_enum(entry["Operation"]),
        permission=to_provider_enum(entry.get("PermissionType") or "ALLOW"),
        host=entry.get("Host") or "*",
    )


def convert_kafka_acls(
    cluster: DiscoveredCluster,
    output_dir: str | Path | None = None,
    audit_report: bool = True,
) -> list[Path]:
    """Write Confluent Cloud ACL Terraform for the ACLs recorded by ``scan clusters``."""
    acls = [acl_from_state(entry) for entry in cluster.acls]
    if not acls:
        logger.warning(f"No ACLs found for cluster {cluster.name}, nothing to convert")
        return []

    output_dir = output_dir or default_output_dir(cluster)
    logger.info(f"Converting {len(acls)} ACLs of cluster {cluster.name} into {output_dir}")
    return write_acl_files(acls, output_dir, audit_report=audit_report, source="kafka")
