"""
Self-managed connector scan through the Kafka Connect REST API.
"""

import logging
from typing import Any
from urllib.parse import urlparse

from kcp.clients.connect import ConnectClient
from kcp.exceptions import KcpError
from kcp.state import DiscoveredCluster
from kcp.util.progress import track

logger = logging.getLogger(__name__)


def connector_details(client: ConnectClient, name: str) -> dict[str, Any]:
    """Config and state of one connector; a missing status leaves the state empty."""
    connector = {
        "name": name,
        "config": client.get_connector_config(name),
        "state": "",
        "connect_host": urlparse(client.base_url).hostname or client.base_url,
    }
    try:
        status = client.get_connector_status(name)
    except Exception as e:
        logger.warning(f"Failed to get connector status for connector {name}: {e}")
    else:
        connector["state"] = (status.get("connector") or {}).get("state", "")
    return connector


def scan_self_managed_connectors(cluster: DiscoveredCluster, client: ConnectClient) -> int:
    """
    Record the connectors of a Connect cluster against an MSK cluster.

    Returns:
        Number of connectors recorded
    """
    logger.info(f"Starting self-managed connector scan for cluster {cluster.name}")

    try:
        names = client.list_connectors()
    except Exception as e:
        raise KcpError(f"failed to list connectors: {e}") from e

    logger.info(f"Found {len(names)} connectors")
    if not names:
        logger.info(f"No connectors found for cluster {cluster.name}, skipping")
        return 0

    connectors = []
    for name in track(names, "Scanning connectors"):
        try:
            connectors.append(connector_details(client, name))
        except Exception as e:
            logger.warning(f"Failed to get connector details for connector {name}: {e}")
            continue

    cluster.self_managed_connectors = connectors
    logger.info(f"Retrieved details for {len(connectors)} connectors on cluster {cluster.name}")
    return len(connectors)
