"""
Fully managed connector definitions for MSK Connect and self-managed connectors.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kcp.clients.confluent_cloud import ConfluentCloudClient, infer_plugin_name
from kcp.state import DiscoveredCluster
from kcp.util.files import ensure_dir
from kcp.util.naming import format_hcl_resource_name
from kcp.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "migrate_connectors"
CONNECTOR_TEMPLATE = "migrate_connectors/connector.tf.j2"


@dataclass
class Connector:
    name: str
    config: dict[str, Any]


def msk_connectors(cluster: DiscoveredCluster) -> list[Connector]:
    return [
        Connector(c["connector_name"], dict(c.get("connector_configuration") or {}))
        for c in cluster.msk_connectors
    ]


def self_managed_connectors(cluster: DiscoveredCluster) -> list[Connector]:
    return [Connector(c["name"], dict(c.get("config") or {})) for c in cluster.self_managed_connectors]


def translate_connector(
    client: ConfluentCloudClient, environment_id: str, cluster_id: str, connector: Connector
) -> tuple[dict[str, Any], list[dict[str, str]]]:
    connector_class = connector.config.get("connector.class")
    if not connector_class:
        raise ValueError("'connector.class' not found in config")
    plugin_name = infer_plugin_name(connector_class)
    return client.translate_connector_config(
        environment_id, cluster_id, plugin_name, connector.config
    )


def generate_connectors(
    connectors: list[Connector],
    client: ConfluentCloudClient,
    environment_id: str,
    cluster_id: str,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    loader: TemplateLoader | None = None,
) -> list[Path]:
    """
    Translate each connector and write ``<name>-connector.tf``.

    A connector that cannot be translated is logged and skipped; the remaining
    connectors are still written.

    Returns:
        Paths of the written connector files
    """
    if not connectors:
        logger.warning("No connectors found to migrate for the MSK cluster")
        return []

    output_dir = ensure_dir(output_dir)
    loader = loader or TemplateLoader()
    logger.info(f"Found {len(connectors)} connector(s) to migrate")

    written = []
    for connector in connectors:
        try:
            config, warnings = translate_connector(client, environment_id, cluster_id, connector)
        except Exception as e:
            logger.warning(f"Failed to translate connector {connector.name}: {e}")
            continue

        if warnings:
            logger.info(f"{len(warnings)} validation warnings for connector {connector.name}")

        written.append(
            loader.render_template(
                CONNECTOR_TEMPLATE,
                {
                    "connector_name": connector.name,
                    "resource_name": format_hcl_resource_name(connector.name),
                    "environment_id": environment_id,
                    "cluster_id": cluster_id,
                    "config": config,
                    "warnings": warnings,
                },
                output_dir / f"{connector.name}-connector.tf",
            )
        )
        logger.info(f"Generated {connector.name}-connector.tf")

    logger.info(f"Generated {len(written)} of {len(connectors)} connector files in {output_dir}")
    return written
