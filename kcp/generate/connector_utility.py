"""
Connector config exports for the connect-migration-utility.
"""

import logging
from pathlib import Path
from typing import Any

from kcp.state import DiscoveredCluster
from kcp.util.files import ensure_dir, write_json
from kcp.util.naming import extract_cluster_name_from_arn
from kcp.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "connector_utility"


def config_file_name(cluster: DiscoveredCluster) -> str:
    return f"{extract_cluster_name_from_arn(cluster.arn)}-connector-configs.json"


def build_connector_configs(cluster: DiscoveredCluster) -> dict[str, Any]:
    """
    MSK Connect and self-managed connectors keyed by name.

    A self-managed connector replaces an MSK Connect connector of the same name.
    """
    connectors: dict[str, dict[str, Any]] = {}
    for connector in cluster.msk_connectors:
        name = connector["connector_name"]
        connectors[name] = {"name": name, "config": dict(connector.get("connector_configuration") or {})}
    for connector in cluster.self_managed_connectors:
        name = connector["name"]
        connectors[name] = {"name": name, "config": dict(connector.get("config") or {})}
    return {"connectors": connectors}


def generate_connector_utility(
    clusters: list[DiscoveredCluster],
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    loader: TemplateLoader | None = None,
) -> list[Path]:
    """Write one connector config file per cluster with connectors, plus a README."""
    if not clusters:
        logger.warning("No clusters found to write")
        return []

    output_dir = ensure_dir(output_dir)
    written = []
    total = 0
    for cluster in clusters:
        filename = config_file_name(cluster)
        configs = build_connector_configs(cluster)
        count = len(configs["connectors"])
        if not count:
            logger.info(f"Skipping {filename} (no connectors found)")
            continue

        written.append(write_json(output_dir / filename, configs))
        total += count
        logger.info(f"Generated {filename} ({count} connector(s))")

    logger.info(
        f"Generated connector config files for {len(written)} cluster(s) "
        f"with {total} total connector(s) in {output_dir}"
    )

    loader = loader or TemplateLoader()
    written.append(
        loader.render_template(
            "connector_utility/README.md.j2",
            {"files": [p.name for p in written]},
            output_dir / "README.md",
        )
    )
    return written
