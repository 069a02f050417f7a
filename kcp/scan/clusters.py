"""
Kafka admin scan of the clusters listed in a credentials file.
"""

import logging
from collections import Counter
from collections.abc import Callable
from typing import Any

from rich.table import Table

from kcp.clients.kafka_admin import KafkaAdminScanner, build_admin_config
from kcp.credentials import ClusterAuth, Credentials
from kcp.state import DiscoveredCluster, State, get_bootstrap_brokers_for_auth
from kcp.util.kafka import get_client_broker_encryption, is_internal_topic
from kcp.util.progress import console

logger = logging.getLogger(__name__)

ScannerFactory = Callable[[dict[str, Any]], KafkaAdminScanner]


def scan_cluster(
    cluster: DiscoveredCluster,
    auth: ClusterAuth,
    scanner_factory: ScannerFactory = KafkaAdminScanner,
) -> None:
    """Scan one cluster and store the result in its state entry."""
    auth_type = auth.selected_auth_type()
    brokers = get_bootstrap_brokers_for_auth(cluster, auth_type)
    logger.info(f"Scanning cluster {cluster.name} using {auth_type} via {brokers[0]}")

    config = build_admin_config(
        brokers,
        auth_type,
        auth.settings(auth_type),
        get_client_broker_encryption(cluster.msk_cluster_config),
        region=cluster.region,
    )
    serverless = cluster.msk_cluster_config.get("ClusterType") == "SERVERLESS"
    info = scanner_factory(config).scan(serverless=serverless)

    # scan self-managed-connectors results survive a rescan
    previous = cluster.kafka_admin_client_information.get("self_managed_connectors")
    if previous is not None:
        info["self_managed_connectors"] = previous
    cluster.kafka_admin_client_information = info


def scan_clusters(
    state: State,
    credentials: Credentials,
    scanner_factory: ScannerFactory = KafkaAdminScanner,
) -> list[DiscoveredCluster]:
    """
    Scan every cluster in the credentials file.

    A cluster that is missing from the state or fails to scan is skipped.

    Returns:
        Clusters that were scanned successfully
    """
    scanned = []
    for region in credentials.regions:
        for auth in region.clusters:
            try:
                cluster = state.find_cluster(region.name, auth.arn)
                scan_cluster(cluster, auth, scanner_factory)
            except Exception as e:
                logger.warning(f"skipping cluster {auth.arn}: {e}")
                continue
            scanned.append(cluster)

    logger.info(f"Scanned {len(scanned)} cluster(s)")
    return scanned


def print_summary(clusters: list[DiscoveredCluster]) -> None:
    """Executive summary of the scanned clusters."""
    if not clusters:
        console.print("[yellow]No clusters were scanned.[/yellow]")
        return

    topics = Table(title="Topics")
    topics.add_column("Cluster", style="cyan")
    topics.add_column("Topics", justify="right")
    topics.add_column("Internal", justify="right")
    topics.add_column("Partitions", justify="right")
    topics.add_column("Compacted", justify="right")
    topics.add_column("Remote storage", justify="right")

    for cluster in clusters:
        summary = (cluster.kafka_admin_client_information.get("topics") or {}).get("summary") or {}
        topics.add_row(
            cluster.name,
            str(summary.get("topics", 0)),
            str(summary.get("internal_topics", 0)),
            str(summary.get("total_partitions", 0)),
            str(summary.get("compact_topics", 0)),
            str(summary.get("remote_storage_topics", 0)),
        )
    console.print(topics)

    acls = Table(title="ACLs by principal")
    acls.add_column("Cluster", style="cyan")
    acls.add_column("Principal")
    acls.add_column("ACLs", justify="right")
    for cluster in clusters:
        for principal, count in sorted(Counter(a["Principal"] for a in cluster.acls).items()):
            acls.add_row(cluster.name, principal, str(count))
    if acls.row_count:
        console.print(acls)

    connectors = Table(title="Self-managed connectors")
    connectors.add_column("Cluster", style="cyan")
    connectors.add_column("State")
    connectors.add_column("Connectors", justify="right")
    for cluster in clusters:
        states = Counter(c.get("state") or "UNKNOWN" for c in cluster.self_managed_connectors)
        for connector_state, count in sorted(states.items()):
            connectors.add_row(cluster.name, connector_state, str(count))
    if connectors.row_count:
        console.print(connectors)

    user_topics = sum(
        1 for c in clusters for t in c.topic_details if not is_internal_topic(t["name"])
    )
    console.print(
        f"\n[green]✓ Scanned {len(clusters)} cluster(s) with {user_topics} topics[/green]"
    )
