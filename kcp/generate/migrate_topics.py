"""
Mirror topic scripts for an applied migration infrastructure.
"""

import base64
import logging
from pathlib import Path

from kcp.exceptions import ValidationError
from kcp.models.requests import MigrationType
from kcp.state import (
    CC_CLUSTER_API_KEY,
    CC_CLUSTER_API_SECRET,
    CC_CLUSTER_ID,
    CC_CLUSTER_REST_ENDPOINT,
    CLUSTER_LINK_NAME,
    CLUSTER_LINK_OUTPUTS,
    CP_CONTROLLER_BOOTSTRAP_SERVER,
    JUMP_CLUSTER_OUTPUTS,
    TERRAFORM_STATE_FILE,
    DiscoveredCluster,
    parse_terraform_state,
    read_manifest,
)
from kcp.util.files import EXECUTABLE_MODE
from kcp.util.kafka import is_internal_topic
from kcp.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "migrate_topics"
CONSUMER_OFFSETS_TOPIC = "__consumer_offsets"
# link created on the jump cluster towards MSK by its user-data
MSK_TO_CP_LINK_NAME = "msk-to-cp-link"

DIRECT_LINK = "direct"
JUMP_CLUSTER = "jump_cluster"

LAYOUTS = {
    MigrationType.PUBLIC_MSK_ENDPOINTS: DIRECT_LINK,
    MigrationType.EXTERNAL_OUTBOUND_CLUSTER_LINK: DIRECT_LINK,
    MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_SASL_SCRAM: JUMP_CLUSTER,
    MigrationType.JUMP_CLUSTER_REUSE_EXISTING_SUBNETS_IAM: JUMP_CLUSTER,
    MigrationType.JUMP_CLUSTER_NEW_SUBNETS_SASL_SCRAM: JUMP_CLUSTER,
    MigrationType.JUMP_CLUSTER_NEW_SUBNETS_IAM: JUMP_CLUSTER,
}


def mirror_topics(cluster: DiscoveredCluster) -> list[str]:
    """Non-internal topics of the cluster followed by ``__consumer_offsets``."""
    topics = sorted(t["name"] for t in cluster.topic_details if not is_internal_topic(t["name"]))
    topics.append(CONSUMER_OFFSETS_TOPIC)
    return topics


def basic_auth_token(api_key: str, api_secret: str) -> str:
    return base64.b64encode(f"{api_key}:{api_secret}".encode()).decode()


def generate_migrate_topics(
    cluster: DiscoveredCluster,
    migration_infra_folder: str | Path,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    loader: TemplateLoader | None = None,
) -> list[Path]:
    """
    Write mirror topic scripts for the migration type recorded in the manifest.

    Args:
        cluster: Source cluster with scanned topics
        migration_infra_folder: Applied migration infrastructure folder
        output_dir: Directory to write the scripts to
        loader: Template loader (defaults to the packaged templates)

    Returns:
        Paths of the written files
    """
    migration_infra_folder = Path(migration_infra_folder)
    migration_type = read_manifest(migration_infra_folder)
    layout = LAYOUTS.get(migration_type)
    if layout is None:
        raise ValidationError(f"invalid migrate topics infra type: {int(migration_type)}")

    required = JUMP_CLUSTER_OUTPUTS if layout == JUMP_CLUSTER else CLUSTER_LINK_OUTPUTS
    outputs = parse_terraform_state(migration_infra_folder / TERRAFORM_STATE_FILE, required)

    topics = mirror_topics(cluster)
    if len(topics) == 1:
        logger.warning(
            f"No topics found for cluster {cluster.name}, only consumer offsets will be mirrored"
        )

    context = {
        "cluster_name": cluster.name,
        "mirror_topics": topics,
        "rest_endpoint": outputs[CC_CLUSTER_REST_ENDPOINT],
        "cluster_id": outputs[CC_CLUSTER_ID],
        "cluster_link_name": outputs[CLUSTER_LINK_NAME],
        "auth_token": basic_auth_token(outputs[CC_CLUSTER_API_KEY], outputs[CC_CLUSTER_API_SECRET]),
        "migration_type": int(migration_type),
    }

    loader = loader or TemplateLoader()
    output_dir = Path(output_dir)
    logger.info(f"Generating migrate topics assets for {len(topics)} topics in {output_dir}")

    if layout == DIRECT_LINK:
        return [
            loader.render_template(
                "migrate_topics/direct/README.md.j2", context, output_dir / "README.md"
            ),
            loader.render_template(
                "migrate_topics/direct/msk-to-cc-mirror-topics.sh.j2",
                context,
                output_dir / "msk-to-cc-mirror-topics.sh",
                mode=EXECUTABLE_MODE,
            ),
        ]

    context["bootstrap_servers"] = outputs[CP_CONTROLLER_BOOTSTRAP_SERVER]
    context["msk_to_cp_link_name"] = MSK_TO_CP_LINK_NAME
    return [
        loader.render_template(
            "migrate_topics/jump_cluster/README.md.j2", context, output_dir / "README.md"
        ),
        loader.render_template(
            "migrate_topics/jump_cluster/msk-to-cp-mirror-topics.sh.j2",
            context,
            output_dir / "msk-to-cp-mirror-topics.sh",
            mode=EXECUTABLE_MODE,
        ),
        loader.render_template(
            "migrate_topics/jump_cluster/cp-to-cc-mirror-topics.sh.j2",
            context,
            output_dir / "cp-to-cc-mirror-topics.sh",
            mode=EXECUTABLE_MODE,
        ),
        loader.render_template(
            "migrate_topics/jump_cluster/destination-cluster.properties.j2",
            context,
            output_dir / "destination-cluster.properties",
        ),
    ]
