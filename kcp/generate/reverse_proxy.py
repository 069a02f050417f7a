"""
Reverse proxy assets.

Besides the Terraform project the output directory receives the instance
user-data template and the helper script that prints /etc/hosts entries for
the Confluent Cloud cluster.
"""

import logging
from pathlib import Path

from kcp.hcl import reverse_proxy
from kcp.models.requests import ReverseProxyRequest
from kcp.state import CC_CLUSTER_BOOTSTRAP_ENDPOINT, TERRAFORM_STATE_FILE, parse_terraform_state
from kcp.util.files import EXECUTABLE_MODE
from kcp.util.templates import copy_asset

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "reverse_proxy"


def read_bootstrap_endpoint(migration_infra_folder: str | Path) -> str:
    """Confluent Cloud bootstrap endpoint from the applied migration infrastructure."""
    outputs = parse_terraform_state(
        Path(migration_infra_folder) / TERRAFORM_STATE_FILE, [CC_CLUSTER_BOOTSTRAP_ENDPOINT]
    )
    return outputs[CC_CLUSTER_BOOTSTRAP_ENDPOINT]


def generate_reverse_proxy(
    request: ReverseProxyRequest, output_dir: str | Path = DEFAULT_OUTPUT_DIR
) -> list[Path]:
    output_dir = Path(output_dir)
    logger.info(f"Generating reverse proxy assets in {output_dir}")

    written = reverse_proxy.generate_terraform_project(request).write(output_dir)
    written.append(
        copy_asset(reverse_proxy.USER_DATA_TEMPLATE, output_dir / reverse_proxy.USER_DATA_TEMPLATE)
    )
    written.append(
        copy_asset(
            reverse_proxy.DNS_ENTRIES_SCRIPT,
            output_dir / reverse_proxy.DNS_ENTRIES_SCRIPT,
            mode=EXECUTABLE_MODE,
        )
    )
    return written
