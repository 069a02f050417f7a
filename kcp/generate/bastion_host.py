"""
Bastion host assets.
"""

import logging
from pathlib import Path

from kcp.hcl import bastion_host
from kcp.models.requests import BastionHostRequest

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "bastion_host"


def generate_bastion_host(
    request: BastionHostRequest, output_dir: str | Path = DEFAULT_OUTPUT_DIR
) -> list[Path]:
    logger.info(f"Generating bastion host assets in {output_dir}")
    project = bastion_host.generate_terraform_project(request)
    return project.write(Path(output_dir))
