"""
Confluent Cloud target infrastructure assets.
"""

import logging
from pathlib import Path

from kcp.exceptions import ValidationError
from kcp.hcl import target_infra
from kcp.models.requests import TargetClusterWizardRequest

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "target_infra"
CLUSTER_TYPES = ("dedicated", "enterprise")


def validate_request(request: TargetClusterWizardRequest) -> None:
    """Check the flags implied by the needs-* switches."""
    if request.needs_environment:
        if not request.environment_name:
            raise ValidationError("required flag `--env-name` not set when `--needs-environment=true`")
    elif not request.environment_id:
        raise ValidationError("required flag `--env-id` not set when `--needs-environment=false`")

    if request.needs_cluster:
        if not request.cluster_name:
            raise ValidationError("required flag `--cluster-name` not set when `--needs-cluster=true`")
        if not request.cluster_type:
            raise ValidationError("required flag `--cluster-type` not set when `--needs-cluster=true`")
        if request.cluster_type not in CLUSTER_TYPES:
            raise ValidationError(
                f"invalid value for `--cluster-type`: {request.cluster_type}",
                f"Use one of: {', '.join(CLUSTER_TYPES)}",
            )
    elif not request.cluster_id:
        raise ValidationError("required flag `--cluster-id` not set when `--needs-cluster=false`")

    if request.needs_private_link and not request.subnet_cidr_ranges:
        raise ValidationError(
            "required flag `--subnet-cidrs` not set when `--needs-private-link=true`"
        )


def generate_target_infra(
    request: TargetClusterWizardRequest, output_dir: str | Path = DEFAULT_OUTPUT_DIR
) -> list[Path]:
    validate_request(request)
    logger.info(f"Generating target infrastructure in {output_dir}")
    project = target_infra.generate_terraform_project(request)
    return project.write(Path(output_dir))
