"""
Resolve the AWS region and VPC an asset is deployed into.
"""

import logging

from kcp.exceptions import ValidationError
from kcp.state import State

logger = logging.getLogger(__name__)


def resolve_region_and_vpc(
    region: str | None,
    vpc_id: str | None,
    state_file: str | None,
    cluster_arn: str | None,
    region_flag: str = "--region",
) -> tuple[str, str]:
    """
    Either the region and ``--vpc-id`` flags or ``--state-file`` and ``--cluster-arn``.

    Args:
        region_flag: Name of the region flag on the calling command, used in errors

    Returns:
        (region, vpc_id)
    """
    if region or vpc_id:
        if not (region and vpc_id):
            raise ValidationError(f"flags `{region_flag}` and `--vpc-id` must be set together")
        if state_file or cluster_arn:
            raise ValidationError(
                f"flags `{region_flag}`/`--vpc-id` cannot be combined with "
                "`--state-file`/`--cluster-arn`"
            )
        return region, vpc_id

    if not (state_file and cluster_arn):
        raise ValidationError(
            f"either `{region_flag}` and `--vpc-id` or `--state-file` and `--cluster-arn` must be set"
        )

    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    if not cluster.vpc_id:
        raise ValidationError(f"no VPC ID recorded for cluster {cluster.name} in the state file")
    logger.info(f"Using region {cluster.region} and VPC {cluster.vpc_id} from {state_file}")
    return cluster.region, cluster.vpc_id
