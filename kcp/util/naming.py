"""
Name and identifier helpers shared by generators.
"""

import re
from urllib.parse import urlparse

UNKNOWN_CLUSTER_NAME = "unknown-cluster"


def extract_cluster_name_from_arn(arn: str) -> str:
    """Return the cluster name segment of an MSK ARN.

    ``arn:aws:kafka:us-east-1:123:cluster/my-cluster/uuid`` -> ``my-cluster``
    """
    parts = arn.split("/")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return UNKNOWN_CLUSTER_NAME


def url_to_folder_name(url: str) -> str:
    """Turn a URL into a folder-safe name based on its host."""
    parsed = urlparse(url)
    host = parsed.hostname or url
    return re.sub(r"[^\w\-]", "_", host)


def format_hcl_resource_name(name: str) -> str:
    """Make a string usable as a Terraform resource label."""
    return re.sub(r"[^a-zA-Z0-9_]", "_", name).lower()


def split_csv(value: str | None) -> list[str]:
    """Split a comma separated flag value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
