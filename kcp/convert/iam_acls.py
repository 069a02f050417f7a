"""
IAM access control policies converted into Kafka ACLs.

MSK IAM access control grants ``kafka-cluster:<Action>`` permissions on
cluster, topic, group and transactional-id ARNs. Each action maps to one Kafka
operation on one resource type.
"""

import logging
from pathlib import Path
from typing import Any, NamedTuple

from kcp.clients.aws_iam import IamPolicyReader, parse_principal_arn
from kcp.convert.acls import Acl, clean_principal_name, write_acl_files

logger = logging.getLogger(__name__)

ACTION_PREFIX = "kafka-cluster:"
ALL_ACTIONS = "kafka-cluster:*"
CLUSTER_RESOURCE_NAME = "kafka-cluster"
LITERAL = "LITERAL"
PREFIXED = "PREFIXED"


class AclMapping(NamedTuple):
    operation: str
    resource_type: str
    requires_pattern: bool


ACTION_MAP = {
    "kafka-cluster:AlterCluster": AclMapping("ALTER", "CLUSTER", False),
    "kafka-cluster:AlterClusterDynamicConfiguration": AclMapping("ALTER_CONFIGS", "CLUSTER", False),
    "kafka-cluster:AlterGroup": AclMapping("READ", "GROUP", True),
    "kafka-cluster:AlterTopic": AclMapping("ALTER", "TOPIC", True),
    "kafka-cluster:AlterTopicDynamicConfiguration": AclMapping("ALTER_CONFIGS", "TOPIC", True),
    "kafka-cluster:AlterTransactionalId": AclMapping("WRITE", "TRANSACTIONAL_ID", True),
    "kafka-cluster:CreateTopic": AclMapping("CREATE", "TOPIC", True),
    "kafka-cluster:DeleteGroup": AclMapping("DELETE", "GROUP", True),
    "kafka-cluster:DeleteTopic": AclMapping("DELETE", "TOPIC", True),
    "kafka-cluster:DescribeCluster": AclMapping("DESCRIBE", "CLUSTER", False),
    "kafka-cluster:DescribeClusterDynamicConfiguration": AclMapping(
        "DESCRIBE_CONFIGS", "CLUSTER", False
    ),
    "kafka-cluster:DescribeGroup": AclMapping("DESCRIBE", "GROUP", True),
    "kafka-cluster:DescribeTopic": AclMapping("DESCRIBE", "TOPIC", True),
    "kafka-cluster:DescribeTopicDynamicConfiguration": AclMapping(
        "DESCRIBE_CONFIGS", "TOPIC", True
    ),
    "kafka-cluster:DescribeTransactionalId": AclMapping("DESCRIBE", "TRANSACTIONAL_ID", True),
    "kafka-cluster:ReadData": AclMapping("READ", "TOPIC", True),
    "kafka-cluster:WriteData": AclMapping("WRITE", "TOPIC", True),
    "kafka-cluster:WriteDataIdempotently": AclMapping("IDEMPOTENT_WRITE", "CLUSTER", True),
}

# ARN resource segment per ACL resource type
_ARN_SEGMENTS = {
    "TOPIC": ":topic/",
    "GROUP": ":group/",
    "TRANSACTIONAL_ID": ":transactional-id/",
}


def resource_name_and_pattern(name: str) -> tuple[str, str]:
    """A trailing ``*`` becomes a PREFIXED pattern; anything else is LITERAL."""
    if name != "*" and name.endswith("*") and not name.startswith("*"):
        return name[:-1], PREFIXED
    return name, LITERAL


def parse_resource_arn(arn: str, resource_type: str) -> tuple[str, str]:
    """
    Resource name and pattern type for a policy resource ARN.

    ``arn:aws:kafka:<region>:<account>:topic/<cluster>/<uuid>/orders-*`` on a
    TOPIC mapping gives ``("orders-", "PREFIXED")``.
    """
    if arn == "*" or ":*" in arn:
        return "*", LITERAL
    if resource_type == "CLUSTER":
        return CLUSTER_RESOURCE_NAME, LITERAL

    segment = _ARN_SEGMENTS.get(resource_type)
    if segment and segment in arn:
        parts = arn.split(segment, 1)[1].split("/")
        if len(parts) >= 3:
            return resource_name_and_pattern(parts[-1])
    return "*", LITERAL


def principal_from_arn(principal_arn: str) -> str:
    name, _ = parse_principal_arn(principal_arn)
    return f"User:{name}"


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    return [v for v in value or [] if isinstance(v, str)]


def acls_from_statement(principal: str, statement: dict[str, Any]) -> list[Acl]:
    effect = str(statement.get("Effect", "")).upper()
    resources = _as_list(statement.get("Resource"))

    acls = []
    for action in _as_list(statement.get("Action")):
        action = action.strip()
        if not action.startswith(ACTION_PREFIX):
            continue
        if action == ALL_ACTIONS:
            mappings = list(ACTION_MAP.items())
        elif action in ACTION_MAP:
            mappings = [(action, ACTION_MAP[action])]
        else:
            logger.debug(f"No ACL mapping for IAM action {action}")
            continue

        for iam_action, mapping in mappings:
            name, pattern = "*", LITERAL
            if mapping.requires_pattern and resources:
                name, pattern = parse_resource_arn(resources[0], mapping.resource_type)
            acls.append(
                Acl(
                    principal=principal,
                    resource_type=mapping.resource_type,
                    resource_name=name,
                    pattern_type=pattern,
                    operation=mapping.operation,
                    permission=effect,
                    iam_action=iam_action,
                )
            )
    return acls


def acls_from_policy(principal: str, document: dict[str, Any]) -> list[Acl]:
    statements = document.get("Statement") or []
    if isinstance(statements, dict):
        statements = [statements]
    acls = []
    for statement in statements:
        acls.extend(acls_from_statement(principal, statement))
    return acls


def default_output_dir(principal_arn: str) -> str:
    return f"{clean_principal_name(principal_from_arn(principal_arn))}_iam_acls"


def convert_iam_acls(
    principal_arn: str,
    output_dir: str | Path | None = None,
    audit_report: bool = True,
    reader: IamPolicyReader | None = None,
) -> list[Path]:
    """
    Read the principal's IAM policies and write Confluent Cloud ACL Terraform.

    Returns:
        Paths of the written files; empty when no ``kafka-cluster`` action is granted
    """
    reader = reader or IamPolicyReader()
    policies = reader.get_principal_policies(principal_arn)
    principal = principal_from_arn(principal_arn)

    acls = []
    for document in policies.documents:
        acls.extend(acls_from_policy(principal, document))

    if not acls:
        logger.warning(
            f"No kafka-cluster permissions found in the policies of {principal_arn}, "
            "nothing to convert"
        )
        return []

    output_dir = output_dir or default_output_dir(principal_arn)
    logger.info(f"Converting {len(acls)} IAM permissions of {principal_arn} into {output_dir}")
    return write_acl_files(acls, output_dir, audit_report=audit_report, source="iam")
