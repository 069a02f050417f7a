"""
IAM policy lookup for MSK IAM access control conversion.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kcp.exceptions import KcpError, ValidationError

logger = logging.getLogger(__name__)

ROLE = "role"
USER = "user"


@dataclass
class PrincipalPolicies:
    """Inline and attached policy documents of an IAM role or user."""

    principal_name: str
    principal_arn: str
    principal_type: str
    inline_policies: list[dict[str, Any]] = field(default_factory=list)
    attached_policies: list[dict[str, Any]] = field(default_factory=list)

    @property
    def documents(self) -> list[dict[str, Any]]:
        return [p["policy_document"] for p in self.inline_policies + self.attached_policies]


def parse_principal_arn(principal_arn: str) -> tuple[str, str]:
    """
    Name and type of an IAM principal ARN.

    Raises:
        ValidationError: If the ARN is not a role or user ARN
    """
    parts = principal_arn.split("/")
    if len(parts) < 2:
        raise ValidationError(f"invalid principal ARN format: {principal_arn}")
    if ":role/" in principal_arn:
        return parts[-1], ROLE
    if ":user/" in principal_arn:
        return parts[-1], USER
    raise ValidationError(
        f"unsupported principal type in ARN: {principal_arn} (must be role or user)"
    )


def parse_policy_document(document: str | dict[str, Any]) -> dict[str, Any]:
    # boto3 decodes documents already; raw API responses are URL encoded JSON
    if isinstance(document, dict):
        return document
    return json.loads(unquote(document))


class IamPolicyReader:
    """Reads the policies attached to an IAM role or user."""

    def __init__(self, iam_client=None, region: str | None = None):
        self.iam = iam_client or boto3.client("iam", region_name=region)

    def get_principal_policies(self, principal_arn: str) -> PrincipalPolicies:
        name, principal_type = parse_principal_arn(principal_arn)
        logger.info(f"Reading IAM policies for {principal_type} {name}")

        try:
            if principal_type == ROLE:
                inline = self._inline_policies(
                    "list_role_policies", "get_role_policy", RoleName=name
                )
                attached = self._attached_policies("list_attached_role_policies", RoleName=name)
            else:
                inline = self._inline_policies(
                    "list_user_policies", "get_user_policy", UserName=name
                )
                attached = self._attached_policies("list_attached_user_policies", UserName=name)
        except (BotoCoreError, ClientError) as e:
            raise KcpError(
                f"failed to read IAM policies for {principal_arn}: {e}",
                "Check that your AWS credentials allow iam:List* and iam:Get* on the principal.",
            ) from e

        return PrincipalPolicies(
            principal_name=name,
            principal_arn=principal_arn,
            principal_type=principal_type,
            inline_policies=inline,
            attached_policies=attached,
        )

    def _inline_policies(self, list_op: str, get_op: str, **principal: str) -> list[dict[str, Any]]:
        policies = []
        for page in self.iam.get_paginator(list_op).paginate(**principal):
            for policy_name in page["PolicyNames"]:
                resp = getattr(self.iam, get_op)(PolicyName=policy_name, **principal)
                policies.append(
                    {
                        "policy_name": policy_name,
                        "policy_document": parse_policy_document(resp["PolicyDocument"]),
                    }
                )
        return policies

    def _attached_policies(self, list_op: str, **principal: str) -> list[dict[str, Any]]:
        policies = []
        for page in self.iam.get_paginator(list_op).paginate(**principal):
            for attached in page["AttachedPolicies"]:
                policy_arn = attached["PolicyArn"]
                policy = self.iam.get_policy(PolicyArn=policy_arn)["Policy"]
                version = self.iam.get_policy_version(
                    PolicyArn=policy_arn, VersionId=policy["DefaultVersionId"]
                )["PolicyVersion"]
                policies.append(
                    {
                        "policy_name": attached["PolicyName"],
                        "policy_arn": policy_arn,
                        "policy_document": parse_policy_document(version["Document"]),
                        "description": policy.get("Description", ""),
                    }
                )
        return policies
