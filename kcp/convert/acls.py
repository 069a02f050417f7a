"""
Shared ACL model, Terraform rendering and audit report.
"""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from kcp.hcl import confluent
from kcp.hcl.writer import render, string_template
from kcp.util.files import ensure_dir, write_text
from kcp.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

AUDIT_REPORT_FILE = "migrated-acls-report.md"
USER_PREFIX = "User:"
_PRINCIPAL_REPLACEMENTS = str.maketrans({c: "_" for c in ".@- /\\"})


@dataclass
class Acl:
    """One Kafka ACL entry, values as the Confluent provider expects them."""

    principal: str
    resource_type: str
    resource_name: str
    pattern_type: str
    operation: str
    permission: str = "ALLOW"
    host: str = "*"
    iam_action: str = ""


def clean_principal_name(principal: str) -> str:
    """
    Principal name usable in file names and resource labels.

    ``User:Alice.Smith@corp`` -> ``alice_smith_corp``
    """
    return principal.removeprefix(USER_PREFIX).translate(_PRINCIPAL_REPLACEMENTS).lower()


def to_provider_enum(value: str) -> str:
    """
    Normalize Kafka admin enum names.

    ``TransactionalId`` -> ``TRANSACTIONAL_ID``, ``IdempotentWrite`` ->
    ``IDEMPOTENT_WRITE``; values that are already upper case are kept.
    """
    if value.isupper():
        return value
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", value).upper()


def group_by_principal(acls: list[Acl]) -> dict[str, list[Acl]]:
    grouped: dict[str, list[Acl]] = defaultdict(list)
    for acl in acls:
        grouped[clean_principal_name(acl.principal)].append(acl)
    return dict(sorted(grouped.items()))


def render_principal_acls(principal: str, acls: list[Acl]) -> str:
    """Service account for the principal plus one ``confluent_kafka_acl`` per ACL."""
    account = confluent.service_account(
        principal, f"Service account migrated from MSK principal {acls[0].principal}"
    )
    blocks = [account]
    for i, acl in enumerate(acls, start=1):
        blocks.append(
            confluent.kafka_acl(
                f"{principal}_acl_{i}",
                resource_type=acl.resource_type,
                resource_name=acl.resource_name,
                pattern_type=acl.pattern_type,
                principal=string_template(f"User:${{{account.address}.id}}"),
                operation=acl.operation,
                permission=acl.permission,
                host=acl.host,
            )
        )
    return render(blocks)


def write_acl_files(
    acls: list[Acl],
    output_dir: str | Path,
    audit_report: bool = True,
    source: str = "kafka",
    loader: TemplateLoader | None = None,
) -> list[Path]:
    """
    Write ``<principal>-acls.tf`` per principal and the optional audit report.

    Returns:
        Paths of the written files
    """
    output_dir = ensure_dir(output_dir)
    grouped = group_by_principal(acls)

    written = []
    for principal, principal_acls in grouped.items():
        path = write_text(
            output_dir / f"{principal}-acls.tf", render_principal_acls(principal, principal_acls)
        )
        logger.info(f"Generated ACL file {path} ({len(principal_acls)} ACLs)")
        written.append(path)

    if audit_report:
        loader = loader or TemplateLoader()
        written.append(
            loader.render_template(
                "convert/migrated-acls-report.md.j2",
                {"source": source, "principals": grouped, "total": len(acls)},
                output_dir / AUDIT_REPORT_FILE,
            )
        )
        logger.info(f"Generated audit report {output_dir / AUDIT_REPORT_FILE}")

    logger.info(f"Generated ACL files for {len(grouped)} principals in {output_dir}")
    return written
