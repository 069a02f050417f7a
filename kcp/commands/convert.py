"""
`kcp convert`: MSK ACLs and IAM policies to Confluent Cloud ACL Terraform.
"""

import typer

from kcp.clients.aws_iam import IamPolicyReader
from kcp.commands import handle_errors, print_written
from kcp.convert.iam_acls import convert_iam_acls, default_output_dir
from kcp.convert.kafka_acls import convert_kafka_acls
from kcp.convert.kafka_acls import default_output_dir as kafka_output_dir
from kcp.exceptions import ValidationError
from kcp.state import State
from kcp.util.progress import console

app = typer.Typer(help="Convert MSK access control into Confluent Cloud ACLs")


@app.command(name="kafka-acls")
@handle_errors
def kafka_acls_cmd(
    state_file: str = typer.Option(
        ..., "--state-file", envvar="STATE_FILE", help="Path to the kcp state file"
    ),
    cluster_arn: str = typer.Option(
        ..., "--cluster-arn", envvar="CLUSTER_ARN", help="MSK cluster whose ACLs are converted"
    ),
    output_dir: str = typer.Option(
        None, "--output-dir", envvar="OUTPUT_DIR", help="Output directory (<cluster>_acls)"
    ),
    skip_audit_report: bool = typer.Option(
        False, "--skip-audit-report", envvar="SKIP_AUDIT_REPORT", help="Do not write the report"
    ),
):
    """Convert the Kafka ACLs recorded by `kcp scan clusters`."""
    cluster = State.load(state_file).get_cluster_by_arn(cluster_arn)
    output_dir = output_dir or kafka_output_dir(cluster)
    written = convert_kafka_acls(cluster, output_dir, audit_report=not skip_audit_report)
    if not written:
        console.print(f"[yellow]No ACLs recorded for cluster {cluster.name}[/yellow]")
        return
    print_written(written, output_dir)


@app.command(name="iam-acls")
@handle_errors
def iam_acls_cmd(
    role_arn: str = typer.Option(
        None, "--role-arn", envvar="ROLE_ARN", help="IAM role used by MSK clients"
    ),
    user_arn: str = typer.Option(
        None, "--user-arn", envvar="USER_ARN", help="IAM user used by MSK clients"
    ),
    cluster_arn: str = typer.Option(
        ..., "--cluster-arn", envvar="CLUSTER_ARN", help="MSK cluster the principal accesses"
    ),
    output_dir: str = typer.Option(
        None, "--output-dir", envvar="OUTPUT_DIR", help="Output directory (<principal>_iam_acls)"
    ),
    skip_audit_report: bool = typer.Option(
        False, "--skip-audit-report", envvar="SKIP_AUDIT_REPORT", help="Do not write the report"
    ),
):
    """Convert kafka-cluster IAM permissions of a role or user into Kafka ACLs."""
    if bool(role_arn) == bool(user_arn):
        raise ValidationError("exactly one of `--role-arn` or `--user-arn` must be set")
    principal_arn = role_arn or user_arn

    arn_parts = cluster_arn.split(":")
    if len(arn_parts) < 6 or arn_parts[2] != "kafka":
        raise ValidationError(f"invalid MSK cluster ARN: {cluster_arn}")

    output_dir = output_dir or default_output_dir(principal_arn)
    written = convert_iam_acls(
        principal_arn,
        output_dir,
        audit_report=not skip_audit_report,
        reader=IamPolicyReader(region=arn_parts[3]),
    )
    if not written:
        console.print(
            "[yellow]No `kafka-cluster` permissions found in the principal's policies, "
            "nothing to convert[/yellow]"
        )
        return
    print_written(written, output_dir)
