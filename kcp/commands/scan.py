"""
`kcp scan`: enrich the state file from live clusters, registries and Connect.
"""

import logging

import typer

from kcp.clients.connect import (
    AUTH_SASL_SCRAM,
    AUTH_TLS,
    AUTH_UNAUTHENTICATED,
    ConnectAuth,
    ConnectClient,
)
from kcp.clients.schema_registry import SchemaRegistryClient
from kcp.commands import handle_errors
from kcp.credentials import load_credentials
from kcp.exceptions import ValidationError
from kcp.scan import clusters as cluster_scan
from kcp.scan.schema_registry import scan_schema_registry
from kcp.scan.self_managed_connectors import scan_self_managed_connectors
from kcp.state import State
from kcp.util.progress import console, show_summary

logger = logging.getLogger(__name__)

app = typer.Typer(help="Scan clusters and services and record the results in the state file")

STATE_FILE_HELP = "Path to the kcp state file"


@app.command(name="clusters")
@handle_errors
def clusters_cmd(
    state_file: str = typer.Option(..., "--state-file", envvar="STATE_FILE", help=STATE_FILE_HELP),
    credentials_file: str = typer.Option(
        ...,
        "--credentials-file",
        envvar="CREDENTIALS_FILE",
        help="YAML file with the authentication method of each cluster",
    ),
):
    """Scan topics and ACLs of the clusters in the credentials file."""
    state = State.load(state_file)
    credentials = load_credentials(credentials_file)

    scanned = cluster_scan.scan_clusters(state, credentials)
    state.persist(state_file)

    cluster_scan.print_summary(scanned)


@app.command(name="schema-registry")
@handle_errors
def schema_registry_cmd(
    state_file: str = typer.Option(..., "--state-file", envvar="STATE_FILE", help=STATE_FILE_HELP),
    url: str = typer.Option(..., "--url", envvar="URL", help="Schema Registry URL"),
    username: str = typer.Option(
        None, "--username", envvar="USERNAME", help="Basic auth username"
    ),
    password: str = typer.Option(
        None, "--password", envvar="PASSWORD", help="Basic auth password"
    ),
):
    """Record subjects, contexts and compatibility of a Schema Registry."""
    if bool(username) != bool(password):
        raise ValidationError("flags `--username` and `--password` must be set together")

    state = State.load(state_file)
    registry = scan_schema_registry(SchemaRegistryClient(url, username, password))
    state.upsert_schema_registry(registry)
    state.persist(state_file)

    show_summary(
        "Schema Registry",
        {
            "URL": registry["url"],
            "Subjects": len(registry["subjects"]),
            "Contexts": len(registry["contexts"]),
            "Default compatibility": registry["default_compatibility"],
        },
    )


def connect_auth(
    use_sasl_scram: bool,
    use_tls: bool,
    use_unauthenticated: bool,
    username: str | None,
    password: str | None,
    ca_cert: str | None,
    client_cert: str | None,
    client_key: str | None,
) -> ConnectAuth:
    """Exactly one of the auth flags, plus the settings it needs."""
    selected = [use_sasl_scram, use_tls, use_unauthenticated]
    if sum(selected) != 1:
        raise ValidationError(
            "exactly one of `--use-sasl-scram`, `--use-tls` or `--use-unauthenticated` must be set"
        )

    if use_sasl_scram:
        if not (username and password):
            raise ValidationError(
                "flags `--username` and `--password` are required with `--use-sasl-scram`"
            )
        return ConnectAuth(AUTH_SASL_SCRAM, username=username, password=password)

    if use_tls:
        if not (ca_cert and client_cert and client_key):
            raise ValidationError(
                "flags `--ca-cert`, `--client-cert` and `--client-key` are required with `--use-tls`"
            )
        return ConnectAuth(AUTH_TLS, ca_cert=ca_cert, client_cert=client_cert, client_key=client_key)

    return ConnectAuth(AUTH_UNAUTHENTICATED)


@app.command(name="self-managed-connectors")
@handle_errors
def self_managed_connectors_cmd(
    state_file: str = typer.Option(..., "--state-file", envvar="STATE_FILE", help=STATE_FILE_HELP),
    cluster_arn: str = typer.Option(
        ..., "--cluster-arn", envvar="CLUSTER_ARN", help="MSK cluster the connectors belong to"
    ),
    connect_rest_url: str = typer.Option(
        ..., "--connect-rest-url", envvar="CONNECT_REST_URL", help="Kafka Connect REST URL"
    ),
    use_sasl_scram: bool = typer.Option(
        False, "--use-sasl-scram", envvar="USE_SASL_SCRAM", help="Authenticate with basic auth"
    ),
    use_tls: bool = typer.Option(
        False, "--use-tls", envvar="USE_TLS", help="Authenticate with client certificates"
    ),
    use_unauthenticated: bool = typer.Option(
        False, "--use-unauthenticated", envvar="USE_UNAUTHENTICATED", help="No authentication"
    ),
    username: str = typer.Option(None, "--username", envvar="USERNAME", help="SASL/SCRAM username"),
    password: str = typer.Option(None, "--password", envvar="PASSWORD", help="SASL/SCRAM password"),
    ca_cert: str = typer.Option(None, "--ca-cert", envvar="CA_CERT", help="CA certificate file"),
    client_cert: str = typer.Option(
        None, "--client-cert", envvar="CLIENT_CERT", help="Client certificate file"
    ),
    client_key: str = typer.Option(
        None, "--client-key", envvar="CLIENT_KEY", help="Client private key file"
    ),
):
    """Record the connectors of a self-managed Kafka Connect cluster."""
    auth = connect_auth(
        use_sasl_scram,
        use_tls,
        use_unauthenticated,
        username,
        password,
        ca_cert,
        client_cert,
        client_key,
    )

    state = State.load(state_file)
    cluster = state.get_cluster_by_arn(cluster_arn)
    count = scan_self_managed_connectors(cluster, ConnectClient(connect_rest_url, auth))
    if count:
        state.persist(state_file)
    console.print(f"[green]✓ Recorded {count} connector(s) for cluster {cluster.name}[/green]")
