"""
Errors raised by kcp commands. Each carries an optional suggestion shown under the message.
"""

from rich.markup import escape


class KcpError(Exception):
    """Base exception for kcp errors."""

    def __init__(self, message: str, suggestion: str = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.message)

    def __str__(self):
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class WorkspaceNotWritableError(KcpError):
    """Current directory cannot be written to."""

    def __init__(self, path: str):
        message = f"Current directory is not writable: {path}"
        suggestion = (
            "kcp writes kcp.log and generated assets to the current directory.\n"
            "Run kcp from a directory you can write to."
        )
        super().__init__(message, suggestion)


class StateFileError(KcpError):
    """State file could not be read or parsed."""

    def __init__(self, path: str, details: str):
        message = f"Failed to read state file {path}: {details}"
        suggestion = (
            "Check that the file was produced by a kcp scan and is valid JSON:\n"
            f"  python -m json.tool {path}"
        )
        super().__init__(message, suggestion)


class ClusterNotFoundError(KcpError):
    """Requested cluster ARN is not present in the state file."""

    def __init__(self, cluster_arn: str):
        message = f"cluster with ARN {cluster_arn} not found in state file"
        suggestion = (
            "Check the --cluster-arn value against the clusters recorded in the state file.\n"
            "Run the discovery scan again if the cluster was created recently."
        )
        super().__init__(message, suggestion)


class TerraformStateError(KcpError):
    """Terraform state is missing or lacks a required output."""

    def __init__(self, details: str):
        message = f"Failed to read terraform state: {details}"
        suggestion = "please run terraform apply in the migration infra folder"
        super().__init__(message, suggestion)


class ValidationError(KcpError):
    """Invalid flag values or flag combinations."""

    pass


class ConfigurationError(KcpError):
    """Configuration file errors."""

    pass


class InvalidCredentialsError(ConfigurationError):
    """Credentials file failed validation."""

    def __init__(self, errors: list[str], file_path: str = None):
        error_list = "\n  - ".join(errors)
        message = f"Invalid credentials file:\n  - {error_list}"
        if file_path:
            message = f"Invalid credentials file {file_path}:\n  - {error_list}"

        suggestion = (
            "Each cluster must enable exactly one auth_method, for example:\n"
            "  auth_method:\n"
            "    sasl_scram:\n"
            "      use: true\n"
            "      username: <user>\n"
            "      password: <password>"
        )
        super().__init__(message, suggestion)


class UnsupportedConnectorError(KcpError):
    """Connector class has no known Confluent Cloud plugin."""

    def __init__(self, connector_class: str):
        message = f"unknown or unsupported connector class: {connector_class}"
        super().__init__(message)


class ApiError(KcpError):
    """A remote HTTP API returned an unexpected status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        message = f"API request failed with status {status_code}: {body}"
        super().__init__(message)


class GenerationError(KcpError):
    """Errors while writing generated assets."""

    pass


def format_error_for_cli(error: Exception) -> str:
    """Rich markup for an error, with the suggestion on its own line when there is one."""
    if isinstance(error, KcpError):
        output = f"[red]Error:[/red] {escape(error.message)}"
        if error.suggestion:
            output += f"\n\n[yellow]{escape(error.suggestion)}[/yellow]"
        return output
    else:
        return f"[red]Error:[/red] {escape(str(error))}"
