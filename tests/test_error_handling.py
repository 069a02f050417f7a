"""
Tests for exceptions and CLI error formatting.
"""

from kcp.exceptions import (
    ApiError,
    ClusterNotFoundError,
    InvalidCredentialsError,
    KcpError,
    StateFileError,
    TerraformStateError,
    UnsupportedConnectorError,
    ValidationError,
    WorkspaceNotWritableError,
    format_error_for_cli,
)


class TestCustomExceptions:
    """Tests for custom exception classes."""

    def test_kcp_error_base(self):
        error = KcpError("Test error")
        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.suggestion is None

    def test_kcp_error_with_suggestion(self):
        error = KcpError("Test error", "Try this fix")
        assert "Test error" in str(error)
        assert "Try this fix" in str(error)

    def test_workspace_not_writable(self):
        error = WorkspaceNotWritableError("/readonly")
        assert "/readonly" in str(error)
        assert "kcp.log" in error.suggestion

    def test_cluster_not_found(self):
        error = ClusterNotFoundError("arn:aws:kafka:eu-west-1:1:cluster/x/y")
        assert error.message == (
            "cluster with ARN arn:aws:kafka:eu-west-1:1:cluster/x/y not found in state file"
        )

    def test_state_file_error(self):
        error = StateFileError("state.json", "invalid JSON")
        assert "state.json" in error.message
        assert "invalid JSON" in error.message

    def test_terraform_state_error_suggests_apply(self):
        error = TerraformStateError("output 'x' is missing")
        assert "terraform apply" in error.suggestion

    def test_invalid_credentials_lists_errors(self):
        error = InvalidCredentialsError(["first problem", "second problem"], "creds.yaml")
        assert "creds.yaml" in error.message
        assert "first problem" in error.message
        assert "second problem" in error.message

    def test_api_error_keeps_status(self):
        error = ApiError(404, "not found")
        assert error.status_code == 404
        assert error.body == "not found"
        assert "404" in str(error)

    def test_unsupported_connector(self):
        error = UnsupportedConnectorError("com.example.Custom")
        assert "com.example.Custom" in str(error)

    def test_hierarchy(self):
        assert issubclass(ValidationError, KcpError)
        assert issubclass(InvalidCredentialsError, KcpError)


class TestFormatErrorForCli:
    """Tests for error formatting."""

    def test_kcp_error_with_suggestion(self):
        output = format_error_for_cli(ValidationError("bad value", "use a good one"))
        assert "[red]Error:[/red] bad value" in output
        assert "[yellow]use a good one[/yellow]" in output

    def test_kcp_error_without_suggestion(self):
        output = format_error_for_cli(ValidationError("bad value"))
        assert output == "[red]Error:[/red] bad value"

    def test_plain_exception(self):
        output = format_error_for_cli(RuntimeError("boom"))
        assert output == "[red]Error:[/red] boom"
