"""
Tests for the top level CLI: banner, version, update and error handling.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
import requests
import typer
from typer.testing import CliRunner

from kcp.cli import app
from kcp.commands import handle_errors, parse_bool
from kcp.exceptions import ValidationError

runner = CliRunner()


class TestVersion:
    """Tests for the version command."""

    def test_version_prints_build_info(self, in_tmp_dir):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Version:" in result.stdout
        assert "Commit:" in result.stdout
        assert "Date:" in result.stdout

    def test_banner_and_log_file(self, in_tmp_dir):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert result.stdout.startswith("kcp ")
        assert (in_tmp_dir / "kcp.log").exists()

    def test_unwritable_directory_fails(self, in_tmp_dir):
        with patch("kcp.cli.is_writable_dir", return_value=False):
            result = runner.invoke(app, ["version"])

        assert result.exit_code == 1
        assert "not writable" in result.stdout
        assert not (in_tmp_dir / "kcp.log").exists()


class TestUpdate:
    """Tests for the update command."""

    def test_dev_version_skips_check(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "dev"), patch("kcp.cli.ReleaseChecker") as checker:
            result = runner.invoke(app, ["update"])

        assert result.exit_code == 0
        assert "Development version" in result.stdout
        checker.assert_not_called()

    def test_already_latest(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch("kcp.cli.ReleaseChecker") as checker:
            checker.return_value.get_latest_version.return_value = "v0.5.0"
            result = runner.invoke(app, ["update"])

        assert result.exit_code == 0
        assert "already the latest" in result.stdout

    def test_check_only_does_not_install(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch(
            "kcp.cli.ReleaseChecker"
        ) as checker, patch("kcp.cli.subprocess.run") as run:
            checker.return_value.get_latest_version.return_value = "v0.6.0"
            result = runner.invoke(app, ["update", "--check-only"])

        assert result.exit_code == 0
        assert "New version available: v0.6.0" in result.stdout
        run.assert_not_called()

    def test_forced_update_runs_pip(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch(
            "kcp.cli.ReleaseChecker"
        ) as checker, patch("kcp.cli.subprocess.run") as run:
            checker.return_value.get_latest_version.return_value = "v0.6.0"
            run.return_value = SimpleNamespace(returncode=0)
            result = runner.invoke(app, ["update", "--force"])

        assert result.exit_code == 0
        command = run.call_args[0][0]
        assert command[-3:] == ["install", "--upgrade", "kcp"]
        assert "Successfully updated" in result.stdout

    def test_failed_pip_exits_non_zero(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch(
            "kcp.cli.ReleaseChecker"
        ) as checker, patch("kcp.cli.subprocess.run") as run:
            checker.return_value.get_latest_version.return_value = "v0.6.0"
            run.return_value = SimpleNamespace(returncode=2)
            result = runner.invoke(app, ["update", "--force"])

        assert result.exit_code == 1
        assert "update failed" in result.output

    def test_declined_confirmation(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch(
            "kcp.cli.ReleaseChecker"
        ) as checker, patch("kcp.cli.subprocess.run") as run:
            checker.return_value.get_latest_version.return_value = "v0.6.0"
            result = runner.invoke(app, ["update"], input="n\n")

        assert result.exit_code == 0
        assert "Update cancelled" in result.stdout
        run.assert_not_called()

    def test_malformed_release_response(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch("kcp.cli.ReleaseChecker") as checker:
            checker.return_value.get_latest_version.side_effect = KeyError("tag_name")
            result = runner.invoke(app, ["update", "--force"])

        assert result.exit_code == 1
        assert "Error: 'tag_name'" in result.output
        assert "Please report it at" in result.output

    def test_offline_is_reported_as_request_failure(self, in_tmp_dir):
        with patch("kcp.cli.__version__", "0.5.0"), patch("kcp.cli.ReleaseChecker") as checker:
            checker.return_value.get_latest_version.side_effect = requests.ConnectionError(
                "offline"
            )
            result = runner.invoke(app, ["update", "--force"])

        assert result.exit_code == 1
        assert "Error: request failed: offline" in result.output
        assert "failed to write files" not in result.output


class TestHandleErrors:
    """Tests for the command error decorator."""

    def test_kcp_error_exits_with_one(self):
        @handle_errors
        def command():
            raise ValidationError("bad flag")

        with pytest.raises(typer.Exit) as exc_info:
            command()
        assert exc_info.value.exit_code == 1

    def test_os_error_exits_with_one(self):
        @handle_errors
        def command():
            raise PermissionError("read-only file system")

        with pytest.raises(typer.Exit) as exc_info:
            command()
        assert exc_info.value.exit_code == 1

    def test_unexpected_error_exits_with_one(self):
        @handle_errors
        def command():
            raise RuntimeError("boom")

        with pytest.raises(typer.Exit) as exc_info:
            command()
        assert exc_info.value.exit_code == 1

    def test_unexpected_error_prints_message(self, capsys):
        @handle_errors
        def command():
            raise RuntimeError("state entry [regions] is malformed")

        with pytest.raises(typer.Exit):
            command()
        err = capsys.readouterr().err
        assert "Error: state entry [regions] is malformed" in err
        assert "https://github.com/confluentinc/kcp/issues" in err

    def test_os_error_is_a_write_failure(self, capsys):
        @handle_errors
        def command():
            raise PermissionError("read-only file system")

        with pytest.raises(typer.Exit):
            command()
        assert "failed to write files: read-only file system" in capsys.readouterr().err

    def test_return_value_passes_through(self):
        @handle_errors
        def command():
            return 42

        assert command() == 42

    def test_command_error_reaches_output(self, in_tmp_dir, state_file, cluster_arn):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "migration-infra",
                "--state-file",
                str(state_file),
                "--cluster-arn",
                cluster_arn,
                "--type",
                "9",
                "--target-cluster-id",
                "lkc-123",
                "--target-rest-endpoint",
                "https://lkc-123.example.com:443",
            ],
        )

        assert result.exit_code == 1
        assert "invalid --type: 9" in result.output


class TestParseBool:
    """Tests for true/false flag values."""

    @pytest.mark.parametrize("value", ["true", "TRUE", " True "])
    def test_true(self, value):
        assert parse_bool(value, "--needs-cluster") is True

    @pytest.mark.parametrize("value", ["false", "False", ""])
    def test_false(self, value):
        assert parse_bool(value, "--needs-cluster") is False

    def test_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_bool("maybe", "--needs-cluster")
        assert "--needs-cluster" in exc_info.value.message
        assert "maybe" in exc_info.value.message
