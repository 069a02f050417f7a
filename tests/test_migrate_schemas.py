"""
Tests for the schema exporter assets.
"""

import re

import pytest
from typer.testing import CliRunner

from kcp.cli import app
from kcp.exceptions import ValidationError
from kcp.generate.migrate_schemas import build_request, generate_migrate_schemas
from kcp.hcl.schema_exporters import exporter_name, exporter_subjects
from kcp.models.requests import SchemaExporterRequest
from kcp.state import State

runner = CliRunner()

SR_URL = "https://sr.internal.example.com:8081"
CC_SR_URL = "https://psrc-abc.us-east-1.aws.confluent.cloud"


class TestExporterNaming:
    """Tests for exporter names and subjects."""

    def test_exporter_name(self):
        assert exporter_name(".") == "kcp-schema-exporter-default"
        assert exporter_name(".staging") == "kcp-schema-exporter-staging"

    def test_default_context_subjects(self):
        assert exporter_subjects(".", ["b-value", "a-value"]) == ["a-value", "b-value"]
        assert exporter_subjects(".", []) == ["*"]

    def test_named_context_subjects(self):
        assert exporter_subjects(".staging", ["a-value"]) == [":.staging:*"]


class TestBuildRequest:
    """Tests for building the exporter request from the state file."""

    def test_request_from_state(self, state_file):
        request = build_request(State.load(state_file), SR_URL, CC_SR_URL)

        assert request.source_url == SR_URL
        assert request.target_url == CC_SR_URL
        assert request.contexts == [".", ".staging"]
        assert request.subjects == ["orders-value"]

    def test_default_context_added(self, state_data):
        state_data["schema_registries"][0]["contexts"] = [".staging"]
        request = build_request(State(state_data), SR_URL, CC_SR_URL)
        assert request.contexts == [".", ".staging"]

    def test_unknown_registry(self, state_file):
        with pytest.raises(ValidationError) as exc_info:
            build_request(State.load(state_file), "https://other:8081", CC_SR_URL)
        assert "scan schema-registry" in exc_info.value.suggestion


class TestGenerateMigrateSchemas:
    """Tests for the written exporter project."""

    def test_one_exporter_per_context(self, tmp_path):
        request = SchemaExporterRequest(
            source_url=SR_URL,
            target_url=CC_SR_URL,
            contexts=[".", ".staging"],
            subjects=["orders-value"],
        )
        written = generate_migrate_schemas(request, tmp_path)

        project = tmp_path / "sr_internal_example_com"
        assert project / "README.md" in written

        main_tf = (project / "main.tf").read_text()
        assert 'resource "confluent_schema_exporter" "kcp_schema_exporter_default"' in main_tf
        assert 'resource "confluent_schema_exporter" "kcp_schema_exporter_staging"' in main_tf
        assert '"NONE"' in main_tf
        assert '"CUSTOM"' in main_tf
        assert '[":.staging:*"]' in main_tf
        assert '["orders-value"]' in main_tf

        tfvars = (project / "inputs.auto.tfvars").read_text()
        assert f'"{SR_URL}"' in tfvars
        assert f'"{CC_SR_URL}"' in tfvars
        assert '"sr_internal_example_com"' in tfvars

        readme = (project / "README.md").read_text()
        assert "`kcp-schema-exporter-staging`" in readme

    def test_credentials_not_written_to_tfvars(self, tmp_path):
        request = SchemaExporterRequest(source_url=SR_URL, target_url=CC_SR_URL)
        generate_migrate_schemas(request, tmp_path)

        project = tmp_path / "sr_internal_example_com"
        variables_tf = (project / "variables.tf").read_text()
        tfvars = (project / "inputs.auto.tfvars").read_text()
        assert re.search(r"sensitive\s+= true", variables_tf)
        assert "password" not in tfvars
        assert "secret" not in tfvars


class TestMigrateSchemasCommand:
    """Tests for `kcp create-asset migrate-schemas`."""

    def test_command(self, in_tmp_dir, state_file):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "migrate-schemas",
                "--state-file",
                str(state_file),
                "--url",
                SR_URL,
                "--cc-sr-rest-endpoint",
                CC_SR_URL,
            ],
        )

        assert result.exit_code == 0, result.output
        assert (in_tmp_dir / "migrate_schemas" / "sr_internal_example_com" / "main.tf").exists()

    def test_unscanned_registry(self, in_tmp_dir, state_file):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "migrate-schemas",
                "--state-file",
                str(state_file),
                "--url",
                "https://unknown:8081",
                "--cc-sr-rest-endpoint",
                CC_SR_URL,
            ],
        )

        assert result.exit_code == 1
        assert "scan schema-registry" in result.output
