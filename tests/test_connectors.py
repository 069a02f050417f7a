"""
Tests for connector migration assets.
"""

import json
from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from kcp.cli import app
from kcp.clients.confluent_cloud import infer_plugin_name
from kcp.exceptions import ApiError, UnsupportedConnectorError
from kcp.generate.connector_utility import (
    build_connector_configs,
    config_file_name,
    generate_connector_utility,
)
from kcp.generate.migrate_connectors import (
    Connector,
    generate_connectors,
    msk_connectors,
    self_managed_connectors,
)
from kcp.state import State

runner = CliRunner()

S3_SINK = "io.confluent.connect.s3.S3SinkConnector"
DATAGEN = "io.confluent.kafka.connect.datagen.DatagenConnector"


@pytest.fixture
def cluster(state_file, cluster_arn):
    return State.load(state_file).get_cluster_by_arn(cluster_arn)


@pytest.fixture
def client():
    client = Mock()
    client.translate_connector_config.return_value = (
        {"connector.class": "S3_SINK", "topics": "orders", "name": "s3-sink"},
        [{"field": "s3.region", "message": "Value is required"}],
    )
    return client


class TestInferPluginName:
    """Tests for mapping connector classes to managed plugins."""

    def test_known_classes(self):
        assert infer_plugin_name(S3_SINK) == "S3_SINK"
        assert infer_plugin_name(DATAGEN) == "DatagenSource"

    def test_unknown_class(self):
        with pytest.raises(UnsupportedConnectorError) as exc_info:
            infer_plugin_name("com.example.CustomConnector")
        assert "com.example.CustomConnector" in exc_info.value.message


class TestConnectorSources:
    """Tests for reading connectors from the state file."""

    def test_msk_connectors(self, cluster):
        connectors = msk_connectors(cluster)
        assert connectors == [Connector("s3-sink", {"connector.class": S3_SINK, "topics": "orders"})]

    def test_self_managed_connectors(self, cluster):
        cluster.self_managed_connectors = [
            {"name": "datagen", "config": {"connector.class": DATAGEN}, "state": "RUNNING"}
        ]
        assert self_managed_connectors(cluster) == [
            Connector("datagen", {"connector.class": DATAGEN})
        ]

    def test_no_self_managed_connectors(self, cluster):
        assert self_managed_connectors(cluster) == []


class TestGenerateConnectors:
    """Tests for translating connectors into Terraform."""

    def test_writes_connector_file(self, client, tmp_path):
        connectors = [Connector("s3-sink", {"connector.class": S3_SINK, "topics": "orders"})]

        written = generate_connectors(connectors, client, "env-1", "lkc-1", tmp_path)

        assert written == [tmp_path / "s3-sink-connector.tf"]
        client.translate_connector_config.assert_called_once_with(
            "env-1", "lkc-1", "S3_SINK", {"connector.class": S3_SINK, "topics": "orders"}
        )
        content = written[0].read_text()
        assert 'resource "confluent_connector" "s3_sink"' in content
        assert 'id = "env-1"' in content
        assert 'id = "lkc-1"' in content
        assert '"topics" = "orders"' in content
        assert "# WARNING s3.region: Value is required" in content

    def test_config_keys_are_sorted(self, client, tmp_path):
        written = generate_connectors(
            [Connector("s3-sink", {"connector.class": S3_SINK})], client, "env-1", "lkc-1", tmp_path
        )
        content = written[0].read_text()
        assert content.index('"connector.class"') < content.index('"name"') < content.index('"topics"')

    def test_failed_connector_is_skipped(self, client, tmp_path, caplog):
        client.translate_connector_config.side_effect = [
            ApiError(400, "bad config"),
            ({"topics": "payments"}, []),
        ]
        connectors = [
            Connector("broken", {"connector.class": S3_SINK}),
            Connector("working", {"connector.class": S3_SINK}),
        ]

        with caplog.at_level("WARNING", logger="kcp"):
            written = generate_connectors(connectors, client, "env-1", "lkc-1", tmp_path)

        assert written == [tmp_path / "working-connector.tf"]
        assert "Failed to translate connector broken" in caplog.text

    def test_missing_connector_class_is_skipped(self, client, tmp_path, caplog):
        with caplog.at_level("WARNING", logger="kcp"):
            written = generate_connectors(
                [Connector("no-class", {"topics": "orders"})], client, "env-1", "lkc-1", tmp_path
            )

        assert written == []
        assert "'connector.class' not found" in caplog.text
        client.translate_connector_config.assert_not_called()

    def test_unsupported_class_is_skipped(self, client, tmp_path):
        written = generate_connectors(
            [Connector("custom", {"connector.class": "com.example.Custom"})],
            client,
            "env-1",
            "lkc-1",
            tmp_path,
        )
        assert written == []

    def test_no_connectors(self, client, tmp_path):
        assert generate_connectors([], client, "env-1", "lkc-1", tmp_path / "out") == []
        assert not (tmp_path / "out").exists()


class TestConnectorUtility:
    """Tests for the connect-migration-utility exports."""

    def test_config_file_name(self, cluster):
        assert config_file_name(cluster) == "orders-cluster-connector-configs.json"

    def test_self_managed_overrides_msk(self, cluster):
        cluster.self_managed_connectors = [
            {"name": "s3-sink", "config": {"connector.class": S3_SINK, "topics": "payments"}},
            {"name": "datagen", "config": {"connector.class": DATAGEN}},
        ]

        configs = build_connector_configs(cluster)["connectors"]

        assert set(configs) == {"s3-sink", "datagen"}
        assert configs["s3-sink"]["config"]["topics"] == "payments"

    def test_writes_configs_and_readme(self, cluster, tmp_path):
        written = generate_connector_utility([cluster], tmp_path)

        assert [p.name for p in written] == ["orders-cluster-connector-configs.json", "README.md"]
        data = json.loads((tmp_path / "orders-cluster-connector-configs.json").read_text())
        assert data["connectors"]["s3-sink"]["name"] == "s3-sink"
        assert "orders-cluster-connector-configs.json" in (tmp_path / "README.md").read_text()

    def test_cluster_without_connectors(self, cluster, tmp_path):
        cluster.aws_client_information["connectors"] = []

        written = generate_connector_utility([cluster], tmp_path)

        assert [p.name for p in written] == ["README.md"]
        assert "No connector configurations were recorded" in (tmp_path / "README.md").read_text()

    def test_no_clusters(self, tmp_path):
        assert generate_connector_utility([], tmp_path) == []


class TestConnectorCommands:
    """Tests for `kcp create-asset migrate-connectors`."""

    def test_msk_command(self, in_tmp_dir, state_file, cluster_arn, client):
        with patch("kcp.commands.create_asset.ConfluentCloudClient", return_value=client):
            result = runner.invoke(
                app,
                [
                    "create-asset",
                    "migrate-connectors",
                    "msk",
                    "--state-file",
                    str(state_file),
                    "--cluster-arn",
                    cluster_arn,
                    "--cc-environment-id",
                    "env-1",
                    "--cc-cluster-id",
                    "lkc-1",
                    "--cc-api-key",
                    "key",
                    "--cc-api-secret",
                    "secret",
                ],
            )

        assert result.exit_code == 0, result.output
        assert (in_tmp_dir / "msk_connectors" / "s3-sink-connector.tf").exists()

    def test_connector_utility_command(self, in_tmp_dir, state_file):
        result = runner.invoke(
            app,
            ["create-asset", "migrate-connectors", "connector-utility", "--state-file", str(state_file)],
        )

        assert result.exit_code == 0, result.output
        assert (in_tmp_dir / "connector_utility" / "README.md").exists()
        assert "README.md" in result.output
