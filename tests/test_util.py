"""
Tests for utility modules.
"""

import logging

import pytest

from kcp.util.files import EXECUTABLE_MODE, is_writable_dir, read_json, write_json, write_text
from kcp.util.kafka import (
    DEFAULT_KAFKA_VERSION,
    calculate_topic_summary,
    convert_kafka_version,
    get_client_broker_encryption,
    get_kafka_version,
    is_internal_topic,
)
from kcp.util.naming import (
    extract_cluster_name_from_arn,
    format_hcl_resource_name,
    split_csv,
    url_to_folder_name,
)


class TestKafkaVersion:
    """Tests for MSK Kafka version conversion."""

    @pytest.mark.parametrize(
        "msk_version, expected",
        [
            ("4.0.x.kraft", "4.0.0"),
            ("3.9.x.kraft", "3.9.0"),
            ("3.9.x", "3.9.0"),
            ("3.7.x", "3.7.0"),
            ("2.8.2.tiered", "2.8.2"),
            ("3.6.0.1", "3.6.0"),
            ("3.5.1", "3.5.1"),
            ("2.6.0", "2.6.0"),
        ],
    )
    def test_convert(self, msk_version, expected):
        assert convert_kafka_version(msk_version) == expected

    def test_provisioned_cluster(self):
        config = {
            "ClusterType": "PROVISIONED",
            "Provisioned": {"CurrentBrokerSoftwareInfo": {"KafkaVersion": "3.9.x"}},
        }
        assert get_kafka_version(config) == "3.9.0"

    def test_serverless_cluster_defaults(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert get_kafka_version({"ClusterType": "SERVERLESS"}) == DEFAULT_KAFKA_VERSION
        assert "Serverless" in caplog.text

    def test_client_broker_encryption_default(self):
        assert get_client_broker_encryption({}) == "TLS"

    def test_client_broker_encryption(self):
        config = {
            "Provisioned": {"EncryptionInfo": {"EncryptionInTransit": {"ClientBroker": "PLAINTEXT"}}}
        }
        assert get_client_broker_encryption(config) == "PLAINTEXT"


class TestTopicSummary:
    """Tests for topic summary aggregation."""

    def test_counts(self):
        details = [
            {"name": "orders", "partitions": 6, "configurations": {"cleanup.policy": "compact"}},
            {
                "name": "events",
                "partitions": 12,
                "configurations": {"cleanup.policy": "delete", "remote.storage.enable": "true"},
            },
            {"name": "__consumer_offsets", "partitions": 50, "configurations": {}},
        ]

        summary = calculate_topic_summary(details)

        assert summary["topics"] == 2
        assert summary["internal_topics"] == 1
        assert summary["total_partitions"] == 18
        assert summary["total_internal_partitions"] == 50
        assert summary["compact_topics"] == 1
        assert summary["compact_partitions"] == 6
        assert summary["remote_storage_topics"] == 1

    def test_empty(self):
        assert calculate_topic_summary([])["topics"] == 0

    def test_internal_topic(self):
        assert is_internal_topic("__amazon_msk_canary")
        assert not is_internal_topic("orders")


class TestNaming:
    """Tests for name helpers."""

    def test_cluster_name_from_arn(self, cluster_arn):
        assert extract_cluster_name_from_arn(cluster_arn) == "orders-cluster"

    def test_cluster_name_from_bad_arn(self):
        assert extract_cluster_name_from_arn("not-an-arn") == "unknown-cluster"

    def test_url_to_folder_name(self):
        assert url_to_folder_name("https://sr.internal.example.com:8081") == "sr_internal_example_com"

    def test_format_hcl_resource_name(self):
        assert format_hcl_resource_name("My-Connector.v2") == "my_connector_v2"

    def test_split_csv(self):
        assert split_csv(" a, b,,c ") == ["a", "b", "c"]
        assert split_csv(None) == []


class TestFiles:
    """Tests for file helpers."""

    def test_write_text_creates_parents(self, tmp_path):
        path = write_text(tmp_path / "a" / "b" / "file.sh", "#!/bin/bash\n", mode=EXECUTABLE_MODE)
        assert path.read_text() == "#!/bin/bash\n"
        assert path.stat().st_mode & 0o777 == EXECUTABLE_MODE

    def test_json_round_trip(self, tmp_path):
        path = write_json(tmp_path / "data.json", {"b": 1, "a": [1, 2]})
        assert read_json(path) == {"b": 1, "a": [1, 2]}
        assert path.read_text().endswith("\n")

    def test_is_writable_dir(self, tmp_path):
        assert is_writable_dir(tmp_path)
        assert not is_writable_dir(tmp_path / "missing")
