"""
Pytest configuration and shared fixtures.
"""

import copy
import json
import logging

import pytest

CLUSTER_ARN = "arn:aws:kafka:us-east-1:123456789012:cluster/orders-cluster/1a2b3c4d-5e6f"

SCRAM_BROKERS = (
    "b-2.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9096,"
    "b-1.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9096"
)
IAM_BROKERS = (
    "b-1.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9098,"
    "b-2.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9098"
)
PUBLIC_SCRAM_BROKERS = (
    "b-1-public.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9196,"
    "b-2-public.orders.abc123.c2.kafka.us-east-1.amazonaws.com:9196"
)

STATE = {
    "regions": [
        {
            "name": "us-east-1",
            "clusters": [
                {
                    "name": "orders-cluster",
                    "arn": CLUSTER_ARN,
                    "region": "us-east-1",
                    "aws_client_information": {
                        "msk_cluster_config": {
                            "ClusterType": "PROVISIONED",
                            "Provisioned": {
                                "BrokerNodeGroupInfo": {
                                    "InstanceType": "kafka.m5.large",
                                    "StorageInfo": {"EbsStorageInfo": {"VolumeSize": 100}},
                                },
                                "CurrentBrokerSoftwareInfo": {"KafkaVersion": "3.6.0"},
                                "EncryptionInfo": {
                                    "EncryptionInTransit": {"ClientBroker": "TLS"}
                                },
                            },
                        },
                        "bootstrap_brokers": {
                            "BootstrapBrokerStringSaslScram": SCRAM_BROKERS,
                            "BootstrapBrokerStringSaslIam": IAM_BROKERS,
                            "BootstrapBrokerStringPublicSaslScram": PUBLIC_SCRAM_BROKERS,
                        },
                        "cluster_networking": {
                            "vpc_id": "vpc-0abc",
                            "subnet_ids": ["subnet-a", "subnet-b"],
                            "security_groups": ["sg-1"],
                            "subnets": [
                                {
                                    "subnet_msk_broker_id": 1,
                                    "subnet_id": "subnet-a",
                                    "availability_zone": "us-east-1a",
                                    "private_ip_address": "10.0.1.10",
                                    "cidr_block": "10.0.1.0/24",
                                },
                                {
                                    "subnet_msk_broker_id": 2,
                                    "subnet_id": "subnet-b",
                                    "availability_zone": "us-east-1b",
                                    "private_ip_address": "10.0.2.10",
                                    "cidr_block": "10.0.2.0/24",
                                },
                            ],
                        },
                        "connectors": [
                            {
                                "connector_name": "s3-sink",
                                "connector_configuration": {
                                    "connector.class": "io.confluent.connect.s3.S3SinkConnector",
                                    "topics": "orders",
                                },
                            }
                        ],
                    },
                    "kafka_admin_client_information": {
                        "cluster_id": "msk-cluster-id-1",
                        "topics": {
                            "summary": {},
                            "details": [
                                {"name": "orders", "partitions": 6, "configurations": {}},
                                {"name": "payments", "partitions": 3, "configurations": {}},
                                {"name": "__amazon_msk_canary", "partitions": 1},
                            ],
                        },
                        "acls": [
                            {
                                "ResourceType": "Topic",
                                "ResourceName": "orders",
                                "ResourcePatternType": "Literal",
                                "Principal": "User:alice",
                                "Host": "*",
                                "Operation": "Read",
                                "PermissionType": "Allow",
                            },
                            {
                                "ResourceType": "TransactionalId",
                                "ResourceName": "tx-",
                                "ResourcePatternType": "Prefixed",
                                "Principal": "User:bob.smith@corp",
                                "Host": "*",
                                "Operation": "Write",
                                "PermissionType": "Allow",
                            },
                        ],
                    },
                }
            ],
        }
    ],
    "schema_registries": [
        {
            "type": "confluent",
            "url": "https://sr.internal.example.com:8081",
            "default_compatibility": "BACKWARD",
            "contexts": [".", ".staging"],
            "subjects": [
                {"name": "orders-value", "schema_type": "AVRO", "versions": []},
                {"name": ":.staging:orders-value", "schema_type": "AVRO", "versions": []},
            ],
        }
    ],
}


@pytest.fixture(autouse=True)
def reset_kcp_logger():
    """The CLI reconfigures the kcp logger; restore it so caplog keeps working."""
    yield
    logger = logging.getLogger("kcp")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def cluster_arn():
    return CLUSTER_ARN


@pytest.fixture
def state_data():
    """A fresh copy of the discovery state used across tests."""
    return copy.deepcopy(STATE)


@pytest.fixture
def state_file(tmp_path, state_data):
    path = tmp_path / "kcp-state.json"
    path.write_text(json.dumps(state_data))
    return path


@pytest.fixture
def in_tmp_dir(tmp_path, monkeypatch):
    """Run CLI commands from an empty, writable directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_tfstate():
    """Write a terraform.tfstate with the given outputs into a folder."""

    def _write(folder, outputs, migration_type=None):
        folder.mkdir(parents=True, exist_ok=True)
        state = {
            "version": 4,
            "outputs": {name: {"value": value, "type": "string"} for name, value in outputs.items()},
        }
        (folder / "terraform.tfstate").write_text(json.dumps(state))
        if migration_type is not None:
            (folder / "manifest.json").write_text(
                json.dumps({"migration_infra_type": migration_type})
            )
        return folder

    return _write
