"""
Tests for the HTTP and AWS API clients.
"""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from kcp.clients.aws_iam import IamPolicyReader, parse_policy_document, parse_principal_arn
from kcp.clients.confluent_cloud import ConfluentCloudClient
from kcp.clients.connect import AUTH_SASL_SCRAM, AUTH_TLS, ConnectAuth, ConnectClient
from kcp.clients.releases import ReleaseChecker, is_newer_version
from kcp.clients.schema_registry import SchemaRegistryClient
from kcp.exceptions import ApiError, KcpError, ValidationError


def response(status_code=200, payload=None, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.json.return_value = payload
    resp.text = text
    return resp


def session_returning(resp):
    session = Mock()
    session.headers = {}
    session.get.return_value = resp
    session.put.return_value = resp
    return session


class TestConfluentCloudClient:
    """Tests for the connector config translation call."""

    def test_translate(self):
        session = session_returning(
            response(
                payload={
                    "config": {"connector.class": "S3_SINK"},
                    "warnings": [{"field": "topics", "message": "required"}],
                }
            )
        )
        client = ConfluentCloudClient("key", "secret", "https://api.example.com/", session=session)

        config, warnings = client.translate_connector_config(
            "env-1", "lkc-1", "S3_SINK", {"topics": "orders"}
        )

        assert config == {"connector.class": "S3_SINK"}
        assert warnings == [{"field": "topics", "message": "required"}]
        assert session.auth == ("key", "secret")
        url = session.put.call_args.args[0]
        assert url == (
            "https://api.example.com/connect/v1/environments/env-1/clusters/lkc-1"
            "/connector-plugins/S3_SINK/config/translate"
        )
        assert session.put.call_args.kwargs["json"] == {"topics": "orders"}

    def test_missing_fields(self):
        client = ConfluentCloudClient("k", "s", session=session_returning(response(payload={})))
        assert client.translate_connector_config("e", "c", "p", {}) == ({}, [])

    def test_error_status(self):
        client = ConfluentCloudClient(
            "k", "s", session=session_returning(response(400, text="invalid config"))
        )
        with pytest.raises(ApiError) as exc_info:
            client.translate_connector_config("e", "c", "p", {})
        assert exc_info.value.status_code == 400
        assert "invalid config" in exc_info.value.message


class TestSchemaRegistryClient:
    """Tests for the Schema Registry REST client."""

    def test_basic_auth_and_subject_quoting(self):
        session = session_returning(response(payload=[1, 2]))
        client = SchemaRegistryClient("https://sr:8081/", "user", "pw", session=session)

        assert client.get_versions(":.staging:orders-value") == [1, 2]
        assert session.auth == ("user", "pw")
        assert session.get.call_args.args[0] == (
            "https://sr:8081/subjects/%3A.staging%3Aorders-value/versions"
        )

    def test_unauthenticated(self):
        session = session_returning(response(payload=["a"]))
        session.auth = None
        client = SchemaRegistryClient("https://sr:8081", session=session)

        assert client.get_subjects() == ["a"]
        assert session.auth is None

    def test_global_compatibility(self):
        client = SchemaRegistryClient(
            "https://sr", session=session_returning(response(payload={"compatibilityLevel": "FULL"}))
        )
        assert client.get_global_compatibility() == "FULL"

        client = SchemaRegistryClient("https://sr", session=session_returning(response(payload={})))
        assert client.get_global_compatibility() == "BACKWARD"

    def test_error_status(self):
        client = SchemaRegistryClient(
            "https://sr", session=session_returning(response(404, text="not found"))
        )
        with pytest.raises(ApiError):
            client.get_contexts()


class TestConnectClient:
    """Tests for the Kafka Connect REST client."""

    def test_sasl_scram_uses_basic_auth(self):
        session = session_returning(response(payload=["datagen"]))
        client = ConnectClient(
            "https://connect:8083/",
            ConnectAuth(AUTH_SASL_SCRAM, username="u", password="p"),
            session=session,
        )

        assert client.list_connectors() == ["datagen"]
        assert session.auth == ("u", "p")
        assert session.get.call_args.args[0] == "https://connect:8083/connectors"

    def test_tls_uses_client_certificates(self):
        session = session_returning(response(payload={}))
        ConnectClient(
            "https://connect:8083",
            ConnectAuth(AUTH_TLS, ca_cert="ca.pem", client_cert="c.pem", client_key="c.key"),
            session=session,
        )

        assert session.verify == "ca.pem"
        assert session.cert == ("c.pem", "c.key")

    def test_connector_status(self):
        session = session_returning(response(payload={"connector": {"state": "RUNNING"}}))
        client = ConnectClient("https://connect:8083", session=session)

        assert client.get_connector_status("datagen")["connector"]["state"] == "RUNNING"
        assert session.get.call_args.args[0].endswith("/connectors/datagen/status")

    def test_error_status(self):
        client = ConnectClient(
            "https://connect:8083", session=session_returning(response(401, text="denied"))
        )
        with pytest.raises(ApiError):
            client.get_connector_config("datagen")


class TestReleaseChecker:
    """Tests for the GitHub release lookup."""

    def test_latest_version(self):
        checker = ReleaseChecker(
            session=session_returning(response(payload={"tag_name": "v0.6.0"}))
        )
        assert checker.get_latest_version() == "v0.6.0"

    def test_error_status(self):
        checker = ReleaseChecker(session=session_returning(response(403, text="rate limited")))
        with pytest.raises(ApiError):
            checker.get_latest_version()

    def test_is_newer_version(self):
        assert is_newer_version("v0.6.0", "0.5.0")
        assert not is_newer_version("v0.5.0", "0.5.0")


def paginator(pages):
    p = Mock()
    p.paginate.return_value = pages
    return p


class TestIamPolicyReader:
    """Tests for reading IAM role and user policies."""

    def test_parse_principal_arn(self):
        assert parse_principal_arn("arn:aws:iam::1:role/app/orders") == ("orders", "role")
        assert parse_principal_arn("arn:aws:iam::1:user/jane") == ("jane", "user")
        with pytest.raises(ValidationError):
            parse_principal_arn("arn:aws:iam::1:group/admins")
        with pytest.raises(ValidationError):
            parse_principal_arn("nonsense")

    def test_parse_policy_document(self):
        encoded = "%7B%22Version%22%3A%222012-10-17%22%7D"
        assert parse_policy_document(encoded) == {"Version": "2012-10-17"}
        assert parse_policy_document({"Version": "x"}) == {"Version": "x"}

    def test_role_policies(self):
        iam = Mock()
        iam.get_paginator.side_effect = lambda op: {
            "list_role_policies": paginator([{"PolicyNames": ["inline-kafka"]}]),
            "list_attached_role_policies": paginator(
                [
                    {
                        "AttachedPolicies": [
                            {
                                "PolicyName": "managed-kafka",
                                "PolicyArn": "arn:aws:iam::1:policy/managed-kafka",
                            }
                        ]
                    }
                ]
            ),
        }[op]
        iam.get_role_policy.return_value = {"PolicyDocument": {"Statement": [{"Sid": "inline"}]}}
        iam.get_policy.return_value = {"Policy": {"DefaultVersionId": "v3", "Description": "d"}}
        iam.get_policy_version.return_value = {
            "PolicyVersion": {"Document": {"Statement": [{"Sid": "managed"}]}}
        }

        policies = IamPolicyReader(iam_client=iam).get_principal_policies(
            "arn:aws:iam::1:role/orders"
        )

        assert policies.principal_name == "orders"
        assert policies.principal_type == "role"
        assert [d["Statement"][0]["Sid"] for d in policies.documents] == ["inline", "managed"]
        iam.get_role_policy.assert_called_once_with(PolicyName="inline-kafka", RoleName="orders")
        iam.get_policy_version.assert_called_once_with(
            PolicyArn="arn:aws:iam::1:policy/managed-kafka", VersionId="v3"
        )

    def test_user_policies(self):
        iam = Mock()
        iam.get_paginator.side_effect = lambda op: {
            "list_user_policies": paginator([{"PolicyNames": []}]),
            "list_attached_user_policies": paginator([{"AttachedPolicies": []}]),
        }[op]

        policies = IamPolicyReader(iam_client=iam).get_principal_policies(
            "arn:aws:iam::1:user/jane"
        )

        assert policies.principal_type == "user"
        assert policies.documents == []

    def test_client_error(self):
        iam = Mock()
        iam.get_paginator.return_value.paginate.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "ListRolePolicies"
        )

        with pytest.raises(KcpError) as exc_info:
            IamPolicyReader(iam_client=iam).get_principal_policies("arn:aws:iam::1:role/orders")
        assert "failed to read IAM policies" in exc_info.value.message
