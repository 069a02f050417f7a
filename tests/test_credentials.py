"""
Tests for the cluster credentials file.
"""

import pytest

from kcp.credentials import ClusterAuth, load_credentials
from kcp.exceptions import ConfigurationError, InvalidCredentialsError

ARN = "arn:aws:kafka:us-east-1:123456789012:cluster/orders-cluster/1a2b3c4d-5e6f"

VALID = f"""
regions:
  - name: us-east-1
    clusters:
      - name: orders-cluster
        arn: {ARN}
        auth_method:
          sasl_scram:
            use: true
            username: admin
            password: secret
          tls:
            use: false
            ca_cert: ca.pem
"""


def write(tmp_path, content):
    path = tmp_path / "credentials.yaml"
    path.write_text(content)
    return path


class TestLoadCredentials:
    """Tests for loading and validating the credentials YAML."""

    def test_valid_file(self, tmp_path):
        credentials = load_credentials(write(tmp_path, VALID))

        assert [r.name for r in credentials.regions] == ["us-east-1"]
        cluster = credentials.regions[0].clusters[0]
        assert cluster.arn == ARN
        assert cluster.enabled_auth_methods() == ["sasl_scram"]
        assert cluster.selected_auth_type() == "sasl_scram"
        assert cluster.settings("sasl_scram")["username"] == "admin"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_credentials(tmp_path / "missing.yaml")
        assert "failed to read credentials file" in exc_info.value.message

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_credentials(write(tmp_path, "regions: [unclosed"))
        assert "failed to parse credentials YAML" in exc_info.value.message

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            load_credentials(write(tmp_path, "- just\n- a list\n"))
        assert "expected a mapping" in exc_info.value.message

    def test_schema_violation(self, tmp_path):
        content = VALID.replace(ARN, "not-an-arn")
        with pytest.raises(InvalidCredentialsError) as exc_info:
            load_credentials(write(tmp_path, content))
        assert "regions.0.clusters.0.arn" in exc_info.value.message
        assert "auth_method" in exc_info.value.suggestion

    def test_unknown_auth_method(self, tmp_path):
        content = VALID.replace("tls:\n", "kerberos:\n")
        with pytest.raises(InvalidCredentialsError):
            load_credentials(write(tmp_path, content))

    def test_multiple_methods_enabled(self, tmp_path):
        content = VALID.replace("use: false", "use: true")
        with pytest.raises(InvalidCredentialsError) as exc_info:
            load_credentials(write(tmp_path, content))
        assert f"more than one authentication method enabled for {ARN}" in exc_info.value.message


class TestClusterAuth:
    """Tests for picking the auth method of a cluster."""

    def test_no_method_enabled(self):
        auth = ClusterAuth(name="c", arn=ARN, auth_method={"iam": {"use": False}})
        assert auth.enabled_auth_methods() == []
        with pytest.raises(ConfigurationError):
            auth.selected_auth_type()

    def test_settings_of_unknown_method(self):
        assert ClusterAuth(name="c", arn=ARN).settings("tls") == {}
