"""
Tests for the target infrastructure generator.
"""

import pytest
from typer.testing import CliRunner

from kcp.cli import app
from kcp.exceptions import ClusterNotFoundError, ValidationError
from kcp.generate.network import resolve_region_and_vpc
from kcp.generate.target_infra import generate_target_infra, validate_request
from kcp.models.requests import TargetClusterWizardRequest

runner = CliRunner()


def make_request(**overrides):
    values = {
        "aws_region": "us-east-1",
        "vpc_id": "vpc-0abc",
        "environment_name": "migration",
        "cluster_name": "orders",
        "cluster_type": "dedicated",
    }
    values.update(overrides)
    return TargetClusterWizardRequest(**values)


class TestValidateRequest:
    """Tests for the needs-* flag combinations."""

    def test_new_environment_and_cluster(self):
        validate_request(make_request())

    def test_new_environment_needs_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(environment_name=""))
        assert "`--env-name`" in exc_info.value.message

    def test_existing_environment_needs_id(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(needs_environment=False))
        assert "`--env-id`" in exc_info.value.message

    def test_new_cluster_needs_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(cluster_type=""))
        assert "`--cluster-type`" in exc_info.value.message

    def test_invalid_cluster_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(cluster_type="basic"))
        assert "invalid value for `--cluster-type`: basic" in exc_info.value.message

    def test_existing_cluster_needs_id(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(needs_cluster=False))
        assert "`--cluster-id`" in exc_info.value.message

    def test_private_link_needs_subnets(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request(make_request(needs_private_link=True))
        assert "`--subnet-cidrs`" in exc_info.value.message


class TestTargetNetwork:
    """Tests for the region and VPC of the target infrastructure."""

    def test_from_state_file(self, state_file, cluster_arn):
        assert resolve_region_and_vpc(
            None, None, str(state_file), cluster_arn, region_flag="--aws-region"
        ) == ("us-east-1", "vpc-0abc")

    def test_state_file_needs_cluster_arn(self, state_file):
        with pytest.raises(ValidationError) as exc_info:
            resolve_region_and_vpc(None, None, str(state_file), None, region_flag="--aws-region")
        assert "`--cluster-arn`" in exc_info.value.message

    def test_unknown_cluster(self, state_file):
        with pytest.raises(ClusterNotFoundError):
            resolve_region_and_vpc(
                None,
                None,
                str(state_file),
                "arn:aws:kafka:us-east-1:1:cluster/other/x",
                region_flag="--aws-region",
            )

    def test_errors_name_the_aws_region_flag(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve_region_and_vpc(None, "vpc-1", None, None, region_flag="--aws-region")
        assert "`--aws-region` and `--vpc-id` must be set together" in exc_info.value.message

    def test_flags_and_state_file_are_exclusive(self, state_file, cluster_arn):
        with pytest.raises(ValidationError) as exc_info:
            resolve_region_and_vpc(
                "eu-west-1", "vpc-1", str(state_file), cluster_arn, region_flag="--aws-region"
            )
        assert "cannot be combined" in exc_info.value.message


class TestGenerateTargetInfra:
    """Tests for the written target infrastructure project."""

    def test_new_environment_and_cluster(self, tmp_path):
        written = generate_target_infra(make_request(), tmp_path)

        cloud_main = (tmp_path / "modules" / "confluent_cloud" / "main.tf").read_text()
        assert 'resource "confluent_environment" "environment"' in cloud_main
        assert 'resource "confluent_kafka_cluster" "cluster"' in cloud_main
        assert 'resource "confluent_service_account" "app-manager"' in cloud_main
        assert "CloudClusterAdmin" in cloud_main
        assert not (tmp_path / "modules" / "private_link").exists()
        assert tmp_path / "main.tf" in written

        tfvars = (tmp_path / "inputs.auto.tfvars").read_text()
        assert '"migration"' in tfvars
        assert '"orders"' in tfvars

    def test_existing_environment_and_cluster(self, tmp_path):
        request = make_request(
            needs_environment=False,
            environment_id="env-123",
            needs_cluster=False,
            cluster_id="lkc-abc",
        )
        generate_target_infra(request, tmp_path)

        cloud_main = (tmp_path / "modules" / "confluent_cloud" / "main.tf").read_text()
        assert 'data "confluent_environment" "environment"' in cloud_main
        assert 'data "confluent_kafka_cluster" "cluster"' in cloud_main
        assert 'resource "confluent_kafka_cluster"' not in cloud_main

    def test_private_link_module(self, tmp_path):
        request = make_request(
            needs_private_link=True, subnet_cidr_ranges=["10.0.10.0/24", "10.0.11.0/24"]
        )
        generate_target_infra(request, tmp_path)

        link_main = (tmp_path / "modules" / "private_link" / "main.tf").read_text()
        assert 'resource "confluent_private_link_attachment" "private_link_attachment"' in link_main
        assert 'resource "aws_vpc_endpoint" "cflt_private_link_vpc_endpoint"' in link_main
        assert "orders_private_link_attachment_connection" in link_main

        main_tf = (tmp_path / "main.tf").read_text()
        assert 'module "private_link"' in main_tf
        assert "10.0.11.0/24" in (tmp_path / "inputs.auto.tfvars").read_text()

    def test_invalid_request_writes_nothing(self, tmp_path):
        with pytest.raises(ValidationError):
            generate_target_infra(make_request(cluster_type="basic"), tmp_path / "out")
        assert not (tmp_path / "out").exists()


class TestTargetInfraCommand:
    """Tests for `kcp create-asset target-infra`."""

    def test_from_state_file(self, in_tmp_dir, state_file, cluster_arn):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "target-infra",
                "--state-file",
                str(state_file),
                "--cluster-arn",
                cluster_arn,
                "--needs-environment",
                "true",
                "--env-name",
                "migration",
                "--needs-cluster",
                "true",
                "--cluster-name",
                "orders",
                "--cluster-type",
                "enterprise",
                "--needs-private-link",
                "true",
                "--subnet-cidrs",
                "10.0.10.0/24,10.0.11.0/24",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (in_tmp_dir / "target_infra" / "modules" / "private_link" / "main.tf").exists()
        assert '"vpc-0abc"' in (in_tmp_dir / "target_infra" / "inputs.auto.tfvars").read_text()

    def test_invalid_bool(self, in_tmp_dir):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "target-infra",
                "--aws-region",
                "us-east-1",
                "--vpc-id",
                "vpc-1",
                "--needs-environment",
                "maybe",
            ],
        )

        assert result.exit_code == 1
        assert "--needs-environment" in result.output

    def test_region_without_vpc(self, in_tmp_dir):
        result = runner.invoke(
            app,
            [
                "create-asset",
                "target-infra",
                "--aws-region",
                "us-east-1",
                "--needs-environment",
                "false",
                "--env-id",
                "env-123",
                "--needs-cluster",
                "false",
                "--cluster-id",
                "lkc-123",
            ],
        )

        assert result.exit_code == 1
        assert "`--aws-region` and `--vpc-id` must be set together" in result.output
