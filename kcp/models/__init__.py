"""Data model for kcp requests and generated Terraform projects."""

from kcp.models.requests import (
    IAM,
    SASL_SCRAM,
    BastionHostRequest,
    BrokerEndpoint,
    ExtOutboundBroker,
    MigrationType,
    MigrationWizardRequest,
    ReverseProxyRequest,
    SchemaExporterRequest,
    TargetClusterWizardRequest,
)
from kcp.models.terraform import (
    ModuleVariable,
    TerraformModule,
    TerraformOutput,
    TerraformProject,
    TerraformVariable,
)

__all__ = [
    "IAM",
    "SASL_SCRAM",
    "BastionHostRequest",
    "BrokerEndpoint",
    "ExtOutboundBroker",
    "MigrationType",
    "MigrationWizardRequest",
    "ModuleVariable",
    "ReverseProxyRequest",
    "SchemaExporterRequest",
    "TargetClusterWizardRequest",
    "TerraformModule",
    "TerraformOutput",
    "TerraformProject",
    "TerraformVariable",
]
