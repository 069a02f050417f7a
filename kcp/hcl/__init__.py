"""
Terraform (HCL) generation.

Block builders are grouped by provider (aws, confluent, other) on top of the
writer module; each scenario module turns a request into a TerraformProject:

- migration_infra: cluster link, external outbound and jump cluster projects
- target_infra: Confluent Cloud environment, cluster and private link
- reverse_proxy / bastion_host: helper hosts in the MSK VPC
- schema_exporters: schema exporters from a source Schema Registry
"""
