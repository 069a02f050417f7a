"""
kcp: Amazon MSK to Confluent Cloud migration tool.

Discovers MSK cluster state and generates the assets needed to move a workload
to Confluent Cloud.

Main features:
- Cluster, schema registry and self-managed connector scanning
- Terraform generation for bastion hosts, reverse proxies, cluster links,
  jump clusters and target Confluent Cloud infrastructure
- Topic mirroring scripts
- Connector config translation through the Confluent Cloud API
- Kafka ACL and IAM policy conversion to Confluent Cloud ACLs
"""

__version__ = "0.5.0"
__commit__ = "unknown"
__date__ = "unknown"
