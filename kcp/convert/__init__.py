"""
Conversion of MSK Kafka ACLs and IAM policies into Confluent Cloud ACL Terraform.
"""
