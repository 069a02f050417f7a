"""
Clients for the remote systems kcp talks to.

Modules:
- confluent_cloud: Confluent Cloud connector config translation
- connect: Kafka Connect REST API
- schema_registry: Schema Registry REST API
- kafka_admin: Kafka admin protocol (confluent-kafka)
- aws_iam: IAM policies of roles and users (boto3)
- releases: latest kcp release on GitHub
"""
