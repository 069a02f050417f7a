"""
Schema Registry scan: subjects, contexts and compatibility.
"""

import logging
from typing import Any

from kcp.clients.schema_registry import SchemaRegistryClient
from kcp.exceptions import ApiError
from kcp.util.progress import track

logger = logging.getLogger(__name__)

REGISTRY_TYPE = "confluent"
DEFAULT_SCHEMA_TYPE = "AVRO"


def scan_subject(client: SchemaRegistryClient, subject: str) -> dict[str, Any]:
    latest = client.get_latest_schema(subject)
    versions = [client.get_schema_version(subject, v) for v in client.get_versions(subject)]
    return {
        "name": subject,
        "schema_type": latest.get("schemaType") or DEFAULT_SCHEMA_TYPE,
        "versions": versions,
        "latest_schema": latest,
    }


def scan_schema_registry(client: SchemaRegistryClient) -> dict[str, Any]:
    """
    Collect the registry information recorded in the state file.

    Subjects whose schemas cannot be read are skipped.
    """
    logger.info(f"Starting schema registry scan of {client.url}")

    subject_names = client.get_subjects()
    subjects = []
    for name in track(subject_names, "Scanning subjects"):
        try:
            subjects.append(scan_subject(client, name))
        except ApiError as e:
            logger.warning(f"Failed to read subject {name}: {e}")

    contexts = client.get_contexts()
    compatibility = client.get_global_compatibility()

    logger.info(
        f"Schema registry scan complete: {len(subjects)} subjects, {len(contexts)} contexts"
    )
    return {
        "type": REGISTRY_TYPE,
        "url": client.url,
        "default_compatibility": compatibility,
        "contexts": contexts,
        "subjects": subjects,
    }
