"""
Confluent Cloud API client for connector config translation.
"""

import logging
from typing import Any

import requests

from kcp.exceptions import ApiError, UnsupportedConnectorError

logger = logging.getLogger(__name__)

CONFLUENT_CLOUD_API = "https://api.confluent.cloud"

PLUGIN_NAMES = {
    "io.confluent.kafka.connect.datagen.DatagenConnector": "DatagenSource",
    "io.confluent.connect.s3.S3SinkConnector": "S3_SINK",
}


def infer_plugin_name(connector_class: str) -> str:
    """
    Map a self-managed connector class to its fully managed plugin name.

    Raises:
        UnsupportedConnectorError: If the class has no known managed plugin
    """
    try:
        return PLUGIN_NAMES[connector_class]
    except KeyError:
        raise UnsupportedConnectorError(connector_class) from None


class ConfluentCloudClient:
    """Confluent Cloud API client authenticated with a Cloud API key."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = CONFLUENT_CLOUD_API,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.auth = (api_key, api_secret)

    def translate_connector_config(
        self, environment_id: str, cluster_id: str, plugin_name: str, config: dict[str, Any]
    ) -> tuple[dict[str, Any], list[dict[str, str]]]:
        """
        Translate a self-managed connector config into its fully managed form.

        Args:
            environment_id: Target Confluent Cloud environment
            cluster_id: Target Kafka cluster
            plugin_name: Managed connector plugin name
            config: Self-managed connector configuration

        Returns:
            (translated config, warnings); each warning has ``field`` and ``message``
        """
        url = (
            f"{self.base_url}/connect/v1/environments/{environment_id}/clusters/{cluster_id}"
            f"/connector-plugins/{plugin_name}/config/translate"
        )
        logger.debug(f"Translating {plugin_name} config via {url}")

        resp = self._session.put(url, json=config, headers={"Content-Type": "application/json"})
        if resp.status_code != 200:
            raise ApiError(resp.status_code, resp.text)

        data = resp.json()
        return data.get("config") or {}, data.get("warnings") or []
