"""
Kafka Connect REST API client for self-managed Connect clusters.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from kcp.exceptions import ApiError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15

AUTH_UNAUTHENTICATED = "unauthenticated"
AUTH_SASL_SCRAM = "sasl_scram"
AUTH_TLS = "tls"


@dataclass
class ConnectAuth:
    """How to authenticate against the Connect REST endpoint."""

    method: str = AUTH_UNAUTHENTICATED
    username: str = ""
    password: str = ""
    ca_cert: str = ""
    client_cert: str = ""
    client_key: str = ""


class ConnectClient:
    """Read-only client for the Connect REST API."""

    def __init__(
        self,
        base_url: str,
        auth: ConnectAuth | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth = auth or ConnectAuth()
        self._session = session or requests.Session()

        if self.auth.method == AUTH_SASL_SCRAM:
            self._session.auth = (self.auth.username, self.auth.password)
        elif self.auth.method == AUTH_TLS:
            self._session.verify = self.auth.ca_cert
            self._session.cert = (self.auth.client_cert, self.auth.client_key)

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url}")
        resp = self._session.get(url, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            raise ApiError(resp.status_code, resp.text)
        return resp.json()

    def list_connectors(self) -> list[str]:
        return list(self._get("/connectors"))

    def get_connector_config(self, name: str) -> dict[str, Any]:
        return self._get(f"/connectors/{name}/config")

    def get_connector_status(self, name: str) -> dict[str, Any]:
        return self._get(f"/connectors/{name}/status")
