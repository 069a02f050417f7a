"""
Schema Registry REST API client.
"""

import logging
from typing import Any
from urllib.parse import quote

import requests

from kcp.exceptions import ApiError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
DEFAULT_COMPATIBILITY = "BACKWARD"


class SchemaRegistryClient:
    """
    Read-only Schema Registry client.

    Basic auth is used when a username is given, otherwise requests are
    unauthenticated.
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        session: requests.Session | None = None,
    ):
        self.url = url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers["Accept"] = "application/vnd.schemaregistry.v1+json"
        if username:
            self._session.auth = (username, password or "")

    def _get(self, path: str, **params: Any) -> Any:
        url = f"{self.url}{path}"
        logger.debug(f"GET {url}")
        resp = self._session.get(url, params=params or None, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            raise ApiError(resp.status_code, resp.text)
        return resp.json()

    def get_subjects(self) -> list[str]:
        return self._get("/subjects")

    def get_versions(self, subject: str) -> list[int]:
        return self._get(f"/subjects/{quote(subject, safe='')}/versions")

    def get_latest_schema(self, subject: str) -> dict[str, Any]:
        return self._get(f"/subjects/{quote(subject, safe='')}/versions/latest")

    def get_schema_version(self, subject: str, version: int) -> dict[str, Any]:
        return self._get(f"/subjects/{quote(subject, safe='')}/versions/{version}")

    def get_contexts(self) -> list[str]:
        return self._get("/contexts")

    def get_global_compatibility(self) -> str:
        config = self._get("/config")
        return config.get("compatibilityLevel") or config.get("compatibility") or DEFAULT_COMPATIBILITY
