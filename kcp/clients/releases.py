"""
Latest kcp release lookup on GitHub.
"""

import logging

import requests

from kcp.exceptions import ApiError

logger = logging.getLogger(__name__)

GITHUB_LATEST_RELEASE_URL = "https://api.github.com/repos/confluentinc/kcp/releases/latest"
REQUEST_TIMEOUT = 30


def normalize_version(version: str) -> str:
    return version.strip().removeprefix("v")


def is_newer_version(latest: str, current: str) -> bool:
    """Any release tag other than the installed version counts as an update."""
    return normalize_version(latest) != normalize_version(current)


class ReleaseChecker:
    def __init__(self, url: str = GITHUB_LATEST_RELEASE_URL, session: requests.Session | None = None):
        self.url = url
        self._session = session or requests.Session()

    def get_latest_version(self) -> str:
        logger.debug(f"Checking latest release at {self.url}")
        resp = self._session.get(self.url, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            raise ApiError(resp.status_code, resp.text)
        return resp.json()["tag_name"]
