"""Fetch JSON documents from a Mesos master or agent."""

import logging
from typing import Any, Dict

import httpx

from ..utils.errors import SnapshotError
from ..utils.parsing import join_url

SNAPSHOT_PATH = "/metrics/snapshot"


class SnapshotFetcher:
    """
    One authenticated GET per document, no retries.

    Transport errors (httpx.HTTPError, including timeouts and error
    statuses) propagate unchanged; undecodable bodies raise SnapshotError.
    """

    def __init__(self, client: httpx.Client, logger: logging.Logger = None):
        self.client = client
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)

    def fetch_json(self, base_url: str, path: str) -> Any:
        """
        GET base_url + path and decode the JSON body.

        Raises:
            httpx.HTTPError: On network failure, timeout or non-2xx status
            SnapshotError: If the body is not valid JSON
        """
        url = join_url(base_url, path)
        self.logger.debug(f"Fetching {url}")

        response = self.client.get(url)
        response.raise_for_status()

        try:
            return response.json()
        except ValueError as e:
            raise SnapshotError(f"Invalid JSON from {url}: {e}") from e

    def fetch(self, leader_url: str) -> Dict[str, float]:
        """
        Fetch the flat metrics snapshot of the resolved leader.

        Args:
            leader_url: Base URL of the leading master (or the agent)

        Returns:
            Dict[str, float]: Metric name to value

        Raises:
            httpx.HTTPError: On transport failure
            SnapshotError: If the body is not a flat name -> number mapping
        """
        document = self.fetch_json(leader_url, SNAPSHOT_PATH)
        if not isinstance(document, dict):
            raise SnapshotError(
                f"Expected a JSON object from {SNAPSHOT_PATH}, got {type(document).__name__}"
            )

        snapshot = {}
        for name, value in document.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SnapshotError(f"Non-numeric value for {name!r} in snapshot")
            snapshot[name] = float(value)
        return snapshot
