"""Prometheus service discovery of Mesos agents."""

import json
import logging
from typing import List

import httpx

from ..config.models import DiscoveryConfig
from ..utils.errors import SnapshotError
from ..utils.parsing import csv_to_list
from .snapshot import SnapshotFetcher

STATE_PATH = "/state"


class ServiceDiscovery:
    """
    Render agent targets in Prometheus file_sd JSON format.

    Queries the configured master URL directly (the first entry when a list
    is configured); leader resolution is not applied here.
    """

    def __init__(
        self,
        master_url: str,
        fetcher: SnapshotFetcher,
        config: DiscoveryConfig,
        logger: logging.Logger = None
    ):
        """
        Initialize service discovery.

        Args:
            master_url: Configured master URL (may be empty in agent mode)
            fetcher: Authenticated document fetcher
            config: Companion port and static target labels
            logger: Optional logger instance
        """
        candidates = csv_to_list(master_url)
        self.master_url = candidates[0] if candidates else ""
        self.fetcher = fetcher
        self.config = config
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)

    def hostnames(self) -> List[str]:
        """
        Fetch the master state and list agent hostnames.

        Raises:
            httpx.HTTPError: On transport failure
            SnapshotError: If the state document is malformed
        """
        state = self.fetcher.fetch_json(self.master_url, STATE_PATH)
        if not isinstance(state, dict):
            raise SnapshotError("Master state is not a JSON object")

        slaves = state.get("slaves") or []
        if not isinstance(slaves, list):
            raise SnapshotError("Master state field 'slaves' is not a list")

        return [
            slave["hostname"]
            for slave in slaves
            if isinstance(slave, dict) and slave.get("hostname")
        ]

    def render(self) -> str:
        """
        Build the discovery document.

        Returns:
            str: '[{"targets": [...], "labels": {...}}]', or "null" when the
            cluster cannot be queried
        """
        if not self.master_url:
            self.logger.warning("Service discovery requires a master URL")
            return "null"

        try:
            hosts = self.hostnames()
        except (httpx.HTTPError, SnapshotError) as e:
            self.logger.error(f"Cannot get to Mesos API: {e}")
            return "null"

        group = {
            "targets": [f"{host}:{self.config.companion_port}" for host in hosts],
            "labels": dict(self.config.labels),
        }
        return json.dumps([group])
