"""Find the leading master among a list of candidate URLs."""

import logging

import httpx

from ..utils.errors import LeaderNotFoundError, SnapshotError
from ..utils.parsing import csv_to_list, host_port
from .snapshot import SnapshotFetcher

STATE_JSON_PATH = "/state.json"


class LeaderResolver:
    """
    Best-effort leader discovery by self-report.

    A candidate is the leader when its own state document names it as the
    leader. No quorum or cross-check between candidates: the first
    self-confirming candidate in listed order wins.
    """

    def __init__(self, fetcher: SnapshotFetcher, logger: logging.Logger = None):
        self.fetcher = fetcher
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)

    def resolve(self, candidates: str) -> str:
        """
        Return the base URL of the current leader.

        Args:
            candidates: One URL, or a comma-separated list of master URLs

        Returns:
            str: Leader URL; a single URL is returned as-is without any request

        Raises:
            LeaderNotFoundError: If no candidate confirms leadership
        """
        if "," not in candidates:
            return candidates

        for candidate in csv_to_list(candidates):
            if not candidate:
                continue
            if self.is_leader(candidate):
                self.logger.debug(f"Leader is {candidate}")
                return candidate

        raise LeaderNotFoundError()

    def is_leader(self, candidate: str) -> bool:
        """
        Check whether a candidate reports itself as the leader.

        Unreachable or undecodable candidates are logged and treated as
        non-leaders.
        """
        try:
            state = self.fetcher.fetch_json(candidate, STATE_JSON_PATH)
        except (httpx.HTTPError, SnapshotError) as e:
            self.logger.warning(f"Skipping candidate {candidate}: {e}")
            return False

        if not isinstance(state, dict):
            self.logger.warning(f"Skipping candidate {candidate}: state is not a JSON object")
            return False

        return state.get("leader") == "master@" + host_port(candidate)
