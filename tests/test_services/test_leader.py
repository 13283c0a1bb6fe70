"""Tests for LeaderResolver."""

import pytest
import httpx
from unittest.mock import Mock

from mesos_exporter.services.leader import LeaderResolver
from mesos_exporter.utils.errors import LeaderNotFoundError

from conftest import json_response

# Fixtures imported from conftest.py: make_fetcher, make_resolver, logger


def test_single_candidate_returned_without_request(logger):
    """A URL without separator is trusted as leader, no network call."""
    fetcher = Mock()
    resolver = LeaderResolver(fetcher, logger)

    assert resolver.resolve("http://10.0.0.1:5050") == "http://10.0.0.1:5050"
    fetcher.fetch_json.assert_not_called()


def test_self_confirming_candidate_is_leader(make_fetcher, make_resolver):
    """Candidate whose state names itself is the leader."""
    fetcher = make_fetcher({
        "http://10.0.0.1:5050/state.json": {"leader": "master@10.0.0.1:5050"},
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.1:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("http://10.0.0.1:5050,http://10.0.0.2:5050") == "http://10.0.0.1:5050"


def test_follower_does_not_self_confirm(make_fetcher, make_resolver):
    """A follower reporting another node as leader falls through to later candidates."""
    fetcher = make_fetcher({
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.1:5050"},
        "http://10.0.0.3:5050/state.json": {"leader": "master@10.0.0.3:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("http://10.0.0.2:5050,http://10.0.0.3:5050") == "http://10.0.0.3:5050"


def test_no_leader_found(make_fetcher, make_resolver):
    """No self-confirmation raises LeaderNotFoundError."""
    fetcher = make_fetcher({
        "http://10.0.0.1:5050/state.json": {"leader": "master@10.0.0.9:5050"},
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.9:5050"},
    })
    resolver = make_resolver(fetcher)

    with pytest.raises(LeaderNotFoundError, match="Unable to find leader"):
        resolver.resolve("http://10.0.0.1:5050,http://10.0.0.2:5050")


def test_unreachable_candidate_is_skipped(make_fetcher, make_resolver):
    """Connection errors skip the candidate and resolution continues."""
    fetcher = make_fetcher({
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.2:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("http://10.0.0.1:5050,http://10.0.0.2:5050") == "http://10.0.0.2:5050"


def test_undecodable_and_error_candidates_are_skipped(make_fetcher, make_resolver):
    """Malformed JSON and error statuses are skipped too."""
    fetcher = make_fetcher({
        "http://10.0.0.1:5050/state.json": httpx.Response(200, content=b"<html>"),
        "http://10.0.0.2:5050/state.json": json_response({}, status_code=503),
        "http://10.0.0.3:5050/state.json": ["not", "an", "object"],
        "http://10.0.0.4:5050/state.json": {"leader": "master@10.0.0.4:5050"},
    })
    resolver = make_resolver(fetcher)

    candidates = ",".join(f"http://10.0.0.{i}:5050" for i in range(1, 5))
    assert resolver.resolve(candidates) == "http://10.0.0.4:5050"


def test_first_self_reporting_candidate_wins(make_fetcher, make_resolver):
    """With a split view, listed order decides."""
    fetcher = make_fetcher({
        "http://10.0.0.1:5050/state.json": {"leader": "master@10.0.0.1:5050"},
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.2:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("http://10.0.0.2:5050,http://10.0.0.1:5050") == "http://10.0.0.2:5050"


def test_candidate_list_whitespace_is_ignored(make_fetcher, make_resolver):
    fetcher = make_fetcher({
        "http://10.0.0.2:5050/state.json": {"leader": "master@10.0.0.2:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("http://10.0.0.1:5050, http://10.0.0.2:5050") == "http://10.0.0.2:5050"


def test_https_candidate_compares_host_and_port(make_fetcher, make_resolver):
    """Leader identity uses host:port regardless of scheme."""
    fetcher = make_fetcher({
        "https://m1.mesos:5050/state.json": {"leader": "master@m1.mesos:5050"},
    })
    resolver = make_resolver(fetcher)

    assert resolver.resolve("https://m1.mesos:5050,https://m2.mesos:5050") == "https://m1.mesos:5050"
