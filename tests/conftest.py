"""Shared pytest configuration and fixtures."""

import json
import pytest
import httpx
from typing import Callable, Dict

from prometheus_client import CollectorRegistry

from mesos_exporter.config.models import AuthConfig
from mesos_exporter.services.leader import LeaderResolver
from mesos_exporter.services.snapshot import SnapshotFetcher
from mesos_exporter.services.transport import build_http_client
from mesos_exporter.utils.logger import setup_logger
from mesos_exporter.utils.metrics import ErrorCounter


ERRORS_METRIC = "mesos_collector_errors_total"


def json_response(payload, status_code: int = 200) -> httpx.Response:
    """Build an httpx response with a JSON body."""
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


def routing_transport(routes: Dict[str, object]) -> httpx.MockTransport:
    """
    MockTransport answering by full URL.

    Values may be a payload (served as JSON), an httpx.Response, an
    exception instance (raised), or a callable taking the request.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(str(request.url))
        if route is None:
            raise httpx.ConnectError("connection refused", request=request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        if callable(route):
            return route(request)
        return json_response(route)
    return httpx.MockTransport(handler)


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "debug")


@pytest.fixture
def registry():
    """Fresh Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def error_counter(registry):
    """Error counter registered on the per-test registry."""
    return ErrorCounter(registry)


@pytest.fixture
def error_count(registry) -> Callable[[], float]:
    """Return a callable reading the current error counter value."""
    def read():
        return registry.get_sample_value(ERRORS_METRIC) or 0.0
    return read


@pytest.fixture
def make_fetcher(logger):
    """Build a SnapshotFetcher over a routing MockTransport."""
    def factory(routes: Dict[str, object]) -> SnapshotFetcher:
        client = build_http_client(AuthConfig(), 1.0, transport=routing_transport(routes))
        return SnapshotFetcher(client, logger)
    return factory


@pytest.fixture
def make_resolver(logger):
    """Build a LeaderResolver over a fetcher."""
    def factory(fetcher: SnapshotFetcher) -> LeaderResolver:
        return LeaderResolver(fetcher, logger)
    return factory
