"""Tests for ServiceDiscovery."""

import json
import pytest

from mesos_exporter.config.models import DiscoveryConfig
from mesos_exporter.services.discovery import ServiceDiscovery

# Fixtures imported from conftest.py: make_fetcher, logger

MASTER = "http://10.0.0.1:5050"

STATE = {
    "leader": "master@10.0.0.1:5050",
    "slaves": [
        {"id": "s1", "hostname": "agent-1.mesos"},
        {"id": "s2", "hostname": "agent-2.mesos"},
    ],
}


@pytest.fixture
def discovery_config():
    return DiscoveryConfig(companion_port="8888", labels={"job": "cadvisor", "env": "prod"})


def test_render_targets(make_fetcher, discovery_config, logger):
    """Every agent becomes hostname:port in one target group."""
    fetcher = make_fetcher({f"{MASTER}/state": STATE})
    discovery = ServiceDiscovery(MASTER, fetcher, discovery_config, logger)

    document = json.loads(discovery.render())

    assert document == [{
        "targets": ["agent-1.mesos:8888", "agent-2.mesos:8888"],
        "labels": {"job": "cadvisor", "env": "prod"},
    }]


def test_render_no_agents(make_fetcher, logger):
    fetcher = make_fetcher({f"{MASTER}/state": {"slaves": []}})
    discovery = ServiceDiscovery(MASTER, fetcher, DiscoveryConfig(), logger)

    assert json.loads(discovery.render()) == [{"targets": [], "labels": {}}]


def test_unreachable_master_renders_null(make_fetcher, discovery_config, logger):
    discovery = ServiceDiscovery(MASTER, make_fetcher({}), discovery_config, logger)

    assert discovery.render() == "null"


def test_agent_mode_renders_null(make_fetcher, discovery_config, logger):
    """Without a master URL there is nothing to query."""
    discovery = ServiceDiscovery("", make_fetcher({}), discovery_config, logger)

    assert discovery.render() == "null"


def test_uses_first_configured_master(make_fetcher, discovery_config, logger):
    """A candidate list is queried at its first entry, without leader resolution."""
    fetcher = make_fetcher({f"{MASTER}/state": STATE})
    discovery = ServiceDiscovery(f"{MASTER},http://10.0.0.2:5050", fetcher, discovery_config, logger)

    assert json.loads(discovery.render())[0]["targets"] == ["agent-1.mesos:8888", "agent-2.mesos:8888"]


def test_malformed_state_renders_null(make_fetcher, discovery_config, logger):
    fetcher = make_fetcher({f"{MASTER}/state": ["unexpected"]})
    discovery = ServiceDiscovery(MASTER, fetcher, discovery_config, logger)

    assert discovery.render() == "null"


@pytest.mark.parametrize("slaves", [7, "agent-1", {"hostname": "agent-1"}])
def test_non_list_slaves_renders_null(make_fetcher, discovery_config, logger, slaves):
    fetcher = make_fetcher({f"{MASTER}/state": {"slaves": slaves}})
    discovery = ServiceDiscovery(MASTER, fetcher, discovery_config, logger)

    assert discovery.render() == "null"
