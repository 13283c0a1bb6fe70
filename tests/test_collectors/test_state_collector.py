"""Tests for MasterStateCollector and SlaveStateCollector."""

import pytest

from mesos_exporter.collectors.state_collector import MasterStateCollector, SlaveStateCollector
from mesos_exporter.utils.errors import ConfigurationError

# Fixtures imported from conftest.py: make_fetcher, make_resolver, error_counter,
# error_count, logger

MASTER = "http://10.0.0.1:5050"
AGENT = "http://10.0.0.5:5051"

MASTER_STATE = {
    "leader": "master@10.0.0.1:5050",
    "slaves": [
        {
            "id": "s1",
            "hostname": "agent-1",
            "resources": {"cpus": 4, "mem": 2048, "disk": 1000, "ports": "[31000-32000]"},
            "used_resources": {"cpus": 1, "mem": 512},
            "unreserved_resources": {"cpus": 4, "mem": 2048},
            "attributes": {"rack-id": "r1", "zone": "a"},
        },
        {
            "id": "s2",
            "hostname": "agent-2",
            "resources": {"cpus": 2},
            "used_resources": {},
            "unreserved_resources": {"cpus": 2},
            "attributes": {"zone": "b"},
        },
    ],
}

AGENT_STATE = {
    "id": "s1",
    "attributes": {"zone": "a"},
    "frameworks": [
        {
            "id": "fw-1",
            "executors": [
                {
                    "id": "web.1",
                    "tasks": [
                        {
                            "id": "web.1",
                            "name": "web",
                            "state": "TASK_RUNNING",
                            "labels": [{"key": "team", "value": "core"}, {"key": "tier", "value": "front"}],
                        },
                    ],
                },
                {
                    "id": "web.2",
                    "tasks": [{"id": "web.2", "name": "web", "state": "TASK_RUNNING"}],
                },
            ],
        },
        {
            "id": "fw-2",
            "executors": [
                {"id": "batch.1", "tasks": [{"id": "batch.1", "name": "batch", "state": "TASK_STAGING"}]},
            ],
        },
    ],
}


def by_labels(family):
    return {tuple(s.labels.values()): s.value for s in family.samples}


@pytest.fixture
def master_collector(make_fetcher, make_resolver, error_counter, logger):
    def factory(state=MASTER_STATE, attributes=None):
        fetcher = make_fetcher({f"{MASTER}/state": state})
        return MasterStateCollector(MASTER, fetcher, make_resolver(fetcher), error_counter, logger,
                                    slave_attributes=attributes)
    return factory


@pytest.fixture
def slave_collector(make_fetcher, make_resolver, error_counter, logger):
    def factory(state=AGENT_STATE, task_labels=None, attributes=None):
        fetcher = make_fetcher({f"{AGENT}/state": state})
        return SlaveStateCollector(AGENT, fetcher, make_resolver(fetcher), error_counter, logger,
                                   task_labels=task_labels, slave_attributes=attributes)
    return factory


class TestMasterState:

    def test_slave_resources(self, master_collector, error_count):
        families = {f.name: f for f in master_collector().collect()}

        resources = by_labels(families["mesos_master_slave_resources"])
        assert resources[("s1", "cpus")] == 4
        assert resources[("s2", "cpus")] == 2
        assert ("s1", "ports") not in resources
        used = by_labels(families["mesos_master_slave_used_resources"])
        assert used == {("s1", "cpus"): 1, ("s1", "mem"): 512}
        assert error_count() == 0

    def test_attributes_not_exported_without_allow_list(self, master_collector):
        names = [f.name for f in master_collector().collect()]

        assert "mesos_master_slave_attributes" not in names

    def test_allow_listed_attributes(self, master_collector):
        collector = master_collector(attributes=["rack-id", "zone"])

        families = {f.name: f for f in collector.collect()}

        family = families["mesos_master_slave_attributes"]
        assert family.samples[0].labels == {"slave": "s1", "rack_id": "r1", "zone": "a"}
        assert family.samples[1].labels == {"slave": "s2", "rack_id": "", "zone": "b"}

    def test_state_without_slaves(self, master_collector, error_count):
        """Every extractor needs "slaves"; each missing one counts once."""
        collector = master_collector(state={"leader": "master@10.0.0.1:5050"})

        assert list(collector.collect()) == []
        assert error_count() == 3


class TestSlaveState:

    def test_tasks_by_framework(self, slave_collector, error_count):
        families = {f.name: f for f in slave_collector().collect()}

        assert by_labels(families["mesos_slave_tasks_by_framework"]) == {
            ("fw-1", "TASK_RUNNING"): 2,
            ("fw-2", "TASK_STAGING"): 1,
        }
        assert error_count() == 0

    def test_task_labels(self, slave_collector):
        collector = slave_collector(task_labels=["team", "tier"])

        families = {f.name: f for f in collector.collect()}

        samples = families["mesos_slave_task_labels"].samples
        assert samples[0].labels == {
            "framework_id": "fw-1", "executor_id": "web.1", "task_id": "web.1",
            "task_name": "web", "team": "core", "tier": "front",
        }
        assert samples[1].labels["team"] == ""
        assert len(samples) == 3

    def test_agent_attributes(self, slave_collector):
        collector = slave_collector(attributes=["zone"])

        families = {f.name: f for f in collector.collect()}

        assert families["mesos_slave_attributes"].samples[0].labels == {"zone": "a"}

    def test_missing_frameworks(self, slave_collector, error_count):
        collector = slave_collector(state={"id": "s1", "attributes": {}}, task_labels=["team"])

        assert list(collector.collect()) == []
        assert error_count() == 2


class TestLabelCollisions:
    """Allow-listed keys must not shadow fixed labels or each other."""

    @pytest.mark.parametrize("label", ["task_id", "task-name", "framework_id"])
    def test_task_label_shadowing_fixed_label(self, slave_collector, label):
        with pytest.raises(ConfigurationError, match="collides"):
            slave_collector(task_labels=[label])

    def test_agent_attributes_sanitizing_to_same_name(self, slave_collector):
        with pytest.raises(ConfigurationError, match="rack_id"):
            slave_collector(attributes=["rack-id", "rack_id"])

    def test_master_attribute_shadowing_slave_label(self, master_collector):
        with pytest.raises(ConfigurationError, match="collides"):
            master_collector(attributes=["slave"])

    def test_repeated_key_is_exported_once(self, slave_collector):
        collector = slave_collector(attributes=["zone", "zone"])

        families = {f.name: f for f in collector.collect()}

        assert families["mesos_slave_attributes"].samples[0].labels == {"zone": "a"}

    def test_task_id_kept_next_to_allowed_labels(self, slave_collector):
        collector = slave_collector(task_labels=["team"])

        families = {f.name: f for f in collector.collect()}

        assert families["mesos_slave_task_labels"].samples[0].labels["task_id"] == "web.1"
