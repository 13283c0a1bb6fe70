"""Metrics derived from the /state document of a master or an agent."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..services.leader import LeaderResolver
from ..services.snapshot import SnapshotFetcher
from ..utils.errors import ConfigurationError, MissingFieldsError, SnapshotError
from ..utils.metrics import ErrorCounter, MetricFamily, gauge
from ..utils.parsing import sanitize_label_name
from .base import ExtractFn, Extractor, MetricCollector

STATE_PATH = "/state"

# Resource names exported per agent; non-scalar resources such as ports are skipped
SCALAR_RESOURCES = ("cpus", "mem", "disk", "gpus")

TASK_LABELS = ("framework_id", "executor_id", "task_id", "task_name")


def _field(document: Mapping[str, Any], key: str) -> Any:
    if key not in document:
        raise MissingFieldsError([key])
    return document[key]


def _label_map(names: List[str], fixed: Sequence[str] = ()) -> Dict[str, str]:
    """
    Map raw label/attribute keys to sanitized Prometheus label names.

    Args:
        names: Allow-listed keys, e.g. ["rack-id", "zone"]
        fixed: Label names the metric always carries

    Raises:
        ConfigurationError: If a sanitized name repeats a fixed label or
            another allow-listed key
    """
    mapping: Dict[str, str] = {}
    taken = {label: label for label in fixed}
    for name in names:
        if name in mapping:
            continue
        label = sanitize_label_name(name)
        if label in taken:
            raise ConfigurationError(
                f"Label name {label!r} for {name!r} collides with {taken[label]!r}"
            )
        taken[label] = name
        mapping[name] = label
    return mapping


def slave_resources(resource_key: str) -> ExtractFn:
    """
    Set one sample per agent and scalar resource.

    Args:
        resource_key: Agent field holding the resources, e.g. "used_resources"
    """
    def extract(state: Mapping[str, Any], family: MetricFamily) -> None:
        for slave in _field(state, "slaves"):
            resources = slave.get(resource_key) or {}
            for name in SCALAR_RESOURCES:
                if name in resources:
                    family.add_metric([slave["id"], name], float(resources[name]))
    return extract


def slave_attributes(attributes: List[str]) -> ExtractFn:
    """Set 1 per agent labelled with its allow-listed attribute values."""
    def extract(state: Mapping[str, Any], family: MetricFamily) -> None:
        for slave in _field(state, "slaves"):
            values = slave.get("attributes") or {}
            family.add_metric(
                [slave["id"]] + [str(values.get(name, "")) for name in attributes],
                1,
            )
    return extract


class MasterStateCollector(MetricCollector):
    """Per-agent resources and attributes from the leading master's state."""

    def __init__(
        self,
        url: str,
        fetcher: SnapshotFetcher,
        resolver: LeaderResolver,
        error_counter: ErrorCounter,
        logger: logging.Logger,
        slave_attributes: Optional[List[str]] = None,
        extractors: Optional[List[Extractor]] = None
    ):
        """
        Initialize master state collector.

        Args:
            slave_attributes: Agent attribute keys exported as labels
            (other arguments as for MetricCollector)
        """
        self.slave_attributes = list(slave_attributes or [])
        super().__init__(url, fetcher, resolver, error_counter, logger, extractors)

    def build_extractors(self) -> List[Extractor]:
        extractors = [
            Extractor(
                gauge("master", "slave_resources", "Total resources of each slave.", "slave", "resource"),
                slave_resources("resources"),
            ),
            Extractor(
                gauge("master", "slave_used_resources", "Used resources of each slave.", "slave", "resource"),
                slave_resources("used_resources"),
            ),
            Extractor(
                gauge("master", "slave_unreserved_resources", "Unreserved resources of each slave.", "slave", "resource"),
                slave_resources("unreserved_resources"),
            ),
        ]

        if self.slave_attributes:
            labels = _label_map(self.slave_attributes, fixed=("slave",))
            extractors.append(Extractor(
                gauge("master", "slave_attributes", "Attributes of each slave.", "slave", *labels.values()),
                slave_attributes(list(labels)),
            ))

        return extractors

    def fetch_document(self, leader_url: str) -> Dict[str, Any]:
        return _fetch_state(self.fetcher, leader_url)


# ---------------------------------------------------------------------------
# Agent state
# ---------------------------------------------------------------------------

def _tasks(state: Mapping[str, Any]):
    """Yield (framework, executor, task) for every running executor's task."""
    for framework in _field(state, "frameworks"):
        for executor in framework.get("executors") or []:
            for task in executor.get("tasks") or []:
                yield framework, executor, task


def task_states(state: Mapping[str, Any], family: MetricFamily) -> None:
    counts: Dict[tuple, int] = {}
    for framework, _, task in _tasks(state):
        key = (str(framework.get("id", "")), str(task.get("state", "")))
        counts[key] = counts.get(key, 0) + 1
    for (framework_id, task_state), count in sorted(counts.items()):
        family.add_metric([framework_id, task_state], count)


def task_labels(labels: List[str]) -> ExtractFn:
    """Set 1 per task labelled with its allow-listed Mesos task label values."""
    def extract(state: Mapping[str, Any], family: MetricFamily) -> None:
        for framework, executor, task in _tasks(state):
            task_label_values = {
                label.get("key"): label.get("value", "")
                for label in task.get("labels") or []
            }
            family.add_metric(
                [
                    str(framework.get("id", "")),
                    str(executor.get("id", "")),
                    str(task.get("id", "")),
                    str(task.get("name", "")),
                ] + [str(task_label_values.get(name, "")) for name in labels],
                1,
            )
    return extract


def agent_attributes(attributes: List[str]) -> ExtractFn:
    """Set 1 labelled with the agent's allow-listed attribute values."""
    def extract(state: Mapping[str, Any], family: MetricFamily) -> None:
        values = _field(state, "attributes") or {}
        family.add_metric([str(values.get(name, "")) for name in attributes], 1)
    return extract


class SlaveStateCollector(MetricCollector):
    """Task and attribute metrics from an agent's own state."""

    def __init__(
        self,
        url: str,
        fetcher: SnapshotFetcher,
        resolver: LeaderResolver,
        error_counter: ErrorCounter,
        logger: logging.Logger,
        task_labels: Optional[List[str]] = None,
        slave_attributes: Optional[List[str]] = None,
        extractors: Optional[List[Extractor]] = None
    ):
        """
        Initialize agent state collector.

        Args:
            task_labels: Mesos task label keys exported as labels
            slave_attributes: Agent attribute keys exported as labels
            (other arguments as for MetricCollector)
        """
        self.task_labels = list(task_labels or [])
        self.slave_attributes = list(slave_attributes or [])
        super().__init__(url, fetcher, resolver, error_counter, logger, extractors)

    def build_extractors(self) -> List[Extractor]:
        extractors = [
            Extractor(
                gauge("slave", "tasks_by_framework", "Current number of tasks per framework and state.", "framework_id", "state"),
                task_states,
            ),
        ]

        if self.task_labels:
            labels = _label_map(self.task_labels, fixed=TASK_LABELS)
            extractors.append(Extractor(
                gauge(
                    "slave", "task_labels", "Labels of each task.",
                    *TASK_LABELS, *labels.values()
                ),
                task_labels(list(labels)),
            ))

        if self.slave_attributes:
            labels = _label_map(self.slave_attributes)
            extractors.append(Extractor(
                gauge("slave", "attributes", "Attributes of this slave.", *labels.values()),
                agent_attributes(list(labels)),
            ))

        return extractors

    def fetch_document(self, leader_url: str) -> Dict[str, Any]:
        return _fetch_state(self.fetcher, leader_url)


def _fetch_state(fetcher: SnapshotFetcher, base_url: str) -> Dict[str, Any]:
    state = fetcher.fetch_json(base_url, STATE_PATH)
    if not isinstance(state, dict):
        raise SnapshotError(f"Expected a JSON object from {STATE_PATH}")
    return state
