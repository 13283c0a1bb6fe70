"""Per-executor resource usage from the agent's /monitor/statistics."""

from typing import Any, List

from ..utils.errors import SnapshotError
from ..utils.metrics import MetricFamily, counter, gauge, require
from .base import ExtractFn, Extractor, MetricCollector

MONITOR_PATH = "/monitor/statistics"

EXECUTOR_LABELS = ("id", "framework_id", "source")


def executor_statistic(field: str) -> ExtractFn:
    """
    Set one sample per executor from a field of its statistics object.

    Args:
        field: Key inside each executor's "statistics", e.g. "mem_rss_bytes"
    """
    def extract(executors: List[Any], family: MetricFamily) -> None:
        for executor in executors:
            value, = require(executor.get("statistics") or {}, field)
            family.add_metric(
                [
                    str(executor.get("executor_id", "")),
                    str(executor.get("framework_id", "")),
                    str(executor.get("source", "")),
                ],
                value,
            )
    return extract


def monitor_extractors() -> List[Extractor]:
    """Extractor table for agent monitor statistics."""
    return [
        Extractor(
            gauge("slave", "executor_cpus_limit", "Current limit of CPUs for executor.", *EXECUTOR_LABELS),
            executor_statistic("cpus_limit"),
        ),
        Extractor(
            counter("slave", "executor_cpus_system_time_seconds", "Total system CPU time in seconds.", *EXECUTOR_LABELS),
            executor_statistic("cpus_system_time_secs"),
        ),
        Extractor(
            counter("slave", "executor_cpus_user_time_seconds", "Total user CPU time in seconds.", *EXECUTOR_LABELS),
            executor_statistic("cpus_user_time_secs"),
        ),
        Extractor(
            gauge("slave", "executor_mem_limit_bytes", "Current memory limit in bytes.", *EXECUTOR_LABELS),
            executor_statistic("mem_limit_bytes"),
        ),
        Extractor(
            gauge("slave", "executor_mem_rss_bytes", "Current memory RSS in bytes.", *EXECUTOR_LABELS),
            executor_statistic("mem_rss_bytes"),
        ),
    ]


class SlaveMonitorCollector(MetricCollector):
    """Collector for per-executor statistics of an agent."""

    def build_extractors(self) -> List[Extractor]:
        return monitor_extractors()

    def fetch_document(self, leader_url: str) -> List[Any]:
        executors = self.fetcher.fetch_json(leader_url, MONITOR_PATH)
        if not isinstance(executors, list):
            raise SnapshotError(f"Expected a JSON list from {MONITOR_PATH}")
        return executors
