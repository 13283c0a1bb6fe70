"""Agent metrics from the agent's own /metrics/snapshot."""

from typing import List

from ..utils.metrics import counter, gauge
from .base import Extractor, MetricCollector, labelled_values, resource_values, single_value

MIB = 1024 * 1024


def slave_extractors() -> List[Extractor]:
    """Extractor table for an agent snapshot, in evaluation order."""
    return [
        # Resources
        Extractor(
            gauge("slave", "cpus", "Current number of CPUs on this slave.", "type"),
            resource_values("slave/cpus"),
        ),
        Extractor(
            gauge("slave", "cpus_revocable", "Current number of revocable CPUs on this slave.", "type"),
            resource_values("slave/cpus_revocable"),
        ),
        Extractor(
            gauge("slave", "gpus", "Current number of GPUs on this slave.", "type"),
            resource_values("slave/gpus"),
        ),
        Extractor(
            gauge("slave", "mem_bytes", "Current memory on this slave in bytes.", "type"),
            resource_values("slave/mem", scale=MIB),
        ),
        Extractor(
            gauge("slave", "disk_bytes", "Current disk space on this slave in bytes.", "type"),
            resource_values("slave/disk", scale=MIB),
        ),

        # Slave stats
        Extractor(
            gauge("slave", "registered", "1 if slave is registered with master, 0 if not"),
            single_value("slave/registered"),
        ),
        Extractor(
            gauge("slave", "uptime_seconds", "Number of seconds the slave process is running."),
            single_value("slave/uptime_secs"),
        ),
        Extractor(
            gauge("slave", "frameworks_active", "Current number of active frameworks on this slave."),
            single_value("slave/frameworks_active"),
        ),

        # Executors
        Extractor(
            gauge("slave", "executor_state", "Current number of executors by state.", "state"),
            labelled_values({
                "registering": "slave/executors_registering",
                "running": "slave/executors_running",
                "terminating": "slave/executors_terminating",
            }),
        ),
        Extractor(
            counter("slave", "executors_terminated", "Total number of executor terminations."),
            single_value("slave/executors_terminated"),
        ),

        # Tasks
        Extractor(
            gauge("slave", "task_states_current", "Current number of tasks by state.", "state"),
            labelled_values({
                "staging": "slave/tasks_staging",
                "starting": "slave/tasks_starting",
                "running": "slave/tasks_running",
                "killing": "slave/tasks_killing",
            }),
        ),
        Extractor(
            counter("slave", "task_states_exit", "Total number of tasks processed by exit state.", "state"),
            labelled_values({
                "failed": "slave/tasks_failed",
                "finished": "slave/tasks_finished",
                "killed": "slave/tasks_killed",
                "lost": "slave/tasks_lost",
            }),
        ),

        # Containerizer
        Extractor(
            counter("slave", "container_destroy_errors", "Total number of containerizer destroy errors."),
            single_value("containerizer/mesos/container_destroy_errors"),
        ),
    ]


class SlaveCollector(MetricCollector):
    """Collector for an agent's metrics snapshot."""

    def build_extractors(self) -> List[Extractor]:
        return slave_extractors()
