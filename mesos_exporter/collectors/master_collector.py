"""Master metrics from the leading master's /metrics/snapshot."""

from typing import List

from ..utils.metrics import counter, gauge
from .base import Extractor, MetricCollector, labelled_values, resource_values, single_value

MIB = 1024 * 1024


def master_extractors() -> List[Extractor]:
    """Extractor table for a master snapshot, in evaluation order."""
    return [
        # Resources
        Extractor(
            gauge("master", "cpus", "Current CPU resources in cluster.", "type"),
            resource_values("master/cpus"),
        ),
        Extractor(
            gauge("master", "cpus_revocable", "Current revocable CPU resources in cluster.", "type"),
            resource_values("master/cpus_revocable"),
        ),
        Extractor(
            gauge("master", "gpus", "Current GPU resources in cluster.", "type"),
            resource_values("master/gpus"),
        ),
        Extractor(
            gauge("master", "mem", "Current memory resources in cluster.", "type"),
            resource_values("master/mem", scale=MIB),
        ),
        Extractor(
            gauge("master", "disk", "Current disk resources in cluster.", "type"),
            resource_values("master/disk", scale=MIB),
        ),

        # Master stats
        Extractor(
            gauge("master", "elected", "1 if master is elected leader, 0 if not"),
            single_value("master/elected"),
        ),
        Extractor(
            gauge("master", "uptime_seconds", "Number of seconds the master process is running."),
            single_value("master/uptime_secs"),
        ),

        # Agents
        Extractor(
            gauge("master", "slaves_state", "Current number of slaves known to the master per connection and registration state.", "connection_state", "registration_state"),
            labelled_values({
                ("connected", "active"): "master/slaves_active",
                ("connected", "inactive"): "master/slaves_inactive",
                ("disconnected", "active"): "master/slaves_disconnected",
                ("disconnected", "inactive"): "master/slaves_unreachable",
            }),
        ),
        Extractor(
            counter("master", "slave_registration_events", "Total number of registration events on this master since it booted.", "event"),
            labelled_values({
                "register": "master/slave_registrations",
                "reregister": "master/slave_reregistrations",
            }),
        ),
        Extractor(
            counter("master", "slave_removal_events", "Total number of slave removal events on this master since it booted.", "event"),
            labelled_values({
                "removal": "master/slave_removals",
                "shutdowns_scheduled": "master/slave_shutdowns_scheduled",
                "shutdowns_completed": "master/slave_shutdowns_completed",
                "shutdowns_canceled": "master/slave_shutdowns_canceled",
            }),
        ),

        # Frameworks
        Extractor(
            gauge("master", "frameworks_state", "Current number of frameworks known to the master per connection and activity state.", "connection_state", "activity_state"),
            labelled_values({
                ("connected", "active"): "master/frameworks_active",
                ("connected", "inactive"): "master/frameworks_inactive",
                ("disconnected", "active"): "master/frameworks_disconnected",
            }),
        ),

        # Tasks
        Extractor(
            gauge("master", "task_states_current", "Current number of tasks known to the master per state.", "state"),
            labelled_values({
                "staging": "master/tasks_staging",
                "starting": "master/tasks_starting",
                "running": "master/tasks_running",
                "killing": "master/tasks_killing",
            }),
        ),
        Extractor(
            counter("master", "task_states_exit", "Total number of tasks processed by exit state.", "state"),
            labelled_values({
                "error": "master/tasks_error",
                "failed": "master/tasks_failed",
                "finished": "master/tasks_finished",
                "killed": "master/tasks_killed",
                "lost": "master/tasks_lost",
            }),
        ),

        # Messages
        Extractor(
            counter("master", "messages_outcomes", "Total number of framework messages by outcome.", "outcome"),
            labelled_values({
                "dropped": "master/dropped_messages",
                "invalid_status_updates": "master/invalid_status_updates",
                "valid_status_updates": "master/valid_status_updates",
            }),
        ),
        Extractor(
            gauge("master", "event_queue_length", "Current number of elements in event queue by type.", "type"),
            labelled_values({
                "message": "master/event_queue_messages",
                "event": "master/event_queue_dispatches",
                "http": "master/event_queue_http_requests",
            }),
        ),

        # Registrar
        Extractor(
            gauge("registrar", "state_fetch_ms", "Registry read latency in ms"),
            single_value("registrar/state_fetch_ms"),
        ),
        Extractor(
            gauge("registrar", "state_store_ms", "Registry write latency in ms"),
            single_value("registrar/state_store_ms"),
        ),
    ]


class MasterCollector(MetricCollector):
    """Collector for the leading master's metrics snapshot."""

    def build_extractors(self) -> List[Extractor]:
        return master_extractors()
