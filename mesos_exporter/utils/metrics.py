"""Metric data structures for collectors."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, List, Union

from prometheus_client import CollectorRegistry, Counter
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily

from .errors import MissingFieldsError
from .status import ExtractionStatus

NAMESPACE = "mesos"

MetricFamily = Union[GaugeMetricFamily, CounterMetricFamily]


@dataclass(frozen=True)
class MetricDescriptor:
    """Process-wide description of one exported metric."""

    kind: str  # "gauge" or "counter"
    subsystem: str
    name: str
    help: str
    labels: Sequence[str] = field(default_factory=tuple)

    @property
    def full_name(self) -> str:
        return f"{NAMESPACE}_{self.subsystem}_{self.name}"

    def family(self) -> MetricFamily:
        """
        Build an empty metric family for one scrape.

        Returns:
            GaugeMetricFamily or CounterMetricFamily with this descriptor's labels
        """
        if self.kind == "counter":
            return CounterMetricFamily(self.full_name, self.help, labels=list(self.labels))
        return GaugeMetricFamily(self.full_name, self.help, labels=list(self.labels))


def gauge(subsystem: str, name: str, help: str, *labels: str) -> MetricDescriptor:
    return MetricDescriptor("gauge", subsystem, name, help, tuple(labels))


def counter(subsystem: str, name: str, help: str, *labels: str) -> MetricDescriptor:
    return MetricDescriptor("counter", subsystem, name, help, tuple(labels))


@dataclass
class ExtractionResult:
    """Outcome of one extractor for one scrape."""

    descriptor: MetricDescriptor
    status: ExtractionStatus
    family: Optional[MetricFamily] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ExtractionStatus.OK


class ErrorCounter:
    """
    Process-wide count of internal collector errors.

    Wraps a prometheus_client Counter (internally locked) registered on the
    registry owned by the process assembly.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self._counter = Counter(
            "errors",
            "Total number of internal mesos-collector errors.",
            namespace=NAMESPACE,
            subsystem="collector",
            registry=registry,
        )

    def inc(self) -> None:
        self._counter.inc()


def require(document: Mapping[str, Any], *keys: str) -> List[float]:
    """
    Look up several numeric fields at once.

    Args:
        document: Decoded snapshot or state object
        keys: Field names that must all be present

    Returns:
        List[float]: Values in the order of *keys*

    Raises:
        MissingFieldsError: Listing every absent key
    """
    missing = [key for key in keys if key not in document]
    if missing:
        raise MissingFieldsError(missing)
    return [float(document[key]) for key in keys]
