"""Base collector: leader resolution, document fetch and isolated extraction."""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union
import logging

import httpx
from prometheus_client.registry import Collector

from ..services.leader import LeaderResolver
from ..services.snapshot import SnapshotFetcher
from ..utils.errors import LeaderNotFoundError, MissingFieldsError, SnapshotError
from ..utils.metrics import ErrorCounter, ExtractionResult, MetricDescriptor, MetricFamily, require
from ..utils.status import ExtractionStatus

ExtractFn = Callable[[Any, MetricFamily], None]


@dataclass(frozen=True)
class Extractor:
    """One metric and the function that fills it from a scraped document."""

    descriptor: MetricDescriptor
    extract: ExtractFn

    @property
    def name(self) -> str:
        return self.descriptor.full_name


def safe_extract(extractor: Extractor, document: Any, logger: logging.Logger) -> ExtractionResult:
    """
    Run one extractor, turning any failure into a result instead of raising.

    Args:
        extractor: Extractor to run
        document: Decoded JSON document of this scrape
        logger: Logger for failures

    Returns:
        ExtractionResult: OK with a filled family, or MISSING_FIELDS / FAILED
    """
    family = extractor.descriptor.family()
    try:
        extractor.extract(document, family)
    except MissingFieldsError as e:
        logger.error(
            f"Couldn't find fields required to update {extractor.name}",
            extra={"metric": extractor.name, "fields": e.fields}
        )
        return ExtractionResult(extractor.descriptor, ExtractionStatus.MISSING_FIELDS, error=str(e))
    except Exception as e:
        logger.error(f"Failed to update {extractor.name}: {e}", extra={"metric": extractor.name})
        return ExtractionResult(extractor.descriptor, ExtractionStatus.FAILED, error=str(e))

    return ExtractionResult(extractor.descriptor, ExtractionStatus.OK, family=family)


class MetricCollector(Collector):
    """
    Prometheus collector that scrapes one Mesos document per scrape.

    Each collect() call resolves the leader, fetches the document and runs
    every extractor in order. A failed resolution or fetch yields no metrics
    and counts one error; a failed extractor only drops its own metric and
    counts one error.
    """

    def __init__(
        self,
        url: str,
        fetcher: SnapshotFetcher,
        resolver: LeaderResolver,
        error_counter: ErrorCounter,
        logger: logging.Logger,
        extractors: Optional[List[Extractor]] = None
    ):
        """
        Initialize collector.

        Args:
            url: Master candidate list or agent URL
            fetcher: Authenticated document fetcher
            resolver: Leader resolver
            error_counter: Process-wide internal error counter
            logger: Logger instance
            extractors: Override for the collector's default extractor list
        """
        self.url = url
        self.fetcher = fetcher
        self.resolver = resolver
        self.error_counter = error_counter
        self.logger = logger.getChild(self.__class__.__name__)
        self.extractors = list(extractors) if extractors is not None else self.build_extractors()
        self._lock = threading.Lock()

    def build_extractors(self) -> List[Extractor]:
        """Default extractors of this collector, in evaluation order."""
        return []

    def fetch_document(self, leader_url: str) -> Any:
        """
        Fetch the document this collector extracts from.

        Defaults to the flat metrics snapshot.
        """
        return self.fetcher.fetch(leader_url)

    def scrape(self) -> List[ExtractionResult]:
        """
        Run one collection cycle.

        Returns:
            List[ExtractionResult]: One result per extractor, or an empty
            list when the leader or the document could not be obtained
        """
        try:
            leader_url = self.resolver.resolve(self.url)
        except LeaderNotFoundError as e:
            self.logger.error(f"Leader resolution failed: {e}", extra={"url": self.url})
            self.error_counter.inc()
            return []

        try:
            document = self.fetch_document(leader_url)
        except (httpx.HTTPError, SnapshotError) as e:
            self.logger.error(f"Fetching from {leader_url} failed: {e}", extra={"url": leader_url})
            self.error_counter.inc()
            return []

        with self._lock:
            results = [safe_extract(extractor, document, self.logger) for extractor in self.extractors]

        for result in results:
            if result.status.is_error:
                self.error_counter.inc()
        return results

    def collect(self) -> Iterator[MetricFamily]:
        for result in self.scrape():
            if result.ok:
                yield result.family

    def describe(self) -> Iterator[MetricFamily]:
        """Yield empty families so registration never triggers a scrape."""
        for extractor in self.extractors:
            yield extractor.descriptor.family()


# ---------------------------------------------------------------------------
# Extract function builders for flat snapshots
# ---------------------------------------------------------------------------

def single_value(key: str, scale: float = 1.0) -> ExtractFn:
    """Set an unlabelled metric from one snapshot key."""
    def extract(snapshot: Mapping[str, float], family: MetricFamily) -> None:
        value, = require(snapshot, key)
        family.add_metric([], value * scale)
    return extract


def labelled_values(keys: Dict[Union[str, Tuple[str, ...]], str], scale: float = 1.0) -> ExtractFn:
    """
    Set one sample per label value.

    Args:
        keys: Label value (or tuple of label values) -> snapshot key,
            e.g. {"running": "master/tasks_running"}
        scale: Multiplier applied to every value
    """
    def extract(snapshot: Mapping[str, float], family: MetricFamily) -> None:
        values = require(snapshot, *keys.values())
        for labels, value in zip(keys, values):
            label_values = list(labels) if isinstance(labels, tuple) else [labels]
            family.add_metric(label_values, value * scale)
    return extract


def resource_values(prefix: str, scale: float = 1.0) -> ExtractFn:
    """
    Set total/used/free samples from "<prefix>_total" and "<prefix>_used".

    Args:
        prefix: Snapshot key prefix, e.g. "master/cpus"
        scale: Multiplier, e.g. MiB to bytes
    """
    def extract(snapshot: Mapping[str, float], family: MetricFamily) -> None:
        total, used = require(snapshot, f"{prefix}_total", f"{prefix}_used")
        family.add_metric(["total"], total * scale)
        family.add_metric(["used"], used * scale)
        family.add_metric(["free"], (total - used) * scale)
    return extract
