"""Mapping of PoolCounter stat lines to typed metric samples."""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple

from ..exceptions import ValueParseError
from ..utils.duration import parse_duration
from ..utils.metrics import MetricDescriptor, MetricKind, Sample


DEFAULT_NAMESPACE = "poolcounter"

UP_METRIC = "up"
UP_DOCUMENTATION = "Whether poolcounter is up and responding to the exporter"


def parse_number(text: str, strict: bool = False) -> float:
    """
    Parse a plain numeric stat value.

    Raises:
        ValueParseError: In strict mode, if the text is not a number
    """
    try:
        return float(text)
    except ValueError as e:
        if strict:
            raise ValueParseError(text, "not a number") from e
        return 0.0


@dataclass(frozen=True)
class StatRule:
    """How one recognized stat key becomes a metric."""

    key: str
    metric: str
    documentation: str
    kind: MetricKind
    transform: Callable[..., float]


# Stat key -> metric, in the order PoolCounter reports them
STAT_RULES: Tuple[StatRule, ...] = (
    StatRule("total processing time", "total_processing_time_seconds",
             "Total processing time in seconds", MetricKind.COUNTER, parse_duration),
    StatRule("average processing time", "avg_processing_time_seconds",
             "Average processing time in seconds", MetricKind.GAUGE, parse_duration),
    StatRule("gained time", "total_gained_time_seconds",
             "Total processing time saved by the use of PoolCounter in seconds",
             MetricKind.COUNTER, parse_duration),
    StatRule("waiting time for me", "total_excl_wait_time_seconds",
             "Total waiting time for exclusive locks in seconds", MetricKind.COUNTER, parse_duration),
    StatRule("waiting time for anyone", "total_shared_wait_time_seconds",
             "Total waiting time for shared locks in seconds", MetricKind.COUNTER, parse_duration),
    StatRule("total_acquired", "total_acquired",
             "Total acquired locks count", MetricKind.COUNTER, parse_number),
    StatRule("total_releases", "total_releases",
             "Total released locks count", MetricKind.COUNTER, parse_number),
    StatRule("hashtable_entries", "hashtable_entries",
             "Number of entries in poolcounter hash table", MetricKind.GAUGE, parse_number),
    StatRule("processing_workers", "processing_workers",
             "Number of workers busy processing tasks", MetricKind.GAUGE, parse_number),
    StatRule("waiting_workers", "waiting_workers",
             "Number of workers waiting for tasks to be completed", MetricKind.GAUGE, parse_number),
    StatRule("connect_errors", "connect_errors",
             "Total count of client connection errors", MetricKind.COUNTER, parse_number),
    StatRule("full_queues", "full_queues",
             "Number of queues full of waiting workers", MetricKind.COUNTER, parse_number),
    StatRule("lock_mismatch", "lock_mismatch",
             "Total count of mismatched lock requests", MetricKind.COUNTER, parse_number),
    StatRule("release_mismatch", "release_mismatch",
             "Total count of mismatched release requests", MetricKind.COUNTER, parse_number),
    StatRule("processed_count", "processed_count",
             "Total count of processed tasks", MetricKind.COUNTER, parse_number),
)


def build_name(namespace: str, name: str) -> str:
    """Fully qualified metric name, e.g. ``poolcounter_total_acquired``."""
    return f"{namespace}_{name}" if namespace else name


@dataclass(frozen=True)
class MetricCatalog:
    """
    Immutable set of exported metrics and the stat keys that feed them.

    Built once at startup and shared read-only by every scrape.
    """

    namespace: str
    up: MetricDescriptor
    rules: Mapping[str, Tuple[MetricDescriptor, StatRule]] = field(repr=False)

    @classmethod
    def build(cls, namespace: str = DEFAULT_NAMESPACE) -> "MetricCatalog":
        rules: Dict[str, Tuple[MetricDescriptor, StatRule]] = {}
        for rule in STAT_RULES:
            descriptor = MetricDescriptor(build_name(namespace, rule.metric), rule.documentation, rule.kind)
            rules[rule.key] = (descriptor, rule)

        up = MetricDescriptor(build_name(namespace, UP_METRIC), UP_DOCUMENTATION, MetricKind.GAUGE)
        return cls(namespace=namespace, up=up, rules=MappingProxyType(rules))

    @property
    def descriptors(self) -> Tuple[MetricDescriptor, ...]:
        """Every exported descriptor: data metrics first, then ``up``."""
        return tuple(descriptor for descriptor, _ in self.rules.values()) + (self.up,)

    def lookup(self, key: str) -> Optional[Tuple[MetricDescriptor, StatRule]]:
        return self.rules.get(key)


def map_stat(
    catalog: MetricCatalog,
    key: str,
    raw_value: str,
    logger: Optional[logging.Logger] = None
) -> Optional[Sample]:
    """
    Translate one stat line into a sample.

    Args:
        catalog: Metric catalog holding the recognition table
        key: Stat key as reported by PoolCounter
        raw_value: Unparsed value text
        logger: Optional logger for unparsable values

    Returns:
        Sample, or None if the key is not exported. A value that cannot be
        parsed yields a sample with ``parsed=False`` and the lenient value
        (zero, or the parsable part of a duration).
    """
    entry = catalog.lookup(key)
    if entry is None:
        return None

    descriptor, rule = entry
    try:
        return Sample(descriptor, rule.transform(raw_value, strict=True))
    except ValueParseError as e:
        if logger:
            logger.warning(f"Unparsable value for {key!r}: {e}")
        return Sample(descriptor, rule.transform(raw_value), parsed=False)
