"""Metric data structures shared by the collector and its mapper."""

from dataclasses import dataclass
from enum import Enum


class MetricKind(Enum):
    """Prometheus value type of an exported metric."""

    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and type of one exported metric."""

    name: str
    documentation: str
    kind: MetricKind


@dataclass(frozen=True)
class StatLine:
    """One ``<key>: <value>`` line of a STATS FULL response."""

    key: str
    value: str


@dataclass(frozen=True)
class Sample:
    """A typed metric value produced during a single scrape."""

    descriptor: MetricDescriptor
    value: float
    parsed: bool = True  # False if the raw value had to be defaulted

    @property
    def kind(self) -> MetricKind:
        return self.descriptor.kind
