"""prometheus_client adapter for scrape-on-demand collectors."""

from typing import Iterator, Optional

from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from ..utils.metrics import MetricDescriptor, MetricKind
from .base import BaseCollector


def to_metric_family(descriptor: MetricDescriptor, value: Optional[float] = None) -> Metric:
    """
    Build a prometheus metric family for a descriptor.

    Without a value the family has no samples, which is what the registry
    expects from ``describe()``.
    """
    if descriptor.kind is MetricKind.COUNTER:
        return CounterMetricFamily(descriptor.name, descriptor.documentation, value=value)
    return GaugeMetricFamily(descriptor.name, descriptor.documentation, value=value)


class PrometheusCollector:
    """
    Custom prometheus_client collector wrapping a BaseCollector.

    ``collect()`` runs one scrape per call and streams each sample to the
    registry as a metric family as soon as it is read.
    """

    def __init__(self, collector: BaseCollector):
        self.collector = collector

    def describe(self) -> Iterator[Metric]:
        for descriptor in self.collector.describe():
            yield to_metric_family(descriptor)

    def collect(self) -> Iterator[Metric]:
        for sample in self.collector.scrape():
            yield to_metric_family(sample.descriptor, sample.value)


def build_registry(collector: BaseCollector, process_metrics: bool = True) -> CollectorRegistry:
    """
    Create a dedicated registry for the exporter.

    Args:
        collector: Collector to expose
        process_metrics: Also expose the exporter's own process, platform
            and garbage collection metrics

    Returns:
        CollectorRegistry: Registry with the collector registered
    """
    registry = CollectorRegistry(auto_describe=True)
    registry.register(PrometheusCollector(collector))

    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)

    return registry
