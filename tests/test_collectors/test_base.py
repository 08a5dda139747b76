"""Tests for BaseCollector and the safe_scrape decorator."""

import logging

import pytest

from poolcounter_exporter.collectors.base import BaseCollector, safe_scrape
from poolcounter_exporter.collectors.mapper import MetricCatalog
from poolcounter_exporter.exceptions import ConnectError, StreamError
from poolcounter_exporter.utils.metrics import Sample


class MockCollector(BaseCollector):
    """Mock collector yielding a scripted sequence of samples and errors."""

    def __init__(self, steps=None, logger=None):
        if logger is None:
            logger = logging.getLogger(__name__)
        super().__init__({}, MetricCatalog.build(), logger)
        self.steps = steps or []

    def describe(self):
        return self.catalog.descriptors

    @safe_scrape
    def scrape(self):
        for step in self.steps:
            if isinstance(step, BaseException):
                raise step
            descriptor, _ = self.catalog.lookup(step[0])
            yield Sample(descriptor, step[1])


def names_and_values(samples):
    return [(sample.descriptor.name, sample.value) for sample in samples]


class TestSafeScrape:
    """Test suite for safe_scrape."""

    def test_success_appends_up(self):
        """A completed scrape ends with up=1."""
        collector = MockCollector([("total_acquired", 3.0), ("waiting_workers", 1.0)])

        assert names_and_values(collector.scrape()) == [
            ("poolcounter_total_acquired", 3.0),
            ("poolcounter_waiting_workers", 1.0),
            ("poolcounter_up", 1.0),
        ]

    def test_empty_scrape(self):
        """A scrape without data still reports up=1."""
        assert names_and_values(MockCollector().scrape()) == [("poolcounter_up", 1.0)]

    def test_failure_before_data(self):
        """A failure before any sample yields only up=0."""
        collector = MockCollector([ConnectError("localhost:7531", OSError("refused"))])

        assert names_and_values(collector.scrape()) == [("poolcounter_up", 0.0)]

    def test_failure_keeps_earlier_samples(self):
        """Samples yielded before a failure are kept."""
        collector = MockCollector([("total_acquired", 3.0), StreamError("deadline exceeded")])

        assert names_and_values(collector.scrape()) == [
            ("poolcounter_total_acquired", 3.0),
            ("poolcounter_up", 0.0),
        ]

    def test_unexpected_error_is_logged(self, caplog):
        """Unexpected errors are logged with traceback and never propagate."""
        collector = MockCollector([KeyError("oops")], logger=logging.getLogger("test_base"))

        with caplog.at_level(logging.ERROR, logger="test_base"):
            samples = list(collector.scrape())

        assert names_and_values(samples) == [("poolcounter_up", 0.0)]
        assert "unexpectedly" in caplog.text
        assert caplog.records[0].exc_info is not None

    def test_exactly_one_up_sample(self):
        """Every outcome produces exactly one up sample, emitted last."""
        for steps in ([], [("total_acquired", 1.0)], [StreamError("x")], [("full_queues", 2.0), ValueError("y")]):
            samples = list(MockCollector(steps).scrape())
            up_samples = [s for s in samples if s.descriptor.name == "poolcounter_up"]

            assert len(up_samples) == 1
            assert samples[-1] is up_samples[0]

    def test_keyboard_interrupt_propagates(self):
        """Only Exception subclasses are absorbed."""
        collector = MockCollector([KeyboardInterrupt()])

        with pytest.raises(KeyboardInterrupt):
            list(collector.scrape())


class TestBaseCollector:
    """Test suite for BaseCollector."""

    def test_collector_initialization(self):
        collector = MockCollector()

        assert collector.config == {}
        assert collector.catalog.namespace == "poolcounter"
        assert collector.logger is not None

    def test_collector_logger_hierarchy(self):
        """Test that collector creates child logger."""
        parent_logger = logging.getLogger("test_parent")
        collector = MockCollector(logger=parent_logger)

        assert collector.logger.parent == parent_logger

    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            BaseCollector({}, MetricCatalog.build(), logging.getLogger(__name__))
