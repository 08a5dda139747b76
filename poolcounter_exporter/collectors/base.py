"""Base collector abstract class for scrape-on-demand collectors."""

from abc import ABC, abstractmethod
from typing import Any, Iterator, Tuple
import logging
from functools import wraps

from ..exceptions import PoolCounterError
from ..utils.metrics import MetricDescriptor, Sample
from ..utils.status import ScrapeStatus


class BaseCollector(ABC):
    """Abstract base class for collectors driven by the metrics registry."""

    def __init__(self, config: Any, catalog: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            config: Exporter configuration
            catalog: Immutable metric catalog shared by all scrapes
            logger: Logger instance
        """
        self.config = config
        self.catalog = catalog
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    def describe(self) -> Tuple[MetricDescriptor, ...]:
        """
        Return every metric this collector can produce.

        Must not touch the network; the result is the same on every call.
        """
        pass

    @abstractmethod
    def scrape(self) -> Iterator[Sample]:
        """
        Perform one scrape and yield samples as they are produced.

        Note:
            Implementations should use the @safe_scrape decorator, which
            turns failures into a down status and appends the ``up`` sample.
        """
        pass


def safe_scrape(func):
    """
    Decorator giving a scrape generator its availability guarantee.

    Whatever the wrapped generator does, exactly one ``up`` sample is yielded
    after all data samples: 1 if the generator finished, 0 if it raised.
    Samples yielded before a failure are kept. Errors are logged, never
    propagated.

    Args:
        func: Collector generator method to wrap

    Returns:
        Wrapped generator function
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        status = ScrapeStatus.UP
        try:
            yield from func(self, *args, **kwargs)
        except PoolCounterError as e:
            status = ScrapeStatus.DOWN
            self.logger.error(f"Scrape failed: {e}", extra={"error_type": type(e).__name__})
        except Exception as e:
            status = ScrapeStatus.DOWN
            self.logger.error(f"Scrape failed unexpectedly: {e}", exc_info=True)

        yield Sample(self.catalog.up, status.to_value())
    return wrapper
