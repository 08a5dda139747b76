"""PoolCounter STATS FULL collector."""

import logging
from typing import Iterator, Tuple

from ..config.models import ExporterConfig
from ..utils.metrics import MetricDescriptor, Sample
from .base import BaseCollector, safe_scrape
from .mapper import MetricCatalog, map_stat
from .protocol import PoolCounterClient


class PoolCounterCollector(BaseCollector):
    """Collector scraping one PoolCounter instance per call."""

    def __init__(
        self,
        config: ExporterConfig,
        catalog: MetricCatalog,
        logger: logging.Logger
    ):
        """
        Initialize PoolCounter collector.

        Args:
            config: Exporter configuration (address and timeout are read once here)
            catalog: Metric catalog built at startup
            logger: Logger instance
        """
        super().__init__(config, catalog, logger)
        self.address = config.pool_counter_address
        self.timeout = config.collector_timeout_seconds

    def describe(self) -> Tuple[MetricDescriptor, ...]:
        return self.catalog.descriptors

    @safe_scrape
    def scrape(self) -> Iterator[Sample]:
        """
        Query PoolCounter and yield one sample per recognized stat.

        Yields:
            Sample: Data samples as they are read, then the ``up`` sample
        """
        with PoolCounterClient.open(self.address, self.timeout, self.logger) as client:
            count = 0
            for line in client.stat_lines():
                sample = map_stat(self.catalog, line.key, line.value, self.logger)
                if sample is None:
                    continue
                count += 1
                yield sample

        self.logger.debug(f"Scraped {count} metrics from {self.address}")
