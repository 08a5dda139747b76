"""PoolCounter availability status enumeration."""

from enum import Enum


class ScrapeStatus(Enum):
    """Outcome of a single scrape of PoolCounter."""

    UP = "up"
    DOWN = "down"

    def to_value(self) -> float:
        """
        Convert status to the value exported by the ``up`` metric.

        Returns:
            float: 1.0 when PoolCounter responded, 0.0 otherwise
        """
        return {
            ScrapeStatus.UP: 1.0,
            ScrapeStatus.DOWN: 0.0,
        }[self]
