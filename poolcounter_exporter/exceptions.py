"""Exceptions raised while scraping a PoolCounter instance."""


class ConfigurationError(Exception):
    """Raised when exporter configuration cannot be loaded."""

    pass


class PoolCounterError(Exception):
    """Base exception for failures talking to PoolCounter."""

    def __init__(self, message: str, address: str = ""):
        self.address = address
        super().__init__(message)


class ConnectError(PoolCounterError):
    """Transport connection to PoolCounter could not be established."""

    def __init__(self, address: str, cause: Exception):
        super().__init__(f"Failed to connect to {address}: {cause}", address)


class WriteError(PoolCounterError):
    """The STATS FULL request could not be sent."""

    def __init__(self, address: str, cause: Exception):
        super().__init__(f"Failed to send stats request to {address}: {cause}", address)


class StreamError(PoolCounterError):
    """Reading the response failed or the scrape deadline expired."""

    pass


class ValueParseError(ValueError):
    """A stat value could not be parsed as a number or a duration."""

    def __init__(self, text: str, reason: str):
        super().__init__(f"Cannot parse {text!r}: {reason}")
