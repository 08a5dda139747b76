"""Pydantic configuration models for the PoolCounter exporter."""

from pydantic import BaseModel, Field, field_validator
from typing import Tuple
import re


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_NAMESPACE_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` address.

    IPv6 hosts must be bracketed (``[::1]:7531``); the brackets are removed.

    Args:
        address: Address string

    Returns:
        Tuple[str, int]: Host and port

    Raises:
        ValueError: If the address has no port or the port is out of range
    """
    host, separator, port = address.rpartition(":")
    if not separator or not port:
        raise ValueError(f"Address must be in host:port form: {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 hosts must be enclosed in brackets: {address!r}")

    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ValueError(f"Invalid port in address {address!r}")

    return host, int(port)


class ExporterConfig(BaseModel):
    """Root configuration model for the exporter process."""
    pool_counter_address: str = "localhost:7531"
    listen_address: str = "localhost:8000"
    logs_as_json: bool = False
    collector_timeout_seconds: float = Field(default=5, gt=0)
    server_timeout_seconds: float = Field(default=3, gt=0)
    log_level: str = "INFO"
    namespace: str = "poolcounter"

    @field_validator('pool_counter_address', 'listen_address')
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Validate host:port format."""
        parse_address(v)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator('namespace')
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Namespace becomes a metric name prefix, so it must be a valid identifier."""
        if not _NAMESPACE_PATTERN.match(v):
            raise ValueError('Namespace must match [a-zA-Z_][a-zA-Z0-9_]*')
        return v

    @property
    def listen_endpoint(self) -> Tuple[str, int]:
        """HTTP listen address as a (host, port) tuple."""
        return parse_address(self.listen_address)
