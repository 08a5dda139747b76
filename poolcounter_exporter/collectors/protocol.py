"""PoolCounter plaintext protocol client."""

import logging
import socket
import time
from typing import Iterator, Optional

from ..config.models import parse_address
from ..exceptions import ConnectError, StreamError, WriteError
from ..utils.metrics import StatLine


STATS_REQUEST = b"STATS FULL\n"
FIELD_SEPARATOR = ": "
RECV_BUFFER_SIZE = 4096
MAX_LINE_BYTES = 64 * 1024


class PoolCounterClient:
    """
    One connection to PoolCounter issuing a single STATS FULL query.

    The connection is opened with ``open()`` and used as a context manager so
    that the socket is closed on every exit path:

        with PoolCounterClient.open("localhost:7531", 5, logger) as client:
            for line in client.stat_lines():
                ...
    """

    def __init__(self, sock: socket.socket, address: str, timeout: float, logger: logging.Logger):
        self._sock = sock
        self.address = address
        self.logger = logger
        # Armed once connected; bounds the request and the whole response read
        self.deadline = time.monotonic() + timeout

    @classmethod
    def open(cls, address: str, timeout: float, logger: logging.Logger) -> "PoolCounterClient":
        """
        Connect to PoolCounter and send the STATS FULL request.

        Args:
            address: PoolCounter ``host:port``
            timeout: Seconds allowed for connecting, and separately for the
                request/response exchange after the connection is up
            logger: Logger instance

        Returns:
            PoolCounterClient: Connected client ready for ``stat_lines()``

        Raises:
            ConnectError: If the connection cannot be established
            WriteError: If the request cannot be sent
        """
        try:
            host, port = parse_address(address)
            logger.debug(f"Connecting to {host}:{port}")
            sock = socket.create_connection((host, port), timeout=timeout)
        except (OSError, ValueError) as e:
            raise ConnectError(address, e) from e

        client = cls(sock, address, timeout, logger)
        try:
            client._send_request()
        except BaseException:
            client.close()
            raise

        return client

    def _send_request(self) -> None:
        try:
            self._sock.settimeout(self._remaining())
            self._sock.sendall(STATS_REQUEST)
        except (OSError, StreamError) as e:
            raise WriteError(self.address, e) from e

        self.logger.debug(f"Sent stats request to {self.address}")

    def stat_lines(self) -> Iterator[StatLine]:
        """
        Yield response lines split into key and value.

        Reading stops without error at end of stream or at the first line
        that has no ``": "`` separator, which terminates the stats block.

        Raises:
            StreamError: If reading fails, the deadline expires or a line
                grows past ``MAX_LINE_BYTES``
        """
        for line in self._read_lines():
            key, separator, value = line.partition(FIELD_SEPARATOR)
            if not separator:
                self.logger.debug(f"End of stats block at line {line!r}")
                return
            yield StatLine(key, value)

    def _read_lines(self) -> Iterator[str]:
        buffer = bytearray()
        # Bytes of buffer already known to hold no newline
        scanned = 0
        while True:
            newline = buffer.find(b"\n", scanned)
            if newline >= 0:
                line = bytes(buffer[:newline])
                del buffer[:newline + 1]
                scanned = 0
                yield self._decode(line)
                continue

            scanned = len(buffer)
            if scanned > MAX_LINE_BYTES:
                raise StreamError(
                    f"Line from {self.address} exceeds {MAX_LINE_BYTES} bytes without a newline",
                    self.address
                )

            chunk = self._recv()
            if not chunk:
                if buffer:
                    yield self._decode(bytes(buffer))
                return
            buffer += chunk

    def _recv(self) -> bytes:
        remaining = self._remaining()
        try:
            self._sock.settimeout(remaining)
            return self._sock.recv(RECV_BUFFER_SIZE)
        except socket.timeout as e:
            raise StreamError(f"Timed out reading stats from {self.address}", self.address) from e
        except OSError as e:
            raise StreamError(f"Failed to read stats from {self.address}: {e}", self.address) from e

    def _remaining(self) -> float:
        remaining = self.deadline - time.monotonic()
        if remaining <= 0:
            raise StreamError(f"Deadline exceeded talking to {self.address}", self.address)
        return remaining

    @staticmethod
    def _decode(line: bytes) -> str:
        return line.decode('utf-8', errors='replace').rstrip("\r")

    def close(self) -> None:
        """Close the connection; errors while closing are only logged."""
        try:
            self._sock.close()
            self.logger.debug(f"Connection to {self.address} closed")
        except OSError as e:
            self.logger.warning(f"Error closing connection to {self.address}: {e}")

    def __enter__(self) -> "PoolCounterClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return False
