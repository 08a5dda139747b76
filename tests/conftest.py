"""Shared pytest configuration and fixtures."""

import socket
import threading

import pytest

from poolcounter_exporter.collectors.mapper import MetricCatalog
from poolcounter_exporter.config.models import ExporterConfig
from poolcounter_exporter.utils.logger import setup_logger


# Realistic STATS FULL output, including keys the exporter ignores
STATS_RESPONSE = (
    "uptime: 389 days 9343h 3m 28.000000s\n"
    "total processing time: 22h 14m 53.898438s\n"
    "average processing time: 0.957994s\n"
    "gained time: 1 days 2h 0m 0.500000s\n"
    "waiting time for me: 3m 10.250000s\n"
    "waiting time for anyone: 45.000000s\n"
    "waiting time for good: 1m 0.000000s\n"
    "wasted timeout time: 0.000000s\n"
    "total_acquired: 1523\n"
    "total_releases: 1520\n"
    "hashtable_entries: 3\n"
    "processing_workers: 2\n"
    "waiting_workers: 1\n"
    "connect_errors: 4\n"
    "failed_sends: 0\n"
    "full_queues: 5\n"
    "lock_mismatch: 6\n"
    "release_mismatch: 7\n"
    "processed_count: 1519\n"
)


class FakePoolCounter:
    """
    In-process TCP server answering every connection with a canned response.

    With ``hold_open`` the connection stays open after the response is sent,
    so clients only stop reading when their deadline expires.
    """

    def __init__(self, response: str = STATS_RESPONSE, hold_open: bool = False):
        self.response = response.encode("utf-8")
        self.hold_open = hold_open
        self.requests = []
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(8)
        self._sock.settimeout(0.05)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def address(self) -> str:
        return "127.0.0.1:%d" % self._sock.getsockname()[1]

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            threading.Thread(target=self._handle, args=(conn,), daemon=True).start()

    def _handle(self, conn):
        with conn:
            conn.settimeout(2)
            request = b""
            try:
                while not request.endswith(b"\n"):
                    chunk = conn.recv(64)
                    if not chunk:
                        break
                    request += chunk
                self.requests.append(request)
                conn.sendall(self.response)
                if self.hold_open:
                    self._stop.wait(5)
            except OSError:
                pass

    def close(self):
        self._stop.set()
        self._thread.join(timeout=2)
        self._sock.close()


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", level="DEBUG")


@pytest.fixture
def catalog():
    """Metric catalog with the default namespace."""
    return MetricCatalog.build()


@pytest.fixture
def poolcounter():
    """Fake PoolCounter returning the standard stats response."""
    server = FakePoolCounter()
    yield server
    server.close()


@pytest.fixture
def make_poolcounter():
    """Factory for fake PoolCounter servers with custom responses."""
    servers = []

    def factory(response: str = STATS_RESPONSE, hold_open: bool = False) -> FakePoolCounter:
        server = FakePoolCounter(response, hold_open)
        servers.append(server)
        return server

    yield factory

    for server in servers:
        server.close()


@pytest.fixture
def closed_address():
    """Address of a local port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"


@pytest.fixture
def make_config():
    """Build an ExporterConfig pointing at the given PoolCounter address."""
    def factory(address: str, timeout: float = 2) -> ExporterConfig:
        return ExporterConfig(pool_counter_address=address, collector_timeout_seconds=timeout)
    return factory
