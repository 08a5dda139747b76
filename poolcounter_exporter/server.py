"""HTTP server exposing the exporter registry to Prometheus."""

import logging
import socket
import threading
from socketserver import ThreadingMixIn
from typing import Callable, Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app


METRICS_PATH = "/prometheus"
ALIVE_BODY = b"EXPORTER ALIVE"


def create_app(registry: CollectorRegistry) -> Callable:
    """
    Build the exporter WSGI application.

    ``/prometheus`` serves the registry in the Prometheus text format; every
    other path answers with a static liveness message.
    """
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        if environ.get("PATH_INFO") == METRICS_PATH:
            return metrics_app(environ, start_response)

        start_response("200 OK", [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(ALIVE_BODY))),
        ])
        return [ALIVE_BODY]

    return app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """One thread per request so a slow scrape doesn't block liveness checks."""
    daemon_threads = True


class ExporterServer:
    """Threaded HTTP server with a per-connection socket timeout."""

    def __init__(
        self,
        app: Callable,
        host: str,
        port: int,
        timeout: float,
        logger: logging.Logger
    ):
        """
        Initialize exporter server.

        Args:
            app: WSGI application to serve
            host: Listen host
            port: Listen port (0 picks a free port)
            timeout: Socket timeout in seconds for client connections
            logger: Logger instance
        """
        self.logger = logger.getChild(self.__class__.__name__)
        self._server = make_server(
            host,
            port,
            app,
            server_class=_server_class(host),
            handler_class=_handler_class(timeout, self.logger),
        )
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self._server.server_port

    def start(self) -> None:
        """Serve requests on a background thread."""
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()

    def serve_forever(self) -> None:
        self.logger.info(f"Serving metrics on port {self.port}")
        self._server.serve_forever()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.logger.info("Server stopped")


def _server_class(host: str):
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return type("ExporterWSGIServer", (_ThreadingWSGIServer,), {"address_family": family})


def _handler_class(timeout: float, logger: logging.Logger):
    class Handler(WSGIRequestHandler):
        def log_message(self, format, *args):  # noqa: A002
            logger.debug(f"{self.address_string()} {format % args}")

    # StreamRequestHandler applies this to every accepted connection
    Handler.timeout = timeout
    return Handler
