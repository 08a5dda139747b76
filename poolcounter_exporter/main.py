"""Main application entry point for the PoolCounter Prometheus exporter."""

import argparse
import logging
import signal
import sys
import threading
from typing import Optional

from prometheus_client import generate_latest
from prometheus_client.parser import text_string_to_metric_families
from pydantic import ValidationError

from .collectors.mapper import MetricCatalog
from .collectors.poolcounter_collector import PoolCounterCollector
from .collectors.prometheus import build_registry
from .config.loader import ConfigLoader
from .config.models import ExporterConfig, LOG_LEVELS
from .exceptions import ConfigurationError
from .server import ExporterServer, create_app
from .utils.logger import setup_logger
from .utils.status import ScrapeStatus


class ExporterApp:
    """
    Main exporter application.

    Wires configuration, the PoolCounter collector and the HTTP server, and
    handles graceful shutdown.
    """

    def __init__(self, config: ExporterConfig):
        """
        Initialize exporter application.

        Args:
            config: Validated exporter configuration
        """
        self.config = config
        self.logger = setup_logger(
            "poolcounter_exporter",
            level=config.log_level,
            json_format=config.logs_as_json
        )
        self.server: Optional[ExporterServer] = None
        self._stop_event = threading.Event()

        self.logger.info(f"Configuring collector to scrape from {config.pool_counter_address}")

        self.catalog = MetricCatalog.build(config.namespace)
        self.collector = PoolCounterCollector(config, self.catalog, self.logger)
        self.registry = build_registry(self.collector)

    def scrape_once(self) -> bool:
        """
        Run one scrape and print the exposition to stdout.

        Returns:
            bool: True if PoolCounter was up
        """
        output = generate_latest(self.registry).decode("utf-8")
        sys.stdout.write(output)

        for family in text_string_to_metric_families(output):
            if family.name == self.catalog.up.name:
                return family.samples[0].value == ScrapeStatus.UP.to_value()
        return False

    def serve(self) -> None:
        """
        Serve ``/prometheus`` until SIGTERM or SIGINT.
        """
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        host, port = self.config.listen_endpoint
        self.server = ExporterServer(
            create_app(self.registry),
            host,
            port,
            self.config.server_timeout_seconds,
            self.logger
        )

        self.logger.info(f"Starting Prometheus collector on {self.config.listen_address}")
        self.server.start()

        try:
            self._stop_event.wait()
        finally:
            self.server.stop()

    def stop(self) -> None:
        self._stop_event.set()

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, shutting down...")
        self.stop()


def load_config(config_path: Optional[str], log_level: Optional[str]) -> ExporterConfig:
    """
    Load configuration, letting ``--log-level`` override the environment.

    Raises:
        ConfigurationError: If the configuration file is unusable
        pydantic.ValidationError: If a value is invalid
    """
    config = ConfigLoader.load(config_path)
    if log_level:
        config = config.model_copy(update={"log_level": log_level})
    return config


def main(argv=None):
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    parser = argparse.ArgumentParser(
        description='Prometheus exporter for PoolCounter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration is read from EXPORTER_* environment variables, e.g.
  EXPORTER_POOL_COUNTER_ADDRESS=localhost:7531
  EXPORTER_LISTEN_ADDRESS=localhost:8000
  EXPORTER_COLLECTOR_TIMEOUT_SECONDS=5

Examples:
  # Serve metrics on /prometheus
  poolcounter-exporter

  # Scrape once, print metrics and exit
  poolcounter-exporter --once
        """
    )

    parser.add_argument(
        '--config',
        default=None,
        help='Optional YAML configuration file; environment variables take precedence'
    )

    parser.add_argument(
        '--log-level',
        default=None,
        choices=list(LOG_LEVELS),
        help='Logging level (default: EXPORTER_LOG_LEVEL or INFO)'
    )

    parser.add_argument(
        '--once',
        action='store_true',
        help='Scrape PoolCounter once, print the metrics and exit'
    )

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, args.log_level)
    except (ConfigurationError, ValidationError) as e:
        logging.basicConfig(level=logging.INFO)
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    app = ExporterApp(config)

    if args.once:
        sys.exit(0 if app.scrape_once() else 1)

    try:
        app.serve()
    except OSError as e:
        app.logger.error(f"Server failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
