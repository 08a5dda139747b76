"""Logging configuration with optional structured JSON output."""

import logging
import sys
from pythonjsonlogger import jsonlogger


TEXT_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logger(
    name: str = "poolcounter_exporter",
    level: str = "INFO",
    json_format: bool = False
) -> logging.Logger:
    """
    Configure exporter logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit one JSON object per record instead of plain text

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        # Field names expected by the log shipping pipeline
        formatter = jsonlogger.JsonFormatter(
            JSON_FORMAT,
            rename_fields={"asctime": "@timestamp", "message": "@message"}
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
