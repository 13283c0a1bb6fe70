"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger

# logrus level names accepted on the command line
LOG_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def resolve_level(level: str) -> int:
    """
    Map a log level name to a logging constant.

    Args:
        level: Level name (logrus or Python style, case-insensitive)

    Returns:
        int: logging level

    Raises:
        ValueError: If the level name is unknown
    """
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Invalid logging level: {level}") from None


def setup_logger(name: str = "mesos_exporter", level: str = "error") -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        name: Logger name
        level: Log level (panic, fatal, error, warn, info, debug, trace)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.propagate = False

    return logger
