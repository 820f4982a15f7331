"""JSON logging for the easyca operator scripts.

Library modules only create child loggers (``easyca.lib.ledger`` and so on)
and never attach handlers. Each script calls :func:`setup_logging` once,
which installs a single JSON handler on the ``easyca`` logger so every
child record is emitted with the module that produced it.
"""

import argparse
import logging
import os
import sys
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER_NAME = "easyca"
LOG_LEVEL_ENV = "EASYCA_LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

LOGGER = logging.getLogger(ROOT_LOGGER_NAME)


class OperatorJsonFormatter(JsonFormatter):
    """JSON formatter emitting timestamp, level, logger, message and traceback only."""

    allowed_fields = frozenset({"timestamp", "level", "logger", "message", "exc_info"})

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        for key in [key for key in log_record if key not in self.allowed_fields]:
            log_record.pop(key)


def parse_log_level(value: str) -> str:
    """Normalise a level name for --log-level, rejecting unknown names."""
    level = value.upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(f"must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level


def setup_logging(level: str | int = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Configure the easyca logger tree for a script run.

    Safe to call repeatedly: the existing JSON handler is reused and pointed
    at the current stream instead of stacking a second one.

    Args:
        level: Level name or number applied to the whole easyca tree
        stream: Output stream (defaults to the current sys.stderr)

    Returns:
        The configured ``easyca`` logger
    """
    handler = next(
        (h for h in LOGGER.handlers if isinstance(h.formatter, OperatorJsonFormatter)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(OperatorJsonFormatter(timestamp=True))
        LOGGER.addHandler(handler)
    handler.setStream(stream or sys.stderr)

    LOGGER.setLevel(level.upper() if isinstance(level, str) else level)
    LOGGER.propagate = False
    return LOGGER


def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    """Add --log-level to a script parser, defaulting to $EASYCA_LOG_LEVEL."""
    # argparse runs string defaults through type, so a bad env value is reported too
    parser.add_argument(
        "--log-level",
        type=parse_log_level,
        default=os.environ.get(LOG_LEVEL_ENV, "INFO"),
        metavar="{" + ",".join(LOG_LEVELS) + "}",
        help=f"Log verbosity (default: ${LOG_LEVEL_ENV} or INFO)",
    )
