"""
Structured logging for the importer.

Every logger writes to stdout, as JSON by default or as plain text when
LOG_FORMAT=text. Extra fields passed with ``extra=`` become JSON keys.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager

from pythonjsonlogger import jsonlogger


DEFAULT_LOGGER_NAME = "fda-importer"

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class ImporterJsonFormatter(jsonlogger.JsonFormatter):
    """Adds timestamp, level and source location to each JSON line"""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["location"] = f"{record.module}.{record.funcName}:{record.lineno}"


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a stdout logger, replacing any handlers it already has.

    Args:
        name: Logger name
        level: Level name; defaults to LOG_LEVEL, then INFO
        format_type: "json" or "text"; defaults to LOG_FORMAT, then json

    Returns:
        Configured logger
    """
    log_level = _resolve_level(level)
    format_type = (format_type or os.getenv("LOG_FORMAT") or "json").lower()

    if format_type == "text":
        formatter = logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = ImporterJsonFormatter(JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers = [handler]
    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Return the named logger, configuring it on first use"""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


@contextmanager
def log_operation(operation: str, logger: logging.Logger | None = None, **fields):
    """
    Log the start and end of a pipeline step with its duration.

    Failures are logged with the traceback and re-raised.

    Usage:
        with log_operation("Importing PMA decisions", logger=logger, category="PMA"):
            ...
    """
    logger = logger or get_logger()
    started = time.monotonic()
    logger.info(f"Starting: {operation}", extra={"operation": operation, **fields})
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation}",
            extra={
                "operation": operation,
                "duration_seconds": round(time.monotonic() - started, 3),
                "error_type": type(e).__name__,
                **fields,
            },
            exc_info=True,
        )
        raise
    logger.info(
        f"Completed: {operation}",
        extra={"operation": operation, "duration_seconds": round(time.monotonic() - started, 3), **fields},
    )
