"""
Structured logging for retail-import

Every module logs through a child of the "retail_import" logger, so one call
to setup_logger() (done by the CLI) decides level and format for the whole
package. JSON output uses python-json-logger; the text format is meant for
local runs.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator

from pythonjsonlogger import jsonlogger

ROOT_LOGGER_NAME = "retail_import"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(module)s:%(funcName)s] %(message)s"


class ImportJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter emitting timestamp, level, logger and code location.

    Fields passed through ``extra=`` (table, row_count, csv_path...) are kept
    as top-level keys.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["location"] = f"{record.module}:{record.funcName}"


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if name not in LOG_LEVELS:
        name = "INFO"
    return getattr(logging, name)


def _build_formatter(format_type: str | None) -> logging.Formatter:
    format_type = (format_type or os.getenv("LOG_FORMAT") or "json").lower()
    if format_type == "text":
        return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return ImportJsonFormatter(JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a logger with a single stdout handler.

    Calling it again replaces the previous handler, so the CLI can apply its
    options after modules have already logged.

    Args:
        name: Logger name
        level: Level name (default: env LOG_LEVEL, then INFO)
        format_type: "json" or "text" (default: env LOG_FORMAT, then json)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(format_type))

    logger.handlers = [handler]
    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Return a logger for a module.

    Names under "retail_import" share the package handler, which is set up
    with environment defaults on first use.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logger(ROOT_LOGGER_NAME)

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


@contextmanager
def log_operation(
    operation_name: str,
    logger: logging.Logger | None = None,
    **fields,
) -> Iterator[None]:
    """
    Log the start and the outcome of an operation with its duration.

    Usage:
        with log_operation("Retail sales import", logger=logger, csv_path=path):
            ...

    Exceptions are logged at ERROR and re-raised.
    """
    logger = logger or get_logger()
    context = {"operation": operation_name, **fields}
    started = time.perf_counter()

    logger.info(f"Starting: {operation_name}", extra=context)
    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation_name}",
            extra={
                **context,
                "status": "error",
                "duration_seconds": round(time.perf_counter() - started, 3),
                "error_type": type(e).__name__,
                "error_message": str(e),
            },
        )
        raise

    logger.info(
        f"Completed: {operation_name}",
        extra={
            **context,
            "status": "success",
            "duration_seconds": round(time.perf_counter() - started, 3),
        },
    )
