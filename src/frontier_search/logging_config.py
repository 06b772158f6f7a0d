"""Structured JSON logging configuration with per-search run IDs."""

import logging
import sys
from contextvars import ContextVar
from typing import Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter


# ContextVar for the active search run - every log line of one search shares it
run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def generate_run_id() -> str:
    """Generate a new run ID and set it in the context."""
    new_id = uuid4().hex[:12]
    run_id.set(new_id)
    return new_id


class JSONFormatter(JsonFormatter):
    """JSON formatter that stamps the run ID and source location on each record."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        current = run_id.get()
        if current:
            log_record['run_id'] = current

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


class RunIdFilter(logging.Filter):
    """Expose the run ID to text formatters as ``%(run_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id.get() or "-"
        return True


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    module_levels: Optional[dict[str, str]] = None
) -> None:
    """
    Configure application logging with JSON or text format.

    Args:
        log_level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured JSON logs, "text" for human-readable
        module_levels: Optional dict of module-specific log levels {"module.name": "DEBUG"}
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(RunIdFilter())

    if log_format.lower() == "json":
        formatter = JSONFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s [%(name)s] [%(run_id)s] %(levelname)s: %(message)s',
            datefmt='%H:%M:%S'
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if module_levels:
        for module_name, level in module_levels.items():
            logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    # httpx logs every request at INFO; keep it quiet unless asked for
    if not module_levels or "httpx" not in module_levels:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(
        "Logging configured",
        extra={
            "log_level": log_level,
            "log_format": log_format,
            "module_levels": module_levels or {}
        }
    )
