"""
Structured logging configuration using structlog.

The library itself only calls ``structlog.get_logger()``; host applications
call ``setup_logging`` once to pick the output format. Standardized fields:
{
    "ts": "2025-11-18T04:30:00.123456Z",
    "level": "warning",
    "service": "avro-cloudevents",
    "event": "event.decode_failed",
    "module": "wire",
    "func_name": "decode",
    "lineno": 42,
    ...additional context...
}
"""
import structlog
import logging
from typing import Any

from .config import get_settings


def service_name_adder(service_name: str):
    """Build a processor that stamps the service name on every entry."""
    def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict
    return add_service_name


def setup_logging(
    json_output: bool | None = None, service_name: str = "avro-cloudevents", level: str | None = None
):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
            Defaults to the LOG_JSON setting.
        service_name: Name of the service embedding the library.
        level: Minimum log level name, e.g. "INFO" or "DEBUG". Defaults to the
            LOG_LEVEL setting.
    """
    settings = get_settings()
    if json_output is None:
        json_output = settings.LOG_JSON
    if level is None:
        level = settings.LOG_LEVEL

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"unknown log level: {level}")

    shared_processors = [
        # Add contextvars bound by the host application
        structlog.contextvars.merge_contextvars,
        service_name_adder(service_name),
        # Add timestamp as 'ts'
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
