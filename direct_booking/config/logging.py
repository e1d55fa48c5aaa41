"""Structured logging: structlog over stdlib handlers."""
import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from direct_booking.config.settings import settings

QUIET_LOGGERS = ("httpcore", "httpx", "stripe")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def add_reservation_id_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Prefix the event with ``[<reservation_id>]`` when one is bound.

    Args:
        logger: The logger instance
        method_name: The name of the method being called
        event_dict: The event dictionary containing log data

    Returns:
        The event dictionary, prefixed when a reservation id is present
    """
    reservation_id = event_dict.get("reservation_id")
    if reservation_id:
        event_dict["event"] = f"[{reservation_id}] {event_dict.get('event', '')}"
    return event_dict


def _stream_handler(json_output: bool, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handler.setLevel(level)
    return handler


def configure_logging() -> None:
    """Install the stdlib handler and the structlog processor chain.

    ``LOG_FORMAT=json`` renders one JSON object per line for production;
    ``console`` renders coloured key-value lines for local work.
    """
    level = getattr(logging, settings.logging.level)
    json_output = settings.logging.format == "json"

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(_stream_handler(json_output, level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            add_reservation_id_prefix,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Module-level logger, e.g. ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)
