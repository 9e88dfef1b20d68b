"""structlog configuration shared by the CLI and example scripts."""

from __future__ import annotations

import logging
from typing import Any

import structlog


def configure_logging(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Set up the structlog processor chain.

    Console rendering for interactive runs, JSON lines for anything that
    ships logs elsewhere.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
