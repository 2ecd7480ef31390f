from __future__ import annotations

import logging
from typing import Any, Optional

import structlog


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Route stdlib and structlog output through one pipeline at `level`.

    Console rendering suits interactive play; `json_output` emits one JSON object per event.
    Either way every structlog event carries the context bound with `bind_session`.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def bind_session(**values: Any) -> None:
    """Attach key/value context (scenario id, seed) to every event until `clear_session`."""
    structlog.contextvars.bind_contextvars(**values)


def clear_session() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: Optional[str] = None):
    """Return a structlog logger that inherits the global configuration."""
    return structlog.get_logger(name)
