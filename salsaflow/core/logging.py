"""Process-wide structlog setup for the server."""

from __future__ import annotations

import logging

import structlog


def level_number(level: str) -> int:
    """Map a level name such as ``info`` to its numeric value."""
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"unknown log level: {level!r}")
    return number


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Render events as JSON lines, or for a terminal when ``fmt`` is ``text``.

    Events below ``level`` are dropped before any processor runs.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_number(level)),
    )
