"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

from chartgraph.models.config import LogConfig

_RENDERERS = ("json", "console")


def setup_logging(level: str = "info", renderer: str = "json") -> None:
    """Configure structlog to write one event per line to stderr.

    ``renderer`` selects JSON lines (default) or the human-readable
    console format used when running the planner interactively.
    """
    if renderer not in _RENDERERS:
        raise ValueError(f"Invalid log renderer: {renderer}. Must be one of {_RENDERERS}")
    log_level = getattr(logging, level.upper(), logging.INFO)

    final: structlog.typing.Processor
    if renderer == "console":
        final = structlog.dev.ConsoleRenderer(colors=False)
    else:
        final = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            final,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_logging(config: LogConfig) -> None:
    """Apply a loaded LogConfig, e.g. ``configure_logging(load_config().log)``."""
    setup_logging(config.level, config.renderer)


def bind_run(chart_version: str, resources: int) -> None:
    """Attach run-wide fields to every event logged by the current context."""
    structlog.contextvars.bind_contextvars(chart_version=chart_version, resources=resources)


def unbind_run() -> None:
    structlog.contextvars.unbind_contextvars("chart_version", "resources")


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
