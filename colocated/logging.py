"""Structured logging for colocated.

Modules log through the standard library (``logging.getLogger(__name__)``)
and attach structured fields with ``extra={"structured_data": {...}}``.
This module provides the formatters that render those fields and a
``configure_logging`` entry point for applications and the CLI.

Example:
    Basic usage::

        from colocated.logging import configure_logging, log_context

        configure_logging(level="DEBUG")

        with log_context(session_id="abc-123"):
            handle = use_query(session, HomeQuery)  # render logs carry session_id
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar("colocated_log_context", default=None)

ROOT_LOGGER = "colocated"


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Attributes:
        include_location: Whether to include file/line/function in output.
        extra_fields: Additional fields to include in every log record.
    """

    def __init__(
        self,
        include_location: bool = False,
        extra_fields: dict[str, Any] | None = None,
    ) -> None:
        super().__init__()
        self.include_location = include_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        structured_data = getattr(record, "structured_data", None)
        if structured_data:
            log_data["data"] = dict(structured_data)

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in self.extra_fields.items():
            if key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """One-line development output with structured fields as ``key=value``.

    Lists such as the fragment names of a render are comma joined, so a
    render logs as::

        12:00:01 DEBUG colocated.rendering: Rendered query Home [operation=Home fragments=CountryData,CapitalData]
    """

    # Only problems are highlighted; render and fetch chatter stays plain.
    WARNING_COLOR = "\033[33m"
    ERROR_COLOR = "\033[31m"
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = (
            use_colors
            and not os.environ.get("NO_COLOR")
            and getattr(sys.stderr, "isatty", lambda: False)()
        )

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_colors and record.levelno >= logging.WARNING:
            color = self.WARNING_COLOR if record.levelno == logging.WARNING else self.ERROR_COLOR
            level = f"{color}{level}{self.RESET}"

        line = f"{self.formatTime(record, self.datefmt)} {level} {record.name}: {record.getMessage()}"

        fields = {**(_context_fields.get() or {}), **(getattr(record, "structured_data", None) or {})}
        if fields:
            line += " [" + " ".join(f"{k}={_field_text(v)}" for k, v in fields.items()) + "]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(str(v) for v in value) or "-"
    if value is None:
        return "-"
    return str(value)


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    include_location: bool = False,
    stream: Any | None = None,
) -> logging.Logger:
    """Configure the ``colocated`` logger hierarchy.

    Args:
        level: Minimum log level (int or name such as 'DEBUG').
        json_format: Emit JSON lines instead of human-readable output.
        include_location: Include file/line/function in JSON output.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The configured root ``colocated`` logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter(include_location=include_location)
    else:
        formatter = HumanReadableFormatter()

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to every log record emitted inside the block.

    Example:
        >>> with log_context(session_id="abc-123"):
        ...     handle.did_fetch()  # logged with session_id
    """
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


def get_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    current = _context_fields.get()
    return dict(current) if current else {}
