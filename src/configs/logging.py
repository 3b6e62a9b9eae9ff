"""Logging setup with search context injection.

Features:
- console handler, text or JSON lines
- optional log file
- context injection (search_id/source_id/stage) through a LoggerAdapter
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONTEXT_FIELDS = ("search_id", "source_id", "stage")

# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        base: dict[str, Any] = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in CONTEXT_FIELDS:
            if getattr(record, k, None) is not None:
                base[k] = getattr(record, k)

        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)

        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            base["payload"] = payload

        return json.dumps(base, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Format log records as human-readable text."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [record.levelname, record.name]

        labels = {"search_id": "search", "source_id": "source", "stage": "stage"}
        ctx = [
            f"{labels[k]}={getattr(record, k)}"
            for k in CONTEXT_FIELDS
            if getattr(record, k, None)
        ]
        if ctx:
            parts.append("[" + " ".join(ctx) + "]")

        parts.append(record.getMessage())
        s = " ".join(parts)

        if record.exc_info:
            s += "\n" + self.formatException(record.exc_info)

        return s


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    """Configure logging behavior for the service."""

    level: str = "INFO"
    json_logs: bool = False
    log_file: Path | None = None


def setup_logging(
    level: str = "INFO",
    json_logs: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    Configure the root logger once.

    Calling again replaces the handlers installed by a previous call, so the
    level or format can be changed at runtime without duplicating output.
    """
    options = LoggingOptions(level=level, json_logs=json_logs, log_file=log_file)
    root = logging.getLogger()
    root.setLevel(getattr(logging, options.level.upper(), logging.INFO))

    for h in list(root.handlers):
        if getattr(h, "_local_events_handler", False):
            root.removeHandler(h)

    fmt = JsonFormatter() if options.json_logs else TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if options.log_file is not None:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(options.log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(root.level)
        handler.setFormatter(fmt)
        handler._local_events_handler = True
        root.addHandler(handler)

    return root


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """Inject context fields into log records."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        merged = dict(self.extra)
        merged.update(extra)
        kwargs["extra"] = merged
        return msg, kwargs


def with_context(
    logger: logging.Logger,
    *,
    search_id: int | str | None = None,
    source_id: str | None = None,
    stage: str | None = None,
) -> ContextAdapter:
    """Create a context adapter carrying search, source and stage info."""
    extra: dict[str, Any] = {}
    if search_id is not None:
        extra["search_id"] = search_id
    if source_id:
        extra["source_id"] = source_id
    if stage:
        extra["stage"] = stage
    return ContextAdapter(logger, extra)
