"""Stdout logging setup for lakeblob processes.

Records are rendered either as one JSON object per line or as plain text
followed by ``key=value`` pairs. Both renderings carry the bound logging
context and any remote correlation fields passed through ``extra=``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from packages.lakeblob_shared.config import LoggingSettings

from . import fields
from .context import bind_context, get_context

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_PLAIN_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


def structured_fields(record: logging.LogRecord) -> dict[str, object]:
    """Return context and correlation values attached to ``record``."""
    values: dict[str, object] = dict(getattr(record, "context", None) or {})
    for name in fields.CORRELATION_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            values[name] = value
    return values


class ContextFilter(logging.Filter):
    """Snapshot the bound logging context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        payload.update(structured_fields(record))
        if record.exc_info:
            payload[fields.EXCEPTION] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(fmt=_PLAIN_FORMAT, datefmt=_PLAIN_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        values = structured_fields(record)
        if not values:
            return line
        pairs = " ".join(f"{key}={values[key]}" for key in sorted(values))
        return f"{line} {pairs}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Install one stdout handler on the root logger.

    Calling this again replaces the handler rather than adding a second one.
    ``service`` and ``environment`` are bound into the logging context.
    """
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    bind_context(
        **{fields.SERVICE: service or None, fields.ENVIRONMENT: environment or None}
    )


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)


def configure_logging_from_settings(settings: LoggingSettings) -> None:
    """Apply the ``logging`` settings subtree."""
    configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
    )
