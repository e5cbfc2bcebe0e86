"""Context propagation helpers for structured logging.

Fields bound here are attached to every record emitted on the current thread
or task, so correlation identifiers need not be repeated at each call site.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar(
    "lakeblob_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a shallow copy of the current logging context."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind values into the current context, skipping ``None``."""
    merged = _merged(_LOG_CONTEXT.get(), values)
    _LOG_CONTEXT.set(merged)


def clear_context(*keys: str) -> None:
    """Clear selected keys, or the entire context when none are given."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    _LOG_CONTEXT.set(
        {key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys}
    )


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Temporarily bind logging context for the duration of a block."""
    token = _LOG_CONTEXT.set(_merged(_LOG_CONTEXT.get(), values))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def _merged(current: Mapping[str, str], values: Mapping[str, object]) -> dict[str, str]:
    """Return ``current`` updated with stringified non-``None`` values."""
    merged = dict(current)
    for key, value in values.items():
        if value is None:
            continue
        merged[str(key)] = str(value)
    return merged
