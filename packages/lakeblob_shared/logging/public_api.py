"""Instrumentation for public blob backend operations.

``public_api_instrumented`` wraps one backend method and fans invocation and
completion events out to a set of concerns. Logging is always available; a
tracing concern is added automatically when ``opentelemetry`` is installed.
Concern failures are logged and never change the outcome of the call.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from functools import lru_cache, wraps
from time import perf_counter
from typing import Any, Callable, Mapping, Protocol, Sequence

from packages.lakeblob_shared.errors import exception_category, exception_to_errno

from . import fields
from .context import log_context

_TRACER_NAME = "lakeblob.public_api"


@dataclass(frozen=True)
class InvocationContext:
    """One call of a public backend operation."""

    component_id: str
    api_name: str
    references: Mapping[str, str]

    @property
    def span_name(self) -> str:
        return f"public_api.{self.component_id}.{self.api_name}"

    def log_fields(self) -> dict[str, object]:
        return {
            fields.COMPONENT_ID: self.component_id,
            fields.API_NAME: self.api_name,
            **self.references,
        }


@dataclass(frozen=True)
class CompletionContext:
    """Outcome of one call; ``errno`` is set only for failures."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str]
    error_categories: list[str]
    errno: int | None = None


class PublicApiInstrumentationConcern(Protocol):
    """Hooks one concern implements to observe public operations."""

    def on_invocation(self, context: InvocationContext) -> None:
        """Observe the start of one call."""

    def on_completion(self, context: CompletionContext) -> None:
        """Observe the end of one call."""


class PublicApiLoggingConcern:
    """Logs each call: debug on entry, info on success, warning on failure."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        values = context.log_fields()
        values[fields.EVENT] = fields.PUBLIC_API_INVOCATION_EVENT
        with log_context(values):
            self._logger.debug("blob operation started")

    def on_completion(self, context: CompletionContext) -> None:
        values = context.invocation.log_fields()
        values[fields.EVENT] = fields.PUBLIC_API_COMPLETION_EVENT
        values[fields.SUCCESS] = context.success
        values[fields.DURATION_MS] = context.duration_ms
        if not context.success:
            values[fields.ERRORS] = context.errors
            values[fields.ERROR_CATEGORY] = ",".join(context.error_categories)
            values[fields.ERRNO] = context.errno
        with log_context(values):
            if context.success:
                self._logger.info("blob operation completed")
            else:
                self._logger.warning("blob operation failed")


class _Span(Protocol):
    def set_attribute(self, key: str, value: object) -> None: ...

    def set_status(self, status: object) -> None: ...

    def end(self) -> None: ...


class _Tracer(Protocol):
    def start_span(self, name: str) -> _Span: ...


class PublicApiTracingConcern:
    """Opens one span per call and closes it on completion.

    Spans of nested instrumented calls are kept on a per-context stack, so
    each completion closes the span its own invocation opened.
    """

    def __init__(self, *, tracer: _Tracer) -> None:
        self._tracer = tracer
        self._open_spans: ContextVar[tuple[_Span, ...]] = ContextVar(
            "lakeblob_public_api_spans", default=()
        )

    def on_invocation(self, context: InvocationContext) -> None:
        span = self._tracer.start_span(context.span_name)
        span.set_attribute(fields.COMPONENT_ID, context.component_id)
        span.set_attribute(fields.API_NAME, context.api_name)
        for key, value in context.references.items():
            span.set_attribute(f"reference.{key}", value)
        self._open_spans.set((*self._open_spans.get(), span))

    def on_completion(self, context: CompletionContext) -> None:
        spans = self._open_spans.get()
        if not spans:
            return
        span = spans[-1]
        self._open_spans.set(spans[:-1])

        span.set_attribute(fields.SUCCESS, context.success)
        span.set_attribute(fields.DURATION_MS, context.duration_ms)
        if not context.success:
            span.set_attribute(fields.ERROR_CATEGORY, ",".join(context.error_categories))
            _mark_span_failed(span)
        span.end()


def public_api_instrumented(
    *,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
    concerns: Sequence[PublicApiInstrumentationConcern] | None = None,
    logger: Any | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Instrument one public backend operation.

    ``id_fields`` names keyword arguments (object keys, prefixes) copied onto
    every event for the call. Exceptions are re-raised unchanged after the
    completion event records their category and errno.
    """
    resolved: list[PublicApiInstrumentationConcern] = []
    if logger is not None:
        resolved.append(PublicApiLoggingConcern(logger=logger))
    resolved.extend(concerns or ())
    tracing = _default_tracing_concern()
    if tracing is not None:
        resolved.append(tracing)
    if not resolved:
        raise ValueError("public_api_instrumented requires at least one concern")
    active = tuple(resolved)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = InvocationContext(
                component_id=component_id,
                api_name=name,
                references={
                    field: str(kwargs[field])
                    for field in id_fields
                    if kwargs.get(field) not in (None, "")
                },
            )
            _notify(active, "on_invocation", invocation, invocation, logger)
            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                completion = CompletionContext(
                    invocation=invocation,
                    success=False,
                    duration_ms=_elapsed_ms(started),
                    errors=[f"{type(exc).__name__}: {exc}"],
                    error_categories=[exception_category(exc)],
                    errno=exception_to_errno(exc),
                )
                _notify(active, "on_completion", completion, invocation, logger)
                raise
            completion = CompletionContext(
                invocation=invocation,
                success=True,
                duration_ms=_elapsed_ms(started),
                errors=[],
                error_categories=[],
            )
            _notify(active, "on_completion", completion, invocation, logger)
            return result

        return wrapper

    return decorator


def _notify(
    concerns: Sequence[PublicApiInstrumentationConcern],
    hook: str,
    context: InvocationContext | CompletionContext,
    invocation: InvocationContext,
    logger: Any | None,
) -> None:
    """Call ``hook`` on every concern; a failing concern is logged and skipped."""
    for concern in concerns:
        try:
            getattr(concern, hook)(context)
        except Exception as exc:  # noqa: BLE001
            if logger is None:
                continue
            values = invocation.log_fields()
            values.update(
                {
                    fields.EVENT: fields.PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT,
                    fields.STAGE: hook,
                    fields.CONCERN: type(concern).__name__,
                    fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
                }
            )
            with log_context(values):
                logger.warning("blob operation instrumentation failed")


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 3)


def _mark_span_failed(span: _Span) -> None:
    try:
        from opentelemetry.trace import Status, StatusCode
    except ImportError:
        return
    span.set_status(Status(StatusCode.ERROR))


@lru_cache(maxsize=1)
def _default_tracing_concern() -> PublicApiTracingConcern | None:
    """Return an OpenTelemetry tracing concern when the API is installed."""
    try:
        from opentelemetry import trace
    except ImportError:
        return None
    return PublicApiTracingConcern(tracer=trace.get_tracer(_TRACER_NAME))
