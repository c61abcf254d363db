"""Trace id from the active OpenTelemetry span."""

from typing import Optional

from opentelemetry import trace


class OpenTelemetryTraceContext:
    """
    TraceContextReader backed by ``trace.get_current_span()``.

    Returns the 32-char lowercase hex trace id of the current span, or
    None when there is no valid span.

    Example:
        >>> tracer = trace.get_tracer(__name__)
        >>> with tracer.start_as_current_span("handle-order"):
        ...     await client.get("/inventory")  # X-Trace-Id propagated
    """

    def current_trace_id(self) -> Optional[str]:
        span_context = trace.get_current_span().get_span_context()
        if not span_context.is_valid:
            return None
        return format(span_context.trace_id, "032x")

    def __repr__(self) -> str:
        return "OpenTelemetryTraceContext()"
