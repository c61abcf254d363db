"""
OpenTelemetry integration for onebun-requests.

Requires opentelemetry-api (and an SDK to export anything).

Installation:
    pip install onebun-requests[otel]

Example:
    >>> from onebun_requests import HttpClient
    >>> from onebun_requests.contrib.opentelemetry import (
    ...     OpenTelemetryMetricsSink,
    ...     OpenTelemetryTraceContext,
    ... )
    >>>
    >>> client = HttpClient(
    ...     base_url="https://users.internal",
    ...     trace_context=OpenTelemetryTraceContext(),
    ...     metrics_sink=OpenTelemetryMetricsSink(),
    ... )
    >>> await client.get("/users")  # X-Trace-Id = current span's trace id
"""

try:
    import opentelemetry  # noqa: F401
except ImportError as e:
    raise ImportError(
        "OpenTelemetry support requires opentelemetry-api. "
        "Install with: pip install onebun-requests[otel]"
    ) from e

from .context import OpenTelemetryTraceContext
from .metrics import OpenTelemetryMetricsSink

__all__ = [
    "OpenTelemetryTraceContext",
    "OpenTelemetryMetricsSink",
]
