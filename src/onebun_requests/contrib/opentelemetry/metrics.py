"""
OpenTelemetry metrics sink.

One observation per attempt becomes:
- onebun_requests_requests_total (Counter)
- onebun_requests_request_duration_seconds (Histogram)

Attributes: method, route, status_code, controller, action.
"""

from typing import Any, Dict, Optional

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, MeterProvider


class OpenTelemetryMetricsSink:
    """
    MetricsSink that records into an OpenTelemetry meter.

    Args:
        meter_name: Meter name
        meter_provider: Provider (None = global provider)

    Example:
        >>> from opentelemetry.sdk.metrics import MeterProvider
        >>> from opentelemetry.sdk.metrics.export import InMemoryMetricReader
        >>>
        >>> reader = InMemoryMetricReader()
        >>> sink = OpenTelemetryMetricsSink(meter_provider=MeterProvider(metric_readers=[reader]))
        >>> client = HttpClient(metrics_sink=sink)
    """

    def __init__(self, meter_name: str = "onebun_requests", meter_provider: Optional[MeterProvider] = None):
        if meter_provider is not None:
            self.meter = meter_provider.get_meter(meter_name)
        else:
            self.meter = metrics.get_meter(meter_name)

        self.request_counter: Counter = self.meter.create_counter(
            name="onebun_requests_requests_total",
            description="Total number of outbound request attempts",
            unit="requests",
        )

        self.request_duration: Histogram = self.meter.create_histogram(
            name="onebun_requests_request_duration_seconds",
            description="Outbound request attempt duration in seconds",
            unit="s",
        )

    def record_http_request(
        self,
        *,
        method: str,
        route: str,
        status_code: int,
        duration: float,
        controller: str,
        action: str,
    ) -> None:
        attributes: Dict[str, Any] = {
            "method": method.upper(),
            "route": route,
            "status_code": status_code,
            "controller": controller,
            "action": action,
        }
        self.request_counter.add(1, attributes)
        self.request_duration.record(duration, attributes)

    def __repr__(self) -> str:
        return f"OpenTelemetryMetricsSink(meter={self.meter})"
