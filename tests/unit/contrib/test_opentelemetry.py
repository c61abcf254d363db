"""
Tests for OpenTelemetry integration.

Tests trace id propagation and the metrics sink.
"""

import httpx
import pytest
import respx

# Try to import OpenTelemetry - skip tests if not available
pytest.importorskip("opentelemetry.sdk", reason="OpenTelemetry SDK not installed")

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import TracerProvider

from onebun_requests import HttpClient, RetryPolicy
from onebun_requests.contrib.opentelemetry import OpenTelemetryMetricsSink, OpenTelemetryTraceContext


def collect(reader):
    """name -> list of data points."""
    points = {}
    data = reader.get_metrics_data()
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points.setdefault(metric.name, []).extend(metric.data.data_points)
    return points


@pytest.fixture
def tracer():
    return TracerProvider().get_tracer(__name__)


@pytest.fixture
def metric_reader():
    return InMemoryMetricReader()


@pytest.fixture
def sink(metric_reader):
    return OpenTelemetryMetricsSink(meter_provider=MeterProvider(metric_readers=[metric_reader]))


class TestOpenTelemetryTraceContext:

    def test_no_active_span(self):
        assert OpenTelemetryTraceContext().current_trace_id() is None

    def test_active_span(self, tracer):
        with tracer.start_as_current_span("handle-order") as span:
            trace_id = OpenTelemetryTraceContext().current_trace_id()

        assert trace_id == format(span.get_span_context().trace_id, "032x")
        assert len(trace_id) == 32

    @pytest.mark.asyncio
    @respx.mock
    async def test_header_propagated(self, tracer):
        route = respx.get("https://inventory.internal/items").mock(return_value=httpx.Response(200, json=[]))

        async with HttpClient(base_url="https://inventory.internal", trace_context=OpenTelemetryTraceContext()) as client:
            with tracer.start_as_current_span("handle-order") as span:
                await client.get("/items")

        expected = format(span.get_span_context().trace_id, "032x")
        assert route.calls.last.request.headers["X-Trace-Id"] == expected


class TestOpenTelemetryMetricsSink:

    def test_record(self, sink, metric_reader):
        sink.record_http_request(
            method="get",
            route="https://api.example.com/users",
            status_code=200,
            duration=0.15,
            controller="requests-client",
            action="http-request",
        )

        points = collect(metric_reader)
        counter = points["onebun_requests_requests_total"][0]
        assert counter.value == 1
        assert counter.attributes == {
            "method": "GET",
            "route": "https://api.example.com/users",
            "status_code": 200,
            "controller": "requests-client",
            "action": "http-request",
        }
        histogram = points["onebun_requests_request_duration_seconds"][0]
        assert histogram.count == 1
        assert histogram.sum == pytest.approx(0.15)

    @pytest.mark.asyncio
    @respx.mock
    async def test_one_point_per_attempt(self, sink, metric_reader):
        respx.get("https://api.example.com/flaky").mock(
            side_effect=[httpx.Response(503), httpx.Response(200, json={})]
        )
        policy = RetryPolicy(max_retries=1, delay=0, retry_on={503})

        async with HttpClient(base_url="https://api.example.com", retries=policy, metrics_sink=sink) as client:
            await client.get("/flaky")

        counters = collect(metric_reader)["onebun_requests_requests_total"]
        assert sorted(p.attributes["status_code"] for p in counters) == [200, 503]
        assert all(p.value == 1 for p in counters)
