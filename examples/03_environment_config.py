"""
Environment Configuration and Observability

Loads client options from ONEBUN_REQUESTS_* variables, enables structured
logging and, when installed, OpenTelemetry trace/metrics integration.
"""

import asyncio
import os

from onebun_requests import HttpClient, InMemoryMetricsSink, reset_trace_id, set_trace_id
from onebun_requests.core.env_config import load_from_env, print_config_summary


def load_config():
    print("\n=== Load from environment ===")

    os.environ.setdefault("ONEBUN_REQUESTS_BASE_URL", "https://httpbin.org")
    os.environ.setdefault("ONEBUN_REQUESTS_TIMEOUT", "5000")
    os.environ.setdefault("ONEBUN_REQUESTS_RETRY_ON", "[502, 503, 504]")
    os.environ.setdefault("ONEBUN_REQUESTS_LOG_ENABLED", "true")
    os.environ.setdefault("ONEBUN_REQUESTS_LOG_FORMAT", "json")

    options = load_from_env()
    print_config_summary(options)
    return options


async def traced_request(options):
    print("\n=== Trace id and metrics ===")

    sink = InMemoryMetricsSink()
    async with HttpClient(options, metrics_sink=sink) as client:
        token = set_trace_id("4bf92f3577b34da6a3ce929d0e0e4736")
        try:
            result = await client.get("/headers")
        finally:
            reset_trace_id(token)

    if result.success:
        print(f"Echoed trace header: {result.data['headers'].get('X-Trace-Id')}")
    print(f"Metrics: {sink.observations}")


async def opentelemetry_request(options):
    print("\n=== OpenTelemetry ===")

    try:
        from opentelemetry.sdk.trace import TracerProvider
        from onebun_requests.contrib.opentelemetry import OpenTelemetryMetricsSink, OpenTelemetryTraceContext
    except ImportError:
        print("Install onebun-requests[otel] to run this example")
        return

    tracer = TracerProvider().get_tracer(__name__)
    async with HttpClient(
        options,
        trace_context=OpenTelemetryTraceContext(),
        metrics_sink=OpenTelemetryMetricsSink(),
    ) as client:
        with tracer.start_as_current_span("example"):
            result = await client.get("/get")
    print(f"success={result.success}")


async def main():
    options = load_config()
    await traced_request(options)
    await opentelemetry_request(options)


if __name__ == "__main__":
    asyncio.run(main())
