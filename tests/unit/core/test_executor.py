"""
Tests for RequestExecutor: build, auth, send, parse and retry decisions.
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, Mock, patch

from onebun_requests.auth import ApiKeyAuth, ApiKeyLocation, BearerAuth, CustomAuth
from onebun_requests.core.config import RequestsOptions, RetryPolicy
from onebun_requests.core.context import StaticTraceContext
from onebun_requests.core.exceptions import (
    AUTH_ERROR,
    FETCH_ERROR,
    HTTP_ERROR,
    RETRY_CALLBACK_ERROR,
    ConfigurationError,
)
from onebun_requests.core.executor import RequestExecutor, serialize_body
from onebun_requests.core.metrics import InMemoryMetricsSink
from onebun_requests.core.models import FailureResult, RequestConfig, SuccessResult
from onebun_requests.core.transport import TransportError


class FakeResponse:

    def __init__(self, status_code=200, body=None, content_type="application/json"):
        self.status_code = status_code
        self.reason_phrase = ""
        self.headers = {"content-type": content_type}
        self._text = "" if body is None else (body if isinstance(body, str) else json.dumps(body))

    async def read_text(self):
        return self._text


class FakeTransport:
    """Scripted transport: each item is a FakeResponse, an exception or a coroutine function."""

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    async def send(self, request):
        self.requests.append(request)
        item = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item()
        return item

    async def aclose(self):
        pass


def make_executor(transport, *, retries=None, trace_id=None, metrics_sink=None, **options):
    policy = retries if retries is not None else RetryPolicy(max_retries=0)
    return RequestExecutor(
        RequestsOptions(base_url="https://api.example.com", retries=policy, **options),
        transport,
        trace_context=StaticTraceContext(trace_id),
        metrics_sink=metrics_sink,
    )


def no_wait_policy(**kwargs):
    kwargs.setdefault("delay", 0)
    kwargs.setdefault("backoff", "fixed")
    return RetryPolicy(**kwargs)


class TestSuccess:

    @pytest.mark.asyncio
    async def test_success_result(self):
        transport = FakeTransport(FakeResponse(200, {"id": 1}))
        result = await make_executor(transport).execute(RequestConfig("GET", "/users/1"))

        assert isinstance(result, SuccessResult)
        assert result.data == {"id": 1}
        assert result.url == "https://api.example.com/users/1"
        assert result.method == "GET"
        assert result.retry_count == 0
        assert result.duration >= 0

    @pytest.mark.asyncio
    async def test_success_after_retry(self):
        transport = FakeTransport(FakeResponse(503), FakeResponse(200, {"ok": True}))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=3, retry_on={503}))

        result = await executor.execute(RequestConfig("GET", "/flaky"))

        assert result.success is True
        assert result.retry_count == 1
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_not_request_config(self):
        with pytest.raises(ConfigurationError):
            await make_executor(FakeTransport()).execute({"method": "GET", "url": "/"})


class TestRetries:

    @pytest.mark.asyncio
    async def test_retry_budget_exhausted(self):
        transport = FakeTransport(FakeResponse(503))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=1, retry_on={503}))

        result = await executor.execute(RequestConfig("GET", "/down"))

        assert isinstance(result, FailureResult)
        assert result.error.code == HTTP_ERROR
        assert result.error.status_code == 503
        assert result.retry_count == 1
        assert len(transport.requests) == 2

    @pytest.mark.asyncio
    async def test_status_not_in_retry_on(self):
        transport = FakeTransport(FakeResponse(404, {"detail": "missing"}))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=3, retry_on={503}))

        result = await executor.execute(RequestConfig("GET", "/missing"))

        assert result.success is False
        assert result.retry_count == 0
        assert result.error.details == {"detail": "missing"}
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_errors_are_chained(self):
        transport = FakeTransport(FakeResponse(502), FakeResponse(503), FakeResponse(504))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=2, retry_on={502, 503, 504}))

        result = await executor.execute(RequestConfig("GET", "/chain"))

        assert [e.status_code for e in result.error.chain()] == [504, 503, 502]

    @pytest.mark.asyncio
    async def test_per_call_retries_override_client(self):
        transport = FakeTransport(FakeResponse(500))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=5, retry_on={500}))

        result = await executor.execute(RequestConfig("GET", "/x", retries={"max_retries": 0}))

        assert result.retry_count == 0
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_backoff_delays(self):
        transport = FakeTransport(FakeResponse(503))
        policy = RetryPolicy(max_retries=3, delay=100, backoff="exponential", factor=2, retry_on={503})
        executor = make_executor(transport, retries=policy)

        with patch("onebun_requests.core.retry_engine.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await executor.execute(RequestConfig("GET", "/x"))

        assert [c.args[0] for c in sleep.await_args_list] == [0.1, 0.2, 0.4]

    @pytest.mark.asyncio
    async def test_on_retry_called_with_error_and_attempt(self):
        calls = []
        transport = FakeTransport(FakeResponse(503), FakeResponse(503), FakeResponse(200, {}))
        policy = no_wait_policy(max_retries=3, retry_on={503}, on_retry=lambda e, n: calls.append((e.status_code, n)))

        await make_executor(transport, retries=policy).execute(RequestConfig("GET", "/x"))

        assert calls == [(503, 1), (503, 2)]

    @pytest.mark.asyncio
    async def test_async_on_retry_is_awaited(self):
        on_retry = AsyncMock()
        transport = FakeTransport(FakeResponse(503), FakeResponse(200, {}))
        policy = no_wait_policy(max_retries=1, retry_on={503}, on_retry=on_retry)

        await make_executor(transport, retries=policy).execute(RequestConfig("GET", "/x"))

        on_retry.assert_awaited_once()
        assert on_retry.await_args.args[1] == 1

    @pytest.mark.asyncio
    async def test_failing_on_retry_stops_retries(self):
        transport = FakeTransport(FakeResponse(503))
        policy = no_wait_policy(max_retries=3, retry_on={503}, on_retry=Mock(side_effect=RuntimeError("hook broke")))

        result = await make_executor(transport, retries=policy).execute(RequestConfig("GET", "/x"))

        assert result.error.code == RETRY_CALLBACK_ERROR
        assert result.error.cause.code == HTTP_ERROR
        assert "hook broke" in result.error.message
        assert len(transport.requests) == 1


class TestTransportFailures:

    @pytest.mark.asyncio
    async def test_transport_error_is_fetch_error(self):
        transport = FakeTransport(TransportError("Connection error: refused"))
        result = await make_executor(transport).execute(RequestConfig("GET", "/x"))

        assert result.error.code == FETCH_ERROR
        assert result.error.status_code is None
        assert result.error.timed_out is False

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_fetch_error(self):
        transport = FakeTransport(RuntimeError("driver bug"))
        result = await make_executor(transport).execute(RequestConfig("GET", "/x"))

        assert result.error.code == FETCH_ERROR
        assert "driver bug" in result.error.message

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow():
            await asyncio.sleep(5)

        transport = FakeTransport(slow)
        result = await make_executor(transport).execute(RequestConfig("GET", "/slow", timeout=20))

        assert result.error.code == FETCH_ERROR
        assert result.error.timed_out is True

    @pytest.mark.asyncio
    async def test_network_errors_not_retried_by_default(self):
        transport = FakeTransport(TransportError("refused"))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=3))

        result = await executor.execute(RequestConfig("GET", "/x"))

        assert result.retry_count == 0
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_network_errors_retried_when_enabled(self):
        transport = FakeTransport(TransportError("refused"), FakeResponse(200, {"ok": 1}))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=3, retry_on_network_error=True))

        result = await executor.execute(RequestConfig("GET", "/x"))

        assert result.success is True
        assert result.retry_count == 1


class TestRequestBuilding:

    @pytest.mark.asyncio
    async def test_header_precedence(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(
            transport,
            trace_id="trace-123",
            headers={"Accept": "text/plain", "X-Client": "client", "X-Trace-Id": "client-trace"},
        )

        await executor.execute(RequestConfig("GET", "/x", headers={"X-Client": "call", "X-Call": "1"}))

        headers = transport.requests[0].headers
        assert headers["User-Agent"] == "OneBun-Requests/1.0"
        assert headers["Content-Type"] == "application/json"
        assert headers["Accept"] == "text/plain"
        assert headers["X-Client"] == "call"
        assert headers["X-Call"] == "1"
        assert headers["X-Trace-Id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_header_override_ignores_case(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport, headers={"accept": "text/csv"})

        await executor.execute(
            RequestConfig("POST", "/x", data="plain", headers={"content-type": "text/plain", "ACCEPT": "text/html"})
        )

        headers = transport.requests[0].headers
        assert [k for k in headers if k.lower() == "content-type"] == ["content-type"]
        assert headers["content-type"] == "text/plain"
        assert [k for k in headers if k.lower() == "accept"] == ["ACCEPT"]
        assert headers["ACCEPT"] == "text/html"

    @pytest.mark.asyncio
    async def test_trace_id_replaces_lowercase_header(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport, trace_id="trace-123", headers={"x-trace-id": "client-trace"})

        await executor.execute(RequestConfig("GET", "/x", headers={"X-TRACE-ID": "call-trace"}))

        headers = transport.requests[0].headers
        assert [k for k in headers if k.lower() == "x-trace-id"] == ["X-Trace-Id"]
        assert headers["X-Trace-Id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_tracing_disabled_per_call(self):
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, trace_id="trace-123").execute(RequestConfig("GET", "/x", tracing=False))
        assert "X-Trace-Id" not in transport.requests[0].headers

    @pytest.mark.asyncio
    async def test_tracing_disabled_on_client(self):
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, trace_id="trace-123", tracing=False).execute(RequestConfig("GET", "/x"))
        assert "X-Trace-Id" not in transport.requests[0].headers

    @pytest.mark.asyncio
    async def test_failing_trace_reader_is_ignored(self):
        reader = Mock()
        reader.current_trace_id.side_effect = RuntimeError("no tracer")
        transport = FakeTransport(FakeResponse(200, {}))
        executor = RequestExecutor(RequestsOptions(), transport, trace_context=reader)

        result = await executor.execute(RequestConfig("GET", "https://api.example.com/x"))

        assert result.success is True
        assert "X-Trace-Id" not in transport.requests[0].headers

    @pytest.mark.asyncio
    async def test_json_body_for_post(self):
        transport = FakeTransport(FakeResponse(201, {}))
        await make_executor(transport).execute(RequestConfig("POST", "/users", data={"name": "alice"}))
        assert json.loads(transport.requests[0].content) == {"name": "alice"}

    @pytest.mark.asyncio
    async def test_no_body_for_get(self):
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport).execute(RequestConfig("GET", "/users", data={"ignored": True}))
        assert transport.requests[0].content is None

    def test_serialize_body(self):
        assert serialize_body("raw text") == "raw text"
        assert serialize_body(b"\x00\x01") == b"\x00\x01"
        assert serialize_body([1, 2]) == "[1, 2]"
        assert serialize_body(None) is None

    @pytest.mark.asyncio
    async def test_timeout_precedence(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport, timeout=4000)

        await executor.execute(RequestConfig("GET", "/a", timeout=1500))
        await executor.execute(RequestConfig("GET", "/b"))

        assert [r.timeout for r in transport.requests] == [1.5, 4.0]

    @pytest.mark.asyncio
    async def test_default_timeout_when_client_has_none(self):
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, timeout=None).execute(RequestConfig("GET", "/a"))
        assert transport.requests[0].timeout == 30.0


class TestAuth:

    @pytest.mark.asyncio
    async def test_client_auth(self):
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, auth=BearerAuth("client-token")).execute(RequestConfig("GET", "/x"))
        assert transport.requests[0].headers["Authorization"] == "Bearer client-token"

    @pytest.mark.asyncio
    async def test_call_auth_overrides_client_auth(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport, auth=BearerAuth("client-token"))

        await executor.execute(RequestConfig("GET", "/x", auth=BearerAuth("call-token")))

        assert transport.requests[0].headers["Authorization"] == "Bearer call-token"

    @pytest.mark.asyncio
    async def test_auth_header_replaces_lowercase_header(self):
        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport)

        await executor.execute(
            RequestConfig("GET", "/x", headers={"authorization": "stale"}, auth=BearerAuth("fresh"))
        )

        headers = transport.requests[0].headers
        assert [k for k in headers if k.lower() == "authorization"] == ["Authorization"]
        assert headers["Authorization"] == "Bearer fresh"

    @pytest.mark.asyncio
    async def test_query_api_key_lands_in_url(self):
        transport = FakeTransport(FakeResponse(200, {}))
        auth = ApiKeyAuth("api_key", "k-1", location=ApiKeyLocation.QUERY)

        await make_executor(transport, auth=auth).execute(RequestConfig("GET", "/items", query={"page": 2}))

        assert transport.requests[0].url == "https://api.example.com/items?page=2&api_key=k-1"

    @pytest.mark.asyncio
    async def test_auth_failure_is_terminal(self):
        def interceptor(config):
            raise RuntimeError("vault unavailable")

        transport = FakeTransport(FakeResponse(200, {}))
        executor = make_executor(transport, retries=no_wait_policy(max_retries=3, retry_on={401}))

        result = await executor.execute(RequestConfig("GET", "/x", auth=CustomAuth(interceptor=interceptor)))

        assert result.error.code == AUTH_ERROR
        assert result.error.status_code == 401
        assert result.retry_count == 0
        assert transport.requests == []


class TestMetrics:

    @pytest.mark.asyncio
    async def test_one_observation_per_attempt(self):
        sink = InMemoryMetricsSink()
        transport = FakeTransport(FakeResponse(503), FakeResponse(200, {}))
        executor = make_executor(transport, metrics_sink=sink, retries=no_wait_policy(max_retries=1, retry_on={503}))

        await executor.execute(RequestConfig("GET", "/x"))

        assert [o["status_code"] for o in sink.observations] == [503, 200]
        observation = sink.observations[1]
        assert observation["method"] == "GET"
        assert observation["route"] == "https://api.example.com/x"
        assert observation["controller"] == "requests-client"
        assert observation["action"] == "http-request"
        assert observation["duration"] < 5

    @pytest.mark.asyncio
    async def test_route_excludes_query_api_key(self):
        sink = InMemoryMetricsSink()
        transport = FakeTransport(FakeResponse(200, {}))
        auth = ApiKeyAuth("api_key", "k-secret", location=ApiKeyLocation.QUERY)

        await make_executor(transport, auth=auth, metrics_sink=sink).execute(
            RequestConfig("GET", "/items", query={"page": 2})
        )

        assert transport.requests[0].url == "https://api.example.com/items?page=2&api_key=k-secret"
        assert sink.observations[0]["route"] == "https://api.example.com/items?page=2"
        assert "k-secret" not in str(sink.observations)

    @pytest.mark.asyncio
    async def test_fetch_error_recorded_as_zero(self):
        sink = InMemoryMetricsSink()
        transport = FakeTransport(TransportError("refused"))
        await make_executor(transport, metrics_sink=sink).execute(RequestConfig("GET", "/x"))
        assert sink.observations[0]["status_code"] == 0

    @pytest.mark.asyncio
    async def test_metrics_disabled_per_call(self):
        sink = InMemoryMetricsSink()
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, metrics_sink=sink).execute(RequestConfig("GET", "/x", metrics=False))
        assert sink.observations == []

    @pytest.mark.asyncio
    async def test_metrics_disabled_on_client(self):
        sink = InMemoryMetricsSink()
        transport = FakeTransport(FakeResponse(200, {}))
        await make_executor(transport, metrics_sink=sink, metrics=False).execute(RequestConfig("GET", "/x"))
        assert sink.observations == []

    @pytest.mark.asyncio
    async def test_failing_sink_does_not_fail_request(self):
        sink = Mock()
        sink.record_http_request.side_effect = RuntimeError("statsd down")
        transport = FakeTransport(FakeResponse(200, {"ok": True}))

        result = await make_executor(transport, metrics_sink=sink).execute(RequestConfig("GET", "/x"))

        assert result.success is True
        sink.record_http_request.assert_called_once()
