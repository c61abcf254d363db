"""
Pytest configuration and fixtures for onebun-requests tests.
"""

import pytest
import pytest_asyncio
import responses as responses_lib

from onebun_requests import (
    HttpClient,
    InMemoryMetricsSink,
    RequestsOptions,
    RetryPolicy,
    StaticTraceContext,
)
from onebun_requests.core.logging.config import LoggingConfig


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def fast_retries():
    """Retry policy without real waiting."""
    return RetryPolicy(max_retries=2, delay=0, backoff="fixed", retry_on={500, 502, 503, 504})


@pytest.fixture
def metrics_sink():
    return InMemoryMetricsSink()


@pytest_asyncio.fixture
async def client(base_url, fast_retries, metrics_sink):
    """HttpClient over httpx (mock with respx)."""
    client = HttpClient(
        RequestsOptions(base_url=base_url, retries=fast_retries),
        trace_context=StaticTraceContext(None),
        metrics_sink=metrics_sink,
    )
    yield client
    await client.close()


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig writing JSON lines to a temporary file."""
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "requests.log"),
    )
