"""
Tests for RequestsTransport (requests.Session in a worker thread).
"""

import json

import pytest
import requests
import responses

from onebun_requests.core.requests_transport import (
    RequestsTransport,
    classify_requests_exception,
)
from onebun_requests.core.transport import TransportError, TransportRequest


def test_classify_timeout():
    assert classify_requests_exception(requests.exceptions.ReadTimeout()).timed_out is True


def test_classify_connection_error():
    err = classify_requests_exception(requests.exceptions.ConnectionError("refused"))
    assert err.timed_out is False
    assert err.message.startswith("Connection error")


def test_classify_proxy_error():
    err = classify_requests_exception(requests.exceptions.ProxyError("bad proxy"))
    assert err.message.startswith("Proxy error")


@pytest.mark.asyncio
async def test_send(mock_responses):
    mock_responses.add(
        responses.PUT,
        "https://api.example.com/items/1",
        json={"updated": True},
        status=200,
    )
    transport = RequestsTransport()

    response = await transport.send(
        TransportRequest("PUT", "https://api.example.com/items/1", headers={"X-Team": "core"}, content='{"a": 1}')
    )
    text = await response.read_text()
    await transport.aclose()

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert json.loads(text) == {"updated": True}
    sent = mock_responses.calls[0].request
    assert sent.headers["X-Team"] == "core"
    assert sent.body == b'{"a": 1}'


@pytest.mark.asyncio
async def test_connection_error(mock_responses):
    mock_responses.add(
        responses.GET,
        "https://down.example.com/",
        body=requests.exceptions.ConnectionError("refused"),
    )
    transport = RequestsTransport()

    with pytest.raises(TransportError):
        await transport.send(TransportRequest("GET", "https://down.example.com/"))
    await transport.aclose()


@pytest.mark.asyncio
async def test_external_session_is_kept_open():
    session = requests.Session()
    transport = RequestsTransport(session)

    await transport.aclose()

    assert transport._session is session
    session.close()
