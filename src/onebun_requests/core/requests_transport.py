# src/onebun_requests/core/requests_transport.py
"""
Транспорт на базе requests.

requests - синхронная библиотека, поэтому каждый запрос выполняется в
worker thread (asyncio.to_thread), event loop не блокируется. Полезно, когда
приложение уже настроило requests.Session (прокси, сертификаты, адаптеры).
"""

import asyncio
import logging
import threading
from typing import Dict, Optional

import requests

from .transport import TransportError, TransportRequest

logger = logging.getLogger(__name__)


def classify_requests_exception(exc: Exception) -> TransportError:
    """
    Конвертировать requests.exceptions в TransportError.

    Examples:
        >>> err = classify_requests_exception(requests.exceptions.Timeout())
        >>> err.timed_out
        True
    """
    if isinstance(exc, requests.exceptions.Timeout):
        return TransportError(f"Request timeout: {exc}", timed_out=True)
    elif isinstance(exc, requests.exceptions.ProxyError):
        return TransportError(f"Proxy error: {exc}")
    elif isinstance(exc, requests.exceptions.ConnectionError):
        return TransportError(f"Connection error: {exc}")
    else:
        return TransportError(f"Request failed: {exc}")


class RequestsResponse:
    """TransportResponse поверх requests.Response (тело уже прочитано)."""

    def __init__(self, response: requests.Response):
        self._response = response
        self.status_code = response.status_code
        self.reason_phrase = response.reason or ""
        self.headers: Dict[str, str] = {key.lower(): value for key, value in response.headers.items()}

    async def read_text(self) -> str:
        return self._response.text


class RequestsTransport:
    """
    Транспорт на requests.Session.

    Args:
        session: Готовая сессия (не закрывается транспортом)

    Example:
        >>> session = requests.Session()
        >>> session.proxies = {"https": "http://proxy:8080"}
        >>> client = HttpClient(transport=RequestsTransport(session))
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self._session = session
        self._owns_session = session is None
        self._lock = threading.Lock()

    def _get_session(self) -> requests.Session:
        with self._lock:
            if self._session is None:
                self._session = requests.Session()
            return self._session

    def _send_sync(self, request: TransportRequest) -> requests.Response:
        session = self._get_session()
        data = request.content.encode("utf-8") if isinstance(request.content, str) else request.content
        try:
            return session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=data,
                timeout=request.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise classify_requests_exception(e) from e

    async def send(self, request: TransportRequest) -> RequestsResponse:
        response = await asyncio.to_thread(self._send_sync, request)
        return RequestsResponse(response)

    async def aclose(self) -> None:
        with self._lock:
            if self._session is not None and self._owns_session:
                self._session.close()
                self._session = None
