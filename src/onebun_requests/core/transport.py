# src/onebun_requests/core/transport.py
"""
Транспортный слой на базе httpx.

Движок не знает про httpx напрямую: он работает с протоколом Transport,
который отправляет запрос и возвращает TransportResponse с ленивым чтением
тела. HttpxTransport - реализация по умолчанию.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Union

import httpx

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """
    Сбой на уровне транспорта (DNS, connect, reset, таймаут).

    Args:
        message: Сообщение
        timed_out: True если сработал таймаут
    """

    def __init__(self, message: str, timed_out: bool = False):
        self.message = message
        self.timed_out = timed_out
        super().__init__(message)


@dataclass(frozen=True)
class TransportRequest:
    """Один HTTP запрос для транспорта."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[Union[str, bytes]] = None
    timeout: float = 30.0  # секунды


class TransportResponse(Protocol):
    """Ответ транспорта: статус и заголовки сразу, тело - по запросу."""

    status_code: int
    reason_phrase: str
    headers: Dict[str, str]  # ключи в нижнем регистре

    async def read_text(self) -> str:
        ...


class Transport(Protocol):
    """Асинхронный транспорт."""

    async def send(self, request: TransportRequest) -> TransportResponse:
        ...

    async def aclose(self) -> None:
        ...


def classify_httpx_exception(exc: Exception) -> TransportError:
    """
    Конвертировать исключения httpx в TransportError.

    Examples:
        >>> err = classify_httpx_exception(httpx.ReadTimeout("timed out"))
        >>> err.timed_out
        True
    """
    if isinstance(exc, httpx.TimeoutException):
        return TransportError(f"Request timeout: {exc}", timed_out=True)
    elif isinstance(exc, httpx.ConnectError):
        return TransportError(f"Connection error: {exc}")
    elif isinstance(exc, httpx.TransportError):
        return TransportError(f"Transport error: {exc}")
    else:
        return TransportError(f"Request failed: {exc}")


class HttpxResponse:
    """TransportResponse поверх streamed httpx.Response."""

    def __init__(self, response: httpx.Response):
        self._response = response
        self.status_code = response.status_code
        self.reason_phrase = response.reason_phrase
        self.headers = {key.lower(): value for key, value in response.headers.items()}

    async def read_text(self) -> str:
        try:
            await self._response.aread()
            return self._response.text
        finally:
            await self._response.aclose()


class HttpxTransport:
    """
    Транспорт на httpx.AsyncClient.

    Клиент создаётся лениво; переданный снаружи клиент не закрывается.

    Example:
        >>> transport = HttpxTransport()
        >>> response = await transport.send(TransportRequest("GET", "https://api.example.com"))
        >>> text = await response.read_text()
        >>> await transport.aclose()
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, *, verify: bool = True, follow_redirects: bool = True):
        self._client = client
        self._owns_client = client is None
        self._verify = verify
        self._follow_redirects = follow_redirects

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self._verify,
                follow_redirects=self._follow_redirects,
            )
        return self._client

    async def send(self, request: TransportRequest) -> HttpxResponse:
        client = self._get_client()
        http_request = client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            timeout=httpx.Timeout(request.timeout),
        )
        try:
            response = await client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            raise classify_httpx_exception(e) from e
        return HttpxResponse(response)

    async def aclose(self) -> None:
        """Закрыть клиент и освободить ресурсы."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
