# src/onebun_requests/service.py
"""
RequestsService - "бросающий" интерфейс поверх HttpClient.

Ответы в стандартизированном конверте {"success": true, "result": ...}
разворачиваются до result, ошибки выбрасываются как RequestError.

Также модуль содержит короткие функции (get, post, ...) для разовых
запросов с дефолтными опциями.
"""

import logging
from typing import Any, Mapping, Optional

from .client import HttpClient, RequestTask
from .core.config import RequestsOptions
from .core.context import TraceContextReader
from .core.metrics import MetricsSink
from .core.models import RequestConfig, RequestResult, is_success_response
from .core.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


def unwrap_response(data: Any) -> Any:
    """Развернуть success envelope; остальные данные вернуть как есть."""
    if is_success_response(data):
        return data["result"]
    return data


class RequestsService:
    """
    Сервис запросов для прикладного кода.

    Все методы возвращают данные или выбрасывают RequestError.

    Args:
        options: Дефолтные опции (None = RequestsOptions())
        transport: Общий транспорт (None = HttpxTransport, закрывается сервисом)
        trace_context: Источник trace id
        metrics_sink: Приёмник метрик

    Example:
        >>> service = RequestsService(RequestsOptions(base_url="https://users.internal"))
        >>> try:
        ...     user = await service.get("/users/42")
        ... except RequestError as e:
        ...     print(e.code, e.status_code)
        >>> await service.close()
    """

    def __init__(
        self,
        options: Optional[RequestsOptions] = None,
        *,
        transport: Optional[Transport] = None,
        trace_context: Optional[TraceContextReader] = None,
        metrics_sink: Optional[MetricsSink] = None,
    ):
        self._options = options or RequestsOptions()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport()
        self._trace_context = trace_context
        self._metrics_sink = metrics_sink
        self._client = self._build_client(self._options)

    def _build_client(self, options: RequestsOptions) -> HttpClient:
        # Транспорт принадлежит сервису, клиент его не закрывает
        return HttpClient(
            options,
            transport=self._transport,
            trace_context=self._trace_context,
            metrics_sink=self._metrics_sink,
        )

    async def __aenter__(self) -> "RequestsService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.close()
        if self._owns_transport:
            await self._transport.aclose()

    # ==================== Конфигурация ====================

    def get_config(self) -> RequestsOptions:
        """Текущие опции (immutable)."""
        return self._options

    def update_config(self, **changes: Any) -> RequestsOptions:
        """
        Обновить опции сервиса.

        Заголовки объединяются, остальные поля заменяются. Запросы, уже
        начатые до вызова, выполняются со старыми опциями.

        Example:
            >>> service.update_config(timeout=2000, headers={"X-Team": "core"})
        """
        options = self._options.merged(**changes)
        self._options = options
        self._client = self._build_client(options)
        logger.debug(f"RequestsService options updated: {', '.join(sorted(changes))}")
        return options

    def create_client(self, options: Optional[RequestsOptions] = None, **overrides: Any) -> HttpClient:
        """Создать независимый HttpClient (со своим транспортом)."""
        return HttpClient(
            options or self._options,
            trace_context=self._trace_context,
            metrics_sink=self._metrics_sink,
            **overrides,
        )

    # ==================== Запросы ====================

    async def _run(self, task: RequestTask) -> Any:
        return unwrap_response(await task.unwrap())

    async def request(self, config: RequestConfig) -> Any:
        return await self._run(self._client.request(config))

    async def get(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> Any:
        return await self._run(self._client.get(url, query, **config))

    async def delete(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> Any:
        return await self._run(self._client.delete(url, query, **config))

    async def head(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> None:
        """HEAD запрос: только проверка успеха, тело не возвращается."""
        await self._client.head(url, query, **config).unwrap()

    async def options(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> Any:
        return await self._run(self._client.options(url, query, **config))

    async def post(self, url: str, data: Any = None, **config: Any) -> Any:
        return await self._run(self._client.post(url, data, **config))

    async def put(self, url: str, data: Any = None, **config: Any) -> Any:
        return await self._run(self._client.put(url, data, **config))

    async def patch(self, url: str, data: Any = None, **config: Any) -> Any:
        return await self._run(self._client.patch(url, data, **config))


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# РАЗОВЫЕ ЗАПРОСЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def request(config: RequestConfig, options: Optional[RequestsOptions] = None) -> RequestResult:
    """
    Выполнить один запрос временным клиентом.

    Example:
        >>> result = await request(RequestConfig("GET", "https://api.example.com/health"))
    """
    async with HttpClient(options) as client:
        return await client.request(config)


async def get(url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestResult:
    return await request(RequestConfig("GET", url, query=query, **config))


async def delete(url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestResult:
    return await request(RequestConfig("DELETE", url, query=query, **config))


async def post(url: str, data: Any = None, **config: Any) -> RequestResult:
    return await request(RequestConfig("POST", url, data=data, **config))


async def put(url: str, data: Any = None, **config: Any) -> RequestResult:
    return await request(RequestConfig("PUT", url, data=data, **config))


async def patch(url: str, data: Any = None, **config: Any) -> RequestResult:
    return await request(RequestConfig("PATCH", url, data=data, **config))
