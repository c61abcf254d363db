# src/onebun_requests/client.py
"""
Асинхронный HTTP клиент.

Каждый метод возвращает RequestTask - отложенный запрос без I/O.
Задачу можно:

- await task           -> RequestResult (success/failure, без исключений)
- await task.unwrap()  -> данные или RequestError
- task.with_timeout(...) / with_retries(...) / with_headers(...) -> новая задача
"""

from dataclasses import replace
from typing import Any, Mapping, Optional

from .core.config import RequestsOptions, RetryOverrides
from .core.context import ContextVarTraceContext, TraceContextReader
from .core.exceptions import ConfigurationError
from .core.executor import RequestExecutor
from .core.logging import RequestsLogger, client_logger_name
from .core.metrics import MetricsSink
from .core.models import HttpMethod, RequestConfig, RequestResult
from .core.transport import HttpxTransport, Transport


class RequestTask:
    """
    Отложенный запрос.

    Ничего не отправляет до await. Каждый await выполняет запрос заново.

    Example:
        >>> task = client.get("/users").with_timeout(2000)
        >>> result = await task
        >>> users = await task.unwrap()
    """

    def __init__(self, executor: RequestExecutor, config: RequestConfig):
        self._executor = executor
        self.config = config

    def __await__(self):
        return self.run().__await__()

    async def run(self) -> RequestResult:
        """Выполнить запрос; ожидаемые ошибки возвращаются как FailureResult."""
        return await self._executor.execute(self.config)

    async def unwrap(self) -> Any:
        """
        Выполнить запрос и вернуть данные.

        Raises:
            RequestError: Итоговая ошибка запроса
        """
        result = await self.run()
        return result.unwrap()

    def with_timeout(self, timeout: float) -> "RequestTask":
        """Новая задача с таймаутом попытки (мс)."""
        return RequestTask(self._executor, replace(self.config, timeout=timeout))

    def with_retries(self, **overrides: Any) -> "RequestTask":
        """
        Новая задача с переопределённой retry политикой.

        Example:
            >>> await client.get("/flaky").with_retries(max_retries=5, delay=200)
        """
        current = self.config.retries or RetryOverrides()
        try:
            retries = replace(current, **overrides)
        except TypeError as e:
            raise ConfigurationError(f"Invalid retry option: {e}") from None
        return RequestTask(self._executor, replace(self.config, retries=retries))

    def with_headers(self, headers: Optional[Mapping[str, str]] = None, **extra: str) -> "RequestTask":
        """Новая задача с дополнительными заголовками."""
        merged = dict(headers or {})
        merged.update(extra)
        return RequestTask(self._executor, self.config.with_headers(merged))

    def __repr__(self) -> str:
        return f"RequestTask({self.config.method.value} {self.config.url})"


class HttpClient:
    """
    HTTP клиент с дефолтами, retry, аутентификацией, трейсингом и метриками.

    Args:
        options: RequestsOptions (None = дефолтные)
        transport: Транспорт (None = HttpxTransport, закрывается клиентом)
        trace_context: Источник trace id (None = ContextVarTraceContext)
        metrics_sink: Приёмник метрик попыток (None = без метрик)
        **option_overrides: Поля RequestsOptions поверх options

    Example:
        >>> async with HttpClient(base_url="https://api.example.com", timeout=5000) as client:
        ...     result = await client.get("/users", query={"page": 1})
        ...     if result.success:
        ...         print(result.data)
    """

    def __init__(
        self,
        options: Optional[RequestsOptions] = None,
        *,
        transport: Optional[Transport] = None,
        trace_context: Optional[TraceContextReader] = None,
        metrics_sink: Optional[MetricsSink] = None,
        **option_overrides: Any,
    ):
        options = options or RequestsOptions()
        if option_overrides:
            try:
                options = options.merged(**option_overrides)
            except TypeError as e:
                raise ConfigurationError(f"Invalid client option: {e}") from None

        self.config = options
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport()
        self._request_logger = None
        if options.logging:
            # Своё имя логгера на клиент: close() не трогает чужие handlers
            self._request_logger = RequestsLogger(options.logging, name=client_logger_name(options.base_url))

        self._executor = RequestExecutor(
            options,
            self.transport,
            trace_context=trace_context if trace_context is not None else ContextVarTraceContext(),
            metrics_sink=metrics_sink,
            request_logger=self._request_logger,
        )

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть транспорт (если он создан клиентом) и логгер."""
        if self._request_logger is not None:
            self._request_logger.close()
        if self._owns_transport:
            await self.transport.aclose()

    # ==================== Запросы ====================

    def request(self, config: RequestConfig) -> RequestTask:
        """Отложенный запрос по готовому RequestConfig."""
        if not isinstance(config, RequestConfig):
            raise ConfigurationError(f"Expected RequestConfig, got {type(config).__name__}")
        return RequestTask(self._executor, config)

    def _task(self, method: HttpMethod, url: str, **config: Any) -> RequestTask:
        try:
            request_config = RequestConfig(method=method, url=url, **config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid request option: {e}") from None
        return self.request(request_config)

    def get(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestTask:
        """GET запрос."""
        return self._task(HttpMethod.GET, url, query=query, **config)

    def delete(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestTask:
        """DELETE запрос."""
        return self._task(HttpMethod.DELETE, url, query=query, **config)

    def head(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestTask:
        return self._task(HttpMethod.HEAD, url, query=query, **config)

    def options(self, url: str, query: Optional[Mapping[str, Any]] = None, **config: Any) -> RequestTask:
        return self._task(HttpMethod.OPTIONS, url, query=query, **config)

    def post(self, url: str, data: Any = None, **config: Any) -> RequestTask:
        """POST запрос (data: dict/list -> JSON, str/bytes как есть)."""
        return self._task(HttpMethod.POST, url, data=data, **config)

    def put(self, url: str, data: Any = None, **config: Any) -> RequestTask:
        """PUT запрос."""
        return self._task(HttpMethod.PUT, url, data=data, **config)

    def patch(self, url: str, data: Any = None, **config: Any) -> RequestTask:
        """PATCH запрос."""
        return self._task(HttpMethod.PATCH, url, data=data, **config)

    def __repr__(self) -> str:
        return f"HttpClient(base_url={self.config.base_url!r})"


def create_http_client(options: Optional[RequestsOptions] = None, **kwargs: Any) -> HttpClient:
    """
    Создать HttpClient.

    Example:
        >>> client = create_http_client(base_url="https://api.example.com", auth=BearerAuth("token"))
    """
    return HttpClient(options, **kwargs)
