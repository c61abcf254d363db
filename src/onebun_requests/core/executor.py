# src/onebun_requests/core/executor.py
"""
Исполнитель запросов.

Один запрос проходит стадии Build -> Auth -> Send -> Parse -> Decide:

- Build: политика retry, trace id, таймаут
- Auth: аутентификация (один раз на запрос, до первой попытки), затем URL
- Send/Parse: попытка через Transport под asyncio.wait_for
- Decide: метрики попытки, retry или итоговый RequestResult

execute() не выбрасывает ожидаемые ошибки - они возвращаются как
FailureResult. ConfigurationError выбрасывается до любого I/O.
"""

import asyncio
import inspect
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple, Union

from ..auth.engine import apply_auth
from ..utils.sanitizer import mask_headers, mask_url
from .config import DEFAULT_TIMEOUT_MS, RequestsOptions, RetryPolicy
from .context import TraceContextReader, read_trace_id
from .exceptions import (
    ConfigurationError,
    FetchError,
    RequestError,
    RetryCallbackError,
)
from .metrics import MetricsSink, record_metrics
from .models import (
    FailureResult,
    RequestConfig,
    RequestMetricsData,
    RequestResult,
    SuccessResult,
    merge_headers,
)
from .response_parser import classify_response
from .retry_engine import RetryScheduler
from .transport import Transport, TransportError, TransportRequest
from .url_builder import build_url

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-Id"


def serialize_body(data: Any) -> Optional[Union[str, bytes]]:
    """
    Подготовить тело запроса.

    str и bytes отправляются как есть, остальное сериализуется в JSON.
    """
    if data is None:
        return None
    if isinstance(data, (str, bytes)):
        return data
    return json.dumps(data)


class RequestExecutor:
    """
    Выполняет RequestConfig с retry, метриками и трейсингом.

    Args:
        options: Дефолты клиента
        transport: Транспорт (HttpxTransport, RequestsTransport, ...)
        trace_context: Источник trace id (None = без трейсинга)
        metrics_sink: Приёмник метрик (None = без метрик)
        scheduler: RetryScheduler
        request_logger: Структурированный логгер (RequestsLogger)

    Example:
        >>> executor = RequestExecutor(RequestsOptions(base_url="https://api.example.com"), HttpxTransport())
        >>> result = await executor.execute(RequestConfig("GET", "/users"))
        >>> if result.success:
        ...     print(result.data)
    """

    def __init__(
        self,
        options: RequestsOptions,
        transport: Transport,
        *,
        trace_context: Optional[TraceContextReader] = None,
        metrics_sink: Optional[MetricsSink] = None,
        scheduler: Optional[RetryScheduler] = None,
        request_logger=None,
    ):
        self.options = options
        self.transport = transport
        self.trace_context = trace_context
        self.metrics_sink = metrics_sink
        self.scheduler = scheduler or RetryScheduler()
        self._logger = request_logger

    # ==================== Build ====================

    def _resolve_trace_id(self, config: RequestConfig) -> Optional[str]:
        if not (config.tracing and self.options.tracing):
            return None
        return read_trace_id(self.trace_context)

    def _resolve_timeout(self, config: RequestConfig) -> float:
        """Таймаут попытки в секундах."""
        if config.timeout is not None:
            timeout_ms = config.timeout
        elif self.options.timeout is not None:
            timeout_ms = self.options.timeout
        else:
            timeout_ms = DEFAULT_TIMEOUT_MS
        return timeout_ms / 1000

    def _build_headers(self, config: RequestConfig, trace_id: Optional[str]) -> Dict[str, str]:
        # base < client < call < X-Trace-Id
        headers = {
            "User-Agent": self.options.user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        merge_headers(headers, self.options.headers)
        merge_headers(headers, config.headers)
        if trace_id:
            merge_headers(headers, {TRACE_HEADER: trace_id})
        return headers

    def _build_request(self, config: RequestConfig, trace_id: Optional[str]) -> TransportRequest:
        content = serialize_body(config.data) if config.method.has_body else None
        return TransportRequest(
            method=config.method.value,
            url=build_url(self.options.base_url, config.url, config.query),
            headers=self._build_headers(config, trace_id),
            content=content,
            timeout=self._resolve_timeout(config),
        )

    # ==================== Send / Parse ====================

    async def _send_once(
        self,
        request: TransportRequest,
        retry_count: int,
        trace_id: Optional[str],
    ) -> Tuple[Union[SuccessResult, RequestError], float]:
        """Одна попытка. Возвращает (результат или ошибку, длительность в мс)."""
        start_time = time.monotonic()

        async def send_and_read() -> SuccessResult:
            response = await self.transport.send(request)
            return await classify_response(
                response,
                url=request.url,
                method=request.method,
                duration=(time.monotonic() - start_time) * 1000,
                retry_count=retry_count,
                trace_id=trace_id,
            )

        try:
            outcome: Union[SuccessResult, RequestError] = await asyncio.wait_for(
                send_and_read(), timeout=request.timeout
            )
        except RequestError as e:
            outcome = e
        except asyncio.TimeoutError:
            outcome = FetchError(
                f"Request timed out after {request.timeout * 1000:.0f}ms",
                url=request.url,
                timed_out=True,
                trace_id=trace_id,
            )
        except TransportError as e:
            outcome = FetchError(e.message, url=request.url, timed_out=e.timed_out, trace_id=trace_id)
        except Exception as e:
            # Непредвиденный сбой внутри движка тоже становится FETCH_ERROR
            logger.debug(f"Unexpected error during request to {mask_url(request.url)}: {e!r}")
            outcome = FetchError(
                f"Request failed: {e}",
                url=request.url,
                details={"error": repr(e)},
                trace_id=trace_id,
            )

        return outcome, (time.monotonic() - start_time) * 1000

    def _record(self, config: RequestConfig, route: str, outcome, duration: float, retry_count: int) -> None:
        if not (config.metrics and self.options.metrics):
            return
        if isinstance(outcome, SuccessResult):
            status_code = outcome.status_code
        else:
            status_code = outcome.status_code or 0
        record_metrics(
            self.metrics_sink,
            RequestMetricsData(
                method=config.method.value,
                url=route,
                status_code=status_code,
                duration=duration,
                success=isinstance(outcome, SuccessResult),
                retry_count=retry_count,
                base_url=self.options.base_url,
            ),
        )

    # ==================== Decide ====================

    def _can_retry(self, error: RequestError, policy: RetryPolicy, attempt: int) -> bool:
        if not self.scheduler.has_budget(attempt, policy):
            return False
        if self.scheduler.should_retry(error, policy):
            return True
        return isinstance(error, FetchError) and policy.retry_on_network_error

    @staticmethod
    async def _notify_retry(policy: RetryPolicy, error: RequestError, attempt: int) -> None:
        if policy.on_retry is None:
            return
        result = policy.on_retry(error, attempt)
        if inspect.isawaitable(result):
            await result

    # ==================== Execute ====================

    async def execute(self, config: RequestConfig) -> RequestResult:
        """
        Выполнить запрос.

        Args:
            config: Описание запроса

        Returns:
            SuccessResult или FailureResult (retry_count = число повторов)

        Raises:
            ConfigurationError: Некорректная конфигурация (до любого I/O)
        """
        if not isinstance(config, RequestConfig):
            raise ConfigurationError(f"Expected RequestConfig, got {type(config).__name__}")

        policy = self.options.retry_policy.merged(config.retries)
        trace_id = self._resolve_trace_id(config)
        method = config.method.value
        # URL до auth: в метрики не попадают секреты из query
        route = build_url(self.options.base_url, config.url, config.query)

        auth = config.auth if config.auth is not None else self.options.auth
        try:
            authed = await apply_auth(auth, config, trace_id)
        except RequestError as error:
            self._log_failure(method, route, error, attempt=1, trace_id=trace_id)
            return FailureResult(error=error, url=route, method=method, retry_count=0)

        # URL после auth: API key в query попадает в запрос
        request = self._build_request(authed, trace_id)

        if self._logger:
            self._logger.info(
                "Request started",
                method=method,
                url=mask_url(request.url),
                headers=mask_headers(request.headers),
                timeout_ms=round(request.timeout * 1000),
                max_retries=policy.max_retries,
                trace_id=trace_id,
            )

        previous: Optional[RequestError] = None
        attempt = 1

        while True:
            retry_count = attempt - 1
            outcome, duration = await self._send_once(request, retry_count, trace_id)
            self._record(authed, route, outcome, duration, retry_count)

            if isinstance(outcome, SuccessResult):
                if self._logger:
                    self._logger.info(
                        "Request completed",
                        method=method,
                        url=mask_url(request.url),
                        status_code=outcome.status_code,
                        duration_ms=round(duration, 2),
                        attempt=attempt,
                        trace_id=trace_id,
                    )
                return outcome

            error = outcome
            if previous is not None and error.cause is None:
                error = error.with_cause(previous)

            if not self._can_retry(error, policy, attempt):
                self._log_failure(method, request.url, error, attempt=attempt, trace_id=trace_id, duration=duration)
                return FailureResult(error=error, url=request.url, method=method, retry_count=retry_count)

            try:
                await self._notify_retry(policy, error, attempt)
            except Exception as e:
                callback_error = RetryCallbackError(
                    f"Retry callback failed: {e}",
                    status_code=error.status_code,
                    details={"error": repr(e)},
                    cause=error,
                    trace_id=trace_id,
                )
                self._log_failure(method, request.url, callback_error, attempt=attempt, trace_id=trace_id)
                return FailureResult(error=callback_error, url=request.url, method=method, retry_count=retry_count)

            delay_ms = self.scheduler.delay_for(attempt, policy)
            if self._logger:
                self._logger.warning(
                    "Request error (will retry)",
                    method=method,
                    url=mask_url(request.url),
                    error=error.message,
                    error_code=error.code,
                    status_code=error.status_code,
                    attempt=attempt,
                    max_retries=policy.max_retries,
                    wait_time_ms=round(delay_ms, 2),
                    trace_id=trace_id,
                )
            else:
                logger.debug(
                    f"Retry {attempt}/{policy.max_retries} for {method} {mask_url(request.url)} "
                    f"after {delay_ms:.0f}ms ({error.code})"
                )

            await self.scheduler.async_wait(attempt, policy)
            previous = error
            attempt += 1

    def _log_failure(
        self,
        method: str,
        url: str,
        error: RequestError,
        *,
        attempt: int,
        trace_id: Optional[str],
        duration: Optional[float] = None,
    ) -> None:
        if self._logger:
            self._logger.error(
                "Request failed",
                method=method,
                url=mask_url(url),
                error=error.message,
                error_code=error.code,
                status_code=error.status_code,
                attempt=attempt,
                duration_ms=round(duration, 2) if duration is not None else None,
                trace_id=trace_id,
            )
        else:
            logger.debug(f"{method} {mask_url(url)} failed: {error.code} {error.message}")
