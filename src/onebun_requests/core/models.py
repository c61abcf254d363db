# src/onebun_requests/core/models.py
"""Модели запроса и результата."""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

from .config import RetryOverrides, _freeze_dict
from .exceptions import ConfigurationError, RequestError

if TYPE_CHECKING:
    from ..auth.config import AuthConfig


class HttpMethod(str, Enum):
    """Поддерживаемые HTTP методы."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @property
    def has_body(self) -> bool:
        """Отправляется ли тело для этого метода."""
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


def merge_headers(headers: Dict[str, str], overrides: Mapping[str, str]) -> Dict[str, str]:
    """
    Наложить overrides поверх headers без учёта регистра имени.

    Ключ из overrides заменяет существующий ключ с тем же именем в другом
    регистре: "content-type" заменяет "Content-Type".
    """
    for name, value in overrides.items():
        lowered = name.lower()
        for existing in [key for key in headers if key.lower() == lowered]:
            del headers[existing]
        headers[name] = value
    return headers


@dataclass(frozen=True)
class RequestConfig:
    """
    Описание одного HTTP вызова.

    Неизменяемый: применение auth и слияние заголовков идут через
    with_headers/with_query/dataclasses.replace и возвращают новый объект.

    Attributes:
        method: HTTP метод
        url: Абсолютный URL или путь относительно base_url клиента
        data: Тело запроса (только для POST/PUT/PATCH)
        query: Query параметры; значения None отбрасываются
        headers: Заголовки вызова
        timeout: Таймаут попытки в миллисекундах
        retries: Частичная retry политика поверх клиентской
        auth: Аутентификация вместо клиентской
        tracing: Передавать X-Trace-Id
        metrics: Записывать метрики

    Example:
        >>> cfg = RequestConfig("GET", "/users", query={"page": 2})
        >>> cfg.with_headers({"X-Team": "core"}).headers["X-Team"]
        'core'
    """

    method: HttpMethod
    url: str
    data: Any = None
    query: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: Optional[float] = None
    retries: Optional[RetryOverrides] = None
    auth: Optional["AuthConfig"] = None
    tracing: bool = True
    metrics: bool = True

    def __post_init__(self):
        try:
            method = HttpMethod(self.method.upper())
        except (AttributeError, ValueError):
            raise ConfigurationError(f"Unsupported HTTP method: {self.method!r}") from None
        object.__setattr__(self, 'method', method)

        if not isinstance(self.url, str):
            raise ConfigurationError("url must be a string")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        object.__setattr__(self, 'query', _freeze_dict(self.query))
        object.__setattr__(self, 'headers', _freeze_dict(self.headers))
        object.__setattr__(self, 'retries', RetryOverrides.coerce(self.retries))

    def with_headers(self, headers: Mapping[str, str]) -> "RequestConfig":
        """Копия с headers поверх текущих (имена без учёта регистра)."""
        return replace(self, headers=merge_headers(dict(self.headers), headers))

    def with_query(self, query: Mapping[str, Any]) -> "RequestConfig":
        """Копия с query параметрами поверх текущих."""
        merged = dict(self.query)
        merged.update(query)
        return replace(self, query=merged)


@dataclass(frozen=True)
class SuccessResult:
    """Успешный результат execute."""

    data: Any
    status_code: int
    headers: Dict[str, str]
    duration: float
    url: str
    method: str
    retry_count: int = 0
    trace_id: Optional[str] = None

    success = True

    def unwrap(self) -> Any:
        return self.data


@dataclass(frozen=True)
class FailureResult:
    """Неуспешный результат execute; error - итоговая RequestError."""

    error: RequestError
    url: str = ""
    method: str = ""
    retry_count: int = 0

    success = False

    def unwrap(self) -> Any:
        """Выбросить ошибку."""
        raise self.error


RequestResult = Union[SuccessResult, FailureResult]


@dataclass(frozen=True)
class RequestMetricsData:
    """
    Метрика одной попытки.

    url - адрес до применения auth, без секретов из query.
    """

    method: str
    url: str
    status_code: int
    duration: float
    success: bool
    retry_count: int
    base_url: Optional[str] = None

    def as_observation(self) -> Dict[str, Any]:
        """Данные для MetricsSink.record_http_request (duration в секундах)."""
        return {
            "method": self.method,
            "route": self.url,
            "status_code": self.status_code,
            "duration": self.duration / 1000,
            "controller": "requests-client",
            "action": "http-request",
        }


def is_error_response(body: Any) -> bool:
    """
    Проверить стандартный конверт ошибки.

    ``{"success": false, "error": "<code>", "code": <number>, ...}``
    """
    return (
        isinstance(body, dict)
        and body.get("success") is False
        and isinstance(body.get("error"), str)
        and isinstance(body.get("code"), (int, float))
        and not isinstance(body.get("code"), bool)
    )


def is_success_response(body: Any) -> bool:
    """Проверить конверт успеха ``{"success": true, "result": ...}``."""
    return isinstance(body, dict) and body.get("success") is True and "result" in body
