# src/onebun_requests/auth/config.py
"""Дескрипторы аутентификации (tagged union: один dataclass на вариант)."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Union

from ..core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..core.models import RequestConfig

Interceptor = Callable[["RequestConfig"], Union["RequestConfig", Awaitable["RequestConfig"]]]


class AuthType(str, Enum):
    """Тег варианта аутентификации."""
    BEARER = "bearer"
    APIKEY = "apikey"
    BASIC = "basic"
    CUSTOM = "custom"
    ONEBUN = "onebun"


class ApiKeyLocation(str, Enum):
    """Куда кладётся API ключ."""
    HEADER = "header"
    QUERY = "query"


class SigningAlgorithm(str, Enum):
    """Алгоритм подписи OneBun."""
    HMAC_SHA256 = "hmac-sha256"
    HMAC_SHA512 = "hmac-sha512"


@dataclass(frozen=True)
class BearerAuth:
    """Authorization: Bearer <token>"""
    token: str = field(repr=False)

    type = AuthType.BEARER


@dataclass(frozen=True)
class ApiKeyAuth:
    """
    API ключ в заголовке или query.

    Args:
        key: Имя заголовка / параметра
        value: Значение ключа
        location: header (по умолчанию) или query
    """
    key: str
    value: str = field(repr=False)
    location: ApiKeyLocation = ApiKeyLocation.HEADER

    type = AuthType.APIKEY

    def __post_init__(self):
        try:
            object.__setattr__(self, 'location', ApiKeyLocation(self.location))
        except ValueError:
            raise ConfigurationError(f"Unknown API key location: {self.location!r}") from None


@dataclass(frozen=True)
class BasicAuth:
    """Authorization: Basic base64(username:password)"""
    username: str
    password: str = field(repr=False)

    type = AuthType.BASIC


@dataclass(frozen=True)
class CustomAuth:
    """
    Произвольные заголовки/query и опциональный interceptor.

    Args:
        headers: Заголовки для добавления
        query: Query параметры для добавления
        interceptor: Функция (sync или async) RequestConfig -> RequestConfig,
            её результат становится итоговым запросом
    """
    headers: Optional[Mapping[str, str]] = None
    query: Optional[Mapping[str, Any]] = None
    interceptor: Optional[Interceptor] = None

    type = AuthType.CUSTOM

    def __post_init__(self):
        if self.headers is not None:
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        if self.query is not None:
            object.__setattr__(self, 'query', MappingProxyType(dict(self.query)))
        if self.interceptor is not None and not callable(self.interceptor):
            raise ConfigurationError("interceptor must be callable")


@dataclass(frozen=True)
class OneBunAuth:
    """
    Межсервисная HMAC подпись OneBun.

    Args:
        service_id: ID вызывающего сервиса
        secret_key: Общий секрет
        algorithm: hmac-sha256 (по умолчанию) или hmac-sha512
    """
    service_id: str
    secret_key: str = field(repr=False)
    algorithm: SigningAlgorithm = SigningAlgorithm.HMAC_SHA256

    type = AuthType.ONEBUN

    def __post_init__(self):
        try:
            object.__setattr__(self, 'algorithm', SigningAlgorithm(self.algorithm))
        except ValueError:
            raise ConfigurationError(f"Unknown signing algorithm: {self.algorithm!r}") from None


AuthConfig = Union[BearerAuth, ApiKeyAuth, BasicAuth, CustomAuth, OneBunAuth]
