"""
Система конфигурации для onebun-requests.

Все конфиги immutable (frozen dataclasses) - движок только читает их.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    FrozenSet,
    Iterable,
    Mapping,
    Optional,
    Union,
)

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from ..auth.config import AuthConfig
    from .exceptions import RequestError
    from .logging import LoggingConfig

# Таймаут попытки, если он не задан ни в запросе, ни в клиенте (мс)
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3
DEFAULT_USER_AGENT = "OneBun-Requests/1.0"

OnRetryCallback = Callable[["RequestError", int], Union[None, Awaitable[None]]]


def _freeze_dict(d: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Заморозить словарь (MappingProxyType поверх копии)."""
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY POLICY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class BackoffStrategy(str, Enum):
    """Стратегия задержки между попытками."""
    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Конфигурация retry стратегии.

    Args:
        max_retries: Максимум повторов ПОСЛЕ первой попытки
        delay: Базовая задержка (мс)
        backoff: fixed | linear | exponential
        factor: Множитель для exponential backoff
        retry_on: HTTP статусы, при которых разрешён повтор
        on_retry: Callback (error, attempt) перед каждым повтором (sync или async)
        retry_on_network_error: Ретраить сбои транспорта (FETCH_ERROR, таймауты)

    Examples:
        >>> RetryPolicy(max_retries=2, delay=100, retry_on={503})
        >>> RetryPolicy(backoff="linear", delay=250)
    """
    max_retries: int = DEFAULT_MAX_RETRIES
    delay: float = 1000
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    factor: float = 2.0
    retry_on: FrozenSet[int] = field(
        default_factory=lambda: frozenset({408, 429, 500, 502, 503, 504})
    )
    on_retry: Optional[OnRetryCallback] = None
    retry_on_network_error: bool = False

    def __post_init__(self):
        """Валидация и нормализация."""
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ConfigurationError("max_retries must be an integer")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")
        if self.delay < 0:
            raise ConfigurationError("delay must be non-negative")
        if self.factor <= 0:
            raise ConfigurationError("factor must be positive")
        if self.on_retry is not None and not callable(self.on_retry):
            raise ConfigurationError("on_retry must be callable")

        try:
            backoff = BackoffStrategy(self.backoff)
        except ValueError:
            raise ConfigurationError(
                f"Unknown backoff strategy: {self.backoff!r}. "
                f"Available: {', '.join(b.value for b in BackoffStrategy)}"
            ) from None
        object.__setattr__(self, 'backoff', backoff)

        # retry_on принимает любой iterable, храним frozenset
        object.__setattr__(self, 'retry_on', frozenset(self.retry_on or ()))

    def merged(self, overrides: Optional["RetryOverrides"]) -> "RetryPolicy":
        """
        Применить частичные переопределения.

        Args:
            overrides: RetryOverrides (поля None не меняют политику)

        Returns:
            Новый RetryPolicy
        """
        if overrides is None:
            return self
        changes = {
            f.name: getattr(overrides, f.name)
            for f in fields(overrides)
            if getattr(overrides, f.name) is not None
        }
        return replace(self, **changes) if changes else self


@dataclass(frozen=True)
class RetryOverrides:
    """
    Частичная retry политика для одного запроса.

    Все поля опциональны; заданные поля переопределяют политику клиента.

    Examples:
        >>> RetryOverrides(max_retries=1, retry_on={503})
    """
    max_retries: Optional[int] = None
    delay: Optional[float] = None
    backoff: Optional[BackoffStrategy] = None
    factor: Optional[float] = None
    retry_on: Optional[Iterable[int]] = None
    on_retry: Optional[OnRetryCallback] = None
    retry_on_network_error: Optional[bool] = None

    def __post_init__(self):
        if self.retry_on is not None:
            object.__setattr__(self, 'retry_on', frozenset(self.retry_on))

    @classmethod
    def coerce(cls, value: Union["RetryOverrides", RetryPolicy, Mapping[str, Any], None]) -> Optional["RetryOverrides"]:
        """Привести RetryPolicy / dict / RetryOverrides к RetryOverrides."""
        if value is None or isinstance(value, RetryOverrides):
            return value
        if isinstance(value, RetryPolicy):
            return cls(**{f.name: getattr(value, f.name) for f in fields(cls)})
        if isinstance(value, Mapping):
            unknown = set(value) - {f.name for f in fields(cls)}
            if unknown:
                raise ConfigurationError(f"Unknown retry options: {', '.join(sorted(unknown))}")
            return cls(**value)
        raise ConfigurationError(f"Invalid retries value: {value!r}")


DEFAULT_RETRY_POLICY = RetryPolicy()

# Политика, если клиент создан с retries=None
FALLBACK_RETRY_POLICY = RetryPolicy(retry_on=frozenset({500, 502, 503, 504}))

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RequestsOptions:
    """
    Дефолтные опции HttpClient.

    Immutable: клиент хранит их как есть, каждый запрос только читает.

    Args:
        base_url: Базовый URL (опционально)
        timeout: Таймаут попытки (мс)
        headers: Дефолтные заголовки
        auth: Дефолтная аутентификация
        retries: Retry политика клиента (None = FALLBACK_RETRY_POLICY)
        tracing: Пробрасывать X-Trace-Id
        metrics: Записывать метрики попыток
        user_agent: Значение User-Agent
        logging: Конфигурация структурированного логирования (None = только module loggers)

    Examples:
        >>> RequestsOptions(base_url="https://api.example.com", timeout=5000)
    """
    base_url: Optional[str] = None
    timeout: Optional[float] = 10000
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    auth: Optional["AuthConfig"] = None
    retries: Optional[RetryPolicy] = DEFAULT_RETRY_POLICY
    tracing: bool = True
    metrics: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    logging: Optional["LoggingConfig"] = None

    def __post_init__(self):
        """Валидация и заморозка словарей."""
        object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.retries is not None and not isinstance(self.retries, RetryPolicy):
            raise ConfigurationError("retries must be a RetryPolicy")

    def merged(self, **changes: Any) -> "RequestsOptions":
        """
        Создать новые опции с изменениями.

        Заголовки объединяются с существующими, остальные поля заменяются.

        Example:
            >>> options.merged(timeout=2000, headers={"X-Team": "core"})
        """
        if "headers" in changes and changes["headers"] is not None:
            headers = dict(self.headers)
            headers.update(changes["headers"])
            changes["headers"] = headers
        return replace(self, **changes)

    @property
    def retry_policy(self) -> RetryPolicy:
        """Политика клиента с учётом fallback."""
        return self.retries if self.retries is not None else FALLBACK_RETRY_POLICY
