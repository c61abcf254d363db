"""
Иерархия ошибок запросов.

Все ошибки движка - подклассы RequestError и различаются по `code`.

Классификация:
- fatal=True - НЕ ретраить никогда (auth, parse, read, retry callback)
- retryable=True - можно ретраить (решение принимает RetryScheduler)
"""

import time
from typing import Any, Dict, Optional


def _now_ms() -> int:
    return int(time.time() * 1000)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# КОДЫ ОШИБОК
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

AUTH_ERROR = "AUTH_ERROR"
FETCH_ERROR = "FETCH_ERROR"
HTTP_ERROR = "HTTP_ERROR"
RESPONSE_PARSE_ERROR = "RESPONSE_PARSE_ERROR"
RESPONSE_READ_ERROR = "RESPONSE_READ_ERROR"
RETRY_CALLBACK_ERROR = "RETRY_CALLBACK_ERROR"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RequestError(Exception):
    """
    Базовая ошибка запроса.

    Создаётся в месте сбоя и после этого не изменяется: каждый слой
    оборачивает ошибку (with_cause), а не редактирует её.

    Args:
        message: Сообщение об ошибке
        code: Машинный код (например HTTP_ERROR)
        status_code: HTTP статус (если есть)
        details: Дополнительные данные (тело ответа, заголовки и т.п.)
        cause: Предыдущая ошибка в цепочке retry/wrap
        trace_id: Trace ID запроса
        timestamp: Время создания (epoch ms)

    Examples:
        >>> err = RequestError("boom", code="HTTP_ERROR", status_code=503)
        >>> err.to_dict()["code"]
        503
    """

    default_code: str = "REQUEST_ERROR"
    retryable: bool = False
    fatal: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
        cause: Optional["RequestError"] = None,
        trace_id: Optional[str] = None,
        timestamp: Optional[int] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code
        self.details = details
        self.cause = cause
        self.trace_id = trace_id
        self.timestamp = timestamp if timestamp is not None else _now_ms()
        super().__init__(message)

    def with_cause(self, cause: Optional["RequestError"]) -> "RequestError":
        """Вернуть копию ошибки с другой причиной (оригинал не меняется)."""
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.args = self.args
        clone.cause = cause
        return clone

    def chain(self):
        """Итерация по цепочке ошибок, начиная с текущей."""
        error: Optional[RequestError] = self
        while error is not None:
            yield error
            error = error.cause

    def to_dict(self) -> Dict[str, Any]:
        """
        Стандартизированный error envelope.

        Returns:
            {"success": False, "error": code, "code": status, "message": ...}
        """
        envelope: Dict[str, Any] = {
            "success": False,
            "error": self.code,
            "code": self.status_code if self.status_code is not None else 500,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.details is not None:
            envelope["details"] = self.details
        if self.trace_id:
            envelope["traceId"] = self.trace_id
        return envelope

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ВРЕМЕННЫЕ ОШИБКИ (retryable=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FetchError(RequestError):
    """
    Сбой транспорта: DNS, connect, reset, таймаут.

    HTTP статуса нет, поэтому по retry_on такие ошибки не ретраятся -
    только через RetryPolicy.retry_on_network_error.

    Args:
        message: Сообщение
        url: URL запроса
        timed_out: True если попытка прервана по таймауту
    """

    default_code = FETCH_ERROR
    retryable = True

    def __init__(self, message: str, *, url: Optional[str] = None, timed_out: bool = False, **kwargs):
        self.url = url
        self.timed_out = timed_out
        super().__init__(message, **kwargs)


class HTTPError(RequestError):
    """
    Ответ с не-2xx статусом.

    Args:
        status_code: HTTP статус
        url: URL
        reason: Reason phrase
        headers: Заголовки ответа
    """

    default_code = HTTP_ERROR
    retryable = True

    def __init__(
        self,
        status_code: int,
        url: str,
        reason: str = "",
        headers: Optional[Dict[str, str]] = None,
        **kwargs
    ):
        self.url = url
        self.reason = reason
        self.headers = headers or {}

        msg = f"HTTP {status_code}"
        if reason:
            msg += f": {reason}"

        kwargs.setdefault("status_code", status_code)
        super().__init__(msg, **kwargs)


class RemoteError(RequestError):
    """
    Ошибка, которую вернул сервер в стандартизированном error envelope.

    Код приложения (поле `error`) сохраняется как `code`, числовой `code`
    конверта - как status_code.
    """

    retryable = True

    @classmethod
    def from_envelope(cls, envelope: Dict[str, Any], trace_id: Optional[str] = None) -> "RemoteError":
        """Создать ошибку из {success: false, error, code, ...}."""
        return cls(
            envelope.get("message") or envelope["error"],
            code=envelope["error"],
            status_code=int(envelope["code"]),
            details=envelope.get("details"),
            trace_id=envelope.get("traceId") or trace_id,
            timestamp=_envelope_timestamp(envelope.get("timestamp")),
        )


def _envelope_timestamp(value: Any) -> Optional[int]:
    # bool - подкласс int, True не является временем
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ФАТАЛЬНЫЕ ОШИБКИ (fatal=True)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class AuthError(RequestError):
    """Не удалось применить аутентификацию (interceptor, подпись)."""

    default_code = AUTH_ERROR
    fatal = True


class ResponseParseError(RequestError):
    """
    Сервер объявил application/json, но тело не является валидным JSON.

    Сервер уже ответил - повтор не поможет.
    """

    default_code = RESPONSE_PARSE_ERROR
    fatal = True


class ResponseReadError(RequestError):
    """Не удалось прочитать тело ответа."""

    default_code = RESPONSE_READ_ERROR
    fatal = True


class RetryCallbackError(RequestError):
    """Сам on_retry callback упал - повторы прекращаются."""

    default_code = RETRY_CALLBACK_ERROR
    fatal = True


class ConfigurationError(Exception):
    """
    Ошибка конфигурации (ошибка программиста).

    Не является RequestError: выбрасывается сразу, до любого I/O.
    """
