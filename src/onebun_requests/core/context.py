# src/onebun_requests/core/context.py
"""
Источники trace id.

Исполнитель не читает глобальное состояние процесса: он получает
TraceContextReader и запрашивает trace id один раз на запрос.
Сбой источника означает "trace id нет".
"""

import contextvars
import logging
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_current_trace_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "onebun_requests_trace_id", default=None
)


def set_trace_id(trace_id: Optional[str]) -> contextvars.Token:
    """
    Установить trace id для текущей задачи / контекста потока.

    Returns:
        Токен для reset_trace_id

    Example:
        >>> token = set_trace_id("4bf92f3577b34da6a3ce929d0e0e4736")
        >>> try:
        ...     await client.get("/users")  # отправит X-Trace-Id
        ... finally:
        ...     reset_trace_id(token)
    """
    return _current_trace_id.set(trace_id)


def get_trace_id() -> Optional[str]:
    """Текущий trace id или None."""
    return _current_trace_id.get()


def reset_trace_id(token: contextvars.Token) -> None:
    """Вернуть trace id, действовавший до set_trace_id."""
    _current_trace_id.reset(token)


@runtime_checkable
class TraceContextReader(Protocol):
    """Источник текущего trace id (только чтение)."""

    def current_trace_id(self) -> Optional[str]:
        ...


class NoopTraceContext:
    """Источник без trace id."""

    def current_trace_id(self) -> Optional[str]:
        return None


class StaticTraceContext:
    """Фиксированный trace id (скрипты, тесты)."""

    def __init__(self, trace_id: Optional[str]):
        self.trace_id = trace_id

    def current_trace_id(self) -> Optional[str]:
        return self.trace_id


class ContextVarTraceContext:
    """Trace id из set_trace_id/reset_trace_id. По умолчанию в HttpClient."""

    def current_trace_id(self) -> Optional[str]:
        return get_trace_id()


def read_trace_id(reader: Optional[TraceContextReader]) -> Optional[str]:
    """Запросить trace id у reader; любой сбой даёт None."""
    if reader is None:
        return None
    try:
        return reader.current_trace_id() or None
    except Exception as e:
        logger.debug(f"Trace context unavailable: {e}")
        return None
