# src/onebun_requests/core/metrics.py
"""Приёмники метрик: одно наблюдение на попытку запроса."""

import logging
import threading
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .models import RequestMetricsData

logger = logging.getLogger(__name__)


@runtime_checkable
class MetricsSink(Protocol):
    """
    Приёмник наблюдений, по одному на попытку.

    duration в секундах; controller всегда "requests-client",
    action всегда "http-request".
    """

    def record_http_request(
        self,
        *,
        method: str,
        route: str,
        status_code: int,
        duration: float,
        controller: str,
        action: str,
    ) -> None:
        ...


class NullMetricsSink:
    """Отбрасывает всё."""

    def record_http_request(self, **observation: Any) -> None:
        return None


class InMemoryMetricsSink:
    """
    Хранит наблюдения в списке.

    Example:
        >>> sink = InMemoryMetricsSink()
        >>> client = HttpClient(metrics_sink=sink)
        >>> await client.get("/users")
        >>> sink.observations[0]["status_code"]
        200
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.observations: List[Dict[str, Any]] = []

    def record_http_request(self, **observation: Any) -> None:
        with self._lock:
            self.observations.append(observation)

    def clear(self) -> None:
        with self._lock:
            self.observations.clear()


def record_metrics(sink: Optional[MetricsSink], data: RequestMetricsData) -> None:
    """
    Передать data в sink.

    Ошибки приёмника логируются на уровне debug и не ломают запрос.
    """
    if sink is None:
        return
    try:
        sink.record_http_request(**data.as_observation())
    except Exception as e:
        logger.debug(f"Failed to record request metrics: {e}")
