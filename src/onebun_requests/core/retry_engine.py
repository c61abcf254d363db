"""
Retry scheduler - решение о повторе и расчёт задержки.

Чистая логика без состояния:
- should_retry: ретраить ли ошибку по статус коду
- delay_for: задержка перед N-м повтором (fixed / linear / exponential)
- has_budget: остались ли повторы
"""

import asyncio
import logging

from .config import BackoffStrategy, RetryPolicy
from .exceptions import RequestError

logger = logging.getLogger(__name__)


class RetryScheduler:
    """
    Механизм retry.

    Номер попытки (attempt) 1-based: первый повтор - attempt 1.

    Examples:
        >>> policy = RetryPolicy(max_retries=3, delay=100, retry_on={503})
        >>> scheduler = RetryScheduler()
        >>> if scheduler.should_retry(error, policy) and scheduler.has_budget(1, policy):
        ...     await scheduler.async_wait(1, policy)
    """

    def should_retry(self, error: RequestError, policy: RetryPolicy) -> bool:
        """
        Решить, нужен ли retry по статус коду.

        Args:
            error: Ошибка попытки
            policy: Retry политика

        Returns:
            True если статус ошибки входит в retry_on
        """
        # Пустой retry_on - не ретраим никогда
        if not policy.retry_on:
            return False

        # Фатальные ошибки НЕ ретраим (сервер уже ответил / auth / callback)
        if getattr(error, 'fatal', False):
            return False

        return error.status_code is not None and error.status_code in policy.retry_on

    def has_budget(self, attempt: int, policy: RetryPolicy) -> bool:
        """Повторы прекращаются, когда attempt > max_retries."""
        return attempt <= policy.max_retries

    def delay_for(self, attempt: int, policy: RetryPolicy) -> float:
        """
        Вычислить задержку перед повтором.

        Args:
            attempt: Номер повтора (1-based)
            policy: Retry политика

        Returns:
            Миллисекунды ожидания
        """
        if policy.backoff == BackoffStrategy.LINEAR:
            return policy.delay * attempt
        if policy.backoff == BackoffStrategy.EXPONENTIAL:
            return policy.delay * (policy.factor ** (attempt - 1))
        return policy.delay

    async def async_wait(self, attempt: int, policy: RetryPolicy) -> None:
        """
        Асинхронное ожидание перед retry.

        Examples:
            >>> await scheduler.async_wait(2, policy)
        """
        delay_ms = self.delay_for(attempt, policy)
        logger.debug(f"Waiting {delay_ms:.0f}ms before retry {attempt}")
        await asyncio.sleep(delay_ms / 1000)
