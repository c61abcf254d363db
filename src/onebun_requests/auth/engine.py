# src/onebun_requests/auth/engine.py

import base64
import inspect
import logging
from typing import Optional

from ..core.exceptions import AuthError
from ..core.models import RequestConfig
from .config import (
    ApiKeyAuth,
    ApiKeyLocation,
    AuthConfig,
    BasicAuth,
    BearerAuth,
    CustomAuth,
    OneBunAuth,
)
from .onebun import sign_request

logger = logging.getLogger(__name__)


async def apply_auth(auth: Optional[AuthConfig], config: RequestConfig, trace_id: Optional[str] = None) -> RequestConfig:
    """
    Применить аутентификацию к запросу.

    Возвращает новый RequestConfig; исходный не изменяется.

    Args:
        auth: Дескриптор аутентификации
        config: Черновик запроса
        trace_id: Trace ID для ошибок

    Returns:
        RequestConfig с добавленными заголовками / query

    Raises:
        AuthError: Упал interceptor (custom) или подпись (onebun)
    """
    if isinstance(auth, BearerAuth):
        return config.with_headers({"Authorization": f"Bearer {auth.token}"})

    elif isinstance(auth, ApiKeyAuth):
        if auth.location == ApiKeyLocation.QUERY:
            return config.with_query({auth.key: auth.value})
        return config.with_headers({auth.key: auth.value})

    elif isinstance(auth, BasicAuth):
        credentials = base64.b64encode(f"{auth.username}:{auth.password}".encode("utf-8")).decode("ascii")
        return config.with_headers({"Authorization": f"Basic {credentials}"})

    elif isinstance(auth, CustomAuth):
        return await _apply_custom_auth(auth, config, trace_id)

    elif isinstance(auth, OneBunAuth):
        return _apply_onebun_auth(auth, config, trace_id)

    # Неизвестный вариант - запрос без изменений
    return config


async def _apply_custom_auth(auth: CustomAuth, config: RequestConfig, trace_id: Optional[str]) -> RequestConfig:
    updated = config
    if auth.headers:
        updated = updated.with_headers(auth.headers)
    if auth.query:
        updated = updated.with_query(auth.query)

    if auth.interceptor is None:
        return updated

    try:
        result = auth.interceptor(updated)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        raise AuthError(
            f"Auth interceptor failed: {e}",
            status_code=401,
            details={"error": repr(e)},
            trace_id=trace_id,
        ) from e

    if not isinstance(result, RequestConfig):
        raise AuthError(
            f"Auth interceptor returned {type(result).__name__}, expected RequestConfig",
            status_code=401,
            trace_id=trace_id,
        )
    return result


def _apply_onebun_auth(auth: OneBunAuth, config: RequestConfig, trace_id: Optional[str]) -> RequestConfig:
    # Подписываются method и url самого запроса, без base_url и query
    try:
        headers = sign_request(
            config.method.value,
            config.url,
            auth.service_id,
            auth.secret_key,
            auth.algorithm,
        )
    except Exception as e:
        raise AuthError(
            f"Failed to generate signature: {e}",
            status_code=401,
            details={"error": repr(e)},
            trace_id=trace_id,
        ) from e

    logger.debug(f"Signed {config.method.value} {config.url} for service {auth.service_id!r}")
    return config.with_headers(headers)
