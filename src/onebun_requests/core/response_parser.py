"""
Разбор ответа транспорта.

- application/json: читаем текст, пустое тело -> None, битый JSON -> ResponseParseError
- остальные content-type: текст как есть
- стандартизированный error envelope в теле -> RemoteError (даже на 2xx)
- классификация: 2xx -> SuccessResult, иначе HTTPError
"""

import json
import logging
from typing import Any, Dict, Optional

from .exceptions import (
    HTTPError,
    RemoteError,
    ResponseParseError,
    ResponseReadError,
)
from .models import SuccessResult, is_error_response
from .transport import TransportResponse

logger = logging.getLogger(__name__)


def is_json_content_type(content_type: Optional[str]) -> bool:
    """Проверить, объявлен ли JSON."""
    return bool(content_type) and "application/json" in content_type.lower()


async def parse_response(response: TransportResponse, trace_id: Optional[str] = None) -> Any:
    """
    Прочитать и декодировать тело ответа.

    Args:
        response: Ответ транспорта
        trace_id: Trace ID для ошибок

    Returns:
        Декодированное тело (dict/list/скаляр для JSON, str для остального, None для пустого JSON)

    Raises:
        ResponseReadError: Тело не удалось прочитать
        ResponseParseError: Объявлен JSON, но тело невалидно
        RemoteError: Тело - стандартизированный error envelope
    """
    try:
        text = await response.read_text()
    except Exception as e:
        raise ResponseReadError(
            f"Failed to read response: {e}",
            status_code=response.status_code,
            details={"error": repr(e)},
            trace_id=trace_id,
        ) from e

    if not is_json_content_type(response.headers.get("content-type")):
        return text

    if not text:
        return None

    try:
        body = json.loads(text)
    except ValueError as e:
        # Сервер обещал JSON - не подменяем сырым текстом
        raise ResponseParseError(
            "Response text is not valid JSON",
            status_code=response.status_code,
            details=text,
            trace_id=trace_id,
        ) from e

    if is_error_response(body):
        raise RemoteError.from_envelope(body, trace_id=trace_id)

    return body


async def classify_response(
    response: TransportResponse,
    *,
    url: str,
    method: str,
    duration: float,
    retry_count: int,
    trace_id: Optional[str] = None,
) -> SuccessResult:
    """
    Разобрать ответ и классифицировать по статусу.

    Args:
        response: Ответ транспорта
        url: Полный URL запроса
        method: HTTP метод
        duration: Длительность попытки (мс)
        retry_count: Номер попытки - 1
        trace_id: Trace ID

    Returns:
        SuccessResult для статусов [200, 300)

    Raises:
        HTTPError: Статус вне [200, 300), details=разобранное тело
        RequestError: Ошибки parse_response
    """
    data = await parse_response(response, trace_id)
    headers: Dict[str, str] = dict(response.headers)

    if 200 <= response.status_code < 300:
        return SuccessResult(
            data=data,
            status_code=response.status_code,
            headers=headers,
            duration=duration,
            url=url,
            method=method,
            retry_count=retry_count,
            trace_id=trace_id,
        )

    raise HTTPError(
        response.status_code,
        url,
        response.reason_phrase,
        headers=headers,
        details=data,
        trace_id=trace_id,
    )

