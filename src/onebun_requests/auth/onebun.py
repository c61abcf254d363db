# src/onebun_requests/auth/onebun.py
"""
Подпись межсервисных запросов OneBun.

Заголовки (все пять обязательны вместе):

    X-OneBun-Service-Id   id вызывающего сервиса
    X-OneBun-Timestamp    epoch миллисекунды, строкой
    X-OneBun-Nonce        16 случайных байт в hex (32 символа)
    X-OneBun-Algorithm    hmac-sha256 | hmac-sha512
    X-OneBun-Signature    hex HMAC канонической строки

Каноническая строка - пять строк, соединённых переводом строки::

    METHOD
    URL
    TIMESTAMP
    NONCE
    SERVICE_ID

Nonce генерируется на каждый запрос, но проверяющая сторона его не
запоминает: перехваченный запрос можно повторить в пределах max_age_ms.
"""

import hashlib
import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .config import SigningAlgorithm

logger = logging.getLogger(__name__)

HEADER_SERVICE_ID = "X-OneBun-Service-Id"
HEADER_TIMESTAMP = "X-OneBun-Timestamp"
HEADER_NONCE = "X-OneBun-Nonce"
HEADER_ALGORITHM = "X-OneBun-Algorithm"
HEADER_SIGNATURE = "X-OneBun-Signature"

# Необязательные заголовки: прокси передаёт через них подписанные метод и URL
HEADER_METHOD = "X-OneBun-Method"
HEADER_URL = "X-OneBun-Url"

DEFAULT_MAX_AGE_MS = 300000  # 5 минут

_DIGESTS = {
    SigningAlgorithm.HMAC_SHA256: hashlib.sha256,
    SigningAlgorithm.HMAC_SHA512: hashlib.sha512,
}


@dataclass(frozen=True)
class OneBunAuthValidation:
    """Результат validate_onebun_auth."""

    service_id: str
    valid: bool


def generate_nonce() -> str:
    """16 случайных байт в виде 32 hex символов."""
    return secrets.token_hex(16)


def build_canonical_payload(method: str, url: str, timestamp: str, nonce: str, service_id: str) -> str:
    """
    Собрать строку, которая подписывается.

    Example:
        >>> build_canonical_payload("GET", "/users", "1700000000000", "ab", "billing")
        'GET\\n/users\\n1700000000000\\nab\\nbilling'
    """
    return "\n".join([method, url, timestamp, nonce, service_id])


def generate_signature(payload: str, secret_key: str, algorithm: SigningAlgorithm) -> str:
    """
    HMAC подпись payload в hex.

    Args:
        payload: Каноническая строка
        secret_key: Общий секрет
        algorithm: hmac-sha256 или hmac-sha512

    Returns:
        hex digest в нижнем регистре

    Raises:
        ValueError: Неизвестный алгоритм
    """
    digest = _DIGESTS.get(SigningAlgorithm(algorithm))
    return hmac.new(secret_key.encode("utf-8"), payload.encode("utf-8"), digest).hexdigest()


def sign_request(
    method: str,
    url: str,
    service_id: str,
    secret_key: str,
    algorithm: SigningAlgorithm = SigningAlgorithm.HMAC_SHA256,
    *,
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
) -> Dict[str, str]:
    """
    Пять заголовков OneBun auth для одного запроса.

    Args:
        method: Метод запроса, как он отправляется
        url: URL запроса, как он задан в RequestConfig
        service_id: id вызывающего сервиса
        secret_key: Общий секрет
        algorithm: Алгоритм подписи
        timestamp: Свой timestamp в epoch ms (тесты)
        nonce: Свой nonce (тесты)

    Returns:
        Заголовки для слияния с запросом
    """
    algorithm = SigningAlgorithm(algorithm)
    timestamp = timestamp if timestamp is not None else str(int(time.time() * 1000))
    nonce = nonce if nonce is not None else generate_nonce()

    payload = build_canonical_payload(method, url, timestamp, nonce, service_id)
    signature = generate_signature(payload, secret_key, algorithm)

    return {
        HEADER_SERVICE_ID: service_id,
        HEADER_TIMESTAMP: timestamp,
        HEADER_NONCE: nonce,
        HEADER_ALGORITHM: algorithm.value,
        HEADER_SIGNATURE: signature,
    }


def validate_onebun_auth(
    headers: Mapping[str, str],
    secret_key: str,
    max_age_ms: float = DEFAULT_MAX_AGE_MS,
    *,
    method: Optional[str] = None,
    url: Optional[str] = None,
    now: Optional[float] = None,
) -> OneBunAuthValidation:
    """
    Проверить OneBun auth заголовки входящего запроса.

    Метод и URL передаёт проверяющая сторона. Если их нет, они берутся из
    X-OneBun-Method / X-OneBun-Url, иначе GET и "/".

    Args:
        headers: Входящие заголовки (поиск без учёта регистра)
        secret_key: Общий секрет
        max_age_ms: Максимальный возраст timestamp
        method: Подписанный метод
        url: Подписанный URL
        now: Текущее время в epoch ms (тесты)

    Returns:
        OneBunAuthValidation(service_id, valid)

    Example:
        >>> headers = sign_request("GET", "/users", "billing", "s3cret")
        >>> validate_onebun_auth(headers, "s3cret", method="GET", url="/users").valid
        True
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    service_id = lowered.get(HEADER_SERVICE_ID.lower())
    timestamp = lowered.get(HEADER_TIMESTAMP.lower())
    nonce = lowered.get(HEADER_NONCE.lower())
    algorithm = lowered.get(HEADER_ALGORITHM.lower())
    signature = lowered.get(HEADER_SIGNATURE.lower())

    if not (service_id and timestamp and nonce and algorithm and signature):
        return OneBunAuthValidation(service_id=service_id or "unknown", valid=False)

    try:
        request_time = int(timestamp)
    except ValueError:
        logger.debug(f"Malformed OneBun timestamp from service {service_id!r}")
        return OneBunAuthValidation(service_id=service_id, valid=False)

    current = now if now is not None else time.time() * 1000
    if current - request_time > max_age_ms:
        return OneBunAuthValidation(service_id=service_id, valid=False)

    try:
        signing_algorithm = SigningAlgorithm(algorithm)
    except ValueError:
        logger.debug(f"Unsupported OneBun algorithm {algorithm!r} from service {service_id!r}")
        return OneBunAuthValidation(service_id=service_id, valid=False)

    signed_method = method or lowered.get(HEADER_METHOD.lower()) or "GET"
    signed_url = url or lowered.get(HEADER_URL.lower()) or "/"

    payload = build_canonical_payload(signed_method, signed_url, timestamp, nonce, service_id)
    expected = generate_signature(payload, secret_key, signing_algorithm)

    return OneBunAuthValidation(
        service_id=service_id,
        valid=hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")),
    )
