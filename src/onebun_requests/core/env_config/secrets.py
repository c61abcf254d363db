"""
Маскирование секретов для вывода конфигурации.
"""

from typing import Any, Dict, Iterable, Optional, Union

from pydantic import SecretStr

DEFAULT_SECRET_WORDS = frozenset({
    'token', 'secret', 'password', 'api_key', 'private_key', 'signature',
})


def mask_secret(value: Union[str, SecretStr, None], visible_chars: int = 4) -> str:
    """
    Показать начало и конец секрета, середину скрыть.

    Example:
        >>> mask_secret("my-secret-api-key-12345")
        'my-s***2345'
        >>> mask_secret("short")
        '***'
    """
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    if not value:
        return ""
    if len(value) <= visible_chars * 2:
        return "***"
    return f"{value[:visible_chars]}***{value[-visible_chars:]}"


def mask_dict_secrets(data: Dict[str, Any], secret_words: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """
    Замаскировать строковые значения ключей, похожих на секреты.

    Example:
        >>> mask_dict_secrets({"auth_secret_key": "super-secret-value", "base_url": "https://x"})
        {'auth_secret_key': 'supe***alue', 'base_url': 'https://x'}
    """
    words = DEFAULT_SECRET_WORDS if secret_words is None else frozenset(secret_words)
    masked = {}
    for key, value in data.items():
        if any(word in key.lower() for word in words) and isinstance(value, (str, SecretStr)):
            masked[key] = mask_secret(value)
        else:
            masked[key] = value
    return masked
