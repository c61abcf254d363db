"""
Построение URL запроса.

base_url + путь + query параметры -> одна строка URL.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlencode


def _stringify(value: Any) -> str:
    # bool отдельно: True -> "true", как в query строках большинства API
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query_string(query: Optional[Mapping[str, Any]]) -> str:
    """
    Закодировать query параметры.

    Параметры со значением None пропускаются.

    Args:
        query: Словарь параметров

    Returns:
        Строка вида "a=1&b=x" (пустая, если параметров нет)

    Examples:
        >>> build_query_string({"a": 1, "b": None, "q": "hello world"})
        'a=1&q=hello+world'
    """
    if not query:
        return ""
    pairs = [(str(key), _stringify(value)) for key, value in query.items() if value is not None]
    return urlencode(pairs)


def build_url(base_url: Optional[str], url: str, query: Optional[Mapping[str, Any]] = None) -> str:
    """
    Собрать полный URL.

    Если base_url задан - убираем ровно один завершающий "/" у base_url и
    ровно один начальный "/" у url, затем склеиваем через "/".
    Без base_url url используется как есть.

    Args:
        base_url: Базовый URL (опционально)
        url: Путь или абсолютный URL
        query: Query параметры

    Returns:
        Полный URL (всегда строка, даже для пустых входных данных)

    Examples:
        >>> build_url("https://api.x/", "/users", {"a": 1})
        'https://api.x/users?a=1'
        >>> build_url(None, "/p?x=1", {"a": 2})
        '/p?x=1&a=2'
    """
    url = url or ""

    if base_url:
        base = base_url[:-1] if base_url.endswith("/") else base_url
        path = url[1:] if url.startswith("/") else url
        full_url = f"{base}/{path}"
    else:
        full_url = url

    query_string = build_query_string(query)
    if query_string:
        separator = "&" if "?" in full_url else "?"
        full_url = f"{full_url}{separator}{query_string}"

    return full_url
