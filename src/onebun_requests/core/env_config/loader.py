"""
Загрузка RequestsOptions из окружения и .env файлов.

Главная точка входа конфигурации через окружение.
"""

from dataclasses import fields
from enum import Enum
from typing import Any, Optional

from ...auth.config import CustomAuth
from ..config import RequestsOptions
from .secrets import DEFAULT_SECRET_WORDS, mask_dict_secrets
from .validator import RequestsSettings


def load_settings(env_file: Optional[str] = None, **overrides: Any) -> RequestsSettings:
    """
    Прочитать RequestsSettings.

    Args:
        env_file: Путь к .env (None = ".env" в текущей директории)
        **overrides: Значения полей RequestsSettings с наивысшим приоритетом
    """
    if env_file is not None:
        return RequestsSettings(_env_file=env_file, **overrides)
    return RequestsSettings(**overrides)


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> RequestsOptions:
    """
    Собрать RequestsOptions из окружения.

    Приоритет (от высшего к низшему):
    1. **overrides
    2. Переменные окружения ONEBUN_REQUESTS_*
    3. .env файл
    4. Значения по умолчанию

    Args:
        env_file: Путь к .env файлу
        **overrides: Поля RequestsSettings (base_url, timeout, auth_type, ...)

    Returns:
        RequestsOptions

    Raises:
        pydantic.ValidationError: Некорректные значения

    Example:
        >>> options = load_from_env()
        >>> client = HttpClient(options)

        >>> options = load_from_env(".env.production", base_url="https://custom.internal")
    """
    settings = load_settings(env_file, **overrides)

    return RequestsOptions(
        base_url=settings.base_url or None,
        timeout=settings.timeout,
        headers=settings.headers,
        auth=settings.to_auth(),
        retries=settings.to_retry_policy(),
        tracing=settings.tracing,
        metrics=settings.metrics,
        user_agent=settings.user_agent,
        logging=settings.to_logging_config(),
    )


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def print_config_summary(options: RequestsOptions) -> None:
    """
    Напечатать сводку опций (секреты замаскированы).

    Example:
        >>> print_config_summary(load_from_env())
        RequestsOptions:
          base_url: https://users.internal
          timeout: 5000ms
          ...
    """
    policy = options.retry_policy
    print("RequestsOptions:")
    print(f"  base_url: {options.base_url}")
    print(f"  timeout: {options.timeout}ms")
    print(f"  retries: max={policy.max_retries}, delay={policy.delay}ms, backoff={policy.backoff.value}, retry_on={sorted(policy.retry_on)}")
    print(f"  tracing: {options.tracing}, metrics: {options.metrics}")

    auth = options.auth
    if isinstance(auth, CustomAuth):
        print(f"  auth: {auth.type.value}")
    elif auth is not None:
        auth_fields = mask_dict_secrets(
            {f.name: _plain(getattr(auth, f.name)) for f in fields(auth)},
            DEFAULT_SECRET_WORDS | {"value"},
        )
        print(f"  auth: {auth.type.value} " + ", ".join(f"{k}={v}" for k, v in auth_fields.items()))

    if options.logging:
        print(f"  logging: level={options.logging.level.value}, format={options.logging.format.value}")
        if options.logging.enable_file:
            print(f"    file: {options.logging.file_path}")
