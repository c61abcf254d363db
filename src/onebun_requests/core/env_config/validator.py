"""
Pydantic settings для конфигурации из окружения.

Плоская структура: каждая переменная ONEBUN_REQUESTS_* - одно поле.
Сложные значения (headers, retry_on) задаются JSON строкой.
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ...auth.config import (
    ApiKeyAuth,
    ApiKeyLocation,
    AuthConfig,
    BasicAuth,
    BearerAuth,
    OneBunAuth,
    SigningAlgorithm,
)
from ..config import DEFAULT_USER_AGENT, RetryPolicy
from ..logging.config import LoggingConfig

AuthTypeName = Literal["bearer", "apikey", "basic", "onebun"]

# Поля, обязательные для каждого типа аутентификации
_REQUIRED_AUTH_FIELDS = {
    "bearer": ("auth_token",),
    "apikey": ("auth_api_key_name", "auth_api_key_value"),
    "basic": ("auth_username", "auth_password"),
    "onebun": ("auth_service_id", "auth_secret_key"),
}


class RequestsSettings(BaseSettings):
    """
    Настройки HttpClient из переменных окружения.

    Источники (по убыванию приоритета):
    1. Аргументы конструктора
    2. Переменные окружения ONEBUN_REQUESTS_*
    3. .env файл
    4. Значения по умолчанию

    Example .env:
        ONEBUN_REQUESTS_BASE_URL=https://users.internal
        ONEBUN_REQUESTS_TIMEOUT=5000
        ONEBUN_REQUESTS_RETRY_MAX_RETRIES=2
        ONEBUN_REQUESTS_RETRY_ON=[502,503]
        ONEBUN_REQUESTS_AUTH_TYPE=onebun
        ONEBUN_REQUESTS_AUTH_SERVICE_ID=orders
        ONEBUN_REQUESTS_AUTH_SECRET_KEY=change-me
        ONEBUN_REQUESTS_LOG_ENABLED=true
        ONEBUN_REQUESTS_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix='ONEBUN_REQUESTS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Клиент
    base_url: Optional[str] = Field(default=None, description="Base URL for relative request paths")
    timeout: float = Field(default=10000, gt=0, description="Attempt timeout in milliseconds")
    headers: Dict[str, str] = Field(default_factory=dict)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    tracing: bool = Field(default=True)
    metrics: bool = Field(default=True)

    # Retry
    retry_max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1000, ge=0, description="Base delay in milliseconds")
    retry_backoff: Literal["fixed", "linear", "exponential"] = Field(default="exponential")
    retry_factor: float = Field(default=2.0, gt=0)
    retry_on: List[int] = Field(default_factory=lambda: [408, 429, 500, 502, 503, 504])
    retry_on_network_error: bool = Field(default=False)

    # Аутентификация (секреты как SecretStr - не попадают в repr)
    auth_type: Optional[AuthTypeName] = None
    auth_token: Optional[SecretStr] = None
    auth_api_key_name: Optional[str] = None
    auth_api_key_value: Optional[SecretStr] = None
    auth_api_key_location: Literal["header", "query"] = Field(default="header")
    auth_username: Optional[str] = None
    auth_password: Optional[SecretStr] = None
    auth_service_id: Optional[str] = None
    auth_secret_key: Optional[SecretStr] = None
    auth_algorithm: Literal["hmac-sha256", "hmac-sha512"] = Field(default="hmac-sha256")

    # Логирование
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)

    @model_validator(mode='after')
    def validate_auth_fields(self) -> "RequestsSettings":
        """Для выбранного auth_type должны быть заданы все его поля."""
        if self.auth_type is None:
            return self
        missing = [name for name in _REQUIRED_AUTH_FIELDS[self.auth_type] if getattr(self, name) is None]
        if missing:
            raise ValueError(
                f"auth_type={self.auth_type} requires: {', '.join(missing)}"
            )
        return self

    @model_validator(mode='after')
    def validate_log_file(self) -> "RequestsSettings":
        if self.log_enabled and self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self

    def to_retry_policy(self) -> RetryPolicy:
        """Собрать RetryPolicy."""
        return RetryPolicy(
            max_retries=self.retry_max_retries,
            delay=self.retry_delay,
            backoff=self.retry_backoff,
            factor=self.retry_factor,
            retry_on=frozenset(self.retry_on),
            retry_on_network_error=self.retry_on_network_error,
        )

    def to_auth(self) -> Optional[AuthConfig]:
        """Собрать дескриптор аутентификации (None если auth_type не задан)."""
        if self.auth_type == "bearer":
            return BearerAuth(token=self.auth_token.get_secret_value())
        elif self.auth_type == "apikey":
            return ApiKeyAuth(
                key=self.auth_api_key_name,
                value=self.auth_api_key_value.get_secret_value(),
                location=ApiKeyLocation(self.auth_api_key_location),
            )
        elif self.auth_type == "basic":
            return BasicAuth(username=self.auth_username, password=self.auth_password.get_secret_value())
        elif self.auth_type == "onebun":
            return OneBunAuth(
                service_id=self.auth_service_id,
                secret_key=self.auth_secret_key.get_secret_value(),
                algorithm=SigningAlgorithm(self.auth_algorithm),
            )
        return None

    def to_logging_config(self) -> Optional[LoggingConfig]:
        """LoggingConfig если логирование включено."""
        if not self.log_enabled:
            return None
        return LoggingConfig(
            level=self.log_level,
            format=self.log_format,
            enable_console=self.log_enable_console,
            enable_file=self.log_enable_file,
            file_path=self.log_file_path,
            max_bytes=self.log_max_bytes,
            backup_count=self.log_backup_count,
        )
