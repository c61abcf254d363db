"""
Logging configuration for onebun-requests.

Used by HttpClient when ``RequestsOptions.logging`` is set.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Structured request logging.

    Attributes:
        level: Minimum level
        format: json, text or colored
        enable_console: Log to stderr
        enable_file: Log to a rotating file
        file_path: Log file (required with enable_file)
        max_bytes: Rotation size
        backup_count: Rotated files to keep
        enable_trace_id: Add the ambient trace id to every record
        extra_fields: Static fields added to every record (service, env, ...)

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
        >>> client = HttpClient(logging=config)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_trace_id: bool = True
    extra_fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        try:
            object.__setattr__(self, 'level', LogLevel(self.level.upper()))
            object.__setattr__(self, 'format', LogFormat(self.format.lower()))
        except (AttributeError, ValueError) as e:
            raise ConfigurationError(f"Invalid logging config: {e}") from None

        if self.enable_file and not self.file_path:
            raise ConfigurationError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ConfigurationError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ConfigurationError("backup_count must be non-negative")

        object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields or {})))

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        enable_trace_id: bool = True,
        extra_fields: Optional[Dict[str, Any]] = None,
        **kwargs: Any
    ) -> "LoggingConfig":
        """Build a config from plain strings (env files, CLI flags)."""
        return cls(
            level=level,
            format=format,
            enable_console=enable_console,
            enable_file=enable_file,
            file_path=file_path,
            enable_trace_id=enable_trace_id,
            extra_fields=extra_fields or {},
            **kwargs
        )
