"""
Structured request logger.

Wraps a stdlib logger: keyword fields become LogRecord attributes and pass
through ``mask_sensitive_data`` first, so tokens, signatures and secret
keys never reach handlers.
"""

import itertools
import logging
from typing import Any, Optional
from urllib.parse import urlparse

from ...utils.sanitizer import mask_sensitive_data
from .config import LoggingConfig
from .filters import ExtraFieldsFilter, TraceIdFilter
from .formatters import get_formatter
from .handlers import create_console_handler, create_file_handler

DEFAULT_LOGGER_NAME = "onebun_requests.client"

_instance_ids = itertools.count(1)


def client_logger_name(base_url: Optional[str] = None) -> str:
    """
    Unique logger name for one client.

    The domain of ``base_url`` keeps the name readable and the instance
    number keeps two clients for the same host from sharing handlers.

    Example:
        >>> client_logger_name("https://api.example.com/v1")
        'onebun_requests.client.api.example.com.3'
    """
    name = DEFAULT_LOGGER_NAME
    if base_url:
        parsed = urlparse(base_url)
        domain = parsed.netloc or (parsed.path.split("/")[0] if parsed.path else "")
        if domain:
            name = f"{name}.{domain}"
    return f"{name}.{next(_instance_ids)}"


class RequestsLogger:
    """
    Logger used by HttpClient when ``RequestsOptions.logging`` is set.

    Example:
        >>> logger = RequestsLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Request started", method="GET", url="https://api.example.com/users")
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = getattr(logging, self.config.level.value)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Re-configuring the same name replaces the previous handlers
        self._release_handlers()

        filters = []
        if self.config.enable_trace_id:
            filters.append(TraceIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                self.config.file_path,
                level,
                formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters,
            ))

    def _log(self, level: int, message: str, fields: dict) -> None:
        self._logger.log(level, message, extra=mask_sensitive_data(fields))

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """
        Log at INFO.

        Example:
            >>> logger.info("Request completed", status_code=200, duration_ms=150)
        """
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)

    def _release_handlers(self) -> None:
        for handler in self._logger.handlers[:]:
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                pass
            self._logger.removeHandler(handler)

    def close(self) -> None:
        """Flush and close handlers. Idempotent."""
        if self._closed:
            return
        self._release_handlers()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
