"""
Structured logging for onebun-requests.

Library modules log through ``logging.getLogger(__name__)`` and the package
installs only a NullHandler. ``RequestsLogger`` is the opt-in structured
logger enabled with ``RequestsOptions(logging=LoggingConfig(...))``.

Example:
    >>> from onebun_requests import HttpClient
    >>> from onebun_requests.core.logging import LoggingConfig
    >>>
    >>> client = HttpClient(logging=LoggingConfig.create(level="INFO", format="json"))
    >>> await client.get("https://api.example.com/users")
    {"level": "INFO", "message": "Request started", "method": "GET", ...}
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import RequestsLogger, client_logger_name
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import TraceIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "RequestsLogger",
    "client_logger_name",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "TraceIdFilter",
    "ExtraFieldsFilter",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
