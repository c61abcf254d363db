"""Core модули onebun-requests."""

from .config import (
    BackoffStrategy,
    RetryPolicy,
    RetryOverrides,
    RequestsOptions,
    DEFAULT_RETRY_POLICY,
    FALLBACK_RETRY_POLICY,
)
from .exceptions import (
    RequestError,
    AuthError,
    FetchError,
    HTTPError,
    RemoteError,
    ResponseParseError,
    ResponseReadError,
    RetryCallbackError,
    ConfigurationError,
)
from .models import (
    HttpMethod,
    RequestConfig,
    SuccessResult,
    FailureResult,
    RequestResult,
    RequestMetricsData,
)
from .retry_engine import RetryScheduler
from .url_builder import build_url, build_query_string

__all__ = [
    # Config
    "BackoffStrategy",
    "RetryPolicy",
    "RetryOverrides",
    "RequestsOptions",
    "DEFAULT_RETRY_POLICY",
    "FALLBACK_RETRY_POLICY",
    # Exceptions
    "RequestError",
    "AuthError",
    "FetchError",
    "HTTPError",
    "RemoteError",
    "ResponseParseError",
    "ResponseReadError",
    "RetryCallbackError",
    "ConfigurationError",
    # Models
    "HttpMethod",
    "RequestConfig",
    "SuccessResult",
    "FailureResult",
    "RequestResult",
    "RequestMetricsData",
    # Retry / URL
    "RetryScheduler",
    "build_url",
    "build_query_string",
]
