"""onebun-requests - resilient outbound HTTP client with OneBun service auth."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.config import (
    BackoffStrategy,
    RetryPolicy,
    RetryOverrides,
    RequestsOptions,
)
from .core.exceptions import (
    AUTH_ERROR,
    FETCH_ERROR,
    HTTP_ERROR,
    RESPONSE_PARSE_ERROR,
    RESPONSE_READ_ERROR,
    RETRY_CALLBACK_ERROR,
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
from .core.models import (
    HttpMethod,
    RequestConfig,
    SuccessResult,
    FailureResult,
    RequestResult,
    is_error_response,
    is_success_response,
)
from .core.context import (
    ContextVarTraceContext,
    NoopTraceContext,
    StaticTraceContext,
    TraceContextReader,
    set_trace_id,
    get_trace_id,
    reset_trace_id,
)
from .core.metrics import MetricsSink, NullMetricsSink, InMemoryMetricsSink
from .core.transport import HttpxTransport, Transport, TransportRequest
from .core.requests_transport import RequestsTransport
from .core.url_builder import build_url
from .auth import (
    ApiKeyAuth,
    ApiKeyLocation,
    BasicAuth,
    BearerAuth,
    CustomAuth,
    OneBunAuth,
    SigningAlgorithm,
    sign_request,
    validate_onebun_auth,
)
from .client import HttpClient, RequestTask, create_http_client
from .service import RequestsService

# Библиотека не настраивает логирование сама - только NullHandler.
# Пользователь настраивает logging.getLogger('onebun_requests') или
# включает RequestsOptions(logging=LoggingConfig(...)).
logging.getLogger('onebun_requests').addHandler(logging.NullHandler())

# Версия из метаданных пакета (единый источник - pyproject.toml)
try:
    __version__ = version("onebun-requests")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    # Client
    "HttpClient",
    "RequestTask",
    "RequestsService",
    "create_http_client",

    # Config
    "RequestsOptions",
    "RetryPolicy",
    "RetryOverrides",
    "BackoffStrategy",

    # Models
    "HttpMethod",
    "RequestConfig",
    "SuccessResult",
    "FailureResult",
    "RequestResult",
    "is_error_response",
    "is_success_response",

    # Auth
    "BearerAuth",
    "ApiKeyAuth",
    "ApiKeyLocation",
    "BasicAuth",
    "CustomAuth",
    "OneBunAuth",
    "SigningAlgorithm",
    "sign_request",
    "validate_onebun_auth",

    # Errors
    "RequestError",
    "AuthError",
    "FetchError",
    "HTTPError",
    "RemoteError",
    "ResponseParseError",
    "ResponseReadError",
    "RetryCallbackError",
    "ConfigurationError",
    "AUTH_ERROR",
    "FETCH_ERROR",
    "HTTP_ERROR",
    "RESPONSE_PARSE_ERROR",
    "RESPONSE_READ_ERROR",
    "RETRY_CALLBACK_ERROR",

    # Tracing / metrics
    "TraceContextReader",
    "ContextVarTraceContext",
    "NoopTraceContext",
    "StaticTraceContext",
    "set_trace_id",
    "get_trace_id",
    "reset_trace_id",
    "MetricsSink",
    "NullMetricsSink",
    "InMemoryMetricsSink",

    # Transport
    "Transport",
    "TransportRequest",
    "HttpxTransport",
    "RequestsTransport",
    "build_url",

    # Version
    "__version__",
]
