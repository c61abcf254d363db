"""Аутентификация и подпись запросов OneBun."""

from .config import (
    ApiKeyAuth,
    ApiKeyLocation,
    AuthConfig,
    AuthType,
    BasicAuth,
    BearerAuth,
    CustomAuth,
    OneBunAuth,
    SigningAlgorithm,
)
from .engine import apply_auth
from .onebun import (
    OneBunAuthValidation,
    build_canonical_payload,
    generate_signature,
    sign_request,
    validate_onebun_auth,
)

__all__ = [
    # Descriptors
    "AuthConfig",
    "AuthType",
    "BearerAuth",
    "ApiKeyAuth",
    "ApiKeyLocation",
    "BasicAuth",
    "CustomAuth",
    "OneBunAuth",
    "SigningAlgorithm",
    # Engine
    "apply_auth",
    # OneBun signing
    "OneBunAuthValidation",
    "build_canonical_payload",
    "generate_signature",
    "sign_request",
    "validate_onebun_auth",
]
