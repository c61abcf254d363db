"""Утилиты onebun-requests."""

from .sanitizer import (
    mask_sensitive_data,
    mask_url,
    mask_headers,
    add_sensitive_keys,
)

__all__ = [
    'mask_sensitive_data',
    'mask_url',
    'mask_headers',
    'add_sensitive_keys',
]
