"""
Конфигурация из окружения для onebun-requests.

Example:
    >>> from onebun_requests.core.env_config import load_from_env
    >>>
    >>> options = load_from_env()
    >>> options = load_from_env(".env.production", base_url="https://custom.internal")
"""

from .loader import load_from_env, load_settings, print_config_summary
from .validator import RequestsSettings
from .secrets import mask_secret, mask_dict_secrets

__all__ = [
    "load_from_env",
    "load_settings",
    "print_config_summary",
    "RequestsSettings",
    "mask_secret",
    "mask_dict_secrets",
]
