"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, env_int, env_str, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .importing import ImportConfig, get_import_config
from .kubernetes import KubernetesConfig, get_kubernetes_config
from .logging import configure_logging
from .polling import get_backoff_policy
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "ImportConfig",
    "KubernetesConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "get_backoff_policy",
    "get_import_config",
    "get_kubernetes_config",
    "get_storage_config",
    "require_env_vars",
]
