"""Kubernetes API access configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_str, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_NAMESPACE_PREFIX = "it"


@dataclass(frozen=True, slots=True)
class KubernetesConfig:
    resilience: ResilienceConfig
    namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX


def get_kubernetes_config() -> KubernetesConfig:
    values = require_env_vars(("KUBE_API_SERVER", "KUBE_TOKEN"))
    token = values["KUBE_TOKEN"].strip()

    resilience = ResilienceConfig(
        name="kubernetes",
        base_url=values["KUBE_API_SERVER"].strip().rstrip("/"),
        verify=env_bool("KUBE_VERIFY_TLS", default=True),
        ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        default_headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        },
    )
    return KubernetesConfig(
        resilience=resilience,
        namespace_prefix=env_str("FABDRIFT_NAMESPACE_PREFIX", DEFAULT_NAMESPACE_PREFIX),
    )
