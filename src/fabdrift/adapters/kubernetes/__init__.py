"""Kubernetes adapter package."""

from __future__ import annotations

from .client import KubernetesClient, plural_of, resource_path
from .fetcher import KubernetesResourceFetcher, build_kubernetes_fetcher, translate_object
from .schema import KubeList, KubeObject, KubeObjectMeta

__all__ = [
    "KubeList",
    "KubeObject",
    "KubeObjectMeta",
    "KubernetesClient",
    "KubernetesResourceFetcher",
    "build_kubernetes_fetcher",
    "plural_of",
    "resource_path",
    "translate_object",
]
