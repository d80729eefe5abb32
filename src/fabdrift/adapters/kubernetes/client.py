"""Read-only Kubernetes REST client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from fabdrift.adapters.http_resilience import ResilientClient
from fabdrift.domain.ports import FetchError, ResourceNotFoundError

from .schema import KubeList

if TYPE_CHECKING:
    from collections.abc import Callable

    from fabdrift.config.http_resilience import ResilienceConfig
    from fabdrift.config.kubernetes import KubernetesConfig

log = getLogger(__name__)

CORE_API_VERSION = "v1"


def plural_of(kind: str) -> str:
    lowered = kind.lower()
    if lowered.endswith(("s", "x", "ch", "sh")):
        return f"{lowered}es"
    if lowered.endswith("y") and lowered[-2:-1] not in {"a", "e", "i", "o", "u"}:
        return f"{lowered[:-1]}ies"
    return f"{lowered}s"


def resource_path(kind: str, api_version: str, namespace: str) -> str:
    """``/api/v1/...`` for the core group, ``/apis/<group>/<version>/...`` otherwise."""

    prefix = "/api/v1" if api_version == CORE_API_VERSION else f"/apis/{api_version}"
    return f"{prefix}/namespaces/{namespace}/{plural_of(kind)}"


class KubernetesClient:
    """Low-level HTTP client for namespaced list calls."""

    def __init__(
        self,
        *,
        config: KubernetesConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def list_resources(
        self,
        *,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> KubeList:
        return asyncio.run(
            self.list_resources_async(
                kind=kind,
                api_version=api_version,
                namespace=namespace,
                label_selector=label_selector,
            )
        )

    async def list_resources_async(
        self,
        *,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> KubeList:
        if self._resilience.base_url is None:
            raise FetchError("Missing Kubernetes API server in resilience configuration")
        path = resource_path(kind, api_version, namespace)
        params = {"labelSelector": label_selector} if label_selector else None

        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.get(path, params=params)
            except httpx.HTTPError as exc:
                raise FetchError(f"GET {path} failed: {exc}", kind=kind) from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise ResourceNotFoundError(f"GET {path} returned 404", kind=kind)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"GET {path} returned {response.status_code}",
                kind=kind,
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"GET {path} returned a non-JSON body", kind=kind) from exc
        if not isinstance(payload, dict):
            raise FetchError(f"GET {path} returned an unexpected payload", kind=kind)
        try:
            listing = KubeList.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(f"GET {path} returned an invalid list: {exc}", kind=kind) from exc

        log.debug(f"GET {path}: {len(listing.items)} item(s)")
        return listing
