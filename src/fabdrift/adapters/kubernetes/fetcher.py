"""``ResourceFetcher`` backed by the Kubernetes API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fabdrift.domain.model import Resource

from .client import KubernetesClient

if TYPE_CHECKING:
    from fabdrift.config.kubernetes import KubernetesConfig

    from .schema import KubeObject


def translate_object(item: KubeObject, *, kind: str, api_version: str) -> Resource:
    return Resource(
        kind=item.kind or kind,
        name=item.metadata.name,
        api_version=item.api_version or api_version,
        namespace=item.metadata.namespace,
        labels=dict(item.metadata.labels),
        annotations=dict(item.metadata.annotations),
        spec=item.spec,
    )


class KubernetesResourceFetcher:
    def __init__(self, client: KubernetesClient) -> None:
        self._client = client

    async def __call__(
        self,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[Resource]:
        listing = await self._client.list_resources_async(
            kind=kind,
            api_version=api_version,
            namespace=namespace,
            label_selector=label_selector,
        )
        return [
            translate_object(item, kind=kind, api_version=api_version) for item in listing.items
        ]


def build_kubernetes_fetcher(config: KubernetesConfig) -> KubernetesResourceFetcher:
    return KubernetesResourceFetcher(KubernetesClient(config=config))
