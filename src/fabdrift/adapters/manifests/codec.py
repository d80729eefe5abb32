"""Text codec for custom-resource manifests.

``fabric.yaml`` holds the single ``Fabric`` document; the other three files are
``---`` separated streams of ``Switch``, ``Server`` and ``Connection`` documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from fabdrift.adapters.serialization import (
    SchemaError,
    dump_document,
    dump_documents,
    load_document,
    load_documents,
    validate_document,
)
from fabdrift.domain.model import Resource

from .schema import (
    ConnectionManifest,
    FabricManifest,
    ManifestDocument,
    ServerManifest,
    SwitchManifest,
)
from .translator import ANNOTATION_GENERATED_AT, to_manifests, to_model

if TYPE_CHECKING:
    from fabdrift.domain.model import TopologyModel

FABRIC_FILE = "fabric.yaml"
SWITCHES_FILE = "switches.yaml"
SERVERS_FILE = "servers.yaml"
CONNECTIONS_FILE = "connections.yaml"
MANIFEST_FILES = (FABRIC_FILE, SWITCHES_FILE, SERVERS_FILE, CONNECTIONS_FILE)


@dataclass(frozen=True, slots=True)
class ManifestDocuments:
    fabric: str
    switches: str
    servers: str
    connections: str

    def by_filename(self) -> dict[str, str]:
        return {
            FABRIC_FILE: self.fabric,
            SWITCHES_FILE: self.switches,
            SERVERS_FILE: self.servers,
            CONNECTIONS_FILE: self.connections,
        }


def _as_yaml(payload: BaseModel) -> dict[str, Any]:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode(model: TopologyModel, *, namespace: str = "default") -> ManifestDocuments:
    fabric, switches, servers, connections = to_manifests(model, namespace=namespace)
    return ManifestDocuments(
        fabric=dump_document(_as_yaml(fabric)),
        switches=dump_documents(_as_yaml(s) for s in switches),
        servers=dump_documents(_as_yaml(s) for s in servers),
        connections=dump_documents(_as_yaml(c) for c in connections),
    )


def _validate_stream[ModelT: BaseModel](
    model: type[ModelT],
    text: str,
    *,
    document: str,
) -> list[ModelT]:
    items = load_documents(text, document=document)
    return [
        validate_document(model, item, document=f"{document} (document {index + 1})")
        for index, item in enumerate(items)
    ]


def _load_fabric(text: str) -> FabricManifest:
    data = load_document(text, document=FABRIC_FILE)
    return validate_document(FabricManifest, data, document=FABRIC_FILE)


def decode(documents: ManifestDocuments) -> TopologyModel:
    fabric = _load_fabric(documents.fabric)
    annotation_field = f"metadata.annotations.{ANNOTATION_GENERATED_AT}"
    if ANNOTATION_GENERATED_AT not in fabric.metadata.annotations:
        raise SchemaError(
            f"{FABRIC_FILE}: missing required field '{annotation_field}'",
            document=FABRIC_FILE,
            field=annotation_field,
        )
    switches = _validate_stream(SwitchManifest, documents.switches, document=SWITCHES_FILE)
    servers = _validate_stream(ServerManifest, documents.servers, document=SERVERS_FILE)
    connections = _validate_stream(
        ConnectionManifest,
        documents.connections,
        document=CONNECTIONS_FILE,
    )
    try:
        return to_model(fabric, switches, servers, connections)
    except ValueError as exc:
        # Covers unparsable timestamps as well as dangling or duplicate ids.
        raise SchemaError(
            f"{FABRIC_FILE}: {exc}",
            document=FABRIC_FILE,
            field="spec",
        ) from exc


def _to_resource(document: ManifestDocument) -> Resource:
    return Resource(
        kind=document.kind,
        name=document.metadata.name,
        api_version=document.api_version,
        namespace=document.metadata.namespace,
        labels=dict(document.metadata.labels),
        annotations=dict(document.metadata.annotations),
        spec=document.spec,
    )


def to_resources(documents: ManifestDocuments) -> list[Resource]:
    """Reduce every manifest document to its comparable ``Resource`` surface."""

    resources = [_to_resource(_load_generic(documents.fabric, FABRIC_FILE))]
    for filename, text in (
        (SWITCHES_FILE, documents.switches),
        (SERVERS_FILE, documents.servers),
        (CONNECTIONS_FILE, documents.connections),
    ):
        resources.extend(
            _to_resource(doc) for doc in _validate_stream(ManifestDocument, text, document=filename)
        )
    return resources


def _load_generic(text: str, document: str) -> ManifestDocument:
    return validate_document(
        ManifestDocument,
        load_document(text, document=document),
        document=document,
    )


def resources_for(model: TopologyModel, *, namespace: str = "default") -> list[Resource]:
    return to_resources(encode(model, namespace=namespace))

