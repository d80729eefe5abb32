"""Pydantic models for the custom-resource manifest documents."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from fabdrift.domain.model.enums import ConnectionType, SwitchRole

FABRIC_API_VERSION = "fabric.githedgehog.com/v1beta1"
WIRING_API_VERSION = "wiring.githedgehog.com/v1beta1"


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class ObjectMeta(ManifestBaseModel):
    name: str
    namespace: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class SpineLeafCounts(ManifestBaseModel):
    spines: int
    leafs: int
    fabric_links: int = Field(alias="fabricLinks")


class FabricTopology(ManifestBaseModel):
    spine_leaf: SpineLeafCounts = Field(alias="spineLeaf")


class FabricManifestSpec(ManifestBaseModel):
    name: str
    switches: list[str] = Field(default_factory=list)
    servers: list[str] = Field(default_factory=list)
    topology: FabricTopology | None = None


class SwitchManifestSpec(ManifestBaseModel):
    id: str
    role: SwitchRole
    model: str
    ports: int
    profile: str | None = None


class ServerManifestSpec(ManifestBaseModel):
    id: str
    type: str
    connections: int = 1
    profile: str | None = None


class ManifestPortRef(ManifestBaseModel):
    device: str
    port: str


class ManifestLink(ManifestBaseModel):
    source: ManifestPortRef = Field(alias="from")
    destination: ManifestPortRef = Field(alias="to")
    type: ConnectionType


class ConnectionManifestSpec(ManifestBaseModel):
    links: list[ManifestLink]


class ManifestDocument(ManifestBaseModel):
    """Fields common to every document; used for the generic resource view."""

    api_version: str = Field(alias="apiVersion")
    kind: str
    metadata: ObjectMeta
    spec: dict[str, Any] | None = None


class FabricManifest(ManifestDocument):
    kind: Literal["Fabric"]
    spec: FabricManifestSpec


class SwitchManifest(ManifestDocument):
    kind: Literal["Switch"]
    spec: SwitchManifestSpec


class ServerManifest(ManifestDocument):
    kind: Literal["Server"]
    spec: ServerManifestSpec


class ConnectionManifest(ManifestDocument):
    kind: Literal["Connection"]
    spec: ConnectionManifestSpec
