"""Pydantic models for Kubernetes list responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class KubeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class KubeObjectMeta(KubeBaseModel):
    name: str
    namespace: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class KubeObject(KubeBaseModel):
    # List items usually omit apiVersion and kind; the list request supplies them.
    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: str | None = None
    metadata: KubeObjectMeta
    spec: dict[str, Any] | None = None


class KubeList(KubeBaseModel):
    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: str | None = None
    items: list[KubeObject] = Field(default_factory=list)
