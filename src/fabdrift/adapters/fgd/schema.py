"""Pydantic models describing the legacy three-file FGD layout."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from fabdrift.domain.model.enums import ConnectionType, SwitchRole


class FgdBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class FgdSwitch(FgdBaseModel):
    id: str
    model: str
    ports: int
    type: SwitchRole


class FgdServer(FgdBaseModel):
    id: str
    type: str
    connections: int = 1


class FgdPortRef(FgdBaseModel):
    device: str
    port: str


class FgdConnection(FgdBaseModel):
    source: FgdPortRef = Field(alias="from")
    destination: FgdPortRef = Field(alias="to")
    type: ConnectionType


class FgdServersMetadata(FgdBaseModel):
    generated_at: datetime = Field(alias="generatedAt")
    total_servers: int | None = Field(default=None, alias="totalServers")


class FgdSwitchesMetadata(FgdBaseModel):
    generated_at: datetime = Field(alias="generatedAt")
    total_switches: int | None = Field(default=None, alias="totalSwitches")


class FgdConnectionsMetadata(FgdBaseModel):
    generated_at: datetime = Field(alias="generatedAt")
    fabric_name: str = Field(alias="fabricName")
    total_connections: int | None = Field(default=None, alias="totalConnections")


class FgdServersFile(FgdBaseModel):
    servers: list[FgdServer]
    metadata: FgdServersMetadata


class FgdSwitchesFile(FgdBaseModel):
    switches: list[FgdSwitch]
    metadata: FgdSwitchesMetadata


class FgdConnectionsFile(FgdBaseModel):
    connections: list[FgdConnection]
    metadata: FgdConnectionsMetadata
