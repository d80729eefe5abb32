"""Translate between FGD file payloads and ``TopologyModel``."""

from __future__ import annotations

from datetime import UTC, datetime

from fabdrift.domain.model import (
    Connection,
    PortRef,
    Server,
    Switch,
    SwitchRole,
    TopologyModel,
)

from .schema import (
    FgdConnection,
    FgdConnectionsFile,
    FgdConnectionsMetadata,
    FgdPortRef,
    FgdServer,
    FgdServersFile,
    FgdServersMetadata,
    FgdSwitch,
    FgdSwitchesFile,
    FgdSwitchesMetadata,
)


def to_files(
    model: TopologyModel,
) -> tuple[FgdServersFile, FgdSwitchesFile, FgdConnectionsFile]:
    generated_at = model.generated_at
    servers = FgdServersFile(
        servers=[FgdServer(id=s.id, type=s.type, connections=s.connections) for s in model.servers],
        metadata=FgdServersMetadata(generated_at=generated_at, total_servers=len(model.servers)),
    )
    switches = FgdSwitchesFile(
        switches=[
            FgdSwitch(id=s.id, model=s.model, ports=s.ports, type=s.role) for s in model.switches
        ],
        metadata=FgdSwitchesMetadata(
            generated_at=generated_at,
            total_switches=len(model.switches),
        ),
    )
    connections = FgdConnectionsFile(
        connections=[_build_connection_payload(c) for c in model.connections],
        metadata=FgdConnectionsMetadata(
            generated_at=generated_at,
            fabric_name=model.name,
            total_connections=len(model.connections),
        ),
    )
    return servers, switches, connections


def to_model(
    servers: FgdServersFile,
    switches: FgdSwitchesFile,
    connections: FgdConnectionsFile,
) -> TopologyModel:
    """Build a model; the latest of the three timestamps wins."""

    generated_at = max(
        _as_utc(servers.metadata.generated_at),
        _as_utc(switches.metadata.generated_at),
        _as_utc(connections.metadata.generated_at),
    )
    all_switches = [_build_switch(s) for s in switches.switches]
    return TopologyModel(
        name=connections.metadata.fabric_name,
        generated_at=generated_at,
        spines=tuple(s for s in all_switches if s.role is SwitchRole.SPINE),
        leaves=tuple(s for s in all_switches if s.role is SwitchRole.LEAF),
        servers=tuple(
            Server(id=s.id, type=s.type, connections=s.connections) for s in servers.servers
        ),
        connections=tuple(
            Connection(
                source=PortRef(c.source.device, c.source.port),
                destination=PortRef(c.destination.device, c.destination.port),
                type=c.type,
            )
            for c in connections.connections
        ),
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _build_switch(payload: FgdSwitch) -> Switch:
    return Switch(id=payload.id, model=payload.model, ports=payload.ports, role=payload.type)


def _build_connection_payload(connection: Connection) -> FgdConnection:
    return FgdConnection(
        source=FgdPortRef(device=connection.source.device, port=connection.source.port),
        destination=FgdPortRef(
            device=connection.destination.device,
            port=connection.destination.port,
        ),
        type=connection.type,
    )
