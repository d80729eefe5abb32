"""Wiring topology value objects.

A topology is the physical graph of a fabric: spine and leaf switches, the
servers hanging off the leaves and the typed connections between them.
Instances are immutable; every "edit" returns a new ``TopologyModel`` so that
values handed to the diff engine never change underneath it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fabdrift.domain.model.enums import ConnectionType, DeviceKind, SwitchRole

if TYPE_CHECKING:
    from collections.abc import Iterable


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Switch:
    id: str
    model: str
    ports: int
    role: SwitchRole


@dataclass(frozen=True, slots=True)
class Server:
    id: str
    type: str
    connections: int = 1


type Device = Switch | Server


@dataclass(frozen=True, slots=True, order=True)
class PortRef:
    device: str
    port: str

    def __str__(self) -> str:
        return f"{self.device}:{self.port}"


@dataclass(frozen=True, slots=True)
class Connection:
    source: PortRef
    destination: PortRef
    type: ConnectionType

    @property
    def key(self) -> str:
        """Stable identity used when comparing connection sets."""
        return f"{self.source}->{self.destination}"

    @property
    def sort_key(self) -> tuple[str, str, str, str]:
        return (
            self.source.device,
            self.source.port,
            self.destination.device,
            self.destination.port,
        )

    def touches(self, device_id: str) -> bool:
        return device_id in (self.source.device, self.destination.device)

    def peer_of(self, device_id: str) -> str:
        if self.source.device == device_id:
            return self.destination.device
        return self.source.device


@dataclass(frozen=True, kw_only=True)
class TopologyModel:
    """Immutable spine/leaf/server graph.

    Collections are normalised into canonical order on construction (devices by
    id, connections by source then destination), so two models describing the
    same wiring compare equal regardless of the order they were built in.
    """

    name: str
    generated_at: datetime = field(default_factory=_utcnow)
    spines: tuple[Switch, ...] = ()
    leaves: tuple[Switch, ...] = ()
    servers: tuple[Server, ...] = ()
    connections: tuple[Connection, ...] = ()

    def __post_init__(self) -> None:
        generated_at = self.generated_at
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=UTC)
        object.__setattr__(self, "generated_at", generated_at.astimezone(UTC))
        object.__setattr__(self, "spines", tuple(sorted(self.spines, key=lambda s: s.id)))
        object.__setattr__(self, "leaves", tuple(sorted(self.leaves, key=lambda s: s.id)))
        object.__setattr__(self, "servers", tuple(sorted(self.servers, key=lambda s: s.id)))
        object.__setattr__(
            self,
            "connections",
            tuple(sorted(self.connections, key=lambda c: c.sort_key)),
        )
        self._validate()

    def _validate(self) -> None:
        for kind, devices in (
            (DeviceKind.SPINE, self.spines),
            (DeviceKind.LEAF, self.leaves),
            (DeviceKind.SERVER, self.servers),
        ):
            seen: set[str] = set()
            for device in devices:
                if device.id in seen:
                    raise ValueError(f"Duplicate {kind} id: {device.id}")
                seen.add(device.id)

        for switch in self.spines:
            if switch.role is not SwitchRole.SPINE:
                raise ValueError(
                    f"Switch {switch.id} is listed as spine but has role {switch.role}"
                )
        for switch in self.leaves:
            if switch.role is not SwitchRole.LEAF:
                raise ValueError(f"Switch {switch.id} is listed as leaf but has role {switch.role}")

        known = self.device_ids
        for connection in self.connections:
            for ref in (connection.source, connection.destination):
                if ref.device not in known:
                    raise ValueError(
                        f"Connection {connection.key} references unknown device {ref.device}"
                    )

    @property
    def switches(self) -> tuple[Switch, ...]:
        return self.spines + self.leaves

    @property
    def device_ids(self) -> frozenset[str]:
        return frozenset(d.id for d in (*self.spines, *self.leaves, *self.servers))

    @property
    def total_devices(self) -> int:
        return len(self.spines) + len(self.leaves) + len(self.servers)

    def kind_of(self, device_id: str) -> DeviceKind | None:
        if any(s.id == device_id for s in self.spines):
            return DeviceKind.SPINE
        if any(s.id == device_id for s in self.leaves):
            return DeviceKind.LEAF
        if any(s.id == device_id for s in self.servers):
            return DeviceKind.SERVER
        return None

    def connections_of(
        self,
        device_id: str,
        *,
        type: ConnectionType | None = None,  # noqa: A002
    ) -> tuple[Connection, ...]:
        return tuple(
            c
            for c in self.connections
            if c.touches(device_id) and (type is None or c.type is type)
        )

    def endpoint_servers_of(self, leaf_id: str) -> tuple[Server, ...]:
        """Servers reachable from ``leaf_id`` through endpoint connections."""
        endpoint_links = self.connections_of(leaf_id, type=ConnectionType.ENDPOINT)
        peers = {c.peer_of(leaf_id) for c in endpoint_links}
        return tuple(s for s in self.servers if s.id in peers)

    def with_connections(self, connections: Iterable[Connection]) -> TopologyModel:
        return replace(self, connections=tuple(connections))

    def without_device(self, device_id: str) -> TopologyModel:
        """Return a copy with ``device_id`` and every connection touching it removed."""
        return replace(
            self,
            spines=tuple(s for s in self.spines if s.id != device_id),
            leaves=tuple(s for s in self.leaves if s.id != device_id),
            servers=tuple(s for s in self.servers if s.id != device_id),
            connections=tuple(c for c in self.connections if not c.touches(device_id)),
        )

    def renamed(self, name: str) -> TopologyModel:
        return replace(self, name=name)


__all__ = [
    "Connection",
    "Device",
    "PortRef",
    "Server",
    "Switch",
    "TopologyModel",
]
