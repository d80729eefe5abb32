"""Translate between ``TopologyModel`` and manifest documents."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import TYPE_CHECKING

from fabdrift.domain.model import (
    Connection,
    ConnectionType,
    PortRef,
    Server,
    Switch,
    SwitchRole,
    TopologyModel,
)

from .names import sanitize_name, unique_names
from .schema import (
    FABRIC_API_VERSION,
    WIRING_API_VERSION,
    ConnectionManifest,
    ConnectionManifestSpec,
    FabricManifest,
    FabricManifestSpec,
    FabricTopology,
    ManifestLink,
    ManifestPortRef,
    ObjectMeta,
    ServerManifest,
    ServerManifestSpec,
    SpineLeafCounts,
    SwitchManifest,
    SwitchManifestSpec,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

LABEL_NAME = "app.kubernetes.io/name"
LABEL_COMPONENT = "app.kubernetes.io/component"
LABEL_FABRIC = "hnc.githedgehog.com/fabric"
LABEL_ROLE = "hnc.githedgehog.com/role"
LABEL_MODEL = "hnc.githedgehog.com/model"
LABEL_TYPE = "hnc.githedgehog.com/type"
LABEL_FROM_DEVICE = "hnc.githedgehog.com/from-device"
LABEL_TO_DEVICE = "hnc.githedgehog.com/to-device"
ANNOTATION_GENERATED_AT = "hnc.githedgehog.com/generated-at"
ANNOTATION_TOTAL_DEVICES = "hnc.githedgehog.com/total-devices"

type ManifestSet = tuple[
    FabricManifest,
    list[SwitchManifest],
    list[ServerManifest],
    list[ConnectionManifest],
]


def _device_names(model: TopologyModel) -> dict[str, str]:
    return unique_names(model.device_ids)


def _connection_names(
    pairs: Iterable[tuple[str, str]],
    device_names: dict[str, str],
) -> dict[tuple[str, str], str]:
    """One name per ``(source, destination)`` device pair, unique within the fabric."""

    joined = {pair: f"{device_names[pair[0]]}/{device_names[pair[1]]}" for pair in pairs}
    names = unique_names(joined.values())
    return {pair: names[raw] for pair, raw in joined.items()}


def to_manifests(model: TopologyModel, *, namespace: str = "default") -> ManifestSet:
    device_names = _device_names(model)
    fabric = _build_fabric(model, namespace)
    switches = [
        _build_switch(s, device_names[s.id], model.name, namespace) for s in model.switches
    ]
    servers = [
        _build_server(s, device_names[s.id], model.name, namespace) for s in model.servers
    ]

    grouped: dict[tuple[str, str], list[Connection]] = defaultdict(list)
    for connection in model.connections:
        grouped[(connection.source.device, connection.destination.device)].append(connection)
    names = _connection_names(grouped, device_names)
    connections = sorted(
        (
            _build_connection(names[pair], links, model.name, namespace)
            for pair, links in grouped.items()
        ),
        key=lambda document: document.metadata.name,
    )
    return fabric, switches, servers, connections


def to_model(
    fabric: FabricManifest,
    switches: list[SwitchManifest],
    servers: list[ServerManifest],
    connections: list[ConnectionManifest],
) -> TopologyModel:
    generated_at = datetime.fromisoformat(fabric.metadata.annotations[ANNOTATION_GENERATED_AT])
    all_switches = [
        Switch(id=s.spec.id, model=s.spec.model, ports=s.spec.ports, role=s.spec.role)
        for s in switches
    ]
    return TopologyModel(
        name=fabric.spec.name,
        generated_at=generated_at,
        spines=tuple(s for s in all_switches if s.role is SwitchRole.SPINE),
        leaves=tuple(s for s in all_switches if s.role is SwitchRole.LEAF),
        servers=tuple(
            Server(id=s.spec.id, type=s.spec.type, connections=s.spec.connections)
            for s in servers
        ),
        connections=tuple(
            Connection(
                source=PortRef(link.source.device, link.source.port),
                destination=PortRef(link.destination.device, link.destination.port),
                type=link.type,
            )
            for document in connections
            for link in document.spec.links
        ),
    )


def _common_labels(name: str, component: str, fabric_name: str) -> dict[str, str]:
    return {
        LABEL_NAME: name,
        LABEL_COMPONENT: component,
        LABEL_FABRIC: sanitize_name(fabric_name),
    }


def _build_fabric(model: TopologyModel, namespace: str) -> FabricManifest:
    fabric_links = sum(1 for c in model.connections if c.type is ConnectionType.UPLINK)
    return FabricManifest(
        api_version=FABRIC_API_VERSION,
        kind="Fabric",
        metadata=ObjectMeta(
            name=sanitize_name(model.name),
            namespace=namespace,
            labels=_common_labels("hnc-fabric", "fabric-topology", model.name),
            annotations={
                ANNOTATION_GENERATED_AT: model.generated_at.isoformat(),
                ANNOTATION_TOTAL_DEVICES: str(model.total_devices),
            },
        ),
        spec=FabricManifestSpec(
            name=model.name,
            switches=[s.id for s in model.switches],
            servers=[s.id for s in model.servers],
            topology=FabricTopology(
                spine_leaf=SpineLeafCounts(
                    spines=len(model.spines),
                    leafs=len(model.leaves),
                    fabric_links=fabric_links,
                )
            ),
        ),
    )


def _build_switch(
    switch: Switch,
    name: str,
    fabric_name: str,
    namespace: str,
) -> SwitchManifest:
    labels = _common_labels("hnc-switch", "network-switch", fabric_name)
    labels[LABEL_ROLE] = switch.role.value
    labels[LABEL_MODEL] = switch.model
    return SwitchManifest(
        api_version=WIRING_API_VERSION,
        kind="Switch",
        metadata=ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=SwitchManifestSpec(
            id=switch.id,
            role=switch.role,
            model=switch.model,
            ports=switch.ports,
            profile=f"{switch.model.lower()}-profile",
        ),
    )


def _build_server(
    server: Server,
    name: str,
    fabric_name: str,
    namespace: str,
) -> ServerManifest:
    labels = _common_labels("hnc-server", "endpoint-server", fabric_name)
    labels[LABEL_TYPE] = server.type
    return ServerManifest(
        api_version=WIRING_API_VERSION,
        kind="Server",
        metadata=ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=ServerManifestSpec(
            id=server.id,
            type=server.type,
            connections=server.connections,
            profile=f"{server.type.lower()}-profile",
        ),
    )


def _build_connection(
    name: str,
    links: list[Connection],
    fabric_name: str,
    namespace: str,
) -> ConnectionManifest:
    first = links[0]
    labels = _common_labels("hnc-connection", "network-connection", fabric_name)
    labels[LABEL_TYPE] = first.type.value
    labels[LABEL_FROM_DEVICE] = first.source.device
    labels[LABEL_TO_DEVICE] = first.destination.device
    return ConnectionManifest(
        api_version=WIRING_API_VERSION,
        kind="Connection",
        metadata=ObjectMeta(name=name, namespace=namespace, labels=labels),
        spec=ConnectionManifestSpec(
            links=[
                ManifestLink(
                    source=ManifestPortRef(device=c.source.device, port=c.source.port),
                    destination=ManifestPortRef(
                        device=c.destination.device,
                        port=c.destination.port,
                    ),
                    type=c.type,
                )
                for c in links
            ]
        ),
    )
