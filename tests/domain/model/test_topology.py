from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fabdrift.domain.model import (
    Connection,
    ConnectionType,
    DeviceKind,
    PortRef,
    Server,
    Switch,
    SwitchRole,
    TopologyModel,
)
from tests.helpers.topologies import GENERATED_AT, LeafLayout, make_topology


def test_collections_are_canonically_ordered() -> None:
    model = make_topology(spines=2, layouts=[LeafLayout(uplinks=2), LeafLayout(uplinks=2)])
    shuffled = TopologyModel(
        name=model.name,
        generated_at=model.generated_at,
        spines=tuple(reversed(model.spines)),
        leaves=tuple(reversed(model.leaves)),
        servers=tuple(reversed(model.servers)),
        connections=tuple(reversed(model.connections)),
    )

    assert shuffled == model
    assert [s.id for s in shuffled.spines] == ["spine-01", "spine-02"]


def test_naive_timestamp_is_treated_as_utc() -> None:
    model = TopologyModel(name="dc1", generated_at=datetime(2025, 1, 15, 10, 0))  # noqa: DTZ001

    assert model.generated_at == GENERATED_AT


def test_offset_timestamp_is_normalised_to_utc() -> None:
    local = GENERATED_AT.astimezone(timezone(timedelta(hours=2)))

    model = TopologyModel(name="dc1", generated_at=local)

    assert model.generated_at.utcoffset() == timedelta(0)
    assert model.generated_at == GENERATED_AT


def test_duplicate_ids_are_rejected() -> None:
    server = Server(id="srv-001", type="compute-node")

    with pytest.raises(ValueError, match="Duplicate server id: srv-001"):
        TopologyModel(name="dc1", servers=(server, server))


def test_switch_in_wrong_collection_is_rejected() -> None:
    leaf = Switch(id="leaf-01", model="DS2000", ports=56, role=SwitchRole.LEAF)

    with pytest.raises(ValueError, match="listed as spine"):
        TopologyModel(name="dc1", spines=(leaf,))


def test_dangling_connection_is_rejected() -> None:
    leaf = Switch(id="leaf-01", model="DS2000", ports=56, role=SwitchRole.LEAF)
    connection = Connection(
        source=PortRef("leaf-01", "E1/49"),
        destination=PortRef("spine-99", "E1/1"),
        type=ConnectionType.UPLINK,
    )

    with pytest.raises(ValueError, match="unknown device spine-99"):
        TopologyModel(name="dc1", leaves=(leaf,), connections=(connection,))


def test_queries_by_device(single_class_topology: TopologyModel) -> None:
    model = single_class_topology

    assert model.kind_of("spine-01") is DeviceKind.SPINE
    assert model.kind_of("leaf-01") is DeviceKind.LEAF
    assert model.kind_of("srv-001") is DeviceKind.SERVER
    assert model.kind_of("nope") is None
    assert len(model.connections_of("leaf-01", type=ConnectionType.UPLINK)) == 8
    assert len(model.endpoint_servers_of("leaf-01")) == 24
    assert model.total_devices == 26


def test_without_device_drops_its_connections(single_class_topology: TopologyModel) -> None:
    trimmed = single_class_topology.without_device("srv-001")

    assert "srv-001" not in trimmed.device_ids
    assert not trimmed.connections_of("srv-001")
    assert len(trimmed.connections) == len(single_class_topology.connections) - 1


def test_connection_key_and_peer() -> None:
    connection = Connection(
        source=PortRef("srv-001", "eth0"),
        destination=PortRef("leaf-01", "E1/1"),
        type=ConnectionType.ENDPOINT,
    )

    assert connection.key == "srv-001:eth0->leaf-01:E1/1"
    assert connection.peer_of("leaf-01") == "srv-001"
    assert connection.peer_of("srv-001") == "leaf-01"


def test_edits_return_new_models(single_class_topology: TopologyModel) -> None:
    renamed = single_class_topology.renamed("dc2")
    changed = single_class_topology.with_connections(single_class_topology.connections[:-1])

    assert renamed.name == "dc2"
    assert single_class_topology.name == "dc1"
    assert changed != single_class_topology
