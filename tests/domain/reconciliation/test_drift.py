from __future__ import annotations

from dataclasses import replace
from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from fabdrift.adapters.filesystem import FileTopologyStore
from fabdrift.adapters.serialization import ParseError
from fabdrift.domain.model import Server
from fabdrift.domain.reconciliation import (
    ChangeType,
    DriftCategory,
    compare_topologies,
    detect_drift,
)
from fabdrift.domain.reconciliation.drift import NO_DRIFT, NO_FILES
from tests.helpers.topologies import GENERATED_AT, LeafLayout, make_topology

if TYPE_CHECKING:
    from pathlib import Path

    from fabdrift.domain.model import TopologyModel


@pytest.fixture
def small_topology() -> TopologyModel:
    return make_topology(layouts=[LeafLayout(uplinks=2, servers=(("compute-node", 2),))])


def test_identical_topologies_have_no_drift(small_topology: TopologyModel) -> None:
    report = compare_topologies(small_topology, small_topology)

    assert not report.has_drift
    assert report.summary_lines() == [NO_DRIFT]


def test_added_removed_and_modified_devices(small_topology: TopologyModel) -> None:
    current = small_topology.without_device("srv-002")
    servers = tuple(
        replace(s, type="gpu-node") if s.id == "srv-001" else s for s in current.servers
    )
    current = replace(current, servers=(*servers, Server(id="srv-099", type="storage-array")))

    report = compare_topologies(current, small_topology)

    by_type = {(c.type, c.item_id): c for c in report.changes}
    assert by_type[(ChangeType.ADDED, "srv-099")].description == (
        "endpoint 'srv-099' added (model: storage-array)"
    )
    assert by_type[(ChangeType.REMOVED, "srv-002")].description == (
        "endpoint 'srv-002' removed (was: compute-node)"
    )
    modified = by_type[(ChangeType.MODIFIED, "srv-001")]
    assert modified.changed_fields == ("type",)
    assert report.counts[DriftCategory.ENDPOINT].total == 3
    assert report.counts[DriftCategory.CONNECTION].removed == 1
    assert report.summary_lines() == [
        "endpoints: 1 added, 1 removed, 1 modified",
        "connections: 1 removed",
    ]


def test_switch_changes_use_plural_summary(small_topology: TopologyModel) -> None:
    leaves = tuple(replace(s, ports=64) for s in small_topology.leaves)

    report = compare_topologies(replace(small_topology, leaves=leaves), small_topology)

    assert report.summary_lines() == ["switches: 1 modified"]
    (change,) = report.changes
    assert change.description == "switch 'leaf-01' modified (ports changed)"


def test_timestamps_are_ignored_by_default(small_topology: TopologyModel) -> None:
    later = replace(small_topology, generated_at=GENERATED_AT + timedelta(hours=1))

    assert not compare_topologies(later, small_topology).has_drift
    report = compare_topologies(later, small_topology, ignore_timestamps=False)
    (change,) = report.changes
    assert change.category is DriftCategory.FABRIC
    assert change.changed_fields == ("generated_at",)


def test_detect_drift_without_stored_files(tmp_path: Path, small_topology: TopologyModel) -> None:
    status = detect_drift(
        "dc1",
        small_topology,
        FileTopologyStore(tmp_path),
        clock=lambda: GENERATED_AT,
    )

    assert not status.has_drift
    assert status.summary == (NO_FILES,)
    assert status.report is None
    assert status.checked_at == GENERATED_AT


def test_detect_drift_against_stored_copy(tmp_path: Path, small_topology: TopologyModel) -> None:
    store = FileTopologyStore(tmp_path)
    store.save(small_topology, "dc1")

    unchanged = detect_drift("dc1", small_topology, store)
    changed = detect_drift("dc1", small_topology.without_device("srv-001"), store)

    assert not unchanged.has_drift
    assert changed.has_drift
    assert changed.summary == ("endpoints: 1 removed", "connections: 1 removed")


def test_detect_drift_propagates_decode_errors(
    tmp_path: Path,
    small_topology: TopologyModel,
) -> None:
    store = FileTopologyStore(tmp_path)
    directory = store.save(small_topology, "dc1")
    (directory / "servers.yaml").write_text("servers: [unclosed\n", encoding="utf-8")

    with pytest.raises(ParseError):
        detect_drift("dc1", small_topology, store)
