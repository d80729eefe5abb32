from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from fabdrift.domain.importer import import_topology, infer_endpoint_type
from fabdrift.domain.model import EndpointType, TopologyModel, TopologyType
from fabdrift.domain.switch_profiles import DEFAULT_PROFILES, DS2000
from tests.helpers.topologies import GENERATED_AT, LeafLayout, make_topology

if TYPE_CHECKING:
    from datetime import datetime


def _clock() -> datetime:
    return GENERATED_AT


def test_single_spine_single_leaf_import(single_class_topology: TopologyModel) -> None:
    result = import_topology(single_class_topology, original_path="/fabrics/dc1", clock=_clock)

    patterns = result.provenance.detected_patterns
    spec = result.fabric_spec
    assert patterns.spine_count == 1
    assert patterns.leaf_count == 1
    assert patterns.topology_type is TopologyType.SINGLE_CLASS
    assert result.validation.is_valid
    assert spec.uplinks_per_leaf == 8
    assert spec.endpoint_count == 24
    assert spec.leaf_classes is None
    assert spec.spine_model_id == "DS3000"
    assert spec.leaf_model_id == "DS2000"
    assert spec.endpoint_profile is not None
    assert spec.endpoint_profile.name == "compute-node"
    assert spec.endpoint_profile.type is EndpointType.COMPUTE
    assert spec.endpoint_profile.count == 24
    assert [c.signature for c in result.leaf_classes] == ["8-compute-node"]
    assert result.provenance.imported_at == GENERATED_AT


def test_full_uplink_usage_warns_without_failing(single_class_topology: TopologyModel) -> None:
    result = import_topology(single_class_topology, original_path="dc1", clock=_clock)

    assert "Leaf leaf-01 uplink ports near capacity: 8/8 (100%)" in result.validation.warnings
    usage = {(u.device_id, u.port_group): u for u in result.validation.port_usage}
    assert usage[("leaf-01", "endpoint")].used == 24
    assert usage[("leaf-01", "endpoint")].available == 48
    assert usage[("spine-01", "downlink")].used == 8


def test_metadata_describes_the_source(single_class_topology: TopologyModel) -> None:
    result = import_topology(single_class_topology, original_path="/fabrics/dc1", clock=_clock)

    assert result.fabric_spec.metadata == {
        "imported_from": "/fabrics/dc1",
        "original_generated_at": GENERATED_AT.isoformat(),
        "detected_topology": "single-class",
        "total_switches": 2,
        "total_servers": 24,
        "total_connections": 32,
    }


def test_multi_class_detection() -> None:
    model = make_topology(
        spines=2,
        layouts=[
            LeafLayout(uplinks=4, servers=(("storage-array", 2),), nics=2),
            LeafLayout(uplinks=2, servers=(("compute-node", 4),)),
        ],
    )

    result = import_topology(model, original_path="dc1", clock=_clock)

    assert result.provenance.detected_patterns.topology_type is TopologyType.MULTI_CLASS
    assert result.fabric_spec.leaf_classes == result.leaf_classes
    first, second = result.leaf_classes
    assert (first.id, first.uplinks_per_leaf, first.detected_from) == ("class-1", 2, ("leaf-02",))
    assert (second.id, second.uplinks_per_leaf) == ("class-2", 4)
    storage = second.endpoint_profiles[0]
    assert storage.type is EndpointType.STORAGE
    assert storage.nics == 2
    assert storage.redundancy
    assert result.fabric_spec.endpoint_count == 6
    assumptions = result.provenance.assumptions
    assert any(a.startswith("Multiple leaf patterns detected") for a in assumptions)


def test_leaves_with_same_signature_share_a_class() -> None:
    layout = LeafLayout(uplinks=2, servers=(("compute-node", 4),))
    model = make_topology(spines=2, layouts=[layout, layout, layout])

    result = import_topology(model, original_path="dc1", clock=_clock)

    (leaf_class,) = result.leaf_classes
    assert leaf_class.count == 3
    assert leaf_class.detected_from == ("leaf-01", "leaf-02", "leaf-03")
    assert leaf_class.name == "Leaf Class 2-compute-node (3 leaves)"


def test_import_is_deterministic() -> None:
    model = make_topology(
        spines=2,
        layouts=[
            LeafLayout(uplinks=2, servers=(("compute-node", 3), ("storage-array", 1))),
            LeafLayout(uplinks=2, servers=(("gpu-node", 2),)),
        ],
    )

    first = import_topology(model, original_path="dc1", clock=_clock)
    second = import_topology(model, original_path="dc1", clock=_clock)

    assert first == second


def test_endpoint_overflow_is_an_error() -> None:
    model = make_topology(layouts=[LeafLayout(uplinks=2, servers=(("compute-node", 50),))])

    result = import_topology(model, original_path="dc1", clock=_clock)

    assert not result.validation.is_valid
    assert result.validation.errors == (
        "Leaf leaf-01 exceeds endpoint port capacity: 50/48 ports used",
    )


def test_uplink_overflow_is_an_error() -> None:
    model = make_topology(
        spines=2,
        layouts=[LeafLayout(uplinks=10, servers=(("compute-node", 4),))],
    )

    result = import_topology(model, original_path="dc1", clock=_clock)

    assert not result.validation.is_valid
    assert "Leaf leaf-01 exceeds uplink port capacity: 10/8 ports used" in (
        result.validation.errors
    )
    assert not any("endpoint port capacity" in e for e in result.validation.errors)


def test_unknown_switch_model_is_an_error() -> None:
    model = make_topology(spines=2, spine_model="XS9000", layouts=[LeafLayout(uplinks=2)])

    result = import_topology(model, original_path="dc1", clock=_clock)

    assert not result.validation.is_valid
    assert result.validation.errors == ("Unknown switch model: XS9000",)


def test_varying_nic_counts_are_recorded() -> None:
    model = make_topology(layouts=[LeafLayout(uplinks=2, servers=(("compute-node", 3),))])
    servers = tuple(
        replace(s, connections=2) if s.id == "srv-001" else s for s in model.servers
    )

    result = import_topology(replace(model, servers=servers), original_path="dc1", clock=_clock)

    assert (
        "Server type 'compute-node' has varying connection counts in leaf leaf-01"
        in result.validation.warnings
    )
    assert (
        "Using 1 ports per endpoint for server type 'compute-node' (most common value)"
        in result.provenance.assumptions
    )


def test_mixed_leaf_models_pick_the_most_common() -> None:
    profiles = {**DEFAULT_PROFILES, "DS2010": replace(DS2000, model_id="DS2010")}
    model = make_topology(
        spines=2,
        layouts=[LeafLayout(uplinks=2, model="DS2010"), LeafLayout(uplinks=2)],
    )

    result = import_topology(model, original_path="dc1", clock=_clock, profiles=profiles)

    assert result.fabric_spec.leaf_model_id == "DS2000"
    assert "Multiple leaf models detected: DS2000, DS2010" in result.validation.warnings
    assert "Using leaf model DS2000 (most common)" in result.provenance.assumptions


def test_empty_topology_only_warns() -> None:
    result = import_topology(TopologyModel(name="empty"), original_path="empty", clock=_clock)

    assert result.validation.is_valid
    assert result.leaf_classes == ()
    assert result.fabric_spec.endpoint_count is None
    assert "No spine switches found" in result.validation.warnings
    assert "No servers found" in result.validation.warnings


def test_name_constraints_surface_as_warnings() -> None:
    model = make_topology(name="dc", layouts=[LeafLayout(uplinks=2)])

    result = import_topology(model, original_path="dc", clock=_clock)

    assert result.validation.is_valid
    assert any(w.startswith("Schema constraint: Fabric name") for w in result.validation.warnings)


def test_lower_threshold_flags_endpoint_ports(single_class_topology: TopologyModel) -> None:
    result = import_topology(
        single_class_topology,
        original_path="dc1",
        clock=_clock,
        capacity_warning_threshold=0.5,
    )

    assert "Leaf leaf-01 endpoint ports near capacity: 24/48 (50%)" in result.validation.warnings


@pytest.mark.parametrize(
    ("server_type", "expected"),
    [
        ("storage-array", EndpointType.STORAGE),
        ("NAS-01", EndpointType.STORAGE),
        ("gpu-node", EndpointType.COMPUTE),
        ("edge-router", EndpointType.NETWORK),
        ("web", EndpointType.SERVER),
    ],
)
def test_infer_endpoint_type(server_type: str, expected: EndpointType) -> None:
    assert infer_endpoint_type(server_type) is expected
