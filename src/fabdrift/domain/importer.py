"""Reconstruct a canonical ``FabricSpec`` from a persisted topology.

The importer is a pure function of the topology (plus an injected clock): it
groups leaves by their ``(uplink count, server types)`` signature, rebuilds
endpoint profiles from the attached servers, and checks port demand against
the switch profile catalog. Anything it has to guess ends up in the
provenance as an assumption or a warning rather than an exception.
"""

from __future__ import annotations

import time
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import PurePath
from typing import TYPE_CHECKING

from fabdrift.domain.clock import utcnow
from fabdrift.domain.model import (
    ConnectionType,
    DetectedPatterns,
    DeviceKind,
    EndpointProfile,
    EndpointType,
    FabricSpec,
    LeafClass,
    ProvenanceRecorder,
    SwitchRole,
    TopologyType,
)
from fabdrift.domain.switch_profiles import DEFAULT_PROFILES

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from fabdrift.domain.clock import Clock
    from fabdrift.domain.model import (
        ImportProvenance,
        Server,
        Switch,
        TopologyModel,
    )
    from fabdrift.domain.switch_profiles import SwitchProfile

log = getLogger(__name__)

DEFAULT_CAPACITY_WARNING_THRESHOLD = 0.8


class TopologyImportError(Exception):
    """Raised when the persisted files at ``path`` cannot be read or decoded."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True, slots=True)
class PortUsage:
    device_id: str
    kind: DeviceKind
    port_group: str
    used: int
    available: int

    @property
    def utilisation(self) -> float:
        if self.available == 0:
            return 1.0 if self.used else 0.0
        return self.used / self.available

    @property
    def exceeded(self) -> bool:
        return self.used > self.available


@dataclass(frozen=True, kw_only=True)
class ImportValidation:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    port_usage: tuple[PortUsage, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ImportResult:
    fabric_spec: FabricSpec
    leaf_classes: tuple[LeafClass, ...]
    provenance: ImportProvenance
    validation: ImportValidation


@dataclass(slots=True)
class _LeafPattern:
    leaf: Switch
    uplinks: int
    servers_by_type: dict[str, list[Server]] = field(default_factory=dict)

    @property
    def server_types(self) -> tuple[str, ...]:
        return tuple(sorted(self.servers_by_type))

    @property
    def sort_key(self) -> tuple[int, tuple[str, ...]]:
        return (self.uplinks, self.server_types)

    @property
    def signature(self) -> str:
        return f"{self.uplinks}-{','.join(self.server_types)}"


def infer_endpoint_type(server_type: str) -> EndpointType:
    lowered = server_type.lower()
    if any(token in lowered for token in ("storage", "disk", "nas")):
        return EndpointType.STORAGE
    if any(token in lowered for token in ("compute", "cpu", "gpu")):
        return EndpointType.COMPUTE
    if any(token in lowered for token in ("network", "router", "gateway")):
        return EndpointType.NETWORK
    return EndpointType.SERVER


def _most_common[T: (int, str)](values: Iterable[T]) -> T:
    """Most frequent value; ties resolve to the smallest for determinism."""
    counts = Counter(values)
    best = max(counts.values())
    return min(value for value, count in counts.items() if count == best)


def import_topology(
    model: TopologyModel,
    *,
    original_path: str,
    clock: Clock = utcnow,
    profiles: Mapping[str, SwitchProfile] = DEFAULT_PROFILES,
    capacity_warning_threshold: float = DEFAULT_CAPACITY_WARNING_THRESHOLD,
) -> ImportResult:
    """Infer fabric intent, leaf classes and provenance from ``model``."""

    started = time.perf_counter()
    recorder = ProvenanceRecorder()

    if not model.spines:
        recorder.warn("No spine switches found")
    if not model.leaves:
        recorder.warn("No leaf switches found")
    if not model.servers:
        recorder.warn("No servers found")

    patterns = _detect_leaf_patterns(model, recorder)
    signatures = {p.signature for p in patterns}
    topology_type = TopologyType.MULTI_CLASS if len(signatures) > 1 else TopologyType.SINGLE_CLASS
    leaf_classes = _build_leaf_classes(patterns, recorder)

    fabric_spec = _build_fabric_spec(
        model,
        original_path=original_path,
        topology_type=topology_type,
        patterns=patterns,
        leaf_classes=leaf_classes,
        recorder=recorder,
    )

    port_usage, capacity_errors, capacity_warnings = _check_capacity(
        model,
        profiles=profiles,
        threshold=capacity_warning_threshold,
    )
    constraint_warnings = [
        f"Schema constraint: {problem}" for problem in fabric_spec.constraint_violations()
    ]

    detected = DetectedPatterns(
        topology_type=topology_type,
        spine_count=len(model.spines),
        leaf_count=len(model.leaves),
        server_types=frozenset(s.type for s in model.servers),
        uplink_counts=frozenset(p.uplinks for p in patterns),
        uplink_patterns={p.leaf.id: p.uplinks for p in patterns},
    )
    provenance = recorder.freeze(
        original_path=original_path,
        imported_at=clock(),
        detected_patterns=detected,
    )
    validation = ImportValidation(
        is_valid=not capacity_errors,
        errors=tuple(capacity_errors),
        warnings=(*provenance.warnings, *capacity_warnings, *constraint_warnings),
        port_usage=tuple(port_usage),
    )

    elapsed_ms = (time.perf_counter() - started) * 1000
    log.info(
        f"Imported {original_path} in {elapsed_ms:.1f}ms: {topology_type}, "
        f"{len(leaf_classes)} leaf classes, valid={validation.is_valid}"
    )
    return ImportResult(
        fabric_spec=fabric_spec,
        leaf_classes=leaf_classes,
        provenance=provenance,
        validation=validation,
    )


def _detect_leaf_patterns(model: TopologyModel, recorder: ProvenanceRecorder) -> list[_LeafPattern]:
    patterns: list[_LeafPattern] = []
    for leaf in model.leaves:
        uplinks = len(model.connections_of(leaf.id, type=ConnectionType.UPLINK))
        pattern = _LeafPattern(leaf=leaf, uplinks=uplinks)
        for server in model.endpoint_servers_of(leaf.id):
            pattern.servers_by_type.setdefault(server.type, []).append(server)
        if uplinks == 0:
            recorder.warn(f"Leaf {leaf.id} has no uplinks - may be disconnected or orphaned")
        patterns.append(pattern)
    return patterns


def _build_profiles(
    pattern: _LeafPattern,
    recorder: ProvenanceRecorder,
) -> tuple[EndpointProfile, ...]:
    profiles: list[EndpointProfile] = []
    for server_type in pattern.server_types:
        servers = pattern.servers_by_type[server_type]
        nic_counts = [s.connections for s in servers]
        nics = _most_common(nic_counts)
        if len(set(nic_counts)) > 1:
            recorder.warn(
                f"Server type '{server_type}' has varying connection counts "
                f"in leaf {pattern.leaf.id}"
            )
            recorder.assume(
                f"Using {nics} ports per endpoint for server type '{server_type}' "
                f"(most common value)"
            )
        profiles.append(
            EndpointProfile(
                name=server_type,
                ports_per_endpoint=nics,
                count=len(servers),
                type=infer_endpoint_type(server_type),
                redundancy=nics > 1,
                nics=nics,
            )
        )
    return tuple(profiles)


def _build_leaf_classes(
    patterns: list[_LeafPattern],
    recorder: ProvenanceRecorder,
) -> tuple[LeafClass, ...]:
    groups: dict[tuple[int, tuple[str, ...]], list[_LeafPattern]] = defaultdict(list)
    for pattern in patterns:
        groups[pattern.sort_key].append(pattern)

    leaf_classes: list[LeafClass] = []
    for key in sorted(groups):
        members = sorted(groups[key], key=lambda p: p.leaf.id)
        representative = members[0]
        signature = representative.signature
        profiles = _build_profiles(representative, recorder)
        if not profiles:
            recorder.warn(f"No endpoint profiles found for leaf class {signature}")
            continue
        for member in members[1:]:
            # NIC warnings are recorded per leaf, not just for the representative
            _build_profiles(member, recorder)

        counts = {tuple(len(m.servers_by_type[t]) for t in m.server_types) for m in members}
        if len(counts) > 1:
            recorder.assume(
                f"Leaves with signature {signature} attach different endpoint counts; "
                f"using counts from {representative.leaf.id}"
            )

        leaf_models = [m.leaf.model for m in members]
        class_id = f"class-{len(leaf_classes) + 1}"
        leaf_classes.append(
            LeafClass(
                id=class_id,
                name=(
                    f"Leaf Class {representative.leaf.id}"
                    if len(members) == 1
                    else f"Leaf Class {signature} ({len(members)} leaves)"
                ),
                uplinks_per_leaf=representative.uplinks,
                endpoint_profiles=profiles,
                count=len(members),
                leaf_model_id=_most_common(leaf_models),
                detected_from=tuple(m.leaf.id for m in members),
                signature=signature,
            )
        )
    return tuple(leaf_classes)


def _detect_model(
    switches: tuple[Switch, ...],
    role: SwitchRole,
    recorder: ProvenanceRecorder,
) -> str | None:
    if not switches:
        return None
    models = [s.model for s in switches]
    chosen = _most_common(models)
    distinct = sorted(set(models))
    if len(distinct) > 1:
        recorder.warn(f"Multiple {role} models detected: {', '.join(distinct)}")
        recorder.assume(f"Using {role} model {chosen} (most common)")
    return chosen


def _build_fabric_spec(
    model: TopologyModel,
    *,
    original_path: str,
    topology_type: TopologyType,
    patterns: list[_LeafPattern],
    leaf_classes: tuple[LeafClass, ...],
    recorder: ProvenanceRecorder,
) -> FabricSpec:
    name = model.name or PurePath(original_path).name
    spine_model = _detect_model(model.spines, SwitchRole.SPINE, recorder)
    leaf_model = _detect_model(model.leaves, SwitchRole.LEAF, recorder)
    attached = {s.id for p in patterns for group in p.servers_by_type.values() for s in group}

    metadata = {
        "imported_from": original_path,
        "original_generated_at": model.generated_at.isoformat(),
        "detected_topology": str(topology_type),
        "total_switches": len(model.switches),
        "total_servers": len(model.servers),
        "total_connections": len(model.connections),
    }

    uplinks_per_leaf = _most_common(p.uplinks for p in patterns) if patterns else None
    endpoint_profile: EndpointProfile | None = None
    multi_class: tuple[LeafClass, ...] | None = None

    if topology_type is TopologyType.MULTI_CLASS:
        multi_class = leaf_classes
        recorder.assume(
            "Multiple leaf patterns detected; uplinks_per_leaf and endpoint_count are "
            "advisory defaults, leaf_classes is authoritative"
        )
    elif leaf_classes:
        only = leaf_classes[0]
        endpoint_profile = only.endpoint_profiles[0]
        if len(only.endpoint_profiles) > 1:
            recorder.assume(
                f"Leaf class {only.id} has {len(only.endpoint_profiles)} endpoint profiles; "
                f"endpoint_profile holds {endpoint_profile.name}"
            )

    return FabricSpec(
        name=name,
        spine_model_id=spine_model,
        leaf_model_id=leaf_model,
        uplinks_per_leaf=uplinks_per_leaf,
        endpoint_profile=endpoint_profile,
        endpoint_count=len(attached) if patterns else None,
        leaf_classes=multi_class,
        metadata=metadata,
    )


def _check_capacity(
    model: TopologyModel,
    *,
    profiles: Mapping[str, SwitchProfile],
    threshold: float,
) -> tuple[list[PortUsage], list[str], list[str]]:
    usage: list[PortUsage] = []
    errors: list[str] = []
    warnings: list[str] = []

    def record(entry: PortUsage, label: str) -> None:
        usage.append(entry)
        if entry.exceeded:
            errors.append(
                f"{label} {entry.device_id} exceeds {entry.port_group} port capacity: "
                f"{entry.used}/{entry.available} ports used"
            )
        elif entry.used and entry.utilisation >= threshold:
            warnings.append(
                f"{label} {entry.device_id} {entry.port_group} ports near capacity: "
                f"{entry.used}/{entry.available} ({entry.utilisation:.0%})"
            )

    unknown: set[str] = set()
    for switch in model.switches:
        profile = profiles.get(switch.model)
        if profile is None:
            if switch.model not in unknown:
                errors.append(f"Unknown switch model: {switch.model}")
                unknown.add(switch.model)
            continue
        if switch.role not in profile.roles:
            errors.append(f"Switch {switch.id}: model {switch.model} cannot serve as {switch.role}")
            continue

        uplinks = len(model.connections_of(switch.id, type=ConnectionType.UPLINK))
        if switch.role is SwitchRole.LEAF:
            endpoints = len(model.connections_of(switch.id, type=ConnectionType.ENDPOINT))
            endpoint_usage = PortUsage(
                switch.id, DeviceKind.LEAF, "endpoint", endpoints, profile.endpoint_ports
            )
            record(endpoint_usage, "Leaf")
            record(
                PortUsage(switch.id, DeviceKind.LEAF, "uplink", uplinks, profile.fabric_ports),
                "Leaf",
            )
        else:
            record(
                PortUsage(switch.id, DeviceKind.SPINE, "downlink", uplinks, profile.fabric_ports),
                "Spine",
            )
    return usage, errors, warnings


__all__ = [
    "DEFAULT_CAPACITY_WARNING_THRESHOLD",
    "ImportResult",
    "ImportValidation",
    "PortUsage",
    "TopologyImportError",
    "import_topology",
    "infer_endpoint_type",
]
