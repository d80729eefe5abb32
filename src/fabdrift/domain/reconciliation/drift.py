"""Drift between an in-memory topology and the copy persisted on disk."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, fields
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from fabdrift.domain.clock import utcnow

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

    from fabdrift.domain.clock import Clock
    from fabdrift.domain.model import Connection, Server, Switch, TopologyModel
    from fabdrift.domain.ports import TopologyStore

log = getLogger(__name__)

NO_DRIFT = "No drift detected - in-memory topology matches files on disk"
NO_FILES = "No files found on disk - nothing to compare against"


class ChangeType(StrEnum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class DriftCategory(StrEnum):
    FABRIC = "fabric"
    SWITCH = "switch"
    ENDPOINT = "endpoint"
    CONNECTION = "connection"

    @property
    def plural(self) -> str:
        return "switches" if self is DriftCategory.SWITCH else f"{self}s"


@dataclass(frozen=True, slots=True)
class DriftChange:
    type: ChangeType
    category: DriftCategory
    item_id: str
    description: str
    changed_fields: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CategoryCounts:
    added: int = 0
    removed: int = 0
    modified: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified


@dataclass(frozen=True, kw_only=True)
class DriftReport:
    changes: tuple[DriftChange, ...] = ()
    counts: Mapping[DriftCategory, CategoryCounts] = field(
        default_factory=dict["DriftCategory", "CategoryCounts"]
    )

    @property
    def has_drift(self) -> bool:
        return bool(self.changes)

    def summary_lines(self) -> list[str]:
        if not self.changes:
            return [NO_DRIFT]
        lines: list[str] = []
        for category in DriftCategory:
            counts = self.counts.get(category)
            if counts is None or not counts.total:
                continue
            parts = [
                f"{value} {name}"
                for name, value in (
                    ("added", counts.added),
                    ("removed", counts.removed),
                    ("modified", counts.modified),
                )
                if value
            ]
            lines.append(f"{category.plural}: {', '.join(parts)}")
        return lines


@dataclass(frozen=True, kw_only=True)
class DriftStatus:
    fabric_id: str
    has_drift: bool
    summary: tuple[str, ...]
    checked_at: datetime
    report: DriftReport | None = None


def _changed_fields(current: Switch | Server, on_disk: Switch | Server) -> tuple[str, ...]:
    return tuple(
        f.name for f in fields(current) if getattr(current, f.name) != getattr(on_disk, f.name)
    )


def _describe(device: Switch | Server) -> str:
    return getattr(device, "model", None) or getattr(device, "type", None) or "unknown"


def _compare_devices(
    current: Sequence[Switch] | Sequence[Server],
    on_disk: Sequence[Switch] | Sequence[Server],
    category: DriftCategory,
) -> list[DriftChange]:
    now = {d.id: d for d in current}
    disk = {d.id: d for d in on_disk}
    changes: list[DriftChange] = []
    for device_id in sorted(now.keys() - disk.keys()):
        changes.append(
            DriftChange(
                ChangeType.ADDED,
                category,
                device_id,
                f"{category} '{device_id}' added (model: {_describe(now[device_id])})",
            )
        )
    for device_id in sorted(disk.keys() - now.keys()):
        changes.append(
            DriftChange(
                ChangeType.REMOVED,
                category,
                device_id,
                f"{category} '{device_id}' removed (was: {_describe(disk[device_id])})",
            )
        )
    for device_id in sorted(now.keys() & disk.keys()):
        changed = _changed_fields(now[device_id], disk[device_id])
        if changed:
            detail = ", ".join(f"{name} changed" for name in changed)
            changes.append(
                DriftChange(
                    ChangeType.MODIFIED,
                    category,
                    device_id,
                    f"{category} '{device_id}' modified ({detail})",
                    changed,
                )
            )
    return changes


def _compare_connections(
    current: Sequence[Connection],
    on_disk: Sequence[Connection],
) -> list[DriftChange]:
    now = {c.key: c for c in current}
    disk = {c.key: c for c in on_disk}
    changes: list[DriftChange] = []
    for key in sorted(now.keys() - disk.keys()):
        changes.append(
            DriftChange(
                ChangeType.ADDED,
                DriftCategory.CONNECTION,
                key,
                f"Connection added: {key}",
            )
        )
    for key in sorted(disk.keys() - now.keys()):
        changes.append(
            DriftChange(
                ChangeType.REMOVED,
                DriftCategory.CONNECTION,
                key,
                f"Connection removed: {key}",
            )
        )
    for key in sorted(now.keys() & disk.keys()):
        if now[key].type != disk[key].type:
            changes.append(
                DriftChange(
                    ChangeType.MODIFIED,
                    DriftCategory.CONNECTION,
                    key,
                    f"Connection modified: {key} (type changed)",
                    ("type",),
                )
            )
    return changes


def _compare_fabric(
    current: TopologyModel,
    on_disk: TopologyModel,
    *,
    ignore_timestamps: bool,
) -> list[DriftChange]:
    changed: list[str] = []
    if current.name != on_disk.name:
        changed.append("name")
    if not ignore_timestamps and current.generated_at != on_disk.generated_at:
        changed.append("generated_at")
    if not changed:
        return []
    detail = ", ".join(f"{name} changed" for name in changed)
    return [
        DriftChange(
            ChangeType.MODIFIED,
            DriftCategory.FABRIC,
            on_disk.name,
            f"fabric '{on_disk.name}' modified ({detail})",
            tuple(changed),
        )
    ]


def compare_topologies(
    current: TopologyModel,
    on_disk: TopologyModel,
    *,
    ignore_timestamps: bool = True,
) -> DriftReport:
    changes = [
        *_compare_fabric(current, on_disk, ignore_timestamps=ignore_timestamps),
        *_compare_devices(current.switches, on_disk.switches, DriftCategory.SWITCH),
        *_compare_devices(current.servers, on_disk.servers, DriftCategory.ENDPOINT),
        *_compare_connections(current.connections, on_disk.connections),
    ]
    tally = Counter((c.category, c.type) for c in changes)
    counts = {
        category: CategoryCounts(
            added=tally[(category, ChangeType.ADDED)],
            removed=tally[(category, ChangeType.REMOVED)],
            modified=tally[(category, ChangeType.MODIFIED)],
        )
        for category in DriftCategory
    }
    return DriftReport(changes=tuple(changes), counts=counts)


def detect_drift(
    fabric_id: str,
    current: TopologyModel,
    store: TopologyStore,
    *,
    ignore_timestamps: bool = True,
    clock: Clock = utcnow,
) -> DriftStatus:
    """Compare ``current`` with what ``store`` holds for ``fabric_id``.

    A fabric that has never been saved has nothing to drift from and reports
    no drift. Decode failures of the stored files propagate.
    """

    if not store.exists(fabric_id):
        return DriftStatus(
            fabric_id=fabric_id,
            has_drift=False,
            summary=(NO_FILES,),
            checked_at=clock(),
        )

    on_disk = store.load(fabric_id)
    report = compare_topologies(current, on_disk, ignore_timestamps=ignore_timestamps)
    log.info(f"Drift check for {fabric_id}: {len(report.changes)} change(s)")
    return DriftStatus(
        fabric_id=fabric_id,
        has_drift=report.has_drift,
        summary=tuple(report.summary_lines()),
        checked_at=clock(),
        report=report,
    )


__all__ = [
    "NO_DRIFT",
    "NO_FILES",
    "CategoryCounts",
    "ChangeType",
    "DriftCategory",
    "DriftChange",
    "DriftReport",
    "DriftStatus",
    "compare_topologies",
    "detect_drift",
]
