"""Import provenance: how a fabric spec was reconstructed and what was guessed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fabdrift.domain.model.enums import ProvenanceSource, TopologyType

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


@dataclass(frozen=True, kw_only=True)
class DetectedPatterns:
    topology_type: TopologyType
    spine_count: int
    leaf_count: int
    server_types: frozenset[str]
    uplink_counts: frozenset[int]
    uplink_patterns: Mapping[str, int] = field(default_factory=dict["str", "int"])


@dataclass(frozen=True, kw_only=True)
class ImportProvenance:
    source: ProvenanceSource = ProvenanceSource.IMPORT
    original_path: str
    imported_at: datetime
    detected_patterns: DetectedPatterns
    assumptions: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(slots=True)
class ProvenanceRecorder:
    """Append-only collector used during a single import pass.

    ``freeze`` hands out the immutable ``ImportProvenance``; the recorder refuses
    further writes afterwards.
    """

    assumptions: list[str] = field(default_factory=list["str"])
    warnings: list[str] = field(default_factory=list["str"])
    _frozen: bool = False

    def assume(self, message: str) -> None:
        self._check_open()
        if message not in self.assumptions:
            self.assumptions.append(message)

    def warn(self, message: str) -> None:
        self._check_open()
        if message not in self.warnings:
            self.warnings.append(message)

    def freeze(
        self,
        *,
        original_path: str,
        imported_at: datetime,
        detected_patterns: DetectedPatterns,
    ) -> ImportProvenance:
        self._check_open()
        self._frozen = True
        return ImportProvenance(
            original_path=original_path,
            imported_at=imported_at,
            detected_patterns=detected_patterns,
            assumptions=tuple(self.assumptions),
            warnings=tuple(self.warnings),
        )

    def _check_open(self) -> None:
        if self._frozen:
            raise RuntimeError("Provenance has already been frozen for this import")


__all__ = ["DetectedPatterns", "ImportProvenance", "ProvenanceRecorder"]
