"""Reconciliation of declared topologies against persisted and live state.

- ``diff``: keyed structural comparison of two resource sets
- ``classify``: breaking / semantic / cosmetic impact tagging
- ``drift``: device and connection drift against the files on disk
- ``poller``: backoff-driven wait for live cluster resources
"""

from __future__ import annotations

from .backoff import BackoffPolicy
from .classify import (
    DEFAULT_BOOKKEEPING_LABELS,
    DEFAULT_STRUCTURAL_LABELS,
    ClassificationPolicy,
    ClassificationResult,
    SemanticDifference,
    classify,
)
from .diff import DiffResult, ResourceDifference, compare
from .drift import (
    ChangeType,
    DriftCategory,
    DriftChange,
    DriftReport,
    DriftStatus,
    compare_topologies,
    detect_drift,
)
from .poller import (
    PollOutcome,
    PollState,
    ReconciliationPoller,
    label_selector_for,
    namespace_for,
)

__all__ = [
    "DEFAULT_BOOKKEEPING_LABELS",
    "DEFAULT_STRUCTURAL_LABELS",
    "BackoffPolicy",
    "ChangeType",
    "ClassificationPolicy",
    "ClassificationResult",
    "DiffResult",
    "DriftCategory",
    "DriftChange",
    "DriftReport",
    "DriftStatus",
    "PollOutcome",
    "PollState",
    "ReconciliationPoller",
    "ResourceDifference",
    "SemanticDifference",
    "classify",
    "compare",
    "compare_topologies",
    "detect_drift",
    "label_selector_for",
    "namespace_for",
]
