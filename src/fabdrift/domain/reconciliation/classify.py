"""Impact classification of structural differences.

Missing entities are breaking, extra ones are semantic; label disagreements
are tiered by the policy's bookkeeping and structural label lists, and
apiVersion drift is semantic. A key that occurs twice on one side is
breaking, since only one of the two can be matched. A comparison is valid iff
nothing is breaking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fabdrift.domain.model import Impact

from .diff import UNDEFINED, compare

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fabdrift.domain.model import Resource

DEFAULT_BOOKKEEPING_LABELS: frozenset[str] = frozenset(
    {
        "app.kubernetes.io/name",
        "app.kubernetes.io/component",
        "app.kubernetes.io/managed-by",
        "app.kubernetes.io/version",
        "hnc.githedgehog.com/display-name",
        "hnc.githedgehog.com/generated-at",
        "hnc.githedgehog.com/namespace",
        "kubernetes.io/metadata.name",
        "runId",
    }
)

DEFAULT_STRUCTURAL_LABELS: frozenset[str] = frozenset(
    {
        "hnc.githedgehog.com/role",
        "hnc.githedgehog.com/model",
        "hnc.githedgehog.com/from-device",
        "hnc.githedgehog.com/to-device",
        "hnc.githedgehog.com/fabric",
    }
)


@dataclass(frozen=True, slots=True)
class ClassificationPolicy:
    bookkeeping_labels: frozenset[str] = DEFAULT_BOOKKEEPING_LABELS
    structural_labels: frozenset[str] = DEFAULT_STRUCTURAL_LABELS

    def label_impact(self, key: str) -> Impact:
        if key in self.bookkeeping_labels:
            return Impact.COSMETIC
        if key in self.structural_labels:
            return Impact.BREAKING
        return Impact.SEMANTIC


@dataclass(frozen=True, slots=True)
class SemanticDifference:
    path: str
    impact: Impact
    message: str
    before: str | None = None
    after: str | None = None


@dataclass(frozen=True, kw_only=True)
class ClassificationResult:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    semantic_differences: tuple[SemanticDifference, ...] = ()

    def by_impact(self, impact: Impact) -> tuple[SemanticDifference, ...]:
        return tuple(d for d in self.semantic_differences if d.impact is impact)


def classify(
    before: Iterable[Resource],
    after: Iterable[Resource],
    *,
    policy: ClassificationPolicy | None = None,
) -> ClassificationResult:
    """Tag every disagreement between ``before`` and ``after`` with an impact."""

    active_policy = policy or ClassificationPolicy()
    diff = compare(before, after)
    found: list[SemanticDifference] = []

    for resource in diff.missing:
        found.append(
            SemanticDifference(
                path=str(resource),
                impact=Impact.BREAKING,
                message=f"{resource.kind} {resource.name} removed",
                before=resource.name,
            )
        )
    for side, repeated in (("before", diff.duplicate_expected), ("after", diff.duplicate_actual)):
        for resource in repeated:
            found.append(
                SemanticDifference(
                    path=str(resource),
                    impact=Impact.BREAKING,
                    message=f"{resource.kind} {resource.name} appears more than once {side}",
                )
            )
    for resource in diff.extra:
        found.append(
            SemanticDifference(
                path=str(resource),
                impact=Impact.SEMANTIC,
                message=f"{resource.kind} {resource.name} added",
                after=resource.name,
            )
        )
    for entry in diff.different:
        wanted, got = entry.expected, entry.actual
        if wanted.api_version != got.api_version:
            found.append(
                SemanticDifference(
                    path=f"{wanted}.apiVersion",
                    impact=Impact.SEMANTIC,
                    message=(
                        f"{wanted.kind} {wanted.name} apiVersion changed: "
                        f"{wanted.api_version} -> {got.api_version}"
                    ),
                    before=wanted.api_version,
                    after=got.api_version,
                )
            )
        for key, value in wanted.labels.items():
            actual_value = got.labels.get(key)
            if actual_value == value:
                continue
            found.append(
                SemanticDifference(
                    path=f"{wanted}.metadata.labels.{key}",
                    impact=active_policy.label_impact(key),
                    message=(
                        f"{wanted.kind} {wanted.name} label {key} changed: "
                        f"{value} -> {UNDEFINED if actual_value is None else actual_value}"
                    ),
                    before=value,
                    after=actual_value,
                )
            )

    errors = tuple(d.message for d in found if d.impact is Impact.BREAKING)
    warnings = tuple(d.message for d in found if d.impact is Impact.SEMANTIC)
    return ClassificationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        semantic_differences=tuple(found),
    )


__all__ = [
    "DEFAULT_BOOKKEEPING_LABELS",
    "DEFAULT_STRUCTURAL_LABELS",
    "ClassificationPolicy",
    "ClassificationResult",
    "SemanticDifference",
    "classify",
]
