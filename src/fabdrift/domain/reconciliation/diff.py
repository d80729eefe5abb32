"""Keyed structural comparison of two resource sets."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fabdrift.domain.model import Resource, ResourceKey

log = getLogger(__name__)

UNDEFINED = "<undefined>"


@dataclass(frozen=True, slots=True)
class ResourceDifference:
    expected: Resource
    actual: Resource
    differences: tuple[str, ...]

    @property
    def key(self) -> ResourceKey:
        return self.expected.key


@dataclass(frozen=True, slots=True)
class DiffResult:
    missing: tuple[Resource, ...] = ()
    extra: tuple[Resource, ...] = ()
    different: tuple[ResourceDifference, ...] = ()
    duplicate_expected: tuple[Resource, ...] = ()
    duplicate_actual: tuple[Resource, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (
            self.missing
            or self.extra
            or self.different
            or self.duplicate_expected
            or self.duplicate_actual
        )

    def summary(self) -> str:
        text = (
            f"{len(self.missing)} missing, {len(self.extra)} extra, "
            f"{len(self.different)} different"
        )
        duplicated = len(self.duplicate_expected) + len(self.duplicate_actual)
        return f"{text}, {duplicated} duplicated" if duplicated else text


def index_by_key(
    resources: Iterable[Resource],
    *,
    side: str = "input",
) -> dict[ResourceKey, Resource]:
    """Index by ``(kind, name)``; a later duplicate replaces an earlier one."""

    indexed: dict[ResourceKey, Resource] = {}
    for resource in resources:
        if resource.key in indexed:
            log.debug(f"Duplicate {resource} in {side}; keeping the last occurrence")
        indexed[resource.key] = resource
    return indexed


def describe_differences(expected: Resource, actual: Resource) -> list[str]:
    """apiVersion and expected-label mismatches; payloads are not compared."""

    differences: list[str] = []
    if expected.api_version != actual.api_version:
        differences.append(
            f"apiVersion: expected {expected.api_version}, got {actual.api_version}"
        )
    for key, value in expected.labels.items():
        got = actual.labels.get(key)
        if got != value:
            shown = UNDEFINED if got is None else got
            differences.append(f"label {key}: expected {value}, got {shown}")
    return differences


def duplicates_of(resources: Iterable[Resource]) -> list[Resource]:
    """Every occurrence after the first of a ``(kind, name)`` key."""

    seen: set[ResourceKey] = set()
    repeated: list[Resource] = []
    for resource in resources:
        if resource.key in seen:
            repeated.append(resource)
        seen.add(resource.key)
    return repeated


def compare(expected: Iterable[Resource], actual: Iterable[Resource]) -> DiffResult:
    wanted_list = list(expected)
    actual_list = list(actual)
    expected_by_key = index_by_key(wanted_list, side="expected")
    actual_by_key = index_by_key(actual_list, side="actual")

    missing = [r for key, r in expected_by_key.items() if key not in actual_by_key]
    extra = [r for key, r in actual_by_key.items() if key not in expected_by_key]
    different: list[ResourceDifference] = []
    for key, wanted in expected_by_key.items():
        found = actual_by_key.get(key)
        if found is None:
            continue
        differences = describe_differences(wanted, found)
        if differences:
            different.append(ResourceDifference(wanted, found, tuple(differences)))

    return DiffResult(
        missing=tuple(missing),
        extra=tuple(extra),
        different=tuple(different),
        duplicate_expected=tuple(duplicates_of(wanted_list)),
        duplicate_actual=tuple(duplicates_of(actual_list)),
    )


__all__ = [
    "UNDEFINED",
    "DiffResult",
    "ResourceDifference",
    "compare",
    "describe_differences",
    "duplicates_of",
]
