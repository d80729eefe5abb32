"""Kubernetes object naming helpers."""

from __future__ import annotations

import hashlib
import re
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

MAX_NAME_LENGTH = 63
SUFFIX_LENGTH = 8
_INVALID = re.compile(r"[^a-z0-9-]")
_DASHES = re.compile(r"-+")


def sanitize_name(value: str) -> str:
    """Lower-case ``value`` into a DNS-1123 label (``[a-z0-9-]``, at most 63 chars)."""

    name = _DASHES.sub("-", _INVALID.sub("-", value.lower())).strip("-")
    name = name[:MAX_NAME_LENGTH].rstrip("-")
    return name or "unnamed"


def _suffixed(base: str, raw: str, attempt: int) -> str:
    digest = hashlib.sha256(f"{raw}#{attempt}".encode()).hexdigest()[:SUFFIX_LENGTH]
    stem = base[: MAX_NAME_LENGTH - SUFFIX_LENGTH - 1].rstrip("-")
    return f"{stem}-{digest}" if stem else digest


def unique_names(values: Iterable[str]) -> dict[str, str]:
    """Map every distinct value to a sanitized name no other value shares.

    Values that sanitize to the same name are ordered lexically: the first
    keeps the plain name, the others get a suffix hashed from the raw value.
    The result depends only on the set of values, not on their order.
    """

    groups: dict[str, list[str]] = defaultdict(list)
    for raw in sorted(set(values)):
        groups[sanitize_name(raw)].append(raw)

    names = {members[0]: base for base, members in groups.items()}
    taken = set(names.values())
    for base, members in sorted(groups.items()):
        for raw in members[1:]:
            attempt = 0
            candidate = _suffixed(base, raw, attempt)
            while candidate in taken:
                attempt += 1
                candidate = _suffixed(base, raw, attempt)
            names[raw] = candidate
            taken.add(candidate)
    return names


__all__ = ["MAX_NAME_LENGTH", "sanitize_name", "unique_names"]
