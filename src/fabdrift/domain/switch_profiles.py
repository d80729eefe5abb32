"""Switch profile catalog used for capacity checks.

Port ranges use the switch's own notation: ``"E1/49-56"`` expands to
``E1/49`` .. ``E1/56``; anything else is taken as a single port name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fabdrift.domain.model.enums import SwitchRole

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_RANGE = re.compile(r"^(?P<prefix>\w+)/(?P<start>\d+)-(?P<end>\d+)$")
_PORT = re.compile(r"^(?P<prefix>\w+)/(?P<number>\d+)$")


def _port_sort_key(port: str) -> tuple[str, int]:
    match = _PORT.match(port)
    if match is None:
        return (port, 0)
    return (match["prefix"], int(match["number"]))


def parse_port_range(port_range: str) -> list[str]:
    match = _RANGE.match(port_range)
    if match is None:
        return [port_range]
    start, end = int(match["start"]), int(match["end"])
    if start > end:
        return []
    return [f"{match['prefix']}/{number}" for number in range(start, end + 1)]


def expand_port_ranges(port_ranges: Iterable[str]) -> list[str]:
    """Flatten ranges into unique, naturally sorted port names."""

    ports: set[str] = set()
    for port_range in port_ranges:
        ports.update(parse_port_range(port_range))
    return sorted(ports, key=_port_sort_key)


@dataclass(frozen=True, slots=True)
class SwitchProfile:
    model_id: str
    roles: frozenset[SwitchRole]
    endpoint_assignable: tuple[str, ...]
    fabric_assignable: tuple[str, ...]
    endpoint_speed_gbps: int = 0
    uplink_speed_gbps: int = 0

    @property
    def endpoint_ports(self) -> int:
        return len(expand_port_ranges(self.endpoint_assignable))

    @property
    def fabric_ports(self) -> int:
        return len(expand_port_ranges(self.fabric_assignable))


DS2000 = SwitchProfile(
    model_id="DS2000",
    roles=frozenset({SwitchRole.LEAF}),
    endpoint_assignable=("E1/1-48",),
    fabric_assignable=("E1/49-56",),
    endpoint_speed_gbps=25,
    uplink_speed_gbps=100,
)

DS3000 = SwitchProfile(
    model_id="DS3000",
    roles=frozenset({SwitchRole.SPINE}),
    endpoint_assignable=(),
    fabric_assignable=("E1/1-32",),
    uplink_speed_gbps=100,
)

DEFAULT_PROFILES: Mapping[str, SwitchProfile] = {
    DS2000.model_id: DS2000,
    DS3000.model_id: DS3000,
}


__all__ = [
    "DEFAULT_PROFILES",
    "DS2000",
    "DS3000",
    "SwitchProfile",
    "expand_port_ranges",
    "parse_port_range",
]
