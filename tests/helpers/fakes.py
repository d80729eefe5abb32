"""In-memory fakes for the fetching and scheduling ports."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence  # noqa: TC003
from dataclasses import dataclass, field

from fabdrift.domain.model import Resource


@dataclass
class RecordingScheduler:
    """Records requested sleeps instead of waiting."""

    sleeps: list[float] = field(default_factory=list)
    on_sleep: Callable[[int], None] | None = None

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if self.on_sleep is not None:
            self.on_sleep(len(self.sleeps))


@dataclass
class FakeResourceFetcher:
    """Serves canned listings per kind; the n-th call per kind uses the n-th script entry.

    A script entry is either a list of resources or an exception to raise. The
    last entry repeats once the script runs out.
    """

    scripts: Mapping[str, Sequence[list[Resource] | Exception]]
    calls: list[tuple[str, str, str, str | None]] = field(default_factory=list)

    async def __call__(
        self,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[Resource]:
        seen = sum(1 for call in self.calls if call[0] == kind)
        self.calls.append((kind, api_version, namespace, label_selector))
        script = self.scripts.get(kind, ([],))
        entry = script[min(seen, len(script) - 1)]
        if isinstance(entry, Exception):
            raise entry
        return list(entry)


def make_resource(
    kind: str,
    name: str,
    *,
    api_version: str = "v1",
    namespace: str | None = None,
    labels: Mapping[str, str] | None = None,
) -> Resource:
    return Resource(
        kind=kind,
        name=name,
        api_version=api_version,
        namespace=namespace,
        labels=dict(labels or {}),
    )
