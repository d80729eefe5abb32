"""Poll a live cluster until the expected resources exist.

Each attempt lists every expected kind concurrently, merges the results once
all reads have resolved and diffs them against the expectation. The run is
satisfied as soon as nothing is missing; otherwise the poller sleeps on the
backoff schedule until the attempt budget is spent or the caller's cancel
event fires.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from fabdrift.domain.model import ResourceKind
from fabdrift.domain.ports import AsyncioScheduler, FetchError, ResourceNotFoundError

from .backoff import BackoffPolicy
from .diff import DiffResult, compare

if TYPE_CHECKING:
    from collections.abc import Coroutine, Sequence

    from fabdrift.domain.model import Resource
    from fabdrift.domain.ports import ResourceFetcher, Scheduler

log = getLogger(__name__)

DEFAULT_NAMESPACE_PREFIX = "it"
RUN_ID_LABEL = "runId"


class PollState(StrEnum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"
    CANCELED = "canceled"


@dataclass(frozen=True, kw_only=True)
class PollOutcome:
    state: PollState
    attempts: int
    last_diff: DiffResult | None = None
    reason: str | None = None
    delays: tuple[int, ...] = ()

    @property
    def satisfied(self) -> bool:
        return self.state is PollState.SATISFIED


def namespace_for(run_id: str, *, prefix: str = DEFAULT_NAMESPACE_PREFIX) -> str:
    return f"{prefix}-{run_id}"


def label_selector_for(run_id: str) -> str:
    return f"{RUN_ID_LABEL}={run_id}"


class _Canceled(Exception):  # noqa: N818
    pass


class ReconciliationPoller:
    def __init__(
        self,
        fetcher: ResourceFetcher,
        *,
        scheduler: Scheduler | None = None,
        backoff: BackoffPolicy | None = None,
        namespace_prefix: str = DEFAULT_NAMESPACE_PREFIX,
    ) -> None:
        self._fetcher = fetcher
        self._scheduler = scheduler or AsyncioScheduler()
        self._backoff = backoff or BackoffPolicy()
        self._namespace_prefix = namespace_prefix
        self.state = PollState.IDLE
        self.history: list[PollState] = [PollState.IDLE]

    def run(
        self,
        expected: Sequence[Resource],
        *,
        run_id: str,
        cancel: asyncio.Event | None = None,
    ) -> PollOutcome:
        """Synchronous facade over :meth:`wait_for`."""
        return asyncio.run(self.wait_for(expected, run_id=run_id, cancel=cancel))

    async def wait_for(
        self,
        expected: Sequence[Resource],
        *,
        run_id: str,
        cancel: asyncio.Event | None = None,
    ) -> PollOutcome:
        if not run_id:
            raise ValueError("run_id must not be empty")

        namespace = namespace_for(run_id, prefix=self._namespace_prefix)
        selector = label_selector_for(run_id)
        kinds = list(dict.fromkeys(ResourceKind.of(r) for r in expected))
        max_attempts = self._backoff.max_attempts
        delays = self._backoff.delays()
        slept: list[int] = []
        last_diff: DiffResult | None = None
        reason: str | None = None
        attempts_made = 0

        def finish(state: PollState) -> PollOutcome:
            self._transition(state)
            log.info(f"Reconciliation of {namespace} {state} after {attempts_made} attempt(s)")
            return PollOutcome(
                state=state,
                attempts=attempts_made,
                last_diff=last_diff,
                reason=reason,
                delays=tuple(slept),
            )

        try:
            for attempt in range(1, max_attempts + 1):
                if cancel is not None and cancel.is_set():
                    raise _Canceled
                attempts_made = attempt
                self._transition(PollState.ATTEMPTING)
                log.info(
                    f"Attempt {attempt}/{max_attempts}: listing {len(kinds)} kinds in {namespace}"
                )
                try:
                    actual = await self._until_canceled(
                        self._fetch_all(kinds, namespace, selector),
                        cancel,
                    )
                except FetchError as exc:
                    reason = str(exc)
                    log.warning(f"Attempt {attempt}/{max_attempts} failed: {reason}")
                else:
                    last_diff = compare(expected, actual)
                    if not last_diff.missing:
                        reason = None
                        return finish(PollState.SATISFIED)
                    reason = "missing: " + ", ".join(str(r) for r in last_diff.missing)
                    log.info(f"Attempt {attempt}/{max_attempts}: {last_diff.summary()}")

                if attempt == max_attempts:
                    break
                delay_ms = next(delays)
                self._transition(PollState.RETRYING)
                slept.append(delay_ms)
                await self._until_canceled(self._scheduler.sleep(delay_ms / 1000), cancel)
        except _Canceled:
            reason = "canceled"
            return finish(PollState.CANCELED)
        return finish(PollState.EXHAUSTED)

    async def _fetch_all(
        self,
        kinds: list[ResourceKind],
        namespace: str,
        selector: str,
    ) -> list[Resource]:
        results = await asyncio.gather(
            *(self._fetcher(k.kind, k.api_version, namespace, selector) for k in kinds),
            return_exceptions=True,
        )
        merged: list[Resource] = []
        for kind, result in zip(kinds, results, strict=True):
            if isinstance(result, ResourceNotFoundError):
                log.debug(f"No {kind.kind} resources in {namespace}")
                continue
            if isinstance(result, FetchError):
                raise result
            if isinstance(result, Exception):
                raise FetchError(
                    f"Listing {kind.kind} in {namespace} failed: {result!r}",
                    kind=kind.kind,
                ) from result
            if isinstance(result, BaseException):
                raise result
            merged.extend(result)
        return merged

    async def _until_canceled[T](
        self,
        work: Coroutine[Any, Any, T],
        cancel: asyncio.Event | None,
    ) -> T:
        if cancel is None:
            return await work
        task = asyncio.ensure_future(work)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _pending = await asyncio.wait(
                {task, waiter},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for pending in (task, waiter):
                pending.cancel()
            await asyncio.gather(task, waiter, return_exceptions=True)
        if waiter in done:
            raise _Canceled
        return task.result()

    def _transition(self, state: PollState) -> None:
        self.state = state
        self.history.append(state)


__all__ = [
    "DEFAULT_NAMESPACE_PREFIX",
    "RUN_ID_LABEL",
    "PollOutcome",
    "PollState",
    "ReconciliationPoller",
    "label_selector_for",
    "namespace_for",
]
