from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from fabdrift.domain.ports import FetchError, ResourceNotFoundError
from fabdrift.domain.reconciliation import (
    BackoffPolicy,
    PollState,
    ReconciliationPoller,
    label_selector_for,
    namespace_for,
)
from tests.helpers.fakes import FakeResourceFetcher, RecordingScheduler, make_resource

if TYPE_CHECKING:
    from fabdrift.domain.model import Resource

CONFIG = make_resource("ConfigMap", "config1")
LEAF = make_resource("Switch", "leaf-01", api_version="wiring.githedgehog.com/v1beta1")


def test_namespace_and_selector_conventions() -> None:
    assert namespace_for("42") == "it-42"
    assert namespace_for("42", prefix="e2e") == "e2e-42"
    assert label_selector_for("42") == "runId=42"


def test_satisfied_on_first_attempt() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[CONFIG]], "Switch": [[LEAF]]})
    poller = ReconciliationPoller(fetcher, scheduler=RecordingScheduler())

    outcome = poller.run([CONFIG, LEAF], run_id="run1")

    assert outcome.satisfied
    assert outcome.attempts == 1
    assert outcome.delays == ()
    assert outcome.last_diff is not None
    assert outcome.last_diff.is_empty
    assert poller.history == [PollState.IDLE, PollState.ATTEMPTING, PollState.SATISFIED]
    assert sorted(fetcher.calls) == [
        ("ConfigMap", "v1", "it-run1", "runId=run1"),
        ("Switch", "wiring.githedgehog.com/v1beta1", "it-run1", "runId=run1"),
    ]


def test_retries_on_the_backoff_schedule_until_satisfied() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[], [], [CONFIG]]})
    scheduler = RecordingScheduler()
    poller = ReconciliationPoller(fetcher, scheduler=scheduler)

    outcome = poller.run([CONFIG], run_id="run1")

    assert outcome.state is PollState.SATISFIED
    assert outcome.attempts == 3
    assert outcome.delays == (1000, 2000)
    assert scheduler.sleeps == [1.0, 2.0]
    assert PollState.RETRYING in poller.history


def test_exhausts_after_the_attempt_budget() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[]]})
    scheduler = RecordingScheduler()
    poller = ReconciliationPoller(fetcher, scheduler=scheduler)

    outcome = poller.run([CONFIG], run_id="run1")

    assert outcome.state is PollState.EXHAUSTED
    assert outcome.attempts == 10
    assert outcome.delays == (1000, 2000, 4000, 8000, 16000, 30000, 30000, 30000, 30000)
    assert len(fetcher.calls) == 10
    assert outcome.reason == "missing: ConfigMap/config1"
    assert poller.state is PollState.EXHAUSTED


def test_extra_resources_do_not_block_satisfaction() -> None:
    stray = make_resource("ConfigMap", "stray")
    fetcher = FakeResourceFetcher({"ConfigMap": [[CONFIG, stray]]})

    outcome = ReconciliationPoller(fetcher, scheduler=RecordingScheduler()).run(
        [CONFIG], run_id="run1"
    )

    assert outcome.satisfied
    assert outcome.last_diff is not None
    assert [str(r) for r in outcome.last_diff.extra] == ["ConfigMap/stray"]


def test_not_found_counts_as_empty_listing() -> None:
    fetcher = FakeResourceFetcher(
        {"ConfigMap": [[CONFIG]], "Switch": [ResourceNotFoundError("404", kind="Switch")]}
    )
    poller = ReconciliationPoller(
        fetcher,
        scheduler=RecordingScheduler(),
        backoff=BackoffPolicy(max_attempts=2),
    )

    outcome = poller.run([CONFIG, LEAF], run_id="run1")

    assert outcome.state is PollState.EXHAUSTED
    assert outcome.reason == "missing: Switch/leaf-01"


def test_fetch_errors_are_retried_and_reported() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [FetchError("connection refused")]})
    poller = ReconciliationPoller(
        fetcher,
        scheduler=RecordingScheduler(),
        backoff=BackoffPolicy(max_attempts=3),
    )

    outcome = poller.run([CONFIG], run_id="run1")

    assert outcome.state is PollState.EXHAUSTED
    assert outcome.attempts == 3
    assert outcome.reason == "connection refused"
    assert outcome.last_diff is None


def test_recovers_after_a_transient_fetch_error() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [FetchError("flaky"), [CONFIG]]})

    outcome = ReconciliationPoller(fetcher, scheduler=RecordingScheduler()).run(
        [CONFIG], run_id="run1"
    )

    assert outcome.satisfied
    assert outcome.attempts == 2
    assert outcome.reason is None


def test_cancel_during_backoff_stops_polling() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[]]})

    async def scenario() -> tuple[PollState, int, str | None, int]:
        cancel = asyncio.Event()
        scheduler = RecordingScheduler(on_sleep=lambda _count: cancel.set())
        poller = ReconciliationPoller(fetcher, scheduler=scheduler)
        outcome = await poller.wait_for([CONFIG], run_id="run1", cancel=cancel)
        return outcome.state, outcome.attempts, outcome.reason, len(fetcher.calls)

    state, attempts, reason, calls = asyncio.run(scenario())

    assert state is PollState.CANCELED
    assert attempts == 1
    assert reason == "canceled"
    assert calls == 1


def test_cancel_before_first_attempt() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[CONFIG]]})

    async def scenario() -> tuple[PollState, int]:
        cancel = asyncio.Event()
        cancel.set()
        poller = ReconciliationPoller(fetcher, scheduler=RecordingScheduler())
        outcome = await poller.wait_for([CONFIG], run_id="run1", cancel=cancel)
        return outcome.state, outcome.attempts

    assert asyncio.run(scenario()) == (PollState.CANCELED, 0)
    assert fetcher.calls == []


def test_custom_namespace_prefix() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [[CONFIG]]})
    poller = ReconciliationPoller(
        fetcher,
        scheduler=RecordingScheduler(),
        namespace_prefix="e2e",
    )

    poller.run([CONFIG], run_id="7")

    assert fetcher.calls == [("ConfigMap", "v1", "e2e-7", "runId=7")]


def test_empty_run_id_is_rejected() -> None:
    poller = ReconciliationPoller(FakeResourceFetcher({}), scheduler=RecordingScheduler())

    with pytest.raises(ValueError, match="run_id"):
        poller.run([CONFIG], run_id="")


def test_unexpected_fetcher_exceptions_are_retried_as_fetch_errors() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [RuntimeError("socket closed"), [CONFIG]]})
    scheduler = RecordingScheduler()

    outcome = ReconciliationPoller(fetcher, scheduler=scheduler).run([CONFIG], run_id="run1")

    assert outcome.satisfied
    assert outcome.attempts == 2
    assert scheduler.sleeps == [1.0]


def test_unexpected_fetcher_exception_is_the_reported_reason() -> None:
    fetcher = FakeResourceFetcher({"ConfigMap": [RuntimeError("socket closed")]})
    poller = ReconciliationPoller(
        fetcher,
        scheduler=RecordingScheduler(),
        backoff=BackoffPolicy(max_attempts=2),
    )

    outcome = poller.run([CONFIG], run_id="run1")

    assert outcome.state is PollState.EXHAUSTED
    assert outcome.reason is not None
    assert outcome.reason.startswith("Listing ConfigMap in it-run1 failed")
    assert "socket closed" in outcome.reason


class _HangingFetcher:
    """Blocks every listing until cancelled and records that it was."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.interrupted = False

    async def __call__(
        self,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[Resource]:
        self.started.set()
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.interrupted = True
            raise
        return []


def test_cancel_interrupts_a_listing_in_flight() -> None:
    fetcher = _HangingFetcher()
    scheduler = RecordingScheduler()

    async def scenario() -> tuple[PollState, int, str | None]:
        cancel = asyncio.Event()
        poller = ReconciliationPoller(fetcher, scheduler=scheduler)
        task = asyncio.create_task(poller.wait_for([CONFIG], run_id="run1", cancel=cancel))
        await fetcher.started.wait()
        cancel.set()
        outcome = await asyncio.wait_for(task, timeout=5)
        return outcome.state, outcome.attempts, outcome.reason

    state, attempts, reason = asyncio.run(scenario())

    assert state is PollState.CANCELED
    assert attempts == 1
    assert reason == "canceled"
    assert fetcher.interrupted
    assert scheduler.sleeps == []
