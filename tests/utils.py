from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from pipeboard.core.errors import ExecutorUnreachable
from pipeboard.schemas import (
    STAGE_ORDER,
    Execution,
    HistoryEntry,
    Outcome,
    ScheduleConfig,
    StageName,
    StageStatus,
    TriggerAck,
)

FAST_SCHEDULE = ScheduleConfig(delays=(0.0, 0.01, 0.02, 0.03))
BASE_TIME = datetime(2025, 10, 25, 12, 0, tzinfo=UTC)


class FakeExecutor:
    """Stands in for ``ExecutorClient`` without any network traffic.

    Each call to ``trigger`` pops the next scripted outcome: a ``TriggerAck``
    is returned, an exception is raised. When ``gate`` is set the call waits
    for it before answering.
    """

    def __init__(self, *outcomes: TriggerAck | Exception) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None

    async def trigger(self, location: str, country: str) -> TriggerAck:
        self.calls.append((location, country))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else make_ack(len(self.calls))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def init(self) -> None:
        pass

    async def close(self) -> None:
        pass


class RecordingUI:
    """A ``PipelineUI`` that records every event it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def on_run_start(self, execution: Execution) -> None:
        self.events.append(("start", execution.location))

    def on_stage_change(self, stage: StageName, status: StageStatus) -> None:
        self.events.append(("stage", (stage, status)))

    def on_retries(self, retries: Mapping[str, int]) -> None:
        self.events.append(("retries", dict(retries)))

    def on_warnings(self, warnings: tuple[str, ...]) -> None:
        self.events.append(("warnings", warnings))

    def on_run_complete(self, entry: HistoryEntry) -> None:
        self.events.append(("complete", entry.outcome))

    def of(self, kind: str) -> list[Any]:
        return [payload for k, payload in self.events if k == kind]


def make_ack(n: int = 1, **kwargs: Any) -> TriggerAck:
    fields: dict[str, Any] = {
        "execution_id": f"exec-{n:04d}",
        "version": f"v2025-10-25_{n}",
        "timestamp": "2025-10-25T12:00:00Z",
        "collected_items": 2,
        "retries": {"weather": 0, "bitcoin": 0},
    }
    fields.update(kwargs)
    return TriggerAck(**fields)


def make_entry(
    n: int,
    outcome: Outcome = Outcome.SUCCESS,
    **kwargs: Any,
) -> HistoryEntry:
    finished = BASE_TIME + timedelta(minutes=n)
    if outcome is Outcome.SUCCESS:
        statuses = dict.fromkeys(STAGE_ORDER, StageStatus.SUCCESS)
    else:
        statuses = dict.fromkeys(STAGE_ORDER, StageStatus.PENDING)
        statuses[StageName.COLLECTOR] = StageStatus.ERROR
    fields: dict[str, Any] = {
        "audit_id": n,
        "audit_version": f"v2025-10-25_{n}",
        "location": "London",
        "country": "uk",
        "started_at": finished - timedelta(seconds=5),
        "finished_at": finished,
        "execution_id": f"exec-{n:04d}" if outcome is Outcome.SUCCESS else "N/A",
        "version": f"v{n}",
        "outcome": outcome,
        "stage_statuses": statuses,
        "error_message": None if outcome is Outcome.SUCCESS else "network error",
    }
    fields.update(kwargs)
    return HistoryEntry(**fields)


def network_error(message: str = "network error") -> ExecutorUnreachable:
    return ExecutorUnreachable(message)
