"""
Data contracts for executions, their terminal history snapshots and the
projections derived from them.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import NotRequired, TypedDict

from .stage import STAGE_ORDER, StageName, StageStatus


class Outcome(str, Enum):
    """Terminal outcome of an execution."""

    SUCCESS = "success"
    ERROR = "error"


class TriggerRequest(TypedDict):
    """Body of the trigger call sent to the executor."""

    location: str
    country: str


class TriggerResponseDict(TypedDict):
    """Body returned by the executor once the pipeline has run.

    Attributes:
        execution_id: Executor-assigned identifier of the run.
        version: Executor-assigned data version label.
        timestamp: Executor-side completion time.
        collected_items: Number of upstream records collected.
        retries: Retries already absorbed per upstream source.
        quality_score: Validator quality score (0-100).
        anomalies: Names of validation checks that flagged the data.
    """

    execution_id: str
    version: NotRequired[str]
    timestamp: NotRequired[str]
    collected_items: NotRequired[int]
    retries: NotRequired[dict[str, int]]
    quality_score: NotRequired[float]
    anomalies: NotRequired[list[str]]


@dataclass(frozen=True, slots=True)
class TriggerAck:
    """Parsed, successful acknowledgment from the executor."""

    execution_id: str
    version: str = "N/A"
    timestamp: str = "N/A"
    collected_items: int | None = None
    retries: dict[str, int] = field(default_factory=dict)
    quality_score: float | None = None
    anomalies: tuple[str, ...] = ()


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Execution:
    """The single in-flight (or just finished) run of the pipeline.

    Attributes:
        location: City the pipeline was triggered for.
        country: Country code accompanying the location.
        started_at: When the trigger was issued.
        token: Opaque identity keying this run's scheduled callbacks.
        execution_id: Executor-assigned id, ``"N/A"`` until acknowledged.
        version: Executor-assigned version, ``"N/A"`` until acknowledged.
        ack: The executor acknowledgment, once received.
        outcome: Terminal outcome, ``None`` while in flight.
        error_message: Failure description when ``outcome`` is ``ERROR``.
    """

    location: str
    country: str
    started_at: datetime = field(default_factory=utc_now)
    token: str = field(default_factory=lambda: uuid.uuid4().hex)
    execution_id: str = "N/A"
    version: str = "N/A"
    ack: TriggerAck | None = None
    outcome: Outcome | None = None
    error_message: str | None = None

    @property
    def finished(self) -> bool:
        return self.outcome is not None


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Immutable summary of a finished execution.

    ``audit_id`` and ``audit_version`` are assigned once, when the entry is
    created, so every projection of the ledger reports the same values.
    """

    audit_id: int
    audit_version: str
    location: str
    country: str
    started_at: datetime
    finished_at: datetime
    execution_id: str
    version: str
    outcome: Outcome
    stage_statuses: Mapping[StageName, StageStatus]
    retries: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    warnings: tuple[str, ...] = ()
    error_message: str | None = None

    def __post_init__(self) -> None:
        if (self.outcome is Outcome.ERROR) != (self.error_message is not None):
            raise ValueError("error_message must be set iff outcome is ERROR")
        if set(self.stage_statuses) != set(STAGE_ORDER):
            raise ValueError("stage_statuses must cover all four stages")
        # freeze caller-supplied mappings
        object.__setattr__(
            self,
            "stage_statuses",
            MappingProxyType({s: self.stage_statuses[s] for s in STAGE_ORDER}),
        )
        object.__setattr__(self, "retries", MappingProxyType(dict(self.retries)))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @property
    def total_retries(self) -> int:
        return sum(self.retries.values())

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def failed_stage(self) -> StageName | None:
        for stage in STAGE_ORDER:
            if self.stage_statuses[stage] is StageStatus.ERROR:
                return stage
        return None


@dataclass(frozen=True, slots=True)
class Statistics:
    """Aggregate counts over the history ledger."""

    total: int = 0
    successful: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Share of successful executions, ``0.0`` for an empty ledger."""
        if not self.total:
            return 0.0
        return self.successful / self.total


@dataclass(frozen=True, slots=True)
class AuditRow:
    """One row of the audit projection, derived from a ``HistoryEntry``."""

    id: int
    execution_id: str
    version: str
    stage: str
    status: Outcome
    timestamp: datetime
    location: str
