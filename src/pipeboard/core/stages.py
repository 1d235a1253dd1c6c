"""
Status tracking for the four stages of the current execution.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from pipeboard.schemas import STAGE_ORDER, StageName, StageStatus

from .errors import InvalidTransition

logger = logging.getLogger(__name__)

StageListener = Callable[[StageName, StageStatus], None]

_ALLOWED: dict[StageStatus, frozenset[StageStatus]] = {
    StageStatus.PENDING: frozenset(
        {StageStatus.LOADING, StageStatus.SUCCESS, StageStatus.ERROR}
    ),
    StageStatus.LOADING: frozenset({StageStatus.SUCCESS, StageStatus.ERROR}),
    StageStatus.SUCCESS: frozenset(),
    StageStatus.ERROR: frozenset(),
}


class StageStateMachine:
    """Tracks the status of each stage for one execution.

    Statuses only move forward: a stage leaves ``PENDING`` only once every
    earlier stage is ``SUCCESS``, and ``SUCCESS``/``ERROR`` are final. Once
    any stage is ``ERROR`` the execution is terminal and later stages stay
    ``PENDING``.

    Args:
        on_change: Optional callback invoked after every applied change.
    """

    def __init__(self, on_change: StageListener | None = None) -> None:
        self._on_change = on_change
        self._statuses: dict[StageName, StageStatus] = {}
        self.reset()

    def reset(self) -> None:
        """Set every stage back to ``PENDING`` for a new execution."""
        self._statuses = {stage: StageStatus.PENDING for stage in STAGE_ORDER}
        if self._on_change:
            for stage in STAGE_ORDER:
                self._on_change(stage, StageStatus.PENDING)

    def advance(self, stage: StageName, status: StageStatus) -> None:
        """Move a single stage to a new status.

        Args:
            stage: The stage to change.
            status: The requested status.

        Raises:
            InvalidTransition: If the change would move the stage backward,
                skip ahead of an unfinished earlier stage, or touch a
                terminal execution.
        """
        current = self._statuses[stage]

        if self.is_terminal():
            raise InvalidTransition(stage, current, status, "execution is terminal")
        if status not in _ALLOWED[current]:
            raise InvalidTransition(stage, current, status, "not a forward move")

        blocking = next(
            (
                earlier
                for earlier in STAGE_ORDER[: stage.index]
                if self._statuses[earlier] is not StageStatus.SUCCESS
            ),
            None,
        )
        if blocking is not None:
            raise InvalidTransition(
                stage,
                current,
                status,
                f"{blocking.value} is still {self._statuses[blocking].value}",
            )

        self._statuses[stage] = status
        logger.debug("Stage %s: %s -> %s", stage.value, current.value, status.value)
        if self._on_change:
            self._on_change(stage, status)

    def mark_failed(self, stage: StageName) -> None:
        """Mark a stage as failed, ending the execution.

        Raises:
            InvalidTransition: If the stage may not fail from its current state.
        """
        self.advance(stage, StageStatus.ERROR)

    def is_terminal(self) -> bool:
        """Whether all stages succeeded or any stage failed."""
        statuses = self._statuses.values()
        return StageStatus.ERROR in statuses or all(
            s is StageStatus.SUCCESS for s in statuses
        )

    def loading_stage(self) -> StageName | None:
        """Return the stage currently in progress, if any."""
        for stage in STAGE_ORDER:
            if self._statuses[stage] is StageStatus.LOADING:
                return stage
        return None

    def status(self, stage: StageName) -> StageStatus:
        return self._statuses[stage]

    def snapshot(self) -> dict[StageName, StageStatus]:
        """Return a copy of all statuses in stage order."""
        return {stage: self._statuses[stage] for stage in STAGE_ORDER}
