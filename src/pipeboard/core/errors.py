from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pipeboard.schemas import StageName, StageStatus


class PipeboardError(Exception):
    """Base class for all PipeBoard errors."""


class ExecutorUnreachable(PipeboardError):
    """The executor could not be reached or rejected the trigger call."""


class AlreadyRunning(PipeboardError):
    """A trigger was requested while another execution is in flight."""


class InvalidTransition(PipeboardError):
    """A stage status change that would break stage ordering.

    Args:
        stage: The stage that was being changed.
        current: The stage's status at the time of the request.
        requested: The status that was requested.
        reason: Why the change is not allowed.
    """

    def __init__(
        self,
        stage: StageName,
        current: StageStatus,
        requested: StageStatus,
        reason: str,
    ) -> None:
        super().__init__(
            f"Cannot move {stage.value} from {current.value} "
            f"to {requested.value}: {reason}"
        )
        self.stage = stage
        self.current = current
        self.requested = requested
        self.reason = reason
