"""
Protocol definitions for user-interface callbacks.

The dashboard core never renders anything itself; presentation layers
observe it through these event sinks. Concrete implementations may
represent CLI, GUI, or web frontends.
"""

from collections.abc import Mapping
from typing import Protocol

from pipeboard.schemas import Execution, HistoryEntry, StageName, StageStatus


class PipelineUI(Protocol):
    """Protocol for observing the progress of pipeline executions."""

    def on_run_start(self, execution: Execution) -> None:
        """Called once a new execution has been created.

        Args:
            execution: The execution that is now current.
        """
        ...

    def on_stage_change(self, stage: StageName, status: StageStatus) -> None:
        """Reports every applied stage status change.

        Args:
            stage: The stage that changed.
            status: Its new status.
        """
        ...

    def on_retries(self, retries: Mapping[str, int]) -> None:
        """Reports the retry counts recorded for the current execution.

        Args:
            retries: Retry count per upstream source.
        """
        ...

    def on_warnings(self, warnings: tuple[str, ...]) -> None:
        """Reports validation warnings surfaced for the current execution.

        Args:
            warnings: All warnings surfaced so far, in order.
        """
        ...

    def on_run_complete(self, entry: HistoryEntry) -> None:
        """Reports that an execution finished and was added to history.

        Args:
            entry: The history entry appended for the execution.
        """
        ...


class NullUI:
    """A ``PipelineUI`` that ignores every event."""

    def on_run_start(self, execution: Execution) -> None:
        pass

    def on_stage_change(self, stage: StageName, status: StageStatus) -> None:
        pass

    def on_retries(self, retries: Mapping[str, int]) -> None:
        pass

    def on_warnings(self, warnings: tuple[str, ...]) -> None:
        pass

    def on_run_complete(self, entry: HistoryEntry) -> None:
        pass
