"""
Orchestrates a single pipeline execution.

A run issues one trigger call to the executor. The executor performs all
four stages before acknowledging, so the acknowledgment is the real
completion signal; the stage display is then advanced on a fixed,
cancellable schedule for progressive disclosure, and the run is recorded
in history once the last scheduled advance fires.

Overlap policy: only one execution may be in flight. ``run`` raises
``AlreadyRunning`` while another execution has not finished; ``cancel``
ends the current execution without recording it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial

from pipeboard.protocols import NullUI, PipelineUI
from pipeboard.schemas import (
    STAGE_ORDER,
    Execution,
    HistoryEntry,
    Outcome,
    ScheduleConfig,
    StageName,
    StageStatus,
    TriggerAck,
    ValidationConfig,
)
from pipeboard.schemas.config import DEFAULT_RETRY_SOURCES
from pipeboard.schemas.execution import utc_now

from .errors import AlreadyRunning, ExecutorUnreachable, InvalidTransition
from .executor import ExecutorClient
from .ledger import ExecutionHistoryLedger, make_audit_version
from .schedule import StageSchedule
from .stages import StageStateMachine
from .tracking import RetryTracker, ValidationWarningSet, evaluate_validation

logger = logging.getLogger(__name__)


class TriggerController:
    """Drives one execution at a time and records finished ones.

    Args:
        executor: Client used to trigger the remote pipeline.
        ledger: History ledger to append to; a new one is created if omitted.
        schedule_cfg: Timing of the four scheduled stage advances.
        validation_cfg: Thresholds for validation warnings.
        retry_sources: Upstream sources whose retries are tracked.
        ui: Optional observer notified of every state change.
    """

    def __init__(
        self,
        executor: ExecutorClient,
        *,
        ledger: ExecutionHistoryLedger | None = None,
        schedule_cfg: ScheduleConfig | None = None,
        validation_cfg: ValidationConfig | None = None,
        retry_sources: tuple[str, ...] = DEFAULT_RETRY_SOURCES,
        ui: PipelineUI | None = None,
    ) -> None:
        self._executor = executor
        self._ui: PipelineUI = ui if ui is not None else NullUI()
        self._validation_cfg = (
            validation_cfg if validation_cfg is not None else ValidationConfig()
        )
        if schedule_cfg is None:
            schedule_cfg = ScheduleConfig()

        self.stages = StageStateMachine(on_change=self._ui.on_stage_change)
        self.retries = RetryTracker(retry_sources)
        self.warnings = ValidationWarningSet()
        self.ledger = ledger if ledger is not None else ExecutionHistoryLedger()

        self._schedule = StageSchedule(schedule_cfg.delays)
        self._current: Execution | None = None
        self._done: asyncio.Future[HistoryEntry | None] | None = None
        self._last_ack: TriggerAck | None = None

    @property
    def current(self) -> Execution | None:
        """The in-flight or most recently finished execution."""
        return self._current

    @property
    def running(self) -> bool:
        return self._current is not None and not self._current.finished

    @property
    def last_ack(self) -> TriggerAck | None:
        """The most recent successful acknowledgment, kept across runs."""
        return self._last_ack

    async def run(self, location: str, country: str) -> Execution:
        """Trigger the pipeline and start tracking the new execution.

        Returns once the executor has answered. On success the remaining
        stage advances are scheduled; await ``join()`` to wait for them.

        Args:
            location: City to run the pipeline for.
            country: Country code of the city.

        Returns:
            Execution: The new current execution.

        Raises:
            AlreadyRunning: If another execution is still in flight.
        """
        if self.running:
            assert self._current is not None
            raise AlreadyRunning(
                f"Execution for {self._current.location} is still in progress"
            )

        execution = Execution(location=location, country=country)
        self._current = execution
        self._done = asyncio.get_running_loop().create_future()

        self.stages.reset()
        self.retries.reset()
        self.warnings.reset()
        self._ui.on_run_start(execution)
        logger.info("Triggering pipeline for %s,%s", location, country)

        self.stages.advance(StageName.COLLECTOR, StageStatus.LOADING)

        try:
            ack = await self._executor.trigger(location, country)
        except ExecutorUnreachable as e:
            if self._current is execution:
                self._fail(execution, str(e))
            return execution
        except BaseException:
            # cancelled or broken trigger: release the slot, record nothing
            if self._current is execution:
                self._current = None
                self._resolve(None)
            raise

        if self._current is not execution:
            # cancelled while waiting for the executor
            return execution

        execution.ack = ack
        self._last_ack = ack
        execution.execution_id = ack.execution_id
        execution.version = ack.version
        self.retries.update(ack.retries)
        self._ui.on_retries(self.retries.snapshot())
        logger.info(
            "Executor acknowledged %s (version %s)", ack.execution_id, ack.version
        )

        steps: list[Callable[[], None]] = [
            partial(self._run_step, execution, step)
            for step in (
                self._collector_done,
                self._validator_done,
                self._processor_done,
                self._reporter_done,
            )
        ]
        self._schedule.start(execution.token, steps)
        return execution

    async def join(self) -> HistoryEntry | None:
        """Wait until the current execution finishes.

        Returns:
            The history entry recorded for the execution, or None if there
            is no execution or it was cancelled.

        Raises:
            InvalidTransition: If a scheduled advance hit a sequencing defect.
        """
        if self._done is None:
            return None
        return await asyncio.shield(self._done)

    def cancel(self) -> bool:
        """Abandon the current execution without recording it.

        Pending scheduled advances are cancelled, so none of them can touch
        a later execution.

        Returns:
            True if an execution was in flight.
        """
        if not self.running:
            return False
        execution = self._current
        assert execution is not None
        pending = self._schedule.cancel()
        logger.info(
            "Cancelled execution for %s with %d stage step(s) pending",
            execution.location,
            pending,
        )
        self._current = None
        self._resolve(None)
        return True

    # ---- scheduled steps ---

    def _run_step(self, execution: Execution, step: Callable[[Execution], None]) -> None:
        if self._current is not execution or execution.finished:
            return
        try:
            step(execution)
        except InvalidTransition as e:
            logger.exception("Stage sequencing defect for %s", execution.location)
            self._schedule.cancel()
            if not self.stages.is_terminal():
                self.stages.mark_failed(self._unfinished_stage())
            self._record(execution, Outcome.ERROR, f"Internal error: {e}")
            if self._done is not None and not self._done.done():
                self._done.set_exception(e)
                # logged above; join() still raises it
                self._done.exception()

    def _unfinished_stage(self) -> StageName:
        loading = self.stages.loading_stage()
        if loading is not None:
            return loading
        return next(
            stage
            for stage in STAGE_ORDER
            if self.stages.status(stage) is not StageStatus.SUCCESS
        )

    def _collector_done(self, execution: Execution) -> None:
        self.stages.advance(StageName.COLLECTOR, StageStatus.SUCCESS)
        self.stages.advance(StageName.VALIDATOR, StageStatus.LOADING)

    def _validator_done(self, execution: Execution) -> None:
        assert execution.ack is not None
        found = evaluate_validation(execution.ack, self._validation_cfg)
        if found:
            self.warnings.extend(found)
            logger.info(
                "Validation warnings for %s: %s",
                execution.execution_id,
                ", ".join(found),
            )
            self._ui.on_warnings(self.warnings.snapshot())
        self.stages.advance(StageName.VALIDATOR, StageStatus.SUCCESS)
        self.stages.advance(StageName.PROCESSOR, StageStatus.LOADING)

    def _processor_done(self, execution: Execution) -> None:
        self.stages.advance(StageName.PROCESSOR, StageStatus.SUCCESS)
        self.stages.advance(StageName.REPORTER, StageStatus.LOADING)

    def _reporter_done(self, execution: Execution) -> None:
        self.stages.advance(StageName.REPORTER, StageStatus.SUCCESS)
        entry = self._record(execution, Outcome.SUCCESS)
        logger.info(
            "Pipeline %s completed for %s", execution.execution_id, execution.location
        )
        self._resolve(entry)

    # ---- terminal handling ---

    def _fail(self, execution: Execution, message: str) -> None:
        stage = self.stages.loading_stage() or StageName.COLLECTOR
        self.stages.mark_failed(stage)
        logger.warning(
            "Pipeline for %s failed at %s: %s", execution.location, stage.value, message
        )
        entry = self._record(execution, Outcome.ERROR, message)
        self._resolve(entry)

    def _record(
        self,
        execution: Execution,
        outcome: Outcome,
        error_message: str | None = None,
    ) -> HistoryEntry:
        finished_at = utc_now()
        execution.outcome = outcome
        execution.error_message = error_message
        if outcome is Outcome.ERROR:
            execution.execution_id = "N/A"

        entry = HistoryEntry(
            audit_id=self.ledger.next_audit_id(),
            audit_version=make_audit_version(finished_at),
            location=execution.location,
            country=execution.country,
            started_at=execution.started_at,
            finished_at=finished_at,
            execution_id=execution.execution_id,
            version=execution.version,
            outcome=outcome,
            stage_statuses=self.stages.snapshot(),
            retries=self.retries.snapshot(),
            warnings=self.warnings.snapshot(),
            error_message=error_message,
        )
        self.ledger.append(entry)
        self._ui.on_run_complete(entry)
        return entry

    def _resolve(self, entry: HistoryEntry | None) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(entry)
