"""
Application-state container consumed by presentation layers.

``Dashboard`` owns the trigger controller, the history ledger and the user's
location preference, and exposes them as a read-only ``DashboardSnapshot``
plus a single ``trigger_pipeline`` entry point.
"""

from __future__ import annotations

import logging
import types
from dataclasses import dataclass
from typing import Self

from pipeboard.core.aggregate import audit_rows, statistics
from pipeboard.core.controller import TriggerController
from pipeboard.core.executor import ExecutorClient
from pipeboard.core.ledger import ExecutionHistoryLedger
from pipeboard.infra.persistence.state import StateManager
from pipeboard.protocols import PipelineUI
from pipeboard.schemas import (
    AuditRow,
    DashboardConfig,
    Execution,
    HistoryEntry,
    StageName,
    StageStatus,
    Statistics,
    TriggerAck,
)

logger = logging.getLogger(__name__)

LOCATIONS: tuple[tuple[str, str], ...] = (
    ("London,uk", "London, UK"),
    ("New York,us", "New York, USA"),
    ("Tokyo,jp", "Tokyo, Japan"),
    ("Paris,fr", "Paris, France"),
    ("Sydney,au", "Sydney, Australia"),
)


def parse_location(value: str, default_country: str) -> tuple[str, str]:
    """Split a ``"City,cc"`` selector into location and country.

    Args:
        value: The selector, e.g. ``"New York,us"``.
        default_country: Country used when the selector has none.

    Returns:
        A ``(location, country)`` tuple.

    Raises:
        ValueError: If the location part is empty.
    """
    location, _, country = value.partition(",")
    location, country = location.strip(), country.strip()
    if not location:
        raise ValueError(f"Invalid location: {value!r}")
    return location, country or default_country


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    """Everything presentation needs to render the dashboard at one instant."""

    location: str
    running: bool
    stages: dict[StageName, StageStatus]
    retries: dict[str, int]
    warnings: tuple[str, ...]
    last_ack: TriggerAck | None
    history: tuple[HistoryEntry, ...]
    statistics: Statistics
    audit_rows: list[AuditRow]


class Dashboard:
    """Dashboard core: one controller, one ledger, one selected location.

    Args:
        cfg: Dashboard configuration; defaults are used when omitted.
        executor: Optional executor client. One is built from
            ``cfg.executor_cfg`` otherwise.
        ui: Optional observer for live state changes.
        state: Optional preference store.
    """

    def __init__(
        self,
        cfg: DashboardConfig | None = None,
        executor: ExecutorClient | None = None,
        *,
        ui: PipelineUI | None = None,
        state: StateManager | None = None,
    ) -> None:
        self._cfg = cfg or DashboardConfig()
        self._executor = (
            executor if executor is not None else ExecutorClient(self._cfg.executor_cfg)
        )
        self._state = state if state is not None else StateManager()
        self.controller = TriggerController(
            self._executor,
            ledger=ExecutionHistoryLedger(self._cfg.history_limit),
            schedule_cfg=self._cfg.schedule_cfg,
            validation_cfg=self._cfg.validation_cfg,
            retry_sources=self._cfg.executor_cfg.retry_sources,
            ui=ui,
        )
        self._location = self._state.get_location(self._cfg.default_location)

    @property
    def location(self) -> str:
        """The currently selected ``"City,cc"`` location."""
        return self._location

    @property
    def ledger(self) -> ExecutionHistoryLedger:
        return self.controller.ledger

    def select_location(self, value: str) -> None:
        """Select and remember the location used by ``trigger_pipeline``.

        Raises:
            ValueError: If the location is malformed.
        """
        parse_location(value, self._cfg.default_country)
        self._location = value
        self._state.set_location(value)

    async def trigger_pipeline(self, location: str | None = None) -> Execution:
        """Trigger the pipeline for a location.

        Args:
            location: ``"City,cc"`` selector; the selected one if omitted.

        Returns:
            The execution that was started.

        Raises:
            AlreadyRunning: If an execution is still in flight.
            ValueError: If the location is malformed.
        """
        city, country = parse_location(
            location or self._location, self._cfg.default_country
        )
        return await self.controller.run(city, country)

    async def wait_idle(self) -> HistoryEntry | None:
        """Wait for the current execution to finish."""
        return await self.controller.join()

    def snapshot(self) -> DashboardSnapshot:
        """Return a consistent read-only view of the dashboard state."""
        history = self.ledger.all()
        return DashboardSnapshot(
            location=self._location,
            running=self.controller.running,
            stages=self.controller.stages.snapshot(),
            retries=self.controller.retries.snapshot(),
            warnings=self.controller.warnings.snapshot(),
            last_ack=self.controller.last_ack,
            history=history,
            statistics=statistics(history),
            audit_rows=audit_rows(history),
        )

    async def init(self) -> None:
        await self._executor.init()

    async def close(self) -> None:
        """Cancel any in-flight execution and release network resources."""
        if self.controller.cancel():
            logger.info("Dashboard closed with an execution in flight")
        await self._executor.close()

    async def __aenter__(self) -> Self:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        await self.close()
