"""
Data contracts and type definitions.
"""

__all__ = [
    "DashboardConfig",
    "ExecutorConfig",
    "ScheduleConfig",
    "SessionConfig",
    "ValidationConfig",
    "AuditRow",
    "Execution",
    "HistoryEntry",
    "Outcome",
    "Statistics",
    "TriggerAck",
    "TriggerRequest",
    "TriggerResponseDict",
    "STAGE_INFO",
    "STAGE_ORDER",
    "StageInfo",
    "StageName",
    "StageStatus",
]

from .config import (
    DashboardConfig,
    ExecutorConfig,
    ScheduleConfig,
    SessionConfig,
    ValidationConfig,
)
from .execution import (
    AuditRow,
    Execution,
    HistoryEntry,
    Outcome,
    Statistics,
    TriggerAck,
    TriggerRequest,
    TriggerResponseDict,
)
from .stage import STAGE_INFO, STAGE_ORDER, StageInfo, StageName, StageStatus
