"""
Stage names, statuses and display metadata for the four pipeline stages.
"""

from dataclasses import dataclass
from enum import Enum


class StageName(str, Enum):
    """The four fixed pipeline stages, in execution order."""

    COLLECTOR = "collector"
    VALIDATOR = "validator"
    PROCESSOR = "processor"
    REPORTER = "reporter"

    @property
    def index(self) -> int:
        return STAGE_ORDER.index(self)


class StageStatus(str, Enum):
    """Status of a single stage within the current execution."""

    PENDING = "pending"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_final(self) -> bool:
        """Whether the stage can no longer change within its execution."""
        return self in (StageStatus.SUCCESS, StageStatus.ERROR)


STAGE_ORDER: tuple[StageName, ...] = (
    StageName.COLLECTOR,
    StageName.VALIDATOR,
    StageName.PROCESSOR,
    StageName.REPORTER,
)


@dataclass(frozen=True, slots=True)
class StageInfo:
    """Display metadata for a stage.

    Attributes:
        label: Human readable stage name.
        position: Position within the pipeline, e.g. ``"1/4"``.
        description: Short summary of the work the stage performs.
    """

    label: str
    position: str
    description: str


STAGE_INFO: dict[StageName, StageInfo] = {
    StageName.COLLECTOR: StageInfo("Collector", "1/4", "Fetch APIs"),
    StageName.VALIDATOR: StageInfo("Validator", "2/4", "Quality Check"),
    StageName.PROCESSOR: StageInfo("Processor", "3/4", "Transform"),
    StageName.REPORTER: StageInfo("Reporter", "4/4", "Generate Report"),
}
