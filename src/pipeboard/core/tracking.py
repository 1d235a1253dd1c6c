"""
Per-execution retry counts and validation warnings.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from pipeboard.schemas import TriggerAck, ValidationConfig
from pipeboard.schemas.config import DEFAULT_RETRY_SOURCES

TEMPERATURE_WARNING = "Temperature out of normal range"
RATE_WARNING = "Bitcoin rate fluctuation detected"
CANONICAL_WARNINGS: tuple[str, ...] = (TEMPERATURE_WARNING, RATE_WARNING)


class RetryTracker:
    """Retry counts per upstream data source for the current execution.

    The counts describe retries the executor already absorbed; this class
    performs no retries itself.
    """

    __slots__ = ("_sources", "_counts")

    def __init__(self, sources: Iterable[str] = DEFAULT_RETRY_SOURCES) -> None:
        self._sources = tuple(sources)
        self._counts: dict[str, int] = {}
        self.reset()

    def reset(self) -> None:
        self._counts = dict.fromkeys(self._sources, 0)

    def record(self, source: str, count: int) -> None:
        """Set the retry count of one source.

        Raises:
            ValueError: If ``count`` is negative.
        """
        count = int(count)
        if count < 0:
            raise ValueError(f"Retry count for {source!r} must be >= 0, got {count}")
        self._counts[source] = count

    def update(self, counts: Mapping[str, int]) -> None:
        for source, count in counts.items():
            self.record(source, count)

    def get(self, source: str) -> int:
        return self._counts.get(source, 0)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def snapshot(self) -> dict[str, int]:
        return dict(self._counts)


class ValidationWarningSet:
    """Ordered advisory warnings surfaced during the current execution.

    Warnings never change an execution's outcome. Adding a warning that is
    already present is a no-op.
    """

    __slots__ = ("_warnings",)

    def __init__(self) -> None:
        self._warnings: list[str] = []

    def reset(self) -> None:
        self._warnings = []

    def add(self, warning: str) -> None:
        if warning not in self._warnings:
            self._warnings.append(warning)

    def extend(self, warnings: Iterable[str]) -> None:
        for warning in warnings:
            self.add(warning)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._warnings)

    def __len__(self) -> int:
        return len(self._warnings)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._warnings))


def evaluate_validation(
    ack: TriggerAck,
    cfg: ValidationConfig | None = None,
) -> tuple[str, ...]:
    """Turn the executor's validation report into dashboard warnings.

    If any warning condition holds (the executor flagged anomalies, or the
    quality score is under the configured threshold) both canonical warnings
    are reported together.

    Args:
        ack: The executor acknowledgment carrying the validation report.
        cfg: Thresholds to apply; defaults are used when omitted.

    Returns:
        The warnings to surface, or an empty tuple.
    """
    cfg = cfg or ValidationConfig()
    low_quality = (
        ack.quality_score is not None and ack.quality_score < cfg.min_quality_score
    )
    if ack.anomalies or low_quality:
        return CANONICAL_WARNINGS
    return ()
