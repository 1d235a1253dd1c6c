"""
Statistics and audit rows derived from the history ledger.

Both functions are pure: they read entries and never touch the ledger.
"""

from collections.abc import Iterable

from pipeboard.schemas import AuditRow, HistoryEntry, Outcome, Statistics

AUDIT_STAGE = "reporting"


def statistics(entries: Iterable[HistoryEntry]) -> Statistics:
    """Count finished executions by outcome."""
    successful = failed = 0
    for entry in entries:
        if entry.outcome is Outcome.SUCCESS:
            successful += 1
        else:
            failed += 1
    return Statistics(total=successful + failed, successful=successful, failed=failed)


def audit_rows(entries: Iterable[HistoryEntry]) -> list[AuditRow]:
    """Project entries into audit log rows, preserving their order."""
    return [
        AuditRow(
            id=entry.audit_id,
            execution_id=entry.execution_id,
            version=entry.audit_version,
            stage=AUDIT_STAGE,
            status=entry.outcome,
            timestamp=entry.finished_at,
            location=entry.location,
        )
        for entry in entries
    ]
