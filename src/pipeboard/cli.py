"""
Command line entry point: trigger one pipeline run and follow it live.

Usage:
  pipeboard --location "Tokyo,jp"
  pipeboard --init-config
  pipeboard --save-config ./settings.toml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TextIO

from pipeboard.core.errors import PipeboardError
from pipeboard.dashboard import LOCATIONS, Dashboard
from pipeboard.infra.config import (
    ConfigAdapter,
    copy_default_config,
    load_config,
    save_config_file,
)
from pipeboard.infra.logger import setup_logging
from pipeboard.infra.sessions import SUPPORTED_BACKENDS
from pipeboard.schemas import (
    STAGE_INFO,
    Execution,
    HistoryEntry,
    Outcome,
    StageName,
    StageStatus,
)

logger = logging.getLogger("pipeboard.cli")

STATUS_MARKS = {
    StageStatus.PENDING: "..",
    StageStatus.LOADING: ">>",
    StageStatus.SUCCESS: "ok",
    StageStatus.ERROR: "!!",
}


class ConsoleUI:
    """Prints pipeline events as plain text lines."""

    def __init__(self, out: TextIO = sys.stdout) -> None:
        self._out = out

    def _print(self, line: str) -> None:
        print(line, file=self._out, flush=True)

    def on_run_start(self, execution: Execution) -> None:
        self._print(f"Triggering pipeline for {execution.location}, {execution.country}")

    def on_stage_change(self, stage: StageName, status: StageStatus) -> None:
        if status is StageStatus.PENDING:
            return
        info = STAGE_INFO[stage]
        self._print(
            f"  [{STATUS_MARKS[status]}] {info.position} {info.label:<10} "
            f"{info.description} ({status.value})"
        )

    def on_retries(self, retries: Mapping[str, int]) -> None:
        if any(retries.values()):
            counts = ", ".join(f"{k} ({v}x)" for k, v in retries.items())
            self._print(f"  Retried upstream APIs: {counts}")

    def on_warnings(self, warnings: tuple[str, ...]) -> None:
        for warning in warnings:
            self._print(f"  Warning: {warning}")

    def on_run_complete(self, entry: HistoryEntry) -> None:
        if entry.outcome is Outcome.SUCCESS:
            self._print(
                f"Completed {entry.execution_id} (version {entry.version}, "
                f"{entry.total_retries} retries, {entry.warning_count} warnings)"
            )
        else:
            self._print(f"Failed: {entry.error_message}")


def build_parser() -> argparse.ArgumentParser:
    presets = ", ".join(value for value, _ in LOCATIONS)
    parser = argparse.ArgumentParser(
        prog="pipeboard",
        description="Trigger the data pipeline and follow its stages.",
    )
    parser.add_argument(
        "-l",
        "--location",
        help=f'Location as "City,cc" (presets: {presets}). '
        "Defaults to the last selected location.",
    )
    parser.add_argument("-c", "--config", type=Path, help="Path to a settings file.")
    parser.add_argument("--backend", choices=sorted(SUPPORTED_BACKENDS))
    parser.add_argument("--log-level", help="Override the configured log level.")
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a sample settings.toml to the working directory and exit.",
    )
    parser.add_argument(
        "--save-config",
        type=Path,
        metavar="FILE",
        help="Install a TOML/JSON settings file as the user-wide configuration and exit.",
    )
    return parser


def _load_adapter(path: Path | None) -> ConfigAdapter:
    try:
        return ConfigAdapter(load_config(path))
    except FileNotFoundError:
        if path is not None:
            raise
        logger.debug("No config file found, using built-in defaults")
        return ConfigAdapter({})


async def _run(dashboard: Dashboard, location: str | None, out: TextIO) -> int:
    async with dashboard:
        if location:
            dashboard.select_location(location)
        await dashboard.trigger_pipeline()
        entry = await dashboard.wait_idle()

    snap = dashboard.snapshot()
    stats = snap.statistics
    print(
        f"History: {stats.total} run(s), {stats.successful} successful, "
        f"{stats.failed} failed",
        file=out,
    )
    for row in snap.audit_rows:
        print(
            f"  #{row.id} {row.execution_id[:12]:<12} {row.version[:15]:<15} "
            f"{row.stage} {row.status.value} {row.location}",
            file=out,
        )
    return 0 if entry is not None and entry.outcome is Outcome.SUCCESS else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.init_config:
        target = copy_default_config()
        print(f"Sample configuration written to {target}")
        return 0

    if args.save_config:
        try:
            target = save_config_file(args.save_config)
        except (FileNotFoundError, ValueError) as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2
        print(f"Configuration saved to {target}")
        return 0

    try:
        adapter = _load_adapter(args.config)
        cfg = adapter.get_dashboard_config()
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        setup_logging(args.log_level or adapter.get_log_level(), adapter.get_log_dir())
    except (ValueError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    if args.backend:
        cfg.executor_cfg.backend = args.backend

    dashboard = Dashboard(cfg, ui=ConsoleUI())
    try:
        return asyncio.run(_run(dashboard, args.location, sys.stdout))
    except (PipeboardError, ValueError) as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
