from __future__ import annotations

from pathlib import Path
from typing import Any

from pipeboard.infra.paths import USER_LOG_DIR
from pipeboard.schemas import (
    DashboardConfig,
    ExecutorConfig,
    ScheduleConfig,
    SessionConfig,
    ValidationConfig,
)
from pipeboard.schemas.config import (
    DEFAULT_EXECUTOR_URL,
    DEFAULT_RETRY_SOURCES,
    DEFAULT_STAGE_DELAYS,
)


class ConfigAdapter:
    """High-level accessor for the dashboard configuration.

    Connection settings resolve in the order:

    **executor table -> general table -> built-in defaults**

    Args:
        config (dict[str, Any]): Fully loaded configuration mapping with
            optional ``general``, ``executor``, ``schedule`` and
            ``validation`` tables.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        self._config: dict[str, Any] = dict(config)

    def get_config(self) -> dict[str, Any]:
        """Return the full raw configuration mapping."""
        return self._config

    def get_dashboard_config(self) -> DashboardConfig:
        """Build the top-level DashboardConfig.

        Returns:
            DashboardConfig: Resolved dashboard configuration.
        """
        general_cfg = self._gen_cfg()

        return DashboardConfig(
            history_limit=int(general_cfg.get("history_limit", 20)),
            default_location=general_cfg.get("default_location", "London,uk"),
            default_country=general_cfg.get("default_country", "uk"),
            executor_cfg=self.get_executor_config(),
            schedule_cfg=self.get_schedule_config(),
            validation_cfg=self.get_validation_config(),
        )

    def get_executor_config(self) -> ExecutorConfig:
        """Build an ExecutorConfig by merging general and executor tables.

        Returns:
            ExecutorConfig: Resolved executor configuration.
        """
        cfg = self._executor_cfg()
        sources = cfg.get("retry_sources") or DEFAULT_RETRY_SOURCES

        return ExecutorConfig(
            url=cfg.get("url", DEFAULT_EXECUTOR_URL),
            backend=self.get_backend(),
            retry_sources=tuple(str(s) for s in sources),
            session_cfg=self.get_session_config(),
        )

    def get_session_config(self) -> SessionConfig:
        """Build the SessionConfig used by the executor client.

        Returns:
            SessionConfig: Resolved session configuration.
        """
        cfg = self._executor_cfg()

        return SessionConfig(
            timeout=float(cfg.get("timeout", 30.0)),
            max_connections=int(cfg.get("max_connections", 4)),
            user_agent=cfg.get("user_agent"),
            headers=cfg.get("headers") or None,
            verify_ssl=bool(cfg.get("verify_ssl", True)),
            http2=bool(cfg.get("http2", False)),
            trust_env=bool(cfg.get("trust_env", False)),
            proxy=cfg.get("proxy"),
            proxy_user=cfg.get("proxy_user"),
            proxy_pass=cfg.get("proxy_pass"),
        )

    def get_backend(self) -> str:
        """Return the HTTP backend name.

        Returns:
            str: Backend name or ``"aiohttp"`` if unspecified.
        """
        backend = self._executor_cfg().get("backend")
        return backend if isinstance(backend, str) else "aiohttp"

    def get_schedule_config(self) -> ScheduleConfig:
        """Build the ScheduleConfig for the stage display.

        Raises:
            ValueError: If the configured delays are malformed.
        """
        delays = self._section("schedule").get("delays", DEFAULT_STAGE_DELAYS)
        if not isinstance(delays, list | tuple):
            raise ValueError(f"schedule.delays must be a list, got {delays!r}")
        return ScheduleConfig(delays=tuple(delays))

    def get_validation_config(self) -> ValidationConfig:
        validation_cfg = self._section("validation")
        return ValidationConfig(
            min_quality_score=float(validation_cfg.get("min_quality_score", 50.0)),
        )

    def get_log_level(self) -> str:
        """Return the configured log level (default ``"INFO"``)."""
        level = self._gen_cfg().get("log_level", "INFO")
        return str(level).upper()

    def get_log_dir(self) -> Path:
        """Return the directory log files are written to."""
        log_dir = self._gen_cfg().get("log_dir")
        return Path(log_dir).expanduser().resolve() if log_dir else USER_LOG_DIR

    def _gen_cfg(self) -> dict[str, Any]:
        return self._section("general")

    def _executor_cfg(self) -> dict[str, Any]:
        return {**self._gen_cfg(), **self._section("executor")}

    def _section(self, name: str) -> dict[str, Any]:
        section = self._config.get(name)
        return section if isinstance(section, dict) else {}
