"""
Defines structured configuration models using dataclasses.
"""

from dataclasses import dataclass, field

DEFAULT_EXECUTOR_URL = "http://localhost:5678/webhook/collect-data"
DEFAULT_STAGE_DELAYS: tuple[float, ...] = (0.0, 1.5, 3.0, 4.5)
DEFAULT_RETRY_SOURCES: tuple[str, ...] = ("weather", "bitcoin")


@dataclass
class SessionConfig:
    """Configuration for HTTP session behavior.

    Attributes:
        timeout: Request timeout in seconds.
        max_connections: Maximum number of concurrent connections.
        user_agent: Custom User-Agent string.
        headers: Additional headers to attach to requests.
        verify_ssl: Whether to verify SSL certificates.
        http2: Whether HTTP/2 should be used. (`httpx`)
        trust_env: Whether environment variables are used for proxies.
        proxy: Proxy server URL.
        proxy_user: Proxy authentication username.
        proxy_pass: Proxy authentication password.
    """

    timeout: float = 30.0
    max_connections: int = 4
    user_agent: str | None = None
    headers: dict[str, str] | None = None
    verify_ssl: bool = True
    http2: bool = False
    trust_env: bool = False
    proxy: str | None = None
    proxy_user: str | None = None
    proxy_pass: str | None = None


@dataclass
class ExecutorConfig:
    """Configuration for reaching the remote pipeline executor.

    Attributes:
        url: Webhook endpoint that triggers the whole pipeline.
        backend: HTTP backend name (aiohttp, httpx).
        retry_sources: Upstream sources whose retries are reported.
        session_cfg: HTTP session configuration.
    """

    url: str = DEFAULT_EXECUTOR_URL
    backend: str = "aiohttp"
    retry_sources: tuple[str, ...] = DEFAULT_RETRY_SOURCES
    session_cfg: SessionConfig = field(default_factory=SessionConfig)


@dataclass
class ScheduleConfig:
    """Timing of the progressive stage display.

    Attributes:
        delays: Seconds after acknowledgment at which each of the four
            scheduled advances fires. Must be non-negative and non-decreasing.
    """

    delays: tuple[float, ...] = DEFAULT_STAGE_DELAYS

    def __post_init__(self) -> None:
        delays = tuple(float(d) for d in self.delays)
        if len(delays) != 4:
            raise ValueError(f"Expected 4 stage delays, got {len(delays)}")
        if any(d < 0 for d in delays):
            raise ValueError(f"Stage delays must be non-negative: {delays}")
        if any(b < a for a, b in zip(delays, delays[1:], strict=False)):
            raise ValueError(f"Stage delays must be non-decreasing: {delays}")
        self.delays = delays


@dataclass
class ValidationConfig:
    """Thresholds used when turning the executor's report into warnings.

    Attributes:
        min_quality_score: Quality scores below this value raise warnings.
    """

    min_quality_score: float = 50.0


@dataclass
class DashboardConfig:
    """Top-level configuration for the dashboard core.

    Attributes:
        history_limit: Maximum number of history entries kept.
        default_location: Location selected when no preference is stored.
        default_country: Country used when a location carries none.
        executor_cfg: Configuration for the executor client.
        schedule_cfg: Configuration for the stage display schedule.
        validation_cfg: Configuration for validation warnings.
    """

    history_limit: int = 20
    default_location: str = "London,uk"
    default_country: str = "uk"
    executor_cfg: ExecutorConfig = field(default_factory=ExecutorConfig)
    schedule_cfg: ScheduleConfig = field(default_factory=ScheduleConfig)
    validation_cfg: ValidationConfig = field(default_factory=ValidationConfig)
