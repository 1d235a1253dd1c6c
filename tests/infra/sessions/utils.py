from __future__ import annotations

from pipeboard.infra.sessions import SUPPORTED_BACKENDS, create_session
from pipeboard.infra.sessions.base import BaseSession
from pipeboard.schemas import SessionConfig

BACKENDS: list[str] = sorted(SUPPORTED_BACKENDS)


def make_session(backend: str, cfg: SessionConfig | None = None) -> BaseSession:
    return create_session(backend, cfg or SessionConfig(timeout=5.0))
