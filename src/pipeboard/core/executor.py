"""
Client for the remote pipeline executor.

The executor runs all four stages before it acknowledges a trigger, so a
single POST is the whole conversation.
"""

from __future__ import annotations

import json
import math
import logging
import types
from collections.abc import Iterable
from typing import Any, Self

from pipeboard.infra.sessions import BaseSession, create_session
from pipeboard.schemas import ExecutorConfig, TriggerAck, TriggerRequest

from .errors import ExecutorUnreachable

logger = logging.getLogger(__name__)


def parse_ack(
    payload: Any,
    retry_sources: Iterable[str] = (),
) -> TriggerAck:
    """Convert an executor response body into a ``TriggerAck``.

    Args:
        payload: Decoded JSON body.
        retry_sources: Sources whose retry count defaults to zero when the
            executor does not report one.

    Returns:
        TriggerAck: The parsed acknowledgment.

    Raises:
        ExecutorUnreachable: If the body is not an object, has no
            ``execution_id`` or carries a non-list ``anomalies`` field.
    """
    if not isinstance(payload, dict):
        raise ExecutorUnreachable(
            f"Unexpected executor response: expected an object, got {type(payload).__name__}"
        )
    execution_id = payload.get("execution_id")
    if not execution_id:
        raise ExecutorUnreachable("Executor response is missing 'execution_id'")

    retries = dict.fromkeys(retry_sources, 0)
    reported = payload.get("retries")
    if isinstance(reported, dict):
        for source, count in reported.items():
            try:
                retries[str(source)] = max(0, int(count))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Ignoring retry count %r for %s", count, source)

    anomalies = payload.get("anomalies") or []
    if not isinstance(anomalies, list) or not all(
        isinstance(a, str) for a in anomalies
    ):
        raise ExecutorUnreachable(
            f"Executor response has malformed 'anomalies': {anomalies!r}"
        )

    return TriggerAck(
        execution_id=str(execution_id),
        version=str(payload.get("version") or "N/A"),
        timestamp=str(payload.get("timestamp") or "N/A"),
        collected_items=_as_count(payload.get("collected_items")),
        retries=retries,
        quality_score=_as_score(payload.get("quality_score")),
        anomalies=tuple(anomalies),
    )


def _as_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _as_score(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    score = float(value)
    return score if math.isfinite(score) else None


class ExecutorClient:
    """Triggers pipeline runs on the remote executor.

    Args:
        cfg: Executor configuration; defaults are used when omitted.
        session: Optional pre-built session. When given, the caller owns
            its lifecycle.
    """

    def __init__(
        self,
        cfg: ExecutorConfig | None = None,
        *,
        session: BaseSession | None = None,
    ) -> None:
        self._cfg = cfg if cfg is not None else ExecutorConfig()
        self._owns_session = session is None
        self._session = (
            session
            if session is not None
            else create_session(self._cfg.backend, self._cfg.session_cfg)
        )

    @property
    def url(self) -> str:
        return self._cfg.url

    async def init(self) -> None:
        """Initialize the underlying HTTP session."""
        await self._session.init()

    async def close(self) -> None:
        """Close the underlying HTTP session if this client created it."""
        if self._owns_session:
            await self._session.close()

    async def trigger(self, location: str, country: str) -> TriggerAck:
        """Ask the executor to run the pipeline for a location.

        Args:
            location: City to collect data for.
            country: Country code of the city.

        Returns:
            TriggerAck: The executor's acknowledgment.

        Raises:
            ExecutorUnreachable: On transport errors, timeouts, non-2xx
                responses or malformed bodies.
        """
        body: TriggerRequest = {"location": location, "country": country}
        logger.debug("POST %s %s", self._cfg.url, body)

        try:
            resp = await self._session.post(self._cfg.url, json=body)
        except RuntimeError:
            raise
        except Exception as e:
            raise ExecutorUnreachable(
                f"Network error contacting executor: {str(e) or type(e).__name__}"
            ) from e

        if not resp.ok:
            raise ExecutorUnreachable(
                f"Executor responded with status {resp.status}: {resp.text[:200]}"
            )

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise ExecutorUnreachable(f"Executor returned invalid JSON: {e}") from e

        try:
            return parse_ack(payload, self._cfg.retry_sources)
        except (TypeError, ValueError, OverflowError) as e:
            raise ExecutorUnreachable(f"Malformed executor response: {e}") from e

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
