from __future__ import annotations

import abc
import types
from collections.abc import Mapping, Sequence
from typing import Any, Self, TypedDict, Unpack

from pipeboard.infra.http_defaults import DEFAULT_USER_HEADERS
from pipeboard.schemas import SessionConfig

from .response import BaseResponse


class PostRequestKwargs(TypedDict, total=False):
    headers: Mapping[str, str] | Sequence[tuple[str, str]]
    params: dict[str, Any] | list[tuple[str, Any]] | None
    data: Any
    json: Any


class BaseSession(abc.ABC):
    """Async HTTP session used to deliver trigger requests to the executor.

    Backends only need to speak POST: the executor webhook accepts a JSON
    body and answers with the run acknowledgment.
    """

    def __init__(self, cfg: SessionConfig | None = None, **kwargs: Any) -> None:
        """Initializes the session using the provided configuration.

        Args:
            cfg: Optional configuration object defining session behavior.
            **kwargs: Additional parameters reserved for backend-specific
                initialization.
        """
        cfg = cfg if cfg is not None else SessionConfig()

        self._timeout = cfg.timeout
        self._max_connections = cfg.max_connections
        self._verify_ssl = cfg.verify_ssl
        self._http2 = cfg.http2
        self._proxy = cfg.proxy
        self._proxy_user = cfg.proxy_user
        self._proxy_pass = cfg.proxy_pass
        self._trust_env = cfg.trust_env
        self._session: Any = None

        self._headers = DEFAULT_USER_HEADERS.copy()
        if cfg.headers:
            self._headers.update(cfg.headers)
        if cfg.user_agent:
            self._headers["User-Agent"] = cfg.user_agent

    @abc.abstractmethod
    async def init(
        self,
        **kwargs: Any,
    ) -> None:
        """Initializes backend-specific resources."""
        ...

    @abc.abstractmethod
    async def close(self) -> None:
        """Releases and cleans up any allocated resources."""
        ...

    @abc.abstractmethod
    async def post(
        self,
        url: str,
        *,
        encoding: str = "utf-8",
        **kwargs: Unpack[PostRequestKwargs],
    ) -> BaseResponse:
        """Performs an HTTP POST request.

        Args:
            url: Target URL.
            encoding: Response text encoding used when the server sends none.
            **kwargs: Additional request parameters forwarded to the backend.

        Returns:
            BaseResponse: A response wrapper for the POST request.

        Raises:
            RuntimeError: If the session has not been initialized.
        """
        ...

    @property
    def headers(self) -> dict[str, str]:
        """Returns a copy of the current session headers."""
        return self._headers.copy()

    @property
    def is_open(self) -> bool:
        return self._session is not None

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
