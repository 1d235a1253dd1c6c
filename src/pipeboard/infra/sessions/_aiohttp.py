from typing import Any, Unpack

import aiohttp

from .base import BaseSession, PostRequestKwargs
from .response import BaseResponse


class AiohttpSession(BaseSession):
    """Executor transport built on ``aiohttp.ClientSession``.

    HTTP/2 is not available here; ``http2`` in the session config is
    ignored by this backend.
    """

    _session: aiohttp.ClientSession | None

    async def init(
        self,
        **kwargs: Any,
    ) -> None:
        if self._session is not None and not self._session.closed:
            return

        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                ssl=self._verify_ssl,
                limit_per_host=self._max_connections,
            ),
            timeout=aiohttp.ClientTimeout(total=self._timeout),
            headers=self._headers,
            trust_env=self._trust_env,
            proxy=self._proxy,
            proxy_auth=self._build_proxy_auth(
                self._proxy, self._proxy_user, self._proxy_pass
            ),
        )

    async def close(self) -> None:
        session, self._session = self._session, None
        if session is not None and not session.closed:
            await session.close()

    async def post(
        self,
        url: str,
        *,
        encoding: str = "utf-8",
        **kwargs: Unpack[PostRequestKwargs],
    ) -> BaseResponse:
        # body is read inside the context so the connection can be released
        async with self.session.post(url, **kwargs) as r:
            return BaseResponse(
                content=await r.read(),
                headers=r.headers,
                status=r.status,
                encoding=r.charset or encoding,
            )

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("Executor session is not open; call init() first.")
        return self._session

    @staticmethod
    def _build_proxy_auth(
        proxy: str | None = None,
        proxy_user: str | None = None,
        proxy_pass: str | None = None,
    ) -> aiohttp.BasicAuth | None:
        """Credentials for the proxy, unless the proxy URL already has them."""
        if not proxy or "@" in proxy:
            return None
        if proxy_user and proxy_pass:
            return aiohttp.BasicAuth(proxy_user, proxy_pass)
        return None
