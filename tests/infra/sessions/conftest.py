from __future__ import annotations

import base64

import aiohttp.web
import pytest_asyncio


@pytest_asyncio.fixture
async def test_server(aiohttp_server):
    async def handler_post(request):
        data = await request.json()
        return aiohttp.web.json_response({"received": data})

    async def handler_echo_headers(request):
        return aiohttp.web.json_response({"headers": dict(request.headers)})

    async def handler_latin1(request):
        return aiohttp.web.Response(
            body="café".encode("latin-1"),
            content_type="text/plain",
            charset="latin-1",
        )

    app = aiohttp.web.Application()
    app.router.add_post("/post", handler_post)
    app.router.add_post("/echo-headers", handler_echo_headers)
    app.router.add_post("/latin1", handler_latin1)

    server = await aiohttp_server(app)
    return server


@pytest_asyncio.fixture
async def proxy_noauth_server(aiohttp_server):
    """Proxy that always answers with a fixed acknowledgment."""
    seen = {"count": 0, "methods": []}

    async def handler(request):
        seen["count"] += 1
        seen["methods"].append(request.method)
        return aiohttp.web.json_response({"execution_id": "via-proxy"})

    app = aiohttp.web.Application()
    app.router.add_route("*", "/{tail:.*}", handler)
    server = await aiohttp_server(app)
    server.seen = seen
    return server


@pytest_asyncio.fixture
async def proxy_auth_server(aiohttp_server):
    """Proxy enforcing Basic authentication."""
    required_user = "user1"
    required_pass = "pass1"
    token = base64.b64encode(f"{required_user}:{required_pass}".encode()).decode()
    required_header = f"Basic {token}"

    seen = {"count": 0, "auth_headers": [], "authed_count": 0}

    async def handler(request):
        seen["count"] += 1
        auth = request.headers.get("Proxy-Authorization")
        if auth:
            seen["auth_headers"].append(auth)
        if auth != required_header:
            return aiohttp.web.Response(
                text="proxy auth required",
                status=407,
                headers={"Proxy-Authenticate": "Basic"},
            )
        seen["authed_count"] += 1
        return aiohttp.web.json_response({"execution_id": "via-proxy"})

    app = aiohttp.web.Application()
    app.router.add_route("*", "/{tail:.*}", handler)

    server = await aiohttp_server(app)
    server.required_user = required_user
    server.required_pass = required_pass
    server.required_header = required_header
    server.seen = seen
    return server
