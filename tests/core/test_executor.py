from __future__ import annotations

import aiohttp.web
import pytest
import pytest_asyncio

from pipeboard.core.controller import TriggerController
from pipeboard.core.errors import ExecutorUnreachable
from pipeboard.core.executor import ExecutorClient, parse_ack
from pipeboard.schemas import ExecutorConfig, Outcome, SessionConfig, StageName

from ..utils import FAST_SCHEDULE

BACKENDS = ["aiohttp", "httpx"]

ACK_BODY = {
    "execution_id": "exec-42",
    "version": "v2025-10-25_001",
    "timestamp": "2025-10-25T12:00:00Z",
    "collected_items": 2,
    "retries": {"weather": 1},
    "quality_score": 87.5,
}


@pytest_asyncio.fixture
async def executor_server(aiohttp_server):
    seen: list[dict] = []

    async def handler_ok(request):
        seen.append(await request.json())
        return aiohttp.web.json_response(ACK_BODY)

    async def handler_fail(request):
        return aiohttp.web.Response(text="workflow crashed", status=500)

    async def handler_garbage(request):
        return aiohttp.web.Response(text="<html>not json</html>", status=200)

    async def handler_no_id(request):
        return aiohttp.web.json_response({"version": "v1"})

    async def handler_bad_anomalies(request):
        return aiohttp.web.json_response({"execution_id": "exec-7", "anomalies": 3})

    async def handler_huge_numbers(request):
        return aiohttp.web.Response(
            text='{"execution_id": "exec-8", "collected_items": 1e400,'
            ' "retries": {"weather": 1e400}}',
            content_type="application/json",
        )

    app = aiohttp.web.Application()
    app.router.add_post("/webhook/collect-data", handler_ok)
    app.router.add_post("/fail", handler_fail)
    app.router.add_post("/garbage", handler_garbage)
    app.router.add_post("/no-id", handler_no_id)
    app.router.add_post("/bad-anomalies", handler_bad_anomalies)
    app.router.add_post("/huge-numbers", handler_huge_numbers)

    server = await aiohttp_server(app)
    server.seen = seen
    return server


def make_client(backend: str, url: str) -> ExecutorClient:
    cfg = ExecutorConfig(
        url=url, backend=backend, session_cfg=SessionConfig(timeout=5.0)
    )
    return ExecutorClient(cfg)


# ---------------------------------------------------------
# parse_ack
# ---------------------------------------------------------


def test_parse_ack_full_body():
    ack = parse_ack(ACK_BODY, ("weather", "bitcoin"))
    assert ack.execution_id == "exec-42"
    assert ack.version == "v2025-10-25_001"
    assert ack.collected_items == 2
    assert ack.retries == {"weather": 1, "bitcoin": 0}
    assert ack.quality_score == 87.5
    assert ack.anomalies == ()


def test_parse_ack_minimal_body_uses_placeholders():
    ack = parse_ack({"execution_id": 7})
    assert ack.execution_id == "7"
    assert ack.version == "N/A"
    assert ack.timestamp == "N/A"
    assert ack.collected_items is None
    assert ack.quality_score is None


def test_parse_ack_clamps_and_skips_bad_retry_counts():
    ack = parse_ack(
        {"execution_id": "x", "retries": {"weather": -3, "bitcoin": "many"}},
        ("weather", "bitcoin"),
    )
    assert ack.retries == {"weather": 0, "bitcoin": 0}


@pytest.mark.parametrize("payload", [[], "ok", None, {}, {"execution_id": ""}])
def test_parse_ack_rejects_unusable_bodies(payload):
    with pytest.raises(ExecutorUnreachable):
        parse_ack(payload)


@pytest.mark.parametrize("anomalies", [3, "spike", {"temperature": 1}, ["ok", 2]])
def test_parse_ack_rejects_malformed_anomalies(anomalies):
    with pytest.raises(ExecutorUnreachable, match="anomalies"):
        parse_ack({"execution_id": "x", "anomalies": anomalies})


def test_parse_ack_keeps_anomaly_names_whole():
    ack = parse_ack({"execution_id": "x", "anomalies": ["spike", "temperature"]})
    assert ack.anomalies == ("spike", "temperature")


def test_parse_ack_ignores_non_finite_numbers():
    ack = parse_ack(
        {
            "execution_id": "x",
            "collected_items": float("inf"),
            "quality_score": float("nan"),
            "retries": {"weather": float("inf"), "bitcoin": 2},
        },
        ("weather", "bitcoin"),
    )
    assert ack.collected_items is None
    assert ack.quality_score is None
    assert ack.retries == {"weather": 0, "bitcoin": 2}


# ---------------------------------------------------------
# ExecutorClient
# ---------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", BACKENDS)
async def test_trigger_success(executor_server, backend):
    url = str(executor_server.make_url("/webhook/collect-data"))
    async with make_client(backend, url) as client:
        ack = await client.trigger("Tokyo", "jp")

    assert ack.execution_id == "exec-42"
    assert ack.retries["weather"] == 1
    assert executor_server.seen == [{"location": "Tokyo", "country": "jp"}]


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.parametrize(
    "path, fragment",
    [
        ("/fail", "status 500"),
        ("/garbage", "invalid JSON"),
        ("/no-id", "execution_id"),
    ],
)
async def test_trigger_bad_responses(executor_server, backend, path, fragment):
    url = str(executor_server.make_url(path))
    async with make_client(backend, url) as client:
        with pytest.raises(ExecutorUnreachable) as exc:
            await client.trigger("London", "uk")
    assert fragment in str(exc.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", BACKENDS)
async def test_trigger_unreachable_host(backend, unused_tcp_port):
    url = f"http://127.0.0.1:{unused_tcp_port}/webhook/collect-data"
    async with make_client(backend, url) as client:
        with pytest.raises(ExecutorUnreachable) as exc:
            await client.trigger("London", "uk")
    assert str(exc.value).startswith("Network error contacting executor")


@pytest.mark.asyncio
async def test_trigger_before_init_is_a_programming_error():
    client = make_client("aiohttp", "http://127.0.0.1:1/")
    with pytest.raises(RuntimeError):
        await client.trigger("London", "uk")


@pytest.mark.asyncio
async def test_injected_session_is_not_closed(executor_server):
    from pipeboard.infra.sessions import create_session

    session = create_session("aiohttp")
    await session.init()
    client = ExecutorClient(
        ExecutorConfig(url=str(executor_server.make_url("/webhook/collect-data"))),
        session=session,
    )
    await client.trigger("Paris", "fr")
    await client.close()

    assert session.is_open
    await session.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", BACKENDS)
async def test_trigger_rejects_malformed_anomalies(executor_server, backend):
    url = str(executor_server.make_url("/bad-anomalies"))
    async with make_client(backend, url) as client:
        with pytest.raises(ExecutorUnreachable, match="anomalies"):
            await client.trigger("London", "uk")


@pytest.mark.asyncio
@pytest.mark.parametrize("backend", BACKENDS)
async def test_trigger_tolerates_out_of_range_numbers(executor_server, backend):
    url = str(executor_server.make_url("/huge-numbers"))
    async with make_client(backend, url) as client:
        ack = await client.trigger("London", "uk")

    assert ack.execution_id == "exec-8"
    assert ack.collected_items is None
    assert ack.retries["weather"] == 0


@pytest.mark.asyncio
async def test_malformed_response_is_recorded_as_failed_run(executor_server):
    url = str(executor_server.make_url("/bad-anomalies"))
    async with make_client("aiohttp", url) as client:
        ctrl = TriggerController(client, schedule_cfg=FAST_SCHEDULE)
        execution = await ctrl.run("London", "uk")
        entry = await ctrl.join()

    assert execution.outcome is Outcome.ERROR
    assert not ctrl.running
    assert len(ctrl.ledger) == 1
    assert entry.outcome is Outcome.ERROR
    assert entry.failed_stage is StageName.COLLECTOR
    assert "anomalies" in entry.error_message
