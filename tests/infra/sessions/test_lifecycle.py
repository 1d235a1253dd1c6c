import pytest

from .utils import BACKENDS, make_session


@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.asyncio
async def test_init_close_is_idempotent(backend):
    s = make_session(backend)

    await s.init()
    await s.init()
    assert s.is_open
    await s.close()
    await s.close()
    assert not s.is_open


@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.asyncio
async def test_post_raises_before_init(backend):
    s = make_session(backend)

    with pytest.raises(RuntimeError):
        await s.post("http://example.com/", json={"x": 1})


@pytest.mark.parametrize("backend", BACKENDS)
@pytest.mark.asyncio
async def test_post_raises_after_close(backend):
    s = make_session(backend)
    await s.init()
    await s.close()

    with pytest.raises(RuntimeError):
        await s.post("http://example.com/", json={"x": 1})
