from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from inline_snapshot import snapshot
from time_machine import travel

from pagewalker import Interceptor, ResponseCacheStore, WalkOptions, handle_request, observe_response
from pagewalker._mock import MockDriver, MockRequest, MockResponse

CDN_ASSET = "https://d17ivq9b7rppb3.cloudfront.net/app.css"


def cacheable_response(url: str = CDN_ASSET, content: bytes | None = b"body { margin: 0 }") -> MockResponse:
    return MockResponse(url, status=200, headers={"Cache-Control": "max-age=60"}, content=content)


@pytest.mark.anyio
async def test_untrusted_asset_is_aborted() -> None:
    request = MockRequest("https://fonts.gstatic.com/s/roboto.woff2", "font")

    disposition = await handle_request(request, ResponseCacheStore(), WalkOptions(), now=0)

    assert disposition == "block"
    assert request.resolution == "aborted"


@pytest.mark.anyio
async def test_cached_asset_is_fulfilled_from_store() -> None:
    store = ResponseCacheStore()
    await observe_response(cacheable_response(), store, now=0)
    request = MockRequest(CDN_ASSET, "stylesheet")

    disposition = await handle_request(request, store, WalkOptions(), now=1000)

    assert disposition == "respond_from_cache"
    assert request.resolution == "responded"
    assert request.served is not None
    assert request.served.body == b"body { margin: 0 }"


@pytest.mark.anyio
async def test_uncached_request_continues() -> None:
    request = MockRequest("https://www.dicoding.com/academies/86/tutorials/1", "document")

    disposition = await handle_request(request, ResponseCacheStore(), WalkOptions(), now=0)

    assert disposition == "pass_through"
    assert request.resolution == "continued"


@pytest.mark.anyio
async def test_unavailable_body_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    store = ResponseCacheStore()

    with caplog.at_level("DEBUG", logger="pagewalker"):
        stored = await observe_response(cacheable_response(content=None), store, now=0)

    assert not stored
    assert len(store) == 0
    assert caplog.messages == snapshot(
        [
            "Could not capture body of https://d17ivq9b7rppb3.cloudfront.net/app.css, not caching it: "
            "Transfer of https://d17ivq9b7rppb3.cloudfront.net/app.css was aborted"
        ]
    )


@pytest.mark.anyio
async def test_body_is_not_read_for_uncacheable_response() -> None:
    response = MockResponse(CDN_ASSET, headers={"cache-control": "no-cache"})

    assert not await observe_response(response, ResponseCacheStore(), now=0)
    assert response.body_reads == 0


@pytest.mark.anyio
async def test_body_is_not_read_while_entry_is_live() -> None:
    store = ResponseCacheStore()
    await observe_response(cacheable_response(), store, now=0)
    second = cacheable_response(content=b"changed")

    assert not await observe_response(second, store, now=30_000)
    assert second.body_reads == 0

    entry = store.lookup(CDN_ASSET, now=30_000)
    assert entry is not None
    assert entry.body == b"body { margin: 0 }"


@pytest.mark.anyio
async def test_cached_response_is_served_until_it_expires() -> None:
    driver = MockDriver(pages=[])
    store = ResponseCacheStore()

    with travel(datetime(2024, 1, 1, 0, 0, 0, tzinfo=ZoneInfo("UTC")), tick=False) as traveller:
        await Interceptor(store, WalkOptions()).install(driver)

        await driver.emit_response(cacheable_response())

        traveller.shift(59)
        request = await driver.emit_request(CDN_ASSET, "stylesheet")
        assert request.resolution == "responded"

        traveller.shift(2)
        request = await driver.emit_request(CDN_ASSET, "stylesheet")
        assert request.resolution == "continued"


@pytest.mark.anyio
async def test_interceptor_uses_its_clock() -> None:
    driver = MockDriver(pages=[])
    now = [0.0]
    interceptor = Interceptor(ResponseCacheStore(), WalkOptions(), clock=lambda: now[0])
    await interceptor.install(driver)

    await driver.emit_response(cacheable_response())
    now[0] = 60_000.0
    request = await driver.emit_request(CDN_ASSET, "stylesheet")

    assert request.resolution == "continued"
    assert len(driver.request_handlers) == 1
    assert len(driver.response_handlers) == 1


@pytest.mark.anyio
async def test_malformed_max_age_is_not_cached() -> None:
    response = MockResponse(CDN_ASSET, headers={"cache-control": "max-age=²"}, content=b"css")
    store = ResponseCacheStore()

    assert not await observe_response(response, store, now=0)
    assert response.body_reads == 0
    assert len(store) == 0
