from __future__ import annotations

import logging
from typing import Callable, Optional

from typing_extensions import assert_never

from pagewalker._core._headers import parse_cache_control
from pagewalker._core._policy import dispose
from pagewalker._core.models import RequestDisposition, WalkOptions
from pagewalker._driver import AsyncBaseDriver, InterceptedRequest, ObservedResponse
from pagewalker._exceptions import BodyUnavailable
from pagewalker._storages import ResponseCacheStore, now_ms

__all__ = ("handle_request", "observe_response", "Interceptor")

logger = logging.getLogger("pagewalker.interception")

Clock = Callable[[], float]


async def handle_request(
    request: InterceptedRequest,
    store: ResponseCacheStore,
    options: WalkOptions,
    now: Optional[float] = None,
) -> RequestDisposition:
    """
    Resolve an intercepted request: abort it, answer it from the cache, or let it through.

    The request is always resolved before this coroutine returns.
    """
    now = now_ms() if now is None else now
    disposition, entry = dispose(request.resource_type, request.url, store, options, now)

    if disposition == "block":
        logger.debug(f"Blocking {request.resource_type} request to {request.url}")
        await request.abort()
    elif disposition == "respond_from_cache":
        assert entry is not None
        logger.debug(f"Serving {request.url} from cache")
        await request.respond(entry)
    elif disposition == "pass_through":
        await request.continue_()
    else:
        assert_never(disposition)

    return disposition


async def observe_response(
    response: ObservedResponse,
    store: ResponseCacheStore,
    now: Optional[float] = None,
) -> bool:
    """
    Feed an observed response into the cache.

    Caching is best effort: if the body cannot be captured the response is
    skipped without raising. Returns True if the store was updated.
    """
    now = now_ms() if now is None else now

    if not parse_cache_control(response.headers.get("cache-control")).max_age:
        return False

    # Avoid reading bodies that the store would refuse anyway
    if store.has_live_entry(response.url, now):
        return False

    try:
        body = await response.body()
    except BodyUnavailable as exc:
        logger.debug(f"Could not capture body of {response.url}, not caching it: {exc}")
        return False

    return store.observe(response.url, response.status, response.headers, body, now)


class Interceptor:
    """
    Binds the two handlers to one store and one set of options.

    The clock is read once per event so a request and its cache lookup agree
    on what "now" is.
    """

    def __init__(
        self,
        store: ResponseCacheStore,
        options: WalkOptions,
        clock: Clock = now_ms,
    ) -> None:
        self.store = store
        self.options = options
        self.clock = clock

    async def on_request(self, request: InterceptedRequest) -> None:
        await handle_request(request, self.store, self.options, self.clock())

    async def on_response(self, response: ObservedResponse) -> None:
        await observe_response(response, self.store, self.clock())

    async def install(self, driver: AsyncBaseDriver) -> None:
        await driver.on_request(self.on_request)
        await driver.on_response(self.on_response)

    async def uninstall(self, driver: AsyncBaseDriver) -> None:
        await driver.off_request(self.on_request)
        await driver.off_response(self.on_response)
