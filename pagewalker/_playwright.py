from __future__ import annotations

import logging
import typing as tp
from contextlib import asynccontextmanager

import anyio
from anyio.abc import TaskStatus
from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Request,
    Response,
    Route,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from pagewalker._core._headers import Headers
from pagewalker._core.models import CacheEntry
from pagewalker._driver import (
    AsyncBaseDriver,
    ElementHandle,
    InterceptedRequest,
    ObservedResponse,
    RequestHandler,
    ResponseHandler,
    SessionCookie,
)
from pagewalker._exceptions import BodyUnavailable, MissingElementError, NavigationError
from pagewalker._scripts import HAS_CLASS

__all__ = ("PlaywrightDriver",)

logger = logging.getLogger("pagewalker.playwright")


class PlaywrightRequest(InterceptedRequest):
    def __init__(self, route: Route, request: Request) -> None:
        self._route = route
        self.url = request.url
        self.resource_type = request.resource_type

    async def abort(self) -> None:
        await self._route.abort()

    async def respond(self, entry: CacheEntry) -> None:
        await self._route.fulfill(status=entry.status, headers=entry.headers.to_dict(), body=entry.body)

    async def continue_(self) -> None:
        await self._route.continue_()


class PlaywrightResponse(ObservedResponse):
    def __init__(self, response: Response) -> None:
        self._response = response
        self.url = response.url
        self.status = response.status
        self.headers = Headers(response.headers)

    async def body(self) -> bytes:
        try:
            return await self._response.body()
        except PlaywrightError as exc:
            raise BodyUnavailable(str(exc)) from exc


class PlaywrightDriver(AsyncBaseDriver):
    """
    Drives a single Chromium page through Playwright's async API.

    Every Playwright failure raised while navigating or waiting is turned
    into ``NavigationError`` so the walker can stop cleanly.

    Example:
        async with PlaywrightDriver.open(headless=True) as driver:
            await driver.bootstrap_session(cookie)
            report = await run(driver, "https://www.dicoding.com/academies/1/tutorials/2")
    """

    def __init__(self, browser: Browser, context: BrowserContext, page: Page, timeout: float = 30.0) -> None:
        self.browser = browser
        self.context = context
        self.page = page
        self.timeout_ms = timeout * 1000
        self._routes: tp.Dict[RequestHandler, tp.Callable[[Route, Request], tp.Awaitable[None]]] = {}
        self._listeners: tp.Dict[ResponseHandler, tp.Callable[[Response], tp.Awaitable[None]]] = {}
        self.page.set_default_timeout(self.timeout_ms)

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        executable_path: tp.Optional[str] = None,
        headless: bool = True,
        timeout: float = 30.0,
    ) -> tp.AsyncIterator["PlaywrightDriver"]:
        """
        Launch Chromium and yield a driver bound to a fresh page.

        The browser is closed when the block exits, including when the
        surrounding task is cancelled or interrupted.
        """
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=headless,
                executable_path=executable_path or None,
            )
            try:
                context = await browser.new_context()
                page = await context.new_page()
                yield cls(browser, context, page, timeout=timeout)
            finally:
                with anyio.CancelScope(shield=True):
                    await browser.close()
                logger.debug("Browser closed")

    async def navigate(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until="domcontentloaded")
        except PlaywrightError as exc:
            raise NavigationError(f"Cannot open {url}: {exc}") from exc

    def current_url(self) -> str:
        return self.page.url

    async def query_element(self, selector: str) -> tp.Optional[ElementHandle]:
        try:
            return await self.page.query_selector(selector)
        except PlaywrightError as exc:
            raise NavigationError(f"Querying {selector!r} failed: {exc}") from exc

    async def query_text(self, selector: str) -> tp.Optional[str]:
        element = await self.query_element(selector)
        if element is None:
            return None
        try:
            return await element.evaluate("(el) => el.textContent")
        except PlaywrightError as exc:
            raise NavigationError(f"Reading text of {selector!r} failed: {exc}") from exc

    async def has_class(self, selector: str, class_name: str) -> bool:
        element = await self.query_element(selector)
        if element is None:
            raise MissingElementError(selector)
        try:
            return bool(await element.evaluate(HAS_CLASS, class_name))
        except PlaywrightError as exc:
            raise NavigationError(f"Reading classes of {selector!r} failed: {exc}") from exc

    async def click(self, selector: str) -> None:
        try:
            await self.page.click(selector)
        except PlaywrightError as exc:
            raise NavigationError(f"Clicking {selector!r} failed: {exc}") from exc

    async def wait_for_selectors(self, selectors: tp.Sequence[str]) -> None:
        try:
            for selector in selectors:
                await self.page.wait_for_selector(selector, state="attached")
        except PlaywrightError as exc:
            raise NavigationError(f"Waiting for {selectors!r} failed: {exc}") from exc

    async def wait_for_navigation(
        self,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        try:
            async with self.page.expect_navigation(wait_until="domcontentloaded"):
                task_status.started()
        except PlaywrightError as exc:
            raise NavigationError(f"Navigation did not complete: {exc}") from exc

    async def evaluate(self, expression: str, arg: tp.Any = None) -> tp.Any:
        try:
            return await self.page.evaluate(expression, arg)
        except PlaywrightError as exc:
            raise NavigationError(f"Evaluating script failed: {exc}") from exc

    async def on_request(self, handler: RequestHandler) -> None:
        async def route_handler(route: Route, request: Request) -> None:
            await handler(PlaywrightRequest(route, request))

        self._routes[handler] = route_handler
        await self.page.route("**/*", route_handler)

    async def on_response(self, handler: ResponseHandler) -> None:
        async def response_handler(response: Response) -> None:
            await handler(PlaywrightResponse(response))

        self._listeners[handler] = response_handler
        self.page.on("response", response_handler)

    async def off_request(self, handler: RequestHandler) -> None:
        route_handler = self._routes.pop(handler, None)
        if route_handler is not None:
            try:
                await self.page.unroute("**/*", route_handler)
            except PlaywrightError as exc:
                logger.debug(f"Could not remove request handler, page is gone: {exc}")

    async def off_response(self, handler: ResponseHandler) -> None:
        response_handler = self._listeners.pop(handler, None)
        if response_handler is not None:
            self.page.remove_listener("response", response_handler)

    async def clear_cookies(self) -> None:
        await self.context.clear_cookies()

    async def add_session_cookie(self, cookie: SessionCookie) -> None:
        await self.context.add_cookies(
            [
                {
                    "name": cookie.name,
                    "value": cookie.value,
                    "domain": cookie.domain,
                    "path": cookie.path,
                    "httpOnly": cookie.http_only,
                    "sameSite": cookie.same_site,
                }
            ]
        )

    async def close(self) -> None:
        await self.browser.close()
