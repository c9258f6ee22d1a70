from __future__ import annotations

import typing as tp
from dataclasses import dataclass, field

import anyio
from anyio.abc import TaskStatus

from pagewalker._core._headers import Headers
from pagewalker._core.models import CacheEntry, Selectors
from pagewalker._driver import (
    AsyncBaseDriver,
    InterceptedRequest,
    ObservedResponse,
    RequestHandler,
    ResponseHandler,
    SessionCookie,
)
from pagewalker._exceptions import BodyUnavailable, MissingElementError, NavigationError
from pagewalker._scripts import HAS_CLASS, READ_FLAG, SCROLL_TO_END, SMOOTH_SCROLL_TO_END

__all__ = ("MockDriver", "MockPage", "MockRequest", "MockResponse")


@dataclass
class MockPage:
    url: str
    authenticated: tp.Optional[bool] = True
    has_next_control: bool = True
    next_disabled: bool = False
    is_exam: bool = False
    has_submission_modal: bool = False
    course_title: tp.Optional[str] = "Course"
    unit_title: tp.Optional[str] = "Unit"
    has_container: bool = True
    renders: bool = True
    """When False, the page never finishes rendering and every selector wait hangs."""
    class_error: tp.Optional[Exception] = None
    """Raised when the classes of an element on this page are read."""


class MockElement:
    def __init__(self, classes: tp.Iterable[str] = ()) -> None:
        self.classes = set(classes)

    async def evaluate(self, expression: str, arg: tp.Any = None) -> tp.Any:
        if expression == HAS_CLASS:
            return arg in self.classes
        raise NotImplementedError(expression)


class MockRequest(InterceptedRequest):
    def __init__(self, url: str, resource_type: str) -> None:
        self.url = url
        self.resource_type = resource_type
        self.resolution: tp.Optional[str] = None
        self.served: tp.Optional[CacheEntry] = None

    async def abort(self) -> None:
        self._resolve("aborted")

    async def respond(self, entry: CacheEntry) -> None:
        self._resolve("responded")
        self.served = entry

    async def continue_(self) -> None:
        self._resolve("continued")

    def _resolve(self, resolution: str) -> None:
        if self.resolution is not None:
            raise RuntimeError(f"Request to {self.url} already {self.resolution}")
        self.resolution = resolution


class MockResponse(ObservedResponse):
    def __init__(
        self,
        url: str,
        status: int = 200,
        headers: tp.Optional[tp.Mapping[str, str]] = None,
        content: tp.Optional[bytes] = b"",
    ) -> None:
        self.url = url
        self.status = status
        self.headers = Headers(headers or {})
        self.content = content
        self.body_reads = 0

    async def body(self) -> bytes:
        self.body_reads += 1
        if self.content is None:
            raise BodyUnavailable(f"Transfer of {self.url} was aborted")
        return self.content


@dataclass
class MockDriver(AsyncBaseDriver):
    """
    A scripted browser: a fixed list of pages, each click on next moves to the following one.
    """

    pages: tp.List[MockPage]
    selectors: Selectors = field(default_factory=Selectors)
    current: int = -1
    clicks: int = 0
    scrolls: tp.List[str] = field(default_factory=list)
    cookies: tp.List[SessionCookie] = field(default_factory=list)
    closed: bool = False
    request_handlers: tp.List[RequestHandler] = field(default_factory=list)
    response_handlers: tp.List[ResponseHandler] = field(default_factory=list)
    _navigation_waiters: tp.List[anyio.Event] = field(default_factory=list)

    @property
    def page(self) -> MockPage:
        if self.current < 0:
            raise NavigationError("No page has been opened yet")
        return self.pages[self.current]

    async def navigate(self, url: str) -> None:
        for index, page in enumerate(self.pages):
            if page.url == url:
                self._go_to(index)
                return
        raise NavigationError(f"Cannot open {url}: net::ERR_NAME_NOT_RESOLVED")

    def current_url(self) -> str:
        return self.page.url

    async def query_element(self, selector: str) -> tp.Optional[MockElement]:
        page = self.page
        if selector == self.selectors.next_control and page.has_next_control:
            return MockElement([self.selectors.disabled_class] if page.next_disabled else [])
        if selector == self.selectors.submission_modal and page.has_submission_modal:
            return MockElement()
        if selector == self.selectors.container and page.has_container:
            return MockElement()
        return None

    async def query_text(self, selector: str) -> tp.Optional[str]:
        if selector == self.selectors.course_title:
            return self.page.course_title
        if selector == self.selectors.unit_title:
            return self.page.unit_title
        return None

    async def has_class(self, selector: str, class_name: str) -> bool:
        element = await self.query_element(selector)
        if element is None:
            raise MissingElementError(selector)
        if self.page.class_error is not None:
            raise self.page.class_error
        return bool(await element.evaluate(HAS_CLASS, class_name))

    async def click(self, selector: str) -> None:
        if selector != self.selectors.next_control or not self.page.has_next_control:
            raise NavigationError(f"No element matches {selector!r}")
        if self.current + 1 >= len(self.pages):
            raise NavigationError("Next link leads nowhere")
        self.clicks += 1
        self._go_to(self.current + 1)

    async def wait_for_selectors(self, selectors: tp.Sequence[str]) -> None:
        # Pages never change after loading, so a missing selector never shows up
        if not self.page.renders or not all(self.matches(selector) for selector in selectors):
            await anyio.sleep_forever()

    def matches(self, selector: str) -> bool:
        page = self.page
        present = {
            self.selectors.container: page.has_container,
            self.selectors.next_control: page.has_next_control,
            self.selectors.course_title: page.course_title is not None,
            self.selectors.unit_title: page.unit_title is not None,
            self.selectors.submission_modal: page.has_submission_modal,
        }
        return present.get(selector, False)

    async def wait_for_navigation(
        self,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        event = anyio.Event()
        self._navigation_waiters.append(event)
        task_status.started()
        await event.wait()

    async def evaluate(self, expression: str, arg: tp.Any = None) -> tp.Any:
        page = self.page
        if expression == READ_FLAG:
            if arg == self.selectors.auth_flag:
                return page.authenticated
            if arg == self.selectors.exam_flag:
                return page.is_exam
            return None
        if expression in (SMOOTH_SCROLL_TO_END, SCROLL_TO_END):
            if not page.has_container:
                return False
            self.scrolls.append("smooth" if expression == SMOOTH_SCROLL_TO_END else "instant")
            return True
        raise NotImplementedError(expression)

    async def on_request(self, handler: RequestHandler) -> None:
        self.request_handlers.append(handler)

    async def on_response(self, handler: ResponseHandler) -> None:
        self.response_handlers.append(handler)

    async def off_request(self, handler: RequestHandler) -> None:
        if handler in self.request_handlers:
            self.request_handlers.remove(handler)

    async def off_response(self, handler: ResponseHandler) -> None:
        if handler in self.response_handlers:
            self.response_handlers.remove(handler)

    async def emit_request(self, url: str, resource_type: str = "document") -> MockRequest:
        request = MockRequest(url, resource_type)
        for handler in self.request_handlers:
            await handler(request)
        return request

    async def emit_response(self, response: MockResponse) -> MockResponse:
        for handler in self.response_handlers:
            await handler(response)
        return response

    async def clear_cookies(self) -> None:
        self.cookies.clear()

    async def add_session_cookie(self, cookie: SessionCookie) -> None:
        self.cookies.append(cookie)

    async def close(self) -> None:
        self.closed = True

    def _go_to(self, index: int) -> None:
        self.current = index
        waiters, self._navigation_waiters = self._navigation_waiters, []
        for event in waiters:
            event.set()
