from __future__ import annotations

import abc
import typing as tp
from dataclasses import dataclass

import anyio
from anyio.abc import TaskStatus

from pagewalker._core._headers import Headers
from pagewalker._core.models import CacheEntry

__all__ = (
    "AsyncBaseDriver",
    "ElementHandle",
    "InterceptedRequest",
    "ObservedResponse",
    "RequestHandler",
    "ResponseHandler",
    "SessionCookie",
)


class ElementHandle(tp.Protocol):
    async def evaluate(self, expression: str, arg: tp.Any = None) -> tp.Any: ...


class InterceptedRequest(abc.ABC):
    """An outgoing request paused by the driver until one of the three resolutions is called."""

    url: str
    resource_type: str

    @abc.abstractmethod
    async def abort(self) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def respond(self, entry: CacheEntry) -> None:
        """Answer the request with a stored response instead of hitting the network."""
        raise NotImplementedError()

    @abc.abstractmethod
    async def continue_(self) -> None:
        raise NotImplementedError()


class ObservedResponse(abc.ABC):
    url: str
    status: int
    headers: Headers

    @abc.abstractmethod
    async def body(self) -> bytes:
        """
        Read the full response body.

        Raises:
            BodyUnavailable: If the body can no longer be read, for example
                because the transfer was aborted.
        """
        raise NotImplementedError()


RequestHandler = tp.Callable[[InterceptedRequest], tp.Awaitable[None]]
ResponseHandler = tp.Callable[[ObservedResponse], tp.Awaitable[None]]


@dataclass(frozen=True)
class SessionCookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    http_only: bool = True
    same_site: tp.Literal["Strict", "Lax", "None"] = "Lax"


class AsyncBaseDriver(abc.ABC):
    """
    Everything the walker needs from a browser page.

    Implementations drive exactly one page. Element waits and navigation waits
    are expected to honour the driver's own timeout; the walker adds an outer
    bound on top.
    """

    @abc.abstractmethod
    async def navigate(self, url: str) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    def current_url(self) -> str:
        raise NotImplementedError()

    @abc.abstractmethod
    async def query_element(self, selector: str) -> tp.Optional[ElementHandle]:
        raise NotImplementedError()

    @abc.abstractmethod
    async def query_text(self, selector: str) -> tp.Optional[str]:
        """Return the text content of the first match, or None if nothing matches."""
        raise NotImplementedError()

    @abc.abstractmethod
    async def has_class(self, selector: str, class_name: str) -> bool:
        """Return True if the first element matching ``selector`` carries ``class_name``."""
        raise NotImplementedError()

    @abc.abstractmethod
    async def click(self, selector: str) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def wait_for_selectors(self, selectors: tp.Sequence[str]) -> None:
        """Resolve once every selector matches an element on the page."""
        raise NotImplementedError()

    @abc.abstractmethod
    async def wait_for_navigation(
        self,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """
        Wait for the next main-frame navigation to finish parsing the document.

        Must call ``task_status.started()`` as soon as the waiter is armed so
        that a click issued afterwards cannot be missed.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def evaluate(self, expression: str, arg: tp.Any = None) -> tp.Any:
        raise NotImplementedError()

    @abc.abstractmethod
    async def on_request(self, handler: RequestHandler) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def on_response(self, handler: ResponseHandler) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def off_request(self, handler: RequestHandler) -> None:
        """Unregister a handler added with ``on_request``. Unknown handlers are ignored."""
        raise NotImplementedError()

    @abc.abstractmethod
    async def off_response(self, handler: ResponseHandler) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def clear_cookies(self) -> None:
        raise NotImplementedError()

    @abc.abstractmethod
    async def add_session_cookie(self, cookie: SessionCookie) -> None:
        raise NotImplementedError()

    async def bootstrap_session(self, cookie: SessionCookie) -> None:
        """Replace whatever cookies the browser holds with the single session cookie."""
        await self.clear_cookies()
        await self.add_session_cookie(cookie)

    @abc.abstractmethod
    async def close(self) -> None:
        raise NotImplementedError()
