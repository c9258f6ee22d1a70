from __future__ import annotations

import logging
from typing import Optional

import anyio
from anyio.abc import TaskStatus
from typing_extensions import assert_never

from pagewalker._config import validate_start_url
from pagewalker._core._spec import Advancing, AnyState, Idle, Stepping, Stopped
from pagewalker._core.models import PageState, SessionReport, StepRecord, TraversalSession, WalkOptions
from pagewalker._driver import AsyncBaseDriver
from pagewalker._exceptions import ConfigurationError, MissingElementError, NavigationError
from pagewalker._interception import Interceptor
from pagewalker._scripts import READ_FLAG, SCROLL_TO_END, SMOOTH_SCROLL_TO_END
from pagewalker._storages import ResponseCacheStore

__all__ = ("AsyncWalker", "run")

logger = logging.getLogger("pagewalker.walker")

_STEP_FAILURES = (NavigationError, TimeoutError)


class AsyncWalker:
    """
    Walks a linear sequence of units by repeatedly clicking the next control.

    Each step checks the guards, reads the unit labels, scrolls the content
    container, clicks next and waits for the following unit to render. The
    walk ends on the first guard that matches, when the step limit is reached,
    or on the first I/O failure; nothing is retried.

    Args:
        driver: The browser page to drive.
        options: Walk options. Defaults to ``WalkOptions()``.
        store: Response cache shared by the interception handlers. A fresh store
            is created for every run when omitted.
    """

    def __init__(
        self,
        driver: AsyncBaseDriver,
        options: WalkOptions | None = None,
        store: ResponseCacheStore | None = None,
    ) -> None:
        self.driver = driver
        self.options = options if options is not None else WalkOptions()
        self.store = store

    async def run(self, start_url: str) -> SessionReport:
        """
        Walk from ``start_url`` until a stop condition is met.

        Raises:
            ConfigurationError: If the start URL or the options are invalid.
                Nothing is navigated in that case.
        """
        start_url = validate_start_url(start_url)
        if self.options.step_limit is not None and self.options.step_limit < 0:
            raise ConfigurationError(f"Step limit must not be negative, got {self.options.step_limit}")

        store = self.store if self.store is not None else ResponseCacheStore()
        interceptor = Interceptor(store, self.options)
        await interceptor.install(self.driver)
        try:
            return await self._walk(start_url)
        finally:
            # Handlers are bound to this run's store and must not outlive it
            with anyio.CancelScope(shield=True):
                await interceptor.uninstall(self.driver)

    async def _walk(self, start_url: str) -> SessionReport:
        session = TraversalSession(last_visited_location=start_url, step_limit=self.options.step_limit)
        state: AnyState = Idle(session=session, options=self.options)

        try:
            with anyio.fail_after(self.options.timeout):
                await self.driver.navigate(start_url)
        except _STEP_FAILURES as exc:
            return self._finish(state.fail(exc))

        while state:
            logger.debug(f"Handling state: {state.__class__.__name__}")
            if isinstance(state, Idle):
                state = state.next()
            elif isinstance(state, Stepping):
                state = await self._handle_stepping(state)
            elif isinstance(state, Advancing):
                state = await self._handle_advancing(state)
            elif isinstance(state, Stopped):
                return self._finish(state)
            else:
                assert_never(state)

        raise RuntimeError("Unreachable")

    async def read_page_state(self) -> PageState:
        selectors = self.options.selectors

        authenticated = await self.driver.evaluate(READ_FLAG, selectors.auth_flag)
        next_control = await self.driver.query_element(selectors.next_control)
        next_disabled = False
        if next_control is not None:
            next_disabled = await self.driver.has_class(selectors.next_control, selectors.disabled_class)
        is_exam = await self.driver.evaluate(READ_FLAG, selectors.exam_flag)
        submission_modal = await self.driver.query_element(selectors.submission_modal)

        return PageState(
            authenticated=None if authenticated is None else bool(authenticated),
            has_next_control=next_control is not None,
            next_disabled=next_disabled,
            is_exam=bool(is_exam),
            has_submission_modal=submission_modal is not None,
        )

    async def scroll_to_end(self) -> None:
        """
        Scroll the content container to its end the way a reader would.

        Purely cosmetic: the result of the walk does not depend on it.
        """
        container = self.options.selectors.container
        if self.options.smooth_scroll:
            scrolled = await self.driver.evaluate(
                SMOOTH_SCROLL_TO_END, [container, self.options.scroll_duration_ms]
            )
        else:
            scrolled = await self.driver.evaluate(SCROLL_TO_END, [container])

        if not scrolled:
            raise MissingElementError(container)

    async def _handle_stepping(self, state: Stepping) -> AnyState:
        try:
            page_state = await self.read_page_state()
        except _STEP_FAILURES as exc:
            return state.fail(exc)

        if page_state.has_next_control:
            logger.debug("Found next link")
        return state.next(page_state)

    async def _handle_advancing(self, state: Advancing) -> AnyState:
        selectors = self.options.selectors
        try:
            course_title = await self._read_label(selectors.course_title)
            unit_title = await self._read_label(selectors.unit_title)

            with anyio.fail_after(self.options.timeout):
                await self.scroll_to_end()

            with anyio.fail_after(self.options.timeout):
                await self._click_next_and_wait()
        except _STEP_FAILURES as exc:
            return state.fail(exc)

        record = StepRecord(
            index=state.step_index,
            location=self.driver.current_url(),
            unit_title=unit_title,
            course_title=course_title,
        )
        logger.info(f"DONE {record.unit_title} | {record.course_title}")
        return state.next(record)

    async def _read_label(self, selector: str) -> str:
        text = await self.driver.query_text(selector)
        if text is None:
            raise MissingElementError(selector)
        return text.strip()

    async def _click_next_and_wait(self) -> None:
        try:
            async with anyio.create_task_group() as tg:
                await tg.start(self._wait_for_next_unit)
                tg.start_soon(self.driver.click, self.options.selectors.next_control)
        except BaseExceptionGroup as group:
            failures, others = group.split(_STEP_FAILURES)
            if others is not None or failures is None:
                raise
            raise NavigationError(f"Advancing to the next unit failed: {failures.exceptions[0]}") from group

    async def _wait_for_next_unit(
        self,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        await self.driver.wait_for_navigation(task_status=task_status)
        await self.driver.wait_for_selectors(self.options.selectors.rendered)

    def _finish(self, state: Stopped) -> SessionReport:
        report = state.report()
        if report.failed:
            logger.error(f"Walk failed after {report.step_count} step(s): {report.error}")
        else:
            logger.info(f"Walk stopped ({report.stop_reason}) after {report.step_count} step(s)")
        return report


async def run(
    driver: AsyncBaseDriver,
    start_url: str,
    options: Optional[WalkOptions] = None,
    store: Optional[ResponseCacheStore] = None,
) -> SessionReport:
    """Walk from ``start_url`` with ``driver``. See ``AsyncWalker`` for details."""
    return await AsyncWalker(driver, options, store).run(start_url)
