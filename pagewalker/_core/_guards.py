from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from pagewalker._core.models import PageState, StopReason


@dataclass(frozen=True)
class GuardResult:
    terminal: ClassVar[bool] = True
    reason: ClassVar[Optional[StopReason]] = None
    message: ClassVar[str] = ""


@dataclass(frozen=True)
class NotAuthenticated(GuardResult):
    reason: ClassVar[Optional[StopReason]] = "not_authenticated"
    message: ClassVar[str] = "Not authenticated!"


@dataclass(frozen=True)
class NoNextControl(GuardResult):
    reason: ClassVar[Optional[StopReason]] = "no_next_control"
    message: ClassVar[str] = "No more next link available"


@dataclass(frozen=True)
class NextDisabled(GuardResult):
    reason: ClassVar[Optional[StopReason]] = "next_disabled"
    message: ClassVar[str] = "Next link is disabled!"


@dataclass(frozen=True)
class IsExam(GuardResult):
    reason: ClassVar[Optional[StopReason]] = "is_exam"
    message: ClassVar[str] = "This is an exam unit, it has to be done manually!"


@dataclass(frozen=True)
class IsSubmission(GuardResult):
    reason: ClassVar[Optional[StopReason]] = "is_submission"
    message: ClassVar[str] = "This is a submission unit, it has to be done manually!"


@dataclass(frozen=True)
class Continue(GuardResult):
    terminal: ClassVar[bool] = False


AnyGuardResult = Union[NotAuthenticated, NoNextControl, NextDisabled, IsExam, IsSubmission, Continue]


def evaluate(page_state: PageState) -> AnyGuardResult:
    """
    Decide whether the walker may advance from the current page.

    Checks run in a fixed order and the first match wins:

    1. Authentication. Nothing else means anything on a signed-out page, so a
       missing or false auth flag always stops the run.
    2. Presence of the next control.
    3. The next control being disabled.
    4. Exam units.
    5. Submission units (the page exposes a self-review modal).

    Structural checks come before the content checks because they are
    cheaper and certain. Exam and submission units need a human and are
    never advanced automatically.

    Examples:
        >>> evaluate(PageState(authenticated=False, has_next_control=True, is_exam=True))
        NotAuthenticated()
        >>> evaluate(PageState(authenticated=True, has_next_control=True))
        Continue()
    """
    if not page_state.authenticated:
        return NotAuthenticated()

    if not page_state.has_next_control:
        return NoNextControl()

    if page_state.next_disabled:
        return NextDisabled()

    if page_state.is_exam:
        return IsExam()

    if page_state.has_submission_modal:
        return IsSubmission()

    return Continue()
