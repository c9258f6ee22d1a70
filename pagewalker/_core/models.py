from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

from pagewalker._core._headers import Headers

StopReason = Literal[
    "not_authenticated",
    "no_next_control",
    "next_disabled",
    "is_exam",
    "is_submission",
    "step_limit_reached",
    "failure",
]

RequestDisposition = Literal["block", "respond_from_cache", "pass_through"]

GUARD_STOP_REASONS: Tuple[StopReason, ...] = (
    "not_authenticated",
    "no_next_control",
    "next_disabled",
    "is_exam",
    "is_submission",
)


@dataclass
class CacheEntry:
    url: str
    status: int
    headers: Headers
    body: bytes
    expires_at: float
    """Absolute expiry time, in milliseconds since the epoch."""

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class PageState:
    """
    Snapshot of everything the guards look at, read once per step.

    ``authenticated`` is ``None`` when the page does not expose the flag at all.
    """

    authenticated: Optional[bool]
    has_next_control: bool
    next_disabled: bool = False
    is_exam: bool = False
    has_submission_modal: bool = False


@dataclass(frozen=True)
class StepRecord:
    index: int
    location: str
    unit_title: str
    course_title: str


@dataclass
class TraversalSession:
    last_visited_location: str
    step_limit: Optional[int] = None
    step_count: int = 0
    stop_reason: Optional[StopReason] = None
    steps: list[StepRecord] = field(default_factory=list)
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class SessionReport:
    last_visited_location: str
    step_count: int
    stop_reason: StopReason
    steps: Tuple[StepRecord, ...] = ()
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.stop_reason == "failure"

    @property
    def stopped_by_guard(self) -> bool:
        return self.stop_reason in GUARD_STOP_REASONS


@dataclass(frozen=True)
class Selectors:
    container: str = "div.classroom-container"
    next_control: str = ".classroom-bottom-nav__next"
    course_title: str = ".classroom-top-nav__title > p"
    unit_title: str = ".classroom-bottom-nav__title"
    submission_modal: str = "#modal-self-review"
    disabled_class: str = "disabled"
    auth_flag: str = "window._authed"
    exam_flag: str = "window.isExam"

    @property
    def rendered(self) -> Tuple[str, ...]:
        """
        Selectors present on every rendered unit page.

        The next control is left out: the last unit of a course has none, and
        its absence is reported by the guards, not by the wait.
        """
        return (self.container, self.course_title, self.unit_title)


@dataclass
class WalkOptions:
    """
    Options of a single traversal run.

    Attributes:
    ----------
    step_limit : int | None
        Stop after this many successful advancements. ``None`` means no cap,
        ``0`` stops before the first step.
    trusted_asset_host_suffix : str
        Hosts ending with this suffix are exempt from asset blocking. The
        classroom's own assets live on this CDN and the page breaks without them.
    blocked_resource_types : frozenset[str]
        Browser resource types that are aborted for untrusted hosts.
    smooth_scroll : bool
        Animate the content container to its end before clicking next. When
        False the container jumps to the end in one go.
    scroll_duration_ms : int
        Length of the scroll animation.
    timeout : float
        Upper bound, in seconds, of every wait performed during a step.
    """

    step_limit: Optional[int] = None
    trusted_asset_host_suffix: str = "cloudfront.net"
    blocked_resource_types: frozenset[str] = frozenset({"image", "stylesheet", "font", "script"})
    selectors: Selectors = field(default_factory=Selectors)
    smooth_scroll: bool = True
    scroll_duration_ms: int = 2000
    timeout: float = 30.0
