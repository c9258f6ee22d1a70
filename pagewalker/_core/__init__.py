from pagewalker._core._guards import (
    AnyGuardResult as AnyGuardResult,
    Continue as Continue,
    GuardResult as GuardResult,
    IsExam as IsExam,
    IsSubmission as IsSubmission,
    NextDisabled as NextDisabled,
    NoNextControl as NoNextControl,
    NotAuthenticated as NotAuthenticated,
    evaluate as evaluate,
)
from pagewalker._core._headers import Headers as Headers, parse_cache_control as parse_cache_control
from pagewalker._core._policy import classify as classify, dispose as dispose
from pagewalker._core._spec import (
    Advancing as Advancing,
    AnyState as AnyState,
    Idle as Idle,
    State as State,
    Stepping as Stepping,
    Stopped as Stopped,
)
from pagewalker._core.models import (
    CacheEntry as CacheEntry,
    PageState as PageState,
    RequestDisposition as RequestDisposition,
    Selectors as Selectors,
    SessionReport as SessionReport,
    StepRecord as StepRecord,
    StopReason as StopReason,
    TraversalSession as TraversalSession,
    WalkOptions as WalkOptions,
)

__all__ = (
    # States
    "AnyState",
    "State",
    "Idle",
    "Stepping",
    "Advancing",
    "Stopped",
    # Guards
    "AnyGuardResult",
    "GuardResult",
    "NotAuthenticated",
    "NoNextControl",
    "NextDisabled",
    "IsExam",
    "IsSubmission",
    "Continue",
    "evaluate",
    # Policy
    "classify",
    "dispose",
    # Headers
    "Headers",
    "parse_cache_control",
    # Models
    "CacheEntry",
    "PageState",
    "RequestDisposition",
    "Selectors",
    "SessionReport",
    "StepRecord",
    "StopReason",
    "TraversalSession",
    "WalkOptions",
)
