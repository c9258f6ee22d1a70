from pagewalker._core import (
    AnyGuardResult as AnyGuardResult,
    AnyState as AnyState,
    CacheEntry as CacheEntry,
    Continue as Continue,
    Headers as Headers,
    IsExam as IsExam,
    IsSubmission as IsSubmission,
    NextDisabled as NextDisabled,
    NoNextControl as NoNextControl,
    NotAuthenticated as NotAuthenticated,
    PageState as PageState,
    RequestDisposition as RequestDisposition,
    Selectors as Selectors,
    SessionReport as SessionReport,
    StepRecord as StepRecord,
    StopReason as StopReason,
    TraversalSession as TraversalSession,
    WalkOptions as WalkOptions,
    classify as classify,
    evaluate as evaluate,
)
from pagewalker._async_walker import AsyncWalker as AsyncWalker, run as run
from pagewalker._config import (
    Config as Config,
    get_default_config as get_default_config,
    load_config as load_config,
    validate_start_url as validate_start_url,
)
from pagewalker._driver import (
    AsyncBaseDriver as AsyncBaseDriver,
    InterceptedRequest as InterceptedRequest,
    ObservedResponse as ObservedResponse,
    SessionCookie as SessionCookie,
)
from pagewalker._exceptions import (
    BodyUnavailable as BodyUnavailable,
    ConfigurationError as ConfigurationError,
    MissingElementError as MissingElementError,
    NavigationError as NavigationError,
    PagewalkerError as PagewalkerError,
)
from pagewalker._interception import (
    Interceptor as Interceptor,
    handle_request as handle_request,
    observe_response as observe_response,
)
from pagewalker._playwright import PlaywrightDriver as PlaywrightDriver
from pagewalker._storages import ResponseCacheStore as ResponseCacheStore

__all__ = (
    # Walker
    "AsyncWalker",
    "run",
    ## Guards
    "AnyGuardResult",
    "NotAuthenticated",
    "NoNextControl",
    "NextDisabled",
    "IsExam",
    "IsSubmission",
    "Continue",
    "evaluate",
    ## States
    "AnyState",
    # Network
    "classify",
    "handle_request",
    "observe_response",
    "Interceptor",
    "ResponseCacheStore",
    "Headers",
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
    # Drivers
    "AsyncBaseDriver",
    "InterceptedRequest",
    "ObservedResponse",
    "SessionCookie",
    "PlaywrightDriver",
    # Config
    "Config",
    "get_default_config",
    "load_config",
    "validate_start_url",
    # Errors
    "PagewalkerError",
    "ConfigurationError",
    "NavigationError",
    "MissingElementError",
    "BodyUnavailable",
)
