from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal, Optional
from urllib.parse import urlsplit

from pagewalker._core.models import CacheEntry, RequestDisposition, WalkOptions

if TYPE_CHECKING:
    from pagewalker._storages import ResponseCacheStore

logger = logging.getLogger("pagewalker.core.policy")

Classification = Literal["block", "pass_through"]


def host_of(url: str) -> str:
    """
    Return the lower-cased host name of ``url`` (no port, no credentials).

    Examples:
        >>> host_of("https://d17ivq9b7rppb3.cloudfront.net:443/a.png")
        'd17ivq9b7rppb3.cloudfront.net'
        >>> host_of("not a url")
        ''
    """
    return (urlsplit(url).hostname or "").lower()


def is_trusted_host(host: str, trusted_suffix: str) -> bool:
    if not trusted_suffix:
        return False
    return host.lower().endswith(trusted_suffix.lower())


def classify(resource_type: str, host: str, options: WalkOptions) -> Classification:
    """
    Decide whether an outgoing request is blocked.

    Decorative and third-party assets (images, stylesheets, fonts, scripts)
    are blocked to save bandwidth on every step. Assets served from the
    trusted CDN are required for the page to render and always pass.

    Examples:
        >>> options = WalkOptions()
        >>> classify("image", "ads.example.com", options)
        'block'
        >>> classify("image", "assets.cloudfront.net", options)
        'pass_through'
        >>> classify("document", "ads.example.com", options)
        'pass_through'
    """
    if resource_type.lower() in options.blocked_resource_types and not is_trusted_host(
        host, options.trusted_asset_host_suffix
    ):
        return "block"
    return "pass_through"


def dispose(
    resource_type: str,
    url: str,
    store: ResponseCacheStore,
    options: WalkOptions,
    now: float,
) -> tuple[RequestDisposition, Optional[CacheEntry]]:
    """
    Combine the blocking policy with a cache lookup.

    Returns the disposition and, for ``"respond_from_cache"``, the live entry
    the driver has to answer with. Nothing is mutated here.
    """
    if classify(resource_type, host_of(url), options) == "block":
        return "block", None

    entry = store.lookup(url, now)
    if entry is not None:
        return "respond_from_cache", entry

    return "pass_through", None
