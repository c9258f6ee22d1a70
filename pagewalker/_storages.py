from __future__ import annotations

import logging
import time
from threading import Lock
from typing import Dict, Iterator, Mapping, Optional, Union

from pagewalker._core._headers import Headers, parse_cache_control
from pagewalker._core.models import CacheEntry

__all__ = ("ResponseCacheStore", "now_ms")

logger = logging.getLogger("pagewalker.storage")


def now_ms() -> float:
    return time.time() * 1000


class ResponseCacheStore:
    """
    In-memory store of expirable responses, keyed by exact URL.

    Entries are written from observed responses that carry a positive
    ``max-age`` and are only ever replaced once they have expired. Expiry is
    checked lazily on read; nothing is evicted. A single run touches a small,
    bounded set of asset URLs, so the store is allowed to grow.

    A store is meant to live for one traversal run and be shared by the
    request handler (reads) and the response observer (writes).
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def lookup(self, url: str, now: Optional[float] = None) -> Optional[CacheEntry]:
        """Return the live entry for ``url`` or ``None``. Expired entries are never served."""
        now = now_ms() if now is None else now
        entry = self._entries.get(url)
        if entry is None or not entry.is_live(now):
            return None
        return entry

    def has_live_entry(self, url: str, now: Optional[float] = None) -> bool:
        return self.lookup(url, now) is not None

    def observe(
        self,
        url: str,
        status: int,
        headers: Union[Headers, Mapping[str, str]],
        body: bytes,
        now: Optional[float] = None,
    ) -> bool:
        """
        Store an observed response if it is cacheable.

        Returns True when an entry was written. Responses without ``max-age``
        (or with ``max-age=0``) are ignored, and a live entry for the same URL
        is left untouched.
        """
        now = now_ms() if now is None else now
        headers = headers if isinstance(headers, Headers) else Headers(headers)

        max_age = parse_cache_control(headers.get("cache-control")).max_age
        if not max_age:
            return False

        with self._lock:
            existing = self._entries.get(url)
            if existing is not None and existing.is_live(now):
                logger.debug(f"Live entry already cached for {url}, leaving it untouched")
                return False

            self._entries[url] = CacheEntry(
                url=url,
                status=status,
                headers=headers,
                body=body,
                expires_at=now + max_age * 1000,
            )

        logger.debug(f"Cached {url} for {max_age} seconds")
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
