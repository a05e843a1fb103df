"""Memoization of per-token BPE results."""

import logging
import threading
from collections.abc import Callable

log = logging.getLogger(__name__)


class EncodeCache:
    """
    Unbounded byte-mapped token -> merged string cache.

    Entries are written once and never evicted; the cache lives as long as
    the encoder that owns it. Entry reads take no lock. Writes go through
    ``dict.setdefault`` under a lock so that concurrent writers for the same
    key all return the first stored value. The ``hits`` and ``misses``
    counters are updated under the same lock and stay exact when threads
    share the cache.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def lookup_or_compute(self, token: str, compute: Callable[[str], str]) -> str:
        """
        Return the cached merge for ``token``, computing and storing it on a miss.

        ``compute`` runs outside the lock.

        :param token: Byte-mapped token string (the cache key).
        :param compute: Merge function called with ``token`` on a miss.
        :return: Merged string for ``token``.
        """
        cached = self._entries.get(token)
        if cached is not None:
            with self._lock:
                self.hits += 1
            return cached

        merged = compute(token)
        with self._lock:
            self.misses += 1
            stored = self._entries.setdefault(token, merged)
        log.debug(f"cache miss for {token!r} ({len(self._entries)} entries)")
        return stored

    def get(self, token: str) -> str | None:
        """Return the cached merge for ``token`` without computing it."""
        return self._entries.get(token)

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)
