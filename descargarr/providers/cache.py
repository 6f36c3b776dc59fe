# -*- coding: utf-8 -*-
# Descargarr

"""
In-memory state shared between queries.

  - QueryCache: every release of a series, keyed by the normalized series
    name, evicted by age. Entries are deep-copied on the way in and out so
    callers can never corrupt what is cached.
  - FeedCursor: the top-of-feed release seen by the last feed poll.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from descargarr.providers.log import debug, log_event
from descargarr.providers.release import Release

DEFAULT_TTL = 55 * 60


def normalize_key(name: str) -> str:
    return (name or "").strip().lower()


class QueryCache:
    """Thread-safe, age-bounded cache of release lists."""

    def __init__(self, ttl: int = DEFAULT_TTL):
        self.ttl = ttl
        self._entries: "OrderedDict[str, Dict]" = OrderedDict()
        # re-entrant: get_or_populate holds it while populate runs
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def clean(self, now: Optional[float] = None) -> int:
        """Evict entries older than the TTL. Returns how many were dropped."""
        now = time.time() if now is None else now
        with self._lock:
            expired = [key for key, entry in self._entries.items()
                       if now - entry["timestamp"] > self.ttl]
            for key in expired:
                del self._entries[key]
        if expired:
            debug(f"Evicted {len(expired)} expired cache entries", source="cache")
        return len(expired)

    def get(self, name: str) -> Optional[List[Release]]:
        key = normalize_key(name)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            return [release.copy() for release in entry["releases"]]

    def put(self, name: str, releases: List[Release]) -> None:
        key = normalize_key(name)
        with self._lock:
            self._entries[key] = {
                "releases": [release.copy() for release in releases],
                "timestamp": time.time(),
            }

    def get_or_populate(self, name: str, populate: Callable[[], List[Release]]) -> List[Release]:
        """Return the cached releases for ``name`` or build them with ``populate``.

        The whole check-then-populate sequence runs inside the cache lock, so two
        concurrent queries for the same series never walk the catalog twice.
        """
        with self._lock:
            cached = self.get(name)
            if cached is not None:
                log_event("cache_hit", source="cache", series=normalize_key(name), releases=len(cached))
                return cached

            releases = populate()
            self.put(name, releases)
            return [release.copy() for release in releases]

    def invalidate(self, name: Optional[str] = None) -> None:
        with self._lock:
            if name is None:
                self._entries.clear()
            else:
                self._entries.pop(normalize_key(name), None)

    def __contains__(self, name) -> bool:
        with self._lock:
            return normalize_key(name) in self._entries

    def stats(self) -> Dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 2) if total else 0,
                "ttl": self.ttl,
            }


class FeedCursor:
    """Remembers the first release of the last successful feed poll."""

    def __init__(self):
        self._lock = threading.Lock()
        self._release: Optional[Release] = None

    @property
    def current(self) -> Optional[Release]:
        with self._lock:
            return self._release.copy() if self._release else None

    def position_in(self, releases: List[Release]) -> Optional[int]:
        """Index of the remembered release within ``releases``, if present."""
        with self._lock:
            if self._release is None:
                return None
            identity = self._release.identity()
        for index, release in enumerate(releases):
            if release.identity() == identity:
                return index
        return None

    def update(self, release: Release) -> None:
        with self._lock:
            self._release = release.copy()

    def clear(self) -> None:
        with self._lock:
            self._release = None
