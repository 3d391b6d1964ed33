"""Memoized, extension-filtered directory listings.

Listings are keyed by the normalized absolute directory path (plus the
extension set used to filter them). By default entries live for the lifetime
of the cache; callers that care about staleness can pass ``ttl_seconds`` or
call ``invalidate``.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ListingCacheEntry:
    """Cached filenames plus insertion timestamp."""

    filenames: tuple[str, ...]
    loaded_at: float


def normalize_directory(directory: str) -> str:
    """Return the cache key form of ``directory``."""
    return os.path.normcase(os.path.abspath(directory))


def has_extension(filename: str, extensions: Iterable[str]) -> bool:
    return os.path.splitext(filename)[1].lower() in extensions


def scan_filenames(directory: str, extensions: frozenset[str]) -> list[str] | None:
    """Enumerate files in ``directory`` with a recognized extension.

    Returns ``None`` when the directory cannot be enumerated.
    """
    filenames: list[str] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if not has_extension(entry.name, extensions):
                    continue
                try:
                    if not entry.is_file():
                        continue
                except OSError:
                    continue
                filenames.append(entry.name)
    except OSError as exc:
        logger.debug("cannot list %s: %s", directory, exc)
        return None
    filenames.sort(key=str.casefold)
    return filenames


class DirectoryListingCache:
    """Thread-safe cache of filtered directory listings.

    The dictionary is guarded by a lock, but enumeration itself runs outside
    it so one slow directory never stalls readers of other directories.
    Failed enumerations are not stored and get retried on the next request.
    A listing still in flight when ``invalidate`` runs is returned to its
    caller but not stored.
    """

    def __init__(self, ttl_seconds: float | None = None, max_entries: int | None = None) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._entries: OrderedDict[tuple[str, frozenset[str]], _ListingCacheEntry] = OrderedDict()
        self._generation = 0

    def list(self, directory: str, extensions: Iterable[str]) -> list[str]:
        """Return filenames in ``directory`` whose extension is in ``extensions``."""
        extension_set = frozenset(ext.lower() for ext in extensions)
        key = (normalize_directory(directory), extension_set)
        now = time.monotonic()

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                if self._ttl_seconds is None or now - cached.loaded_at <= self._ttl_seconds:
                    self._entries.move_to_end(key)
                    return list(cached.filenames)
                del self._entries[key]
            generation = self._generation

        logger.debug("listing cache miss for %s", directory)
        filenames = scan_filenames(directory, extension_set)
        if filenames is None:
            return []

        with self._lock:
            if generation != self._generation:
                return filenames
            self._entries[key] = _ListingCacheEntry(filenames=tuple(filenames), loaded_at=now)
            self._entries.move_to_end(key)
            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    self._entries.popitem(last=False)
        return filenames

    def invalidate(self, directory: str | None = None) -> None:
        """Drop the cached listing for ``directory``, or everything when ``None``."""
        with self._lock:
            self._generation += 1
            if directory is None:
                self._entries.clear()
                return
            normalized = normalize_directory(directory)
            for key in [key for key in self._entries if key[0] == normalized]:
                del self._entries[key]

    def __contains__(self, directory: object) -> bool:
        if not isinstance(directory, str):
            return False
        normalized = normalize_directory(directory)
        with self._lock:
            return any(key[0] == normalized for key in self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = [
    "DirectoryListingCache",
    "has_extension",
    "normalize_directory",
    "scan_filenames",
]
