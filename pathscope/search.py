"""Prefix search over the current ordered search path."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence

from .entry import PathEntry, PathMatch
from .listing_cache import has_extension


class PrefixSearchIndex:
    """Find files that a typed prefix would resolve to through the path.

    The path is read through ``path_provider`` on every call so searches see
    the latest ``check`` immediately. Only the first directory offering a
    given filename contributes it, mirroring executable resolution order.
    """

    def __init__(self, path_provider: Callable[[], Sequence[PathEntry]], extensions: Iterable[str]) -> None:
        self._path_provider = path_provider
        self._extensions = frozenset(ext.lower() for ext in extensions)

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    def search(self, prefix: str) -> list[PathMatch]:
        if not prefix:
            return []

        matches: list[PathMatch] = []
        seen: set[str] = set()
        for entry in self._path_provider():
            found = [
                match
                for match in entry.find(prefix)
                if has_extension(match.filename, self._extensions)
                and os.path.normcase(match.filename) not in seen
            ]
            matches.extend(found)
            seen.update(os.path.normcase(match.filename) for match in found)
        return matches


__all__ = ["PrefixSearchIndex"]
