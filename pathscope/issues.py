"""Thread-safe issue annotations attached to search-path entries."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .entry import PathEntry

logger = logging.getLogger(__name__)

ALERT_OK = 0
ALERT_ISSUES = 1
ALERT_MISSING = 2

ISSUES_PROPERTY = "issues"
ALERT_LEVEL_PROPERTY = "alert_level"

IssueObserver = Callable[["IssueSet", str], None]


class IssueSet:
    """Ordered, mutable bag of problem strings for one ``PathEntry``.

    The scan thread appends while display code reads snapshots. Observers are
    told about ``"issues"`` and ``"alert_level"`` after every mutation and are
    invoked outside the internal lock.
    """

    def __init__(self, entry: PathEntry) -> None:
        self._entry = entry
        self._lock = threading.Lock()
        self._issues: list[str] = []
        self._observers: list[IssueObserver] = []

    @property
    def entry(self) -> PathEntry:
        return self._entry

    @property
    def symbolic(self) -> str:
        return self._entry.symbolic

    def exists(self) -> bool:
        return self._entry.exists()

    @property
    def issues(self) -> tuple[str, ...]:
        """Point-in-time copy of the issue list."""
        with self._lock:
            return tuple(self._issues)

    @property
    def alert_level(self) -> int:
        """``2`` when the directory is missing, ``1`` with issues, else ``0``."""
        if not self._entry.exists():
            return ALERT_MISSING
        with self._lock:
            has_issues = bool(self._issues)
        return ALERT_ISSUES if has_issues else ALERT_OK

    def add_issue(self, text: str) -> None:
        with self._lock:
            self._issues.append(text)
        self._notify()

    def clear_issues(self) -> None:
        with self._lock:
            self._issues.clear()
        self._notify()

    def subscribe(self, observer: IssueObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that removes it."""
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._observers.remove(observer)
                except ValueError:
                    pass

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            for property_name in (ISSUES_PROPERTY, ALERT_LEVEL_PROPERTY):
                try:
                    observer(self, property_name)
                except Exception:
                    logger.warning("issue observer failed for %s", self._entry.resolved, exc_info=True)

    def __repr__(self) -> str:
        return f"IssueSet({self._entry.symbolic!r}, issues={list(self.issues)!r})"

    def __str__(self) -> str:
        return str(self._entry)


__all__ = [
    "ALERT_ISSUES",
    "ALERT_LEVEL_PROPERTY",
    "ALERT_MISSING",
    "ALERT_OK",
    "ISSUES_PROPERTY",
    "IssueObserver",
    "IssueSet",
]
