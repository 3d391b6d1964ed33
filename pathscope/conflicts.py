"""Background shadow detection over the current ordered search path."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from queue import Empty, Queue

from .entry import PathEntry, PathMatch
from .issues import IssueSet
from .listing_cache import DirectoryListingCache
from .search import PrefixSearchIndex

logger = logging.getLogger(__name__)

MISSING_DIRECTORY_ISSUE = "Does not exist"
ALWAYS_CHECKED_EXTENSIONS = (".dll",)


class EngineDisposedError(RuntimeError):
    """Raised when a disposed ``ConflictEngine`` is used."""


@dataclass(frozen=True)
class ConflictScanRequest:
    """One accepted ``check`` call."""

    request_id: int
    entries: tuple[IssueSet, ...]
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


@dataclass(frozen=True)
class ConflictScanResult:
    """Outcome of a scan the worker started.

    ``completed`` is ``False`` when a newer request cancelled it midway.
    """

    request: ConflictScanRequest
    completed: bool


def shadow_issue(filename: str, provider: PathEntry) -> str:
    return f"{filename} shadowed by {os.path.join(provider.resolved, filename)}"


class ConflictEngine:
    """Single-worker, latest-request-wins shadow checker.

    ``check`` swaps the current path in synchronously, cancels the scan in
    progress and leaves exactly one pending request for the worker, so bursts
    of edits only pay for the newest path. ``search`` reads the same current
    path without waiting for any scan.
    """

    def __init__(
        self,
        executable_extensions: Iterable[str],
        *,
        listing_cache: DirectoryListingCache | None = None,
        record_results: bool = False,
        thread_name: str = "pathscope-conflict-check",
    ) -> None:
        extensions = [ext.lower() for ext in executable_extensions]
        extensions.extend(ALWAYS_CHECKED_EXTENSIONS)
        self._extensions = frozenset(extensions)
        self._listing_cache = DirectoryListingCache() if listing_cache is None else listing_cache
        self._condition = threading.Condition()
        self._current_path: tuple[IssueSet, ...] = ()
        self._pending: ConflictScanRequest | None = None
        self._active: ConflictScanRequest | None = None
        self._disposed = False
        self._next_request_id = 1
        self._record_results = record_results
        self._results: Queue[ConflictScanResult] = Queue()
        self._index = PrefixSearchIndex(self._current_entries, self._extensions)
        self._worker = threading.Thread(target=self._worker_loop, name=thread_name, daemon=True)
        self._worker.start()

    @property
    def extensions(self) -> frozenset[str]:
        return self._extensions

    @property
    def listing_cache(self) -> DirectoryListingCache:
        return self._listing_cache

    @property
    def current_path(self) -> tuple[IssueSet, ...]:
        with self._condition:
            return self._current_path

    @property
    def disposed(self) -> bool:
        with self._condition:
            return self._disposed

    def _current_entries(self) -> list[PathEntry]:
        return [annotated.entry for annotated in self.current_path]

    def check(self, entries: Sequence[IssueSet | PathEntry]) -> tuple[IssueSet, ...]:
        """Make ``entries`` the current path and schedule a scan of it.

        Plain ``PathEntry`` items are wrapped in fresh ``IssueSet`` objects.
        Returns the annotated entries the scan will write to.
        """
        annotated = tuple(item if isinstance(item, IssueSet) else IssueSet(item) for item in entries)
        with self._condition:
            if self._disposed:
                raise EngineDisposedError("check() called on a disposed ConflictEngine")
            request = ConflictScanRequest(request_id=self._next_request_id, entries=annotated)
            self._next_request_id += 1
            self._current_path = annotated
            if self._active is not None:
                self._active.cancel_event.set()
            if self._pending is not None:
                self._pending.cancel_event.set()
                logger.debug("conflict scan %d superseded before starting", self._pending.request_id)
            self._pending = request
            self._condition.notify_all()
        return annotated

    def search(self, prefix: str) -> list[PathMatch]:
        """Files reachable through the current path whose name starts with ``prefix``."""
        if self.disposed:
            raise EngineDisposedError("search() called on a disposed ConflictEngine")
        return self._index.search(prefix)

    def invalidate_cache(self, directory: str | None = None) -> None:
        self._listing_cache.invalidate(directory)

    def drain_results(self) -> list[ConflictScanResult]:
        """Drain results of scans that finished or were cancelled.

        Results are only kept when the engine was built with
        ``record_results=True``; otherwise this always returns an empty list.
        """
        out: list[ConflictScanResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until no scan is running or pending; ``False`` on timeout."""
        with self._condition:
            return self._condition.wait_for(
                lambda: self._disposed or (self._pending is None and self._active is None),
                timeout,
            )

    def dispose(self) -> None:
        """Cancel outstanding work and join the worker thread."""
        with self._condition:
            if not self._disposed:
                self._disposed = True
                for request in (self._active, self._pending):
                    if request is not None:
                        request.cancel_event.set()
                self._pending = None
                self._condition.notify_all()
        if threading.current_thread() is not self._worker:
            self._worker.join()

    def __enter__(self) -> ConflictEngine:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.dispose()

    def _worker_loop(self) -> None:
        while True:
            with self._condition:
                while self._pending is None and not self._disposed:
                    self._condition.wait()
                if self._disposed:
                    return
                request = self._pending
                self._pending = None
                self._active = request

            try:
                completed = self._scan(request)
            except Exception:
                logger.exception("conflict scan %d failed", request.request_id)
                completed = False
            if self._record_results:
                self._results.put(ConflictScanResult(request=request, completed=completed))

            with self._condition:
                self._active = None
                self._condition.notify_all()

    def _scan(self, request: ConflictScanRequest) -> bool:
        """Annotate every entry of ``request``; ``False`` if cancelled midway."""
        logger.debug("conflict scan %d started (%d entries)", request.request_id, len(request.entries))
        path = [annotated.entry for annotated in request.entries]
        listings: dict[str, frozenset[str]] = {}

        def provides(entry: PathEntry, filename: str) -> bool:
            names = listings.get(entry.key)
            if names is None:
                names = frozenset(
                    os.path.normcase(name) for name in self._listing_cache.list(entry.resolved, self._extensions)
                )
                listings[entry.key] = names
            return os.path.normcase(filename) in names

        def first_provider(filename: str) -> PathEntry | None:
            for candidate in path:
                if provides(candidate, filename):
                    return candidate
            return None

        for annotated in request.entries:
            if request.cancelled:
                logger.debug("conflict scan %d cancelled", request.request_id)
                return False

            annotated.clear_issues()
            entry = annotated.entry
            if not entry.exists():
                annotated.add_issue(MISSING_DIRECTORY_ISSUE)
                continue

            for filename in self._listing_cache.list(entry.resolved, self._extensions):
                provider = first_provider(filename)
                if provider is not None and provider.key != entry.key:
                    annotated.add_issue(shadow_issue(filename, provider))

        logger.debug("conflict scan %d finished", request.request_id)
        return True


__all__ = [
    "ALWAYS_CHECKED_EXTENSIONS",
    "ConflictEngine",
    "ConflictScanRequest",
    "ConflictScanResult",
    "EngineDisposedError",
    "MISSING_DIRECTORY_ISSUE",
    "shadow_issue",
]
