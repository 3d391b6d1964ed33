"""Bounded-depth, cancellable discovery of ``bin`` directories.

The walk is depth-first and reports every visited directory to a progress
sink, which is also polled for cancellation at each directory boundary. A
``bin`` directory is recorded as a candidate and not descended into.
"""

from __future__ import annotations

import enum
import logging
import os
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

logger = logging.getLogger(__name__)

CANDIDATE_DIRECTORY_NAME = "bin"
OS_DIRECTORY_VARIABLES = ("SystemRoot", "WINDIR")


class DiscoveryState(enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProgressSink(Protocol):
    """Receiver for discovery progress; ``cancelled`` is polled cooperatively."""

    def begin(self) -> None: ...

    def report_progress(self, directory: str) -> None: ...

    def report_candidate(self, directory: str) -> None: ...

    def done(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class EventProgress:
    """Thread-safe ``ProgressSink`` backed by a ``threading.Event``.

    Optional callbacks receive visited directories and found candidates, so a
    host can drive the walk from a worker thread and cancel from another.
    """

    def __init__(
        self,
        on_progress: Callable[[str], None] | None = None,
        on_candidate: Callable[[str], None] | None = None,
    ) -> None:
        self._on_progress = on_progress
        self._on_candidate = on_candidate
        self._cancel_event = threading.Event()
        self._finished_event = threading.Event()
        self.visited = 0
        self.current_directory: str | None = None

    def begin(self) -> None:
        self._finished_event.clear()

    def report_progress(self, directory: str) -> None:
        self.visited += 1
        self.current_directory = directory
        if self._on_progress is not None:
            self._on_progress(directory)

    def report_candidate(self, directory: str) -> None:
        if self._on_candidate is not None:
            self._on_candidate(directory)

    def done(self) -> None:
        self._finished_event.set()

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def wait_done(self, timeout: float | None = None) -> bool:
        return self._finished_event.wait(timeout)


def default_skip_directories(environ: Mapping[str, str] | None = None) -> frozenset[str]:
    """Normalized OS installation directories named by the environment."""
    env = os.environ if environ is None else environ
    skipped = set()
    for name in OS_DIRECTORY_VARIABLES:
        value = env.get(name)
        if value:
            skipped.add(os.path.normcase(os.path.abspath(value)))
    return frozenset(skipped)


def _subdirectories(directory: str) -> list[str]:
    """Immediate subdirectories of ``directory``, symlinks excluded.

    Raises ``OSError`` when the directory cannot be enumerated.
    """
    children: list[str] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    children.append(entry.path)
            except OSError:
                continue
    children.sort(key=lambda path: os.path.basename(path).casefold())
    return children


class DirectoryDiscovery:
    """One discovery run from ``root`` down to ``max_depth`` levels."""

    def __init__(
        self,
        root: str,
        max_depth: int,
        progress: ProgressSink,
        *,
        skip_directories: Iterable[str] | None = None,
    ) -> None:
        self._root = root
        self._max_depth = max(0, max_depth)
        self._progress = progress
        if skip_directories is None:
            self._skip = default_skip_directories()
        else:
            self._skip = frozenset(os.path.normcase(os.path.abspath(path)) for path in skip_directories)
        self._results: list[str] = []
        self._lock = threading.Lock()
        self._state = DiscoveryState.NOT_STARTED

    @property
    def state(self) -> DiscoveryState:
        with self._lock:
            return self._state

    @property
    def results(self) -> list[str]:
        with self._lock:
            return list(self._results)

    def run(self) -> list[str]:
        """Walk the tree and return every candidate found before cancellation."""
        with self._lock:
            if self._state is not DiscoveryState.NOT_STARTED:
                raise RuntimeError("DirectoryDiscovery.run() may only be called once")
            self._state = DiscoveryState.RUNNING

        self._progress.begin()
        interrupted = False
        try:
            self._search(self._root, 0)
        except BaseException:
            interrupted = True
            raise
        finally:
            with self._lock:
                if interrupted or self._progress.cancelled:
                    self._state = DiscoveryState.CANCELLED
                else:
                    self._state = DiscoveryState.COMPLETED
            self._progress.done()
        logger.debug("discovery under %s finished: %s, %d candidates", self._root, self.state.value, len(self._results))
        return self.results

    def _search(self, directory: str, depth: int) -> None:
        self._progress.report_progress(directory)
        if self._progress.cancelled:
            return
        if os.path.normcase(os.path.abspath(directory)) in self._skip:
            logger.debug("discovery skipping OS directory %s", directory)
            return

        if os.path.basename(directory.rstrip("\\/")).lower() == CANDIDATE_DIRECTORY_NAME:
            with self._lock:
                self._results.append(directory)
            self._progress.report_candidate(directory)
            return

        if depth >= self._max_depth:
            return

        try:
            children = _subdirectories(directory)
        except OSError as exc:
            logger.debug("discovery cannot enumerate %s: %s", directory, exc)
            return

        for child in children:
            self._search(child, depth + 1)
            if self._progress.cancelled:
                return


def discover_bin_directories(
    root: str,
    max_depth: int,
    progress: ProgressSink | None = None,
    *,
    skip_directories: Iterable[str] | None = None,
) -> list[str]:
    """Convenience wrapper running one ``DirectoryDiscovery``."""
    sink = EventProgress() if progress is None else progress
    return DirectoryDiscovery(root, max_depth, sink, skip_directories=skip_directories).run()


__all__ = [
    "CANDIDATE_DIRECTORY_NAME",
    "DirectoryDiscovery",
    "DiscoveryState",
    "EventProgress",
    "ProgressSink",
    "default_skip_directories",
    "discover_bin_directories",
]
