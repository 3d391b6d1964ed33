"""Tests for bounded-depth, cancellable ``bin`` directory discovery."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pathscope import discovery
from pathscope.discovery import (
    DirectoryDiscovery,
    DiscoveryState,
    EventProgress,
    default_skip_directories,
    discover_bin_directories,
)


class DirectoryDiscoveryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name) / "root"
        for relative in ("bin/bin", "tools/Bin", "deep/x/y/bin", "windows/bin", "empty"):
            (self.root / relative).mkdir(parents=True)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, max_depth: int, progress: EventProgress | None = None, root: Path | None = None) -> list[str]:
        return discover_bin_directories(
            str(self.root if root is None else root),
            max_depth,
            progress,
            skip_directories=[str(self.root / "windows")],
        )

    def test_finds_bin_directories_within_depth_without_descending_into_them(self) -> None:
        found = self._run(max_depth=2)
        self.assertEqual(found, [str(self.root / "bin"), str(self.root / "tools" / "Bin")])

    def test_deeper_limit_reaches_nested_candidates(self) -> None:
        found = self._run(max_depth=4)
        self.assertIn(str(self.root / "deep" / "x" / "y" / "bin"), found)
        self.assertNotIn(str(self.root / "bin" / "bin"), found)

    def test_os_directory_is_skipped(self) -> None:
        found = self._run(max_depth=4)
        self.assertNotIn(str(self.root / "windows" / "bin"), found)

    def test_zero_depth_only_considers_the_root(self) -> None:
        progress = EventProgress()
        self.assertEqual(self._run(max_depth=0, progress=progress), [])
        self.assertEqual(progress.visited, 1)

        bin_root = self.root / "bin"
        self.assertEqual(self._run(max_depth=0, root=bin_root), [str(bin_root)])

    def test_progress_reports_visits_and_candidates(self) -> None:
        visited: list[str] = []
        candidates: list[str] = []
        progress = EventProgress(on_progress=visited.append, on_candidate=candidates.append)

        found = self._run(max_depth=1, progress=progress)

        self.assertEqual(candidates, found)
        self.assertEqual(visited[0], str(self.root))
        self.assertIn(str(self.root / "empty"), visited)
        self.assertTrue(progress.wait_done(timeout=0))

    def test_cancellation_returns_candidates_found_before_it(self) -> None:
        def on_progress(directory: str) -> None:
            if os.path.basename(directory) == "deep":
                progress.cancel()

        progress = EventProgress(on_progress=on_progress)
        walk = DirectoryDiscovery(str(self.root), 4, progress, skip_directories=())

        found = walk.run()

        self.assertEqual(found, [str(self.root / "bin")])
        self.assertIs(walk.state, DiscoveryState.CANCELLED)
        self.assertTrue(progress.wait_done(timeout=0))

    def test_interrupted_walk_is_recorded_as_cancelled(self) -> None:
        def on_progress(directory: str) -> None:
            if os.path.basename(directory) == "deep":
                raise KeyboardInterrupt

        progress = EventProgress(on_progress=on_progress)
        walk = DirectoryDiscovery(str(self.root), 4, progress, skip_directories=())

        with self.assertRaises(KeyboardInterrupt):
            walk.run()

        self.assertIs(walk.state, DiscoveryState.CANCELLED)
        self.assertEqual(walk.results, [str(self.root / "bin")])
        self.assertTrue(progress.wait_done(timeout=0))

    def test_state_machine_and_single_run(self) -> None:
        walk = DirectoryDiscovery(str(self.root), 1, EventProgress(), skip_directories=())
        self.assertIs(walk.state, DiscoveryState.NOT_STARTED)
        walk.run()
        self.assertIs(walk.state, DiscoveryState.COMPLETED)
        with self.assertRaises(RuntimeError):
            walk.run()

    def test_unreadable_directories_are_skipped(self) -> None:
        original = discovery._subdirectories
        denied = str(self.root / "tools")

        def fake_subdirectories(directory: str) -> list[str]:
            if directory == denied:
                raise PermissionError(directory)
            return original(directory)

        with mock.patch("pathscope.discovery._subdirectories", side_effect=fake_subdirectories):
            found = self._run(max_depth=2)

        self.assertEqual(found, [str(self.root / "bin")])

    def test_missing_root_yields_nothing(self) -> None:
        self.assertEqual(self._run(max_depth=3, root=self.root / "missing"), [])

    def test_default_skip_directories_come_from_environment(self) -> None:
        skipped = default_skip_directories({"WINDIR": str(self.root / "windows"), "SystemRoot": ""})
        self.assertEqual(skipped, frozenset({os.path.normcase(os.path.abspath(str(self.root / "windows")))}))


if __name__ == "__main__":
    unittest.main()
