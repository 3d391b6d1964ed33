"""Tests for issue annotations, alert levels, and change notification."""

from __future__ import annotations

import os
import tempfile
import threading
import unittest

from pathscope.entry import PathEntry
from pathscope.issues import ALERT_ISSUES, ALERT_MISSING, ALERT_OK, IssueSet


class IssueSetTests(unittest.TestCase):
    def test_alert_level_reflects_existence_then_issues(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            present = IssueSet(PathEntry.from_symbolic(tmp))
            missing = IssueSet(PathEntry.from_symbolic(os.path.join(tmp, "missing")))

            self.assertEqual(present.alert_level, ALERT_OK)
            present.add_issue("a.exe shadowed by elsewhere")
            self.assertEqual(present.alert_level, ALERT_ISSUES)
            present.clear_issues()
            self.assertEqual(present.alert_level, ALERT_OK)

            self.assertEqual(missing.alert_level, ALERT_MISSING)
            missing.add_issue("Does not exist")
            self.assertEqual(missing.alert_level, ALERT_MISSING)

    def test_issues_keep_insertion_order_and_duplicates(self) -> None:
        issues = IssueSet(PathEntry.from_symbolic("/opt/bin"))
        issues.add_issue("b")
        issues.add_issue("a")
        issues.add_issue("b")
        self.assertEqual(issues.issues, ("b", "a", "b"))

    def test_issues_returns_a_snapshot(self) -> None:
        issues = IssueSet(PathEntry.from_symbolic("/opt/bin"))
        issues.add_issue("first")
        snapshot = issues.issues
        issues.add_issue("second")
        self.assertEqual(snapshot, ("first",))

    def test_observers_hear_both_properties_until_unsubscribed(self) -> None:
        issues = IssueSet(PathEntry.from_symbolic("/opt/bin"))
        events: list[tuple[IssueSet, str]] = []
        unsubscribe = issues.subscribe(lambda source, name: events.append((source, name)))

        issues.add_issue("x")
        issues.clear_issues()
        unsubscribe()
        issues.add_issue("y")

        self.assertEqual(
            [name for _source, name in events],
            ["issues", "alert_level", "issues", "alert_level"],
        )
        self.assertTrue(all(source is issues for source, _name in events))

    def test_failing_observer_does_not_block_mutation(self) -> None:
        issues = IssueSet(PathEntry.from_symbolic("/opt/bin"))
        seen: list[str] = []

        def broken(_source: IssueSet, _name: str) -> None:
            raise ValueError("boom")

        issues.subscribe(broken)
        issues.subscribe(lambda _source, name: seen.append(name))
        with self.assertLogs("pathscope.issues", level="WARNING"):
            issues.add_issue("x")

        self.assertEqual(issues.issues, ("x",))
        self.assertEqual(seen, ["issues", "alert_level"])

    def test_concurrent_appends_are_not_lost(self) -> None:
        issues = IssueSet(PathEntry.from_symbolic("/opt/bin"))

        def append_many(tag: str) -> None:
            for idx in range(200):
                issues.add_issue(f"{tag}-{idx}")

        threads = [threading.Thread(target=append_many, args=(f"t{n}",)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(issues.issues), 800)


if __name__ == "__main__":
    unittest.main()
