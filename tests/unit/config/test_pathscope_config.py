"""Tests for config persistence and input sanitization."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pathscope import config


class ConfigBehaviorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "nested" / "config.json"
        patcher = mock.patch("pathscope.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def test_missing_or_malformed_config_falls_back_to_defaults(self) -> None:
        self.assertEqual(config.load_config(), {})
        self.assertEqual(config.load_discovery_max_depth(), config.DEFAULT_DISCOVERY_MAX_DEPTH)

        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("{not json", encoding="utf-8")
        self.assertEqual(config.load_config(), {})

        self.config_path.write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(config.load_config(), {})

    def test_discovery_max_depth_round_trip_and_validation(self) -> None:
        config.save_discovery_max_depth(5)
        self.assertEqual(config.load_discovery_max_depth(), 5)

        config.save_discovery_max_depth(0)
        self.assertEqual(config.load_discovery_max_depth(), 5)

        config.save_config({"discovery_max_depth": True})
        self.assertEqual(config.load_discovery_max_depth(), config.DEFAULT_DISCOVERY_MAX_DEPTH)

    def test_extra_extensions_are_normalized(self) -> None:
        config.save_config({"extra_extensions": ["PS1", ".Py", 3, "", ".", "ps1"]})
        self.assertEqual(config.load_extra_extensions(), [".ps1", ".py"])

        config.save_extra_extensions(["sh", ".SH", "rb"])
        self.assertEqual(config.load_extra_extensions(), [".sh", ".rb"])

    def test_listing_cache_ttl(self) -> None:
        self.assertIsNone(config.load_listing_cache_ttl())
        config.save_listing_cache_ttl(30)
        self.assertEqual(config.load_listing_cache_ttl(), 30.0)
        config.save_listing_cache_ttl(None)
        self.assertIsNone(config.load_listing_cache_ttl())
        self.assertNotIn("listing_cache_ttl_seconds", config.load_config())

    def test_saving_one_key_preserves_others(self) -> None:
        config.save_discovery_max_depth(2)
        config.save_extra_extensions([".ps1"])
        saved = config.load_config()
        self.assertEqual(saved.get("discovery_max_depth"), 2)
        self.assertEqual(saved.get("extra_extensions"), [".ps1"])


if __name__ == "__main__":
    unittest.main()
