from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from treepeek.runtime import config


class ConfigBehaviorTests(unittest.TestCase):
    def test_show_hidden_round_trips_through_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                self.assertFalse(config.load_show_hidden())
                config.save_show_hidden(True)

                self.assertTrue(config_path.exists())
                self.assertTrue(config.load_show_hidden())
                self.assertEqual(config.load_config(), {"show_hidden": True})

    def test_style_name_is_stored_alongside_other_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                config.save_show_hidden(True)
                config.save_style_name("  dracula ")

                self.assertEqual(config.load_style_name(), "dracula")
                self.assertTrue(config.load_show_hidden())

    def test_blank_style_name_is_not_saved(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                config.save_style_name("   ")

                self.assertFalse(config_path.exists())
                self.assertIsNone(config.load_style_name())

    def test_malformed_config_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                self.assertFalse(config.load_show_hidden())
                self.assertIsNone(config.load_style_name())

    def test_wrongly_typed_values_fall_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text('{"show_hidden": "yes", "style": 3}', encoding="utf-8")
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                self.assertFalse(config.load_show_hidden())
                self.assertIsNone(config.load_style_name())

    def test_non_object_config_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2, 3]", encoding="utf-8")
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

    def test_unwritable_config_location_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            config_path = blocker / "config.json"
            with mock.patch("treepeek.runtime.config.CONFIG_PATH", config_path):
                config.save_show_hidden(True)

                self.assertFalse(config.load_show_hidden())


if __name__ == "__main__":
    unittest.main()
