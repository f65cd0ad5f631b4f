"""CLI argument and default-path behavior tests.

Verifies how ``treepeek.cli.main`` chooses target paths and styles, and the
one-shot ``--render`` output.
"""

from __future__ import annotations

import io
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import treepeek
from treepeek import cli
from treepeek.preview import RenderMode


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._config_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self._config_dir.name) / "config.json"
        patcher = mock.patch("treepeek.runtime.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._config_dir.cleanup)


class CliDefaultPathTests(CliTestCase):
    def test_main_defaults_to_current_working_directory_when_no_path_arg(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            previous_cwd = Path.cwd()
            try:
                os.chdir(root)
                with mock.patch.object(sys, "argv", ["treepeek"]), mock.patch("treepeek.cli.run_app") as run_app:
                    cli.main()
            finally:
                os.chdir(previous_cwd)

        run_app.assert_called_once()
        path, style, no_color = run_app.call_args.args
        self.assertEqual(path.resolve(), root)
        self.assertEqual(style, "monokai")
        self.assertFalse(no_color)

    def test_main_uses_explicit_path_argument_over_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = root / "target.txt"
            target.write_text("hello\n", encoding="utf-8")

            with mock.patch.object(sys, "argv", ["treepeek", str(target), "--no-color"]), mock.patch(
                "treepeek.cli.run_app"
            ) as run_app:
                cli.main(default_path=root / "unused")

        path, _style, no_color = run_app.call_args.args
        self.assertEqual(path.resolve(), target)
        self.assertTrue(no_color)

    def test_missing_path_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "missing"
            with mock.patch.object(sys, "argv", ["treepeek", str(missing)]), mock.patch("treepeek.cli.run_app") as run_app:
                with self.assertRaises(SystemExit):
                    cli.main()

        run_app.assert_not_called()


class CliStyleTests(CliTestCase):
    def test_configured_style_is_used_when_flag_absent(self) -> None:
        self.config_path.write_text('{"style": "friendly"}', encoding="utf-8")
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.object(sys, "argv", ["treepeek", tmp]), mock.patch("treepeek.cli.run_app") as run_app:
                cli.main()

        self.assertEqual(run_app.call_args.args[1], "friendly")

    def test_save_style_persists_explicit_style(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            argv = ["treepeek", tmp, "--style", "dracula", "--save-style"]
            with mock.patch.object(sys, "argv", argv), mock.patch("treepeek.cli.run_app") as run_app:
                cli.main()

        self.assertEqual(run_app.call_args.args[1], "dracula")
        self.assertIn('"style": "dracula"', self.config_path.read_text(encoding="utf-8"))


class CliRenderTests(CliTestCase):
    def _render(self, argv: list[str]) -> str:
        with mock.patch.object(sys, "argv", ["treepeek", *argv]), mock.patch(
            "sys.stdout", new_callable=io.StringIO
        ) as stdout:
            cli.main()
        return stdout.getvalue()

    def test_render_prints_plain_lines_without_color(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "hello.py"
            target.write_text("print('hi')\nx = 1\n", encoding="utf-8")

            output = self._render(["--render", str(target), "--no-color", "--max-cols", "40"])

        self.assertEqual(output, "print('hi')\nx = 1\n")

    def test_render_clips_to_max_cols(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "wide.txt"
            target.write_text("abcdefghij\n", encoding="utf-8")

            output = self._render(["--render", str(target), "--no-color", "--max-cols", "4"])

        self.assertEqual(output, "abcd\n")

    def test_render_with_color_emits_escape_sequences(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "hello.py"
            target.write_text("def f():\n    pass\n", encoding="utf-8")

            output = self._render(["--render", str(target), "--max-cols", "40"])

        self.assertIn("\x1b[", output)

    def test_render_markdown_in_rendered_mode(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "README.md"
            target.write_text("# Title\n\nSome **bold** text.\n", encoding="utf-8")

            output = self._render(["--render", str(target), "--mode", "rendered", "--no-color", "--max-cols", "40"])

        self.assertEqual(output, "Title\nSome bold text.\n")

    def test_render_rejects_positional_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.txt"
            target.write_text("a\n", encoding="utf-8")
            with mock.patch.object(sys, "argv", ["treepeek", tmp, "--render", str(target)]):
                with self.assertRaises(SystemExit):
                    cli.main()

    def test_render_rejects_directory_and_missing_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for target in (tmp, str(Path(tmp) / "missing.txt")):
                with mock.patch.object(sys, "argv", ["treepeek", "--render", target]):
                    with self.assertRaises(SystemExit):
                        cli.main()

    def test_render_preview_reports_read_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            output, error = cli.render_preview(Path(tmp) / "gone.txt", "monokai", True, 80)

        self.assertEqual(output, "")
        self.assertTrue(error.startswith("Error reading: "))

    def test_render_preview_ignores_rendered_mode_for_source_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "a.rs"
            target.write_text("fn main() {}\n", encoding="utf-8")

            output, error = cli.render_preview(target, "monokai", True, 80, mode=RenderMode.RENDERED)

        self.assertIsNone(error)
        self.assertEqual(output, "fn main() {}\n")


class CliLoggingTests(unittest.TestCase):
    def test_package_logger_has_null_handler(self) -> None:
        handlers = logging.getLogger(treepeek.__name__).handlers
        self.assertTrue(any(isinstance(handler, logging.NullHandler) for handler in handlers))

    def test_configure_logging_only_with_log_file(self) -> None:
        with mock.patch("treepeek.cli.logging.basicConfig") as basic_config:
            cli.configure_logging(None, "DEBUG")
            basic_config.assert_not_called()

            cli.configure_logging("/tmp/treepeek.log", "DEBUG")

        basic_config.assert_called_once()
        self.assertEqual(basic_config.call_args.kwargs["filename"], "/tmp/treepeek.log")
        self.assertEqual(basic_config.call_args.kwargs["level"], logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
