"""Tests for markdown rendering into styled lines.

Exercises headings, inline emphasis, lists, code blocks, quotes, rules,
and tables as produced from the markdown-it token stream.
"""

from __future__ import annotations

import unittest

from treepeek.preview.markdown import (
    CODE_GUTTER,
    CODE_GUTTER_STYLE,
    HEADING_STYLES,
    INLINE_CODE_STYLE,
    LINK_STYLE,
    LIST_MARKER_STYLE,
    QUOTE_TEXT_STYLE,
    RULE_STYLE,
    MarkdownRenderer,
)
from treepeek.preview.styles import DEFAULT_STYLE, StyledLine, StyleRun, TextStyle
from treepeek.preview.syntax import Highlighter, load_syntax_assets


def _texts(lines: list[StyledLine]) -> list[str]:
    return [line.text for line in lines]


class MarkdownRendererTests(unittest.TestCase):
    def setUp(self) -> None:
        self.renderer = MarkdownRenderer(Highlighter(load_syntax_assets("monokai")))

    def test_heading_and_paragraph_render_to_two_lines(self) -> None:
        lines = self.renderer.render("# Title\n\nSome **bold** text.")

        self.assertEqual(_texts(lines), ["Title", "Some bold text."])
        self.assertEqual(lines[0].runs, (StyleRun("Title", HEADING_STYLES[0]),))
        self.assertEqual(
            lines[1].runs,
            (
                StyleRun("Some ", DEFAULT_STYLE),
                StyleRun("bold", TextStyle(bold=True)),
                StyleRun(" text.", DEFAULT_STYLE),
            ),
        )

    def test_heading_levels_use_distinct_presets(self) -> None:
        lines = self.renderer.render("## Two\n\n###### Six\n")

        self.assertEqual(lines[0].runs[0].style, HEADING_STYLES[1])
        self.assertEqual(lines[1].runs[0].style, HEADING_STYLES[5])
        self.assertTrue(all(style.bold for style in HEADING_STYLES))
        self.assertEqual(len({style.fg for style in HEADING_STYLES}), 6)

    def test_inline_styles(self) -> None:
        lines = self.renderer.render("*em* ~~gone~~ `code` [site](https://example.com)")

        styles = {run.text: run.style for run in lines[0].runs}
        self.assertTrue(styles["em"].italic)
        self.assertTrue(styles["gone"].strike)
        self.assertEqual(styles["code"], INLINE_CODE_STYLE)
        self.assertEqual(styles["site"], LINK_STYLE)
        self.assertTrue(styles["site"].underline)

    def test_nested_emphasis_accumulates_flags(self) -> None:
        lines = self.renderer.render("***both***")

        self.assertEqual(len(lines[0].runs), 1)
        style = lines[0].runs[0].style
        self.assertTrue(style.bold)
        self.assertTrue(style.italic)

    def test_soft_break_starts_new_line(self) -> None:
        lines = self.renderer.render("line one\nline two\n")

        self.assertEqual(_texts(lines), ["line one", "line two"])

    def test_unordered_list_cycles_bullets_by_depth(self) -> None:
        lines = self.renderer.render("- a\n- b\n  - c\n    - d\n")

        self.assertEqual(_texts(lines), ["• a", "• b", "  ◦ c", "    ▪ d"])
        self.assertEqual(lines[0].runs[0], StyleRun("• ", LIST_MARKER_STYLE))

    def test_ordered_list_counts_from_start_number(self) -> None:
        lines = self.renderer.render("3. x\n4. y\n")

        self.assertEqual(_texts(lines), ["3. x", "4. y"])

    def test_list_item_continuation_aligns_under_text(self) -> None:
        lines = self.renderer.render("- first\n  second\n")

        self.assertEqual(_texts(lines), ["• first", "  second"])

    def test_fenced_code_block_is_highlighted_with_gutter(self) -> None:
        lines = self.renderer.render("```python\ndef f():\n    pass\n```\n")

        self.assertEqual(_texts(lines), [f"{CODE_GUTTER}def f():", f"{CODE_GUTTER}    pass"])
        for line in lines:
            self.assertEqual(line.runs[0], StyleRun(CODE_GUTTER, CODE_GUTTER_STYLE))
        self.assertEqual(lines[0].runs[1].text, "def")
        self.assertNotEqual(lines[0].runs[1].style, DEFAULT_STYLE)

    def test_code_block_without_language_is_plain(self) -> None:
        lines = self.renderer.render("```\nraw text\n```\n")

        self.assertEqual(lines, [StyledLine((StyleRun(CODE_GUTTER, CODE_GUTTER_STYLE), StyleRun("raw text")))])

    def test_empty_code_block_still_shows_gutter(self) -> None:
        lines = self.renderer.render("```\n```\n")

        self.assertEqual(_texts(lines), [CODE_GUTTER])

    def test_blockquote_prefixes_marker_and_mutes_text(self) -> None:
        lines = self.renderer.render("> quoted\n")

        self.assertEqual(_texts(lines), ["▎ quoted"])
        self.assertEqual(lines[0].runs[-1], StyleRun("quoted", QUOTE_TEXT_STYLE))

    def test_nested_blockquotes_stack_markers(self) -> None:
        lines = self.renderer.render("> > deep\n")

        self.assertEqual(_texts(lines), ["▎ ▎ deep"])

    def test_horizontal_rule_is_single_run(self) -> None:
        lines = self.renderer.render("---\n")

        self.assertEqual(lines, [StyledLine((StyleRun("─" * 40, RULE_STYLE),))])

    def test_table_columns_are_padded(self) -> None:
        lines = self.renderer.render("| a | b |\n|---|---|\n| 1 | 22 |\n")

        self.assertEqual(_texts(lines), ["a │ b", "──┼───", "1 │ 22"])
        self.assertTrue(lines[0].runs[0].style.bold)

    def test_rendered_lines_never_contain_newlines(self) -> None:
        source = "# T\n\n- a\n- b\n\n> q\n> r\n\n```\nx\ny\n```\n\n<div>\nhtml\n</div>\n"
        for line in self.renderer.render(source):
            self.assertNotIn("\n", line.text)

    def test_render_is_deterministic(self) -> None:
        source = "# Head\n\n1. one\n2. two\n\n```rust\nfn main() {}\n```\n"
        self.assertEqual(self.renderer.render(source), self.renderer.render(source))

    def test_malformed_input_renders_best_effort(self) -> None:
        lines = self.renderer.render("**unclosed *nested\n> - [link\n\n```\nunterminated fence\n")

        self.assertTrue(lines)
        for line in lines:
            self.assertNotIn("\n", line.text)

    def test_empty_document_has_no_lines(self) -> None:
        self.assertEqual(self.renderer.render(""), [])


if __name__ == "__main__":
    unittest.main()
