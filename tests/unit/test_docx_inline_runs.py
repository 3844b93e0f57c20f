from __future__ import annotations

from pathlib import Path

import pytest

from markdoc_ops.render_docx import render_markdown_docx
from dump_docx_runs import assert_expected_substrings, assert_minimums, summarize_docx_runs


def test_inline_markdown_runs_are_preserved(tmp_path: Path) -> None:
    md_path = tmp_path / "inline.md"
    docx_path = tmp_path / "inline.docx"
    md_path.write_text(
        (
            "Paragraph with **bold**, `code`, and a stray ` tick.\n\n"
            "**Standalone**\n\n"
            "| Left | Right |\n"
            "| --- | --- |\n"
            "| **table bold** | `table code` |\n"
        ),
        encoding="utf-8",
    )

    render_markdown_docx(str(md_path), str(docx_path), None)
    summary = summarize_docx_runs(docx_path)
    assert_minimums(summary, bold_runs=4, code_runs=1, table_count=1)
    assert summary["shaded_runs"] == 1
    assert summary["page_breaks"] == 0

    paragraph_blob = "\n".join(summary["paragraph_text"])
    assert "Paragraph with bold, code, and a stray ` tick." in paragraph_blob
    assert "Standalone" in paragraph_blob

    table_blob = "\n".join(summary["table_cell_text"])
    assert "table bold" in table_blob
    assert "table code" in table_blob
    assert "**" not in table_blob

    assert_expected_substrings(summary, ["Left", "Right", "Standalone"])


def test_minimums_report_shortfalls(tmp_path: Path) -> None:
    md_path = tmp_path / "plain.md"
    docx_path = tmp_path / "plain.docx"
    md_path.write_text("Just text.\n", encoding="utf-8")
    render_markdown_docx(str(md_path), str(docx_path), None)
    summary = summarize_docx_runs(docx_path)

    with pytest.raises(AssertionError, match="table_count=0 < 1"):
        assert_minimums(summary, table_count=1)
    with pytest.raises(KeyError):
        assert_minimums(summary, italic_runs=1)
    with pytest.raises(AssertionError, match="Missing expected substrings"):
        assert_expected_substrings(summary, ["absent"])
