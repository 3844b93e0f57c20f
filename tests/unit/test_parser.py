from __future__ import annotations

from markdoc_ops.convert import parse_documents
from markdoc_ops.models import BulletItem, CodeBox, Heading, Paragraph, Spacer, Table
from markdoc_ops.parser import (
    BLOCK_SPACER,
    RULE_SPACER,
    MarkdownParser,
    classify_line,
    is_table_separator,
    parse_markdown,
    split_lines,
)

SAMPLE = (
    "# Title\n"
    "Some **bold** text.\n"
    "- item one\n"
    "| A | B |\n"
    "| - | - |\n"
    "| 1 | 2 |\n"
    "```\n"
    "print('hi')\n"
    "```\n"
)


def test_end_to_end_sequence() -> None:
    elements = parse_markdown(SAMPLE)
    kinds = [element.kind for element in elements]
    assert kinds == ["heading", "paragraph", "bullet", "table", "spacer", "code_box", "spacer"]

    heading, paragraph, bullet, table, _, code_box, _ = elements
    assert isinstance(heading, Heading)
    assert heading.level == 1
    assert heading.text == "Title"

    assert isinstance(paragraph, Paragraph)
    assert [run.text for run in paragraph.runs if run.bold] == ["bold"]
    assert paragraph.text == "Some bold text."

    assert isinstance(bullet, BulletItem)
    assert bullet.text == "item one"

    assert isinstance(table, Table)
    assert [row.cells for row in table.rows] == [("A", "B"), ("1", "2")]

    assert isinstance(code_box, CodeBox)
    assert code_box.lines == ("print('hi')",)

    assert len([e for e in elements if not isinstance(e, Spacer)]) == 5


def test_heading_levels_and_level_four_is_bold() -> None:
    elements = parse_markdown("# One\n## Two\n### Three\n#### Four\n")
    assert [(e.level, e.text) for e in elements] == [
        (1, "One"),
        (2, "Two"),
        (3, "Three"),
        (4, "Four"),
    ]
    assert elements[3].runs[0].bold is True
    assert elements[0].runs[0].bold is False


def test_heading_is_sanitized_but_not_tokenized() -> None:
    (heading,) = parse_markdown("## 🚀 Use `code` now")
    assert heading.text == "Use `code` now"
    assert len(heading.runs) == 1


def test_standalone_bold_paragraph() -> None:
    (paragraph,) = parse_markdown("**Answer ✅**")
    assert paragraph.strong is True
    assert paragraph.runs[0].bold is True
    assert paragraph.text == "Answer"


def test_bullet_markers_are_normalized() -> None:
    elements = parse_markdown("- dash\n• dot\n* star with `code`\n")
    assert all(isinstance(e, BulletItem) for e in elements)
    assert [e.text for e in elements] == ["dash", "dot", "star with code"]
    assert {e.glyph for e in elements} == {"•"}
    assert elements[2].runs[1].monospace is True


def test_rule_and_blank_lines() -> None:
    elements = parse_markdown("a\n\n---\n\nb\n")
    assert elements == [
        Paragraph(runs=parse_markdown("a")[0].runs),
        RULE_SPACER,
        Paragraph(runs=parse_markdown("b")[0].runs),
    ]


def test_every_non_blank_line_is_one_element() -> None:
    elements = parse_markdown("first\nsecond\n\nthird")
    assert [e.text for e in elements] == ["first", "second", "third"]


def test_fence_swallows_tables_and_headings() -> None:
    elements = parse_markdown("```\n| a |\n# not a heading\n\n```\n")
    assert len(elements) == 2
    box = elements[0]
    assert isinstance(box, CodeBox)
    assert box.lines == ("| a |", "# not a heading", "")
    assert elements[1] == BLOCK_SPACER


def test_unterminated_fence_is_flushed() -> None:
    elements = parse_markdown("intro\n```\nline1\n\nline2\n")
    assert [e.kind for e in elements] == ["paragraph", "code_box", "spacer"]
    assert elements[1].lines == ("line1", "", "line2")


def test_table_at_end_of_input_is_flushed() -> None:
    elements = parse_markdown("| H |\n|---|\n| v |")
    assert [e.kind for e in elements] == ["table", "spacer"]
    assert [row.cells for row in elements[0].rows] == [("H",), ("v",)]


def test_line_after_table_is_reprocessed() -> None:
    elements = parse_markdown("| H |\n| v |\n## Next\n")
    assert [e.kind for e in elements] == ["table", "spacer", "heading"]
    assert elements[2].text == "Next"


def test_separator_only_table_emits_nothing() -> None:
    elements = parse_markdown("|---|---|\nText\n")
    assert [e.kind for e in elements] == ["paragraph"]


def test_fence_language_hint() -> None:
    (box, _) = parse_markdown('```json\n"key": 1\n```\n')
    assert box.language == "json"
    assert box.variant == "json"


def test_crlf_and_trailing_newline() -> None:
    assert split_lines("a\r\nb\r\n") == ["a", "b"]
    assert split_lines("") == []
    elements = parse_markdown("# T\r\nbody\r\n")
    assert [e.kind for e in elements] == ["heading", "paragraph"]
    assert elements[1].text == "body"


def test_separator_pattern() -> None:
    assert is_table_separator("| --- | :-: |")
    assert is_table_separator("  |---|  ")
    assert not is_table_separator("| 1 | 2 |")


def test_rule_priority() -> None:
    assert classify_line("#### deep").name == "heading4"
    assert classify_line("**a** and **b**").name == "strong"
    assert classify_line("**a** and more").name == "paragraph"
    assert classify_line("* item").name == "bullet"
    assert classify_line("   ") is None


def test_bare_prefixes_keep_their_kind() -> None:
    elements = parse_markdown("# \n## \n- \n**strong**  \n")
    assert [e.kind for e in elements] == ["heading", "heading", "bullet", "paragraph"]
    assert [e.level for e in elements[:2]] == [1, 2]
    assert elements[0].text == ""
    assert elements[2].text == ""
    assert elements[3].strong
    assert elements[3].text == "strong"


def test_parser_instances_do_not_share_state() -> None:
    parser = MarkdownParser()
    first = parser.parse("```\nopen fence")
    second = parser.parse("plain")
    assert first[0].lines == ("open fence",)
    assert [e.kind for e in second] == ["paragraph"]


def test_concurrent_parsing_matches_sequential() -> None:
    texts = [SAMPLE, "# Other\n- x\n", "| a |\n| b |\n", "```\nx\n"] * 3
    assert parse_documents(texts, max_workers=4) == [parse_markdown(t) for t in texts]
