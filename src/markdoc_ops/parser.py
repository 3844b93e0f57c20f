from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from markdoc_ops.blocks import build_code_box, build_table
from markdoc_ops.inline import tokenize
from markdoc_ops.models import (
    BulletItem,
    Heading,
    Paragraph,
    Spacer,
    StructuralElement,
    TextRun,
)
from markdoc_ops.sanitize import strip_decorative

_FENCE_RE = re.compile(r"^(```|~~~)\s*(?P<info>\S*)")
_TABLE_SEP_RE = re.compile(r"^[\s|\-:]+$")
_BULLET_RE = re.compile(r"^[-•*]\s+")
_BULLET_PREFIXES = ("- ", "• ", "* ")

BLOCK_SPACER = Spacer(space_before_pt=0.0, space_after_pt=5.0)
RULE_SPACER = Spacer(space_before_pt=10.0, space_after_pt=10.0)


@dataclass
class ParserState:
    in_code_fence: bool = False
    in_table: bool = False
    fence_language: str = ""
    pending_code_lines: list[str] = field(default_factory=list)
    pending_table_rows: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LineRule:
    name: str
    matches: Callable[[str], bool]
    build: Callable[[str], StructuralElement]


def is_table_row(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and stripped.startswith("|") and stripped.endswith("|")


def is_table_separator(line: str) -> bool:
    return is_table_row(line) and bool(_TABLE_SEP_RE.match(line.strip()))


def split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _heading(level: int, prefix: str) -> Callable[[str], StructuralElement]:
    def build(line: str) -> StructuralElement:
        text = strip_decorative(line[len(prefix) :])
        return Heading(level=level, text=text, runs=(TextRun(text=text, bold=level == 4),))

    return build


def _strong_paragraph(line: str) -> StructuralElement:
    text = strip_decorative(line.replace("**", ""))
    return Paragraph(runs=(TextRun(text=text, bold=True),), strong=True)


def _bullet(line: str) -> StructuralElement:
    text = _BULLET_RE.sub("", line, count=1)
    return BulletItem(runs=tuple(tokenize(strip_decorative(text))))


def _paragraph(line: str) -> StructuralElement:
    return Paragraph(runs=tuple(tokenize(strip_decorative(line))))


# Checked top to bottom; first match wins.
LINE_RULES: tuple[LineRule, ...] = (
    LineRule("heading4", lambda line: line.startswith("#### "), _heading(4, "#### ")),
    LineRule("heading3", lambda line: line.startswith("### "), _heading(3, "### ")),
    LineRule("heading2", lambda line: line.startswith("## "), _heading(2, "## ")),
    LineRule("heading1", lambda line: line.startswith("# "), _heading(1, "# ")),
    LineRule(
        "strong",
        lambda line: line.startswith("**") and line.rstrip().endswith("**"),
        _strong_paragraph,
    ),
    LineRule("bullet", lambda line: line.startswith(_BULLET_PREFIXES), _bullet),
    LineRule("rule", lambda line: line.strip() == "---", lambda _line: RULE_SPACER),
    LineRule("paragraph", lambda line: bool(line.strip()), _paragraph),
)


def classify_line(line: str, rules: tuple[LineRule, ...] = LINE_RULES) -> LineRule | None:
    for rule in rules:
        if rule.matches(line):
            return rule
    return None


class MarkdownParser:
    """Line-oriented parser producing structural elements.

    Holds no per-document state; every :meth:`parse` call creates its own
    :class:`ParserState`, so one instance can serve concurrent callers.
    """

    def __init__(self, rules: tuple[LineRule, ...] = LINE_RULES) -> None:
        self.rules = rules

    def parse(self, markdown_text: str) -> list[StructuralElement]:
        state = ParserState()
        elements: list[StructuralElement] = []
        for line in split_lines(markdown_text or ""):
            self._feed(line, state, elements)

        if state.in_table:
            self._flush_table(state, elements)
        if state.in_code_fence:
            # Unterminated fence: keep what was collected.
            self._flush_code(state, elements)
        return elements

    def _feed(self, line: str, state: ParserState, elements: list[StructuralElement]) -> None:
        if not state.in_code_fence:
            if is_table_row(line):
                if not is_table_separator(line):
                    state.pending_table_rows.append(line)
                state.in_table = True
                return
            if state.in_table:
                self._flush_table(state, elements)

        fence = _FENCE_RE.match(line.strip())
        if fence:
            if state.in_code_fence:
                self._flush_code(state, elements)
            else:
                state.in_code_fence = True
                state.fence_language = fence.group("info")
            return

        if state.in_code_fence:
            state.pending_code_lines.append(line)
            return

        rule = classify_line(line, self.rules)
        if rule is not None:
            elements.append(rule.build(line))

    def _flush_table(self, state: ParserState, elements: list[StructuralElement]) -> None:
        if state.pending_table_rows:
            elements.append(build_table(state.pending_table_rows))
            elements.append(BLOCK_SPACER)
        state.pending_table_rows = []
        state.in_table = False

    def _flush_code(self, state: ParserState, elements: list[StructuralElement]) -> None:
        elements.append(build_code_box(state.pending_code_lines, state.fence_language))
        elements.append(BLOCK_SPACER)
        state.pending_code_lines = []
        state.fence_language = ""
        state.in_code_fence = False


def parse_markdown(markdown_text: str) -> list[StructuralElement]:
    return MarkdownParser().parse(markdown_text)
