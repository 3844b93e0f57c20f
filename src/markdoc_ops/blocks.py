from __future__ import annotations

import re
from typing import Iterable

from markdoc_ops.models import CodeBox, CodeVariant, Table, TableRow, TextRun
from markdoc_ops.sanitize import strip_decorative, strip_decorative_keep_diagram

DIAGRAM_CHARS = frozenset("┌┐└┘│─├┤┬┴┼╱╲")
CODE_COLOR = "2d2d2d"
JSON_KEY_COLOR = "0066cc"
JSON_VALUE_COLOR = "008800"
JSON_PUNCT_COLOR = "333333"

_JSON_STRING_RE = re.compile(r'(".*?")')
_KEY_SUFFIX_RE = re.compile(r"^\s*:")


def split_table_row(row: str) -> list[str]:
    cells: list[str] = []
    for fragment in row.split("|"):
        if not fragment.strip():
            continue
        text = fragment.strip().replace("**", "").replace("`", "")
        cells.append(strip_decorative(text))
    return cells


def build_table(rows: Iterable[str]) -> Table:
    """Build a table from raw pipe rows; the first row is the header.

    Rows keep their own cell counts, ragged input is passed through.
    """
    return Table(rows=tuple(TableRow(cells=tuple(split_table_row(row))) for row in rows))


def detect_code_variant(lines: list[str], language: str = "") -> CodeVariant:
    if any(ch in DIAGRAM_CHARS for line in lines for ch in line):
        return "diagram"
    if language.strip().lower() == "json":
        return "json"
    if any(line.strip().startswith(("{", "[")) for line in lines):
        return "json"
    return "code"


def json_line_runs(line: str) -> tuple[TextRun, ...]:
    parts = [part for part in _JSON_STRING_RE.split(line) if part]
    runs: list[TextRun] = []
    for idx, part in enumerate(parts):
        if len(part) >= 2 and part.startswith('"') and part.endswith('"'):
            following = parts[idx + 1] if idx + 1 < len(parts) else ""
            color = JSON_KEY_COLOR if _KEY_SUFFIX_RE.match(following) else JSON_VALUE_COLOR
        else:
            color = JSON_PUNCT_COLOR
        runs.append(TextRun(text=part, monospace=True, color_hint=color))
    if not runs:
        runs.append(TextRun(text="", monospace=True, color_hint=JSON_PUNCT_COLOR))
    return tuple(runs)


def build_code_box(lines: Iterable[str], language: str = "") -> CodeBox:
    cleaned = [strip_decorative_keep_diagram(line) for line in lines]
    variant = detect_code_variant(cleaned, language)
    if variant == "json":
        runs = tuple(json_line_runs(line) for line in cleaned)
    else:
        runs = tuple(
            (TextRun(text=line, monospace=True, color_hint=CODE_COLOR),) for line in cleaned
        )
    return CodeBox(lines=tuple(cleaned), variant=variant, language=language, runs=runs)
