from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from docx import Document
from docx.oxml.ns import qn

MONOSPACE_FONTS = {"consolas", "courier new"}


def summarize_docx_runs(docx_path: str | Path) -> dict[str, Any]:
    path = Path(docx_path)
    doc = Document(str(path))
    summary: dict[str, Any] = {
        "docx_path": str(path),
        "total_runs": 0,
        "bold_runs": 0,
        "code_runs": 0,
        "shaded_runs": 0,
        "table_count": len(doc.tables),
        "page_breaks": 0,
        "paragraph_text": [],
        "table_cell_text": [],
    }

    for paragraph in doc.paragraphs:
        summary["paragraph_text"].append(paragraph.text)
        if paragraph.paragraph_format.page_break_before:
            summary["page_breaks"] += 1
        _accumulate_run_counts(summary, paragraph.runs)

    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                summary["table_cell_text"].append(cell.text)
                for paragraph in cell.paragraphs:
                    _accumulate_run_counts(summary, paragraph.runs)

    return summary


COUNTED_FIELDS = ("bold_runs", "code_runs", "shaded_runs", "table_count", "page_breaks")


def assert_minimums(summary: dict[str, Any], **minimums: int) -> None:
    unknown = sorted(set(minimums) - set(COUNTED_FIELDS))
    if unknown:
        raise KeyError(f"Not a counted field: {', '.join(unknown)}")
    failures = [
        f"{field}={summary[field]} < {minimum}"
        for field, minimum in minimums.items()
        if summary[field] < minimum
    ]
    if failures:
        raise AssertionError("; ".join(failures))


def assert_expected_substrings(summary: dict[str, Any], expected: list[str]) -> None:
    haystack = "\n".join(summary["paragraph_text"] + summary["table_cell_text"])
    missing = [snippet for snippet in expected if snippet not in haystack]
    if missing:
        raise AssertionError(f"Missing expected substrings: {missing}")


def _accumulate_run_counts(summary: dict[str, Any], runs) -> None:
    for run in runs:
        summary["total_runs"] += 1
        if bool(run.bold):
            summary["bold_runs"] += 1
        if (run.font.name or "").strip().lower() in MONOSPACE_FONTS:
            summary["code_runs"] += 1
        r_pr = run._r.rPr
        if r_pr is not None and r_pr.find(qn("w:shd")) is not None:
            summary["shaded_runs"] += 1


def _parse_minimum(raw: str) -> tuple[str, int]:
    field, sep, value = raw.partition("=")
    if not sep or field not in COUNTED_FIELDS:
        raise argparse.ArgumentTypeError(
            f"expected FIELD=N with FIELD in {', '.join(COUNTED_FIELDS)}"
        )
    try:
        return field, int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize run styling of a rendered DOCX.")
    parser.add_argument("docx_path", help="Path to .docx file")
    parser.add_argument(
        "--min",
        dest="minimums",
        type=_parse_minimum,
        action="append",
        default=[],
        metavar="FIELD=N",
        help="Required minimum for a counted field, e.g. table_count=1 (repeatable)",
    )
    parser.add_argument(
        "--expect",
        action="append",
        default=[],
        help="Text expected in a paragraph or table cell (repeatable)",
    )
    args = parser.parse_args()

    summary = summarize_docx_runs(args.docx_path)
    print(json.dumps(summary, indent=2, ensure_ascii=False))

    try:
        assert_minimums(summary, **dict(args.minimums))
        assert_expected_substrings(summary, args.expect)
    except AssertionError as exc:
        print(f"FAILED: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
