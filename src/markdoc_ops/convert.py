from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

from markdoc_ops.io_helpers import (
    MissingInputError,
    iter_existing_sources,
    question_source_name,
    require_source_text,
    resolve_source_path,
)
from markdoc_ops.models import PageBreak, Spacer, StructuralElement, Title
from markdoc_ops.parser import MarkdownParser
from markdoc_ops.render_docx import render_elements_docx


def format_seconds(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    mins = int(seconds // 60)
    return f"{mins}m {seconds - mins * 60:.0f}s"


def parse_documents(texts: list[str], max_workers: int = 1) -> list[list[StructuralElement]]:
    """Parse independent documents, preserving input order."""
    parser = MarkdownParser()
    if max_workers <= 1 or len(texts) <= 1:
        return [parser.parse(text) for text in texts]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(parser.parse, texts))


def collect_elements(
    title: str, documents: Iterable[list[StructuralElement]]
) -> list[StructuralElement]:
    elements: list[StructuralElement] = [
        Title(text=title),
        Spacer(space_before_pt=0.0, space_after_pt=10.0),
    ]
    for document in documents:
        elements.extend(document)
        elements.append(PageBreak())
    return elements


def build_collection(
    source_dir: Path,
    out_path: Path,
    names: list[str],
    *,
    title: str,
    template_path: Path | None = None,
    max_workers: int = 1,
) -> Path:
    started = time.monotonic()
    found: list[tuple[str, str]] = []
    for name, path in iter_existing_sources(source_dir, names):
        if path is None:
            print(f"Skipped: {name} not found", flush=True)
            continue
        found.append((name, require_source_text(path)))
    if not found:
        raise SystemExit(f"ERROR: no source files found in {source_dir}")

    documents = parse_documents([text for _, text in found], max_workers=max_workers)
    for (name, _), document in zip(found, documents):
        print(f"Parsed {name}: {len(document)} elements", flush=True)

    elements = collect_elements(title, documents)
    saved = render_elements_docx(elements, out_path, template_path, title=title)
    print(f"Created: {saved.name}")
    print(f"Done in {format_seconds(time.monotonic() - started)}", flush=True)
    return saved


def build_question(
    num: int | str,
    source_dir: Path,
    output_dir: Path,
    *,
    template_path: Path | None = None,
) -> Path:
    """Convert ``question-<num>.md`` into ``question-<num>.docx``.

    Raises :class:`MissingInputError` when the source file does not exist.
    """
    source_name = question_source_name(num)
    text = require_source_text(resolve_source_path(source_dir, source_name))
    elements = MarkdownParser().parse(text)
    out_path = output_dir / Path(source_name).with_suffix(".docx").name
    saved = render_elements_docx(elements, out_path, template_path)
    print(f"Created: {saved.name}")
    return saved


__all__ = [
    "MissingInputError",
    "build_collection",
    "build_question",
    "collect_elements",
    "format_seconds",
    "parse_documents",
]
