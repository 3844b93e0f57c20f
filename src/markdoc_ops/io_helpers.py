from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

QUESTION_NAME_TEMPLATE = "question-{num}.md"


class MissingInputError(FileNotFoundError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"File not found: {path.name}")
        self.path = path


def question_source_name(num: int | str) -> str:
    return QUESTION_NAME_TEMPLATE.format(num=str(num).strip())


def question_source_names(count: int) -> list[str]:
    return [question_source_name(num) for num in range(1, count + 1)]


def resolve_source_path(source_dir: Path, name: str) -> Path:
    return source_dir / name


def read_source_text(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def require_source_text(path: Path) -> str:
    text = read_source_text(path)
    if text is None:
        raise MissingInputError(path)
    return text


def iter_existing_sources(
    source_dir: Path, names: Iterable[str]
) -> Iterator[tuple[str, Path | None]]:
    for name in names:
        path = resolve_source_path(source_dir, name)
        yield name, path if path.is_file() else None
