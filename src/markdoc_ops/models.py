from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

CodeVariant = Literal["code", "diagram", "json"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class TextRun(_Frozen):
    text: str
    bold: bool = False
    monospace: bool = False
    color_hint: str | None = None
    shading: str | None = None


def runs_text(runs: tuple[TextRun, ...] | list[TextRun]) -> str:
    return "".join(run.text for run in runs)


class Heading(_Frozen):
    kind: Literal["heading"] = "heading"
    level: int = Field(ge=1, le=4)
    text: str
    runs: tuple[TextRun, ...]


class Paragraph(_Frozen):
    kind: Literal["paragraph"] = "paragraph"
    runs: tuple[TextRun, ...]
    strong: bool = False

    @property
    def text(self) -> str:
        return runs_text(self.runs)


class BulletItem(_Frozen):
    kind: Literal["bullet"] = "bullet"
    runs: tuple[TextRun, ...]
    glyph: str = "•"

    @property
    def text(self) -> str:
        return runs_text(self.runs)


class Spacer(_Frozen):
    kind: Literal["spacer"] = "spacer"
    space_before_pt: float = 0.0
    space_after_pt: float = 5.0


class TableRow(_Frozen):
    cells: tuple[str, ...]


class Table(_Frozen):
    kind: Literal["table"] = "table"
    rows: tuple[TableRow, ...]

    @property
    def header(self) -> TableRow | None:
        return self.rows[0] if self.rows else None


class CodeBox(_Frozen):
    kind: Literal["code_box"] = "code_box"
    lines: tuple[str, ...]
    variant: CodeVariant = "code"
    language: str = ""
    runs: tuple[tuple[TextRun, ...], ...] = ()


# Only contributed by drivers, never by the parser.
class Title(_Frozen):
    kind: Literal["title"] = "title"
    text: str


class PageBreak(_Frozen):
    kind: Literal["page_break"] = "page_break"


StructuralElement = Annotated[
    Union[Heading, Paragraph, BulletItem, Spacer, Table, CodeBox, Title, PageBreak],
    Field(discriminator="kind"),
]


class ElementList(BaseModel):
    """Serializable wrapper used by the ``dump-elements`` command."""

    source: str = ""
    elements: list[StructuralElement] = Field(default_factory=list)
