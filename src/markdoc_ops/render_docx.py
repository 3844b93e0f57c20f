from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable, Iterable

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt, RGBColor
from docx.text.paragraph import Paragraph as DocxParagraph

from markdoc_ops.blocks import CODE_COLOR
from markdoc_ops.io_helpers import require_source_text
from markdoc_ops.models import (
    BulletItem,
    CodeBox,
    Heading,
    PageBreak,
    Paragraph,
    Spacer,
    StructuralElement,
    Table,
    TextRun,
    Title,
    runs_text,
)
from markdoc_ops.parser import parse_markdown

PLACEHOLDER = "{{CONTENT}}"

CODE_FONT = "Consolas"
INLINE_CODE_FONT = "Courier New"
SMALL_FONT_PT = 10.0
HEADING4_FONT_PT = 11.0
BULLET_INDENT_PT = 18.0

TABLE_HEADER_FILL = "e0e0e0"
DIAGRAM_FILL = "f5f7f9"
CODE_FILL = "f6f8fa"
BOX_BORDER_COLOR = "cccccc"
BOX_ACCENT_COLOR = "4a90d9"

# (space before, space after) in points.
_HEADING_SPACING_PT = {1: (20.0, 10.0), 2: (15.0, 7.5), 3: (10.0, 5.0), 4: (7.5, 3.75)}
_BODY_SPACING_PT = (2.5, 2.5)
_STRONG_SPACING_PT = (5.0, 2.5)
_TITLE_SPACING_PT = (0.0, 20.0)


def render_markdown_docx(
    md_path: str, out_docx_path: str, template_path: str | None = None
) -> None:
    markdown_text = require_source_text(Path(md_path))
    elements = parse_markdown(markdown_text)
    render_elements_docx(elements, out_docx_path, template_path)


def render_elements_docx(
    elements: Iterable[StructuralElement],
    out_docx_path: str | Path,
    template_path: str | Path | None = None,
    title: str | None = None,
) -> Path:
    out_file = Path(out_docx_path)
    doc = build_document(elements, template_path, title)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    _save_docx_atomic(doc, out_file)
    return out_file


def build_document(
    elements: Iterable[StructuralElement],
    template_path: str | Path | None = None,
    title: str | None = None,
) -> Document:
    template_file = Path(template_path) if template_path else None
    doc, writer = _init_document(template_file)
    _apply_placeholder_replacements(doc, title)
    _apply_style_profile(doc)
    for element in elements:
        renderer = _RENDERERS.get(element.kind)
        if renderer is None:
            raise TypeError(f"Unsupported element kind: {element.kind}")
        renderer(writer, doc, element)
    return doc


class _DocWriter:
    def __init__(
        self,
        doc: Document,
        insert_after: DocxParagraph | None,
        reuse_first: DocxParagraph | None = None,
    ) -> None:
        self.doc = doc
        self.insert_after = insert_after
        self.reuse_first = reuse_first
        # Emptied template anchor, until something takes its place.
        self.anchor = reuse_first

    def add_paragraph(self, style: str | None = None) -> DocxParagraph:
        if self.reuse_first is not None:
            paragraph = self.reuse_first
            self.reuse_first = None
        elif self.insert_after is None:
            paragraph = self.doc.add_paragraph()
        else:
            paragraph = _insert_paragraph_after(self.insert_after)
        if style:
            try:
                paragraph.style = style
            except KeyError:
                pass
        self.anchor = None
        self.insert_after = paragraph
        return paragraph

    def add_table(self, rows: int, cols: int):
        table = self.doc.add_table(rows=rows, cols=cols)
        if self.anchor is not None:
            # The table takes the anchor's slot; the anchor follows it.
            self.anchor._p.addprevious(table._tbl)
            paragraph_after = self.anchor
            self.anchor = None
        else:
            if self.insert_after is not None:
                self.insert_after._p.addnext(table._tbl)
            # Keep an empty paragraph after every table; the next element reuses it.
            new_p = OxmlElement("w:p")
            table._tbl.addnext(new_p)
            paragraph_after = DocxParagraph(new_p, table._parent)
        self.reuse_first = paragraph_after
        self.insert_after = paragraph_after
        return table


def _init_document(template_path: Path | None) -> tuple[Document, _DocWriter]:
    if template_path is None:
        doc = Document()
        return doc, _DocWriter(doc, insert_after=None)
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")
    if template_path.is_dir():
        raise ValueError(f"Template path is a directory: {template_path}")
    doc = Document(str(template_path))
    anchor = _find_placeholder_paragraph(doc, PLACEHOLDER)
    if anchor is None:
        return doc, _DocWriter(doc, insert_after=None)
    anchor.text = anchor.text.replace(PLACEHOLDER, "")
    reuse_first = anchor if not anchor.text.strip() else None
    return doc, _DocWriter(doc, insert_after=anchor, reuse_first=reuse_first)


def _find_placeholder_paragraph(doc: Document, placeholder: str) -> DocxParagraph | None:
    for paragraph in doc.paragraphs:
        if placeholder in paragraph.text:
            return paragraph
    return None


def _insert_paragraph_after(paragraph: DocxParagraph) -> DocxParagraph:
    new_p = OxmlElement("w:p")
    paragraph._p.addnext(new_p)
    return DocxParagraph(new_p, paragraph._parent)


def _save_docx_atomic(doc: Document, path: Path) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    doc.save(str(tmp_path))
    tmp_path.replace(path)


def _apply_placeholder_replacements(doc: Document, title: str | None) -> None:
    replacements = {
        "{{TITLE}}": title or "",
        "{{DATE}}": date.today().isoformat(),
    }
    paragraphs = list(doc.paragraphs)
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                paragraphs.extend(cell.paragraphs)
    for paragraph in paragraphs:
        text = paragraph.text
        if not text or "{{" not in text:
            continue
        updated = text
        for key, value in replacements.items():
            updated = updated.replace(key, value)
        if updated != text:
            paragraph.text = updated


def _style_exists(doc: Document, name: str) -> bool:
    try:
        doc.styles[name]
    except KeyError:
        return False
    return True


def _apply_style_profile(doc: Document) -> None:
    profiles = {
        "Title": {"font_size_pt": 20.0, "bold": True, "keep_with_next": True},
        "Heading 1": {"font_size_pt": 16.0, "bold": True, "keep_with_next": True},
        "Heading 2": {"font_size_pt": 14.0, "bold": True, "keep_with_next": True},
        "Heading 3": {"font_size_pt": 12.0, "bold": True, "keep_with_next": True},
    }

    for style_name, profile in profiles.items():
        try:
            style = doc.styles[style_name]
        except KeyError:
            continue
        font = style.font
        if profile.get("font_size_pt") is not None and font.size is None:
            font.size = Pt(profile["font_size_pt"])
        if profile.get("bold") is not None and font.bold is None:
            font.bold = profile["bold"]
        fmt = style.paragraph_format
        if profile.get("keep_with_next") is not None and fmt.keep_with_next is None:
            fmt.keep_with_next = profile["keep_with_next"]


def _set_spacing(paragraph: DocxParagraph, spacing: tuple[float, float]) -> None:
    before, after = spacing
    fmt = paragraph.paragraph_format
    fmt.space_before = Pt(before)
    fmt.space_after = Pt(after)


def _add_runs(
    paragraph: DocxParagraph,
    runs: Iterable[TextRun],
    *,
    code_font: str = INLINE_CODE_FONT,
) -> None:
    for run_spec in runs:
        _add_text_run(paragraph, run_spec, code_font=code_font)


def _add_text_run(
    paragraph: DocxParagraph, run_spec: TextRun, *, code_font: str = INLINE_CODE_FONT
):
    if not run_spec.text:
        return None
    run = paragraph.add_run(run_spec.text)
    if run_spec.bold:
        run.bold = True
    if run_spec.monospace:
        run.font.name = code_font
        run.font.size = Pt(SMALL_FONT_PT)
    if run_spec.color_hint:
        run.font.color.rgb = RGBColor.from_string(run_spec.color_hint.upper())
    if run_spec.shading:
        _shade_run(run, run_spec.shading)
    return run


def _shade_run(run, fill: str) -> None:
    r_pr = run._r.get_or_add_rPr()
    r_pr.append(_shading_element(fill))


def _shading_element(fill: str):
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    return shd


def _render_title(writer: _DocWriter, doc: Document, element: Title) -> None:
    style = "Title" if _style_exists(doc, "Title") else "Heading 1"
    paragraph = writer.add_paragraph(style)
    paragraph.add_run(element.text)
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _set_spacing(paragraph, _TITLE_SPACING_PT)


def _render_heading(writer: _DocWriter, doc: Document, element: Heading) -> None:
    if element.level == 4:
        # Level 4 is emphasized body text, not a heading style.
        paragraph = writer.add_paragraph("Normal")
        run = paragraph.add_run(element.text)
        run.bold = True
        run.font.size = Pt(HEADING4_FONT_PT)
    else:
        paragraph = writer.add_paragraph(f"Heading {element.level}")
        _add_runs(paragraph, element.runs)
    _set_spacing(paragraph, _HEADING_SPACING_PT[element.level])


def _render_paragraph(writer: _DocWriter, doc: Document, element: Paragraph) -> None:
    paragraph = writer.add_paragraph("Normal")
    _add_runs(paragraph, element.runs)
    _set_spacing(paragraph, _STRONG_SPACING_PT if element.strong else _BODY_SPACING_PT)


def _render_bullet(writer: _DocWriter, doc: Document, element: BulletItem) -> None:
    paragraph = writer.add_paragraph("Normal")
    paragraph.paragraph_format.left_indent = Pt(BULLET_INDENT_PT)
    paragraph.add_run(f"{element.glyph} ")
    _add_runs(paragraph, element.runs)
    _set_spacing(paragraph, _BODY_SPACING_PT)


def _render_spacer(writer: _DocWriter, doc: Document, element: Spacer) -> None:
    paragraph = writer.add_paragraph("Normal")
    _set_spacing(paragraph, (element.space_before_pt, element.space_after_pt))


def _render_page_break(writer: _DocWriter, doc: Document, element: PageBreak) -> None:
    paragraph = writer.add_paragraph("Normal")
    paragraph.paragraph_format.page_break_before = True


def _render_table(writer: _DocWriter, doc: Document, element: Table) -> None:
    if not element.rows:
        return
    cols = max(len(row.cells) for row in element.rows) or 1
    table = writer.add_table(rows=len(element.rows), cols=cols)
    try:
        table.style = "Table Grid"
    except KeyError:
        pass
    for r_idx, row in enumerate(element.rows):
        is_header = r_idx == 0
        for c_idx in range(cols):
            cell = table.cell(r_idx, c_idx)
            # Ragged rows: missing cells stay empty.
            text = row.cells[c_idx] if c_idx < len(row.cells) else ""
            paragraph = cell.paragraphs[0]
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            if text:
                run = paragraph.add_run(text)
                run.font.size = Pt(SMALL_FONT_PT)
                if is_header:
                    run.bold = True
            if is_header:
                cell._tc.get_or_add_tcPr().append(_shading_element(TABLE_HEADER_FILL))
            _set_cell_margins(cell, top=50, bottom=50, left=75, right=75)
    _apply_table_profile(table, doc)
    _set_header_repeat(table.rows[0])


def _render_code_box(writer: _DocWriter, doc: Document, element: CodeBox) -> None:
    table = writer.add_table(rows=1, cols=1)
    cell = table.cell(0, 0)
    line_runs = element.runs or tuple(
        (TextRun(text=line, monospace=True, color_hint=CODE_COLOR),) for line in element.lines
    )
    if not line_runs:
        line_runs = ((TextRun(text="", monospace=True, color_hint=CODE_COLOR),),)

    for idx, runs in enumerate(line_runs):
        paragraph = cell.paragraphs[0] if idx == 0 else cell.add_paragraph()
        fmt = paragraph.paragraph_format
        fmt.space_before = Pt(1)
        fmt.space_after = Pt(1)
        fmt.line_spacing = 1.15
        if runs_text(runs):
            _add_runs(paragraph, runs, code_font=CODE_FONT)
        else:
            # Blank rows keep their height.
            run = paragraph.add_run(" ")
            run.font.name = CODE_FONT
            run.font.size = Pt(SMALL_FONT_PT)

    _set_cell_borders(cell)
    fill = DIAGRAM_FILL if element.variant == "diagram" else CODE_FILL
    cell._tc.get_or_add_tcPr().append(_shading_element(fill))
    _set_cell_margins(cell, top=150, bottom=150, left=250, right=250)
    _apply_table_profile(table, doc, tighten=False)


_RENDERERS: dict[str, Callable[[_DocWriter, Document, object], None]] = {
    "title": _render_title,
    "heading": _render_heading,
    "paragraph": _render_paragraph,
    "bullet": _render_bullet,
    "spacer": _render_spacer,
    "page_break": _render_page_break,
    "table": _render_table,
    "code_box": _render_code_box,
}


def _set_cell_borders(cell) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    borders = OxmlElement("w:tcBorders")
    for side in ("top", "left", "bottom", "right"):
        edge = OxmlElement(f"w:{side}")
        edge.set(qn("w:val"), "single")
        edge.set(qn("w:sz"), "24" if side == "left" else "8")
        edge.set(qn("w:space"), "0")
        edge.set(qn("w:color"), BOX_ACCENT_COLOR if side == "left" else BOX_BORDER_COLOR)
        borders.append(edge)
    tc_pr.append(borders)


def _set_cell_margins(cell, *, top: int, bottom: int, left: int, right: int) -> None:
    tc_pr = cell._tc.get_or_add_tcPr()
    tc_mar = OxmlElement("w:tcMar")
    for side, value in (("top", top), ("left", left), ("bottom", bottom), ("right", right)):
        node = OxmlElement(f"w:{side}")
        node.set(qn("w:w"), str(value))
        node.set(qn("w:type"), "dxa")
        tc_mar.append(node)
    tc_pr.append(tc_mar)


def _apply_table_profile(table, doc: Document, *, tighten: bool = True) -> None:
    tbl_pr = table._tbl.tblPr
    if tbl_pr is None:
        tbl_pr = OxmlElement("w:tblPr")
        table._tbl.insert(0, tbl_pr)

    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        tbl_pr.append(tbl_w)
    tbl_w.set(qn("w:type"), "pct")
    tbl_w.set(qn("w:w"), "5000")

    tbl_layout = tbl_pr.find(qn("w:tblLayout"))
    if tbl_layout is None:
        tbl_layout = OxmlElement("w:tblLayout")
        tbl_pr.append(tbl_layout)
    tbl_layout.set(qn("w:type"), "fixed")

    section = doc.sections[0]
    total_width_emu = int(section.page_width - section.left_margin - section.right_margin)
    total_twips = max(1, int(round(total_width_emu / 635.0)))

    col_count = len(table.columns) if table.columns else 0
    if col_count <= 0:
        return
    base = total_twips // col_count
    widths_twips = [base] * col_count
    widths_twips[-1] += total_twips - (base * col_count)
    widths_emu = [max(1, int(w * 635)) for w in widths_twips]

    for idx, col in enumerate(table.columns):
        col.width = widths_emu[idx]
    for row in table.rows:
        for idx, cell in enumerate(row.cells):
            cell.width = widths_emu[idx]
            if tighten:
                for paragraph in cell.paragraphs:
                    fmt = paragraph.paragraph_format
                    fmt.space_before = Pt(0)
                    fmt.space_after = Pt(0)


def _set_header_repeat(row) -> None:
    tr_pr = row._tr.get_or_add_trPr()
    if tr_pr.find(qn("w:tblHeader")) is None:
        header = OxmlElement("w:tblHeader")
        header.set(qn("w:val"), "true")
        tr_pr.append(header)
