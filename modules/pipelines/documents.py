"""Plain-text document editing and export."""

from __future__ import annotations

import html
import io
from dataclasses import dataclass
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from modules.pipelines.pdf_tools import NamedFile
from modules.utils.errors import ProcessingError, ValidationError

FORMAT_MARKERS = {
    "bold": ("**", "**"),
    "italic": ("*", "*"),
    "underline": ("<u>", "</u>"),
}

# Built-in PDF fonts standing in for the editor's font families.
PDF_FONTS = {
    "arial": "Helvetica",
    "helvetica": "Helvetica",
    "times new roman": "Times-Roman",
    "georgia": "Times-Roman",
    "courier new": "Courier",
}

TEXT_ALIGNMENTS = ("left", "center", "right", "justify")
TITLE_FONT_SIZE = 18
PAGE_MARGIN_MM = 20
BODY_WIDTH_MM = 170


@dataclass(frozen=True, slots=True)
class Document:
    """Editable plain-text document."""

    title: str = "Untitled Document"
    content: str = ""
    font_family: str = "Arial"
    font_size: int = 14
    text_align: str = "left"


def apply_formatting(content: str, start: int, end: int, fmt: str) -> str:
    """Wrap ``content[start:end]`` in the markers for ``fmt``."""
    try:
        opening, closing = FORMAT_MARKERS[fmt]
    except KeyError as exc:
        raise ValidationError(f"Unknown format '{fmt}'.") from exc
    start, end = sorted((max(0, start), min(len(content), end)))
    if start == end:
        raise ValidationError("Please select text to format")
    selected = content[start:end]
    return f"{content[:start]}{opening}{selected}{closing}{content[end:]}"


def insert_list(content: str, position: int, ordered: bool = False) -> str:
    item = "1. New item\n" if ordered else "• New item\n"
    position = max(0, min(len(content), position))
    return content[:position] + item + content[position:]


def load_document(source: NamedFile) -> Document:
    """Read a text upload; the title is the file name without its extension."""
    try:
        text = source.data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProcessingError(f"{source.name} is not a UTF-8 text file.") from exc
    return Document(title=Path(source.name).stem, content=text)


def _filename(document: Document, suffix: str) -> str:
    title = document.title.strip() or "Untitled Document"
    return f"{title}{suffix}"


def export_text(document: Document) -> NamedFile:
    return NamedFile(_filename(document, ".txt"), document.content.encode("utf-8"))


def _draw_line(pdf: canvas.Canvas, line: str, y: float, align: str, font: str, size: int, last: bool) -> None:
    left = PAGE_MARGIN_MM * mm
    width = BODY_WIDTH_MM * mm
    if align == "center":
        pdf.drawCentredString(left + width / 2, y, line)
    elif align == "right":
        pdf.drawRightString(left + width, y, line)
    elif align == "justify" and not last and line.count(" "):
        # Spread the spare width over the gaps; a paragraph's last line stays ragged.
        spare = width - stringWidth(line, font, size)
        text = pdf.beginText(left, y)
        text.setFont(font, size)
        text.setWordSpace(spare / line.count(" "))
        text.textLine(line)
        pdf.drawText(text)
    else:
        pdf.drawString(left, y, line)


def export_pdf(document: Document) -> NamedFile:
    """Render the title and the wrapped body onto A4 pages in the chosen alignment."""
    font = PDF_FONTS.get(document.font_family.lower(), "Helvetica")
    align = document.text_align if document.text_align in TEXT_ALIGNMENTS else "left"
    _, page_height = A4
    bottom = PAGE_MARGIN_MM * mm
    leading = document.font_size * 1.2

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(document.title)
    pdf.setFont(font, TITLE_FONT_SIZE)
    title_align = "left" if align == "justify" else align
    _draw_line(pdf, document.title, page_height - 30 * mm, title_align, font, TITLE_FONT_SIZE, True)

    pdf.setFont(font, document.font_size)
    y = page_height - 50 * mm
    for paragraph in document.content.split("\n"):
        lines = simpleSplit(paragraph, font, document.font_size, BODY_WIDTH_MM * mm) or [""]
        for index, line in enumerate(lines):
            if y < bottom:
                pdf.showPage()
                pdf.setFont(font, document.font_size)
                y = page_height - PAGE_MARGIN_MM * mm
            _draw_line(pdf, line, y, align, font, document.font_size, index == len(lines) - 1)
            y -= leading
    pdf.save()
    return NamedFile(_filename(document, ".pdf"), buffer.getvalue())


def export_word(document: Document) -> NamedFile:
    """Write an HTML document with a .doc name, which Word opens as a document."""
    title = html.escape(document.title)
    body = html.escape(document.content).replace("\n", "<br>")
    markup = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{
      font-family: {document.font_family};
      font-size: {document.font_size}px;
      text-align: {document.text_align};
      margin: 1in;
      line-height: 1.5;
    }}
    h1 {{ font-size: 24px; margin-bottom: 20px; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  <div>{body}</div>
</body>
</html>
"""
    return NamedFile(_filename(document, ".doc"), markup.encode("utf-8"))