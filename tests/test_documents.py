"""Document editor operation tests."""

from __future__ import annotations

import io

import fitz
import pikepdf
import pytest
from reportlab.lib.units import mm

from modules.pipelines import documents
from modules.pipelines.pdf_tools import NamedFile
from modules.utils.errors import ProcessingError, ValidationError


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("bold", "Hello **world**!"),
        ("italic", "Hello *world*!"),
        ("underline", "Hello <u>world</u>!"),
    ],
)
def test_apply_formatting_wraps_selection(fmt, expected):
    assert documents.apply_formatting("Hello world!", 6, 11, fmt) == expected


def test_apply_formatting_accepts_reversed_selection():
    assert documents.apply_formatting("abc", 3, 1, "bold") == "a**bc**"


def test_apply_formatting_empty_selection():
    with pytest.raises(ValidationError, match="Please select text to format"):
        documents.apply_formatting("abc", 2, 2, "bold")


def test_apply_formatting_unknown_format():
    with pytest.raises(ValidationError):
        documents.apply_formatting("abc", 0, 1, "strike")


def test_insert_list_items():
    assert documents.insert_list("ab", 1) == "a• New item\nb"
    assert documents.insert_list("ab", 99, ordered=True) == "ab1. New item\n"


def test_load_document_uses_stem_as_title():
    document = documents.load_document(NamedFile("meeting notes.txt", "line one\nline two".encode()))
    assert document.title == "meeting notes"
    assert document.content == "line one\nline two"


def test_load_document_rejects_binary():
    with pytest.raises(ProcessingError):
        documents.load_document(NamedFile("image.txt", b"\xff\xfe\x00\x81"))


def test_export_text():
    output = documents.export_text(documents.Document(title="Plan", content="step 1"))
    assert output.name == "Plan.txt"
    assert output.data == b"step 1"


def test_export_blank_title_falls_back():
    output = documents.export_text(documents.Document(title="  ", content=""))
    assert output.name == "Untitled Document.txt"


def test_export_pdf_paginates_long_content():
    content = "\n".join(f"Line {index}" for index in range(200))
    output = documents.export_pdf(documents.Document(title="Long", content=content, font_family="Courier New"))

    assert output.name == "Long.pdf"
    with pikepdf.open(io.BytesIO(output.data)) as pdf:
        assert len(pdf.pages) > 1


def test_export_word_escapes_markup():
    output = documents.export_word(
        documents.Document(title="A & B", content="<script>\nnext", text_align="center")
    )
    markup = output.data.decode("utf-8")

    assert output.name == "A & B.doc"
    assert "<title>A &amp; B</title>" in markup
    assert "&lt;script&gt;<br>next" in markup
    assert "text-align: center" in markup


def body_lines(output: NamedFile) -> list:
    """Body lines on the first page as (x0, x1, text), top to bottom."""
    with fitz.open(stream=output.data, filetype="pdf") as pdf:
        words = pdf[0].get_text("words", sort=True)
    title_bottom = min(word[3] for word in words)
    lines = {}
    for x0, y0, x1, _, text, *_ in words:
        if y0 > title_bottom:
            lines.setdefault(round(y0), []).append((x0, x1, text))
    return [
        (min(x0 for x0, _, _ in row), max(x1 for _, x1, _ in row), " ".join(text for _, _, text in row))
        for _, row in sorted(lines.items())
    ]


LEFT_EDGE = documents.PAGE_MARGIN_MM * mm
RIGHT_EDGE = (documents.PAGE_MARGIN_MM + documents.BODY_WIDTH_MM) * mm


@pytest.mark.parametrize(
    "align, check",
    [
        ("left", lambda x0, x1: abs(x0 - LEFT_EDGE) < 1),
        ("right", lambda x0, x1: abs(x1 - RIGHT_EDGE) < 1),
        ("center", lambda x0, x1: abs((x0 + x1) / 2 - (LEFT_EDGE + RIGHT_EDGE) / 2) < 1),
    ],
)
def test_export_pdf_aligns_short_line(align, check):
    output = documents.export_pdf(documents.Document(title="T", content="Hi", text_align=align))

    [(x0, x1, text)] = body_lines(output)
    assert text == "Hi"
    assert check(x0, x1)


def test_export_pdf_justify_fills_all_but_last_line():
    content = " ".join(["word"] * 60)
    justified = body_lines(documents.export_pdf(documents.Document(title="T", content=content, text_align="justify")))
    ragged = body_lines(documents.export_pdf(documents.Document(title="T", content=content)))

    assert len(justified) == len(ragged) > 1
    for x0, x1, _ in justified[:-1]:
        assert abs(x0 - LEFT_EDGE) < 1
        assert abs(x1 - RIGHT_EDGE) < 1
    assert justified[-1][1] < RIGHT_EDGE - 1
    assert ragged[0][1] < justified[0][1] - 1
