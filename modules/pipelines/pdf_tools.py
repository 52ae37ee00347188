"""PDF page assembly, splitting and conversion."""

from __future__ import annotations

import io
import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import fitz  # PyMuPDF
import pikepdf
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from modules.utils.errors import ProcessingError, ValidationError
from modules.utils.image_utils import fit_within, load_rgba

logger = logging.getLogger(__name__)

RENDER_SCALE = 2.0
IMAGE_MARGIN_MM = 10
IMAGE_MAX_WIDTH_MM = 190
IMAGE_MAX_HEIGHT_MM = 270


@dataclass(slots=True)
class NamedFile:
    """An in-memory file: uploaded input or downloadable output."""

    name: str
    data: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> "NamedFile":
        source = Path(path)
        return cls(name=source.name, data=source.read_bytes())

    @property
    def stem(self) -> str:
        return Path(self.name).stem

    @property
    def size_mb(self) -> float:
        return len(self.data) / 1024 / 1024


@dataclass(slots=True)
class BatchResult:
    """Outputs of a multi-file operation plus per-file problems."""

    files: List[NamedFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)


def parse_page_range(page_range: str, total_pages: int) -> Tuple[int, int]:
    """Parse "start-end" (1-based, inclusive) into zero-based indices.

    A single number selects one page.
    """
    text = (page_range or "").strip()
    parts = [part.strip() for part in text.split("-")]
    if len(parts) == 1:
        parts = [parts[0], parts[0]]
    if len(parts) != 2:
        raise ValidationError(f"Invalid page range '{page_range}'. Use the form start-end.")
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ValidationError(f"Invalid page range '{page_range}'. Use the form start-end.") from exc
    if start < 1 or end > total_pages or start > end:
        raise ValidationError(f"Invalid page range '{page_range}'. Total pages: {total_pages}")
    return start - 1, end - 1


def _open_pdf(source: NamedFile) -> pikepdf.Pdf:
    try:
        return pikepdf.open(io.BytesIO(source.data))
    except pikepdf.PdfError as exc:
        raise ProcessingError(f"Could not read {source.name}: {exc}") from exc


def _save(pdf: pikepdf.Pdf, **kwargs) -> bytes:
    buffer = io.BytesIO()
    pdf.save(buffer, **kwargs)
    return buffer.getvalue()


def split_pdfs(sources: Sequence[NamedFile], page_range: str) -> BatchResult:
    """Extract the same page range from every file.

    A file whose range is invalid (or that cannot be read) is reported in
    ``errors`` and skipped; the remaining files are still processed.
    """
    result = BatchResult()
    for source in sources:
        try:
            with _open_pdf(source) as pdf:
                start, end = parse_page_range(page_range, len(pdf.pages))
                extracted = pikepdf.Pdf.new()
                for index in range(start, end + 1):
                    extracted.pages.append(pdf.pages[index])
                data = _save(extracted)
        except (ValidationError, ProcessingError) as exc:
            logger.warning("Split skipped %s: %s", source.name, exc)
            result.errors.append(f"{source.name}: {exc}")
            continue
        result.files.append(NamedFile(f"{source.stem}_pages_{start + 1}-{end + 1}.pdf", data))
    return result


def merge_pdfs(sources: Sequence[NamedFile], output_name: str = "merged_document.pdf") -> NamedFile:
    """Concatenate all pages of every file, in order."""
    if len(sources) < 2:
        raise ValidationError("Please select at least 2 PDF files to merge")

    with ExitStack() as stack:
        merged = stack.enter_context(pikepdf.Pdf.new())
        for source in sources:
            pdf = stack.enter_context(_open_pdf(source))
            merged.pages.extend(pdf.pages)
        data = _save(merged)
    return NamedFile(output_name, data)


def normalize_rotation(angle: int | str) -> int:
    """Return the angle as 0, 90, 180 or 270."""
    try:
        value = int(angle)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid rotation angle '{angle}'.") from exc
    if value % 90:
        raise ValidationError("Rotation must be a multiple of 90 degrees.")
    return value % 360


def rotate_pdfs(sources: Sequence[NamedFile], angle: int | str) -> BatchResult:
    """Set the rotation of every page of every file."""
    rotation = normalize_rotation(angle)
    result = BatchResult()
    for source in sources:
        try:
            with _open_pdf(source) as pdf:
                for page in pdf.pages:
                    page.rotate(rotation, relative=False)
                data = _save(pdf)
        except ProcessingError as exc:
            logger.warning("Rotate skipped %s: %s", source.name, exc)
            result.errors.append(str(exc))
            continue
        result.files.append(NamedFile(f"{source.stem}_rotated_{rotation}.pdf", data))
    return result


def compress_pdfs(sources: Sequence[NamedFile]) -> BatchResult:
    """Re-save each file with compressed streams and object streams."""
    result = BatchResult()
    for source in sources:
        try:
            with _open_pdf(source) as pdf:
                data = _save(
                    pdf,
                    compress_streams=True,
                    object_stream_mode=pikepdf.ObjectStreamMode.generate,
                )
        except ProcessingError as exc:
            logger.warning("Compress skipped %s: %s", source.name, exc)
            result.errors.append(str(exc))
            continue
        output = NamedFile(f"{source.stem}_compressed.pdf", data)
        result.files.append(output)
        result.notes.append(
            f"Compressed {source.name}: {source.size_mb:.2f}MB → {output.size_mb:.2f}MB"
        )
    return result


def pdf_to_images(source: NamedFile, scale: float = RENDER_SCALE) -> BatchResult:
    """Render every page to PNG; pages that fail are reported and skipped."""
    try:
        document = fitz.open(stream=source.data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise ProcessingError(f"Failed to convert PDF: {exc}") from exc

    result = BatchResult()
    matrix = fitz.Matrix(scale, scale)
    with document:
        for index, page in enumerate(document, start=1):
            try:
                pixmap = page.get_pixmap(matrix=matrix)
                png = pixmap.tobytes("png")
            except (RuntimeError, ValueError) as exc:
                logger.warning("Page %d of %s failed to render: %s", index, source.name, exc)
                result.errors.append(f"Failed to convert page {index} of {source.name}")
                continue
            result.files.append(NamedFile(f"{source.stem}_page_{index:03d}.png", png))

    if not result.files:
        raise ProcessingError("Failed to convert PDF: No pages could be converted")
    return result


def images_to_pdf(sources: Iterable[NamedFile], output_name: str = "converted_images.pdf") -> NamedFile:
    """Place each image on its own A4 page, scaled to fit inside the margins."""
    images = list(sources)
    if not images:
        raise ValidationError("Please select files to convert")

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    _, page_height = A4
    for source in images:
        image = load_rgba(source.data).convert("RGB")
        width_mm, height_mm = fit_within(image.size, IMAGE_MAX_WIDTH_MM, IMAGE_MAX_HEIGHT_MM)
        x = IMAGE_MARGIN_MM * mm
        y = page_height - (IMAGE_MARGIN_MM + height_mm) * mm
        pdf.drawImage(ImageReader(image), x, y, width=width_mm * mm, height=height_mm * mm)
        pdf.showPage()
    pdf.save()
    return NamedFile(output_name, buffer.getvalue())
