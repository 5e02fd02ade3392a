"""PDF page operations using pypdf.

Builds standalone documents from a page range of the source PDF, and
narrows a document's visible area to drop header and footer bands before
text conversion.
"""

import io
import logging
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.generic import RectangleObject

logger = logging.getLogger(__name__)


def open_document(path: str | Path) -> PdfReader:
    return PdfReader(str(path))


def _to_bytes(writer: PdfWriter) -> bytes:
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def extract_page_range(reader: PdfReader, start: int, end: int) -> bytes:
    """Copy pages ``start`` through ``end`` (inclusive, 0-indexed) into a new PDF.

    Raises:
        ValueError: If the range is empty or outside the document
    """
    total_pages = len(reader.pages)
    if start < 0 or end >= total_pages or start > end:
        raise ValueError(
            f"Page range {start}-{end} out of range (PDF has {total_pages} pages)"
        )

    writer = PdfWriter()
    for page_num in range(start, end + 1):
        writer.add_page(reader.pages[page_num])

    data = _to_bytes(writer)
    logger.debug("Extracted pages %d-%d (%d bytes)", start, end, len(data))
    return data


def crop_margins(pdf_bytes: bytes, ratio: float) -> bytes:
    """Shrink every page's CropBox by ``ratio`` of its height at top and bottom."""
    if ratio <= 0:
        return pdf_bytes

    reader = PdfReader(io.BytesIO(pdf_bytes))
    writer = PdfWriter()
    for page in reader.pages:
        box = page.cropbox
        left, bottom = float(box.left), float(box.bottom)
        right, top = float(box.right), float(box.top)
        height = top - bottom
        new_height = height * (1 - 2 * ratio)
        if new_height > 0:
            band = height * ratio
            page.cropbox = RectangleObject([left, bottom + band, right, top - band])
        writer.add_page(page)
    return _to_bytes(writer)
