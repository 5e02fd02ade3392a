"""Builders for small in-memory and on-disk PDFs used across the tests."""

import io
from collections.abc import Callable
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.generic import DictionaryObject, NameObject, TextStringObject

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def blank_pdf_bytes(pages: int, height: float = PAGE_HEIGHT) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=PAGE_WIDTH, height=height)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def blank_reader(pages: int = 4, height: float = PAGE_HEIGHT) -> PdfReader:
    return PdfReader(io.BytesIO(blank_pdf_bytes(pages, height)))


def outline_item(title: str | None, dest=None, action=None, children=()) -> DictionaryObject:
    """Build an in-memory outline item, linking children through /First and /Next."""
    item = DictionaryObject()
    if title is not None:
        item[NameObject("/Title")] = TextStringObject(title)
    if dest is not None:
        item[NameObject("/Dest")] = dest
    if action is not None:
        item[NameObject("/A")] = action
    children = list(children)
    link_siblings(children)
    if children:
        item[NameObject("/First")] = children[0]
    return item


def link_siblings(items: list[DictionaryObject]) -> None:
    for cur, nxt in zip(items, items[1:]):
        cur[NameObject("/Next")] = nxt


def write_outlined_pdf(path: Path, pages: int, bookmarks: list) -> Path:
    """Write a PDF with blank pages and an outline.

    ``bookmarks`` holds ``(title, page)`` or ``(title, page, children)``
    tuples, nested the same way.
    """
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)

    def add(items, parent=None):
        for item in items:
            node = writer.add_outline_item(item[0], item[1], parent=parent)
            if len(item) > 2:
                add(item[2], node)

    add(bookmarks)
    with open(path, "wb") as fh:
        writer.write(fh)
    return path


def page_count(pdf: bytes | Path) -> int:
    source = io.BytesIO(pdf) if isinstance(pdf, bytes) else str(pdf)
    return len(PdfReader(source).pages)


class FakeConverter:
    """Returns canned markdown and records how many pages each call received."""

    def __init__(self, render: Callable[[bytes], str] | None = None) -> None:
        self.calls: list[int] = []
        self._render = render

    def convert(self, pdf_bytes: bytes) -> str:
        pages = page_count(pdf_bytes)
        self.calls.append(pages)
        if self._render is not None:
            return self._render(pdf_bytes)
        return f"# Converted\n\n{pages} pages"
