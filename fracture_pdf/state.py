"""
Shared types for the splitting pipeline.
"""

from dataclasses import dataclass
from typing import Any, TypedDict


@dataclass(frozen=True)
class ResolvedTarget:
    page_index: int          # 0-indexed
    at_top_of_page: bool


@dataclass(frozen=True)
class BookmarkEntry:
    title: str
    page_index: int          # 0-indexed
    at_top_of_page: bool
    depth: int               # 1-indexed outline nesting
    path_names: tuple[str, ...]  # ancestors inside the depth window, then title


@dataclass(frozen=True)
class Segment:
    index: int
    start_page: int
    end_page: int            # inclusive
    entry: BookmarkEntry
    next_entry: BookmarkEntry | None

    @property
    def is_degenerate(self) -> bool:
        return self.start_page > self.end_page


@dataclass(frozen=True)
class HeadingToken:
    text: str
    level: int               # 1 = most prominent
    position: int            # index into the block sequence
    line: int                # first source line


class DocumentState(TypedDict, total=False):
    pdf_path: str
    options: Any             # config.SplitOptions
    reader: Any              # pypdf.PdfReader
    page_count: int
    entries: list[BookmarkEntry]
    segments: list[Segment]
    written: list[str]
