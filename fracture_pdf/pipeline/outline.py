"""
Outline traversal: flatten the /First /Next bookmark tree into
BookmarkEntry records in document order, filtered to a depth window.
"""

import logging

from pypdf import PdfReader
from pypdf.generic import DictionaryObject

from fracture_pdf.pipeline.destinations import PageKey, deref, decode_text, page_index_by_ref, resolve
from fracture_pdf.state import BookmarkEntry

logger = logging.getLogger(__name__)


def decode_title(node: DictionaryObject) -> str:
    return decode_text(node.get("/Title")) or ""


def _in_window(depth: int, start_depth: int, end_depth: int) -> bool:
    return depth >= start_depth and (end_depth == 0 or depth <= end_depth)


def walk(
    first: DictionaryObject | None,
    reader: PdfReader,
    page_map: dict[PageKey, int],
    start_depth: int = 1,
    end_depth: int = 0,
) -> list[BookmarkEntry]:
    """Pre-order walk of the sibling chain starting at ``first``.

    ``end_depth`` of 0 means no lower limit on nesting. Each entry's
    ``path_names`` holds the ancestor titles from ``start_depth`` down,
    followed by its own title.
    """
    out: list[BookmarkEntry] = []
    _walk_siblings(first, reader, page_map, 1, [], start_depth, end_depth, out, set())
    return out


def _walk_siblings(
    node,
    reader: PdfReader,
    page_map: dict[PageKey, int],
    depth: int,
    path_stack: list[str],
    start_depth: int,
    end_depth: int,
    out: list[BookmarkEntry],
    seen: set[int],
) -> None:
    node = deref(node)
    while isinstance(node, DictionaryObject):
        if id(node) in seen:
            logger.warning("Outline item visited twice at depth %d, stopping this branch", depth)
            return
        seen.add(id(node))

        title = decode_title(node)
        target = resolve(node, reader, page_map)
        if target is None:
            logger.debug("Dropping unresolvable bookmark %r", title)
        elif _in_window(depth, start_depth, end_depth):
            out.append(BookmarkEntry(
                title=title,
                page_index=target.page_index,
                at_top_of_page=target.at_top_of_page,
                depth=depth,
                path_names=tuple(path_stack[start_depth - 1:]) + (title,),
            ))

        child = deref(node.get("/First"))
        if isinstance(child, DictionaryObject):
            path_stack.append(title)
            _walk_siblings(child, reader, page_map, depth + 1, path_stack,
                           start_depth, end_depth, out, seen)
            path_stack.pop()

        node = deref(node.get("/Next"))


def has_outline(reader: PdfReader) -> bool:
    return "/Outlines" in reader.trailer["/Root"]


def collect_entries(reader: PdfReader, start_depth: int, end_depth: int) -> list[BookmarkEntry]:
    """Resolve every bookmark in the document within the depth window."""
    outlines = deref(reader.trailer["/Root"].get("/Outlines"))
    if not isinstance(outlines, DictionaryObject):
        return []
    first = deref(outlines.get("/First"))
    if not isinstance(first, DictionaryObject):
        return []
    return walk(first, reader, page_index_by_ref(reader), start_depth, end_depth)
