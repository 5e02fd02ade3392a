"""
Turns resolved bookmark entries into inclusive page ranges.

Entries are ordered by page; on a shared page, mid-page anchors come
before top-of-page anchors. A segment ends where its boundary entry
starts: on the page before it when the boundary sits at the top of its
page, on the boundary's own page otherwise.
"""

import logging

from fracture_pdf.state import BookmarkEntry, Segment

logger = logging.getLogger(__name__)

NESTING_MODES = ("flat", "nested")


def sort_by_page_order(entries: list[BookmarkEntry]) -> list[BookmarkEntry]:
    """Return a new list in page order. Equal keys keep document order."""
    return sorted(entries, key=lambda e: (e.page_index, e.at_top_of_page))


def end_page(cur: BookmarkEntry, next_entry: BookmarkEntry | None, page_count: int) -> int:
    if next_entry is None:
        return page_count - 1
    if cur.page_index == next_entry.page_index:
        return next_entry.page_index
    return next_entry.page_index - 1 if next_entry.at_top_of_page else next_entry.page_index


def next_sibling_or_shallower(entries: list[BookmarkEntry], i: int) -> BookmarkEntry | None:
    depth = entries[i].depth
    for later in entries[i + 1:]:
        if later.depth <= depth:
            return later
    return None


def build_segments(
    entries: list[BookmarkEntry],
    page_count: int,
    nesting: str = "flat",
) -> list[Segment]:
    """Compute one segment per entry, in page order.

    ``flat`` closes each segment at the next entry in page order, so
    ranges never overlap. ``nested`` closes it at the next entry of the
    same or shallower depth, so a parent's range covers its children.
    Degenerate segments are kept in the list; callers skip them.
    """
    if nesting not in NESTING_MODES:
        raise ValueError(f"Unknown nesting mode: {nesting!r}")

    ordered = sort_by_page_order(entries)
    segments: list[Segment] = []
    for i, cur in enumerate(ordered):
        if nesting == "nested":
            boundary = next_sibling_or_shallower(ordered, i)
        else:
            boundary = ordered[i + 1] if i + 1 < len(ordered) else None
        segment = Segment(
            index=i,
            start_page=cur.page_index,
            end_page=end_page(cur, boundary, page_count),
            entry=cur,
            next_entry=boundary,
        )
        if segment.is_degenerate:
            logger.debug("Segment %d %r is empty (pages %d-%d)",
                         i, cur.title, segment.start_page, segment.end_page)
        segments.append(segment)
    return segments


def segment_document(state: dict) -> dict:
    """Pipeline stage: page-ordered segments for the loaded entries."""
    entries = state.get("entries", [])
    if not entries:
        return {"segments": []}
    segments = build_segments(entries, state["page_count"], state["options"].nesting)
    usable = sum(1 for s in segments if not s.is_degenerate)
    logger.info("Built %d segments (%d non-empty)", len(segments), usable)
    return {"segments": segments}
