"""
Bookmark target resolution over the pypdf object graph.

A bookmark points at its page in one of several equivalent encodings:
an explicit destination array, a name looked up in the catalog's /Dests
dictionary or /Names name tree, or a /GoTo action wrapping either of
those. Everything here is read-only.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pypdf import PdfReader
from pypdf.generic import (
    ArrayObject,
    ByteStringObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
)

from fracture_pdf.state import ResolvedTarget

logger = logging.getLogger(__name__)

TOP_OF_PAGE_EPSILON = 5

PageKey = tuple[int, int]


@dataclass(frozen=True)
class ExplicitDestination:
    array: ArrayObject


@dataclass(frozen=True)
class NamedDestination:
    name: str


Destination = ExplicitDestination | NamedDestination


def deref(obj: Any) -> Any:
    if isinstance(obj, IndirectObject):
        return obj.get_object()
    return obj


def decode_text(obj: Any) -> str | None:
    """Decode a PDF string or name to plain text; None for anything else."""
    obj = deref(obj)
    if isinstance(obj, NameObject):
        return obj[1:] if obj.startswith("/") else str(obj)
    if isinstance(obj, str):
        return str(obj)
    if isinstance(obj, ByteStringObject):
        return bytes(obj).decode("latin-1")
    return None


def page_key(ref: IndirectObject) -> PageKey:
    return (ref.idnum, ref.generation)


def page_index_by_ref(reader: PdfReader) -> dict[PageKey, int]:
    """Map each page's indirect reference to its 0-indexed position."""
    mapping: dict[PageKey, int] = {}
    for index, page in enumerate(reader.pages):
        ref = page.indirect_reference
        if ref is not None:
            mapping[page_key(ref)] = index
    return mapping


def page_height(reader: PdfReader, page_index: int) -> float:
    box = reader.pages[page_index].mediabox
    return float(box.top) - float(box.bottom)


def read_destination(value: Any) -> Destination | None:
    """Classify a raw /Dest or /D value."""
    value = deref(value)
    if isinstance(value, ArrayObject):
        return ExplicitDestination(value)
    if isinstance(value, DictionaryObject):
        # name tree and /Dests values may wrap the array as {/D [...]}
        inner = value.get("/D")
        if inner is None:
            return None
        inner = deref(inner)
        return ExplicitDestination(inner) if isinstance(inner, ArrayObject) else None
    name = decode_text(value)
    if name is None:
        return None
    return NamedDestination(name)


def destination_candidates(node: DictionaryObject) -> list[Destination]:
    """The node's /Dest and /GoTo action destinations, in that order."""
    found: list[Destination] = []
    raw = node.get("/Dest")
    if raw is not None:
        dest = read_destination(raw)
        if dest is not None:
            found.append(dest)

    action = deref(node.get("/A"))
    if isinstance(action, DictionaryObject) and deref(action.get("/S")) == "/GoTo":
        raw = action.get("/D")
        if raw is not None:
            dest = read_destination(raw)
            if dest is not None:
                found.append(dest)
    return found


def extract_destination(node: DictionaryObject) -> Destination | None:
    """Return the node's destination: /Dest first, then a /GoTo action."""
    candidates = destination_candidates(node)
    return candidates[0] if candidates else None


def find_in_name_tree(name: str, node: Any, _seen: set[int] | None = None) -> ArrayObject | None:
    """Depth-first search of a name tree for ``name``."""
    node = deref(node)
    if not isinstance(node, DictionaryObject):
        return None
    seen = _seen if _seen is not None else set()
    if id(node) in seen:
        logger.warning("Name tree loops back on itself while looking up %r", name)
        return None
    seen.add(id(node))

    names = deref(node.get("/Names"))
    if isinstance(names, ArrayObject):
        for i in range(0, len(names) - 1, 2):
            if decode_text(names[i]) != name:
                continue
            found = read_destination(names[i + 1])
            return found.array if isinstance(found, ExplicitDestination) else None

    kids = deref(node.get("/Kids"))
    if isinstance(kids, ArrayObject):
        for kid in kids:
            found = find_in_name_tree(name, kid, seen)
            if found is not None:
                return found
    return None


def resolve_named_destination(name: str, catalog: DictionaryObject) -> ArrayObject | None:
    """Look ``name`` up in /Dests, then in the /Names /Dests name tree."""
    dests = deref(catalog.get("/Dests"))
    if isinstance(dests, DictionaryObject):
        entry = dests.get(NameObject("/" + name))
        if entry is not None:
            found = read_destination(entry)
            if isinstance(found, ExplicitDestination):
                return found.array

    names = deref(catalog.get("/Names"))
    if not isinstance(names, DictionaryObject):
        return None
    tree = names.get("/Dests")
    if tree is None:
        return None
    return find_in_name_tree(name, tree)


def destination_array(dest: Destination, catalog: DictionaryObject) -> ArrayObject | None:
    if isinstance(dest, ExplicitDestination):
        return dest.array
    return resolve_named_destination(dest.name, catalog)


def _number(obj: Any) -> float | None:
    obj = deref(obj)
    if isinstance(obj, NullObject) or isinstance(obj, bool):
        return None
    if isinstance(obj, (int, float)):
        return float(obj)
    return None


def destination_top(array: ArrayObject) -> float | None:
    """Vertical coordinate carried by the destination, if its mode has one."""
    if len(array) < 2:
        return None
    mode = deref(array[1])
    if mode == "/XYZ" and len(array) >= 5:
        return _number(array[3])
    if mode == "/FitH" and len(array) >= 3:
        return _number(array[2])
    return None


def _target_page(array: ArrayObject, reader: PdfReader, page_map: dict[PageKey, int]) -> int | None:
    first = array[0]
    if isinstance(first, IndirectObject):
        return page_map.get(page_key(first))
    for index, page in enumerate(reader.pages):
        if page is first:
            return index
    return None


def resolve(
    node: DictionaryObject,
    reader: PdfReader,
    page_map: dict[PageKey, int],
) -> ResolvedTarget | None:
    """Resolve an outline item to its page and whether it lands at the page top."""
    catalog = reader.trailer["/Root"]
    array = None
    for dest in destination_candidates(node):
        array = destination_array(dest, catalog)
        if array is not None and len(array) > 0:
            break
        if isinstance(dest, NamedDestination):
            logger.debug("Named destination %r not found", dest.name)
        array = None
    if array is None:
        return None

    page_index = _target_page(array, reader, page_map)
    if page_index is None:
        return None

    top = destination_top(array)
    height = page_height(reader, page_index)
    at_top = top is None or top >= height - TOP_OF_PAGE_EPSILON
    return ResolvedTarget(page_index=page_index, at_top_of_page=at_top)
