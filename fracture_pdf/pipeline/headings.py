"""
Aligns a bookmark title with a heading in converted markdown and crops the
markdown to that heading's section.

The bookmark outline and the converter's markdown are produced
independently, so titles are compared loosely: case, punctuation and
spacing are ignored and a bounded edit distance is accepted. A miss is
not an error; the text is returned untouched.
"""

import logging
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from rapidfuzz.distance import Levenshtein

from fracture_pdf.state import HeadingToken

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE_RATIO = 0.4

_NON_ALNUM_RE = re.compile(r"[\W_]+")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_md = MarkdownIt("commonmark")


@dataclass(frozen=True)
class Block:
    """A top-level markdown block and the source line it starts on."""
    kind: str
    line: int
    heading_level: int = 0
    text: str = ""

    @property
    def is_heading(self) -> bool:
        return self.heading_level > 0


def normalize_for_match(text: str) -> str:
    """Lowercase and keep only letters and digits."""
    return _NON_ALNUM_RE.sub("", text.lower()).strip()


def _line_offsets(text: str) -> list[int]:
    """Start offset of every source line, counting CRLF, CR and LF breaks."""
    return [0] + [m.end() for m in _LINE_BREAK_RE.finditer(text)]


def tokenize(text: str) -> list[Block]:
    tokens = _md.parse(text)
    blocks: list[Block] = []
    for i, tok in enumerate(tokens):
        if tok.level != 0 or tok.nesting == -1 or tok.map is None:
            continue
        if tok.type == "heading_open":
            inline = tokens[i + 1] if i + 1 < len(tokens) else None
            content = inline.content if inline is not None and inline.type == "inline" else ""
            blocks.append(Block("heading", tok.map[0], int(tok.tag[1:]), content))
        else:
            blocks.append(Block(tok.type, tok.map[0]))
    return blocks


def headings(blocks: list[Block]) -> list[HeadingToken]:
    return [
        HeadingToken(text=b.text, level=b.heading_level, position=i, line=b.line)
        for i, b in enumerate(blocks)
        if b.is_heading
    ]


def find_heading(
    blocks: list[Block],
    title: str,
    from_index: int = 0,
    max_distance_ratio: float = DEFAULT_MAX_DISTANCE_RATIO,
) -> int:
    """Index of the closest heading to ``title`` at or after ``from_index``, or -1."""
    target = normalize_for_match(title)
    best_index = -1
    best_distance = None
    for i in range(from_index, len(blocks)):
        block = blocks[i]
        if not block.is_heading:
            continue
        candidate = normalize_for_match(block.text)
        distance = Levenshtein.distance(candidate, target)
        if distance / max(len(candidate), len(target), 1) > max_distance_ratio:
            continue
        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_index = i
    return best_index


def _section_end(blocks: list[Block], start: int) -> int:
    level = blocks[start].heading_level
    for i in range(start + 1, len(blocks)):
        if blocks[i].is_heading and blocks[i].heading_level <= level:
            return i
    return len(blocks)


def trim_to_section(
    text: str,
    anchor_title: str,
    max_distance_ratio: float = DEFAULT_MAX_DISTANCE_RATIO,
    next_title: str | None = None,
) -> str:
    """Crop ``text`` to the section headed by the best match for ``anchor_title``.

    Without ``next_title`` the section runs to the next heading of the same
    or a more prominent level. With it, the section runs to the heading
    matching ``next_title`` (or to the end when that title is not found).
    """
    blocks = tokenize(text)
    start = find_heading(blocks, anchor_title, 0, max_distance_ratio)
    if start < 0:
        logger.debug("No heading match for %r", anchor_title)
        return text

    if next_title is None:
        end = _section_end(blocks, start)
    else:
        end = find_heading(blocks, next_title, start + 1, max_distance_ratio)
        if end < 0:
            end = len(blocks)
    logger.debug("Trimmed %r to blocks [%d, %d)", anchor_title, start, end)

    offsets = _line_offsets(text)
    first = offsets[blocks[start].line]
    last = offsets[blocks[end].line] if end < len(blocks) else len(text)
    return text[first:last].rstrip()


def first_heading(text: str) -> str | None:
    """Normalized text of the first heading, if the markdown has one."""
    found = headings(tokenize(text))
    if not found:
        return None
    return normalize_for_match(found[0].text)
