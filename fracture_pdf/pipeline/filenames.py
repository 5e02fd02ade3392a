"""
Filesystem-safe names for output segments.
"""

import re

DEFAULT_MAX_BASENAME_LENGTH = 200
PLACEHOLDER = "untitled"

_RESERVED_RE = re.compile(r'[/\\:*?"<>|]')


def sanitize(name: str) -> str:
    return _RESERVED_RE.sub("_", name).strip() or PLACEHOLDER


def safe_basename(
    parts: list[str],
    fallback: str,
    index: int,
    max_length: int = DEFAULT_MAX_BASENAME_LENGTH,
) -> str:
    """Join sanitized ``parts`` with underscores, bounded to ``max_length``.

    Over-long names are cut so that ``_NN`` (``index`` zero-padded to two
    digits) brings them back to exactly ``max_length``. Indices of 100 and
    above widen the suffix past the bound and two such names can share a
    prefix; callers needing uniqueness rely on the index prefix from
    segment_filename.
    """
    name = "_".join(sanitize(p) for p in parts) or sanitize(fallback)
    if len(name) <= max_length:
        return name
    return f"{name[:max_length - 3]}_{index:02d}"


def segment_filename(index: int, basename: str, padding: int) -> str:
    return f"{index:0{padding}d}_{basename}"
