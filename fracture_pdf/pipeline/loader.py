"""
PDF loading: page count and resolved bookmark entries via pypdf.
"""

import logging
from pathlib import Path

from fracture_pdf.pipeline.outline import collect_entries, has_outline
from fracture_pdf.pipeline.pages import open_document

logger = logging.getLogger(__name__)


def load_document(state: dict) -> dict:
    """Open the PDF and flatten its outline within the configured depth window."""
    pdf_path = state["pdf_path"]
    options = state["options"]
    path = Path(pdf_path)
    if not path.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")

    reader = open_document(path)
    page_count = len(reader.pages)
    logger.info("Loaded %s (%d pages)", path.name, page_count)

    if not has_outline(reader):
        logger.warning("No outlines in %s, skipping.", path.name)
        return {"reader": reader, "page_count": page_count, "entries": []}

    entries = collect_entries(reader, options.start_depth, options.end_depth)
    if not entries:
        logger.warning("No bookmarks in depth range for %s, skipping.", path.name)
    else:
        logger.info("Resolved %d bookmarks at depth %d-%s", len(entries),
                    options.start_depth, options.end_depth or "*")
    return {"reader": reader, "page_count": page_count, "entries": entries}
