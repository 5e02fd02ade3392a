"""
Per-segment output: sub-document PDF, cropped markdown and, when
enrichment is on, the validated reference list.

Segments are processed one after another. Existing files are never
overwritten: a name clash stops the run.
"""

import logging
from pathlib import Path

from fracture_pdf.errors import OutputCollisionError
from fracture_pdf.pipeline.converter import TextConverter, build_converter
from fracture_pdf.pipeline.enricher import enrich_segment
from fracture_pdf.pipeline.filenames import safe_basename, segment_filename
from fracture_pdf.pipeline.headings import first_heading, trim_to_section
from fracture_pdf.pipeline.pages import crop_margins, extract_page_range
from fracture_pdf.state import Segment

logger = logging.getLogger(__name__)


def segment_basename(segment: Segment, options, markdown: str | None = None) -> str:
    """Base name from the bookmark path, or from the rendered first heading."""
    entry = segment.entry
    if options.name_from_heading and markdown is not None:
        heading = first_heading(markdown)
        if heading:
            return safe_basename([heading], entry.title, segment.index, options.max_basename_length)
    return safe_basename(
        list(entry.path_names),
        entry.title,
        segment.index,
        options.max_basename_length,
    )


def _ensure_absent(paths: list[Path]) -> None:
    for path in paths:
        if path.exists():
            raise OutputCollisionError(str(path))


def _write_new(path: Path, data: bytes) -> None:
    try:
        with open(path, "xb") as fh:
            fh.write(data)
    except FileExistsError as exc:
        raise OutputCollisionError(str(path)) from exc


def write_segments(
    state: dict,
    converter: TextConverter | None = None,
    client=None,
) -> dict:
    """Extract, convert, align and persist every non-empty segment."""
    segments: list[Segment] = state.get("segments", [])
    if not segments:
        return {"written": []}

    options = state["options"]
    reader = state["reader"]
    converter = converter or build_converter(options)
    out_dir = Path(options.output_dir) / Path(state["pdf_path"]).stem

    written: list[str] = []
    for segment in segments:
        entry = segment.entry
        if segment.is_degenerate:
            logger.debug("Skipping empty segment %d %r", segment.index, entry.title)
            continue

        logger.info("Segment %d %r: pages %d-%d", segment.index, entry.title,
                    segment.start_page + 1, segment.end_page + 1)
        pdf_bytes = extract_page_range(reader, segment.start_page, segment.end_page)
        raw_text = converter.convert(crop_margins(pdf_bytes, options.header_footer_margin_ratio))

        next_title = None
        if options.nesting == "flat" and segment.next_entry is not None:
            next_title = segment.next_entry.title
        text = trim_to_section(raw_text, entry.title, options.anchor_distance_ratio, next_title)

        name = segment_filename(segment.index, segment_basename(segment, options, text),
                                options.index_padding)
        pdf_path = out_dir / f"{name}.pdf"
        md_path = out_dir / f"{name}.md"
        json_path = out_dir / f"{name}.json"
        targets = [pdf_path, md_path] + ([json_path] if options.enrich is not None else [])
        _ensure_absent(targets)

        out_dir.mkdir(parents=True, exist_ok=True)
        _write_new(pdf_path, pdf_bytes)
        _write_new(md_path, text.encode("utf-8"))
        if options.enrich is not None:
            enrich_segment(text, json_path, options.enrich, client)
        written.extend(str(p) for p in targets)

    logger.info("Wrote %d files to %s", len(written), out_dir)
    return {"written": written}
