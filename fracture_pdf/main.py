"""CLI entry point for splitting PDFs along their bookmarks."""

import argparse
import logging
import sys
import time
from pathlib import Path

from pydantic import ValidationError

from fracture_pdf.config import EnrichOptions, SplitOptions
from fracture_pdf.errors import ConfigError, OutputCollisionError
from fracture_pdf.manifest import load_manifest
from fracture_pdf.pipeline.loader import load_document
from fracture_pdf.pipeline.segmenter import segment_document
from fracture_pdf.pipeline.writer import write_segments

logger = logging.getLogger(__name__)


def run_pipeline(pdf_path: str, options: SplitOptions, converter=None, client=None) -> dict:
    """Split one PDF, return final state."""
    state: dict = {"pdf_path": pdf_path, "options": options, "entries": [], "segments": [], "written": []}

    state.update(load_document(state))
    state.update(segment_document(state))
    state.update(write_segments(state, converter=converter, client=client))

    return state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fracture-pdf",
        description="Split PDFs by bookmark hierarchy.",
    )
    parser.add_argument("files", nargs="*", help="PDF file(s) to split")
    parser.add_argument("--manifest", "-m", help="JSON manifest of files with per-file overrides")
    parser.add_argument("--start", "-s", type=int,
                        help="bookmark depth to start splitting from (1-indexed)")
    parser.add_argument("--end", "-e", type=int, default=0,
                        help="bookmark depth to end at (0 = deepest)")
    parser.add_argument("--output", "-o", help="output directory (default: .)")
    parser.add_argument("--margin-ratio", type=float,
                        help="fraction of page height cropped at top and bottom before conversion")
    parser.add_argument("--anchor-distance-ratio", type=float,
                        help="max edit distance ratio when matching bookmark titles to headings")
    parser.add_argument("--max-basename-length", type=int)
    parser.add_argument("--index-padding", type=int, help="digits in the filename index prefix")
    parser.add_argument("--nesting", choices=["flat", "nested"],
                        help="flat: segments end at the next bookmark; "
                             "nested: at the next bookmark of equal or shallower depth")
    parser.add_argument("--name-from-heading", action="store_true", default=None,
                        help="name segments after the converted text's first heading")
    parser.add_argument("--converter", choices=["docling", "pdfplumber", "command"])
    parser.add_argument("--converter-command",
                        help="external converter, called as: <command> <input.pdf> <output.md>")
    parser.add_argument("--enrich", action="store_true",
                        help="extract references from each segment with an LLM")
    parser.add_argument("--prompt", help="prompt template containing <INPUT>")
    parser.add_argument("--model", help="model used for enrichment")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def _options_from_args(args: argparse.Namespace) -> SplitOptions:
    values = {
        "start_depth": args.start if args.start is not None else 1,
        "end_depth": args.end,
        "output_dir": args.output,
        "header_footer_margin_ratio": args.margin_ratio,
        "anchor_distance_ratio": args.anchor_distance_ratio,
        "max_basename_length": args.max_basename_length,
        "index_padding": args.index_padding,
        "nesting": args.nesting,
        "name_from_heading": args.name_from_heading,
        "converter": args.converter,
        "converter_command": args.converter_command,
    }
    try:
        if args.enrich:
            enrich = {"prompt_path": args.prompt, "model": args.model}
            values["enrich"] = EnrichOptions(**{k: v for k, v in enrich.items() if v is not None})
        return SplitOptions(**{k: v for k, v in values.items() if v is not None})
    except (ValidationError, ValueError) as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("pypdf").setLevel(logging.ERROR)

    if not args.files and not args.manifest:
        parser.error("give at least one PDF file or --manifest")
    if args.files and args.start is None:
        parser.error("--start is required when files are given on the command line")

    try:
        base = _options_from_args(args)
        jobs = [(Path(f), base) for f in args.files]
        if args.manifest:
            jobs.extend(load_manifest(args.manifest, base))
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    start = time.time()
    failures = 0
    files_written = 0
    try:
        for pdf_path, options in jobs:
            resolved = pdf_path.resolve()
            if not resolved.exists():
                logger.error("File not found: %s", resolved)
                failures += 1
                continue
            try:
                state = run_pipeline(str(resolved), options)
            except OutputCollisionError:
                raise
            except Exception:
                logger.exception("Error processing %s", resolved)
                failures += 1
                continue
            files_written += len(state["written"])
    except OutputCollisionError as exc:
        logger.error("%s; stopping.", exc)
        return 1

    logger.info("Done: %d files from %d documents (%.1fs), %d failed",
                files_written, len(jobs), time.time() - start, failures)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
