"""
PDF-to-text converters.

Every converter takes the bytes of a standalone PDF and returns its text
rendering. Docling yields markdown with headings; pdfplumber yields plain
text; the command converter hands the PDF to an external program that
writes its output to a file.
"""

import io
import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

import pdfplumber

from fracture_pdf.config import SplitOptions
from fracture_pdf.errors import ConversionError

logger = logging.getLogger(__name__)

_STDERR_TAIL = 2000


class TextConverter(Protocol):
    def convert(self, pdf_bytes: bytes) -> str: ...


class DoclingConverter:
    """Markdown through Docling's layout model."""

    def __init__(self) -> None:
        self._converter = None

    def convert(self, pdf_bytes: bytes) -> str:
        from docling.datamodel.base_models import DocumentStream
        from docling.document_converter import DocumentConverter

        if self._converter is None:
            self._converter = DocumentConverter()
        stream = DocumentStream(name="segment.pdf", stream=io.BytesIO(pdf_bytes))
        doc = self._converter.convert(stream).document
        return doc.export_to_markdown()


class PdfplumberConverter:
    """Plain text per page. No headings, so sections are never cropped."""

    def convert(self, pdf_bytes: bytes) -> str:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            pages = [(page.extract_text() or "").strip() for page in pdf.pages]
        return "\n\n".join(p for p in pages if p)


class CommandConverter:
    """Runs ``<command> <input.pdf> <output.md>`` and reads the output file."""

    def __init__(self, command: str) -> None:
        self.argv = shlex.split(command)
        if not self.argv:
            raise ValueError("Empty converter command")

    def convert(self, pdf_bytes: bytes) -> str:
        with tempfile.TemporaryDirectory(prefix="fracture-") as tmp:
            input_path = Path(tmp) / "segment.pdf"
            output_path = Path(tmp) / "segment.md"
            input_path.write_bytes(pdf_bytes)

            argv = [*self.argv, str(input_path), str(output_path)]
            logger.debug("Running converter: %s", shlex.join(argv))
            try:
                result = subprocess.run(argv, capture_output=True, text=True, check=False)
            except OSError as exc:
                raise ConversionError(f"Converter could not start: {exc}") from exc

            if result.returncode != 0:
                raise ConversionError(
                    f"Converter exited with status {result.returncode}",
                    {"stderr": result.stderr[-_STDERR_TAIL:]},
                )
            if not output_path.exists():
                raise ConversionError(f"Converter produced no output file: {output_path.name}")
            return output_path.read_text(encoding="utf-8")


def build_converter(options: SplitOptions) -> TextConverter:
    if options.converter == "command":
        return CommandConverter(options.converter_command or "")
    if options.converter == "pdfplumber":
        return PdfplumberConverter()
    return DoclingConverter()
