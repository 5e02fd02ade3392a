"""Pytest configuration and shared fixtures for fracture-pdf tests."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from pdf_factory import FakeConverter, write_outlined_pdf


@pytest.fixture
def fake_converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def two_chapter_pdf(tmp_path: Path) -> Path:
    """Ten blank pages; "Chapter 1" on page 0 and "Chapter 2" on page 5."""
    return write_outlined_pdf(
        tmp_path / "book.pdf", 10, [("Chapter 1", 0), ("Chapter 2", 5)]
    )


@pytest.fixture
def converter_script(tmp_path: Path) -> Callable[[str], str]:
    """Write a converter script and return the command line that runs it.

    The script body sees ``sys`` and ``pathlib``; ``sys.argv[1]`` is the
    input PDF and ``sys.argv[2]`` the output path.
    """

    def make(body: str) -> str:
        script = tmp_path / "convert.py"
        script.write_text("import sys, pathlib\n" + body, encoding="utf-8")
        return f'"{sys.executable}" "{script}"'

    return make
