"""Tests for LLM reference extraction with a stubbed client."""

import json
from types import SimpleNamespace

import pytest

from fracture_pdf.config import EnrichOptions
from fracture_pdf.errors import EnrichmentError
from fracture_pdf.pipeline.enricher import (
    MAX_ATTEMPTS,
    enrich_segment,
    extract_references,
    load_prompt,
)

MARKDOWN = "# Scope\n\nThis part follows ISO 9001:2015 and cites RFC 2119."


class StubClient:
    """Mimics ``anthropic.Anthropic().messages.create`` with queued replies."""

    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)
        self.requests: list[dict] = []
        self.messages = self

    def create(self, **kwargs):
        self.requests.append(kwargs)
        text = self.replies.pop(0)
        return SimpleNamespace(content=[SimpleNamespace(text=text)])


@pytest.fixture
def opts(tmp_path) -> EnrichOptions:
    prompt = tmp_path / "prompt.txt"
    prompt.write_text("List the references in:\n<INPUT>\nAnswer as JSON.", encoding="utf-8")
    return EnrichOptions(prompt_path=prompt, model="test-model")


class TestLoadPrompt:
    def test_substitutes_placeholder(self, opts) -> None:
        prompt = load_prompt(opts.prompt_path, "BODY")
        assert prompt == "List the references in:\nBODY\nAnswer as JSON."

    def test_missing_template(self, tmp_path) -> None:
        with pytest.raises(EnrichmentError, match="not found"):
            load_prompt(tmp_path / "absent.txt", "BODY")


class TestExtractReferences:
    def test_parses_fenced_json(self, opts) -> None:
        client = StubClient(['```json\n{"refs": ["ISO 9001:2015"]}\n```'])
        assert extract_references(MARKDOWN, opts, client) == ["ISO 9001:2015"]
        request = client.requests[0]
        assert request["model"] == "test-model"
        assert MARKDOWN in request["messages"][0]["content"]

    def test_retries_unusable_output(self, opts) -> None:
        client = StubClient(["not json", '{"refs": "wrong type"}', '{"refs": ["RFC 2119"]}'])
        assert extract_references(MARKDOWN, opts, client) == ["RFC 2119"]
        assert len(client.requests) == 3

    def test_gives_up_after_max_attempts(self, opts) -> None:
        client = StubClient(["nope"] * MAX_ATTEMPTS)
        with pytest.raises(EnrichmentError):
            extract_references(MARKDOWN, opts, client)


class TestEnrichSegment:
    def test_writes_only_validated_references(self, opts, tmp_path) -> None:
        client = StubClient(['{"refs": ["ISO 9001:2015", "RFC 2119", "Made Up 1234"]}'])
        out = tmp_path / "out" / "000000_Scope.json"

        kept = enrich_segment(MARKDOWN, out, opts, client)

        assert kept == ["ISO 9001:2015", "RFC 2119"]
        assert json.loads(out.read_text(encoding="utf-8")) == {"refs": ["ISO 9001:2015", "RFC 2119"]}
