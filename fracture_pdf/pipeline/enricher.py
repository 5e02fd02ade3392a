"""
Optional enrichment: ask Claude for the references cited in a segment.

The prompt is read from a template file in which ``<INPUT>`` stands for
the segment's text. The model must answer with a JSON object
``{"refs": [...]}``; malformed answers are retried a few times.
"""

import json
import logging
import re
from pathlib import Path

import anthropic
from pydantic import BaseModel, Field, ValidationError

from fracture_pdf.config import PROMPT_PLACEHOLDER, EnrichOptions
from fracture_pdf.errors import EnrichmentError
from fracture_pdf.pipeline.references import validate_references

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


class ReferenceList(BaseModel):
    refs: list[str] = Field(
        default_factory=list,
        description="Detected citations, references, mentions or links",
    )


def load_prompt(prompt_path: Path, markdown: str) -> str:
    resolved = Path(prompt_path).resolve()
    if not resolved.exists():
        raise EnrichmentError(f"Prompt template not found: {resolved}")
    template = resolved.read_text(encoding="utf-8")
    return template.replace(PROMPT_PLACEHOLDER, markdown, 1)


def _call_llm(client: anthropic.Anthropic, prompt: str, opts: EnrichOptions) -> ReferenceList:
    response = client.messages.create(
        model=opts.model,
        max_tokens=opts.max_tokens,
        temperature=opts.temperature,
        messages=[{"role": "user", "content": prompt}],
    )
    raw = _FENCE_RE.sub("", response.content[0].text).strip()
    return ReferenceList.model_validate(json.loads(raw))


def extract_references(
    markdown: str,
    opts: EnrichOptions,
    client: anthropic.Anthropic | None = None,
) -> list[str]:
    """Return the references the model reports for ``markdown``."""
    prompt = load_prompt(opts.prompt_path, markdown)
    client = client or anthropic.Anthropic()

    last_error = ""
    for attempt in range(1, MAX_ATTEMPTS + 1):
        logger.debug("Calling %s (attempt %d/%d)", opts.model, attempt, MAX_ATTEMPTS)
        try:
            return _call_llm(client, prompt, opts).refs
        except anthropic.APIError as exc:
            raise EnrichmentError(f"Reference extraction failed: {exc}") from exc
        except (json.JSONDecodeError, ValidationError, IndexError, AttributeError) as exc:
            last_error = str(exc)
            logger.warning("Unusable reference output (attempt %d/%d): %s",
                           attempt, MAX_ATTEMPTS, last_error)

    raise EnrichmentError(
        f"No valid reference list after {MAX_ATTEMPTS} attempts", raw=last_error
    )


def enrich_segment(
    markdown: str,
    json_path: Path,
    opts: EnrichOptions,
    client: anthropic.Anthropic | None = None,
) -> list[str]:
    """Extract, validate and persist references for one segment."""
    refs = extract_references(markdown, opts, client)
    kept = validate_references(
        refs,
        markdown,
        max_distance_ratio=opts.reference_distance_ratio,
        window_band=opts.reference_window_band,
    )
    json_path.parent.mkdir(parents=True, exist_ok=True)
    with open(json_path, "w", encoding="utf-8") as fh:
        json.dump({"refs": kept}, fh, indent=2, ensure_ascii=False)
    logger.debug("Wrote %s", json_path)
    return kept
