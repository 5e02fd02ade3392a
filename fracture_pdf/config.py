"""Configuration for the splitter: env-backed defaults and option models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _load_environment() -> None:
    explicit_path = os.getenv("FRACTURE_ENV_FILE")
    candidate = Path(explicit_path) if explicit_path else Path.cwd() / ".env"
    candidate = candidate.expanduser()
    if candidate.exists():
        load_dotenv(candidate, override=False)


_load_environment()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DEFAULT_MODEL = "claude-haiku-4-5-20251001"
PROMPT_PLACEHOLDER = "<INPUT>"


class EnrichOptions(BaseModel):
    """Settings for the optional per-segment reference extraction."""

    model_config = ConfigDict(validate_default=True)

    prompt_path: Path = Field(
        default_factory=lambda: Path(os.getenv("FRACTURE_ENRICH_PROMPT", "prompt.txt"))
    )
    model: str = Field(default_factory=lambda: os.getenv("FRACTURE_ENRICH_MODEL", DEFAULT_MODEL))
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("FRACTURE_ENRICH_TEMPERATURE", "0"))
    )
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("FRACTURE_ENRICH_MAX_TOKENS", "2048"))
    )
    reference_distance_ratio: float = Field(
        default_factory=lambda: float(os.getenv("FRACTURE_REFERENCE_DISTANCE_RATIO", "0.2"))
    )
    reference_window_band: float = Field(
        default_factory=lambda: float(os.getenv("FRACTURE_REFERENCE_WINDOW_BAND", "0.25"))
    )

    @field_validator("reference_distance_ratio", "reference_window_band")
    @classmethod
    def _unit_interval(cls, value: float) -> float:
        if not 0 <= value <= 1:
            raise ValueError("must be between 0 and 1")
        return value


class SplitOptions(BaseModel):
    """Per-document splitting options."""

    model_config = ConfigDict(validate_default=True)

    start_depth: int = 1
    end_depth: int = 0
    output_dir: Path = Field(default_factory=lambda: Path(os.getenv("FRACTURE_OUTPUT_DIR", ".")))
    header_footer_margin_ratio: float = Field(
        default_factory=lambda: float(os.getenv("FRACTURE_MARGIN_RATIO", "0.05"))
    )
    anchor_distance_ratio: float = Field(
        default_factory=lambda: float(os.getenv("FRACTURE_ANCHOR_DISTANCE_RATIO", "0.4"))
    )
    max_basename_length: int = Field(
        default_factory=lambda: int(os.getenv("FRACTURE_MAX_BASENAME_LENGTH", "200"))
    )
    index_padding: int = Field(
        default_factory=lambda: int(os.getenv("FRACTURE_INDEX_PADDING", "6"))
    )
    nesting: Literal["flat", "nested"] = Field(
        default_factory=lambda: os.getenv("FRACTURE_NESTING", "flat")
    )
    name_from_heading: bool = Field(
        default_factory=lambda: _env_flag("FRACTURE_NAME_FROM_HEADING", False)
    )
    converter: Literal["docling", "pdfplumber", "command"] = Field(
        default_factory=lambda: os.getenv("FRACTURE_CONVERTER", "docling")
    )
    converter_command: str | None = Field(
        default_factory=lambda: os.getenv("FRACTURE_CONVERTER_COMMAND") or None
    )
    enrich: EnrichOptions | None = None

    @field_validator("start_depth")
    @classmethod
    def _positive_depth(cls, value: int) -> int:
        if value < 1:
            raise ValueError("start depth is 1-indexed")
        return value

    @field_validator("header_footer_margin_ratio")
    @classmethod
    def _margin_ratio(cls, value: float) -> float:
        if not 0 <= value < 0.5:
            raise ValueError("margin ratio must be in [0, 0.5)")
        return value

    @field_validator("anchor_distance_ratio")
    @classmethod
    def _anchor_ratio(cls, value: float) -> float:
        if value < 0:
            raise ValueError("distance ratio must not be negative")
        return value

    @field_validator("max_basename_length")
    @classmethod
    def _basename_length(cls, value: int) -> int:
        if value < 8:
            raise ValueError("basename length must be at least 8")
        return value

    @field_validator("index_padding")
    @classmethod
    def _padding(cls, value: int) -> int:
        if value < 1:
            raise ValueError("index padding must be at least 1")
        return value

    @model_validator(mode="after")
    def _check_combinations(self) -> "SplitOptions":
        if self.end_depth < 0:
            raise ValueError("end depth must be 0 (unbounded) or positive")
        if self.end_depth and self.end_depth < self.start_depth:
            raise ValueError("end depth must not be shallower than start depth")
        if self.converter == "command" and not self.converter_command:
            raise ValueError("converter 'command' needs a converter_command")
        return self


__all__ = [
    "DEFAULT_MODEL",
    "EnrichOptions",
    "PROMPT_PLACEHOLDER",
    "SplitOptions",
]
