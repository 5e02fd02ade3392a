"""
Manifest files: a JSON list of input PDFs, each with optional overrides of
the command-line options.

    [
      {"path": "book.pdf", "start_depth": 2, "end_depth": 3},
      {"path": "specs/annex.pdf", "output_dir": "out/annex"}
    ]

An object of the form ``{"files": [...]}`` is accepted too. Relative paths
are resolved against the manifest's directory.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from fracture_pdf.config import SplitOptions
from fracture_pdf.errors import ConfigError

logger = logging.getLogger(__name__)

_PATH_FIELDS = ("output_dir",)


def load_manifest(manifest_path: str | Path, base: SplitOptions) -> list[tuple[Path, SplitOptions]]:
    path = Path(manifest_path)
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read manifest {path}: {exc}") from exc

    items = data.get("files") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ConfigError(f"Manifest {path} must hold a list of files")

    root = path.parent
    jobs: list[tuple[Path, SplitOptions]] = []
    for i, item in enumerate(items):
        if isinstance(item, str):
            item = {"path": item}
        if not isinstance(item, dict) or "path" not in item:
            raise ConfigError(f"Manifest entry {i} has no path", {"entry": item})

        overrides = {k: v for k, v in item.items() if k != "path"}
        unknown = set(overrides) - set(SplitOptions.model_fields)
        if unknown:
            raise ConfigError(f"Manifest entry {i} has unknown keys: {sorted(unknown)}")
        for key in _PATH_FIELDS:
            if key in overrides:
                overrides[key] = root / overrides[key]

        try:
            options = SplitOptions.model_validate({**base.model_dump(), **overrides})
        except (ValidationError, ValueError) as exc:
            raise ConfigError(f"Manifest entry {i} is invalid: {exc}") from exc
        jobs.append((root / item["path"], options))

    logger.debug("Manifest %s lists %d files", path, len(jobs))
    return jobs
