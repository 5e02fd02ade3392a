from __future__ import annotations

from typing import Any, Dict


class FractureError(Exception):
    """Base class for failures raised by the splitter."""

    def __init__(self, code: str, message: str, extra: Dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.extra = extra or {}


class ConfigError(FractureError):
    """Raised when options or a manifest cannot be validated."""

    def __init__(self, message: str, extra: Dict[str, Any] | None = None):
        super().__init__("config", message, extra)


class ConversionError(FractureError):
    """Raised when a text converter fails for a segment."""

    def __init__(self, message: str, extra: Dict[str, Any] | None = None):
        super().__init__("conversion", message, extra)


class EnrichmentError(FractureError):
    """Raised when reference extraction cannot produce a usable result."""

    def __init__(self, message: str, raw: str | None = None, extra: Dict[str, Any] | None = None):
        super().__init__("enrichment", message, extra)
        self.raw = raw


class OutputCollisionError(FractureError):
    """Raised when a segment would overwrite an existing output file."""

    def __init__(self, path: str):
        super().__init__("collision", f"Output file already exists: {path}", {"path": path})
        self.path = path
