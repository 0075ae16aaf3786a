"""
Exceptions raised by the slidemap pipeline.

Only DeckExportError escapes deck assembly; per-region and per-slide
problems are logged and skipped by the renderer.
"""

from typing import Iterable, Optional


class SlidemapError(Exception):
    """Base class for all slidemap errors."""


class ContentMapError(SlidemapError, ValueError):
    """Raised when a content map cannot be ingested at all."""

    def __init__(self, issues: Iterable[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid content map"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Content map validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class TemplateNotFoundError(SlidemapError, KeyError):
    """Raised when a template id is not in the catalog."""

    def __str__(self) -> str:
        return f"Template not found: {self.args[0] if self.args else ''}"


class DeckExportError(SlidemapError):
    """Raised when the assembled deck cannot be serialized."""


class GenerationError(SlidemapError):
    """Raised when an outline or content map cannot be generated."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class InputFileError(SlidemapError):
    """Raised when a JSON input file is missing or unreadable."""
