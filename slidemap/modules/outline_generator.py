"""
Outline Generator Module

Asks an LLM for a slide outline of a subject: a JSON list of
{"title": ..., "bullets": [...]} items.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from .errors import GenerationError, InputFileError
from .llm_provider import BaseLLMProvider, get_provider

logger = logging.getLogger(__name__)

OUTLINE_PROMPT = """Create a PowerPoint presentation outline for the following topic:

Topic: "{subject}"
Number of slides: about 10, ending with a thank-you slide.

Return the outline as a JSON array with this structure:
[
  {{
    "title": "Slide X: Slide Title",
    "bullets": ["First point", "Second point", ...]
  }},
  ...
]

**Return only the JSON array, in a JSON code block like this:**
```json
[...]
```
"""


def extract_json_text(text: str) -> str:
    """Pull the JSON payload out of a markdown code block, if there is one."""
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        text = text.split("```", 1)[1].split("```", 1)[0]
    return text.strip()


@dataclass
class OutlineItem:
    """One outline entry: a slide title and its talking points."""
    title: str
    bullets: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "bullets": list(self.bullets)}

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["OutlineItem"]:
        if not isinstance(raw, dict):
            return None
        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            return None
        bullets = raw.get("bullets")
        if not isinstance(bullets, list):
            bullets = []
        return cls(title=title, bullets=[str(b) for b in bullets if isinstance(b, (str, int, float))])


class OutlineGenerator:
    """Generates slide outlines from a free-text subject."""

    def __init__(self, provider: Optional[BaseLLMProvider] = None, max_tokens: int = 1200):
        """
        Initialize the outline generator.

        Args:
            provider: LLM provider (Cohere by default)
            max_tokens: Maximum tokens for the outline response
        """
        self.provider = provider or get_provider()
        self.max_tokens = max_tokens

    def generate(self, subject: str) -> List[OutlineItem]:
        """
        Generate an outline.

        Args:
            subject: What the presentation is about

        Returns:
            Outline items in slide order

        Raises:
            GenerationError: on an empty subject, a provider failure or an
                unparseable response
        """
        if not isinstance(subject, str) or not subject.strip():
            raise GenerationError("Missing subject")

        logger.info(f"Generating outline for: {subject}")
        try:
            response = self.provider.generate(
                prompt=OUTLINE_PROMPT.format(subject=subject.strip()),
                max_tokens=self.max_tokens,
                temperature=0.7,
            )
        except (requests.RequestException, ValueError, ImportError) as e:
            raise GenerationError(f"Outline request failed: {e}") from e

        raw_text = response.content or ""
        try:
            parsed = json.loads(extract_json_text(raw_text))
        except json.JSONDecodeError as e:
            raise GenerationError(f"Invalid JSON format from AI: {e}", raw=raw_text) from e

        if not isinstance(parsed, list):
            raise GenerationError("Outline must be a JSON array", raw=raw_text)

        items = []
        for i, entry in enumerate(parsed):
            item = OutlineItem.from_raw(entry)
            if item is None:
                logger.warning(f"Dropping outline entry {i}: no title")
                continue
            items.append(item)

        logger.info(f"Outline: {len(items)} slides")
        return items


def save_outline(items: List[OutlineItem], output_path: Union[str, Path]) -> Path:
    """Save an outline to a JSON file."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump([item.to_dict() for item in items], f, indent=2, ensure_ascii=False)

    logger.info(f"Saved outline to: {path}")
    return path


def load_outline(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Load a raw outline from a JSON file.

    Raises:
        InputFileError: if the file is missing or not valid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise InputFileError(f"Cannot read outline {path}: {e}") from e
