"""
Content Map Generator Module

Expands an outline into a ContentMap with an LLM, then makes sure the map
has a conclusion, has a comparison when the outline asks for one, and has
images in its image slots.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Union

import requests

from .. import config
from .content_map import (
    Comparison,
    ComparisonSide,
    ComparisonSlide,
    ConclusionSlide,
    ContentMap,
    ImageSlide,
    ThreeImagesSlide,
    parse_content_map,
)
from .errors import ContentMapError, GenerationError
from .image_search import ImageSearch
from .llm_provider import BaseLLMProvider, get_provider
from .outline_generator import OutlineItem, extract_json_text

logger = logging.getLogger(__name__)

LAYOUTS = [
    "title",
    "bulleted-list",
    "image",
    "table",
    "chart",
    "quote",
    "comparison",
    "timeline",
    "process",
    "conclusion",
    "three-images-with-description",
]

COMPARISON_PATTERN = re.compile(
    r"\b(?:vs|versus|comparison|compare|pros|cons|advantages|disadvantages|perbandingan|kelebihan|kekurangan)\b",
    re.IGNORECASE,
)

IMAGES_PER_GALLERY = 3

SYSTEM_PROMPT = """You are an expert presentation assistant. From a slide outline, build a complete
contentMap for an engaging, varied PowerPoint presentation.

Use a mix of layouts: title, bulleted-list, image, table, chart, quote, comparison,
conclusion and three-images-with-description.

REQUIRED:
1) Add at least one "conclusion" slide at the end of the presentation.
2) If the outline implies a comparison (e.g. "vs", "pros", "cons", "advantages",
   "comparison"), add at least one "comparison" slide.
3) Where a topic suits several pictures at once, use "three-images-with-description":
{{
  "layout": "three-images-with-description",
  "title": string,
  "images": string[3],
  "description": string
}}
4) Output must be pure JSON following this schema:

{{
  "topic": string,
  "slides": Array<{{
    "layout": {layouts},
    "title"?: string,
    "subtitle"?: string,
    "text"?: string,
    "timeline"?: Array<{{ "year": string, "event": string }}>,
    "process"?: Array<{{ "step": string, "description": string }}>,
    "bullets"?: string[],
    "table"?: {{ "data": string[][] }},
    "quote"?: {{ "text": string, "author": string }},
    "content"?: {{
      "type": "bar" | "line" | "pie" | "scatter",
      "labels"?: string[],
      "datasets": Array<{{ "label": string, "data": any[] }}>
    }},
    "imageUrl"?: string,
    "caption"?: string,
    "images"?: string[],
    "description"?: string,
    "conclusion"?: string,
    "comparison"?: {{
      "left": {{ "title": string, "description": string }},
      "right": {{ "title": string, "description": string }}
    }}
  }}>
}}"""


# =============================================================================
# Post-processing
# =============================================================================

def ensure_conclusion(content_map: ContentMap) -> bool:
    """Append a default conclusion slide when the map has none."""
    if content_map.has_layout(ConclusionSlide.TAG):
        return False
    content_map.slides.append(ConclusionSlide(
        title="Conclusion",
        conclusion="This presentation gave a complete overview of the topic discussed.",
    ))
    logger.info("Added default conclusion slide")
    return True


def needs_comparison(outline: List[Dict[str, Any]]) -> bool:
    return any(COMPARISON_PATTERN.search(str(item.get("title", ""))) for item in outline)


def ensure_comparison(content_map: ContentMap, outline: List[Dict[str, Any]]) -> bool:
    """Append a default comparison slide when the outline asks for one and none exists."""
    if not needs_comparison(outline) or content_map.has_layout(ComparisonSlide.TAG):
        return False
    content_map.slides.append(ComparisonSlide(
        title="Comparison",
        comparison=Comparison(
            left=ComparisonSide(title="Option A", description="Strengths and weaknesses of option A."),
            right=ComparisonSide(title="Option B", description="Strengths and weaknesses of option B."),
        ),
    ))
    logger.info("Added default comparison slide")
    return True


def enrich_images(content_map: ContentMap, image_search: ImageSearch) -> int:
    """
    Fill empty image slots with searched image URLs.

    Returns:
        Number of images added
    """
    added = 0
    for slide in content_map.slides:
        if isinstance(slide, ThreeImagesSlide) and len(slide.images) < IMAGES_PER_GALLERY:
            slide.images = []
            for i in range(IMAGES_PER_GALLERY):
                url = image_search.find_url(f"{slide.title or content_map.topic or ''} {i + 1}")
                if url:
                    slide.images.append(url)
                    added += 1

        if isinstance(slide, (ImageSlide, ConclusionSlide)) and not slide.image_url:
            url = image_search.find_url(slide.title or content_map.topic or "presentation")
            if url:
                slide.image_url = url
                added += 1

    logger.info(f"Image enrichment: {added} images added")
    return added


# =============================================================================
# Generator
# =============================================================================

class ContentMapGenerator:
    """Generates a ContentMap from an outline."""

    def __init__(
        self,
        provider: Optional[BaseLLMProvider] = None,
        image_search: Optional[ImageSearch] = None,
        max_outline_items: int = None,
        max_tokens: int = 1500
    ):
        """
        Initialize the content map generator.

        Args:
            provider: LLM provider (Cohere by default)
            image_search: Image search for enrichment; skipped when None
            max_outline_items: Outline entries sent to the model
            max_tokens: Maximum tokens for the response
        """
        self.provider = provider or get_provider()
        self.image_search = image_search
        self.max_outline_items = max_outline_items or config.MAX_OUTLINE_ITEMS
        self.max_tokens = max_tokens

    def generate(self, outline: List[Union[OutlineItem, Dict[str, Any]]]) -> ContentMap:
        """
        Generate a content map.

        Args:
            outline: Outline items (objects with at least a title)

        Returns:
            ContentMap with conclusion/comparison guarantees applied

        Raises:
            GenerationError: on an invalid outline, a provider failure or an
                unusable response
        """
        items = self._validate_outline(outline)[:self.max_outline_items]
        logger.info(f"Generating content map from {len(items)} outline items")

        user_prompt = (
            "Presentation outline:\n"
            f"{json.dumps(items, indent=2, ensure_ascii=False)}\n\n"
            "Please build the contentMap JSON:"
        )
        try:
            response = self.provider.generate(
                prompt=user_prompt,
                system_prompt=SYSTEM_PROMPT.format(layouts=json.dumps(LAYOUTS)),
                max_tokens=self.max_tokens,
                temperature=0.7,
                json_mode=True,
            )
        except (requests.RequestException, ValueError, ImportError) as e:
            raise GenerationError(f"Content map request failed: {e}") from e

        raw_text = response.content or ""
        try:
            raw = json.loads(extract_json_text(raw_text))
            content_map = parse_content_map(raw)
        except json.JSONDecodeError as e:
            raise GenerationError(f"Response is not valid JSON: {e}", raw=raw_text) from e
        except ContentMapError as e:
            raise GenerationError(f"Invalid content map format: {e}", raw=raw_text) from e

        ensure_conclusion(content_map)
        ensure_comparison(content_map, items)
        if self.image_search is not None:
            enrich_images(content_map, self.image_search)

        logger.info(f"Content map: {len(content_map.slides)} slides")
        return content_map

    def _validate_outline(self, outline: Any) -> List[Dict[str, Any]]:
        if not isinstance(outline, list):
            raise GenerationError("Invalid outline format: expected a list")
        items = []
        for i, item in enumerate(outline):
            if isinstance(item, OutlineItem):
                item = item.to_dict()
            if not isinstance(item, dict) or not item.get("title"):
                raise GenerationError(f"Invalid outline item {i}: an object with a title is required")
            items.append(item)
        return items
