"""
Deck Assembler Module

Top-level rendering entry point: walks a ContentMap against a Template,
renders each slide and serializes the result into a downloadable deck.

Usage:
    from slidemap.modules.deck_assembler import generate_deck

    artifact = generate_deck(content_map_dict, template_dict)
    path = artifact.save("output")
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .. import config
from .asset_resolver import AssetResolver
from .content_map import ContentMap, parse_content_map
from .deck_writer import DeckWriter
from .errors import DeckExportError
from .slide_renderer import SlideRenderer
from .template_model import Template

logger = logging.getLogger(__name__)

# Characters not allowed in file names on common platforms
_UNSAFE_FILE_CHARS = re.compile(r'[\\/:*?"<>|]')


def sanitize_file_name(name: str) -> str:
    """Replace every path-unsafe character with an underscore."""
    return _UNSAFE_FILE_CHARS.sub("_", name)


def derive_file_name(content_map: ContentMap) -> str:
    """File name from the topic, else the first slide title, else a default."""
    base = content_map.topic
    if not base and content_map.slides:
        base = content_map.slides[0].title
    if not base:
        base = config.DEFAULT_FILE_NAME
    return sanitize_file_name(base) + config.FILE_EXTENSION


@dataclass
class DeckArtifact:
    """A finished deck: file name and serialized bytes."""
    file_name: str
    data: bytes
    slide_count: int = 0
    skipped: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def save(self, directory: Union[str, Path] = None) -> Path:
        """Write the deck into `directory` and return its path."""
        directory = Path(directory) if directory else config.OUTPUT_DIR
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.file_name
        path.write_bytes(self.data)
        logger.info(f"Saved: {path}")
        return path


class DeckAssembler:
    """Renders every slide of a content map with one template."""

    def __init__(
        self,
        resolver: Optional[AssetResolver] = None,
        renderer: Optional[SlideRenderer] = None,
        writer: Optional[DeckWriter] = None
    ):
        """
        Initialize the assembler.

        Args:
            resolver: Asset resolver shared by the slide renderer
            renderer: Slide renderer (built from `resolver` when omitted)
            writer: Deck writer
        """
        self.resolver = resolver or AssetResolver()
        self.renderer = renderer or SlideRenderer(self.resolver)
        self.writer = writer or DeckWriter()

    def assemble(self, content_map: ContentMap, template: Template) -> DeckArtifact:
        """
        Build a deck.

        Slides whose layout the template does not define are skipped with a
        warning; the remaining slides keep their relative order.

        Args:
            content_map: Typed content map
            template: Typed template

        Returns:
            DeckArtifact with the serialized deck

        Raises:
            DeckExportError: if the deck cannot be built or serialized
        """
        file_name = derive_file_name(content_map)
        logger.info(f"Assembling '{file_name}' with template '{template.name}' "
                    f"({len(content_map.slides)} slides)")

        try:
            prs = self.writer.create_presentation()
            skipped: List[str] = []
            errors: List[str] = []
            slide_count = 0

            for i, slide in enumerate(content_map.slides):
                layout = template.layout_for(slide.layout)
                if layout is None:
                    logger.warning(f"Slide {i + 1}: no layout '{slide.layout}' in template, skipped")
                    skipped.append(slide.layout)
                    continue

                rendered = self.renderer.render(slide, layout, template.style)
                pptx_slide = self.writer.add_slide(prs, template.style.bg_color)
                slide_count += 1
                for error in rendered.errors:
                    errors.append(f"slide {i + 1} ({slide.layout}): {error}")

                try:
                    self.writer.draw(pptx_slide, rendered)
                except Exception as e:
                    # Keep the slide with its background only
                    logger.error(f"Slide {i + 1} ({slide.layout}): drawing failed: {e}")
                    self.writer.clear(pptx_slide)
                    errors.append(f"slide {i + 1} ({slide.layout}): {type(e).__name__}: {e}")
                    continue
                logger.debug(f"Slide {i + 1} ({slide.layout}): {len(rendered.instructions)} shapes")

            data = self.writer.serialize(prs)
        except Exception as e:
            raise DeckExportError(f"Failed to export '{file_name}': {e}") from e

        logger.info(f"Exported {slide_count} slides ({len(skipped)} skipped)")
        return DeckArtifact(
            file_name=file_name,
            data=data,
            slide_count=slide_count,
            skipped=skipped,
            errors=errors,
        )


def generate_deck(
    content_map: Union[ContentMap, dict],
    template: Union[Template, dict],
    resolver: Optional[AssetResolver] = None
) -> DeckArtifact:
    """Convenience wrapper accepting raw JSON-compatible dicts."""
    assembler = DeckAssembler(resolver=resolver)
    return assembler.assemble(parse_content_map(content_map), Template.from_dict(template))

