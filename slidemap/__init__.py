"""
slidemap - template-driven slide deck generation.

Turns a ContentMap (structured slide content) and a Template (per-layout
region geometry and global style) into a .pptx deck.
"""

from .modules.content_map import ContentMap, parse_content_map
from .modules.deck_assembler import DeckArtifact, DeckAssembler, generate_deck
from .modules.errors import (
    ContentMapError,
    DeckExportError,
    GenerationError,
    InputFileError,
    SlidemapError,
    TemplateNotFoundError,
)
from .modules.template_model import Template

__version__ = "0.1.0"

__all__ = [
    "ContentMap",
    "ContentMapError",
    "DeckArtifact",
    "DeckAssembler",
    "DeckExportError",
    "GenerationError",
    "InputFileError",
    "SlidemapError",
    "Template",
    "TemplateNotFoundError",
    "generate_deck",
    "parse_content_map",
]
