"""
Core modules for the slidemap deck generator.
"""

# Import individual modules - these can be imported independently
# to avoid circular imports

__all__ = [
    "ContentMap",
    "Template",
    "TemplateCatalog",
    "AssetResolver",
    "SlideRenderer",
    "DeckWriter",
    "DeckAssembler",
    "OutlineGenerator",
    "ContentMapGenerator",
    "ImageSearch",
]


def __getattr__(name):
    """Lazy import of modules to avoid circular dependencies."""
    if name == "ContentMap":
        from .content_map import ContentMap
        return ContentMap
    elif name == "Template":
        from .template_model import Template
        return Template
    elif name == "TemplateCatalog":
        from .template_catalog import TemplateCatalog
        return TemplateCatalog
    elif name == "AssetResolver":
        from .asset_resolver import AssetResolver
        return AssetResolver
    elif name == "SlideRenderer":
        from .slide_renderer import SlideRenderer
        return SlideRenderer
    elif name == "DeckWriter":
        from .deck_writer import DeckWriter
        return DeckWriter
    elif name == "DeckAssembler":
        from .deck_assembler import DeckAssembler
        return DeckAssembler
    elif name == "OutlineGenerator":
        from .outline_generator import OutlineGenerator
        return OutlineGenerator
    elif name == "ContentMapGenerator":
        from .content_generator import ContentMapGenerator
        return ContentMapGenerator
    elif name == "ImageSearch":
        from .image_search import ImageSearch
        return ImageSearch
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
