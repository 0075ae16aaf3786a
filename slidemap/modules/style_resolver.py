"""
Style Resolver Module

Every text, table and chart instruction takes its styling from the same
three tiers: the region's own setting, then the template's global style,
then a fixed built-in default.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .template_model import ShapeConfig, TemplateStyle

# Built-in defaults
DEFAULT_FONT_SIZE = 14
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_TEXT_COLOR = "000000"
DEFAULT_ALIGN = "left"
DEFAULT_BORDER_COLOR = "999999"
DEFAULT_CHART_TYPE = "bar"

ALIGNMENTS = ("left", "center", "right", "justify")


def layered(*candidates: Any, default: Any = None) -> Any:
    """Return the first candidate that is not None, else the default."""
    for value in candidates:
        if value is not None:
            return value
    return default


@dataclass(frozen=True)
class TextStyle:
    """Fully resolved text styling."""
    font_size: float = DEFAULT_FONT_SIZE
    font_family: str = DEFAULT_FONT_FAMILY
    color: str = DEFAULT_TEXT_COLOR
    bold: bool = False
    italic: bool = False
    align: str = DEFAULT_ALIGN


def resolve_font_size(
    region: Optional[ShapeConfig],
    style: Optional[TemplateStyle],
    *overrides: Optional[float]
) -> float:
    """
    Font size with region > overrides > global > built-in precedence.

    `overrides` sit between the region and the global style, e.g. a
    layout-level fontSize for charts.
    """
    return layered(
        region.font_size if region else None,
        *overrides,
        style.font_size if style else None,
        default=DEFAULT_FONT_SIZE,
    )


def resolve_text_style(
    region: Optional[ShapeConfig],
    style: Optional[TemplateStyle]
) -> TextStyle:
    """Merge a region's settings over the global style and built-ins."""
    align = layered(region.align if region else None, default=DEFAULT_ALIGN)
    if align not in ALIGNMENTS:
        align = DEFAULT_ALIGN
    return TextStyle(
        font_size=resolve_font_size(region, style),
        font_family=layered(
            region.font_family if region else None,
            style.font_family if style else None,
            default=DEFAULT_FONT_FAMILY,
        ),
        color=layered(
            region.color if region else None,
            style.text_color if style else None,
            default=DEFAULT_TEXT_COLOR,
        ),
        bold=layered(region.bold if region else None, default=False),
        italic=layered(region.italic if region else None, default=False),
        align=align,
    )


def resolve_border_color(
    region: Optional[ShapeConfig],
    layout_border: Optional[str]
) -> str:
    return layered(
        region.border_color if region else None,
        layout_border,
        default=DEFAULT_BORDER_COLOR,
    )
