"""
Template Model Module

Normalizes a visual template definition into a lookup from layout tag to
region placements. Templates are plain JSON:

    {
      "name": "Ocean",
      "style": {"bgColor": "FFFFFF", "textColor": "1F2937",
                "fontFamily": "Arial", "fontSize": 16},
      "layouts": [
        {"type": "title",
         "title": {"x": 0.5, "y": 2, "w": 9, "h": 1, "fontSize": 36, "bold": true},
         "subtitle": {"x": 0.5, "y": 3.1, "w": 9, "h": 0.6}},
        {"type": "three-images-with-description",
         "images": [{"x": 0.5, "y": 1.2, "w": 2.8, "h": 2.4}, ...],
         "description": {"x": 0.5, "y": 4, "w": 9, "h": 1}}
      ]
    }

`layouts` may also already be a mapping keyed by type.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Layout-level keys that are settings, not regions
LAYOUT_SETTINGS = ("type", "fontSize", "borderColor")


def normalize_layouts(layouts: Any) -> Dict[str, Dict[str, Any]]:
    """
    Normalize a `layouts` value to a mapping keyed by layout type.

    A list of {type, ...regions} records is keyed by each entry's type (the
    last entry wins on duplicates). A mapping is kept as is, minus entries
    that are not objects. Anything else yields an empty mapping.
    Applying this twice gives the same result as applying it once.
    """
    if isinstance(layouts, list):
        result = {}
        for entry in layouts:
            if isinstance(entry, dict) and isinstance(entry.get("type"), str):
                result[entry["type"]] = entry
        return result

    if isinstance(layouts, dict):
        return {
            key: spec
            for key, spec in layouts.items()
            if isinstance(key, str) and isinstance(spec, dict)
        }

    return {}


def normalize_template(raw: Any) -> Dict[str, Any]:
    """Return a copy of a raw template with `layouts` in mapping form."""
    template = copy.deepcopy(raw) if isinstance(raw, dict) else {}
    template["layouts"] = normalize_layouts(template.get("layouts"))
    return template


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_color(value: Any) -> Optional[str]:
    """Colors are stored as 6-digit hex without '#'."""
    if not isinstance(value, str):
        return None
    value = value.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    if len(value) != 6:
        return None
    try:
        int(value, 16)
    except ValueError:
        return None
    return value.upper()


# =============================================================================
# Records
# =============================================================================

@dataclass
class ShapeConfig:
    """Placement and optional style of one region, in inches."""
    x: float
    y: float
    w: float
    h: float
    font_size: Optional[float] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    align: Optional[str] = None
    border_color: Optional[str] = None
    color: Optional[str] = None
    font_family: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ShapeConfig"]:
        """Build from a raw region object; None when geometry is unusable."""
        if not isinstance(raw, dict):
            return None
        geometry = [_as_number(raw.get(k)) for k in ("x", "y", "w", "h")]
        if any(v is None for v in geometry):
            return None
        bold = raw.get("bold")
        italic = raw.get("italic")
        align = raw.get("align")
        font_family = raw.get("fontFamily", raw.get("fontFace"))
        return cls(
            *geometry,
            font_size=_as_number(raw.get("fontSize")),
            bold=bold if isinstance(bold, bool) else None,
            italic=italic if isinstance(italic, bool) else None,
            align=align.lower() if isinstance(align, str) else None,
            border_color=_as_color(raw.get("borderColor")),
            color=_as_color(raw.get("color")),
            font_family=font_family if isinstance(font_family, str) else None,
        )


@dataclass
class LayoutSpec:
    """Region placements for one layout tag."""
    type: str
    regions: Dict[str, ShapeConfig] = field(default_factory=dict)
    image_slots: Dict[str, List[ShapeConfig]] = field(default_factory=dict)
    font_size: Optional[float] = None
    border_color: Optional[str] = None
    order: List[str] = field(default_factory=list)

    @classmethod
    def from_raw(cls, layout_type: str, raw: Dict[str, Any]) -> "LayoutSpec":
        spec = cls(
            type=layout_type,
            font_size=_as_number(raw.get("fontSize")),
            border_color=_as_color(raw.get("borderColor")),
        )
        for key, value in raw.items():
            if key in LAYOUT_SETTINGS:
                continue
            if isinstance(value, list):
                # Multi-image region: an ordered list of placements
                slots = [ShapeConfig.from_raw(v) for v in value]
                if any(s is None for s in slots):
                    logger.warning(f"Layout '{layout_type}': invalid placement in '{key}', skipped")
                spec.image_slots[key] = [s for s in slots if s is not None]
                spec.order.append(key)
                continue
            shape = ShapeConfig.from_raw(value)
            if shape is None:
                logger.warning(f"Layout '{layout_type}': region '{key}' has no usable geometry, skipped")
                continue
            spec.regions[key] = shape
            spec.order.append(key)
        return spec

    @property
    def keys(self) -> List[str]:
        """All region keys in declaration order."""
        return list(self.order)

    def region(self, key: str) -> Optional[ShapeConfig]:
        return self.regions.get(key)


@dataclass
class TemplateStyle:
    """Global defaults applied under every region."""
    bg_color: Optional[str] = None
    text_color: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "TemplateStyle":
        if not isinstance(raw, dict):
            return cls()
        font_family = raw.get("fontFamily")
        return cls(
            bg_color=_as_color(raw.get("bgColor")),
            text_color=_as_color(raw.get("textColor")),
            font_family=font_family if isinstance(font_family, str) else None,
            font_size=_as_number(raw.get("fontSize")),
        )


@dataclass
class Template:
    """A visual template: global style plus per-layout region geometry."""
    name: str = ""
    style: TemplateStyle = field(default_factory=TemplateStyle)
    layouts: Dict[str, LayoutSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "Template":
        """Normalize and type a raw template. Never raises on bad input."""
        if isinstance(raw, Template):
            return raw
        normalized = normalize_template(raw)
        name = normalized.get("name", normalized.get("id", ""))
        layouts = {
            layout_type: LayoutSpec.from_raw(layout_type, spec)
            for layout_type, spec in normalized["layouts"].items()
        }
        logger.debug(f"Template '{name}': {len(layouts)} layouts")
        return cls(
            name=name if isinstance(name, str) else "",
            style=TemplateStyle.from_raw(normalized.get("style")),
            layouts=layouts,
        )

    def layout_for(self, tag: str) -> Optional[LayoutSpec]:
        """Exact-match lookup of a layout tag."""
        return self.layouts.get(tag)
