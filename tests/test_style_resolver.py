from __future__ import annotations

from slidemap.modules.style_resolver import (
    layered,
    resolve_border_color,
    resolve_font_size,
    resolve_text_style,
)
from slidemap.modules.template_model import ShapeConfig, TemplateStyle


def test_layered_skips_none_but_keeps_falsy_values() -> None:
    assert layered(None, 0, 5, default=9) == 0
    assert layered(None, None, default=9) == 9


def test_text_style_falls_back_to_global_then_builtins() -> None:
    region = ShapeConfig(x=0, y=0, w=1, h=1)
    style = resolve_text_style(region, TemplateStyle(text_color="112233", font_size=20))
    assert style.font_size == 20
    assert style.color == "112233"
    assert style.font_family == "Arial"
    assert style.bold is False
    assert style.align == "left"


def test_region_settings_win() -> None:
    region = ShapeConfig(x=0, y=0, w=1, h=1, font_size=30, color="FF0000", bold=True, align="center")
    style = resolve_text_style(region, TemplateStyle(text_color="112233", font_size=20, font_family="Georgia"))
    assert (style.font_size, style.color, style.bold, style.align) == (30, "FF0000", True, "center")
    assert style.font_family == "Georgia"


def test_unknown_alignment_falls_back_to_left() -> None:
    region = ShapeConfig(x=0, y=0, w=1, h=1, align="diagonal")
    assert resolve_text_style(region, None).align == "left"


def test_font_size_override_sits_between_region_and_global() -> None:
    assert resolve_font_size(None, TemplateStyle(font_size=20), 11) == 11
    assert resolve_font_size(None, TemplateStyle(), None) == 14


def test_border_color_precedence() -> None:
    region = ShapeConfig(x=0, y=0, w=1, h=1, border_color="000000")
    assert resolve_border_color(region, "336699") == "000000"
    assert resolve_border_color(None, "336699") == "336699"
    assert resolve_border_color(None, None) == "999999"
