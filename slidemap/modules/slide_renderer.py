"""
Slide Renderer Module

Merges one slide's content with its template layout and produces the
ordered draw instructions for that slide. Chart, table and comparison
slides have bespoke handling; every other layout goes through the generic
region walk.

Missing fields and unmatched regions are skipped silently. A failure while
building a chart, table or comparison body drops that body only; the slide
keeps its place in the deck.
"""

import logging
from typing import Any, List, Optional

from .asset_resolver import AssetResolver
from .content_map import CHART_TYPES, ChartSlide, ComparisonSlide, Slide, TableSlide
from .instructions import (
    Box,
    ChartInstruction,
    ChartSeries,
    ImageInstruction,
    RenderedSlide,
    TableInstruction,
    TextInstruction,
)
from .style_resolver import (
    DEFAULT_CHART_TYPE,
    resolve_border_color,
    resolve_font_size,
    resolve_text_style,
)
from .template_model import LayoutSpec, ShapeConfig, TemplateStyle

logger = logging.getLogger(__name__)


class SlideRenderer:
    """Produces RenderedSlides from content + layout + global style."""

    # Fallback regions on the 10 x 5.625 canvas
    TITLE_REGION = ShapeConfig(x=0.5, y=0.3, w=9, h=0.5)
    CHART_REGION = ShapeConfig(x=1, y=1.2, w=8, h=4)
    TABLE_REGION = ShapeConfig(x=1, y=1, w=8, h=4)

    SINGLE_IMAGE_KEYS = ("imageUrl",)
    MULTI_IMAGE_KEYS = ("images",)

    COMPARISON_REGIONS = (
        ("left", "title", "leftTitle"),
        ("left", "description", "leftDescription"),
        ("right", "title", "rightTitle"),
        ("right", "description", "rightDescription"),
    )

    def __init__(self, resolver: Optional[AssetResolver] = None):
        """
        Initialize the slide renderer.

        Args:
            resolver: Asset resolver used for image regions
        """
        self.resolver = resolver or AssetResolver()

    def render(
        self,
        slide: Slide,
        layout: LayoutSpec,
        style: Optional[TemplateStyle] = None
    ) -> RenderedSlide:
        """
        Render one slide.

        Args:
            slide: Typed slide content
            layout: The template layout matched to the slide's tag
            style: Template global style

        Returns:
            RenderedSlide with instructions in drawing order
        """
        style = style or TemplateStyle()
        rendered = RenderedSlide(layout=slide.layout)
        renderer_method = self._get_renderer_method(slide)
        renderer_method(slide, layout, style, rendered)
        return rendered

    def _get_renderer_method(self, slide: Slide):
        """Pick the bespoke renderer when the slide carries its body."""
        if isinstance(slide, ChartSlide) and slide.content is not None:
            return self._guarded(self._render_chart)
        if isinstance(slide, TableSlide) and slide.table is not None and slide.table.data:
            return self._guarded(self._render_table)
        if isinstance(slide, ComparisonSlide) and slide.comparison is not None:
            return self._guarded(self._render_comparison)
        return self._render_generic

    def _guarded(self, method):
        """Wrap a body renderer so any failure drops the whole body."""
        def run(slide: Slide, layout: LayoutSpec, style: TemplateStyle, rendered: RenderedSlide) -> None:
            try:
                method(slide, layout, style, rendered)
            except Exception as e:
                logger.error(f"Error rendering {slide.layout} slide '{slide.title or ''}': {e}")
                rendered.instructions.clear()
                rendered.errors.append(f"{type(e).__name__}: {e}")
        return run

    # =========================================================================
    # Bespoke layouts
    # =========================================================================

    def _render_chart(
        self,
        slide: ChartSlide,
        layout: LayoutSpec,
        style: TemplateStyle,
        rendered: RenderedSlide
    ) -> None:
        content = slide.content
        if not content.datasets:
            raise ValueError("chart has no datasets")

        chart_type = content.type if content.type in CHART_TYPES else DEFAULT_CHART_TYPE
        series = [
            ChartSeries(name=ds.label, labels=list(content.labels), values=ds.data)
            for ds in content.datasets
        ]
        region = layout.region("chart")
        rendered.add(ChartInstruction(
            box=Box.of(region or self.CHART_REGION),
            chart_type=chart_type,
            series=series,
            font_size=resolve_font_size(region, style, layout.font_size),
        ))

        if slide.title:
            title_region = layout.region("title") or self.TITLE_REGION
            rendered.add(self._text(slide.title, title_region, style, "title"))

    def _render_table(
        self,
        slide: TableSlide,
        layout: LayoutSpec,
        style: TemplateStyle,
        rendered: RenderedSlide
    ) -> None:
        rows = slide.table.data
        if not any(rows):
            raise ValueError("table has no cells")

        region = layout.region("table")
        rendered.add(TableInstruction(
            box=Box.of(region or self.TABLE_REGION),
            rows=rows,
            font_size=resolve_font_size(region, style),
            border_color=resolve_border_color(region, layout.border_color),
            style=resolve_text_style(region, style),
        ))

        if slide.title:
            title_region = layout.region("title") or self.TITLE_REGION
            rendered.add(self._text(slide.title, title_region, style, "title"))

    def _render_comparison(
        self,
        slide: ComparisonSlide,
        layout: LayoutSpec,
        style: TemplateStyle,
        rendered: RenderedSlide
    ) -> None:
        comparison = slide.comparison
        for side_name, attr, region_key in self.COMPARISON_REGIONS:
            side = getattr(comparison, side_name)
            region = layout.region(region_key)
            if side is None or region is None:
                continue
            rendered.add(self._text(getattr(side, attr), region, style, region_key))

        title_region = layout.region("title")
        if slide.title and title_region:
            rendered.add(self._text(slide.title, title_region, style, "title"))

    # =========================================================================
    # Generic region walk
    # =========================================================================

    def _render_generic(
        self,
        slide: Slide,
        layout: LayoutSpec,
        style: TemplateStyle,
        rendered: RenderedSlide
    ) -> None:
        """Draw every declared region the slide has a non-empty value for."""
        drawn = set()

        for key in layout.keys:
            if key in drawn:
                continue
            value = slide.get(key)
            if _is_empty(value):
                continue

            slots = self._image_slots(layout, key)
            if slots is not None:
                drawn.add(key)
                self._add_images(slide, value, slots, layout, style, rendered, drawn)
                continue

            region = layout.region(key)
            if region is None:
                continue

            if key in self.SINGLE_IMAGE_KEYS:
                drawn.add(key)
                if isinstance(value, str):
                    rendered.add(ImageInstruction(
                        box=Box.of(region),
                        data=self.resolver.resolve(value),
                        region=key,
                    ))
                continue

            text = self._text(value, region, style, key)
            if text is not None:
                drawn.add(key)
                rendered.add(text)

    def _image_slots(self, layout: LayoutSpec, key: str) -> Optional[List[ShapeConfig]]:
        if key in layout.image_slots:
            return layout.image_slots[key]
        if key in self.MULTI_IMAGE_KEYS and key in layout.regions:
            return [layout.regions[key]]
        return None

    def _add_images(
        self,
        slide: Slide,
        value: Any,
        slots: List[ShapeConfig],
        layout: LayoutSpec,
        style: TemplateStyle,
        rendered: RenderedSlide,
        drawn: set
    ) -> None:
        """Resolve a multi-image region in parallel, then its description."""
        if not isinstance(value, list):
            return
        references = [v for v in value if isinstance(v, str) and v]
        payloads = self.resolver.resolve_many(references)

        for i, payload in enumerate(payloads):
            if i >= len(slots):
                logger.debug(f"{slide.layout}: no placement for image {i + 1}, skipped")
                continue
            rendered.add(ImageInstruction(box=Box.of(slots[i]), data=payload, region=f"images[{i}]"))

        description = slide.get("description")
        region = layout.region("description")
        if "description" not in drawn and region and not _is_empty(description):
            text = self._text(description, region, style, "description")
            if text is not None:
                drawn.add("description")
                rendered.add(text)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _text(
        self,
        value: Any,
        region: ShapeConfig,
        style: TemplateStyle,
        key: str
    ) -> Optional[TextInstruction]:
        """Text instruction for a string, or a bullet list for a list of strings."""
        if isinstance(value, str):
            if not value.strip():
                return None
            return TextInstruction(
                box=Box.of(region),
                style=resolve_text_style(region, style),
                text=value,
                region=key,
            )
        if isinstance(value, list):
            bullets = [v if isinstance(v, str) else str(v) for v in value if isinstance(v, (str, int, float))]
            if not bullets:
                return None
            return TextInstruction(
                box=Box.of(region),
                style=resolve_text_style(region, style),
                bullets=bullets,
                region=key,
            )
        return None


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False
