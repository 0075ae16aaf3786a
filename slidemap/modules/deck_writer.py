"""
Deck Writer Module

Draws RenderedSlide instructions onto python-pptx slides. This is the only
module that knows about the presentation file format.
"""

import io
import logging
from numbers import Number
from typing import Any, List, Optional

from lxml import etree
from pptx import Presentation
from pptx.chart.data import CategoryChartData, XyChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.text import PP_ALIGN
from pptx.oxml.ns import qn
from pptx.slide import Slide
from pptx.util import Emu, Inches, Pt

from .. import config
from .asset_resolver import PLACEHOLDER_IMAGE, decode_data_uri
from .instructions import (
    Box,
    ChartInstruction,
    ChartSeries,
    ImageInstruction,
    RenderedSlide,
    TableInstruction,
    TextInstruction,
)
from .style_resolver import TextStyle

logger = logging.getLogger(__name__)


class DeckWriter:
    """Writes rendered slides into a python-pptx Presentation."""

    SLIDE_WIDTH = Inches(config.SLIDE_WIDTH_INCHES)
    SLIDE_HEIGHT = Inches(config.SLIDE_HEIGHT_INCHES)

    CHART_TYPES = {
        "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
        "line": XL_CHART_TYPE.LINE_MARKERS,
        "pie": XL_CHART_TYPE.PIE,
        "scatter": XL_CHART_TYPE.XY_SCATTER,
    }

    LEGEND_POSITIONS = {
        "right": XL_LEGEND_POSITION.RIGHT,
        "left": XL_LEGEND_POSITION.LEFT,
        "top": XL_LEGEND_POSITION.TOP,
        "bottom": XL_LEGEND_POSITION.BOTTOM,
    }

    ALIGNMENTS = {
        "left": PP_ALIGN.LEFT,
        "center": PP_ALIGN.CENTER,
        "right": PP_ALIGN.RIGHT,
        "justify": PP_ALIGN.JUSTIFY,
    }

    BULLET_CHAR = "•"
    BORDER_WIDTH = Emu(12700)  # 1pt

    # python-pptx accepts 1..4000 pt
    MIN_FONT_SIZE = 1
    MAX_FONT_SIZE = 4000

    def create_presentation(self) -> Presentation:
        """Create an empty presentation on the 16:9 canvas."""
        prs = Presentation()
        prs.slide_width = self.SLIDE_WIDTH
        prs.slide_height = self.SLIDE_HEIGHT
        return prs

    def add_slide(self, prs: Presentation, bg_color: Optional[str] = None) -> Slide:
        """Append a blank slide, filling its background when a color is set."""
        slide = prs.slides.add_slide(self._find_blank_layout(prs))
        if bg_color:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = RGBColor.from_string(bg_color)
        return slide

    def draw(self, slide: Slide, rendered: RenderedSlide) -> None:
        """Draw every instruction of a rendered slide, in order."""
        for instruction in rendered.instructions:
            if isinstance(instruction, TextInstruction):
                self._add_text(slide, instruction)
            elif isinstance(instruction, ImageInstruction):
                self._add_image(slide, instruction)
            elif isinstance(instruction, TableInstruction):
                self._add_table(slide, instruction)
            elif isinstance(instruction, ChartInstruction):
                self._add_chart(slide, instruction)

    def clear(self, slide: Slide) -> None:
        """Remove every shape drawn on a slide; the background stays."""
        for shape in list(slide.shapes):
            element = shape._element
            element.getparent().remove(element)
            # Charts and pictures also own a part relationship
            rId = getattr(element, "chart_rId", None) or getattr(element, "blip_rId", None)
            if rId:
                slide.part.drop_rel(rId)

    def serialize(self, prs: Presentation) -> bytes:
        buffer = io.BytesIO()
        prs.save(buffer)
        return buffer.getvalue()

    def _find_blank_layout(self, prs: Presentation):
        """Find the blank slide layout by name, falling back to index 6."""
        for layout in prs.slide_layouts:
            if layout.name == "Blank":
                return layout
        idx = 6 if len(prs.slide_layouts) > 6 else len(prs.slide_layouts) - 1
        return prs.slide_layouts[idx]

    # =========================================================================
    # Text
    # =========================================================================

    def _add_text(self, slide: Slide, instruction: TextInstruction) -> None:
        textbox = slide.shapes.add_textbox(*self._emu_box(instruction.box))
        textbox.name = instruction.region or textbox.name
        tf = textbox.text_frame
        tf.word_wrap = True

        lines = instruction.bullets if instruction.is_bulleted else [instruction.text or ""]
        for i, line in enumerate(lines):
            p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
            p.text = line
            p.alignment = self.ALIGNMENTS.get(instruction.style.align, PP_ALIGN.LEFT)
            if instruction.is_bulleted:
                self._set_bullet(p)
            for run in p.runs:
                self._apply_font_style(run.font, instruction.style)

    def _font_size(self, size: float) -> Pt:
        return Pt(min(max(size, self.MIN_FONT_SIZE), self.MAX_FONT_SIZE))

    def _set_bullet(self, paragraph) -> None:
        """Give a paragraph a hanging bullet."""
        pPr = paragraph._p.get_or_add_pPr()
        pPr.set("marL", str(Emu(Pt(18))))
        pPr.set("indent", str(-Emu(Pt(18))))
        for tag in ("a:buNone", "a:buChar", "a:buAutoNum"):
            for el in pPr.findall(qn(tag)):
                pPr.remove(el)
        bullet = etree.SubElement(pPr, qn("a:buChar"))
        bullet.set("char", self.BULLET_CHAR)

    def _apply_font_style(self, font, style: TextStyle, size_override: Optional[float] = None) -> None:
        font.name = style.font_family
        font.size = self._font_size(size_override or style.font_size)
        font.bold = style.bold
        font.italic = style.italic
        font.color.rgb = RGBColor.from_string(style.color)

    # =========================================================================
    # Images
    # =========================================================================

    def _add_image(self, slide: Slide, instruction: ImageInstruction) -> None:
        try:
            self._add_picture(slide, instruction.data, instruction.box)
        except Exception as e:
            logger.error(f"Error adding image in '{instruction.region}': {e}; using placeholder")
            self._add_picture(slide, PLACEHOLDER_IMAGE, instruction.box)

    def _add_picture(self, slide: Slide, data_uri: str, box: Box) -> None:
        _, data = decode_data_uri(data_uri)
        slide.shapes.add_picture(io.BytesIO(data), *self._emu_box(box))

    # =========================================================================
    # Tables
    # =========================================================================

    def _add_table(self, slide: Slide, instruction: TableInstruction) -> None:
        rows = instruction.rows
        n_rows = len(rows)
        n_cols = max(len(row) for row in rows)

        table = slide.shapes.add_table(n_rows, n_cols, *self._emu_box(instruction.box)).table

        for r, row in enumerate(rows):
            for c in range(n_cols):
                value = row[c] if c < len(row) else ""
                text, bold = _cell_text(value)
                cell = table.cell(r, c)
                cell.text = text
                for p in cell.text_frame.paragraphs:
                    for run in p.runs:
                        self._apply_font_style(run.font, instruction.style, size_override=instruction.font_size)
                        run.font.bold = bold or r == 0
                self._set_cell_border(cell, instruction.border_color)

    def _set_cell_border(self, cell, color: str) -> None:
        """Solid border on all four edges of a cell."""
        tcPr = cell._tc.get_or_add_tcPr()
        for border_name in ["lnL", "lnR", "lnT", "lnB"]:
            for border in tcPr.findall(qn(f"a:{border_name}")):
                tcPr.remove(border)
            border = etree.SubElement(tcPr, qn(f"a:{border_name}"))
            border.set("w", str(self.BORDER_WIDTH))
            fill = etree.SubElement(border, qn("a:solidFill"))
            clr = etree.SubElement(fill, qn("a:srgbClr"))
            clr.set("val", color)
            dash = etree.SubElement(border, qn("a:prstDash"))
            dash.set("val", "solid")

    # =========================================================================
    # Charts
    # =========================================================================

    def _add_chart(self, slide: Slide, instruction: ChartInstruction) -> None:
        xl_chart_type = self.CHART_TYPES.get(instruction.chart_type, XL_CHART_TYPE.COLUMN_CLUSTERED)
        if instruction.chart_type == "scatter":
            chart_data = self._xy_chart_data(instruction.series)
        else:
            chart_data = self._category_chart_data(instruction.series)

        graphic_frame = slide.shapes.add_chart(xl_chart_type, *self._emu_box(instruction.box), chart_data)
        chart = graphic_frame.chart
        chart.font.size = self._font_size(instruction.font_size)
        chart.has_legend = instruction.show_legend
        if instruction.show_legend:
            chart.legend.position = self.LEGEND_POSITIONS.get(instruction.legend_position, XL_LEGEND_POSITION.BOTTOM)
            chart.legend.include_in_layout = False

    def _category_chart_data(self, series: List[ChartSeries]) -> CategoryChartData:
        categories = _categories(series)
        data = CategoryChartData()
        data.categories = categories
        for s in series:
            values = [_y_value(v) for v in s.values][:len(categories)]
            values += [None] * (len(categories) - len(values))
            data.add_series(s.name, values)
        return data

    def _xy_chart_data(self, series: List[ChartSeries]) -> XyChartData:
        data = XyChartData()
        for s in series:
            xy_series = data.add_series(s.name)
            for i, point in enumerate(s.values):
                if isinstance(point, dict) and _is_number(point.get("x")) and _is_number(point.get("y")):
                    xy_series.add_data_point(point["x"], point["y"])
                elif _is_number(point):
                    xy_series.add_data_point(i + 1, point)
        return data

    def _emu_box(self, box: Box):
        return Inches(box.x), Inches(box.y), Inches(box.w), Inches(box.h)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _y_value(value: Any) -> Optional[float]:
    if isinstance(value, dict):
        value = value.get("y")
    return value if _is_number(value) else None


def _categories(series: List[ChartSeries]) -> List[str]:
    """Shared label axis: explicit labels, else point x values, else 1..n."""
    for s in series:
        if s.labels:
            return list(s.labels)
    length = max((len(s.values) for s in series), default=0)
    for s in series:
        if len(s.values) == length and all(isinstance(v, dict) and "x" in v for v in s.values):
            return [str(v["x"]) for v in s.values]
    return [str(i + 1) for i in range(length)]


def _cell_text(value: Any):
    """Cells are plain values or {"text": ..., "options": {"bold": ...}}."""
    if isinstance(value, dict):
        options = value.get("options") if isinstance(value.get("options"), dict) else {}
        text = value.get("text", "")
        return ("" if text is None else str(text)), bool(options.get("bold"))
    return ("" if value is None else str(value)), False
