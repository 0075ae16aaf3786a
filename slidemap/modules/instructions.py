"""
Draw instructions produced by the slide renderer.

A RenderedSlide is an ordered list of these records, each carrying
resolved geometry (inches) and style. They are consumed by the deck
writer and discarded once the deck is serialized.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .style_resolver import TextStyle
from .template_model import ShapeConfig


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def of(cls, shape: ShapeConfig) -> "Box":
        return cls(shape.x, shape.y, shape.w, shape.h)


@dataclass
class TextInstruction:
    """A text block; `bullets` set means one bullet paragraph per entry."""
    box: Box
    style: TextStyle
    text: Optional[str] = None
    bullets: Optional[List[str]] = None
    region: str = ""

    @property
    def is_bulleted(self) -> bool:
        return self.bullets is not None


@dataclass
class ImageInstruction:
    box: Box
    data: str  # inline data URI
    region: str = ""


@dataclass
class TableInstruction:
    box: Box
    rows: List[List[Any]]
    font_size: float
    border_color: str
    style: TextStyle
    region: str = "table"


@dataclass
class ChartSeries:
    name: str
    labels: List[str]
    values: List[Any]  # numbers or {"x", "y"} points, unmodified


@dataclass
class ChartInstruction:
    box: Box
    chart_type: str
    series: List[ChartSeries]
    font_size: float
    show_legend: bool = True
    legend_position: str = "bottom"
    region: str = "chart"


Instruction = Union[TextInstruction, ImageInstruction, TableInstruction, ChartInstruction]


@dataclass
class RenderedSlide:
    """Everything needed to draw one slide."""
    layout: str
    instructions: List[Instruction] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add(self, instruction: Optional[Instruction]) -> None:
        if instruction is not None:
            self.instructions.append(instruction)

    def of_type(self, kind: type) -> List[Instruction]:
        return [i for i in self.instructions if isinstance(i, kind)]

    @property
    def body_skipped(self) -> bool:
        return bool(self.errors)
