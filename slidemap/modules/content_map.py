"""
Content Map Module

Typed model of the abstract presentation: an ordered list of slides, each
a closed variant keyed by its layout tag. Raw JSON produced by the content
generator is narrowed here, once, so the renderer never sees untyped data.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from .errors import ContentMapError

logger = logging.getLogger(__name__)


CHART_TYPES = ("bar", "line", "pie", "scatter")

# Python attribute name -> wire (JSON) key, where they differ
WIRE_KEYS = {
    "image_url": "imageUrl",
}
ATTR_NAMES = {wire: attr for attr, wire in WIRE_KEYS.items()}


# =============================================================================
# Value Types
# =============================================================================

@dataclass
class Dataset:
    """One chart series: a label and its raw data points."""
    label: str
    data: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "data": list(self.data)}


@dataclass
class ChartContent:
    """Chart payload of a chart slide."""
    type: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    datasets: List[Dataset] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ChartContent"]:
        if not isinstance(raw, dict):
            return None
        chart_type = raw.get("type")
        labels = raw.get("labels")
        datasets = []
        for i, ds in enumerate(raw.get("datasets") or []):
            if not isinstance(ds, dict):
                logger.warning(f"Dropping chart dataset {i}: not an object")
                continue
            data = ds.get("data")
            datasets.append(Dataset(
                label=str(ds.get("label", f"Series {i + 1}")),
                data=list(data) if isinstance(data, list) else [],
            ))
        return cls(
            type=chart_type.lower() if isinstance(chart_type, str) else None,
            labels=[str(label) for label in labels] if isinstance(labels, list) else [],
            datasets=datasets,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"datasets": [ds.to_dict() for ds in self.datasets]}
        if self.type:
            result["type"] = self.type
        if self.labels:
            result["labels"] = list(self.labels)
        return result


@dataclass
class TableData:
    """2-D grid of cells; the first row is conventionally a header."""
    data: List[List[Any]] = field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["TableData"]:
        # Accept both {"data": [[...]]} and a bare grid
        grid = raw.get("data") if isinstance(raw, dict) else raw
        if not isinstance(grid, list):
            return None
        rows = [list(row) for row in grid if isinstance(row, list)]
        return cls(data=rows)

    def to_dict(self) -> Dict[str, Any]:
        return {"data": [list(row) for row in self.data]}


@dataclass
class ComparisonSide:
    title: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["ComparisonSide"]:
        if not isinstance(raw, dict):
            return None
        return cls(
            title=_as_str(raw.get("title")),
            description=_as_str(raw.get("description")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (("title", self.title), ("description", self.description)) if v is not None}


@dataclass
class Comparison:
    left: Optional[ComparisonSide] = None
    right: Optional[ComparisonSide] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["Comparison"]:
        if not isinstance(raw, dict):
            return None
        return cls(
            left=ComparisonSide.from_raw(raw.get("left")),
            right=ComparisonSide.from_raw(raw.get("right")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        if self.left:
            result["left"] = self.left.to_dict()
        if self.right:
            result["right"] = self.right.to_dict()
        return result


# =============================================================================
# Slide Variants
# =============================================================================

@dataclass
class Slide:
    """Base slide. Subclasses declare the fields their layout tag carries."""

    TAG: ClassVar[str] = ""

    title: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def layout(self) -> str:
        return self.TAG

    def get(self, key: str) -> Any:
        """
        Look up a value by its wire key (e.g. "imageUrl", "bullets").

        Declared fields win over extra keys. Returns None when absent.
        """
        attr = ATTR_NAMES.get(key, key)
        if attr != "extra" and attr in self._declared():
            return getattr(self, attr)
        return self.extra.get(key)

    @classmethod
    def _declared(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.name != "extra")

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"layout": self.layout}
        for name in self._declared():
            value = getattr(self, name)
            if value is None or value == []:
                continue
            if hasattr(value, "to_dict"):
                value = value.to_dict()
            result[WIRE_KEYS.get(name, name)] = value
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result


@dataclass
class TitleSlide(Slide):
    TAG: ClassVar[str] = "title"
    subtitle: Optional[str] = None


@dataclass
class BulletedListSlide(Slide):
    TAG: ClassVar[str] = "bulleted-list"
    bullets: List[str] = field(default_factory=list)


@dataclass
class QuoteSlide(Slide):
    TAG: ClassVar[str] = "quote"
    text: Optional[str] = None
    author: Optional[str] = None


@dataclass
class ImageSlide(Slide):
    TAG: ClassVar[str] = "image"
    image_url: Optional[str] = None
    caption: Optional[str] = None


@dataclass
class TableSlide(Slide):
    TAG: ClassVar[str] = "table"
    table: Optional[TableData] = None


@dataclass
class ChartSlide(Slide):
    TAG: ClassVar[str] = "chart"
    content: Optional[ChartContent] = None


@dataclass
class ComparisonSlide(Slide):
    TAG: ClassVar[str] = "comparison"
    comparison: Optional[Comparison] = None


@dataclass
class ConclusionSlide(Slide):
    TAG: ClassVar[str] = "conclusion"
    conclusion: Optional[str] = None
    text: Optional[str] = None
    image_url: Optional[str] = None


@dataclass
class ThreeImagesSlide(Slide):
    TAG: ClassVar[str] = "three-images-with-description"
    images: List[str] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class GenericSlide(Slide):
    """A slide whose tag is not one of the known layouts; kept verbatim."""
    tag: str = ""

    @property
    def layout(self) -> str:
        return self.tag

    @classmethod
    def _declared(cls) -> Tuple[str, ...]:
        return ("title",)


SLIDE_TYPES: Dict[str, Type[Slide]] = {
    cls.TAG: cls
    for cls in (
        TitleSlide,
        BulletedListSlide,
        QuoteSlide,
        ImageSlide,
        TableSlide,
        ChartSlide,
        ComparisonSlide,
        ConclusionSlide,
        ThreeImagesSlide,
    )
}


@dataclass
class ContentMap:
    """The abstract, template-independent description of a deck."""
    topic: Optional[str] = None
    slides: List[Slide] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "ContentMap":
        return parse_content_map(raw)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"slides": [s.to_dict() for s in self.slides]}
        if self.topic:
            result["topic"] = self.topic
        return result

    def has_layout(self, tag: str) -> bool:
        return any(s.layout == tag for s in self.slides)


# =============================================================================
# Ingestion
# =============================================================================

def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [s for s in (_as_str(v) for v in value) if s is not None]


_COERCERS = {
    "bullets": _as_str_list,
    "images": _as_str_list,
    "table": TableData.from_raw,
    "content": ChartContent.from_raw,
    "comparison": Comparison.from_raw,
}


def parse_slide(raw: Any, index: int = 0) -> Optional[Slide]:
    """
    Narrow one raw slide object into its typed variant.

    Fields of the wrong type are dropped with a warning; the slide itself
    is only dropped when it is not an object or has no layout tag.
    """
    if not isinstance(raw, dict):
        logger.warning(f"Dropping slides[{index}]: not an object")
        return None

    tag = raw.get("layout")
    if not isinstance(tag, str) or not tag.strip():
        logger.warning(f"Dropping slides[{index}]: missing layout tag")
        return None
    tag = tag.strip()

    cls = SLIDE_TYPES.get(tag, GenericSlide)
    declared = set(cls._declared())
    kwargs: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}

    for key, value in raw.items():
        if key == "layout" or value is None:
            continue
        attr = ATTR_NAMES.get(key, key)
        if attr not in declared:
            extra[key] = value
            continue
        coerced = _COERCERS.get(attr, _as_str)(value)
        if coerced is None:
            logger.warning(f"slides[{index}].{key}: unexpected {type(value).__name__}, ignored")
            continue
        kwargs[attr] = coerced

    # Quotes sometimes arrive nested as {"quote": {"text", "author"}}
    if cls is QuoteSlide and isinstance(extra.get("quote"), dict):
        nested = extra.pop("quote")
        kwargs.setdefault("text", _as_str(nested.get("text")))
        kwargs.setdefault("author", _as_str(nested.get("author")))

    if cls is GenericSlide:
        kwargs["tag"] = tag

    return cls(extra=extra, **kwargs)


def parse_content_map(raw: Any) -> ContentMap:
    """
    Build a ContentMap from JSON-compatible data.

    Accepts either the map itself or a response wrapper {"contentMap": {...}}.

    Raises:
        ContentMapError: if the root or the slide list is unusable
    """
    if isinstance(raw, ContentMap):
        return raw
    if not isinstance(raw, dict):
        raise ContentMapError(["Root value must be an object"])
    if "slides" not in raw and isinstance(raw.get("contentMap"), dict):
        raw = raw["contentMap"]

    issues = []
    slides_raw = raw.get("slides")
    if not isinstance(slides_raw, list):
        issues.append("slides is required and must be a list")

    topic = raw.get("topic")
    if topic is not None and not isinstance(topic, str):
        issues.append("topic must be a string when provided")

    if issues:
        raise ContentMapError(issues)

    slides = []
    for i, slide_raw in enumerate(slides_raw):
        slide = parse_slide(slide_raw, i)
        if slide is not None:
            slides.append(slide)

    return ContentMap(topic=topic or None, slides=slides)
