from __future__ import annotations

import pytest

from slidemap.modules.content_map import (
    BulletedListSlide,
    ChartSlide,
    ContentMap,
    GenericSlide,
    ImageSlide,
    QuoteSlide,
    TableSlide,
    parse_content_map,
)
from slidemap.modules.errors import ContentMapError


def test_parse_content_map_builds_typed_slides() -> None:
    content_map = parse_content_map({
        "topic": "Solar",
        "slides": [
            {"layout": "bulleted-list", "title": "Why", "bullets": ["Cheap", "Clean"]},
            {"layout": "image", "title": "Panels", "imageUrl": "https://x/p.png", "caption": "Roof"},
            {"layout": "chart", "title": "Growth", "content": {
                "type": "LINE", "labels": ["2023", "2024"],
                "datasets": [{"label": "GW", "data": [1, {"x": 2, "y": 3}]}],
            }},
            {"layout": "table", "table": {"data": [["A", "B"], [1, 2]]}},
        ],
    })
    assert content_map.topic == "Solar"
    bullets, image, chart, table = content_map.slides

    assert isinstance(bullets, BulletedListSlide)
    assert bullets.bullets == ["Cheap", "Clean"]

    assert isinstance(image, ImageSlide)
    assert image.image_url == "https://x/p.png"
    assert image.get("imageUrl") == "https://x/p.png"

    assert isinstance(chart, ChartSlide)
    assert chart.content.type == "line"
    assert chart.content.datasets[0].data == [1, {"x": 2, "y": 3}]

    assert isinstance(table, TableSlide)
    assert table.table.data == [["A", "B"], [1, 2]]


def test_unknown_layout_becomes_generic_slide_with_extra_fields() -> None:
    content_map = parse_content_map({
        "slides": [{"layout": "timeline", "title": "History", "timeline": [{"year": "1990"}]}],
    })
    slide = content_map.slides[0]
    assert isinstance(slide, GenericSlide)
    assert slide.layout == "timeline"
    assert slide.get("title") == "History"
    assert slide.get("timeline") == [{"year": "1990"}]


def test_wrong_typed_field_is_dropped_not_the_slide() -> None:
    content_map = parse_content_map({
        "slides": [{"layout": "bulleted-list", "title": "T", "bullets": "not a list"}],
    })
    slide = content_map.slides[0]
    assert slide.title == "T"
    assert slide.bullets == []


def test_invalid_slide_entries_are_dropped_in_order() -> None:
    content_map = parse_content_map({
        "slides": [
            {"layout": "title", "title": "One"},
            "oops",
            {"title": "no layout"},
            {"layout": "title", "title": "Two"},
        ],
    })
    assert [s.title for s in content_map.slides] == ["One", "Two"]


def test_nested_quote_is_lifted() -> None:
    content_map = parse_content_map({
        "slides": [{"layout": "quote", "quote": {"text": "Stay hungry", "author": "SJ"}}],
    })
    slide = content_map.slides[0]
    assert isinstance(slide, QuoteSlide)
    assert slide.text == "Stay hungry"
    assert slide.author == "SJ"


def test_content_map_wrapper_is_accepted() -> None:
    content_map = parse_content_map({"contentMap": {"slides": [{"layout": "title"}]}})
    assert len(content_map.slides) == 1


def test_rejects_non_list_slides() -> None:
    with pytest.raises(ContentMapError) as exc:
        parse_content_map({"slides": "not-a-list"})
    assert "slides is required and must be a list" in str(exc.value)
    assert exc.value.issues == ["slides is required and must be a list"]


def test_rejects_non_object_root() -> None:
    with pytest.raises(ContentMapError):
        parse_content_map(["slides"])


def test_to_dict_uses_wire_keys() -> None:
    content_map = ContentMap(topic="T", slides=[ImageSlide(title="I", image_url="u")])
    assert content_map.to_dict() == {
        "topic": "T",
        "slides": [{"layout": "image", "title": "I", "imageUrl": "u"}],
    }
