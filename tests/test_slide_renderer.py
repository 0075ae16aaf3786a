from __future__ import annotations

from slidemap.modules.asset_resolver import PLACEHOLDER_IMAGE, AssetResolver, encode_data_uri
from slidemap.modules.content_map import parse_slide
from slidemap.modules.instructions import (
    Box,
    ChartInstruction,
    ImageInstruction,
    TableInstruction,
    TextInstruction,
)
from slidemap.modules.slide_renderer import SlideRenderer
from slidemap.modules.template_model import Template


def _render(raw_slide, sample_template, resolver):
    template = Template.from_dict(sample_template)
    slide = parse_slide(raw_slide)
    layout = template.layout_for(slide.layout)
    return SlideRenderer(resolver).render(slide, layout, template.style)


def test_two_series_chart_passes_data_through(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "chart",
        "title": "Revenue",
        "content": {
            "type": "line",
            "labels": ["Q1", "Q2"],
            "datasets": [
                {"label": "2023", "data": [1, 2]},
                {"label": "2024", "data": [3, {"x": "Q2", "y": 4}]},
            ],
        },
    }, sample_template, offline_resolver)

    chart, title = rendered.instructions
    assert isinstance(chart, ChartInstruction)
    assert chart.chart_type == "line"
    assert [s.name for s in chart.series] == ["2023", "2024"]
    assert chart.series[1].values == [3, {"x": "Q2", "y": 4}]
    assert all(s.labels == ["Q1", "Q2"] for s in chart.series)
    assert chart.legend_position == "bottom"
    assert chart.font_size == 11
    assert chart.box == Box(1, 1.2, 8, 4)

    assert isinstance(title, TextInstruction)
    assert title.text == "Revenue"


def test_chart_type_defaults_to_bar(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "chart",
        "content": {"type": "donut", "datasets": [{"label": "A", "data": [1]}]},
    }, sample_template, offline_resolver)
    assert rendered.instructions[0].chart_type == "bar"


def test_broken_chart_skips_body_but_keeps_slide(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "chart",
        "title": "Empty",
        "content": {"type": "bar", "datasets": []},
    }, sample_template, offline_resolver)
    assert rendered.instructions == []
    assert rendered.body_skipped
    assert "no datasets" in rendered.errors[0]


def test_chart_without_content_renders_generically(sample_template, offline_resolver) -> None:
    rendered = _render({"layout": "chart", "title": "Just a title"}, sample_template, offline_resolver)
    assert [i.text for i in rendered.of_type(TextInstruction)] == ["Just a title"]
    assert rendered.of_type(ChartInstruction) == []


def test_table_uses_fallback_region_and_layout_border(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "table",
        "title": "Prices",
        "table": {"data": [["Item", "Price"], ["Tea", "3"]]},
    }, sample_template, offline_resolver)

    table = rendered.of_type(TableInstruction)[0]
    assert table.box == Box(1, 1, 8, 4)
    assert table.border_color == "336699"
    assert table.font_size == 18
    assert table.rows == [["Item", "Price"], ["Tea", "3"]]


def test_partial_comparison_renders_present_sides_then_title(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "comparison",
        "title": "A vs B",
        "comparison": {"left": {"title": "A", "description": "Fast"}},
    }, sample_template, offline_resolver)
    assert [i.region for i in rendered.instructions] == ["leftTitle", "leftDescription", "title"]
    assert [i.text for i in rendered.instructions] == ["A", "Fast", "A vs B"]


def test_generic_walk_follows_layout_order_and_bullets(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "bulleted-list",
        "bullets": ["One", "Two", "Three"],
        "title": "Agenda",
    }, sample_template, offline_resolver)

    title, bullets = rendered.instructions
    assert title.text == "Agenda"
    assert not title.is_bulleted
    assert bullets.bullets == ["One", "Two", "Three"]
    assert bullets.style.color == "112233"
    assert bullets.style.font_family == "Verdana"


def test_generic_walk_skips_missing_fields(sample_template, offline_resolver) -> None:
    rendered = _render({"layout": "title", "title": "Only title"}, sample_template, offline_resolver)
    assert [i.region for i in rendered.instructions] == ["title"]
    assert rendered.instructions[0].style.font_size == 36
    assert rendered.instructions[0].style.bold is True


def test_multi_image_slots_keep_order_and_skip_extras(sample_template, make_session, make_png_response) -> None:
    contents = [bytes([i]) * 8 for i in range(3)]
    session = make_session({
        f"https://img.test/{i}": make_png_response(delay=0.1 - 0.04 * i, content=contents[i])
        for i in range(3)
    })
    rendered = _render({
        "layout": "three-images-with-description",
        "title": "Gallery",
        "images": [f"https://img.test/{i}" for i in range(3)],
        "description": "Three views",
    }, sample_template, AssetResolver(session=session))

    images = rendered.of_type(ImageInstruction)
    assert [i.data for i in images] == [encode_data_uri(c, "image/png") for c in contents[:2]]
    assert [i.box.x for i in images] == [0.5, 3.6]
    assert [i.region for i in rendered.instructions] == [
        "title", "images[0]", "images[1]", "description",
    ]


def test_failed_single_image_uses_placeholder(sample_template, offline_resolver) -> None:
    rendered = _render({
        "layout": "image",
        "title": "Broken",
        "imageUrl": "https://img.test/missing.png",
        "caption": "Still captioned",
    }, sample_template, offline_resolver)

    image = rendered.of_type(ImageInstruction)[0]
    assert image.data == PLACEHOLDER_IMAGE
    assert [i.region for i in rendered.instructions] == ["title", "imageUrl", "caption"]
