from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from pptx import Presentation

from slidemap.__main__ import main
from slidemap.catalog_cli import cli
from slidemap.modules.outline_generator import OutlineItem, load_outline, save_outline


def _run(monkeypatch, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", ["slidemap", *argv])
    main()


def _write(path: Path, data) -> str:
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_build_writes_deck(monkeypatch, capsys, tmp_path: Path, sample_template) -> None:
    content_map = _write(tmp_path / "cm.json", {"contentMap": {
        "topic": "CLI Deck",
        "slides": [
            {"layout": "title", "title": "Hello"},
            {"layout": "timeline", "title": "Skipped"},
        ],
    }})
    template = _write(tmp_path / "tpl.json", sample_template)
    out_dir = tmp_path / "out"

    _run(monkeypatch, "build", content_map, "--template", template, "-o", str(out_dir))

    output = capsys.readouterr().out
    assert "Slides: 1" in output
    assert "timeline" in output
    deck = Presentation(io.BytesIO((out_dir / "CLI Deck.pptx").read_bytes()))
    assert len(deck.slides) == 1


def test_build_with_catalog_template(monkeypatch, tmp_path: Path) -> None:
    content_map = _write(tmp_path / "cm.json", {"slides": [{"layout": "quote", "quote": {"text": "Hi"}}]})
    _run(monkeypatch, "build", content_map, "--template-id", "paper", "-o", str(tmp_path))
    # paper has no quote layout, so the deck is empty but still written
    assert (tmp_path / "Generated_Presentation.pptx").exists()


def test_unknown_template_id_exits_with_message(monkeypatch, tmp_path: Path) -> None:
    content_map = _write(tmp_path / "cm.json", {"slides": []})
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "build", content_map, "--template-id", "missing", "-o", str(tmp_path))
    assert exc.value.code == "Error: Template not found: missing"


def test_colors_prints_gradient(monkeypatch, capsys, tmp_path: Path, png_bytes) -> None:
    image = tmp_path / "cover.png"
    image.write_bytes(png_bytes)
    _run(monkeypatch, "colors", str(image))
    assert capsys.readouterr().out.strip() == "linear-gradient(to bottom right, rgb(200,30,30))"


def test_catalog_list_and_show() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["list"])
    assert result.exit_code == 0
    assert "ocean" in result.output
    assert "paper" in result.output

    result = runner.invoke(cli, ["show", "paper"])
    assert result.exit_code == 0
    assert "Georgia" in result.output

    result = runner.invoke(cli, ["show", "nope"])
    assert result.exit_code != 0


def test_catalog_list_empty_directory(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli, ["--templates", str(tmp_path), "list"])
    assert result.exit_code == 0
    assert "No templates found" in result.output


def test_missing_or_invalid_input_files_exit_cleanly(monkeypatch, tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "build", str(tmp_path / "nope.json"), "-o", str(tmp_path))
    assert str(exc.value.code).startswith("Error: Cannot read")

    content_map = _write(tmp_path / "cm.json", {"slides": []})
    broken = tmp_path / "tpl.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "build", content_map, "--template", str(broken), "-o", str(tmp_path))
    assert str(exc.value.code).startswith("Error: Cannot read template")

    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "content-map", str(tmp_path / "missing_outline.json"), "--no-images")
    assert str(exc.value.code).startswith("Error: Cannot read outline")


def test_saved_outline_loads_back(tmp_path: Path) -> None:
    path = save_outline([OutlineItem(title="Intro", bullets=["a"])], tmp_path / "o" / "outline.json")
    assert load_outline(path) == [{"title": "Intro", "bullets": ["a"]}]
