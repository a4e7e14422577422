from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from safetytour import config
from safetytour.main import app
from safetytour.models import reset_engine


runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path):
    saved = (config.OUT_DIR, config.DB_PATH, config.UPLOAD_ROOT)
    config.set_out_dir(tmp_path / "out")
    reset_engine()
    yield
    config.OUT_DIR, config.DB_PATH, config.UPLOAD_ROOT = saved
    reset_engine()


def _write_tour(path, responses) -> None:
    path.write_text(
        json.dumps({"site": "Depot", "area": "Bay 1", "tour_date": "2025-03-04T09:30:00", "responses": responses}),
        encoding="utf-8",
    )


def test_render_json_writes_pdf(tmp_path, make_image) -> None:
    make_image("uploads/a.png")
    source = tmp_path / "tour.json"
    _write_tour(source, [{"code": "1.1", "question": "Fence ok?", "result": "pass", "images": ["uploads/a.png"]}])
    output = tmp_path / "out" / "tour.pdf"

    result = runner.invoke(app, ["render-json", str(source), str(output), "--uploads", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert output.read_bytes().startswith(b"%PDF")


def test_render_json_missing_source(tmp_path) -> None:
    result = runner.invoke(app, ["render-json", str(tmp_path / "nope.json"), str(tmp_path / "x.pdf")])
    assert result.exit_code == 1
    assert not (tmp_path / "x.pdf").exists()


def test_score_command(tmp_path) -> None:
    source = tmp_path / "tour.json"
    _write_tour(source, [{"result": "Pass"}, {"result": "Fail"}, {"result": "N/A"}])
    result = runner.invoke(app, ["score", str(source)])
    assert result.exit_code == 0
    assert "Score: 50.00%" in result.output
    assert "na=1" in result.output


def test_render_unknown_tour(tmp_path) -> None:
    result = runner.invoke(app, ["render", "42", "--out", str(tmp_path / "out")])
    assert result.exit_code == 1


def test_render_json_defaults_to_download_name(tmp_path) -> None:
    source = tmp_path / "tour.json"
    _write_tour(source, [{"code": "1.1", "question": "Fence ok?", "result": "pass"}])

    result = runner.invoke(app, ["render-json", str(source)])

    assert result.exit_code == 0, result.output
    expected = tmp_path / "out" / "SafetyTour_depot_04-03-2025_09-30.pdf"
    assert expected.exists()
    assert str(expected) in result.output


def test_render_json_skips_corrupt_upload(tmp_path, make_image) -> None:
    make_image("uploads/a.png")
    (tmp_path / "uploads" / "b.jpg").write_bytes(b"not really a jpeg")
    source = tmp_path / "tour.json"
    _write_tour(source, [{"code": "1.1", "question": "Fence ok?", "images": ["uploads/b.jpg", "uploads/a.png"]}])
    output = tmp_path / "tour.pdf"

    result = runner.invoke(app, ["render-json", str(source), str(output), "--uploads", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert result.exception is None
    assert output.exists()
