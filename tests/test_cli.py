"""Tests for the command-line interface."""

import json

import cv2
import pytest

from page_autocrop.cli import main, output_filename
from page_autocrop.models import AnalysisConfig


@pytest.fixture
def scan(page_image, tmp_path):
    path = tmp_path / "scan.png"
    cv2.imwrite(str(path), page_image(tilt=-2.0))
    return path


class TestAnalyzeCommand:
    def test_prints_convert_command(self, scan, capsys):
        main(["analyze", str(scan), "-n", "50"])
        out = capsys.readouterr().out.strip()
        assert out.startswith(f"convert {scan} -rotate ")
        assert out.endswith(str(scan.with_name("_scan.png")))

    def test_json(self, scan, capsys):
        main(["analyze", str(scan), "-n", "50", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["degrees"] == pytest.approx(2.0, abs=0.5)
        assert set(data["confidence"]) == {"top", "right", "bottom", "left"}

    def test_output_file(self, scan, tmp_path):
        out = tmp_path / "result.txt"
        main(["analyze", str(scan), "-n", "50", "-o", str(out)])
        assert out.read_text().startswith("convert ")

    def test_config_with_override(self, scan, tmp_path, capsys):
        config = tmp_path / "autocrop.json"
        config.write_text(json.dumps({"samples_per_side": 5000, "threshold": 10}))
        main(["analyze", str(scan), "--config", str(config), "-n", "50", "--json"])
        assert "degrees" in json.loads(capsys.readouterr().out)

    def test_inline_config(self, scan, capsys):
        main(["analyze", str(scan), "--config", '{"samples_per_side": 50}', "--json"])
        assert "degrees" in json.loads(capsys.readouterr().out)

    def test_invalid_config(self, scan):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(scan), "--config", "{not json"])
        assert "Invalid --config" in str(exc.value.code)

    @pytest.mark.parametrize(
        "content",
        [
            '{"threshold": "x"}',
            '{"clean": 5}',
            '{"samples_per_side": 50.0}',
            '{"samples_per_side": 50, "clean": {"chunk_size": 8.0}}',
            "[1, 2]",
        ],
    )
    def test_invalid_config_file(self, scan, tmp_path, content):
        config = tmp_path / "autocrop.json"
        config.write_text(content)
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(scan), "--config", str(config)])
        assert "Invalid --config" in str(exc.value.code)

    def test_invalid_inline_sample_count(self, scan):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(scan), "--config", '{"samples_per_side": 50.0}'])
        assert "samples_per_side" in str(exc.value.code)

    def test_long_inline_config(self, scan, capsys):
        text = AnalysisConfig(samples_per_side=50).to_json(indent=4)
        assert len(text) > 255
        main(["analyze", str(scan), "--config", text, "--json"])
        assert "degrees" in json.loads(capsys.readouterr().out)

    def test_missing_image(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(tmp_path / "missing.png")])
        assert "Could not read image file" in exc.value.code

    def test_zero_samples(self, scan):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(scan), "-n", "0"])
        assert "samples_per_side" in exc.value.code

    def test_strict_low_confidence(self, scan):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(scan), "-n", "50", "--strict", "--min-confidence", "1.1"])
        assert "Low confidence" in exc.value.code

    def test_debug_dir(self, scan, tmp_path):
        debug_dir = tmp_path / "debug"
        main(["analyze", str(scan), "-n", "50", "--debug-dir", str(debug_dir)])
        names = sorted(p.name for p in debug_dir.iterdir())
        assert names == [
            "01_side_top.png",
            "02_side_right.png",
            "03_side_bottom.png",
            "04_side_left.png",
            "05_transform.png",
        ]


def test_default_config(capsys):
    main(["default-config"])
    assert json.loads(capsys.readouterr().out)["threshold"] == 12.0


def test_no_command(capsys):
    with pytest.raises(SystemExit):
        main([])


def test_output_filename():
    assert output_filename("pages/p001.jpg") == "pages/_p001.jpg"
