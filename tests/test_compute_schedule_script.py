"""Tests for scripts/compute_schedule.py."""

import importlib.util
import json
import sys
from pathlib import Path

import pytest


SCRIPT_PATH = Path(__file__).parent.parent / "scripts" / "compute_schedule.py"


@pytest.fixture(scope="module")
def script():
    """Load the CLI script as a module."""
    spec = importlib.util.spec_from_file_location("compute_schedule_script", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def run(script, monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["compute_schedule.py", *args])
    return script.main()


class TestParseEntries:
    """Tests for input parsing."""

    def test_mixed_entries(self, script):
        captured, fallbacks = script.parse_entries([
            1000,
            None,
            "1970-01-01T00:00:02Z",
            {"captured_at": "1970-01-01T00:00:03", "fallback_ms": 9},
            {"fallback_ms": 4000},
        ])
        assert captured == [1000.0, None, 2000.0, 3000.0, None]
        assert fallbacks == [None, None, None, 9.0, 4000.0]

    def test_not_a_list(self, script):
        with pytest.raises(ValueError, match="must be a JSON list"):
            script.parse_entries({"items": []})

    def test_bad_entry(self, script):
        with pytest.raises(ValueError, match="Unsupported entry at position 1"):
            script.parse_entries([0, [1, 2]])


class TestMain:
    """Tests for the CLI entry point."""

    def test_writes_schedule(self, script, monkeypatch, tmp_path, capsys):
        input_path = tmp_path / "photos.json"
        input_path.write_text(json.dumps([0, 2000]))

        code = run(script, monkeypatch, "--input", str(input_path), "--min_visible_ms", "6000", "--hold_ms", "0")

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["max_end_ms"] == 8000
        assert [s["slots"] for s in output["segments"]] == [[0, None], [0, 1], [None, 1]]
        assert output["config"]["min_visible_ms"] == 6000

    def test_output_file(self, script, monkeypatch, tmp_path):
        input_path = tmp_path / "photos.json"
        input_path.write_text(json.dumps([0, None, 20000]))
        output_path = tmp_path / "schedule.json"

        code = run(
            script, monkeypatch,
            "--input", str(input_path),
            "--output", str(output_path),
            "--resolve_missing",
            "--pretty",
        )

        assert code == 0
        output = json.loads(output_path.read_text())
        assert output["metadata"][1]["visible"] is True
        assert output["metadata"][1]["start_ms"] == 10000

    def test_missing_file(self, script, monkeypatch, tmp_path, capsys):
        code = run(script, monkeypatch, "--input", str(tmp_path / "nope.json"))

        assert code == 1
        assert json.loads(capsys.readouterr().err)["code"] == "FILE_NOT_FOUND"

    def test_invalid_input(self, script, monkeypatch, tmp_path, capsys):
        input_path = tmp_path / "photos.json"
        input_path.write_text(json.dumps([0, "not a date"]))

        code = run(script, monkeypatch, "--input", str(input_path))

        assert code == 2
        assert json.loads(capsys.readouterr().err)["code"] == "INVALID_INPUT"
