"""Tests for the command-line entry point."""

import pytest

from refineplay.cli import main


@pytest.fixture(autouse=True)
def no_config(monkeypatch, tmp_path):
    """Keep a developer's config.yaml out of the tests."""
    monkeypatch.setattr("refineplay.config._project_root", lambda: tmp_path)


class TestList:
    def test_lists_embedded_problems(self, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert "essay" in out
        assert "Essay Quality (Improve Clarity) (4 passes)" in out


class TestShow:
    def test_shows_one_pass(self, capsys):
        assert main(["show", "essay", "2"]) == 0
        out = capsys.readouterr().out
        assert "Pass 2" in out
        assert "Clarity 85% | Correctness 85% | Structure 80% | Errors 2 | Average 83%" in out
        assert "Key insight: Second pass" in out

    def test_pass_out_of_range(self, capsys):
        assert main(["show", "essay", "9"]) == 2
        assert "has passes 1-4" in capsys.readouterr().err

    def test_unknown_problem(self, capsys):
        assert main(["show", "nope", "1"]) == 2
        assert "Unknown problem: 'nope'" in capsys.readouterr().err


class TestTimeline:
    def test_writes_html(self, tmp_path, capsys):
        out_path = tmp_path / "essay.html"
        assert main(["timeline", "essay", "--passes", "2", "-o", str(out_path)]) == 0
        html_text = out_path.read_text(encoding="utf-8")
        assert "Pass 2 (Final)" in html_text
        assert "Pass 3" not in html_text

    def test_zero_passes_clamps_to_one(self, tmp_path, capsys):
        out_path = tmp_path / "essay.html"
        assert main(["timeline", "essay", "--passes", "0", "-o", str(out_path)]) == 0
        html_text = out_path.read_text(encoding="utf-8")
        assert "Pass 1 (Initial)" in html_text
        assert "Pass 2" not in html_text


class TestPlay:
    def test_plays_to_completion(self, tmp_path, capsys):
        html_path = tmp_path / "played.html"
        code = main([
            "play", "math", "--passes", "3", "--speed", "1000", "--pause-ms", "0",
            "--html", str(html_path),
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "Pass 1 (Initial) of 3" in out
        assert "Pass 3 (Final) of 3" in out
        assert "Refinement complete" in out
        assert html_path.exists()

    def test_zero_passes_plays_one_pass(self, capsys):
        code = main(["play", "math", "--passes", "0", "--speed", "1000", "--pause-ms", "0"])
        assert code == 0
        out = capsys.readouterr().out
        assert "Pass 1 (Initial) of 1" in out
        assert "Pass 2" not in out
        assert "Refinement complete" in out

    def test_unknown_problem(self, capsys):
        assert main(["play", "nope"]) == 2
