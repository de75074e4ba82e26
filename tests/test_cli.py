"""Tests for the typer command line."""

from __future__ import annotations

import os

from typer.testing import CliRunner

from main import cli

runner = CliRunner()


class TestCli:

    def test_extract_without_download(self, sample_feed_file: str, tmp_path):
        out = str(tmp_path / "results")
        result = runner.invoke(cli, ["--input", sample_feed_file, "--output-dir", out, "--no-download"])
        assert result.exit_code == 0, result.output
        assert "Extraction Report" in result.output
        assert os.path.exists(os.path.join(out, "01-05-2024", "post.txt"))
        assert os.path.exists(os.path.join(out, "posts.jsonl"))

    def test_missing_input_exits_1(self, tmp_path):
        out = str(tmp_path / "results")
        result = runner.invoke(cli, ["--input", str(tmp_path / "nope.html"), "--output-dir", out])
        assert result.exit_code == 1
        assert os.path.exists(os.path.join(out, "errorlog.txt"))

    def test_bad_format_exits_1(self, sample_feed_file: str, tmp_path):
        result = runner.invoke(cli, ["--input", sample_feed_file, "--output-dir", str(tmp_path), "--format", "xml"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
