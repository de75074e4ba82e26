"""Tests for the output channels and the errorlog.txt diagnostics file."""

from __future__ import annotations

import logging
import os

from feed_extractor.logger import DIAGNOSTICS_LOGGER
from feed_extractor.sinks import OutputSinks


def _lines(path: str) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()


class TestDiagnostics:
    """Tests for OutputSinks.diagnostic()."""

    def test_structured_line(self, sinks):
        sinks.diagnostic("download_failed", url="https://x.com/a.jpg", error="TimeoutError: ")

        [line] = _lines(sinks.error_log_path)
        assert line.startswith("timestamp='")
        assert "level='warning' event='download_failed'" in line
        assert "url='https://x.com/a.jpg'" in line
        assert sinks.diagnostic_count == 1

    def test_one_line_per_event(self, sinks):
        sinks.diagnostic("timestamp_malformed", raw="Yesterday at 10:00")
        sinks.diagnostic("post_folder_failed", folder="/nope")

        lines = _lines(sinks.error_log_path)
        assert len(lines) == 2
        assert "event='timestamp_malformed'" in lines[0]
        assert "event='post_folder_failed'" in lines[1]

    def test_no_file_until_first_event(self, sinks):
        assert not os.path.exists(sinks.error_log_path)

    def test_new_run_does_not_write_to_previous_log(self, sinks, tmp_path):
        sinks.diagnostic("first_run")
        second = OutputSinks(str(tmp_path / "second"))
        second.prepare()
        try:
            second.diagnostic("second_run")
        finally:
            second.close()

        assert "second_run" not in "\n".join(_lines(sinks.error_log_path))
        assert "second_run" in _lines(second.error_log_path)[0]

    def test_close_releases_handler(self, tmp_path):
        out = OutputSinks(str(tmp_path / "results"))
        out.prepare()
        out.close()

        assert logging.getLogger(DIAGNOSTICS_LOGGER).handlers == []
        out.diagnostic("after_close")
        assert not os.path.exists(out.error_log_path)
        assert out.diagnostic_count == 1


class TestChannels:
    """Tests for the record and ledger channels."""

    def test_ledgers_append(self, sinks):
        sinks.log_image("https://x.com/a.jpg")
        sinks.log_image("https://x.com/a.jpg")
        sinks.log_video("https://x.com/v.mp4")
        assert _lines(sinks.image_ledger_path) == ["https://x.com/a.jpg"] * 2
        assert _lines(sinks.video_ledger_path) == ["https://x.com/v.mp4"]
