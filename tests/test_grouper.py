"""Unit tests for timestamp normalisation and the post grouper."""

from __future__ import annotations

import os

import pytest

from feed_extractor.extractors import (
    PostGrouper,
    TimestampFormatError,
    normalize_caption,
    normalize_timestamp,
)


class TestNormalizeTimestamp:
    """Tests for normalize_timestamp()."""

    @pytest.mark.parametrize("raw, expected", [
        ("Jan 5, 2024 at 10:00", "01-05-2024"),
        ("January 15, 2023 at 9:41 PM", "01-15-2023"),
        ("Dec 31 2022", "12-31-2022"),
        ("5 March 2021 at 08:00", "03-05-2021"),
        ("Sept 9, 2020", "09-09-2020"),
        ("1/5/2024", "01-05-2024"),
        ("  Jan\n 5 ,  2024  AT 10:00 ", "01-05-2024"),
    ])
    def test_valid(self, raw: str, expected: str):
        assert normalize_timestamp(raw) == expected

    @pytest.mark.parametrize("raw", [
        "Yesterday at 10:00",
        "January 5 at 10:00 PM",
        "Jan 5, 2024 10:00",
        "Foo 5, 2024",
        "Jan 32, 2024",
        "Jan 5, 24",
        "Jan ², 2024",
        "³/5/2024",
        "Jan 5, ２０２４",
        "",
    ])
    def test_malformed(self, raw: str):
        with pytest.raises(TimestampFormatError):
            normalize_timestamp(raw)


class TestNormalizeCaption:

    def test_collapses_whitespace(self):
        assert normalize_caption("  Hello   World\n\n\n  again\t! ") == "Hello World again !"

    def test_blank(self):
        assert normalize_caption(" \n\t ") == ""


class TestPostGrouper:
    """Tests for PostGrouper."""

    def _lines(self, path: str) -> list[str]:
        with open(path, encoding="utf-8") as f:
            return f.read().splitlines()

    def test_timestamp_creates_folder_and_record(self, sinks):
        grouper = PostGrouper(sinks)
        group = grouper.on_timestamp("Jan 5, 2024 at 10:00")

        assert group is not None
        assert group.date_key == "01-05-2024"
        assert group.folder == os.path.join(sinks.output_dir, "01-05-2024")
        assert os.path.isdir(group.folder)
        assert self._lines(group.record_path) == ["TIMESTAMP: Jan 5, 2024 at 10:00"]
        assert grouper.current == group

    def test_caption_without_group_dropped(self, sinks):
        grouper = PostGrouper(sinks)
        assert grouper.on_caption("orphan") is False
        assert grouper.current is None

    def test_caption_appended(self, sinks):
        grouper = PostGrouper(sinks)
        group = grouper.on_timestamp("Jan 5, 2024 at 10:00")
        assert grouper.on_caption("  hello \n\n world ")
        assert self._lines(group.record_path)[-1] == "CAPTION: hello world"

    def test_empty_caption_dropped(self, sinks):
        grouper = PostGrouper(sinks)
        group = grouper.on_timestamp("Jan 5, 2024 at 10:00")
        assert grouper.on_caption("   ") is False
        assert len(self._lines(group.record_path)) == 1

    def test_next_timestamp_replaces_group(self, sinks):
        grouper = PostGrouper(sinks)
        first = grouper.on_timestamp("Jan 5, 2024 at 10:00")
        second = grouper.on_timestamp("Jan 6, 2024 at 09:00")
        assert grouper.current == second
        assert first.record_path != second.record_path

    def test_same_day_posts_share_record(self, sinks):
        grouper = PostGrouper(sinks)
        first = grouper.on_timestamp("Jan 5, 2024 at 10:00")
        second = grouper.on_timestamp("Jan 5, 2024 at 18:30")
        assert first.record_path == second.record_path
        assert self._lines(first.record_path) == [
            "TIMESTAMP: Jan 5, 2024 at 10:00",
            "TIMESTAMP: Jan 5, 2024 at 18:30",
        ]

    def test_malformed_timestamp_clears_group(self, sinks):
        grouper = PostGrouper(sinks)
        grouper.on_timestamp("Jan 5, 2024 at 10:00")

        assert grouper.on_timestamp("Yesterday at 10:00") is None
        assert grouper.current is None
        assert grouper.on_caption("lost") is False

        with open(sinks.error_log_path, encoding="utf-8") as f:
            log = f.read()
        assert "timestamp_malformed" in log
        assert "Yesterday at 10:00" in log
        assert sorted(os.listdir(sinks.output_dir)) == ["01-05-2024", "errorlog.txt"]

    def test_folder_failure_skips_post(self, sinks):
        # A file where the post folder should go makes makedirs fail
        blocker = os.path.join(sinks.output_dir, "01-05-2024")
        with open(blocker, "w", encoding="utf-8") as f:
            f.write("")

        grouper = PostGrouper(sinks)
        assert grouper.on_timestamp("Jan 5, 2024 at 10:00") is None
        assert grouper.current is None

        with open(sinks.error_log_path, encoding="utf-8") as f:
            assert "post_folder_failed" in f.read()

    def test_timestamp_write_failure_leaves_no_group(self, sinks, monkeypatch):
        grouper = PostGrouper(sinks)
        grouper.on_timestamp("Jan 5, 2024 at 10:00")

        def refuse(group, line):
            raise OSError("read-only file system")

        monkeypatch.setattr(sinks, "record", refuse)
        with pytest.raises(OSError):
            grouper.on_timestamp("Jan 6, 2024 at 09:00")

        # Neither the new post nor the previous one receives later captions
        assert grouper.current is None
        assert grouper.on_caption("lost") is False
