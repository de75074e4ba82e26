"""Post grouper — turn timestamp elements into per-post output folders."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

import structlog

from feed_extractor.sinks import POST_RECORD, OutputPathError, OutputSinks

logger = structlog.get_logger(__name__)

_MONTHS: dict[str, int] = {}
for _i, _name in enumerate(
    ("january", "february", "march", "april", "may", "june", "july",
     "august", "september", "october", "november", "december"),
    start=1,
):
    _MONTHS[_name] = _i
    _MONTHS[_name[:3]] = _i
_MONTHS["sept"] = 9

# "Jan 5, 2024 at 10:00" -> date part "Jan 5, 2024"
_TIME_SPLIT = re.compile(r"\bat\b", re.IGNORECASE)
_DATE_SEPARATORS = re.compile(r"[\s,/:.\-]+")


class TimestampFormatError(ValueError):
    """Timestamp text does not reduce to month, day and year."""


@dataclass(frozen=True)
class PostGroup:
    """One post: its date key and where its output lives."""
    date_key: str
    folder: str
    record_path: str
    timestamp_text: str = ""


def _is_number(token: str) -> bool:
    # isdigit() accepts superscripts that int() rejects
    return token.isascii() and token.isdecimal()


def _month_number(token: str) -> Optional[int]:
    if _is_number(token):
        n = int(token)
        return n if 1 <= n <= 12 else None
    return _MONTHS.get(token.lower())


def normalize_timestamp(raw: str) -> str:
    """Return the ``MM-DD-YYYY`` folder key for a feed timestamp.

    Accepts ``Jan 5, 2024 at 10:00``, ``January 5 2024``, ``5 January 2024``
    and ``1/5/2024``. Anything after the word ``at`` is the time of day and is
    ignored.

    Raises:
        TimestampFormatError: if the date part is not exactly three tokens or
            the tokens are not a valid month, day and four-digit year.
    """
    date_part = _TIME_SPLIT.split(raw, maxsplit=1)[0]
    tokens = [t for t in _DATE_SEPARATORS.split(date_part) if t]
    if len(tokens) != 3:
        raise TimestampFormatError(f"expected 3 date tokens, got {len(tokens)} in {raw!r}")

    first, second, year = tokens
    if not _is_number(second) and _month_number(second) is not None:
        month, day = _month_number(second), first
    else:
        month, day = _month_number(first), second
    if month is None:
        raise TimestampFormatError(f"no month in {raw!r}")

    if not _is_number(day) or not 1 <= int(day) <= 31:
        raise TimestampFormatError(f"invalid day {day!r} in {raw!r}")
    if not (_is_number(year) and len(year) == 4):
        raise TimestampFormatError(f"invalid year {year!r} in {raw!r}")

    return f"{month:02d}-{int(day):02d}-{year}"


def normalize_caption(text: str) -> str:
    """Trim and collapse every whitespace run (blank lines included) to one space."""
    return " ".join(text.split())


class PostGrouper:
    """Tracks the current post while the document is walked.

    A post starts at its timestamp element. Captions and media seen before the
    first timestamp, or after a timestamp that could not be parsed, have no
    current post and are dropped.
    """

    def __init__(self, sinks: OutputSinks) -> None:
        self.sinks = sinks
        self._current: Optional[PostGroup] = None

    @property
    def current(self) -> Optional[PostGroup]:
        return self._current

    def on_timestamp(self, raw_text: str) -> Optional[PostGroup]:
        """Start a new post for *raw_text* and write its ``TIMESTAMP:`` line."""
        self._current = None
        text = normalize_caption(raw_text)
        try:
            key = normalize_timestamp(text)
        except TimestampFormatError as exc:
            self.sinks.diagnostic("timestamp_malformed", raw=text, error=str(exc))
            return None

        folder = os.path.join(self.sinks.output_dir, key)
        group = PostGroup(
            date_key=key,
            folder=folder,
            record_path=os.path.join(folder, POST_RECORD),
            timestamp_text=text,
        )
        try:
            self.sinks.open_post(group)
        except OutputPathError as exc:
            self.sinks.diagnostic("post_folder_failed", folder=folder, error=str(exc))
            return None

        self.sinks.record(group, f"TIMESTAMP: {text}")
        self._current = group
        logger.debug("post_opened", date_key=key, folder=folder)
        return group

    def on_caption(self, text: str) -> bool:
        """Append a ``CAPTION:`` line to the current post.

        Returns False when the caption was dropped.
        """
        if self._current is None:
            return False
        caption = normalize_caption(text)
        if not caption:
            return False
        self.sinks.record(self._current, f"CAPTION: {caption}")
        return True
