"""URL codec — pull image URLs out of CSS style attributes and name media files."""

from __future__ import annotations

import enum
import posixpath
import re
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from bs4 import Tag

# CSS escapes the feed markup uses inside background-image URLs
_ESCAPES = {"3a": ":", "3d": "=", "26": "&"}
_ESCAPE_RE = re.compile(r"\\(3a|3d|26) ")

# Tried in order after the last "https" token
_CLOSING_DELIMITERS = ("'", '"', ")")


class AssetKind(enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"


_EXTENSIONS = ((".jpg", AssetKind.IMAGE), (".mp4", AssetKind.VIDEO))


def extract_image_url(element: Tag | Mapping[str, Any]) -> str:
    """Return the still-encoded URL embedded in *element*'s ``style``.

    *element* may be a tag or its attribute mapping.

    The markup stores images as ``background-image: url('https\\3a //...')``.
    This takes the text from the last ``https`` token up to the next single
    quote. It is a heuristic: a style holding several URLs yields only the
    last one. Returns ``""`` when there is nothing to extract.
    """
    style = element.get("style")
    if not style or "http" not in style:
        return ""

    start = style.rfind("https")
    if start == -1:
        return ""

    for delimiter in _CLOSING_DELIMITERS:
        end = style.find(delimiter, start + 1)
        if end != -1:
            return style[start:end]
    return ""


def decode_image_url(raw: str) -> str:
    """Replace the ``\\3a ``, ``\\3d `` and ``\\26 `` escapes in *raw*.

    Decoding never produces a backslash, so applying it twice is the same as
    applying it once.
    """
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], raw)


def _last_segment(url: str) -> str:
    return posixpath.basename(urlparse(url).path)


def classify_asset_extension(url: str) -> AssetKind:
    """Classify *url* as image, video or unknown from its final path segment."""
    segment = _last_segment(url).lower()
    for ext, kind in _EXTENSIONS:
        if ext in segment:
            return kind
    return AssetKind.UNKNOWN


def derive_file_name(url: str) -> Optional[str]:
    """Return the file name to save *url* under, or None if it should be skipped.

    >>> derive_file_name("https://x.com/a/img123.jpg?x=1")
    'img123.jpg'
    """
    segment = _last_segment(url)
    lowered = segment.lower()
    for ext, _kind in _EXTENSIONS:
        idx = lowered.find(ext)
        if idx != -1:
            return segment[: idx + len(ext)]
    return None
