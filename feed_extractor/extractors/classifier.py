"""Element classifier — map a tree node to its role in the feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from bs4 import Tag


@dataclass(frozen=True)
class Timestamp:
    raw_text: str


@dataclass(frozen=True)
class Caption:
    raw_text: str


@dataclass(frozen=True)
class MediaContainer:
    """A ``div``; may carry a video descriptor in ``data-store``."""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ImageMarker:
    """An ``i`` element; may carry a background image in ``style``."""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Irrelevant:
    pass


ClassifiedElement = Union[Timestamp, Caption, MediaContainer, ImageMarker, Irrelevant]


def classify(element: Tag) -> ClassifiedElement:
    """Classify *element* by tag name."""
    name = (element.name or "").lower()
    if name == "abbr":
        return Timestamp(element.get_text())
    if name == "p":
        return Caption(element.get_text())
    if name == "div":
        return MediaContainer(dict(element.attrs))
    if name == "i":
        return ImageMarker(dict(element.attrs))
    return Irrelevant()
