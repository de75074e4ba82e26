"""Media resolver — image URLs from style attributes, videos from data-store JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from feed_extractor.extractors.url_codec import decode_image_url, extract_image_url

# Attribute on video containers holding the JSON media descriptor
DATA_STORE_ATTR = "data-store"


class MediaDescriptorError(ValueError):
    """A ``data-store`` attribute is not a JSON object."""


@dataclass(frozen=True)
class VideoDescriptor:
    url: Optional[str] = None
    video_id: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.url and not self.video_id


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


class MediaResolver:
    """Resolves the media a classified element refers to."""

    def resolve_image(self, attributes: Mapping[str, Any]) -> Optional[str]:
        """Return the decoded background-image URL, or None."""
        raw = extract_image_url(attributes)
        if not raw:
            return None
        return decode_image_url(raw) or None

    def resolve_video(self, attributes: Mapping[str, Any]) -> VideoDescriptor:
        """Read ``src`` and ``videoID`` from the ``data-store`` descriptor.

        Returns an empty descriptor when the attribute is absent.

        Raises:
            MediaDescriptorError: if the attribute is not a JSON object.
        """
        payload = attributes.get(DATA_STORE_ATTR)
        if not payload:
            return VideoDescriptor()

        try:
            data = json.loads(payload)
        except (TypeError, json.JSONDecodeError) as exc:
            raise MediaDescriptorError(f"invalid {DATA_STORE_ATTR} JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise MediaDescriptorError(f"{DATA_STORE_ATTR} is {type(data).__name__}, expected object")

        return VideoDescriptor(url=_as_text(data.get("src")), video_id=_as_text(data.get("videoID")))
