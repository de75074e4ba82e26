"""Extractor components — classify elements, group posts, resolve media."""

from __future__ import annotations

from feed_extractor.extractors.classifier import (
    Caption,
    ClassifiedElement,
    ImageMarker,
    Irrelevant,
    MediaContainer,
    Timestamp,
    classify,
)
from feed_extractor.extractors.grouper import (
    PostGroup,
    PostGrouper,
    TimestampFormatError,
    normalize_caption,
    normalize_timestamp,
)
from feed_extractor.extractors.media import MediaDescriptorError, MediaResolver, VideoDescriptor
from feed_extractor.extractors.url_codec import (
    AssetKind,
    classify_asset_extension,
    decode_image_url,
    derive_file_name,
    extract_image_url,
)

__all__ = [
    "AssetKind",
    "Caption",
    "ClassifiedElement",
    "ImageMarker",
    "Irrelevant",
    "MediaContainer",
    "MediaDescriptorError",
    "MediaResolver",
    "PostGroup",
    "PostGrouper",
    "Timestamp",
    "TimestampFormatError",
    "VideoDescriptor",
    "classify",
    "classify_asset_extension",
    "decode_image_url",
    "derive_file_name",
    "extract_image_url",
    "normalize_caption",
    "normalize_timestamp",
]
