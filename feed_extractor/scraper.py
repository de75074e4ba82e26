"""Feed scraper — the single document-order walk over a parsed feed page."""

from __future__ import annotations

import os
from typing import Callable, Iterable, Optional

import structlog
from bs4 import Tag

from feed_extractor.extractors import (
    Caption,
    ClassifiedElement,
    ImageMarker,
    Irrelevant,
    MediaContainer,
    MediaDescriptorError,
    MediaResolver,
    PostGrouper,
    Timestamp,
    classify,
    derive_file_name,
)
from feed_extractor.fetcher import DownloadTask
from feed_extractor.sinks import OutputSinks
from feed_extractor.structurer import PostStructurer

logger = structlog.get_logger(__name__)


class FeedScraper:
    """Walks feed elements once, in document order.

    For every element:
    1. Classify it by tag.
    2. On a timestamp, start a new post (folder + ``post.txt``).
    3. On a caption, append it to the current post.
    4. On a ``div``/``i``, resolve the video or image, append record and
       ledger lines, and queue a download into the post folder.

    Elements that arrive with no current post are dropped. The walk never
    waits on downloads; it returns the queued tasks for the caller to run.
    """

    def __init__(
        self,
        sinks: OutputSinks,
        watch_base_url: str,
        structurer: Optional[PostStructurer] = None,
        download_media: bool = True,
    ) -> None:
        self.sinks = sinks
        self.watch_base_url = watch_base_url
        self.structurer = structurer or PostStructurer()
        self.download_media = download_media
        self.grouper = PostGrouper(sinks)
        self.resolver = MediaResolver()
        self._tasks: list[DownloadTask] = []
        self._queued: set[str] = set()
        self._handlers: dict[type, Callable[[ClassifiedElement], None]] = {
            Timestamp: self._on_timestamp,
            Caption: self._on_caption,
            MediaContainer: self._on_media_container,
            ImageMarker: self._on_image_marker,
            Irrelevant: self._on_irrelevant,
        }

    def walk(self, elements: Iterable[Tag]) -> list[DownloadTask]:
        """Process *elements* and return the download tasks in document order."""
        self._tasks = []
        self._queued = set()
        for element in elements:
            self.process(classify(element))

        logger.info(
            "walk_complete",
            posts=len(self.structurer.posts),
            downloads_queued=len(self._tasks),
        )
        return list(self._tasks)

    def process(self, item: ClassifiedElement) -> None:
        """Dispatch one classified element."""
        handler = self._handlers[type(item)]
        try:
            handler(item)
        except OSError as exc:
            self.sinks.diagnostic("record_write_failed", element=type(item).__name__, error=str(exc))
        except Exception as exc:
            self.sinks.diagnostic(
                "element_failed", element=type(item).__name__, error=f"{type(exc).__name__}: {exc}"
            )

    @property
    def tasks(self) -> list[DownloadTask]:
        return list(self._tasks)

    # ── handlers ──────────────────────────────────────────────────────

    def _on_timestamp(self, item: Timestamp) -> None:
        group = self.grouper.on_timestamp(item.raw_text)
        if group is not None:
            self.structurer.add_post(group)

    def _on_caption(self, item: Caption) -> None:
        if self.grouper.current is None:
            self.structurer.add_dropped()
            return
        if self.grouper.on_caption(item.raw_text):
            self.structurer.count("captions")

    def _on_media_container(self, item: MediaContainer) -> None:
        group = self.grouper.current
        if group is None:
            return

        try:
            video = self.resolver.resolve_video(item.attributes)
        except MediaDescriptorError as exc:
            self.sinks.diagnostic("media_descriptor_invalid", post=group.date_key, error=str(exc))
            return

        if video.video_id:
            self.sinks.record(group, f"CLICKABLE VIDEO URL: {self.watch_base_url}{video.video_id}")
            self.structurer.add_video_id(video.video_id)

        if video.url:
            self.sinks.record(group, f"VIDEO URL: {video.url}")
            self.sinks.log_video(video.url)
            self.structurer.count("videos")
            self._enqueue(video.url, group.folder)

    def _on_image_marker(self, item: ImageMarker) -> None:
        group = self.grouper.current
        if group is None:
            return

        url = self.resolver.resolve_image(item.attributes)
        if not url:
            return

        self.sinks.log_image(url)
        self.sinks.record(group, f"IMAGE URL: {url}")
        self.structurer.count("images")
        self._enqueue(url, group.folder)

    def _on_irrelevant(self, item: Irrelevant) -> None:
        pass

    # ── helpers ───────────────────────────────────────────────────────

    def _enqueue(self, url: str, folder: str) -> None:
        if not self.download_media:
            return
        file_name = derive_file_name(url)
        if file_name is None:
            logger.debug("download_skipped_unknown_type", url=url)
            return
        destination = os.path.join(folder, file_name)
        # same-date posts share a folder; one download per file
        if destination in self._queued:
            logger.debug("download_duplicate_skipped", url=url, path=destination)
            return
        self._queued.add(destination)
        self._tasks.append(DownloadTask(source_url=url, destination_path=destination))
