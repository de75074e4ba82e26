"""Job Manager — validates inputs, prepares output, and runs one extraction."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Optional

import structlog

from feed_extractor.config import ExtractConfig
from feed_extractor.fetcher import AssetFetcher, AssetSink, DownloadTask, FetchResult, MediaDownloader
from feed_extractor.parser import DocumentReadError, FeedDocumentParser
from feed_extractor.scraper import FeedScraper
from feed_extractor.sinks import OutputPathError, OutputSinks
from feed_extractor.structurer import PostStructurer

logger = structlog.get_logger(__name__)


class JobFailed(Exception):
    """The run could not start: input or output root unusable."""


class JobManager:
    """Entry point that runs an entire extraction job.

    1. Validate inputs → build ``ExtractConfig``.
    2. Create the output root.
    3. Load and parse the saved feed page.
    4. Walk the document, writing post records and ledgers.
    5. Download queued media into the post folders.
    6. Export the post dataset and report.
    """

    def __init__(
        self,
        input_path: str,
        output_dir: str = "results",
        output_format: str = "jsonl",
        download_media: bool = True,
        request_timeout: int = 30,
        max_retries: int = 2,
        max_concurrent_downloads: int = 4,
        watch_base_url: Optional[str] = None,
        show_progress: bool = True,
        asset_sink: Optional[AssetSink] = None,
    ) -> None:
        options: dict[str, Any] = {
            "input_path": input_path,
            "output_dir": output_dir,
            "output_format": output_format,
            "download_media": download_media,
            "request_timeout": request_timeout,
            "max_retries": max_retries,
            "max_concurrent_downloads": max_concurrent_downloads,
        }
        if watch_base_url is not None:
            options["watch_base_url"] = watch_base_url
        self.config = ExtractConfig(**options)
        self.show_progress = show_progress
        self.asset_sink = asset_sink

    def run(self) -> dict[str, Any]:
        """Synchronous entry — runs the async pipeline and returns the report."""
        return asyncio.run(self.run_async())

    async def run_async(self) -> dict[str, Any]:
        """Async entry — performs the full extraction lifecycle.

        Raises:
            JobFailed: if the output root cannot be created or the input
                document cannot be read.
        """
        cfg = self.config
        logger.info(
            "job_started",
            input_path=cfg.input_path,
            output_dir=cfg.output_dir,
            download_media=cfg.download_media,
        )

        # ── prepare output ────────────────────────────────────────────
        sinks = OutputSinks(cfg.output_dir)
        try:
            sinks.prepare()
        except OutputPathError as exc:
            logger.error("output_root_failed", output_dir=cfg.output_dir, error=str(exc))
            raise JobFailed(str(exc)) from exc

        try:
            return await self._extract(sinks)
        finally:
            sinks.close()

    async def _extract(self, sinks: OutputSinks) -> dict[str, Any]:
        cfg = self.config

        # ── load input ────────────────────────────────────────────────
        try:
            document = FeedDocumentParser().load(cfg.input_path)
        except DocumentReadError as exc:
            sinks.diagnostic("input_unreadable", path=cfg.input_path, error=str(exc))
            raise JobFailed(str(exc)) from exc

        structurer = PostStructurer()
        structurer.set_start_time(time.monotonic())

        # ── walk ──────────────────────────────────────────────────────
        scraper = FeedScraper(
            sinks=sinks,
            watch_base_url=cfg.watch_base_url,
            structurer=structurer,
            download_media=cfg.download_media,
        )
        tasks = scraper.walk(document.iter_elements())

        # ── download ──────────────────────────────────────────────────
        if tasks:
            results = await self._download(tasks, sinks)
            structurer.add_downloads(results)

        structurer.set_end_time(time.monotonic())

        # ── export ────────────────────────────────────────────────────
        paths = structurer.export(cfg.output_dir, fmt=cfg.output_format, diagnostics=sinks.diagnostic_count)
        logger.info("data_exported", paths=paths)

        report = structurer.generate_report(diagnostics=sinks.diagnostic_count)
        logger.info("job_complete", posts=report["total_posts"], downloads_failed=report["downloads_failed"])
        return report

    async def _download(self, tasks: list[DownloadTask], sinks: OutputSinks) -> list[FetchResult]:
        cfg = self.config
        if self.asset_sink is not None:
            downloader = MediaDownloader(
                self.asset_sink, sinks, cfg.max_concurrent_downloads, self.show_progress,
            )
            return await downloader.download_all(tasks)

        async with AssetFetcher(cfg) as fetcher:
            downloader = MediaDownloader(
                fetcher, sinks, cfg.max_concurrent_downloads, self.show_progress,
            )
            return await downloader.download_all(tasks)
