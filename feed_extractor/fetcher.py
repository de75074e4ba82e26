"""Asset fetcher — stream media files to disk with aiohttp."""

from __future__ import annotations

import asyncio
import os
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import aiohttp
import structlog
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from feed_extractor.config import ExtractConfig
from feed_extractor.sinks import OutputSinks

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class DownloadTask:
    """A media URL and the file it should be saved to."""
    source_url: str
    destination_path: str


@dataclass
class FetchResult:
    """Outcome of downloading a single asset."""
    url: str
    path: str
    ok: bool = False
    bytes_written: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None


class AssetSink(Protocol):
    async def fetch_and_store(self, url: str, destination: str) -> FetchResult: ...


class AssetFetcher:
    """Downloads assets with a shared aiohttp session and bounded retries.

    Usage::

        async with AssetFetcher(config) as fetcher:
            result = await fetcher.fetch_and_store(url, "results/01-05-2024/a.jpg")
    """

    def __init__(self, config: ExtractConfig) -> None:
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "AssetFetcher":
        timeout = aiohttp.ClientTimeout(total=self.config.request_timeout)
        headers = {"User-Agent": self.config.user_agent}
        self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self

    async def __aexit__(self, *exc) -> None:
        if self._session:
            await self._session.close()

    # ── public API ────────────────────────────────────────────────────

    async def fetch_and_store(self, url: str, destination: str) -> FetchResult:
        """Download *url* to *destination*, retrying with exponential backoff."""
        last_error = ""
        for attempt in range(self.config.max_retries + 1):
            try:
                return await self._download(url, destination)
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                last_error = f"{type(exc).__name__}: {exc}".rstrip(": ")
                self._remove_partial(destination)
                if attempt < self.config.max_retries:
                    wait = min(2 ** attempt, 30)
                    logger.warning(
                        "download_retry", url=url, attempt=attempt + 1,
                        max_retries=self.config.max_retries, wait=wait, error=last_error,
                    )
                    await asyncio.sleep(wait)

        return FetchResult(url=url, path=destination, ok=False, error=last_error)

    # ── internals ─────────────────────────────────────────────────────

    async def _download(self, url: str, destination: str) -> FetchResult:
        assert self._session is not None
        start = time.monotonic()
        async with self._session.get(url, allow_redirects=True) as resp:
            resp.raise_for_status()
            written = 0
            with open(destination, "wb") as f:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    f.write(chunk)
                    written += len(chunk)
        elapsed = time.monotonic() - start
        logger.debug("download_ok", url=url, path=destination, size_bytes=written, time=f"{elapsed:.2f}s")
        return FetchResult(url=url, path=destination, ok=True, bytes_written=written, elapsed=elapsed)

    @staticmethod
    def _remove_partial(path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.debug("partial_remove_failed", path=path, error=str(exc))


class MediaDownloader:
    """Runs download tasks concurrently and logs failures to the diagnostic channel.

    Text records are already written when this runs, so a failed download only
    leaves a line in ``errorlog.txt``.
    """

    def __init__(
        self,
        sink: AssetSink,
        sinks: OutputSinks,
        max_concurrent: int = 4,
        show_progress: bool = True,
    ) -> None:
        self.sink = sink
        self.sinks = sinks
        self.show_progress = show_progress
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def download_all(self, tasks: list[DownloadTask]) -> list[FetchResult]:
        """Download every task; results come back in task order."""
        if not tasks:
            return []

        if not self.show_progress:
            return list(await asyncio.gather(*(self._run(task) for task in tasks)))

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
        ) as progress:
            bar = progress.add_task("Downloading", total=len(tasks))

            async def tracked(task: DownloadTask) -> FetchResult:
                result = await self._run(task)
                progress.update(bar, advance=1)
                return result

            return list(await asyncio.gather(*(tracked(task) for task in tasks)))

    async def _run(self, task: DownloadTask) -> FetchResult:
        async with self._semaphore:
            try:
                result = await self.sink.fetch_and_store(task.source_url, task.destination_path)
            except Exception as exc:
                result = FetchResult(
                    url=task.source_url, path=task.destination_path,
                    ok=False, error=f"{type(exc).__name__}: {exc}",
                )

        if not result.ok:
            self.sinks.diagnostic(
                "download_failed", url=task.source_url,
                path=task.destination_path, error=result.error,
            )
        return result
