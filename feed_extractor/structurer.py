"""Post structurer — one summary row per post, exported with pandas."""

from __future__ import annotations

import json
import os
from typing import Any

import pandas as pd
import structlog

from feed_extractor.extractors.grouper import PostGroup
from feed_extractor.fetcher import FetchResult

logger = structlog.get_logger(__name__)

POST_COLUMNS = [
    "date_key", "timestamp", "folder", "captions", "images", "videos", "video_ids",
]


class PostStructurer:
    """Accumulates per-post counts during the walk and exports them.

    Rows follow document order. Two posts with the same date share a folder
    but keep separate rows.
    """

    def __init__(self) -> None:
        self._posts: list[dict[str, Any]] = []
        self._downloads: list[FetchResult] = []
        self._dropped = 0
        self._start_time: float = 0.0
        self._end_time: float = 0.0

    def set_start_time(self, t: float) -> None:
        self._start_time = t

    def set_end_time(self, t: float) -> None:
        self._end_time = t

    # ── accumulation ──────────────────────────────────────────────────

    def add_post(self, group: PostGroup) -> None:
        self._posts.append({
            "date_key": group.date_key,
            "timestamp": group.timestamp_text,
            "folder": group.folder,
            "captions": 0,
            "images": 0,
            "videos": 0,
            "video_ids": [],
        })

    def count(self, field: str) -> None:
        """Increment *field* (captions, images, videos) on the latest post."""
        self._posts[-1][field] += 1

    def add_video_id(self, video_id: str) -> None:
        self._posts[-1]["video_ids"].append(video_id)

    def add_dropped(self) -> None:
        """Count a caption that arrived with no current post."""
        self._dropped += 1

    def add_downloads(self, results: list[FetchResult]) -> None:
        self._downloads.extend(results)

    @property
    def posts(self) -> list[dict[str, Any]]:
        return self._posts

    # ── export ────────────────────────────────────────────────────────

    def export(self, output_dir: str, fmt: str = "jsonl", diagnostics: int = 0) -> dict[str, str]:
        """Write the post dataset and the run report; return name → path."""
        os.makedirs(output_dir, exist_ok=True)
        paths: dict[str, str] = {}

        if self._posts:
            df = pd.DataFrame(self._posts, columns=POST_COLUMNS)
            # Lists do not fit csv cells
            df["video_ids"] = df["video_ids"].apply(lambda ids: ",".join(ids))
            posts_path = self._write_df(df, output_dir, "posts", fmt)
            paths["posts"] = posts_path
            logger.info("posts_exported", rows=len(df), path=posts_path)

        report_path = os.path.join(output_dir, "extraction_report.json")
        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(self.generate_report(diagnostics), f, indent=2, ensure_ascii=False)
        paths["report"] = report_path
        logger.info("report_exported", path=report_path)
        return paths

    def generate_report(self, diagnostics: int = 0) -> dict[str, Any]:
        """Build the run summary."""
        elapsed = self._end_time - self._start_time if self._end_time else 0
        failed = [r for r in self._downloads if not r.ok]
        return {
            "total_posts": len(self._posts),
            "total_captions": sum(p["captions"] for p in self._posts),
            "total_images": sum(p["images"] for p in self._posts),
            "total_videos": sum(p["videos"] for p in self._posts),
            "dropped_captions": self._dropped,
            "downloads_ok": len(self._downloads) - len(failed),
            "downloads_failed": len(failed),
            "bytes_downloaded": sum(r.bytes_written for r in self._downloads),
            "diagnostics": diagnostics,
            "time_taken_seconds": round(elapsed, 2),
            "failed_downloads": [{"url": r.url, "error": r.error} for r in failed[:100]],
        }

    # ── helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _write_df(df: pd.DataFrame, output_dir: str, name: str, fmt: str) -> str:
        if fmt == "parquet":
            path = os.path.join(output_dir, f"{name}.parquet")
            df.to_parquet(path, index=False, engine="pyarrow")
        elif fmt == "csv":
            path = os.path.join(output_dir, f"{name}.csv")
            df.to_csv(path, index=False, encoding="utf-8")
        elif fmt == "jsonl":
            path = os.path.join(output_dir, f"{name}.jsonl")
            df.to_json(path, orient="records", lines=True, force_ascii=False)
        else:
            raise ValueError(f"Unsupported format: {fmt}")
        return path
