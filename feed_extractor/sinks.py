"""Output sinks — named append-only channels under the output directory."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Optional

import structlog

from feed_extractor.logger import attach_error_log, detach_error_log

if TYPE_CHECKING:
    from feed_extractor.extractors.grouper import PostGroup

logger = structlog.get_logger(__name__)

IMAGE_LEDGER = "imageURLs.txt"
VIDEO_LEDGER = "videoURLs.txt"
ERROR_LOG = "errorlog.txt"
POST_RECORD = "post.txt"


class OutputPathError(Exception):
    """An output directory or file could not be created."""


class OutputSinks:
    """Owns every text file a run appends to.

    Channels:
        - ``record(group, line)`` → ``<output_dir>/<date>/post.txt``
        - ``log_image(url)`` → ``imageURLs.txt``
        - ``log_video(url)`` → ``videoURLs.txt``
        - ``diagnostic(event, **fields)`` → ``errorlog.txt``

    Each append opens and closes the file, so every line is flushed on its own.
    Diagnostics go through a structlog file handler that is attached in
    :meth:`prepare` and released in :meth:`close`.
    """

    def __init__(self, output_dir: str) -> None:
        self.output_dir = output_dir
        self.image_ledger_path = os.path.join(output_dir, IMAGE_LEDGER)
        self.video_ledger_path = os.path.join(output_dir, VIDEO_LEDGER)
        self.error_log_path = os.path.join(output_dir, ERROR_LOG)
        self.diagnostic_count = 0
        self._diagnostics: Optional[structlog.stdlib.BoundLogger] = None

    def prepare(self) -> None:
        """Create the output root.

        Raises:
            OutputPathError: if the directory cannot be created.
        """
        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as exc:
            raise OutputPathError(f"cannot create output directory {self.output_dir}: {exc}") from exc
        self._diagnostics = attach_error_log(self.error_log_path)

    def close(self) -> None:
        """Release the ``errorlog.txt`` handler."""
        if self._diagnostics is not None:
            detach_error_log()
            self._diagnostics = None

    def open_post(self, group: "PostGroup") -> None:
        """Create the post folder and an empty record file if they are missing."""
        try:
            os.makedirs(group.folder, exist_ok=True)
            if not os.path.exists(group.record_path):
                open(group.record_path, "a", encoding="utf-8").close()
        except OSError as exc:
            raise OutputPathError(f"cannot create post folder {group.folder}: {exc}") from exc

    # ── channels ──────────────────────────────────────────────────────

    def record(self, group: "PostGroup", line: str) -> None:
        self._append(group.record_path, line)

    def log_image(self, url: str) -> None:
        self._append(self.image_ledger_path, url)

    def log_video(self, url: str) -> None:
        self._append(self.video_ledger_path, url)

    def diagnostic(self, event: str, **fields: Any) -> None:
        """Record a recoverable failure in ``errorlog.txt`` and the console log."""
        self.diagnostic_count += 1
        logger.warning(event, **fields)
        if self._diagnostics is not None:
            self._diagnostics.warning(event, **fields)

    # ── helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _append(path: str, line: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
