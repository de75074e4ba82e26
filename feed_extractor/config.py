"""Pydantic configuration model for an extraction job."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Prefix for the human-clickable link written next to each video ID
DEFAULT_WATCH_BASE_URL = "https://www.facebook.com/watch/?v="


class ExtractConfig(BaseModel):
    """Validated configuration for a single extraction run."""

    input_path: str = Field(..., description="Saved HTML feed page to read.")
    output_dir: str = Field(default="results", description="Root output directory.")
    watch_base_url: str = Field(default=DEFAULT_WATCH_BASE_URL, description="Prefix for clickable video links.")
    download_media: bool = Field(default=True, description="Whether to download images and videos.")
    output_format: str = Field(default="jsonl", description="Post dataset format: jsonl, csv, parquet.")
    request_timeout: int = Field(default=30, ge=5, le=300, description="Per-download timeout in seconds.")
    max_retries: int = Field(default=2, ge=0, le=10, description="Retries per failed download.")
    max_concurrent_downloads: int = Field(default=4, ge=1, le=32, description="Parallel downloads.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    # ── validators ────────────────────────────────────────────────────

    @field_validator("input_path", "output_dir")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("path must not be empty")
        return v

    @field_validator("watch_base_url")
    @classmethod
    def validate_watch_url(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"watch_base_url scheme must be http or https, got '{parsed.scheme}'")
        if not parsed.netloc:
            raise ValueError("watch_base_url must have a valid domain.")
        return v

    @field_validator("output_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("parquet", "csv", "jsonl"):
            raise ValueError(f"output_format must be parquet|csv|jsonl, got '{v}'")
        return v
