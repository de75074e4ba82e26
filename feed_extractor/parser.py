"""Document parser — load a saved feed page into a BeautifulSoup tree."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator, Optional

import chardet
import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)


class DocumentReadError(Exception):
    """The input document could not be read or decoded."""


@dataclass
class ParsedDocument:
    """Result of parsing a saved feed page."""
    soup: BeautifulSoup
    encoding: str
    source: str = ""

    def iter_elements(self) -> Iterator[Tag]:
        """Yield every element of the tree in document order."""
        yield from self.soup.find_all(True)


class FeedDocumentParser:
    """Reads a saved HTML feed page from disk and parses it with lxml.

    The raw bytes are decoded as UTF-8 when possible; otherwise *chardet*
    picks the encoding.
    """

    def load(self, path: str) -> ParsedDocument:
        """Read and parse the file at *path*.

        Raises:
            DocumentReadError: if the file is missing, unreadable or empty.
        """
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as exc:
            raise DocumentReadError(f"cannot read {path}: {exc}") from exc

        if not raw.strip():
            raise DocumentReadError(f"document is empty: {path}")

        encoding = self._detect_encoding(raw)
        html = raw.decode(encoding, errors="replace")
        logger.debug("document_loaded", path=path, size_bytes=len(raw), encoding=encoding)
        return self.parse(html, source=os.path.abspath(path), encoding=encoding)

    def parse(self, html: str, source: str = "", encoding: str = "utf-8") -> ParsedDocument:
        """Parse an already-decoded HTML string."""
        soup = BeautifulSoup(html, "lxml")
        return ParsedDocument(soup=soup, encoding=encoding, source=source)

    # ── internals ─────────────────────────────────────────────────────

    @staticmethod
    def _detect_encoding(raw: bytes) -> str:
        """Return ``utf-8`` if *raw* decodes cleanly, else chardet's guess."""
        try:
            raw.decode("utf-8")
            return "utf-8"
        except UnicodeDecodeError:
            pass
        result = chardet.detect(raw)
        encoding: Optional[str] = result.get("encoding")
        return encoding or "utf-8"
