"""Shared test fixtures for the feed extractor tests."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from feed_extractor.sinks import OutputSinks


SAMPLE_FEED_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>Saved Feed</title>
    <style>.x { color: red; }</style>
</head>
<body>
    <p>Orphan caption before any post</p>
    <div class="story">
        <abbr>Jan 5, 2024 at 10:00</abbr>
        <p>  First   post
           caption  </p>
        <i style="background-image: url('https\3a //scontent.example.com/v/photo1.jpg?stp\3d dst-jpg\26 _nc_cat\3d 1');"></i>
    </div>
    <div class="story">
        <abbr>Jan 6, 2024 at 09:00</abbr>
        <p>Second post caption</p>
        <div data-store='{"src":"https://video.example.com/v/clip.mp4?tag=1","videoID":"42"}'></div>
    </div>
</body>
</html>"""


@pytest.fixture
def sample_feed_html() -> str:
    return SAMPLE_FEED_HTML


@pytest.fixture
def sample_feed_file(tmp_path) -> str:
    path = tmp_path / "input.html"
    path.write_text(SAMPLE_FEED_HTML, encoding="utf-8")
    return str(path)


@pytest.fixture
def sinks(tmp_path):
    out = OutputSinks(str(tmp_path / "results"))
    out.prepare()
    yield out
    out.close()


@pytest.fixture
def make_tag():
    """Return a builder for the first element of an HTML fragment."""
    def _make(html: str):
        soup = BeautifulSoup(html, "lxml")
        return soup.body.find(True)
    return _make
