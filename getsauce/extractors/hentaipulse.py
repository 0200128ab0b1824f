"""Extractor for hentaipulse episodes and listing pages."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import get_file_ext, remove_adjacent_duplicates
from ..models import (
    Data,
    DataSourceParseError,
    DataType,
    ExtractionError,
    Extractor,
    MediaURL,
    Stream,
    URLParseError,
)

SITE = "https://hentaipulse.com"

_RE_TITLE = re.compile(r'<link rel="canonical" href="https://hentaipulse\.com/([^/]+)')
_RE_EPISODES = re.compile(r'post-(\d+)"')
_RE_SOURCE_URL = re.compile(r'main_video_url"[^"]+"([^"]+)')


@contextmanager
def _annotate(url: str) -> Iterator[None]:
    try:
        yield
    except ExtractionError as exc:
        if exc.url is None:
            exc.url = url
        raise
    except (requests.RequestException, ValueError) as exc:
        raise ExtractionError(str(exc), url) from exc


def parse_url(url: str) -> list[str]:
    """Return the episode URLs behind an episode or listing URL."""
    if url.count("/") == 4:
        return [url]
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    posts = remove_adjacent_duplicates(_RE_EPISODES.findall(html))
    return [f"{SITE}?p={post}" for post in posts]


def extract_data(url: str) -> Data:
    """Extract the video of one episode."""
    html = get_text(url)
    title_match = _RE_TITLE.search(html)
    title = title_match.group(1) if title_match else ""

    source_match = _RE_SOURCE_URL.search(html)
    if source_match is None or not source_match.group(1):
        raise DataSourceParseError()
    source = source_match.group(1)

    try:
        size = content_size(source, SITE + "/")
    except (requests.RequestException, ValueError):
        size = 0

    return Data(
        site=SITE,
        title=title,
        type=DataType.VIDEO,
        streams={
            "0": Stream(
                type=DataType.VIDEO,
                urls=[MediaURL(source, get_file_ext(source))],
                size=size,
            )
        },
        url=f"{SITE}/{title}",
    )


class HentaiPulseExtractor(Extractor):
    """Extracts episodes from hentaipulse."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for episode_url in urls:
            with _annotate(episode_url):
                data.append(extract_data(episode_url))
        return data