"""Extractor for hentai2w videos."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import get_meta, last_item
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

SITE = "https://hentai2w.com/"

_RE_SOURCE = re.compile(r'<source.*src="([^"]+)"')
_RE_VIDEO_LINK = re.compile(r'[^"]*/video/[^"]*')


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
    """Return the video page URLs behind ``url``."""
    if url.startswith(SITE + "video/"):
        return [url]
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    return _RE_VIDEO_LINK.findall(html)


def extract_data(url: str) -> Data:
    """Extract one video page."""
    html = get_text(url)
    match = _RE_SOURCE.search(html)
    video_url = match.group(1) if match else ""
    if not video_url or video_url.startswith("<"):
        raise DataSourceParseError("video source not found")

    try:
        size = content_size(video_url, url)
    except (requests.RequestException, ValueError):
        size = 0

    return Data(
        site=SITE,
        title=get_meta(html, "og:title"),
        type=DataType.VIDEO,
        streams={
            "0": Stream(
                type=DataType.VIDEO,
                urls=[MediaURL(video_url, last_item(video_url.split(".")))],
                size=size,
            )
        },
        url=url,
    )


class Hentai2WExtractor(Extractor):
    """Extracts videos from hentai2w."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for page_url in urls:
            with _annotate(page_url):
                data.append(extract_data(page_url))
        return data