"""Extractor for danbooru posts and overview pages."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import last_item
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

SITE = "https://danbooru.donmai.us"

# The site serves simpler pages to old browsers.
_HEADERS = {"User-Agent": "Mozilla/4.0 (compatible; MSIE 9.0; Windows NT 6.1)"}

_RE_IMG_DATA = re.compile(
    r'data-width="([^"]+)"[ ]+data-height="([^"]+)"[\s\S]*?alt="([^"]+)".+src="([^"]+)"'
)
_RE_PAGE = re.compile(r"page=([0-9]+)")
_RE_POST = re.compile(r"/posts/[0-9]+")
_RE_ID = re.compile(r'data-id="([^"]+)')


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
    """Return the post paths behind a post or overview page URL."""
    if not _RE_PAGE.search(url):
        match = _RE_POST.search(url)
        if match is None:
            raise URLParseError(url=url)
        return [match.group(0)]

    html = get_text(url, _HEADERS)
    return ["/posts/" + post_id for post_id in _RE_ID.findall(html)]


def extract_data(post_url: str) -> Data:
    """Extract the image of one post."""
    html = get_text(post_url, _HEADERS)
    match = _RE_IMG_DATA.search(html)
    if match is None:
        raise DataSourceParseError()
    width, height, name, src = match.groups()

    try:
        size = content_size(src, post_url)
    except (requests.RequestException, ValueError) as exc:
        raise ExtractionError("no image size found") from exc

    return Data(
        site=SITE,
        title=name,
        type=DataType.IMAGE,
        streams={
            "0": Stream(
                type=DataType.IMAGE,
                urls=[MediaURL(src, last_item(src.split(".")))],
                quality=f"{width} x {height}",
                size=size,
            )
        },
        url=post_url,
    )


class DanbooruExtractor(Extractor):
    """Extracts images from danbooru."""

    def extract(self, url: str) -> list[Data]:
        with _annotate(url):
            posts = parse_url(url)
        data = []
        for post in posts:
            with _annotate(SITE + post):
                data.append(extract_data(SITE + post))
        return data