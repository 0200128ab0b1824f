"""Extractor for hentaivideos.net episodes and series pages."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import get_file_ext, get_h1
from ..models import (
    Data,
    DataSourceParseError,
    DataType,
    ExtractionError,
    Extractor,
    MediaURL,
    Stream,
)

SITE = "https://hentaivideos.net/"

_RE_EPISODE_URL = re.compile(re.escape(SITE) + r"[^/]*?episode-\d+")
_RE_VIDEO_SOURCE = re.compile(r'[^"]+\.mp4')


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
    """Return the episode URLs behind an episode or series URL."""
    if _RE_EPISODE_URL.search(url):
        return [url]
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    return _RE_EPISODE_URL.findall(html)


def extract_data(url: str) -> Data:
    """Extract the video of one episode."""
    html = get_text(url)
    match = _RE_VIDEO_SOURCE.search(html)
    if match is None:
        raise DataSourceParseError()
    source = match.group(0)

    size = content_size(source, SITE)

    return Data(
        site=SITE,
        title=get_h1(html, 0).strip(),
        type=DataType.VIDEO,
        streams={
            "0": Stream(
                type=DataType.VIDEO,
                urls=[MediaURL(source, get_file_ext(source))],
                size=size,
            )
        },
        url=url,
    )


class HentaiVideosExtractor(Extractor):
    """Extracts episodes from hentaivideos.net."""

    def extract(self, url: str) -> list[Data]:
        data = []
        for episode_url in parse_url(url):
            with _annotate(episode_url):
                data.append(extract_data(episode_url))
        return data