"""Extractor for hentaiworld episodes and listing pages."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import get_meta
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

SITE = "https://hentaiworld.tv/"
TITLE_SUFFIX = " - HentaiWorld"

_RE_MASS_URL = re.compile(
    r"(?:https://hentaiworld\.tv/)"
    r"(?:all-episodes|uncensored|3d|hentai-videos/category|hentai-videos/tag)/"
)
_RE_EPISODE_URL = re.compile(r"hentai-videos/(?:3d/)?(?:.+episode-[0-9]*)?")
_RE_LISTED_EPISODE = re.compile(r'"display-all-posts-background"><a href="([^"]*)')
_RE_FILE_INFO = re.compile(r"window.open\('([^']+\.([0-9a-zA-z]*))")
_RE_FILE_INFO_BACKUP = re.compile(r"src='(.*\.(mp4*)).*")


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
    if not _RE_MASS_URL.search(url):
        return [url] if _RE_EPISODE_URL.search(url) else []
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    return _RE_LISTED_EPISODE.findall(html)


def extract_data(url: str) -> Data:
    """Extract the video of one episode."""
    html = get_text(url)
    title = get_meta(html, "og:title").removesuffix(TITLE_SUFFIX)
    title = title.replace("&#8211;", "-")

    match = _RE_FILE_INFO.search(html) or _RE_FILE_INFO_BACKUP.search(html)
    if match is None:
        raise DataSourceParseError()
    source = match.group(1).replace(" ", "%20")
    ext = match.group(2)

    try:
        size = content_size(source, SITE)
    except (requests.RequestException, ValueError):
        size = 0

    return Data(
        site=SITE,
        title=title,
        type=DataType.VIDEO,
        streams={
            "0": Stream(type=DataType.VIDEO, urls=[MediaURL(source, ext)], size=size)
        },
        url=url,
    )


class HentaiWorldExtractor(Extractor):
    """Extracts episodes from hentaiworld."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for episode_url in urls:
            with _annotate(episode_url):
                data.append(extract_data(episode_url))
        return data