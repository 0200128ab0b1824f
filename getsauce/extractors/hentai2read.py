"""Extractor for hentai2read galleries."""

from __future__ import annotations

import json
import re
from contextlib import contextmanager
from html import unescape
from typing import Iterator

import requests

from ..fetch import get_text
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

SITE = "https://hentai2read.com/"
CDN = "https://static.hentaicdn.com/hentai"

_RE_JSON = re.compile(r"{\s*'title'[\s\S]*?}")
_RE_TITLE = re.compile(r"[^\[(|]*")
_RE_GALLERY = re.compile(r'([^/]*/)" class="title"')


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
    """Return the gallery URLs behind ``url``."""
    url = url.split("#")[0]
    if "_" in url:
        return [url]
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    return [SITE + part for part in _RE_GALLERY.findall(html)]


def build_image_urls(parts: list[str]) -> list[MediaURL]:
    """Turn image paths from the gallery data into full CDN URLs."""
    return [MediaURL(CDN + part, last_item(part.split("."))) for part in parts]


def extract_data(url: str) -> Data:
    """Extract one gallery."""
    html = get_text(url + "1/")
    match = _RE_JSON.search(html)
    if match is None:
        raise DataSourceParseError("gallery data not found")
    try:
        gallery = json.loads(match.group(0).replace("'", '"'))
    except json.JSONDecodeError as exc:
        raise DataSourceParseError(f"invalid gallery data: {exc}") from exc
    fields = {key.lower(): value for key, value in gallery.items()}

    raw_title = str(fields.get("title") or "")
    title = unescape(_RE_TITLE.match(raw_title).group(0).strip())

    return Data(
        site=SITE,
        title=title,
        type=DataType.IMAGE,
        streams={
            "0": Stream(
                type=DataType.IMAGE,
                urls=build_image_urls(list(fields.get("images") or [])),
                size=0,
            )
        },
        url=url,
    )


class Hentai2ReadExtractor(Extractor):
    """Extracts galleries from hentai2read."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for gallery_url in urls:
            with _annotate(gallery_url):
                data.append(extract_data(gallery_url))
        return data