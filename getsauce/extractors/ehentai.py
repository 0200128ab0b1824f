"""Extractor for e-hentai galleries."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import get_text
from ..helpers import calc_size_in_bytes, get_h1, need_download_list
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

SITE = "https://e-hentai.org/"

_RE_NUMBER_OF_PAGES = re.compile(r"([0-9]+) pages")
_RE_IMG_URLS = re.compile(r'https://e-hentai.org/s[^"]+-[0-9]+')
_RE_FILE_INFO = re.compile(r"<div>[^.]+\.([^:]+):: ([^:]+) :: ([^.]+.[0-9]+) ([A-Z]{2})")
_RE_SOURCE_URL = re.compile(r'<img id="img" src="([^"]+)')
_RE_GALLERY = re.compile(r'https://e-hentai.org/g/[^"]+')


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
    """Return the gallery URLs behind a gallery or search page URL."""
    if "https://e-hentai.org/g/" in url:
        return [url]
    try:
        html = get_text(url)
    except requests.RequestException:
        return []
    return _RE_GALLERY.findall(html)


def _image_page_urls(url: str, html: str) -> list[str]:
    match = _RE_NUMBER_OF_PAGES.search(html)
    if match is None:
        raise ExtractionError("error while trying to access the gallery images")
    number_of_pages = int(match.group(1))

    img_urls = _RE_IMG_URLS.findall(html)
    page = 1
    while len(img_urls) < number_of_pages:
        found = _RE_IMG_URLS.findall(get_text(f"{url}?p={page}"))
        if not found:
            break
        img_urls.extend(found)
        page += 1
    return img_urls


def _size(value: str, unit: str) -> int:
    try:
        return calc_size_in_bytes(float(value), unit)
    except ValueError:
        return 0


def extract_data(url: str) -> list[Data]:
    """Extract every selected image of one gallery."""
    if "?nw=session" not in url:
        url += "?nw=session"

    img_urls = _image_page_urls(url, get_text(url))

    data = []
    for idx in need_download_list(len(img_urls)):
        page_url = img_urls[idx - 1]
        html = get_text(page_url)

        title = get_h1(html, 0)
        if not title:
            raise ExtractionError("invalid image title")

        info = _RE_FILE_INFO.search(html)
        if info is None:
            raise ExtractionError("invalid image file info")
        ext, quality, size_value, size_unit = info.groups()

        sources = _RE_SOURCE_URL.findall(html)
        if len(sources) != 1:
            raise DataSourceParseError()

        data.append(
            Data(
                site=SITE,
                title=f"{title} - {idx}",
                type=DataType.IMAGE,
                streams={
                    "0": Stream(
                        type=DataType.IMAGE,
                        urls=[MediaURL(sources[0], ext.strip())],
                        quality=quality,
                        size=_size(size_value, size_unit),
                    )
                },
                url=page_url,
            )
        )
    return data


class EHentaiExtractor(Extractor):
    """Extracts gallery images from e-hentai."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for gallery_url in urls:
            with _annotate(gallery_url):
                data.extend(extract_data(gallery_url))
        return data