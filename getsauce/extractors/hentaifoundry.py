"""Extractor for hentai-foundry posts, user galleries and category pages."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import remove_adjacent_duplicates
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

SITE = "https://www.hentai-foundry.com/"
ENTER_BLOCK_URL = "https://www.hentai-foundry.com/?enterAgree=1&size=0"
PAGE_SIZE = 25

_RE_POST = re.compile(r'pictures/user/[^/]+/\d+/[^"]+')
_RE_IMG = re.compile(
    r'<img width="(\d+)" height="(\d+)" [^/]+//'
    r'(pictures\.hentai-foundry\.com[^\d]+[^/]+/([^\.]+)\.([^"]+))'
)


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


class HentaiFoundryExtractor(Extractor):
    """Extracts pictures; ``amount`` is how many posts a listing should yield."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount
        self.session = requests.Session()

    def parse_url(self, url: str) -> list[str]:
        """Pass the age gate, then return the post URLs behind ``url``."""
        self.session.cookies.clear()
        try:
            get_text(ENTER_BLOCK_URL, session=self.session)
        except requests.RequestException:
            return []

        if _RE_POST.search(url):
            return [url]

        out: list[str] = []
        page = 0
        while True:
            page += 1
            try:
                html = get_text(f"{url}?page={page}", session=self.session)
            except requests.RequestException:
                return []
            found = remove_adjacent_duplicates(_RE_POST.findall(html))
            out.extend(SITE + post for post in found)
            if len(out) >= self.amount or len(found) < PAGE_SIZE:
                break
        return out

    def extract_data(self, url: str) -> Data:
        """Extract the picture of one post."""
        html = get_text(url, session=self.session)
        match = _RE_IMG.search(html)
        if match is None:
            raise DataSourceParseError()
        width, height, src, name, ext = match.groups()

        try:
            size = content_size(url, SITE, self.session)
        except (requests.RequestException, ValueError):
            size = 0

        return Data(
            site=SITE,
            title=name,
            type=DataType.IMAGE,
            streams={
                "0": Stream(
                    type=DataType.IMAGE,
                    urls=[MediaURL("https://" + src, ext)],
                    quality=f"{width}x{height}",
                    size=size,
                )
            },
            url=url,
        )

    def extract(self, url: str) -> list[Data]:
        urls = self.parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for post_url in urls:
            with _annotate(post_url):
                data.append(self.extract_data(post_url))
        return data