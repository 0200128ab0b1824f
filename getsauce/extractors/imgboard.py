"""Extractor for booru-style image boards (gelbooru, rule34, konachan, yande.re ...)."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

import requests

from ..fetch import content_size, get_text
from ..helpers import media_type
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

PID_STEP = 42

_RE_SITE_NAME = re.compile(r"http?s://(?:www.)?([^.]*)")
_RE_SITE_URL = re.compile(r"https://[^/]*")
_RE_POST_URL = re.compile(r'<a.+href="([^"]+\.([^"?]+)).+>\s*(?:Original|Download PNG)')
_RE_POST_BACKUP = re.compile(
    r'<a.+href="([^"]+\.([^"?]+)).+>\s*(?:Original|View larger|Download PNG)'
)
_RE_ID = re.compile(r"Id: [^<]*")
_RE_SIZE = re.compile(r"Size: [^<]*")
_RE_DIRECT_LINK = re.compile(r"https://[^/]*/[^/]*/([^/]*)/[^.\s]*\.[^\.\s]*\..*(\w{3,4})$")
_RE_SINGLE = re.compile(r"(?:show/|&id=)[0-9]*")
_RE_LISTING = re.compile(r"(?:s=list|post\?|page=[0-9]+)")
_RE_BASE_QUERY = re.compile(r"(.+(?:pid=|page=))([0-9]+)([^\s]+)?")
_RE_POST = re.compile(
    r'(?:index.php\?page=post(?:&|&amp;)s=view(?:&|&amp;)id=[0-9]*)|"/post/show/[^"]*'
)
_RE_DIRECT_LINKS = re.compile(r'directlink largeimg"\s*href="([^"]*)')


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


def _site_url(url: str) -> str:
    match = _RE_SITE_URL.search(url)
    return match.group(0) if match else ""


def data_from_direct_link(url: str, site_url: str) -> Data:
    """Describe a direct image link found on a listing page."""
    match = _RE_DIRECT_LINK.search(url)
    if match is None:
        raise ExtractionError("direct download can't match URL", url)
    title, ext = match.groups()
    return Data(
        site=site_url,
        title=title,
        type=DataType.IMAGE,
        streams={"0": Stream(type=DataType.IMAGE, urls=[MediaURL(url, ext)])},
        url=url,
    )


class ImgboardExtractor(Extractor):
    """Extracts posts; ``amount`` is how many a listing should yield (0 = one page)."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount
        self.site_url = ""
        self.mass = False

    def _full(self, urls: list[str]) -> bool:
        return self.amount > 0 and len(urls) >= self.amount

    def parse_url(self, url: str) -> list[str]:
        """Return post URLs, or direct image links, behind ``url``."""
        self.site_url = _site_url(url)
        if _RE_SINGLE.search(url):
            return [url]
        if not _RE_LISTING.search(url):
            return []

        page_param = ""
        if "index.php?" in url:
            page_param = "&pid="
        if "post?" in url:
            page_param = "&page="

        match = _RE_BASE_QUERY.search(url)
        if match:
            head, tail = match.group(1), match.group(3) or ""
        else:
            head, tail = url + page_param, ""

        # A page given in the URL with no amount set means: only that page.
        page = int(match.group(2)) if match and self.amount == 0 else 0
        step = PID_STEP if page_param == "&pid=" else 1

        urls: list[str] = []
        while True:
            try:
                html = get_text(f"{head}{page}{tail}")
            except requests.RequestException:
                break

            links = _RE_DIRECT_LINKS.findall(html)
            if links:
                self.mass = True
                for link in links:
                    if self._full(urls):
                        return urls
                    urls.append(link)

            if not self.mass:
                posts = _RE_POST.findall(html)
                if not posts:
                    return urls
                for post in posts:
                    if self._full(urls):
                        return urls
                    path = post.lstrip('"/').replace("&amp;", "&")
                    urls.append(f"{self.site_url}/{path}")
            elif not links:
                return urls

            if self.amount == 0:
                return urls
            page += step
        return urls

    def extract_data(self, url: str) -> Data:
        """Extract the media of one post page."""
        name_match = _RE_SITE_NAME.search(self.site_url)
        if name_match is None:
            raise URLParseError(url=url)
        site_name = name_match.group(1)

        html = get_text(url)
        match = _RE_POST_URL.search(html) or _RE_POST_BACKUP.search(html)
        if match is None:
            raise DataSourceParseError()
        src, ext = match.groups()
        if not src.startswith("https"):
            src = "https:" + src

        size = 0
        if self.amount == 0:
            try:
                size = content_size(src, url)
            except (requests.RequestException, ValueError) as exc:
                raise ExtractionError("no image size found") from exc

        id_match = _RE_ID.search(html)
        post_id = id_match.group(0).replace("Id: ", "") if id_match else ""
        size_match = _RE_SIZE.search(html)
        quality = size_match.group(0).replace("Size: ", "") if size_match else ""

        return Data(
            site=self.site_url,
            title=f"{site_name}_{post_id}",
            type=media_type(ext),
            streams={"0": Stream(urls=[MediaURL(src, ext)], quality=quality, size=size)},
            url=url,
        )

    def extract(self, url: str) -> list[Data]:
        self.site_url = _site_url(url)
        self.mass = False
        urls = self.parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for post_url in urls:
            with _annotate(post_url):
                if self.mass:
                    data.append(data_from_direct_link(post_url, self.site_url))
                else:
                    data.append(self.extract_data(post_url))
        return data