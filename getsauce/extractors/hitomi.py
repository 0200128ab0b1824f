"""Extractor for hitomi galleries and tag listings."""

from __future__ import annotations

import json
import re
import struct
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator
from urllib.parse import urlsplit

import requests

from ..fetch import get_bytes, get_text
from ..helpers import last_item, need_download_list
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

SITE = "https://hitomi.la/"
NOZOMI = "https://ltn.hitomi.la/"
READER_URL = "https://hitomi.la/reader/"
NOZOMI_EXT = "nozomi"
GALLERIES_PER_PAGE = 25
GG_URL = NOZOMI + "gg.js"

_RE_SUBDOMAIN_PART = re.compile(r"/[0-9a-f]{61}([0-9a-f]{2})([0-9a-f])")
_RE_URL_FROM_URL = re.compile(r"//..?\.hitomi\.la/")
_RE_PATH_FROM_HASH = re.compile(r"(..)(.)$")
_RE_GG_B = re.compile(r"\d+/")
_RE_GG_LIMITS = re.compile(r"\d;")
_RE_GG_CASES = re.compile(r"case (\d+)")
_RE_GALLERY_PAGE = re.compile(re.escape(SITE) + r"(?:manga|doujinshi|cg|gamecg)/")
_RE_GALLERY_ID = re.compile(r"(\d*).html#*\d*$")
_RE_PAGE_NUMBER = re.compile(r"page=(\d+)$")


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


@dataclass(frozen=True)
class GGValues:
    """The image-server routing table published in the site's gg.js."""

    b: str
    matched: int
    non_matched: int
    values: frozenset[int] = frozenset()

    @classmethod
    def parse(cls, js: str) -> GGValues:
        """Read the routing table out of the gg.js script."""
        b_match = _RE_GG_B.search(js)
        limits = _RE_GG_LIMITS.findall(js)
        if len(limits) < 2:
            raise ExtractionError(f"no limit values found in: {GG_URL}")
        return cls(
            b=b_match.group(0) if b_match else "",
            non_matched=int(limits[0].rstrip(";")),
            matched=int(limits[1].rstrip(";")),
            values=frozenset(int(n) for n in _RE_GG_CASES.findall(js)),
        )

    def lookup(self, num: int) -> int:
        """Return the server offset for ``num``."""
        return self.matched if num in self.values else self.non_matched

    def subdomain_from_url(self, url: str, base: str) -> str:
        """Return the image subdomain for an image URL."""
        retval = base or "b"
        match = _RE_SUBDOMAIN_PART.search(url)
        if match is None:
            return "a"
        number = int(match.group(2) + match.group(1), 16)
        return chr(97 + self.lookup(number)) + retval

    def url_from_url(self, url: str, base: str) -> str:
        """Point an image URL at its proper subdomain."""
        return _RE_URL_FROM_URL.sub(
            f"//{self.subdomain_from_url(url, base)}.hitomi.la/", url
        )

    def full_path_from_hash(self, hash_: str) -> str:
        """Return the directory path of an image given its hash."""
        match = _RE_PATH_FROM_HASH.search(hash_)
        if match is None:
            raise ValueError(f"image hash too short: {hash_!r}")
        number = int(match.group(2) + match.group(1), 16)
        return f"{self.b}{number}/{hash_}"


def url_from_hash(image: dict[str, Any], gg: GGValues) -> str:
    """Build the generic image URL for a gallery file entry."""
    directory = "images"
    if image.get("haswebp") == 1:
        directory = "webp"
    if image.get("hasavif") == 1:
        directory = "avif"
    ext = directory
    if ext == "images":
        parts = (image.get("name") or "").split(".")
        ext = parts[1] if len(parts) > 1 else ""
    return (
        f"https://a.hitomi.la/{directory}/"
        f"{gg.full_path_from_hash(image.get('hash') or '')}.{ext}"
    )


def gallery_ids_from_nozomi(data: bytes) -> list[int]:
    """Decode a nozomi index: consecutive big-endian 32-bit gallery ids."""
    usable = len(data) - len(data) % 4
    return [gid for (gid,) in struct.iter_unpack(">I", data[:usable])]


def parse_url(url: str) -> list[str]:
    """Return the gallery script URLs behind a gallery or listing URL."""
    if _RE_GALLERY_PAGE.search(url):
        match = _RE_GALLERY_ID.search(url)
        if match is None or not match.group(1):
            return []
        return [f"{NOZOMI}galleries/{match.group(1)}.js"]

    try:
        path = urlsplit(url).path
    except ValueError:
        return []
    if not path.endswith(".html"):
        return []

    nozomi_url = NOZOMI + path.lstrip("/").removesuffix("html") + NOZOMI_EXT

    page_match = _RE_PAGE_NUMBER.search(url)
    page = int(page_match.group(1)) if page_match else 1
    start = (page - 1) * GALLERIES_PER_PAGE * 4
    end = start + GALLERIES_PER_PAGE * 4 - 1
    try:
        payload = get_bytes(nozomi_url, {"Range": f"bytes={start}-{end}"})
    except requests.RequestException:
        return []
    return [f"{NOZOMI}galleries/{gid}.js" for gid in gallery_ids_from_nozomi(payload)]


def _load_gallery(js: str) -> dict[str, Any]:
    start = js.find("{")
    if start < 0:
        raise DataSourceParseError("no json string found")
    try:
        gallery, _ = json.JSONDecoder().raw_decode(js, start)
    except json.JSONDecodeError as exc:
        raise DataSourceParseError(f"invalid gallery data: {exc}") from exc
    if not isinstance(gallery, dict):
        raise DataSourceParseError("invalid gallery data")
    return gallery


def extract_data(url: str, gg: GGValues) -> Data:
    """Extract the pages of one gallery from its script URL."""
    gallery = _load_gallery(get_text(url))
    files = gallery.get("files") or []

    urls = []
    for page in need_download_list(len(files)):
        image = files[page - 1]
        base = "a" if image.get("haswebp") == 1 or image.get("hasavif") == 1 else ""
        image_url = gg.url_from_url(url_from_hash(image, gg), base)
        urls.append(MediaURL(image_url, last_item(image_url.split("."))))

    return Data(
        site=SITE,
        title=gallery.get("title") or "",
        type=DataType.IMAGE,
        streams={"0": Stream(type=DataType.IMAGE, urls=urls)},
        url=f"{READER_URL}{gallery.get('id', '')}.html",
    )


class HitomiExtractor(Extractor):
    """Extracts galleries from hitomi."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        with _annotate(GG_URL):
            gg = GGValues.parse(get_text(GG_URL, {"Referer": SITE}))
        data = []
        for gallery_url in urls:
            with _annotate(gallery_url):
                data.append(extract_data(gallery_url, gg))
        return data