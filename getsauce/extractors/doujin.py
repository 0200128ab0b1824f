"""Extractor for doujin.sexy galleries and overview pages."""

from __future__ import annotations

import json
import re
from contextlib import contextmanager
from typing import Any, Iterator

import requests

from ..fetch import get_text
from ..helpers import get_file_ext, need_download_list
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

SITE = "https://doujin.sexy/"

_RE_APP_STATE = re.compile(r"__SERVER_APP_STATE__ =  ({[^<]+)")


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


def parse_app_state(html: str) -> dict[str, Any]:
    """Return the server app state embedded in a page."""
    match = _RE_APP_STATE.search(html)
    if match is None:
        raise DataSourceParseError("app state not found for URL")
    try:
        state = json.loads(match.group(1).strip())
    except json.JSONDecodeError as exc:
        raise DataSourceParseError(f"invalid app state: {exc}") from exc
    if not isinstance(state, dict):
        raise DataSourceParseError("invalid app state")
    return state


def _initial(state: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    initial = state.get("initialData") or {}
    return initial.get("objects") or {}, initial.get("data") or {}


def parse_url(url: str) -> list[str]:
    """Return the gallery URLs behind a gallery or overview URL."""
    try:
        state = parse_app_state(get_text(url))
    except (requests.RequestException, DataSourceParseError):
        return []

    objects, data = _initial(state)
    if data.get("image_count"):
        return [url]

    albums = objects.get("albums")
    if albums is None:
        albums = data.get("albums") or []
    return [
        f"{SITE}{(album.get('series') or {}).get('slug', '')}/{album.get('slug', '')}"
        for album in albums
    ]


def extract_data(url: str) -> Data:
    """Extract the pages of one gallery."""
    state = parse_app_state(get_text(url))
    _, data = _initial(state)
    if not data.get("image_count"):
        raise ExtractionError("no images found for URL")

    images = data.get("pages")
    if images is None:
        images = data.get("images") or []

    urls = []
    for page in need_download_list(len(images)):
        full = ((images[page - 1] or {}).get("sizes") or {}).get("full", "")
        urls.append(MediaURL(full, get_file_ext(full)))

    return Data(
        site=SITE,
        title=data.get("title", ""),
        type=DataType.IMAGE,
        streams={
            "0": Stream(
                type=DataType.IMAGE,
                urls=urls,
                info=(data.get("language") or {}).get("name", ""),
            )
        },
        url=url,
    )


class DoujinExtractor(Extractor):
    """Extracts galleries from doujin.sexy."""

    def extract(self, url: str) -> list[Data]:
        urls = parse_url(url)
        if not urls:
            raise URLParseError(url=url)
        data = []
        for gallery_url in urls:
            with _annotate(gallery_url):
                data.append(extract_data(gallery_url))
        return data