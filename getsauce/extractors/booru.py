"""Extractor for booru.io posts and tag queries."""

from __future__ import annotations

import json
import re
import time
from contextlib import contextmanager
from typing import Any, Iterator

import requests

from ..fetch import content_size, get_bytes
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

SITE = "https://booru.io/"
POST_URL = "https://booru.io/p/"
API_DATA_URL = "https://booru.io/api/legacy/data/"
API_ENTITY_URL = "https://booru.io/api/legacy/entity/"
API_QUERY_URL = "https://booru.io/api/legacy/query/entity?query="

PAGE_STEP = 50
_PAGE_DELAY = 0.05

_RE_POST = re.compile(r"https://booru\.io/p/(.+)")
_RE_RESOLUTION = re.compile(r"[0-9]+")
_QUERY_PREFIX = "https://booru.io/q/"


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


def parse_url(url: str) -> str:
    """Turn a post or query page URL into the matching API URL."""
    if url.startswith(POST_URL):
        match = _RE_POST.search(url)
        if match is None:
            raise URLParseError(url=url)
        return API_ENTITY_URL + match.group(1)
    parts = url.split(_QUERY_PREFIX)
    if len(parts) < 2:
        raise URLParseError(url=url)
    return API_QUERY_URL + parts[1]


def best_quality_transform(transforms: dict[str, str]) -> tuple[str, str]:
    """Return the (type, value) of the transform with the highest resolution."""
    best_type, best_value, best = "", "", 0
    for key, value in transforms.items():
        match = _RE_RESOLUTION.search(key)
        resolution = int(match.group(0)) if match else 0
        if resolution <= 0 or resolution < best:
            continue
        best, best_type, best_value = resolution, key, value
    return best_type, best_value


def file_ext_from_transform(transform: str) -> str:
    """Return the file extension named by a transform type such as ``x:image/jpeg``."""
    parts = transform.split("/")
    if len(parts) > 1:
        return "jpg" if parts[1] == "jpeg" else parts[1]
    return ""


def _load(payload: bytes) -> Any:
    try:
        return json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DataSourceParseError(f"invalid API response: {exc}") from exc


def _entities(query_url: str, amount: int) -> list[dict[str, Any]]:
    payload = get_bytes(query_url)
    if "=" not in query_url:
        return [_load(payload)]

    entities: list[dict[str, Any]] = []
    cursor = 0
    while not (amount > 0 and amount <= cursor):
        batch = (_load(payload) or {}).get("data") or []
        if not batch:
            break
        entities.extend(batch)
        cursor += PAGE_STEP
        payload = get_bytes(f"{query_url}&cursor={cursor}")
        time.sleep(_PAGE_DELAY)
    return entities


def extract_data(query_url: str, amount: int = 0) -> list[Data]:
    """Fetch the entities behind an API URL and describe each as data."""
    data = []
    for entity in _entities(query_url, amount):
        transform_type, transform_value = best_quality_transform(
            entity.get("transforms") or {}
        )
        media_url = API_DATA_URL + transform_value
        try:
            size = content_size(media_url, SITE)
        except (requests.RequestException, ValueError):
            size = 0
        attributes = entity.get("attributes") or {}
        key = entity.get("key", "")
        data.append(
            Data(
                site=SITE,
                title=key,
                type=DataType.IMAGE,
                streams={
                    "0": Stream(
                        type=DataType.IMAGE,
                        urls=[MediaURL(media_url, file_ext_from_transform(transform_type))],
                        quality=f"{attributes.get('width', 0)} x {attributes.get('height', 0)}",
                        size=size,
                    )
                },
                url=POST_URL + key,
            )
        )
    return data


class BooruExtractor(Extractor):
    """Extracts posts from booru.io; ``amount`` limits query results (0 = all)."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount

    def extract(self, url: str) -> list[Data]:
        query_url = parse_url(url)
        with _annotate(url):
            return extract_data(query_url, self.amount)