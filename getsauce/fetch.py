"""HTTP helpers that send browser-like headers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping

import requests
from requests.structures import CaseInsensitiveDict

from .config import FAKE_HEADERS

DEFAULT_TIMEOUT = 10 * 60


@lru_cache(maxsize=None)
def _default_session() -> requests.Session:
    return requests.Session()


def _merge_headers(url: str, headers: Mapping[str, str] | None) -> dict[str, str]:
    merged = dict(FAKE_HEADERS)
    merged.update(headers or {})
    merged.setdefault("Referer", url)
    return merged


def send(
    method: str,
    url: str,
    headers: Mapping[str, str] | None = None,
    data: Any = None,
    session: requests.Session | None = None,
) -> requests.Response:
    """Send a request with the fake browser headers; the referer defaults to ``url``."""
    return (session or _default_session()).request(
        method, url, headers=_merge_headers(url, headers), data=data, timeout=DEFAULT_TIMEOUT
    )


def get_text(
    url: str,
    headers: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> str:
    """GET ``url`` and return the body as text."""
    response = send("GET", url, headers, session=session)
    response.raise_for_status()
    return response.content.decode("utf-8", errors="replace")


def get_bytes(
    url: str,
    headers: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> bytes:
    """GET ``url`` and return the raw body."""
    response = send("GET", url, headers, session=session)
    response.raise_for_status()
    return response.content


def head_headers(
    url: str, referer: str, session: requests.Session | None = None
) -> CaseInsensitiveDict:
    """Return the response headers of a HEAD request to ``url``."""
    with (session or _default_session()).head(
        url,
        headers=_merge_headers(url, {"Referer": referer}),
        allow_redirects=True,
        stream=True,
        timeout=DEFAULT_TIMEOUT,
    ) as response:
        response.raise_for_status()
        return response.headers


def size_from_headers(headers: Mapping[str, str]) -> int:
    """Return the Content-Length from response headers."""
    value = CaseInsensitiveDict(headers).get("Content-Length")
    if value is None:
        raise ValueError("no content length in headers")
    return int(value)


def content_size(url: str, referer: str, session: requests.Session | None = None) -> int:
    """Return the size in bytes of the resource at ``url``."""
    return size_from_headers(head_headers(url, referer, session))