"""Small text, URL and size helpers used across extractors."""

from __future__ import annotations

import re
from typing import Iterable, Sequence
from urllib.parse import urlsplit

from .models import DataType

_SIZE_UNITS = {
    "B": 1,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
}

_IMAGE_EXTS = {"jpg", "jpeg", "png", "gif", "webp", "bmp", "avif"}
_VIDEO_EXTS = {"mp4", "webm", "mkv", "m4v", "mov", "avi", "flv", "ts", "m3u8"}
_AUDIO_EXTS = {"mp3", "aac", "m4a", "ogg", "wav", "flac", "opus"}

_TAG = re.compile(r"<[^>]+>")


def get_file_ext(url: str) -> str:
    """Return the file extension of the last path segment of ``url``."""
    path = urlsplit(url).path or url
    name = path.rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1]


def last_item(items: Sequence[str]) -> str:
    """Return the last element, or an empty string for an empty sequence."""
    return items[-1] if items else ""


def remove_adjacent_duplicates(items: Iterable[str]) -> list[str]:
    """Drop elements equal to the one right before them."""
    out: list[str] = []
    for item in items:
        if not out or out[-1] != item:
            out.append(item)
    return out


def need_download_list(length: int, pages: str = "") -> list[int]:
    """Return the 1-based page numbers to download out of ``length``.

    ``pages`` is a selection such as ``"1-3,5"``; empty means all pages.
    """
    if not pages.strip():
        return list(range(1, length + 1))
    selected: set[int] = set()
    for part in pages.split(","):
        part = part.strip()
        if not part:
            continue
        start, sep, end = part.partition("-")
        try:
            low = int(start)
            high = int(end) if sep else low
        except ValueError as exc:
            raise ValueError(f"invalid page selection: {part!r}") from exc
        if low > high:
            raise ValueError(f"invalid page range: {part!r}")
        selected.update(range(low, high + 1))
    return sorted(page for page in selected if 1 <= page <= length)


def calc_size_in_bytes(value: float, unit: str) -> int:
    """Convert a size given in SI units such as ``KB`` or ``MB`` to bytes."""
    try:
        factor = _SIZE_UNITS[unit.upper()]
    except KeyError:
        raise ValueError(f"unknown size unit: {unit!r}") from None
    return round(value * factor)


def byte_count_si(size: int) -> str:
    """Format a byte count with SI prefixes."""
    unit = 1000
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'kMGTPE'[exp]}B"


def get_heading(html: str, level: int, index: int) -> str:
    """Return the text of the ``index``-th ``<h{level}>`` element, or ``""``."""
    pattern = re.compile(rf"<h{level}[^>]*>([\s\S]*?)</h{level}>")
    matches = [_TAG.sub("", m) for m in pattern.findall(html)]
    try:
        return matches[index]
    except IndexError:
        return ""


def get_h1(html: str, index: int) -> str:
    """Return the text of the ``index``-th ``<h1>`` element, or ``""``."""
    return get_heading(html, 1, index)


def get_meta(html: str, prop: str) -> str:
    """Return the content of the ``<meta>`` tag with the given property."""
    name = re.escape(prop)
    patterns = (
        rf'<meta[^>]+(?:property|name)="{name}"[^>]*?content="([^"]*)"',
        rf'<meta[^>]+content="([^"]*)"[^>]*?(?:property|name)="{name}"',
    )
    for pattern in patterns:
        match = re.search(pattern, html)
        if match:
            return match.group(1)
    return ""


def media_type(ext: str) -> DataType:
    """Guess the media type from a file extension."""
    ext = ext.lower()
    if ext in _IMAGE_EXTS:
        return DataType.IMAGE
    if ext in _VIDEO_EXTS:
        return DataType.VIDEO
    if ext in _AUDIO_EXTS:
        return DataType.AUDIO
    return DataType.UNKNOWN