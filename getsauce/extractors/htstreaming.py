"""Helpers for players of the htstreaming network: player URLs and captions."""

from __future__ import annotations

import json
import re

from ..helpers import get_file_ext
from ..models import Caption, MediaURL

PLAYER_URL = "https://htstreaming.com/player/index.php?data="

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_RE_WORD = re.compile(r"\b\w+\b", re.ASCII)
_RE_SUBTITLES = re.compile(r'{"kind":"captions"[^}]*}')
_RE_VIDEO_URL = re.compile(r'https://htstreaming.com/video/([^"]*)')
_RE_PLAYER_URL = re.compile(r'[^"]*index.php\?data[^"]*')


def parse_captions(js_params: str) -> list[Caption]:
    """Return the caption tracks listed in unpacked player parameters."""
    captions = []
    for raw in _RE_SUBTITLES.findall(js_params):
        try:
            track = json.loads(raw)
        except json.JSONDecodeError:
            continue
        file = track.get("file") or ""
        language = track.get("language") or track.get("label") or ""
        captions.append(Caption(MediaURL(file, get_file_ext(file)), language))
    return captions


def encode_base(c: int, a: int) -> str:
    """Encode ``c`` in base ``a`` the way the packed player script does."""
    prefix = encode_base(c // a, a) if c >= a else ""
    c %= a
    digit = _DIGITS[c] if c <= 35 else chr(c + 29)
    return prefix + digit


def parse_fire_player_params(
    js_template: str, a: int, c: int, keywords: list[str]
) -> str:
    """Unpack a packed player script from its template, base, count and keywords."""
    words = list(keywords)
    table: dict[str, str] = {}
    for index in range(c - 1, -1, -1):
        token = encode_base(index, a)
        if not words[index]:
            words[index] = token
        table[token] = words[index]

    unpacked = _RE_WORD.sub(lambda m: table.get(m.group(0), ""), js_template)
    return unpacked.replace("\\\\", "\\")


def parse_player_url(target: str) -> str:
    """Find a full player URL in ``target``, or build one from a video hash."""
    match = _RE_PLAYER_URL.search(target)
    if match:
        return match.group(0)
    video = _RE_VIDEO_URL.search(target)
    if video and video.group(1):
        return PLAYER_URL + video.group(1)
    return ""