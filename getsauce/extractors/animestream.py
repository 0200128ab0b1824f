"""URL parsing for sites built on the animestream WordPress theme."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

import requests

from ..fetch import get_text
from ..helpers import remove_adjacent_duplicates


def parse_url(url: str, site: str) -> list[str]:
    """Return the episode URLs behind an episode, show or listing URL of ``site``."""
    prefix = re.escape(site)
    episode_re = re.compile(prefix + r"(?:\d+|watch)/.+/")
    show_re = re.compile(prefix + r"(?:hentai|anime)/[\w%-]+/")

    if episode_re.search(url):
        return [url]

    try:
        html = get_text(url)
    except requests.RequestException:
        return []

    if show_re.search(url):
        html = html.split('<div class="bixbox"')[0]
        return remove_adjacent_duplicates(episode_re.findall(html))

    # A listing of shows; each show is resolved to its episodes.
    html = html.split('<div id="sidebar">')[0]
    out: list[str] = []
    for show in show_re.findall(html):
        out.extend(parse_url(show, site))
    return out


def parse_url_without_site(url: str) -> list[str]:
    """Like :func:`parse_url`, taking the site from the URL's host."""
    try:
        host = urlsplit(url).netloc
    except ValueError:
        return []
    return parse_url(url, f"https://{host}/")