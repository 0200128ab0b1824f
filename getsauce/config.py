"""Runtime settings shared by the extractors and the downloader."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_13_6) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/69.0.3497.81 Safari/537.36"
)

FAKE_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.8",
        "User-Agent": USER_AGENT,
    }
)


@dataclass
class Config:
    """Options that control what is extracted and how it is downloaded."""

    amount: int = 0
    caption: int = -1
    keep: bool = False
    output_path: str = ""
    output_name: str = ""
    pages: str = ""
    quiet: bool = False
    select_stream: str = "0"
    show_extracted_data: bool = False
    show_info: bool = False
    timeout: int = 10
    truncate: bool = False
    user_headers: str = ""
    username: str = ""
    user_password: str = ""
    workers: int = 1
    fake_headers: dict[str, str] = field(default_factory=lambda: dict(FAKE_HEADERS))

    def headers_for(self, referer: str) -> dict[str, str]:
        """Return a fresh set of request headers with the given referer."""
        headers = dict(self.fake_headers)
        headers["Referer"] = referer
        return headers