"""Data types shared by extractors and the downloader."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class DataType(str, Enum):
    """Kind of media a stream or data item holds."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@dataclass
class MediaURL:
    """A single downloadable file and its extension."""

    url: str
    ext: str = ""


@dataclass
class Stream:
    """One quality or variant of a piece of media, possibly in several parts."""

    type: DataType = DataType.UNKNOWN
    urls: list[MediaURL] = field(default_factory=list)
    quality: str = ""
    size: int = 0
    info: str = ""
    ext: str = ""
    key: bytes = b""


@dataclass
class Caption:
    """A subtitle file in one language."""

    url: MediaURL
    language: str = ""


@dataclass
class Data:
    """Everything extracted for one post, gallery or episode."""

    site: str
    title: str
    type: DataType
    streams: dict[str, Stream] = field(default_factory=dict)
    url: str = ""
    captions: list[Caption] = field(default_factory=list)


class ExtractionError(Exception):
    """Raised when data cannot be extracted from a URL."""

    default_message = "extraction failed"

    def __init__(self, message: str | None = None, url: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        return f"{message}: {self.url}" if self.url else message


class URLParseError(ExtractionError):
    """The URL could not be turned into anything to extract."""

    default_message = "parsing the URL failed"


class DataSourceParseError(ExtractionError):
    """The page did not contain the expected media source."""

    default_message = "parsing the data source failed"


class LoginRequiredError(ExtractionError):
    """The site needs a user name and password."""

    default_message = "login required"


class Extractor(ABC):
    """Turns a site URL into downloadable data."""

    @abstractmethod
    def extract(self, url: str) -> list[Data]:
        """Return the data found at ``url``."""


def _stream_order(key: str) -> int:
    try:
        return int(key)
    except ValueError:
        return 0


def sorted_streams(streams: dict[str, Stream]) -> list[Stream]:
    """Return the streams ordered by their numeric keys."""
    return [streams[key] for key in sorted(streams, key=_stream_order)]