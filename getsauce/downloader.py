"""Download extracted data to disk, merging parts and media files as needed."""

from __future__ import annotations

import hashlib
import logging
import re
import shutil
import subprocess
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import requests
from tqdm import tqdm

from .config import Config
from .crypto import decrypt_file
from .helpers import byte_count_si, get_file_ext, need_download_list
from .models import Caption, Data, DataType, MediaURL, Stream, sorted_streams

logger = logging.getLogger(__name__)

PIECE_SIZE = 10_000_000
CONCURRENT_THRESHOLD = 10_000_000
COMMAND_NAME = "getsauce"

_RE_SANITIZE_TITLE = re.compile(r'["&|:?<>/*\\ ]+')
_RE_VTT_CUE = re.compile(
    r"((?:\d{2,}:)?\d\d:\d\d\.\d{3} --> (?:\d{2,}:)?\d\d:\d\d\.\d{3})\s*((?:\n[^\n]+)+)"
)
_CAPTION_EXTS = {"ass", "srt", "vtt"}


def sanitize_title(title: str) -> str:
    """Replace characters unsafe in file names with single spaces."""
    return _RE_SANITIZE_TITLE.sub(" ", title).strip()


def sanitize_vtt(path: str | Path) -> None:
    """Rewrite a WebVTT file keeping only cues, without stray blank lines."""
    path = Path(path)
    content = path.read_text(encoding="utf-8", errors="replace")
    out = "WEBVTT"
    for timestamp, text in _RE_VTT_CUE.findall(content):
        out = f"{out}\n\n{timestamp}\n{text.strip()}"
    path.write_text(out, encoding="utf-8")


def split_pieces(size: int, piece_size: int) -> list[tuple[int, int]]:
    """Split ``size`` bytes into (start, end) byte ranges for range requests.

    The last piece absorbs the remainder once less than two pieces are left.
    """
    pieces: list[tuple[int, int]] = []
    offset = 0
    remaining = size
    while remaining > 0:
        if piece_size + piece_size > remaining:
            pieces.append((offset, offset + remaining))
            break
        pieces.append((offset, offset + piece_size - 1))
        offset += piece_size
        remaining -= piece_size
    return pieces


def merge_media_files(files: list[str], out_file: str, quiet: bool = False) -> None:
    """Merge video, audio and subtitle files into one file with ffmpeg."""
    if len(files) < 2:
        return
    if not quiet:
        print("\nMerging files using ffmpeg...")

    if out_file.endswith(".webm"):
        out_file = out_file.replace(".webm", ".mp4")

    command = ["ffmpeg", "-y"]
    caption = ""
    for name in files:
        absolute = str(Path(name).resolve())
        if get_file_ext(name) in _CAPTION_EXTS:
            caption = absolute
        command += ["-i", absolute]
    command += ["-c", "copy"]
    if caption:
        command += ["-c:s", "mov_text"]
    command.append(out_file)

    if not quiet:
        print(command)
    subprocess.run(
        command, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
    )

    for name in files:
        Path(name).unlink()
    if not quiet:
        print("Success!")


def _format_header(data: Data) -> str:
    return (
        f"\n Site:      {data.site}"
        f"\n Title:     {data.title}"
        f"\n Type:      {DataType(data.type).value}"
    )


def _format_caption(index: int, caption: Caption) -> str:
    return (
        f"\n     [{index}]  -------------------"
        f"\n     Language:            {caption.language}\n"
        f"     # download with: {COMMAND_NAME} -c {index} ...\n\n"
    )


def _format_stream(key: str, stream: Stream) -> str:
    stream_type = DataType(stream.type).value if stream.type else DataType.UNKNOWN.value
    lines = [f"\n     [{key}]  -------------------", f"\n     Type:            {stream_type}"]
    if stream.info:
        lines.append(f"\n     Info:            {stream.info}")
    lines.append(f"\n     Quality:         {stream.quality or 'unknown'}")
    if len(stream.urls) > 1:
        lines.append(f"\n     Parts:           {len(stream.urls)}")
    approx = "~ " if stream.ext and stream.size > 0 else ""
    lines.append(f"\n     Size:            {approx}{byte_count_si(stream.size)}\n")
    lines.append(f"     # download with: {COMMAND_NAME} -s {key} ...\n\n")
    return "".join(lines)


def format_info(data: Data) -> str:
    """Describe all captions and streams available for ``data``."""
    parts = [_format_header(data)]
    if data.captions:
        parts.append("\n Captions:  # All available languages\n")
    parts.extend(_format_caption(i, c) for i, c in enumerate(data.captions))
    parts.append("\n Streams:   # All available qualities")
    parts.extend(
        _format_stream(str(i), s) for i, s in enumerate(sorted_streams(data.streams))
    )
    return "".join(parts)


def format_stream_info(data: Data, stream_key: str, caption: int) -> str:
    """Describe the stream (and caption, if selected) about to be downloaded."""
    parts = [_format_header(data)]
    if -1 < caption < len(data.captions):
        parts.append("\n Caption:   \n")
        parts.append(_format_caption(caption, data.captions[caption]))
    parts.append("\n Stream:   \n")
    parts.append(_format_stream(stream_key, data.streams[stream_key]))
    return "".join(parts)


class Downloader:
    """Saves the streams and captions of extracted data to the output path."""

    def __init__(self, config: Config | None = None, bar: bool = False) -> None:
        self.config = config or Config()
        self.bar = bar
        self.session = requests.Session()
        self.stream: Stream | None = None
        self.tmp_dir: Path | None = None
        self._timeout = self.config.timeout * 60 if self.config.timeout > 0 else None

    @property
    def _output_dir(self) -> Path:
        return Path(self.config.output_path)

    def _progress(self, total: int | None, desc: str, as_bytes: bool) -> tqdm:
        return tqdm(
            total=total,
            desc=desc,
            disable=not self.bar,
            unit="B" if as_bytes else "it",
            unit_scale=as_bytes,
        )

    def download(self, data: Data) -> None:
        """Download the selected stream of ``data`` plus extra audio and captions."""
        cfg = self.config
        if cfg.show_info:
            print(format_info(data))
            return

        if cfg.output_name:
            data.title = cfg.output_name
        data.title = sanitize_title(data.title)

        key = cfg.select_stream
        file_path = self._download_stream(data, key)
        stream = data.streams[key]
        if stream.type != DataType.VIDEO:
            return

        audio_path = self._download_extra_audio(data)
        caption_path = self._download_caption(data)
        if cfg.keep:
            return

        files = [str(p) for p in (file_path, audio_path, caption_path) if p]
        if not stream.ext and stream.urls:
            stream.ext = stream.urls[0].ext
        out_file = self._output_dir / f"{data.title}_merged.{stream.ext}"
        merge_media_files(files, str(out_file), cfg.quiet)

    def _page_numbers(self, count: int) -> list[int]:
        pages = need_download_list(count, self.config.pages)
        return pages if len(pages) == count else list(range(1, count + 1))

    def _download_stream(self, data: Data, key: str) -> Path | None:
        cfg = self.config
        try:
            stream = data.streams[key]
        except KeyError:
            raise KeyError(f"stream {key} not found") from None
        self.stream = stream

        if not cfg.quiet:
            print(format_stream_info(data, key, cfg.caption))

        out_dir = self._output_dir
        needs_merge = bool(stream.ext)
        if needs_merge:
            digest = hashlib.sha1((data.title + key).encode("utf-8")).hexdigest()[30:]
            self.tmp_dir = out_dir / digest
            self.tmp_dir.mkdir(parents=True, exist_ok=True)

        headers = cfg.headers_for(data.url)
        count = len(stream.urls)
        append_enum = count > 1 or bool(cfg.pages)

        jobs: list[tuple[MediaURL, Path]] = []
        pages = self._page_numbers(count)
        for index, (media, page) in enumerate(zip(stream.urls, pages), 1):
            if needs_merge:
                path = self.tmp_dir / f"{index}.{media.ext}"
            elif append_enum:
                path = out_dir / f"{data.title}_{page}.{media.ext}"
            else:
                path = out_dir / f"{data.title}.{media.ext}"
            jobs.append((media, path))

        workers = max(1, min(cfg.workers, count))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self._save, m, p, headers, stream) for m, p in jobs]
        for future in futures:
            future.result()

        file_path = jobs[-1][1] if jobs else None
        if needs_merge:
            file_path = out_dir / f"{data.title}.{stream.ext}"
            self.merge_parts(file_path)
        return file_path

    def _save(
        self, media: MediaURL, path: Path, headers: dict[str, str], stream: Stream | None
    ) -> None:
        cfg = self.config
        path = Path(path)
        if not cfg.truncate and path.exists() and path.stat().st_size > 0:
            if not cfg.quiet:
                logger.warning('file "%s" already exists and will be skipped', path)
            return
        if (
            stream is not None
            and stream.size > CONCURRENT_THRESHOLD
            and cfg.workers > 1
            and not stream.ext
        ):
            self._concurrent_write(media.url, path, headers, stream.size)
        else:
            self._write(media.url, path, headers)

    def _write(self, url: str, path: Path, headers: dict[str, str]) -> None:
        response = self.session.get(url, headers=headers, stream=True, timeout=self._timeout)
        if response.status_code != 200:
            response.close()
            time.sleep(1)
            response = self.session.get(url, stream=True, timeout=self._timeout)

        length = response.headers.get("Content-Length", "")
        total = int(length) if length.isdigit() else None
        with response, path.open("wb") as fh, self._progress(
            total, f"Downloading {path} ...", True
        ) as bar:
            for chunk in response.iter_content(chunk_size=32 * 1024):
                fh.write(chunk)
                bar.update(len(chunk))

    def _concurrent_write(
        self, url: str, path: Path, headers: dict[str, str], size: int
    ) -> None:
        workers = self.config.workers
        lock = threading.Lock()
        with path.open("wb") as fh, self._progress(
            size, f"Downloading {path} using {workers} workers...", True
        ) as bar:

            def fetch(piece: tuple[int, int]) -> None:
                offset, end = piece
                piece_headers = {**headers, "Range": f"bytes={offset}-{end}"}
                response = self.session.get(url, headers=piece_headers, timeout=self._timeout)
                if response.status_code != 206:
                    time.sleep(1)
                    response = self.session.get(url, timeout=self._timeout)
                body = response.content
                with lock:
                    fh.seek(offset)
                    fh.write(body)
                    bar.update(len(body))

            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(fetch, p) for p in split_pieces(size, PIECE_SIZE)]
            for future in futures:
                future.result()

    def merge_parts(self, target: str | Path) -> None:
        """Concatenate (and decrypt) the downloaded parts of the current stream."""
        stream, tmp_dir = self.stream, self.tmp_dir
        if stream is None or tmp_dir is None:
            raise RuntimeError("no multi-part stream has been downloaded")
        if not stream.urls:
            return
        target = Path(target)
        with target.open("wb") as fh, self._progress(
            len(stream.urls), f"Merging into {target} ...", False
        ) as bar:
            for index, media in enumerate(stream.urls, 1):
                part = tmp_dir / f"{index}.{media.ext}"
                chunk = decrypt_file(stream.key, part) if stream.key else part.read_bytes()
                fh.write(chunk)
                bar.update(1)
        shutil.rmtree(tmp_dir)

    def _download_extra_audio(self, data: Data) -> Path | None:
        audio_keys = [k for k, s in data.streams.items() if s.type == DataType.AUDIO]
        if not audio_keys:
            return None
        return self._download_stream(data, audio_keys[-1])

    def _download_caption(self, data: Data) -> Path | None:
        index = self.config.caption
        if index <= -1 or len(data.captions) <= index:
            return None
        caption = data.captions[index]
        path = self._output_dir / (
            f"{data.title}_caption_{caption.language}.{caption.url.ext}"
        )
        self._save(caption.url, path, self.config.headers_for(data.url), None)
        if caption.url.ext == "vtt":
            sanitize_vtt(path)
        return path