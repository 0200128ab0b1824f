# getsauce

`getsauce` is a library that finds the media behind a page on a number of
gallery, image-board and video sites and downloads it. Each supported site
has an extractor class that turns a page address into a list of `Data`
records: a title, the page it came from, the available streams (quality,
parts, size) and any captions. A `Downloader` then fetches the chosen
stream to disk.

## Requirements

- Python 3.10 or later
- `requests`, `cryptography` and `tqdm`
- `ffmpeg` on the `PATH`, only when video, a separate audio stream and
  captions are to be merged into one file

## Extractors

Every extractor lives in `getsauce.extractors` and has an
`extract(url)` method returning a list of `getsauce.models.Data`:

| Module | Class | Site |
| --- | --- | --- |
| `booru` | `BooruExtractor(amount=0)` | booru.io posts and tag queries |
| `danbooru` | `DanbooruExtractor()` | danbooru posts and overview pages |
| `doujin` | `DoujinExtractor()` | doujin.sexy galleries and overviews |
| `ehentai` | `EHentaiExtractor()` | e-hentai galleries and search pages |
| `hentai2read` | `Hentai2ReadExtractor()` | hentai2read galleries |
| `hentai2w` | `Hentai2WExtractor()` | hentai2w videos |
| `hentaifoundry` | `HentaiFoundryExtractor(amount=0)` | hentai-foundry posts and listings |
| `hentaipulse` | `HentaiPulseExtractor()` | hentaipulse episodes and listings |
| `hentaivideos` | `HentaiVideosExtractor()` | hentaivideos.net episodes and series |
| `hentaiworld` | `HentaiWorldExtractor()` | hentaiworld episodes and listings |
| `hitomi` | `HitomiExtractor()` | hitomi galleries and tag listings |
| `imgboard` | `ImgboardExtractor(amount=0)` | gelbooru, rule34, konachan, yande.re and similar boards |

`amount` limits how many results a listing or query yields; for
`ImgboardExtractor` an amount of 0 means a single listing page.

```python
from getsauce.extractors.danbooru import DanbooruExtractor

for data in DanbooruExtractor().extract(page_url):
    print(data.title)
    for key, stream in data.streams.items():
        print("  ", key, stream.quality, stream.size)
```

Two further modules hold shared parsing helpers rather than extractors:
`getsauce.extractors.animestream` resolves episode addresses on sites built
with the animestream WordPress theme (`parse_url`, `parse_url_without_site`),
and `getsauce.extractors.htstreaming` finds player addresses
(`parse_player_url`), unpacks packed player scripts
(`parse_fire_player_params`) and reads caption tracks from them
(`parse_captions`).

Errors are raised as `getsauce.models.ExtractionError` or one of its
subclasses: `URLParseError` when an address cannot be resolved to anything
to extract, `DataSourceParseError` when a page does not hold the expected
media. Network failures while fetching a page are wrapped in
`ExtractionError` with the failing address attached.

## Downloading

```python
from getsauce.config import Config
from getsauce.downloader import Downloader
from getsauce.extractors.hitomi import HitomiExtractor

config = Config(output_path="downloads", workers=4)
downloader = Downloader(config, bar=True)
for data in HitomiExtractor().extract(page_url):
    downloader.download(data)
```

`Config` holds the settings: `select_stream` (stream key, default `"0"`),
`caption` (caption index, `-1` for none), `output_path`, `output_name`,
`workers`, `keep`, `truncate`, `quiet`, `show_info` and `timeout` (minutes).

What `Downloader.download` does:

- Titles are cleaned of characters not safe in file names
  (`sanitize_title`); `output_name` replaces the title when set.
- Files that already exist and are not empty are skipped unless
  `truncate` is set.
- A single file larger than 10 MB is fetched in 10 MB byte ranges by
  several workers when `workers` is above one.
- Streams with their own `ext` are treated as multi-part: the parts are
  saved to a temporary directory, joined in order by `merge_parts`
  (decrypted with AES-128 when the stream carries a key) and the directory
  is removed.
- For video streams, a separate audio stream and the selected caption are
  downloaded too (WebVTT captions are cleaned by `sanitize_vtt`); unless
  `keep` is set, the files are merged with `ffmpeg` into
  `<title>_merged.<ext>` by `merge_media_files`.
- With `show_info` set nothing is downloaded; the text from `format_info`
  is printed instead.

`format_info(data)` describes every stream and caption of a record, sorted
by stream key, and `format_stream_info(data, key, caption)` describes the
one about to be downloaded.

## Other modules

- `getsauce.fetch` – `get_text`, `get_bytes`, `send`, `content_size` and
  friends, all sending browser-like headers.
- `getsauce.helpers` – file extensions, page selections
  (`need_download_list`), SI sizes (`calc_size_in_bytes`, `byte_count_si`)
  and simple HTML lookups (`get_h1`, `get_heading`, `get_meta`).
- `getsauce.crypto` – AES-128-CBC decryption of segments (`decrypt_file`).

## What it does not do

- There is no command-line program; the package is used from Python. The
  `getsauce -s …` and `getsauce -c …` hints in the `format_info` text name
  options of a command this package does not install.
- There is no lookup that picks an extractor from an address's host; choose
  the extractor class for the site yourself. Sites not in the table above
  are not supported.