import pytest
import responses

from getsauce.extractors.hentaivideos import (
    HentaiVideosExtractor,
    extract_data,
    parse_url,
)
from getsauce.models import DataSourceParseError, DataType, ExtractionError

EPISODE = (
    "https://hentaivideos.net/usamimi-bouken-tan-sekuhara-shinagara-sekai-o-sukue-episode-3"
)
SOURCE = "https://cdn.example.com/videos/usamimi-3.mp4"
EPISODE_HTML = (
    "<h1> Usamimi Bouken-tan: Sekuhara Shinagara Sekai o Sukue Episode 3 </h1>"
    f'<video><source src="{SOURCE}" type="video/mp4"></video>'
)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_parse_url_single_episode():
    url = "https://hentaivideos.net/ouji-no-honmei-wa-akuyaku-reijou-episode-4"
    assert parse_url(url) == [url]


def test_parse_url_series(mocked):
    series = "https://hentaivideos.net/hentai/25-sai-no-joshikousei"
    html = (
        '<a href="https://hentaivideos.net/25-sai-no-joshikousei-episode-1">1</a>'
        '<a href="https://hentaivideos.net/25-sai-no-joshikousei-episode-2">2</a>'
    )
    mocked.add(responses.GET, series, body=html)
    assert parse_url(series) == [
        "https://hentaivideos.net/25-sai-no-joshikousei-episode-1",
        "https://hentaivideos.net/25-sai-no-joshikousei-episode-2",
    ]


def test_extract_data(mocked):
    mocked.add(responses.GET, EPISODE, body=EPISODE_HTML)
    mocked.add(responses.HEAD, SOURCE, headers={"Content-Length": "213691465"})
    data = extract_data(EPISODE)
    assert data.title == "Usamimi Bouken-tan: Sekuhara Shinagara Sekai o Sukue Episode 3"
    assert data.type == DataType.VIDEO
    stream = data.streams["0"]
    assert stream.size == 213691465
    assert stream.urls[0].url == SOURCE
    assert stream.urls[0].ext == "mp4"


def test_extract_data_without_source(mocked):
    mocked.add(responses.GET, EPISODE, body="<h1>x</h1>")
    with pytest.raises(DataSourceParseError):
        extract_data(EPISODE)


def test_extract_size_failure_is_an_error(mocked):
    mocked.add(responses.GET, EPISODE, body=EPISODE_HTML)
    with pytest.raises(ExtractionError) as info:
        HentaiVideosExtractor().extract(EPISODE)
    assert info.value.url == EPISODE


def test_extract_empty_series_returns_nothing(mocked):
    series = "https://hentaivideos.net/hentai/nothing-here"
    mocked.add(responses.GET, series, body="<html></html>")
    assert HentaiVideosExtractor().extract(series) == []