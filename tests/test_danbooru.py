import pytest
import responses

from getsauce.extractors.danbooru import (
    SITE,
    DanbooruExtractor,
    extract_data,
    parse_url,
)
from getsauce.models import DataSourceParseError, DataType, ExtractionError, URLParseError

IMG_SRC = "https://cdn.donmai.us/original/3b/63/3b63c93d.jpg"
POST_HTML = (
    '<section id="image-container" data-width="1782"  data-height="2048">\n'
    '<img alt="konpaku youmu and konpaku youmu (touhou) drawn by niwashi_(yuyu)" '
    f'class="fit-width" src="{IMG_SRC}">\n</section>'
)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_parse_url_single_post():
    assert parse_url("https://danbooru.donmai.us/posts/3749687") == ["/posts/3749687"]


def test_parse_url_invalid():
    with pytest.raises(URLParseError):
        parse_url("https://danbooru.donmai.us/wiki")


def test_parse_url_overview_page(mocked):
    url = "https://danbooru.donmai.us/posts?page=3&tags=fire_emblem"
    mocked.add(
        responses.GET,
        "https://danbooru.donmai.us/posts",
        body='<article data-id="11"></article><article data-id="12"></article>',
    )
    assert parse_url(url) == ["/posts/11", "/posts/12"]


def test_extract_single_post(mocked):
    mocked.add(responses.GET, SITE + "/posts/3749687", body=POST_HTML)
    mocked.add(responses.HEAD, IMG_SRC, headers={"Content-Length": "157584"})
    data = DanbooruExtractor().extract("https://danbooru.donmai.us/posts/3749687")
    assert len(data) == 1
    item = data[0]
    assert item.title == "konpaku youmu and konpaku youmu (touhou) drawn by niwashi_(yuyu)"
    assert item.type == DataType.IMAGE
    assert item.url == SITE + "/posts/3749687"
    stream = item.streams["0"]
    assert stream.quality == "1782 x 2048"
    assert stream.size == 157584
    assert stream.urls[0].url == IMG_SRC
    assert stream.urls[0].ext == "jpg"


def test_extract_data_without_image(mocked):
    mocked.add(responses.GET, SITE + "/posts/1", body="<html></html>")
    with pytest.raises(DataSourceParseError):
        extract_data(SITE + "/posts/1")


def test_extract_data_without_size_fails(mocked):
    mocked.add(responses.GET, SITE + "/posts/2", body=POST_HTML)
    with pytest.raises(ExtractionError, match="no image size found"):
        extract_data(SITE + "/posts/2")