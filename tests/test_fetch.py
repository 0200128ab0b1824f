import pytest
import requests
import responses

from getsauce.config import USER_AGENT
from getsauce.fetch import (
    content_size,
    get_bytes,
    get_text,
    head_headers,
    send,
    size_from_headers,
)

PAGE = "https://example.com/page"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_get_text_sends_fake_headers(mocked):
    mocked.add(responses.GET, PAGE, body="hello")
    assert get_text(PAGE) == "hello"
    sent = mocked.calls[0].request.headers
    assert sent["User-Agent"] == USER_AGENT
    assert sent["Referer"] == PAGE


def test_get_text_custom_referer(mocked):
    mocked.add(responses.GET, PAGE, body="x")
    get_text(PAGE, {"Referer": "https://example.com/"})
    assert mocked.calls[0].request.headers["Referer"] == "https://example.com/"


def test_get_bytes(mocked):
    mocked.add(responses.GET, PAGE, body=b"\x00\x01\x02")
    assert get_bytes(PAGE) == b"\x00\x01\x02"


def test_get_text_http_error(mocked):
    mocked.add(responses.GET, PAGE, status=404)
    with pytest.raises(requests.HTTPError):
        get_text(PAGE)


def test_send_post_body(mocked):
    mocked.add(responses.POST, PAGE, body="ok")
    response = send("POST", PAGE, {"Content-Type": "application/x-www-form-urlencoded"}, "a=1")
    assert response.text == "ok"
    assert mocked.calls[0].request.body == "a=1"


def test_content_size(mocked):
    mocked.add(responses.HEAD, PAGE, headers={"Content-Length": "569833"})
    assert content_size(PAGE, "https://example.com/") == 569833
    assert head_headers(PAGE, "https://example.com/")["content-length"] == "569833"


def test_size_from_headers_case_insensitive():
    assert size_from_headers({"content-length": "157584"}) == 157584


def test_size_from_headers_missing():
    with pytest.raises(ValueError):
        size_from_headers({})