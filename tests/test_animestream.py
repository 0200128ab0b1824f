import pytest
import responses

from getsauce.extractors.animestream import parse_url, parse_url_without_site

SITE = "https://anime.example.com/"
SHOW_ONE = SITE + "hentai/show-one/"
SHOW_TWO = SITE + "hentai/show-two/"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _show_page(name, episodes):
    anchors = "".join(
        f'<a class="ep" href="{SITE}watch/{name}-episode-{n}/">\n' for n in episodes
    )
    return (
        anchors
        + '<div class="bixbox">\n'
        + f'<a class="rec" href="{SITE}watch/other-episode-9/">\n'
    )


def test_episode_url_is_returned_as_is(mocked):
    url = SITE + "watch/show-one-episode-1/"
    assert parse_url(url, SITE) == [url]
    assert len(mocked.calls) == 0


def test_show_page_lists_episodes_without_duplicates(mocked):
    mocked.add(responses.GET, SHOW_ONE, body=_show_page("show-one", [1, 1, 2]))
    assert parse_url(SHOW_ONE, SITE) == [
        SITE + "watch/show-one-episode-1/",
        SITE + "watch/show-one-episode-2/",
    ]


def test_listing_resolves_every_show(mocked):
    listing = SITE + "genres/romance"
    mocked.add(
        responses.GET,
        listing,
        body=(
            f'<a href="{SHOW_ONE}">one</a><a href="{SHOW_TWO}">two</a>'
            f'<div id="sidebar"><a href="{SITE}hentai/sidebar-show/">s</a>'
        ),
    )
    mocked.add(responses.GET, SHOW_ONE, body=_show_page("show-one", [1]))
    mocked.add(responses.GET, SHOW_TWO, body=_show_page("show-two", [1, 2]))
    assert parse_url(listing, SITE) == [
        SITE + "watch/show-one-episode-1/",
        SITE + "watch/show-two-episode-1/",
        SITE + "watch/show-two-episode-2/",
    ]


def test_failed_fetch_gives_nothing(mocked):
    mocked.add(responses.GET, SHOW_ONE, status=500)
    assert parse_url(SHOW_ONE, SITE) == []


def test_without_site_uses_host(mocked):
    mocked.add(responses.GET, SHOW_ONE, body=_show_page("show-one", [3]))
    assert parse_url_without_site(SHOW_ONE) == [SITE + "watch/show-one-episode-3/"]