from getsauce.config import FAKE_HEADERS, USER_AGENT, Config


def test_headers_for_sets_referer_and_keeps_fake_headers():
    config = Config()
    headers = config.headers_for("https://example.com/page")
    assert headers["Referer"] == "https://example.com/page"
    assert headers["User-Agent"] == USER_AGENT
    assert headers["Accept"] == FAKE_HEADERS["Accept"]


def test_headers_for_does_not_mutate_config():
    config = Config()
    config.headers_for("https://example.com/a")
    assert "Referer" not in config.fake_headers


def test_configs_do_not_share_headers():
    first = Config()
    second = Config()
    first.fake_headers["User-Agent"] = "other"
    assert second.fake_headers["User-Agent"] == USER_AGENT
    assert first.headers_for("https://example.com/")["User-Agent"] == "other"


def test_defaults():
    config = Config()
    assert config.select_stream == "0"
    assert config.amount == 0
    assert config.caption == -1