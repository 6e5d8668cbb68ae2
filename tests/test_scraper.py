import pytest
import requests

from v2ex_scraper.exceptions import TransportError
from v2ex_scraper.scraper import Scraper


class FakeResponse:
    def __init__(self, status_code=200, text="<html></html>", encoding="utf-8"):
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")
        self.encoding = encoding
        self.apparent_encoding = "utf-8"


def _scraper_returning(monkeypatch, outcome, seen=None):
    scraper = Scraper({"user_agent": "test-agent"}, {"timeout": 7})

    def fake_get(url, timeout=None):
        if seen is not None:
            seen.append((url, timeout))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(scraper.session, "get", fake_get)
    return scraper


def test_session_headers_come_from_config():
    scraper = Scraper({"user_agent": "test-agent", "accept_language": "en"}, {})

    assert scraper.session.headers["User-Agent"] == "test-agent"
    assert scraper.session.headers["Accept-Language"] == "en"


def test_fetch_returns_body_with_default_timeout(monkeypatch):
    seen = []
    scraper = _scraper_returning(monkeypatch, FakeResponse(text="<html>ok</html>"), seen)

    assert scraper.fetch("https://v2ex.com/t/1") == "<html>ok</html>"
    assert seen == [("https://v2ex.com/t/1", 7)]


def test_fetch_passes_explicit_timeout(monkeypatch):
    seen = []
    scraper = _scraper_returning(monkeypatch, FakeResponse(), seen)

    scraper.fetch("https://v2ex.com/t/1", timeout=2)

    assert seen == [("https://v2ex.com/t/1", 2)]


def test_fetch_fills_in_missing_encoding(monkeypatch):
    response = FakeResponse(encoding=None)
    scraper = _scraper_returning(monkeypatch, response)

    scraper.fetch("https://v2ex.com/t/1")

    assert response.encoding == "utf-8"


def test_fetch_timeout_becomes_transport_error(monkeypatch):
    scraper = _scraper_returning(monkeypatch, requests.exceptions.ReadTimeout("slow"))

    with pytest.raises(TransportError, match="Timed out after 7s"):
        scraper.fetch("https://v2ex.com/t/1")


def test_fetch_connection_error_becomes_transport_error(monkeypatch):
    scraper = _scraper_returning(monkeypatch, requests.exceptions.ConnectionError("refused"))

    with pytest.raises(TransportError, match="Failed to fetch"):
        scraper.fetch("https://v2ex.com/t/1")


@pytest.mark.parametrize("status", [403, 404, 503])
def test_fetch_error_status_becomes_transport_error(monkeypatch, status):
    scraper = _scraper_returning(monkeypatch, FakeResponse(status_code=status))

    with pytest.raises(TransportError, match=f"HTTP {status}"):
        scraper.fetch("https://v2ex.com/member/ghost")
