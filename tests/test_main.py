import json

import main as cli
from v2ex_scraper.client import V2exClient


def _patch_client(monkeypatch, scraper, sleep):
    def build(base_url=None, config=None):
        return V2exClient(base_url=base_url, config=config, scraper=scraper, sleep=sleep)

    monkeypatch.setattr(cli, "V2exClient", build)


def test_user_command_writes_json(tmp_path, monkeypatch, make_scraper, make_profile_html, sleep):
    scraper = make_scraper({"https://v2ex.com/member/livid": make_profile_html()})
    _patch_client(monkeypatch, scraper, sleep)
    output = tmp_path / "livid.json"

    exit_code = cli.main(["--output", str(output), "user", "livid"])

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["type"] == "user_info"
    assert data["username"] == "livid"
    assert scraper.closed is True


def test_users_command_applies_overrides(tmp_path, monkeypatch, make_scraper, make_profile_html, sleep):
    scraper = make_scraper({"https://v2ex.com/member/livid": make_profile_html()})
    _patch_client(monkeypatch, scraper, sleep)
    output = tmp_path / "users.json"

    exit_code = cli.main([
        "--timeout", "3", "--output", str(output),
        "users", "livid", "ghost", "--delay", "0", "--retry-count", "0", "--quiet",
    ])

    assert exit_code == 0
    outcomes = json.loads(output.read_text(encoding="utf-8"))
    assert [outcome["success"] for outcome in outcomes] == [True, False]
    assert all(timeout == 3 for _, timeout in scraper.requests)
    assert sleep.calls == []


def test_scraping_error_exits_non_zero(monkeypatch, make_scraper, sleep):
    scraper = make_scraper()
    _patch_client(monkeypatch, scraper, sleep)

    assert cli.main(["page", "https://v2ex.com/go/solana"]) == 1
    assert scraper.closed is True


def test_configuration_error_exits_with_two():
    assert cli.main(["--config", "/nonexistent/config.yaml", "user", "livid"]) == 2
