from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from v2ex_scraper.exceptions import TransportError  # noqa: E402

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
OTHER_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


class FakeScraper:
    """Serves canned bodies by URL; a missing URL behaves like a 404."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.requests = []
        self.closed = False

    def fetch(self, url, timeout=None):
        self.requests.append((url, timeout))
        page = self.pages.get(url)
        if page is None:
            raise TransportError(f"HTTP 404 fetching {url}")
        if isinstance(page, Exception):
            raise page
        return page

    def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def profile_html(username="livid"):
    script = f'<script>const address = "{WALLET}";</script>'
    return f"""
<html><head><script>var csrf = "abc";</script>{script}</head>
<body><div id="Main">
<div class="box">
  <div class="cell">
    <table><tr>
      <td><img src="https://cdn.v2ex.com/avatar/{username}_large.png" class="avatar" /></td>
      <td>
        <h1>{username}</h1>
        <span class="bigger">Remember the bigger picture<br>gm.sol</span>
        <div class="sep10"></div>
        <span class="gray">V2EX 第 1 号会员，加入于 2010-04-25 21:45:46 +08:00<br>今日活跃度排名 42</span>
        <div class="badge pro">PRO</div>
      </td>
    </tr></table>
  </div>
  <div class="widgets">
    <a class="social_label" href="https://twitter.com/{username}"><img src="/static/img/social_twitter.png" alt="Twitter" />&nbsp; {username}</a>
    <a class="social_label" href="https://github.com/{username}"><img src="/static/img/social_github.png" alt="GitHub" />&nbsp; {username}</a>
    <a class="social_label" href="https://t.me/{username}"><img src="/static/img/social_telegram.png" alt="Telegram" />&nbsp; {username}</a>
    <a class="social_label" href="https://www.google.com/maps?q=Shanghai"><img src="/static/img/social_geo.png" alt="Geo" />&nbsp; Shanghai</a>
    <a class="social_label" href="https://www.dropbox.com/s/blog"><img src="/static/img/social_home.png" alt="Home" />&nbsp; blog</a>
  </div>
</div>
<div class="box">
  <div class="dock_area">
    <table><tr><td>
      <div class="fr"><span class="fade" title="2024-05-01 10:00:00 +08:00">3 天前</span></div>
      <span class="gray">回复了 <a href="/member/alice">alice</a> 创建的主题 › <a href="/t/1000001#reply5">Airdrop thread</a></span>
    </td></tr></table>
  </div>
  <div class="inner"><div class="reply_content">tip me at {WALLET}<br>thanks</div></div>
  <div class="dock_area">
    <table><tr><td>
      <div class="fr"><span class="fade">5 天前</span></div>
      <span class="gray">回复了 <a href="/member/bob">bob</a> 创建的主题 › <a href="/t/1000002#reply1">Empty</a></span>
    </td></tr></table>
  </div>
  <div class="inner"><div class="reply_content"></div></div>
  <div class="dock_area">
    <table><tr><td>
      <div class="fr"><span class="fade">6 天前</span></div>
      <span class="gray">回复了 <a href="/member/carol">carol</a> 创建的主题 › <a href="/t/1000003#reply2">Names</a></span>
    </td></tr></table>
  </div>
  <div class="inner"><div class="reply_content">mine is {username}.sol</div></div>
</div>
</div></body></html>
"""


def reply_cell(reply_id, floor, author, content="", device="Android", title="2024-01-02 12:00:00 +08:00"):
    via = f" via {device}" if device else ""
    return f"""
<div id="r_{reply_id}" class="cell">
<table cellpadding="0" cellspacing="0" border="0" width="100%"><tr>
<td width="48" valign="top" align="center"><img src="https://cdn.v2ex.com/avatars/{author}.png" class="avatar" border="0" align="default" alt="{author}" /></td>
<td width="10" valign="top"></td>
<td width="auto" valign="top" align="left"><div class="fr"><span class="no">{floor}</span></div>
<strong><a href="/member/{author}" class="dark">{author}</a></strong>&nbsp; &nbsp;<span class="ago" title="{title}">1 天前{via}</span>
<div class="sep5"></div>
<div class="reply_content">{content}</div>
</td></tr></table>
</div>
"""


def pagination_controls(total_pages, current=1):
    links = []
    for page in range(1, total_pages + 1):
        css = "page_current" if page == current else "page_normal"
        links.append(f'<a href="?p={page}" class="{css}">{page}</a>')
    return f'<div class="cell ps_container">{"".join(links)}</div>'


def topic_html(cells, total_pages=1, current=1, words=None,
               content=f"My wallet:<br>{OTHER_WALLET}<br>send tips, thanks"):
    script = ""
    if words is not None:
        quoted = ", ".join(f'"{word}"' for word in words)
        script = f"<script>var words = [{quoted}];</script>"
    controls = pagination_controls(total_pages, current) if total_pages > 1 else ""
    return f"""
<html><head>{script}</head>
<body><div id="Main">
<div class="box">
  <div class="header">
    <div class="fr"><a href="/member/op"><img src="https://cdn.v2ex.com/avatars/op_large.png" class="avatar" border="0" align="default" alt="op" /></a></div>
    <a href="/">V2EX</a> <span class="chevron">›</span> <a href="/go/solana">Solana</a>
    <div class="sep10"></div>
    <h1>Airdrop thread</h1>
    <small class="gray"><a href="/member/op">op</a> · <span title="2024-01-01 09:00:00 +08:00">3 天前</span> · 1234 次点击</small>
  </div>
  <div class="cell"><div class="topic_content"><div class="markdown_body">{content}</div></div></div>
  <div class="cell"><a href="/tag/solana" class="tag">solana</a><a href="/tag/airdrop" class="tag">airdrop</a></div>
</div>
<div class="box">
  {controls}
  {"".join(cells)}
  {controls}
</div>
</div></body></html>
"""


def numbered_cells(first_floor, count, prefix="u"):
    return [
        reply_cell(str(9000 + floor), floor, f"{prefix}{floor}", content=f"reply number {floor}")
        for floor in range(first_floor, first_floor + count)
    ]


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def make_scraper():
    return FakeScraper


@pytest.fixture
def make_profile_html():
    return profile_html


@pytest.fixture
def make_topic_html():
    return topic_html


@pytest.fixture
def make_reply_cell():
    return reply_cell


@pytest.fixture
def make_numbered_cells():
    return numbered_cells


@pytest.fixture(autouse=True)
def _clear_environment(monkeypatch):
    monkeypatch.delenv("V2EX_BASE_URL", raising=False)
    monkeypatch.delenv("V2EX_TIMEOUT", raising=False)
