import requests

import news_ingest
from news_ingest import FetchError, fetch_all, fetch_feed
from storage import ArticleStore

RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example AI feed</title>
    <item>
      <title>AI Chips hit the market</title>
      <link>https://example.com/ai-chips</link>
      <guid>https://example.com/ai-chips</guid>
      <description>&lt;p&gt;New &lt;b&gt;accelerators&lt;/b&gt; ship this week.&lt;/p&gt;</description>
      <category>Hardware</category>
      <pubDate>Mon, 06 Oct 2025 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title></title>
      <link>https://example.com/untitled</link>
    </item>
  </channel>
</rss>
"""


class FakeResponse:
    def __init__(self, content=RSS, status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_fetch_feed_converts_entries(monkeypatch):
    monkeypatch.setattr(news_ingest.requests, "get", lambda *args, **kwargs: FakeResponse())

    articles = fetch_feed("https://example.com/feed", "ai")

    assert len(articles) == 1
    article = articles[0]
    assert article.id == "https---example-com-ai-chips"
    assert article.title == "AI Chips hit the market"
    assert article.excerpt == "New accelerators ship this week."
    assert article.tags == ("Hardware",)
    assert article.category == "ai"
    assert article.created_at is not None


def test_fetch_feed_raises_fetch_error_on_http_failure(monkeypatch):
    monkeypatch.setattr(news_ingest.requests, "get", lambda *args, **kwargs: FakeResponse(status=503))

    try:
        fetch_feed("https://example.com/feed", "ai")
    except FetchError:
        pass
    else:
        raise AssertionError("FetchError not raised")


def test_fetch_all_skips_failing_feeds_and_duplicates(monkeypatch):
    def fake_get(url, **kwargs):
        if "broken" in url:
            raise requests.ConnectionError("unreachable")
        return FakeResponse()

    monkeypatch.setattr(news_ingest.requests, "get", fake_get)

    articles = fetch_all(
        {
            "ai": ["https://broken.example.com/feed", "https://example.com/feed"],
            "gadgets": ["https://example.com/feed"],
        }
    )

    assert len(articles) == 1
    assert articles[0].category == "ai"


def test_main_saves_into_store(monkeypatch, tmp_path):
    monkeypatch.setattr(news_ingest.requests, "get", lambda *args, **kwargs: FakeResponse())
    monkeypatch.setattr(
        news_ingest,
        "load_config",
        lambda: {"db_path": str(tmp_path / "a.db"), "feeds": {"ai": ["https://example.com/feed"]}, "feed_timeout": 5},
    )
    store = ArticleStore(tmp_path / "a.db")

    assert news_ingest.main(store) == 0
    assert [a.title for a in store.get_published_articles("ai")] == ["AI Chips hit the market"]
