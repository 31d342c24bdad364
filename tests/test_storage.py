import sqlite3

import pytest

import storage
from models import Article
from storage import ArticleStore, StoreUnavailable


@pytest.fixture
def store(tmp_path):
    store = ArticleStore(tmp_path / "articles.db")
    store.save_articles(
        [
            Article(id="a1", title="AI Chips", category="ai", created_at=100.0, views=5, tags=("ai", "chips")),
            Article(id="a2", title="Bitcoin rally", category="crypto", created_at=300.0, views=50),
            Article(id="a3", title="Robot lawnmowers", category="gadgets", views=20),
            Article(id="a4", title="Draft post", category="ai", created_at=400.0, views=999, published=False),
        ]
    )
    return store


def test_published_articles_newest_first_and_hide_drafts(store):
    articles = store.get_published_articles()

    assert [a.id for a in articles] == ["a2", "a1", "a3"]


def test_published_articles_filtered_by_category(store):
    articles = store.get_published_articles("ai")

    assert [a.id for a in articles] == ["a1"]
    assert articles[0].tags == ("ai", "chips")


def test_trending_orders_by_views(store):
    trending = store.get_trending(limit=2)

    assert [a.id for a in trending] == ["a2", "a3"]


def test_record_view_increments_counter(store):
    assert store.record_view("a1") == 6
    assert store.get_article("a1").views == 6


def test_record_view_unknown_article(store):
    with pytest.raises(KeyError):
        store.record_view("missing")


def test_resaving_keeps_view_count(store):
    store.record_view("a1")
    store.save_articles([Article(id="a1", title="AI Chips (updated)", category="ai", created_at=100.0)])

    article = store.get_article("a1")
    assert article.title == "AI Chips (updated)"
    assert article.views == 6


def test_unopenable_database_raises_store_unavailable(tmp_path):
    # A directory cannot be opened as a database file
    store = ArticleStore(tmp_path)

    with pytest.raises(StoreUnavailable):
        store.get_published_articles()


def test_failed_migration_closes_connection(tmp_path, monkeypatch):
    closed = []

    class BrokenConnection:
        row_factory = None

        def execute(self, *args):
            raise sqlite3.OperationalError("disk I/O error")

        def close(self):
            closed.append(True)

    monkeypatch.setattr(storage.sqlite3, "connect", lambda path: BrokenConnection())

    with pytest.raises(StoreUnavailable):
        ArticleStore(tmp_path / "articles.db").get_published_articles()
    assert closed == [True]
