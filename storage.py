"""Article persistence using SQLite."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Union

from config import load_config
from models import Article

logger = logging.getLogger(__name__)


class StoreUnavailable(RuntimeError):
    """The backing database cannot be opened or queried."""


def _resolve_db_path(configured: Union[str, Path]) -> Path:
    preferred = Path(configured)
    try:
        preferred.parent.mkdir(parents=True, exist_ok=True)
        return preferred
    except OSError:
        fallback = Path("/tmp/trendingtech_cache")
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback / preferred.name


def _row_to_article(row: sqlite3.Row) -> Article:
    return Article(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        excerpt=row["excerpt"],
        tags=tuple(json.loads(row["tags"] or "[]")),
        category=row["category"],
        created_at=row["created_at"],
        views=row["views"],
        slug=row["slug"],
        published=bool(row["published"]),
    )


class ArticleStore:
    """Published-article snapshots backed by a SQLite file."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        if db_path is None:
            db_path = load_config()["db_path"]
        self.db_path = _resolve_db_path(db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot open {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            self._migrate(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS articles (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL DEFAULT '',
                content TEXT NOT NULL DEFAULT '',
                excerpt TEXT NOT NULL DEFAULT '',
                tags TEXT NOT NULL DEFAULT '[]',
                category TEXT,
                created_at REAL,
                views INTEGER NOT NULL DEFAULT 0,
                slug TEXT NOT NULL DEFAULT '',
                published INTEGER NOT NULL DEFAULT 1
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_articles_views
            ON articles(published, views DESC)
            """
        )
        conn.commit()

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            conn = self._connect()
            try:
                return conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Article query failed: %s", exc)
            raise StoreUnavailable(str(exc)) from exc

    def save_articles(self, articles: Iterable[Article]) -> int:
        """Upsert articles by id. Returns the number written."""
        articles = list(articles)
        if not articles:
            return 0
        try:
            conn = self._connect()
            try:
                with conn:
                    for article in articles:
                        conn.execute(
                            """
                            INSERT INTO articles
                                (id, title, content, excerpt, tags, category,
                                 created_at, views, slug, published)
                            VALUES
                                (:id, :title, :content, :excerpt, :tags, :category,
                                 :created_at, :views, :slug, :published)
                            ON CONFLICT(id) DO UPDATE SET
                                title = excluded.title,
                                content = excluded.content,
                                excerpt = excluded.excerpt,
                                tags = excluded.tags,
                                category = excluded.category,
                                created_at = excluded.created_at,
                                views = MAX(articles.views, excluded.views),
                                slug = excluded.slug,
                                published = excluded.published
                            """,
                            {
                                **article.to_dict(),
                                "tags": json.dumps(list(article.tags)),
                                "published": int(article.published),
                            },
                        )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Saving articles failed: %s", exc)
            raise StoreUnavailable(str(exc)) from exc
        return len(articles)

    def get_published_articles(self, category: Optional[str] = None) -> List[Article]:
        sql = "SELECT * FROM articles WHERE published = 1"
        params: tuple = ()
        if category:
            sql += " AND category = ?"
            params = (category,)
        sql += " ORDER BY created_at IS NULL, created_at DESC, id"
        return [_row_to_article(row) for row in self._query(sql, params)]

    def get_article(self, article_id: str) -> Optional[Article]:
        rows = self._query("SELECT * FROM articles WHERE id = ?", (article_id,))
        return _row_to_article(rows[0]) if rows else None

    def get_trending(self, limit: int = 8) -> List[Article]:
        rows = self._query(
            """
            SELECT * FROM articles
            WHERE published = 1
            ORDER BY views DESC, created_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        return [_row_to_article(row) for row in rows]

    def record_view(self, article_id: str) -> int:
        try:
            conn = self._connect()
            try:
                with conn:
                    cursor = conn.execute(
                        "UPDATE articles SET views = views + 1 WHERE id = ?",
                        (article_id,),
                    )
                    if cursor.rowcount == 0:
                        raise KeyError(article_id)
                    row = conn.execute(
                        "SELECT views FROM articles WHERE id = ?",
                        (article_id,),
                    ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.error("Recording view for %s failed: %s", article_id, exc)
            raise StoreUnavailable(str(exc)) from exc
        return row["views"]
