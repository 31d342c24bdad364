"""Cron-friendly entry point that pulls category news feeds into the article store."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import feedparser
import requests
from dotenv import load_dotenv

from config import load_config
from models import Article
from storage import ArticleStore, StoreUnavailable
from utils import clean_html, normalize_doc_id, parse_timestamp, truncate

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 300
USER_AGENT = "TrendingTech-Daily/1.0"


class FetchError(RuntimeError):
    """A feed could not be downloaded."""


def _entry_content(entry) -> str:
    content = entry.get("content")
    if isinstance(content, list) and content:
        first = content[0]
        return first.get("value", "") if isinstance(first, dict) else str(first)
    return entry.get("summary", "") or ""


def _entry_created_at(entry) -> Optional[float]:
    stamp = entry.get("published") or entry.get("updated")
    parsed = parse_timestamp(stamp) if stamp else None
    return parsed.timestamp() if parsed else None


def entry_to_article(entry, category: str) -> Optional[Article]:
    title = clean_html(entry.get("title", ""))
    raw_id = entry.get("id") or entry.get("link")
    article_id = normalize_doc_id(raw_id or "")
    if not title or not article_id:
        return None

    tags = tuple(
        tag.get("term", "").strip()
        for tag in entry.get("tags", [])
        if tag.get("term", "").strip()
    )
    return Article(
        id=article_id,
        title=title,
        content=_entry_content(entry),
        excerpt=truncate(clean_html(entry.get("summary", "")), EXCERPT_LIMIT),
        tags=tags,
        category=category,
        created_at=_entry_created_at(entry),
        slug=normalize_doc_id(title.lower()),
    )


def fetch_feed(url: str, category: str, timeout: float = 15) -> List[Article]:
    try:
        resp = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"{url}: {exc}") from exc

    parsed = feedparser.parse(resp.content)
    if parsed.bozo:
        logger.warning("Feed parse issue for %s: %s", url, parsed.get("bozo_exception"))

    articles = []
    for entry in parsed.entries:
        article = entry_to_article(entry, category)
        if article is None:
            logger.debug("Skipping feed entry without id or title from %s", url)
            continue
        articles.append(article)
    return articles


def fetch_all(feeds: Dict[str, List[str]], timeout: float = 15) -> List[Article]:
    combined: Dict[str, Article] = {}
    for category, urls in feeds.items():
        for url in urls:
            logger.info("Fetching %s feed: %s", category, url)
            try:
                articles = fetch_feed(url, category, timeout=timeout)
            except FetchError as exc:
                logger.warning("Feed fetch failed for %s: %s", category, exc)
                continue
            for article in articles:
                combined.setdefault(article.id, article)
    return list(combined.values())


def main(store: Optional[ArticleStore] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    load_dotenv()
    config = load_config()
    store = store or ArticleStore(config["db_path"])

    logging.info("Starting news ingest (%s categories)", len(config["feeds"]))
    articles = fetch_all(config["feeds"], timeout=config["feed_timeout"])
    logging.info("Fetched %s articles", len(articles))
    try:
        saved = store.save_articles(articles)
    except StoreUnavailable as exc:
        logging.error("Article store unavailable: %s", exc)
        return 1
    logging.info("Saved %s articles", saved)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
