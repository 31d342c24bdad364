"""Substring relevance search over an in-memory article corpus."""

from __future__ import annotations

import logging
import time
from typing import Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np

from models import Article, ScoredResult, SearchQuery, SortMode

logger = logging.getLogger(__name__)

EXACT_TITLE_POINTS = 100
TITLE_MATCH_POINTS = 50
EXCERPT_MATCH_POINTS = 20
TAG_MATCH_POINTS = 30
RECENT_WEEK_POINTS = 10
RECENT_MONTH_POINTS = 5

SECONDS_PER_DAY = 60 * 60 * 24

CorpusEntry = Union[Article, Mapping]


def build_search_text(article: Article) -> str:
    parts = [article.title, article.content, article.excerpt, *article.tags]
    return " ".join(parts).lower()


def matches(article: Article, q: str) -> bool:
    return q in build_search_text(article)


def score_article(article: Article, q: str, now: Optional[float] = None) -> List[Tuple[str, int]]:
    """Return the scoring rules that fired for ``article`` as (rule, points) pairs.

    ``q`` must already be trimmed and lower-cased.
    """
    if now is None:
        now = time.time()

    breakdown: List[Tuple[str, int]] = []
    title = article.title.lower()
    if title == q:
        breakdown.append(("exact_title", EXACT_TITLE_POINTS))
    elif q in title:
        breakdown.append(("title_match", TITLE_MATCH_POINTS))

    if q in article.excerpt.lower():
        breakdown.append(("excerpt_match", EXCERPT_MATCH_POINTS))

    for tag in article.tags:
        if q in tag.lower():
            breakdown.append(("tag_match", TAG_MATCH_POINTS))

    if article.created_at is not None:
        age_days = (now - article.created_at) / SECONDS_PER_DAY
        if age_days < 7:
            breakdown.append(("recency", RECENT_WEEK_POINTS))
        elif age_days < 30:
            breakdown.append(("recency", RECENT_MONTH_POINTS))

    return breakdown


def _coerce(corpus: Iterable[CorpusEntry]) -> List[Article]:
    articles = []
    for position, entry in enumerate(corpus):
        if isinstance(entry, Article):
            articles.append(entry)
            continue
        try:
            articles.append(Article.from_mapping(entry))
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Skipping corpus entry %s: %s", position, exc)
    return articles


def _order(results: List[ScoredResult], sort_mode: SortMode) -> List[ScoredResult]:
    if sort_mode is SortMode.DATE:
        keys = [r.article.created_at or 0 for r in results]
    elif sort_mode is SortMode.VIEWS:
        keys = [r.article.views for r in results]
    else:
        keys = [r.relevance_score for r in results]

    # Stable sort on the negated key keeps corpus order for ties.
    order = np.argsort(-np.asarray(keys, dtype=float), kind="stable")
    return [results[i] for i in order]


def rank(corpus: Iterable[CorpusEntry], query: SearchQuery, now: Optional[float] = None) -> List[ScoredResult]:
    """Filter, score and order ``corpus`` against ``query``.

    A blank query matches nothing. Entries that cannot be read as an Article
    are skipped without aborting the search.
    """
    q = query.normalized_text
    if not q:
        return []
    if now is None:
        now = time.time()

    results = []
    for article in _coerce(corpus):
        if query.category_filter is not None and article.category != query.category_filter:
            continue
        if not matches(article, q):
            continue
        breakdown = score_article(article, q, now)
        results.append(
            ScoredResult(
                article=article,
                relevance_score=sum(points for _, points in breakdown),
                breakdown=breakdown,
            )
        )

    if not results:
        return []
    return _order(results, query.sort_mode)


def search(corpus: Iterable[CorpusEntry], query: SearchQuery, now: Optional[float] = None) -> List[Article]:
    return [result.article for result in rank(corpus, query, now)]
