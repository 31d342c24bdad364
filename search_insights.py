"""Plain-text summary, tips and suggestions shown next to search results."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from models import Article

SUMMARY_EXCERPT_LENGTH = 150


def summarize_results(query: str, results: Sequence[Article]) -> str:
    if not results:
        return ""

    categories = []
    for article in results:
        if article.category and article.category not in categories:
            categories.append(article.category)

    count = len(results)
    summary = f"Your search returned {count} article{'s' if count != 1 else ''} "
    if categories:
        summary += f"across {', '.join(categories)} categories. "

    top = results[0]
    summary += f'The most relevant result is "{top.title}" '
    if top.excerpt:
        summary += f"which discusses: {top.excerpt[:SUMMARY_EXCERPT_LENGTH]}..."
    return summary.strip()


def related_tags(query: str, results: Sequence[Article], limit: int = 3) -> List[str]:
    lowered = (query or "").strip().lower()
    seen: List[str] = []
    for article in results:
        for tag in article.tags:
            tag = tag.lower()
            if tag != lowered and tag not in seen:
                seen.append(tag)
    return seen[:limit]


def search_tips(query: str, results: Sequence[Article]) -> List[str]:
    if not results:
        return []

    tips = []
    related = related_tags(query, results)
    if related:
        tips.append(f"Explore related topics: {', '.join(related)}")

    if len(results) == 1:
        tips.append("Try broadening your search terms for more results")
    elif len(results) > 10:
        tips.append("Use the category filter to narrow down your results")

    if '"' not in query and len(query.split()) > 1:
        tips.append(f'Use quotes around phrases for exact matches: "{query}"')

    tips.append("Sort by date to see the latest articles on this topic")
    return tips


def fallback_terms(query: str, year: Optional[int] = None) -> List[str]:
    """Suggest query variations when no smarter suggestion source is available."""
    query = (query or "").strip()
    if not query:
        return []
    if year is None:
        year = datetime.now().year
    lowered = query.lower()

    terms = []
    if "latest" not in lowered:
        terms.append(f"latest {query}")
    if "news" not in lowered:
        terms.append(f"{query} news")
    if str(year) not in lowered:
        terms.append(f"{query} {year}")
    return terms[:3]
