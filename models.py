"""Record types for articles, queries and ranked results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from utils import clean_html, normalize_doc_id, parse_timestamp

EXCERPT_LENGTH = 150


class SortMode(str, Enum):
    RELEVANCE = "relevance"
    DATE = "date"
    VIEWS = "views"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortMode":
        """Parse a user-supplied sort mode; blank means relevance."""
        if value is None or not str(value).strip():
            return cls.RELEVANCE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown sort mode: {value!r}") from None


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _tags(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        return tuple(tag for tag in value if isinstance(tag, str))
    return ()


def _created_at(value: Any) -> Optional[float]:
    # Firestore timestamps arrive as {"_seconds": ..., "_nanoseconds": ...}
    if isinstance(value, Mapping):
        value = value.get("_seconds", value.get("seconds"))
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        return parsed.timestamp() if parsed else None
    return None


def _views(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        views = int(value)
    except (TypeError, ValueError):
        return 0
    return max(views, 0)


@dataclass(frozen=True)
class Article:
    id: str
    title: str = ""
    content: str = ""
    excerpt: str = ""
    tags: Tuple[str, ...] = ()
    category: Optional[str] = None
    created_at: Optional[float] = None
    views: int = 0
    slug: str = ""
    published: bool = True

    def __post_init__(self):
        # Frozen: coerce typed-but-malformed fields in place so ranking never trips on them.
        object.__setattr__(self, "title", _text(self.title))
        object.__setattr__(self, "content", _text(self.content))
        object.__setattr__(self, "excerpt", _text(self.excerpt))
        object.__setattr__(self, "slug", _text(self.slug))
        object.__setattr__(self, "tags", _tags(self.tags))
        if self.category is not None and not isinstance(self.category, str):
            object.__setattr__(self, "category", str(self.category))
        if self.created_at is not None:
            object.__setattr__(self, "created_at", _created_at(self.created_at))
        object.__setattr__(self, "views", _views(self.views))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Article":
        """Build an Article from a loosely typed document.

        Missing or malformed optional fields fall back to their defaults. A
        document without a usable ``id`` is rejected with ``ValueError``.
        """
        raw_id = data.get("id")
        article_id = str(raw_id).strip() if isinstance(raw_id, (str, int)) else ""
        if not article_id:
            raise ValueError("article document has no id")

        category = data.get("category")
        if category is not None and not isinstance(category, str):
            category = str(category)

        created = data.get("createdAt", data.get("created_at"))
        published = data.get("published", True)
        return cls(
            id=article_id,
            title=_text(data.get("title")),
            content=_text(data.get("content")),
            excerpt=_text(data.get("excerpt")),
            tags=_tags(data.get("tags")),
            category=category or None,
            created_at=_created_at(created),
            views=_views(data.get("views")),
            slug=_text(data.get("slug")) or normalize_doc_id(_text(data.get("title")).lower()),
            published=bool(published),
        )

    @property
    def display_excerpt(self) -> str:
        if self.excerpt:
            return self.excerpt
        if not self.content:
            return ""
        return clean_html(self.content)[:EXCERPT_LENGTH] + "..."

    def to_dict(self) -> dict:
        data = asdict(self)
        data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class SearchQuery:
    text: str
    category_filter: Optional[str] = None
    sort_mode: SortMode = SortMode.RELEVANCE

    @property
    def normalized_text(self) -> str:
        return (self.text or "").strip().lower()


@dataclass(frozen=True)
class ScoredResult:
    article: Article
    relevance_score: int
    breakdown: List[Tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.article.to_dict()
        data["relevance_score"] = self.relevance_score
        data["breakdown"] = [{"rule": rule, "points": points} for rule, points in self.breakdown]
        return data
