"""Per-user history of recent search queries."""

from typing import List, Sequence

SESSION_KEY = "recent_searches"
DEFAULT_LIMIT = 5


def remember(history: Sequence[str], query: str, limit: int = DEFAULT_LIMIT) -> List[str]:
    """Return a new history with ``query`` first, de-duplicated and capped."""
    query = (query or "").strip()
    if not query:
        return list(history)
    lowered = query.lower()
    kept = [past for past in history if past.lower() != lowered]
    return [query, *kept][:limit]


def load(session) -> List[str]:
    history = session.get(SESSION_KEY) or []
    return [item for item in history if isinstance(item, str)]


def save(session, query: str, limit: int = DEFAULT_LIMIT) -> List[str]:
    history = remember(load(session), query, limit)
    session[SESSION_KEY] = history
    return history
