"""Search the article store from a terminal."""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import search_index
from config import load_config
from models import ScoredResult, SearchQuery, SortMode
from storage import ArticleStore, StoreUnavailable
from utils import format_time_ago

logger = logging.getLogger("search_cli")
console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank published articles against a query.")
    parser.add_argument("query", help="free-text query (substring match)")
    parser.add_argument("--category", help="only consider articles in this category")
    parser.add_argument(
        "--sort",
        default=SortMode.RELEVANCE.value,
        choices=[mode.value for mode in SortMode],
    )
    parser.add_argument("--explain", action="store_true", help="show which scoring rules fired")
    parser.add_argument("--db", help="path to the article database")
    return parser


def render(query: SearchQuery, results: List[ScoredResult], explain: bool = False) -> Table:
    table = Table(title=f"Search - {query.text!r} ({query.sort_mode.value})", show_lines=explain)
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right", style="cyan")
    table.add_column("Title")
    table.add_column("Category", style="magenta")
    table.add_column("Views", justify="right")
    table.add_column("Age")
    if explain:
        table.add_column("Why")

    for position, result in enumerate(results, start=1):
        article = result.article
        row = [
            str(position),
            str(result.relevance_score),
            article.title,
            article.category or "",
            str(article.views),
            format_time_ago(article.created_at),
        ]
        if explain:
            row.append(", ".join(f"{rule} +{points}" for rule, points in result.breakdown))
        table.add_row(*row)
    return table


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    load_dotenv()
    args = build_parser().parse_args(argv)

    store = ArticleStore(args.db or load_config()["db_path"])
    query = SearchQuery(
        text=args.query,
        category_filter=args.category,
        sort_mode=SortMode.parse(args.sort),
    )
    try:
        corpus = store.get_published_articles(args.category)
    except StoreUnavailable as exc:
        logger.error("Article store unavailable: %s", exc)
        return 1

    results = search_index.rank(corpus, query)
    if not results:
        console.print(f"No articles match {args.query!r}.")
        return 0
    console.print(render(query, results, explain=args.explain))
    return 0


if __name__ == "__main__":
    sys.exit(main())
