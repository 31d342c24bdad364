"""app.py
Search front end for TrendingTech Daily.

Features:
- Substring relevance search over published articles with relevance, date and views ordering
- Per-result score breakdown ("why this matched")
- Trending articles by views and per-session recent searches
- Security: CSRF protection, rate limiting, input sanitization
"""
import html
import logging
import os
import secrets
import sys
from datetime import timedelta

import bleach
from dotenv import load_dotenv
from flask import Flask, jsonify, render_template, request, session
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_talisman import Talisman

import recent_searches
import search_index
import search_insights
from config import load_config
from models import SearchQuery, SortMode
from storage import ArticleStore, StoreUnavailable
from utils import format_time_ago, normalize_doc_id

load_dotenv()

app = Flask(__name__)

if not app.debug:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

CONFIG = load_config()

app.secret_key = os.getenv('SECRET_KEY', secrets.token_hex(32))
is_production = os.getenv('FLASK_ENV') == 'production'

app.config['SESSION_COOKIE_SECURE'] = is_production
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=24)
app.config['MAX_CONTENT_LENGTH'] = 1024 * 1024

Talisman(
    app,
    force_https=is_production,
    strict_transport_security=is_production,
    session_cookie_secure=is_production,
    content_security_policy={
        'default-src': "'self'",
        'script-src': "'self'",
        'style-src': "'self'",
        'img-src': "'self' data:",
        'frame-ancestors': "'none'",
    },
    referrer_policy='strict-origin-when-cross-origin',
)

limiter = Limiter(
    get_remote_address,
    app=app,
    default_limits=["200 per day", "50 per hour"],
    storage_uri="memory://",
)

MAX_QUERY_LENGTH = 100
MAX_TRENDING = 20


def get_store() -> ArticleStore:
    store = app.config.get('ARTICLE_STORE')
    if store is None:
        store = ArticleStore(CONFIG['db_path'])
        app.config['ARTICLE_STORE'] = store
    return store


def sanitize_input(text: str, limit: int = MAX_QUERY_LENGTH) -> str:
    """Strip markup from user input; entities are decoded so the ranker sees the raw text."""
    if not text:
        return ""
    cleaned = bleach.clean(text, tags=[], attributes={}, strip=True)
    return html.unescape(cleaned).strip()[:limit]


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = secrets.token_hex(16)
    return session['csrf_token']


def validate_csrf_token(token: str) -> bool:
    return bool(token) and session.get('csrf_token') == token


@app.before_request
def before_request():
    generate_csrf_token()


@app.context_processor
def inject_csrf_token():
    return dict(csrf_token=generate_csrf_token())


def run_search(remember: bool = True):
    """Parse request args, rank the store snapshot and build the response payload.

    Returns ``(payload, status)``. The query is added to recent searches only
    when ``remember`` is set.
    """
    query_text = sanitize_input(request.args.get('q', ''))
    category = sanitize_input(request.args.get('category', '')) or None
    try:
        sort_mode = SortMode.parse(request.args.get('sort'))
    except ValueError as exc:
        return {"error": str(exc), "results": []}, 400

    payload = {
        "query": query_text,
        "category": category,
        "sort": sort_mode.value,
        "total": 0,
        "results": [],
        "summary": "",
        "tips": [],
        "related": [],
    }
    query = SearchQuery(text=query_text, category_filter=category, sort_mode=sort_mode)
    if not query.normalized_text:
        return payload, 200

    try:
        corpus = get_store().get_published_articles(category)
    except StoreUnavailable as exc:
        app.logger.error("Search failed, article store unavailable: %s", exc)
        payload["error"] = "Search is temporarily unavailable. Please try again."
        return payload, 503

    ranked = search_index.rank(corpus, query)
    articles = [result.article for result in ranked]
    results = []
    for result in ranked:
        item = result.to_dict()
        item["excerpt"] = result.article.display_excerpt
        item["time_ago"] = format_time_ago(result.article.created_at)
        results.append(item)

    if remember:
        recent_searches.save(session, query_text, CONFIG["recent_search_limit"])
    payload.update(
        total=len(results),
        results=results,
        summary=search_insights.summarize_results(query_text, articles),
        tips=search_insights.search_tips(query_text, articles),
        related=search_insights.related_tags(query_text, articles),
    )
    return payload, 200


@app.route('/search')
@limiter.limit("20 per minute")
def search_page():
    """Render search results."""
    payload, status = run_search()
    return render_template('search.html', recent=recent_searches.load(session), **payload), status


@app.route('/api/search')
@limiter.limit("20 per minute")
def api_search():
    """Search published articles and return ranked JSON results."""
    payload, status = run_search()
    return jsonify(payload), status


@app.route('/api/trending')
@limiter.limit("30 per minute")
def api_trending():
    """Most viewed published articles."""
    try:
        limit = int(request.args.get('limit', CONFIG['trending_limit']))
    except ValueError:
        return jsonify({"error": "Invalid limit"}), 400
    limit = max(1, min(limit, MAX_TRENDING))

    try:
        articles = get_store().get_trending(limit)
    except StoreUnavailable as exc:
        app.logger.error("Trending lookup failed: %s", exc)
        return jsonify({"error": "Failed to load topics.", "results": []}), 503
    return jsonify({"results": [article.to_dict() for article in articles]})


@app.route('/api/recent-searches')
def api_recent_searches():
    return jsonify({"recent": recent_searches.load(session)})


@app.route('/api/suggestions')
@limiter.limit("20 per minute")
def api_suggestions():
    """Query variations plus tags related to the current results."""
    payload, status = run_search(remember=False)
    if status != 200:
        return jsonify(payload), status
    return jsonify({
        "query": payload["query"],
        "related_terms": search_insights.fallback_terms(payload["query"]),
        "related_tags": payload["related"],
        "search_tip": 'Use quotes for exact phrases, e.g., "artificial intelligence"',
    })


@app.route('/api/articles/<article_id>/view', methods=['POST'])
@limiter.limit("30 per minute")
def record_view(article_id):
    """Increment an article's view counter."""
    data = request.get_json(silent=True) or {}
    if not validate_csrf_token(data.get('csrf_token')):
        return jsonify({"success": False, "error": "Invalid CSRF token"}), 403
    if normalize_doc_id(article_id) != article_id:
        return jsonify({"success": False, "error": "Invalid article ID"}), 400

    try:
        views = get_store().record_view(article_id)
    except KeyError:
        return jsonify({"success": False, "error": "Unknown article"}), 404
    except StoreUnavailable as exc:
        app.logger.error("View tracking failed: %s", exc)
        return jsonify({"success": False, "error": "Store unavailable"}), 503
    return jsonify({"success": True, "views": views})


@app.route('/health')
def health_check():
    return jsonify({
        'status': 'ok',
        'message': 'TrendingTech search is running',
        'environment': os.getenv('FLASK_ENV', 'unknown'),
        'python_version': f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    })


@app.errorhandler(429)
def ratelimit_handler(e):
    return jsonify({"error": "Rate limit exceeded. Please try again later."}), 429


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
def internal_error(e):
    app.logger.error("Internal error: %s", e)
    return jsonify({"error": "Internal server error"}), 500


if __name__ == '__main__':
    debug_mode = os.getenv('FLASK_ENV') == 'development'
    host = '127.0.0.1' if debug_mode else '0.0.0.0'
    port = int(os.getenv('PORT', 8080))

    app.run(host=host, port=port, debug=debug_mode)
