from models import Article
from search_insights import fallback_terms, related_tags, search_tips, summarize_results


def articles():
    return [
        Article(id="1", title="AI Chips", excerpt="Chipmakers race ahead", category="ai", tags=("AI", "Chips")),
        Article(id="2", title="Chip tariffs", category="business", tags=("chips", "trade")),
    ]


def test_summary_mentions_count_categories_and_top_result():
    summary = summarize_results("chips", articles())

    assert summary.startswith("Your search returned 2 articles across ai, business categories.")
    assert 'The most relevant result is "AI Chips"' in summary
    assert "which discusses: Chipmakers race ahead..." in summary
    assert summarize_results("chips", []) == ""


def test_related_tags_skip_query_and_duplicates():
    assert related_tags("chips", articles()) == ["ai", "trade"]


def test_tips_for_single_multi_word_result():
    tips = search_tips("ai chips", articles()[:1])

    assert "Try broadening your search terms for more results" in tips
    assert 'Use quotes around phrases for exact matches: "ai chips"' in tips
    assert tips[-1] == "Sort by date to see the latest articles on this topic"
    assert search_tips("ai chips", []) == []


def test_fallback_terms_skip_existing_words():
    assert fallback_terms("robots", year=2026) == ["latest robots", "robots news", "robots 2026"]
    assert fallback_terms("latest robots news", year=2026) == ["latest robots news 2026"]
    assert fallback_terms("") == []
