from core.analysis.prompts import build_context_prompt, build_entity_messages, build_report_prompt
from core.date_utils import calculate_cache_ttl, format_date_key, last_n_days, utc_today, window_around
from core.models import AnalysisRecord, SentimentAverage, TopEntities
from core.query_utils import build_query_string, normalize_search_query
from core.sources.tier import TIER_FREE


def make_record(api_tier, total=5):
    return AnalysisRecord(
        topic="chips",
        start_date="2025-10-01",
        end_date="2025-10-05",
        total_mentions=total,
        mentions_by_day={"2025-10-01": 2, "2025-10-02": 3},
        sentiment_average=SentimentAverage(positive=0.1, neutral=0.8, negative=0.1),
        political_leaning_distribution=[],
        top_entities=TopEntities(organizations=["TSMC"]),
        top_keywords=[],
        top_sources=[],
        geographic_distribution=[],
        top_articles=[],
        api_tier=api_tier,
    )


def test_report_prompt_omits_tone_on_free_tier():
    """Test that free-tier reports carry no sentiment or leaning data."""
    free = build_report_prompt(make_record(TIER_FREE))
    paid = build_report_prompt(make_record("developer"))

    assert "SENTIMENT SUMMARY" not in free
    assert "*Available on paid plans*" in free
    assert "SENTIMENT SUMMARY" in paid
    assert "Peak Coverage Day: 2025-10-02 (3 articles)" in paid
    assert "Organizations: TSMC" in paid


def test_low_coverage_note_threshold():
    assert "Coverage density is limited" in build_report_prompt(make_record("developer", total=29))
    assert "Coverage density is limited" not in build_report_prompt(make_record("developer", total=30))


def test_context_prompt_samples_twenty_articles(make_article):
    articles = [make_article(f"Story {i}") for i in range(25)]

    prompt = build_context_prompt("geo", "chips", articles, country="DE")

    assert "Regional Insights" in prompt
    assert "Article 20:" in prompt
    assert "Article 21:" not in prompt
    assert "Focus on DE-related developments." in prompt
    assert "Total Articles: 25" in prompt


def test_entity_messages_include_titles(make_article):
    messages = build_entity_messages("chips", [make_article("Fab opens", description="A new fab.")])

    assert messages[0]["role"] == "system"
    assert "[1] Fab opens\nA new fab." in messages[1]["content"]


def test_cache_ttl_depends_on_end_date():
    """Test the short TTL for today and the long TTL otherwise."""
    today = utc_today().strftime("%Y-%m-%d")

    assert calculate_cache_ttl(today, 3600, 86400) == 3600
    assert calculate_cache_ttl("2020-01-01", 3600, 86400) == 86400
    assert calculate_cache_ttl(None, 3600, 86400) == 86400


def test_date_windows():
    start, end = last_n_days(7)
    assert end == utc_today().strftime("%Y-%m-%d")
    assert window_around("2025-10-01") == ("2025-09-30", "2025-10-02")
    assert format_date_key("2025-10-01T01:00:00+03:00") == "2025-09-30"
    assert format_date_key("garbage") is None


def test_query_helpers():
    assert normalize_search_query("  ‘fab’ “plant” ") == "'fab' \"plant\""
    assert build_query_string({"q": "chip act", "cursor": None, "country": ["US", "DE"]}) == "?q=chip+act&country=US&country=DE"
    assert build_query_string({"cursor": None}) == ""
