#!/usr/bin/env python3
"""
Prompt templates for coverage reports and context explanations.

Reports are built from an AnalysisRecord; context explanations compute
their own metrics block from the article sample with the aggregation module.
"""

import json
from typing import Dict, List, Optional

from . import aggregation
from ..models import AnalysisRecord, Article, ArticleSummary
from ..sources.tier import TIER_FREE

# Article sample size for context explanations
MAX_CONTEXT_ARTICLES = 20

LOW_COVERAGE_THRESHOLD = 30

CONTEXT_TITLES = {
    'spike': 'Timeline Insights',
    'geo': 'Regional Insights',
    'deep_dive': 'Coverage Analysis',
}

ChatMessage = Dict[str, str]


class CoveragePrompts:
    """Collection of prompts for coverage reporting."""

    REPORT_SYSTEM_PROMPT = (
        "You are a media analyst summarizing global news coverage of a topic. "
        "Work only from the structured data you are given: keywords, sentiment summary, "
        "political leaning mix, extracted entities and sample articles. "
        "Do not add outside facts or speculate beyond the data. "
        "Explain why the coverage patterns matter for how the topic is perceived."
    )

    CONTEXT_SYSTEM_PROMPT = (
        "You are a media analyst summarizing global news coverage of a topic. "
        "Work only from the articles and metrics you are given. "
        "Write markdown with ## section headers. "
        "Reference articles with inline links in [text](URL) form, never numbered footnotes."
    )

    STYLE_RULES = (
        "=== TONE AND STYLE ===\n"
        "- Neutral, factual and data-driven.\n"
        "- Use only the data above; no external knowledge.\n"
        "- Do not add a main title.\n"
        "- Link to source articles inline where it helps verification."
    )

    LOW_COVERAGE_NOTE = "\n\n**Note:** Coverage density is limited; insights may be preliminary.\n"


def _rounded_sentiment(average) -> Dict[str, float]:
    return {
        'positive': round(average.positive, 2),
        'neutral': round(average.neutral, 2),
        'negative': round(average.negative, 2),
    }


def _tone_sections(average, leaning_distribution, api_tier: Optional[str]) -> str:
    """Sentiment and leaning blocks; omitted for free-tier data."""
    if api_tier == TIER_FREE:
        return ''
    leanings = {item.leaning: round(item.share, 2) for item in leaning_distribution}
    return (
        "=== SENTIMENT SUMMARY ===\n"
        f"{json.dumps(_rounded_sentiment(average), indent=2)}\n\n"
        "When neutral exceeds 70%, describe coverage as mostly factual. When positive or "
        "negative exceeds 25%, name the dominant tone and what drives it.\n\n"
        "=== POLITICAL LEANING DISTRIBUTION ===\n"
        f"{json.dumps(leanings, indent=2)}\n\n"
        "If one group contributes more than 50%, comment on the skew; otherwise note the "
        "reporting is ideologically diverse.\n\n"
    )


def _tone_outline(api_tier: Optional[str]) -> str:
    if api_tier == TIER_FREE:
        return "## Media Tone & Bias\n*Available on paid plans*\n\n"
    return "## Media Tone & Bias\nInterpret the sentiment and political leaning data above.\n\n"


def _quantitative_context(top_sources, top_keywords: List[str], geography) -> str:
    return (
        "=== QUANTITATIVE CONTEXT ===\n"
        f"Top Sources: {', '.join(item.source for item in top_sources[:3])}\n"
        f"Top Keywords: {', '.join(top_keywords)}\n"
        f"Geographic Distribution (top 5): "
        f"{', '.join(f'{item.country} ({item.count})' for item in geography[:5])}\n\n"
    )


def format_article_summary(summary: ArticleSummary, index: int) -> str:
    label = aggregation.sentiment_label(summary.sentiment, threshold=0.0).capitalize()
    return (
        f"{index + 1}. \"{summary.title}\"\n"
        f"   Source: {summary.source} | Date: {summary.published_date} | Sentiment: {label}\n"
        f"   Summary: {summary.description}\n"
        f"   URL: {summary.article_url}"
    )


def format_article_for_context(article: Article, index: int) -> str:
    return (
        f"Article {index + 1}: \"{article.title}\"\n"
        f"   Source: {article.source_title or aggregation.UNKNOWN_SOURCE_NAME}\n"
        f"   Date: {article.pub_date or 'N/A'}\n"
        f"   URL: {article.article_link or 'N/A'}\n"
        f"   Summary: {article.description or 'No description'}"
    )


def build_report_prompt(record: AnalysisRecord) -> str:
    """User prompt for the full coverage report."""
    peak = aggregation.peak_day(record.mentions_by_day) or record.start_date
    peak_count = record.mentions_by_day.get(peak, 0)
    top_keywords = [item.keyword for item in record.top_keywords[:5]]
    entities = record.top_entities

    prompt = (
        "Generate a coverage report from the following structured data.\n\n"
        "=== TOPIC METADATA ===\n"
        f"Topic: {record.topic}\n"
        f"Time Period: {record.start_date} to {record.end_date}\n"
        f"Total Articles: {record.total_mentions}\n"
        f"Peak Coverage Day: {peak} ({peak_count} articles)\n\n"
        + _tone_sections(record.sentiment_average, record.political_leaning_distribution, record.api_tier)
        + "=== TOP ENTITIES MENTIONED ===\n"
        f"Organizations: {', '.join(entities.organizations) or 'None'}\n"
        f"People: {', '.join(entities.people) or 'None'}\n"
        f"Locations: {', '.join(entities.locations) or 'None'}\n\n"
        + _quantitative_context(record.top_sources, top_keywords, record.geographic_distribution)
        + "=== TOP STORIES (representative sample) ===\n"
        + '\n\n'.join(format_article_summary(item, i) for i, item in enumerate(record.top_articles))
        + "\n\n=== REPORT STRUCTURE ===\n"
        "## Key Developments\n"
        f"Summarize the main developments, using the top keywords ({', '.join(top_keywords)}) as themes.\n\n"
        + _tone_outline(record.api_tier)
        + "## Top Entities Mentioned\nSummarize the extracted entities and how they relate.\n\n"
        "## Geographic Highlights\nCover the leading countries and regional patterns.\n\n"
        "## Strategic Insights\nThree to five bullet points on the implications.\n\n"
        + CoveragePrompts.STYLE_RULES
    )
    if record.total_mentions < LOW_COVERAGE_THRESHOLD:
        prompt += CoveragePrompts.LOW_COVERAGE_NOTE
    return prompt


def build_report_messages(record: AnalysisRecord) -> List[ChatMessage]:
    return [
        {'role': 'system', 'content': CoveragePrompts.REPORT_SYSTEM_PROMPT},
        {'role': 'user', 'content': build_report_prompt(record)},
    ]


def build_context_prompt(context: str,
                         topic: str,
                         articles: List[Article],
                         date: Optional[str] = None,
                         country: Optional[str] = None,
                         api_tier: Optional[str] = None) -> str:
    """User prompt explaining a spike, a country or a deep-dive sample."""
    title = CONTEXT_TITLES.get(context, CONTEXT_TITLES['deep_dive'])
    sample = articles[:MAX_CONTEXT_ARTICLES]

    average = aggregation.calculate_average_sentiment(articles)
    leanings = aggregation.aggregate_political_leaning(articles)
    top_keywords = [item.keyword for item in aggregation.aggregate_top_keywords(articles, 10)[:5]]
    top_sources = aggregation.aggregate_top_sources(articles)
    geography = aggregation.aggregate_geographic_distribution(articles)

    focus = ''
    if country:
        focus += f"Focus on {country}-related developments.\n"
    if date:
        focus += f"Focus on developments on {date}.\n"

    prompt = (
        f"Generate a {title} report from the following structured data.\n\n"
        "=== CONTEXT METADATA ===\n"
        f"Topic: {topic}\n"
        + (f"Date: {date}\n" if date else '')
        + (f"Country: {country}\n" if country else '')
        + f"Total Articles: {len(articles)}\n\n"
        + _tone_sections(average, leanings, api_tier)
        + _quantitative_context(top_sources, top_keywords, geography)
        + "=== ARTICLES (representative sample) ===\n"
        + '\n\n'.join(format_article_for_context(article, i) for i, article in enumerate(sample))
        + "\n\n=== REPORT STRUCTURE ===\n"
        "## Key Developments\n"
        f"Summarize the main developments, using the top keywords ({', '.join(top_keywords)}) as themes.\n\n"
        + _tone_outline(api_tier)
        + "## Geographic Highlights\nCover the leading countries and regional patterns.\n"
        + focus
        + "\n## Key Entities\nName the organizations, people and locations that recur in the articles.\n\n"
        "## Strategic Insights\nThree to five bullet points on the implications.\n\n"
        + CoveragePrompts.STYLE_RULES
    )
    if len(articles) < LOW_COVERAGE_THRESHOLD:
        prompt += CoveragePrompts.LOW_COVERAGE_NOTE
    return prompt


def build_context_messages(context: str,
                           topic: str,
                           articles: List[Article],
                           date: Optional[str] = None,
                           country: Optional[str] = None,
                           api_tier: Optional[str] = None) -> List[ChatMessage]:
    return [
        {'role': 'system', 'content': CoveragePrompts.CONTEXT_SYSTEM_PROMPT},
        {'role': 'user', 'content': build_context_prompt(context, topic, articles, date, country, api_tier)},
    ]


ENTITY_SYSTEM_PROMPT = (
    "You extract named entities from news coverage.\n\n"
    "From the article titles and descriptions below, list up to 10 distinct entities "
    "mentioned most often in each category:\n"
    "  - organizations (companies, institutions, agencies)\n"
    "  - people (named individuals)\n"
    "  - locations (countries, regions, cities)\n\n"
    "Respond with JSON only:\n"
    "{\n  \"organizations\": [\"...\"],\n  \"people\": [\"...\"],\n  \"locations\": [\"...\"]\n}\n\n"
    "Use names as written. Skip topics, technologies and generic nouns. "
    "Use only what appears in the text."
)


def build_entity_messages(topic: str, articles: List[Article]) -> List[ChatMessage]:
    content = '\n\n'.join(
        f"[{index + 1}] {article.title}\n{article.description or ''}"
        for index, article in enumerate(articles)
    )
    return [
        {'role': 'system', 'content': ENTITY_SYSTEM_PROMPT},
        {'role': 'user', 'content': f"Topic: {topic}\n\nArticles:\n\n{content}"},
    ]
