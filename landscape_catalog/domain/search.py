"""
Ranking search over catalog entries.

Scoring is additive and capped at 100:

    keyword in name          +40
    keyword in description   +25
    keyword in category      +20
    keyword in a tag         +10 per matching tag
    category filter match    +30
    popular (>= 1000 stars)  +15
    graduated                +10

The matched field label follows name > description > category > tags, with
the category filter labelled "category" when nothing else matched first.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from landscape_catalog.domain import constants
from landscape_catalog.domain.models import CatalogEntry, ScoredResult, SearchQuery


def contains_text(value: Optional[str], keyword: str) -> bool:
    """
    Case-insensitive substring match. ``keyword`` is expected lower-cased.
    """
    if not value:
        return False
    return keyword in value.lower()


def score_entry(entry: CatalogEntry, query: SearchQuery) -> Tuple[float, str]:
    """
    Score a single entry against ``query``.

    Returns the capped score and the label of the field that produced the
    primary match ("" when only boosts applied).
    """
    score = 0.0
    matched_field = ""

    if query.keyword:
        keyword = query.keyword.lower()

        if contains_text(entry.name, keyword):
            score += constants.SCORE_NAME_MATCH
            matched_field = "name"

        if contains_text(entry.description, keyword):
            score += constants.SCORE_DESCRIPTION_MATCH
            if not matched_field:
                matched_field = "description"

        if contains_text(entry.category, keyword):
            score += constants.SCORE_CATEGORY_MATCH
            if not matched_field:
                matched_field = "category"

        # Every matching tag counts; only the final score is capped.
        tag_matches = sum(1 for tag in entry.tags if contains_text(tag, keyword))
        score += tag_matches * constants.SCORE_PER_TAG_MATCH
        if not matched_field and tag_matches > 0:
            matched_field = "tags"

    if query.category and entry.category.lower() == query.category.lower():
        score += constants.SCORE_CATEGORY_FILTER
        if not matched_field:
            matched_field = "category"

    if entry.is_popular:
        score += constants.SCORE_POPULARITY_BOOST

    if entry.is_graduated:
        score += constants.SCORE_GRADUATION_BOOST

    return min(score, constants.MAX_SCORE), matched_field


def search(entries: Iterable[CatalogEntry], query: SearchQuery) -> List[ScoredResult]:
    """
    Rank ``entries`` against ``query``.

    Zero-score entries are dropped. Results are sorted by descending score;
    equal scores keep their input order. The list is truncated to
    ``query.limit``.
    """
    results: List[ScoredResult] = []
    for entry in entries:
        score, matched_field = score_entry(entry, query)
        if score > 0:
            results.append(
                ScoredResult(entry=entry, relevance_score=score, matched_field=matched_field)
            )

    # list.sort is stable, so ties preserve input order.
    results.sort(key=lambda r: r.relevance_score, reverse=True)
    return results[: query.limit]
