"""Fuzzy relevance scoring for short queries against labels.

Scoring tiers (case-insensitive):
- exact match: 1000
- prefix match: 500 + floor(100 * len(query) / len(text))
- substring match: 200 + (len(text) - index) / len(text) * 50
- in-order subsequence: max(0, 100 - spread_penalty + 10 * longest_run)
- otherwise 0, which callers treat as "no match"
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
import math
from typing import Generic, TypeVar

from core.models import Tag

T = TypeVar("T")

EXACT_SCORE = 1000
PREFIX_BASE = 500
SUBSTRING_BASE = 200
SUBSEQUENCE_BASE = 100


@dataclass
class FuzzyMatchResult(Generic[T]):
    item: T
    score: float


def score(text: str, query: str) -> float:
    """Return the relevance of `query` against `text`; 0 means no match."""
    lower_text = text.lower()
    lower_query = query.lower()
    if not lower_query or not lower_text:
        return 0

    if lower_text == lower_query:
        return EXACT_SCORE

    if lower_text.startswith(lower_query):
        return PREFIX_BASE + math.floor(100 * len(query) / len(text))

    index = lower_text.find(lower_query)
    if index != -1:
        return SUBSTRING_BASE + (len(text) - index) / len(text) * 50

    return _subsequence_score(lower_text, lower_query)


def _subsequence_score(lower_text: str, lower_query: str) -> float:
    q = 0
    first_match = -1
    last_match = -1
    run = 0
    max_run = 0
    for i, ch in enumerate(lower_text):
        if q == len(lower_query):
            break
        if ch == lower_query[q]:
            if last_match == -1 or i == last_match + 1:
                run += 1
            else:
                run = 1
            max_run = max(max_run, run)
            if first_match == -1:
                first_match = i
            last_match = i
            q += 1
        else:
            run = 0

    if q < len(lower_query):
        return 0

    span = last_match - first_match + 1
    spread_penalty = max(0, span - len(lower_query)) * 2
    return max(0, SUBSEQUENCE_BASE - spread_penalty + 10 * max_run)


def _timestamp(value: datetime | None) -> float:
    return value.timestamp() if value is not None else float("-inf")


def fuzzy_rank(
    items: Iterable[T],
    query: str,
    label: Callable[[T], str],
    created: Callable[[T], datetime | None],
) -> list[T]:
    """Rank `items` by fuzzy relevance of `label(item)` to `query`.

    Ties (and the empty-query case) fall back to newest `created(item)` first.
    Items scoring 0 are dropped.
    """
    pool = list(items)
    if not query.strip():
        return sorted(pool, key=lambda it: _timestamp(created(it)), reverse=True)

    matches = [FuzzyMatchResult(item=it, score=score(label(it), query)) for it in pool]
    matches = [m for m in matches if m.score > 0]
    matches.sort(key=lambda m: (m.score, _timestamp(created(m.item))), reverse=True)
    return [m.item for m in matches]


def fuzzy_search_tags(tags: Iterable[Tag], query: str) -> list[Tag]:
    """Filter and sort tags by relevance, then newest first."""
    return fuzzy_rank(tags, query, label=lambda t: t.name, created=lambda t: t.created_at)
