"""Composite filter over catalog entries: tag tokens, text tokens and category.

The query is split on whitespace into lower-cased tokens. A token that is a
substring of any known tag name is a *tag token*; everything else is a *text
token*. Tag matching takes priority, so a token naming a tag is never also
searched as plain text.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from core.models import (
    CATEGORY_FAVORITES,
    CATEGORY_UNTAGGED,
    CATEGORY_UNWATCHED,
    CATEGORY_WATCHED,
    Entry,
    FilterSpec,
    Tag,
    parse_category,
)


@dataclass
class QueryTokens:
    """Query tokens partitioned by how they are matched."""

    tag_tokens: list[str] = field(default_factory=list)
    text_tokens: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tag_tokens and not self.text_tokens


def tokenize(query: str) -> list[str]:
    """Split on whitespace, lower-case, drop empties."""
    return [tok.lower() for tok in (query or "").split() if tok]


def partition_tokens(tokens: Iterable[str], tags: Iterable[Tag]) -> QueryTokens:
    """Classify each token as a tag token or a text token."""
    tag_names = [t.name.lower() for t in tags]
    result = QueryTokens()
    for tok in tokens:
        if any(tok in name for name in tag_names):
            result.tag_tokens.append(tok)
        else:
            result.text_tokens.append(tok)
    return result


def _matches_tag_tokens(entry: Entry, tag_tokens: Sequence[str]) -> bool:
    names = [t.name.lower() for t in entry.tags]
    return all(any(tok in name for name in names) for tok in tag_tokens)


def _matches_text_tokens(entry: Entry, text_tokens: Sequence[str]) -> bool:
    haystacks = [
        (entry.title or "").lower(),
        (entry.notes or "").lower(),
        entry.file_path.lower(),
    ]
    return all(any(tok in h for h in haystacks) for tok in text_tokens)


def category_predicate(category: str):
    """Return a predicate `Entry -> bool` for a category selector."""
    kind, tag_id = parse_category(category)
    if kind == CATEGORY_UNTAGGED:
        return lambda e: not e.tags
    if kind == CATEGORY_WATCHED:
        return lambda e: bool(e.watched)
    if kind == CATEGORY_UNWATCHED:
        return lambda e: not e.watched
    if kind == CATEGORY_FAVORITES:
        return lambda e: bool(e.favorite)
    if kind == "tag":
        return lambda e: any(t.id == tag_id for t in e.tags)
    return lambda e: True


def apply_filter(entries: Iterable[Entry], tags: Iterable[Tag], spec: FilterSpec) -> list[Entry]:
    """Return the entries matching `spec`, preserving input order.

    The source collection is never mutated.
    """
    tokens = partition_tokens(tokenize(spec.query), tags)
    in_category = category_predicate(spec.category)

    result: list[Entry] = []
    for entry in entries:
        if tokens.tag_tokens and not _matches_tag_tokens(entry, tokens.tag_tokens):
            continue
        if tokens.text_tokens and not _matches_text_tokens(entry, tokens.text_tokens):
            continue
        if not in_category(entry):
            continue
        result.append(entry)

    logger.debug(
        "Filter applied: category={} tag_tokens={} text_tokens={} -> {}",
        spec.category,
        tokens.tag_tokens,
        tokens.text_tokens,
        len(result),
    )
    return result
