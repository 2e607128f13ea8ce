"""Tests for the composite filter pipeline."""

from __future__ import annotations

import copy

import pytest

from core.models import FilterSpec, tag_category
from core.services.filter_service import apply_filter, partition_tokens, tokenize


def _titles(result):
    return [e.title for e in result]


def test_tokenize_lowercases_and_drops_empties():
    assert tokenize("  Action   COMEDY\t") == ["action", "comedy"]
    assert tokenize("") == []


def test_partition_prefers_tag_match(tags):
    parts = partition_tokens(["act", "heist", "com"], tags.values())
    assert parts.tag_tokens == ["act", "com"]
    assert parts.text_tokens == ["heist"]


def test_empty_spec_returns_everything_in_order(entries, tags):
    assert apply_filter(entries, tags.values(), FilterSpec()) == entries


def test_tag_tokens_are_conjunctive(entries, tags):
    result = apply_filter(entries, tags.values(), FilterSpec(query="action comedy"))
    assert _titles(result) == ["Bravo"]


def test_single_tag_token_matches_substring_of_tag_name(entries, tags):
    result = apply_filter(entries, tags.values(), FilterSpec(query="COM"))
    assert _titles(result) == ["Bravo", "Echo"]


def test_action_only_entries_excluded_when_no_entry_has_both(make_entry, tags):
    only_action = [
        make_entry("/v/1.mkv", title="One", tags=[tags["action"]]),
        make_entry("/v/2.mkv", title="Two", tags=[tags["action"]]),
    ]
    assert apply_filter(only_action, tags.values(), FilterSpec(query="action comedy")) == []


def test_text_tokens_search_title_notes_and_path(entries, tags):
    assert _titles(apply_filter(entries, tags.values(), FilterSpec(query="heist"))) == [
        "Alpha Heist"
    ]
    assert _titles(apply_filter(entries, tags.values(), FilterSpec(query="FUNNY"))) == [
        "Bravo",
        "Echo",
    ]
    assert _titles(apply_filter(entries, tags.values(), FilterSpec(query="d_plain"))) == ["Delta"]


def test_text_tokens_are_conjunctive(entries, tags):
    assert _titles(apply_filter(entries, tags.values(), FilterSpec(query="very funny"))) == [
        "Bravo"
    ]
    assert apply_filter(entries, tags.values(), FilterSpec(query="alpha bravo")) == []


def test_tag_and_text_tokens_combine(entries, tags):
    result = apply_filter(entries, tags.values(), FilterSpec(query="comedy echo"))
    assert _titles(result) == ["Echo"]


def test_token_matching_a_tag_is_not_searched_as_text(make_entry, tags):
    # "drama" names a tag, so an untagged entry mentioning it in notes is excluded.
    items = [make_entry("/v/x.mkv", title="X", notes="a drama about drama")]
    assert apply_filter(items, tags.values(), FilterSpec(query="drama")) == []


@pytest.mark.parametrize(
    "category,expected",
    [
        ("all", ["Alpha Heist", "Bravo", "Charlie", "Delta", "Echo"]),
        ("untagged", ["Delta"]),
        ("watched", ["Bravo", "Echo"]),
        ("unwatched", ["Alpha Heist", "Charlie", "Delta"]),
        ("favorites", ["Charlie"]),
    ],
)
def test_category_predicates(entries, tags, category, expected):
    assert _titles(apply_filter(entries, tags.values(), FilterSpec(category=category))) == expected


def test_tag_category(entries, tags):
    spec = FilterSpec(category=tag_category(tags["comedy"].id))
    assert _titles(apply_filter(entries, tags.values(), spec)) == ["Bravo", "Echo"]


def test_unknown_category_rejected(entries, tags):
    with pytest.raises(ValueError):
        apply_filter(entries, tags.values(), FilterSpec(category="tag:abc"))


def test_filter_is_idempotent_and_does_not_mutate(entries, tags):
    snapshot = copy.deepcopy(entries)
    spec = FilterSpec(category="watched", query="funny")
    first = apply_filter(entries, tags.values(), spec)
    second = apply_filter(entries, tags.values(), spec)
    assert first == second
    assert entries == snapshot
