"""Tests for link search."""

import pytest

from linkhub.storage.models import Link
from linkhub.storage.search import filter_links


@pytest.fixture
def links():
    return [
        Link(id="3", title="REST API design", url="https://a.example", tags=["web"]),
        Link(id="2", title="Rust book", url="https://b.example", tags=["Rust", "lang"]),
        Link(id="1", title="Recipes", url="https://c.example", notes="Grandma's API of soups"),
    ]


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_returns_everything(links, query):
    assert filter_links(links, query) == links


def test_matches_title_tags_and_notes(links):
    assert [l.id for l in filter_links(links, "api")] == ["3", "1"]
    assert [l.id for l in filter_links(links, "lang")] == ["2"]
    assert [l.id for l in filter_links(links, "soups")] == ["1"]


def test_search_is_case_insensitive(links):
    assert filter_links(links, "API") == filter_links(links, "api")
    assert [l.id for l in filter_links(links, "rust")] == ["2"]


def test_query_is_trimmed(links):
    assert [l.id for l in filter_links(links, "  recipes ")] == ["1"]


def test_no_match_returns_empty_list(links):
    assert filter_links(links, "haskell") == []


def test_filter_does_not_return_the_same_list_object(links):
    result = filter_links(links, "")
    result.clear()
    assert len(links) == 3
