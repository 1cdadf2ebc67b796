"""Substring search over the in-memory link list."""

from typing import Sequence

from .models import Link


def filter_links(links: Sequence[Link], query: str | None) -> list[Link]:
    """
    Filter links by a case-insensitive substring of title, tags or notes.

    An empty or whitespace-only query returns every link. Matches keep
    their relative order from ``links``; there is no ranking.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(links)
    return [link for link in links if link.matches(needle)]
