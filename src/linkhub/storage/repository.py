"""In-memory link list operations."""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any, Callable

from ..exceptions import LinkNotFoundError
from .models import Link, clean_tags, utc_timestamp

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "url", "tags", "notes")


class LinkRepository:
    """Ordered list of links, newest first.

    All mutations go through the methods below; ``list()`` hands out a copy.
    """

    def __init__(
        self,
        links: Sequence[Link] | None = None,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self._links: list[Link] = list(links or [])
        self._clock = clock
        self._last_id = 0

    def __len__(self) -> int:
        return len(self._links)

    def list(self) -> list[Link]:
        """Return a snapshot of the current list."""
        return list(self._links)

    def get(self, link_id: str) -> Link | None:
        """Find a link by id."""
        for link in self._links:
            if link.id == link_id:
                return link
        return None

    def add(self, candidate: Mapping[str, Any]) -> Link:
        """Create a link from form fields and put it at the head of the list."""
        title = self._require_title(candidate.get("title"))
        now = self._clock()
        link = Link(
            id=self._new_id(),
            title=title,
            url=str(candidate.get("url") or ""),
            tags=clean_tags(candidate.get("tags")),
            notes=candidate.get("notes") or "",
            created_at=now,
            updated_at=now,
        )
        self._links.insert(0, link)
        logger.debug(f"Added link {link.id}: {link.title}")
        return link

    def update(self, link_id: str, fields: Mapping[str, Any]) -> Link:
        """Replace the editable fields of a link in place.

        ``createdAt`` and the list position are kept; ``updatedAt`` is refreshed.

        Raises:
            LinkNotFoundError: if no link has ``link_id``; the list is untouched
        """
        index = self._index_of(link_id)
        if index is None:
            raise LinkNotFoundError(link_id)

        current = self._links[index]
        changes = {k: fields[k] for k in EDITABLE_FIELDS if k in fields}
        if "title" in changes:
            changes["title"] = self._require_title(changes["title"])
        if "tags" in changes:
            changes["tags"] = clean_tags(changes["tags"])
        if "url" in changes:
            changes["url"] = str(changes["url"] or "")
        if "notes" in changes:
            changes["notes"] = changes["notes"] or ""

        updated = Link(
            id=current.id,
            title=changes.get("title", current.title),
            url=changes.get("url", current.url),
            tags=changes.get("tags", list(current.tags)),
            notes=changes.get("notes", current.notes),
            created_at=current.created_at,
            updated_at=self._clock(),
            extra=dict(current.extra),
        )
        self._links[index] = updated
        logger.debug(f"Updated link {link_id}")
        return updated

    def remove(self, link_id: str) -> bool:
        """Drop a link by id. Removing an unknown id is a no-op."""
        before = len(self._links)
        self._links = [link for link in self._links if link.id != link_id]
        removed = len(self._links) != before
        if removed:
            logger.debug(f"Removed link {link_id}")
        return removed

    def replace_all(self, records: Any) -> None:
        """Swap in records loaded from the remote file.

        Anything that is not a list of mappings collapses to nothing.
        """
        if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
            records = []
        self._links = [Link.from_dict(r) for r in records if isinstance(r, Mapping)]

        ids = Counter(link.id for link in self._links)
        if ids[""]:
            logger.warning(f"{ids['']} stored links have no id and cannot be edited")
        duplicates = sorted(i for i, n in ids.items() if i and n > 1)
        if duplicates:
            logger.warning(f"Stored links share ids {', '.join(duplicates)}")

    def all_tags(self) -> list[tuple[str, int]]:
        """Tag names with usage counts, most used first."""
        counts = Counter(tag for link in self._links for tag in link.tags)
        return sorted(counts.items(), key=lambda item: (-item[1], item[0].lower()))

    def _index_of(self, link_id: str) -> int | None:
        for i, link in enumerate(self._links):
            if link.id == link_id:
                return i
        return None

    def _new_id(self) -> str:
        """Millisecond timestamp, bumped until it is unused and increasing."""
        candidate = max(int(time.time() * 1000), self._last_id + 1)
        existing = {link.id for link in self._links}
        while str(candidate) in existing:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    @staticmethod
    def _require_title(title: Any) -> str:
        title = str(title or "").strip()
        if not title:
            raise ValueError("Link title must not be empty")
        return title
