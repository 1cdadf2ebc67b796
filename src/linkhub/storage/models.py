"""Data models for link records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

# Keys written for every record, in file order
LINK_KEYS = ("id", "title", "url", "tags", "notes", "createdAt", "updatedAt")


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_tags(text: str | None) -> list[str]:
    """Split comma-separated form input into trimmed, non-empty tags."""
    if not text:
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def clean_tags(tags: Any) -> list[str]:
    """Normalize a tag value coming from a form, the CLI, or a remote record."""
    if isinstance(tags, str):
        return parse_tags(tags)
    if not isinstance(tags, (list, tuple)):
        return []
    return [str(tag).strip() for tag in tags if str(tag).strip()]


@dataclass
class Link:
    """A single bookmark entry."""

    id: str
    title: str
    url: str
    tags: list[str] = field(default_factory=list)
    notes: str = ""
    created_at: str = ""
    updated_at: str = ""

    # Unrecognized keys from the remote file, written back unchanged
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Link":
        """Build a Link from a stored record without validating it."""
        return cls(
            id=str(data.get("id") or ""),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            tags=clean_tags(data.get("tags")),
            notes=str(data.get("notes") or ""),
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            extra={k: v for k, v in data.items() if k not in LINK_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used in the stored file."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "tags": list(self.tags),
            "notes": self.notes,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        data.update(self.extra)
        return data

    def matches(self, query: str) -> bool:
        """Check a lower-cased query against title, tags and notes."""
        if query in self.title.lower():
            return True
        if any(query in tag.lower() for tag in self.tags):
            return True
        return bool(self.notes) and query in self.notes.lower()
