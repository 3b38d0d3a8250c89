"""Data types read from the WordPress CMS."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Tag:
    """A WordPress tag."""

    id: int
    name: str
    slug: str
    count: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Tag":
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            slug=str(data.get("slug") or ""),
            count=int(data.get("count") or 0),
        )


@dataclass(frozen=True)
class Article:
    """A CMS post normalized for feed display.

    ``id`` is the post slug, not the numeric WordPress ID; it is the
    identity used for deduplication and pinning.
    """

    id: str
    slug: str
    title: str
    content: str
    image: str
    category: str
    author: str
    date: str  # display string, not sortable
    raw_date: str | None = None  # ISO-8601, used for ordering
    excerpt: str = ""
    comments: int = 0
    tags: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the frontend expects."""
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "image": self.image,
            "category": self.category,
            "author": self.author,
            "date": self.date,
            "rawDate": self.raw_date,
            "comments": self.comments,
        }
