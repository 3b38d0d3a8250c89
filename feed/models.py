"""Feed page and pin result types."""

from dataclasses import dataclass, field
from typing import Any

from cms.models import Article


@dataclass
class FeedPage:
    items: list[Article] = field(default_factory=list)
    next_cursor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [a.to_dict() for a in self.items],
            "nextCursor": self.next_cursor,
        }


@dataclass
class PinResult:
    """Outcome of a pin attempt, echoed in debug responses."""

    requested: str | None = None
    found: bool = False
    action: str = "none"  # none | kept | moved | inserted | failed
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "requested": self.requested,
            "found": self.found,
            "action": self.action,
            "reason": self.reason,
        }
