"""Pin an article to the front of a feed page."""

import logging

from cms.models import Article
from feed.fetcher import PostSource, fetch_article_by_slug
from feed.models import PinResult

logger = logging.getLogger(__name__)


def apply_pin(items: list[Article], pinned: Article) -> tuple[list[Article], str]:
    """Put ``pinned`` at index 0 of a copy of ``items``.

    Returns the new list and what happened: ``kept`` (already first),
    ``moved`` (was further down, length unchanged) or ``inserted`` (was
    absent, length grows by one).
    """
    index = next((i for i, a in enumerate(items) if a.id == pinned.id), None)
    if index == 0:
        return list(items), "kept"
    if index is not None:
        rest = items[:index] + items[index + 1:]
        return [items[index]] + rest, "moved"
    return [pinned] + list(items), "inserted"


def resolve_pin(client: PostSource, items: list[Article], pin_slug: str) -> tuple[list[Article], PinResult]:
    """Look up ``pin_slug`` and pin it. Never raises; failures leave ``items`` as is."""
    result = PinResult(requested=pin_slug)
    try:
        pinned = fetch_article_by_slug(client, pin_slug)
    except Exception as e:
        logger.warning("Pin lookup for %s failed: %s", pin_slug, e)
        result.action = "failed"
        result.reason = f"lookup failed: {e}"
        return items, result

    if pinned is None:
        logger.info("Pinned article %s not found", pin_slug)
        result.action = "failed"
        result.reason = "not found"
        return items, result

    result.found = True
    pinned_items, result.action = apply_pin(items, pinned)
    logger.debug("Pinned %s (%s)", pin_slug, result.action)
    return pinned_items, result
