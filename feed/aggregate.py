"""Merge articles from several tags into a single paginated feed."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from cms.convert import parse_post_date
from cms.models import Article
from config import FETCH_MAX_WORKERS, PER_TAG_OVERFETCH
from feed.fetcher import PostSource, fetch_batch, fetch_by_tag, fetch_latest
from feed.models import FeedPage, PinResult
from feed.pin import resolve_pin

logger = logging.getLogger(__name__)

_DISPLAY_DATE_FORMATS = ("%b %d, %Y", "%B %d, %Y")


def article_timestamp(article: Article) -> float | None:
    """Sort key for an article: ``raw_date``, or the display ``date`` when
    there is no ``raw_date``.

    Returns None when the chosen value doesn't parse; a present but broken
    ``raw_date`` is not rescued by ``date``.
    """
    if article.raw_date:
        parsed = parse_post_date(article.raw_date)
    else:
        parsed = _parse_display_date(article.date)
    return parsed.timestamp() if parsed else None


def _parse_display_date(value: str) -> datetime | None:
    if not value:
        return None
    parsed = parse_post_date(value)
    if parsed is not None:
        return parsed
    for fmt in _DISPLAY_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def dedupe_articles(batches: list[list[Article]]) -> list[Article]:
    """Flatten batches, keeping the first article seen for each id."""
    seen: set[str] = set()
    merged: list[Article] = []
    for batch in batches:
        for article in batch:
            if article.id in seen:
                continue
            seen.add(article.id)
            merged.append(article)
    return merged


def sort_articles(articles: list[Article]) -> list[Article]:
    """Newest first; undated articles go last in their original order."""
    dated: list[tuple[float, Article]] = []
    undated: list[Article] = []
    for article in articles:
        ts = article_timestamp(article)
        if ts is None:
            undated.append(article)
        else:
            dated.append((ts, article))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [a for _, a in dated] + undated


def paginate(articles: list[Article], page: int, page_size: int) -> FeedPage:
    """Slice a sorted list into 1-based page ``page``.

    A full page always advertises a next page, even if it was the last.
    """
    start = (page - 1) * page_size
    items = articles[start:start + page_size]
    next_cursor = str(page + 1) if len(items) == page_size else None
    return FeedPage(items=items, next_cursor=next_cursor)


def batch_size(page: int, page_size: int) -> int:
    """Per-tag over-fetch size needed to build page ``page`` of a merged feed."""
    return max(page * page_size, page_size * PER_TAG_OVERFETCH)


def fetch_tag_batches(client: PostSource, tag_ids: list[int], size: int) -> list[list[Article]]:
    """Fetch a batch per tag concurrently, in ``tag_ids`` order.

    A tag whose fetch fails contributes an empty batch.
    """
    workers = max(1, min(len(tag_ids), FETCH_MAX_WORKERS))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(fetch_batch, client, tag_id, size) for tag_id in tag_ids]

        batches: list[list[Article]] = []
        for tag_id, future in zip(tag_ids, futures):
            try:
                batches.append(future.result())
            except Exception as e:
                logger.warning("Fetch for tag %s failed, skipping: %s", tag_id, e)
                batches.append([])
    return batches


def fetch_merged_page(client: PostSource, tag_ids: list[int], page: int, page_size: int) -> FeedPage:
    """Page ``page`` of the merged, deduplicated, date-sorted feed for several tags."""
    batches = fetch_tag_batches(client, tag_ids, batch_size(page, page_size))
    merged = sort_articles(dedupe_articles(batches))
    logger.info(
        "Merged %d unique articles from %d tags (%d fetched)",
        len(merged), len(tag_ids), sum(len(b) for b in batches),
    )
    return paginate(merged, page, page_size)


def fetch_feed_page(client: PostSource, tag_ids: list[int], page: int, page_size: int) -> FeedPage:
    """Feed page for zero (home feed), one (fast path) or many tags.

    Single-tag and home-feed upstream failures propagate; multi-tag
    failures degrade to fewer (or no) articles.
    """
    if len(tag_ids) > 1:
        return fetch_merged_page(client, tag_ids, page, page_size)

    if tag_ids:
        items, has_more = fetch_by_tag(client, tag_ids[0], page_size, page)
    else:
        items, has_more = fetch_latest(client, page_size, page)
    next_cursor = str(page + 1) if has_more and len(items) >= page_size else None
    return FeedPage(items=items, next_cursor=next_cursor)


def build_feed(
    client: PostSource,
    tag_ids: list[int],
    page: int,
    page_size: int,
    pin_slug: str | None = None,
) -> tuple[FeedPage, PinResult | None]:
    """Fetch a feed page and, if requested, pin an article to its front."""
    feed_page = fetch_feed_page(client, tag_ids, page, page_size)
    if not pin_slug:
        return feed_page, None

    items, pin = resolve_pin(client, feed_page.items, pin_slug)
    feed_page.items = items
    return feed_page, pin
