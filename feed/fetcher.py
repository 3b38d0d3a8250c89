"""Fetch Articles from WordPress, one tag (or the home feed) at a time."""

import logging
from typing import Any, Protocol

from cms.convert import convert_post, embedded_image_url, fix_image_url
from cms.models import Article
from config import WP_MAX_PER_PAGE

logger = logging.getLogger(__name__)


class PostSource(Protocol):
    def fetch_posts(
        self, page: int = 1, per_page: int = 10, tag_ids: list[int] | None = None
    ) -> tuple[list[dict[str, Any]], int | None]: ...

    def fetch_post_by_slug(self, slug: str) -> dict[str, Any] | None: ...

    def fetch_media_url(self, media_id: int) -> str | None: ...


def to_article(client: PostSource, post: dict[str, Any]) -> Article:
    """Convert a post, fetching its featured image if it wasn't embedded."""
    image_url = None
    if not embedded_image_url(post) and post.get("featured_media"):
        image_url = fix_image_url(client.fetch_media_url(post["featured_media"]))
    return convert_post(post, image_url=image_url)


def _has_more(page: int, page_size: int, count: int, total_pages: int | None) -> bool:
    if total_pages is not None:
        return page < total_pages
    return count >= page_size


def fetch_by_tag(
    client: PostSource, tag_id: int, page_size: int, page: int
) -> tuple[list[Article], bool]:
    """One page of a single tag's articles in CMS order.

    UpstreamUnavailable propagates to the caller.
    """
    posts, total_pages = client.fetch_posts(page=page, per_page=page_size, tag_ids=[tag_id])
    articles = [to_article(client, p) for p in posts]
    return articles, _has_more(page, page_size, len(articles), total_pages)


def fetch_latest(client: PostSource, page_size: int, page: int) -> tuple[list[Article], bool]:
    """One page of the unfiltered home feed."""
    posts, total_pages = client.fetch_posts(page=page, per_page=page_size)
    articles = [to_article(client, p) for p in posts]
    return articles, _has_more(page, page_size, len(articles), total_pages)


def fetch_batch(client: PostSource, tag_id: int, size: int) -> list[Article]:
    """Up to ``size`` newest articles for a tag, across as many CMS pages as needed."""
    articles: list[Article] = []
    per_page = min(size, WP_MAX_PER_PAGE)
    page = 1
    while len(articles) < size:
        posts, total_pages = client.fetch_posts(page=page, per_page=per_page, tag_ids=[tag_id])
        articles.extend(to_article(client, p) for p in posts)
        if not _has_more(page, per_page, len(posts), total_pages):
            break
        page += 1
    logger.debug("Fetched %d articles for tag %s (wanted %d)", len(articles), tag_id, size)
    return articles[:size]


def fetch_article_by_slug(client: PostSource, slug: str) -> Article | None:
    post = client.fetch_post_by_slug(slug)
    if post is None:
        return None
    return to_article(client, post)
