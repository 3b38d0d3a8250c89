"""Convert raw WordPress posts into Articles."""

import logging
import re
from datetime import datetime, timezone
from typing import Any

from bs4 import BeautifulSoup, NavigableString

from cms.models import Article, Tag
from cms.text import clean_text_for_display, decode_html_entities, strip_html
from config import (
    BRAND_PATTERNS,
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_IMAGE,
    EXCERPT_MAX_LENGTH,
    LEGACY_IMAGE_HOST,
    WORDPRESS_IMAGE_HOST,
)

logger = logging.getLogger(__name__)

_LEGACY_HOST_RE = re.compile(r"https?://" + re.escape(LEGACY_IMAGE_HOST))
_BRAND_RE = re.compile("|".join(re.escape(p) for p in BRAND_PATTERNS), re.IGNORECASE)
_REMOVED_TAGS = ["figure", "img", "picture"]
_STRIPPED_ATTRS = ("class", "style")


def fix_image_url(url: str | None) -> str:
    """Point media on the legacy domain at the WordPress backend host."""
    if not url:
        return ""
    return _LEGACY_HOST_RE.sub(WORDPRESS_IMAGE_HOST, url)


def parse_post_date(value: str | None) -> datetime | None:
    """Parse a WordPress timestamp into an aware UTC datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_relative_date(published: datetime, now: datetime | None = None) -> str:
    """Format a publish time as "N minutes/hours/days ago" or "Jan 3, 2024"."""
    now = now or datetime.now(timezone.utc)
    diff = abs(now - published)
    minutes = int(diff.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 60:
        return f"{minutes} minutes ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days != 1 else ''} ago"
    return f"{published:%b} {published.day}, {published.year}"


def clean_content(html: str | None) -> str:
    """Clean a post body for display.

    Images are dropped (the feed shows the featured image instead), class
    and style attributes are removed, brand mentions are stripped from text
    and paragraphs left empty are removed. Everything else is kept as is.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for element in soup.find_all(_REMOVED_TAGS):
        if not element.decomposed:  # nested inside an already removed figure
            element.decompose()

    for element in soup.find_all(True):
        for attr in _STRIPPED_ATTRS:
            if attr in element.attrs:
                del element.attrs[attr]

    for text_node in soup.find_all(string=_BRAND_RE):
        if isinstance(text_node, NavigableString):
            text_node.replace_with(_BRAND_RE.sub("", str(text_node)))

    for paragraph in soup.find_all("p"):
        if paragraph.find(True) is None and not paragraph.get_text().strip():
            paragraph.decompose()

    return re.sub(r"\n{3,}", "\n\n", str(soup)).strip()


def _embedded_terms(post: dict[str, Any], index: int) -> list[dict[str, Any]]:
    terms = (post.get("_embedded") or {}).get("wp:term") or []
    if len(terms) > index and isinstance(terms[index], list):
        return terms[index]
    return []


def _category_name(post: dict[str, Any]) -> str:
    categories = post.get("categories") or []
    if not categories:
        return DEFAULT_CATEGORY
    for term in _embedded_terms(post, 0):
        if term.get("id") == categories[0]:
            return decode_html_entities(term.get("name")) or DEFAULT_CATEGORY
    return DEFAULT_CATEGORY


def embedded_image_url(post: dict[str, Any]) -> str | None:
    """Featured image URL from the ``_embed`` payload, if present."""
    media = (post.get("_embedded") or {}).get("wp:featuredmedia") or []
    if media and isinstance(media[0], dict) and media[0].get("source_url"):
        return fix_image_url(media[0]["source_url"])
    return None


def embedded_tags(post: dict[str, Any]) -> list[Tag]:
    """Tags attached to the post, from the ``_embed`` payload."""
    tags: list[Tag] = []
    for term in _embedded_terms(post, 1):
        try:
            tags.append(Tag.from_api(term))
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping malformed embedded term: %r", term)
    return tags


def convert_post(
    post: dict[str, Any],
    image_url: str | None = None,
    now: datetime | None = None,
) -> Article:
    """Convert a WordPress REST post into an Article.

    ``image_url`` overrides the embedded featured image (used when the
    media had to be fetched separately).
    """
    slug = str(post.get("slug") or "")
    raw_date = post.get("date_gmt") or post.get("date")
    if raw_date and post.get("date_gmt") and not raw_date.endswith("Z"):
        raw_date = f"{raw_date}Z"

    published = parse_post_date(raw_date)
    date = format_relative_date(published, now) if published else (raw_date or "")

    title = decode_html_entities(strip_html((post.get("title") or {}).get("rendered")))
    excerpt = clean_text_for_display(
        (post.get("excerpt") or {}).get("rendered"), EXCERPT_MAX_LENGTH
    )

    return Article(
        id=slug,
        slug=slug,
        title=title.strip(),
        content=clean_content((post.get("content") or {}).get("rendered")),
        excerpt=excerpt,
        image=image_url or embedded_image_url(post) or DEFAULT_IMAGE,
        category=_category_name(post).upper(),
        author=DEFAULT_AUTHOR,
        date=date,
        raw_date=raw_date,
        comments=0,
        tags=tuple(int(t) for t in post.get("tags") or [] if str(t).isdigit()),
    )
