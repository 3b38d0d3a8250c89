"""API routes for rapnews-feed."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from cms.client import get_client
from cms.convert import embedded_tags
from config import ITEMS_PER_PAGE
from entities.canonical import is_allowlisted, is_reserved, resolve_canonical_slug
from entities.links import PersonRef, link_entities
from entities.resolver import Entity, resolve_entity
from errors import EntityNotFound, UpstreamUnavailable
from feed.aggregate import build_feed, dedupe_articles, fetch_tag_batches, sort_articles
from feed.fetcher import to_article
from feed.models import FeedPage, PinResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

NO_STORE = {"Cache-Control": "no-store"}
_DEBUG_FETCH_PER_TAG = 60
_DEBUG_PREVIEW_COUNT = 20


def _parse_page(cursor: str | None) -> int:
    """1-based page number from a cursor; anything invalid means page 1."""
    if not cursor:
        return 1
    try:
        page = int(cursor)
    except ValueError:
        return 1
    return max(page, 1)


def _parse_tag_ids(tag_ids: str | None, tag_id: str | None) -> list[int]:
    """Tag IDs from ``tagIds`` (preferred) or the legacy ``tagId``.

    Both accept a comma-separated list; anything but plain ASCII digits is
    dropped.
    """
    raw = tag_ids or tag_id or ""
    parsed: list[int] = []
    for part in raw.split(","):
        part = part.strip()
        if part.isascii() and part.isdigit() and int(part) > 0 and int(part) not in parsed:
            parsed.append(int(part))
    return parsed


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
        headers=NO_STORE,
    )


@router.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok", "service": "rapnews-feed"}


@router.get("/articles")
def get_articles(
    cursor: str | None = Query(default=None),
    tagId: str | None = Query(default=None),
    tagIds: str | None = Query(default=None),
    pinSlug: str | None = Query(default=None),
    debug: str | None = Query(default=None),
) -> JSONResponse:
    """A page of the article feed.

    With no tags this is the home feed; with several it is the merged
    entity feed. ``pinSlug`` forces an article to the front of the page.
    """
    try:
        page = _parse_page(cursor)
        tag_id_list = _parse_tag_ids(tagIds, tagId)
        client = get_client()

        feed_page, pin = build_feed(client, tag_id_list, page, ITEMS_PER_PAGE, pinSlug or None)
        logger.info(
            "Feed page %d: %d articles%s",
            page, len(feed_page.items), f" for tags {tag_id_list}" if tag_id_list else "",
        )

        body = feed_page.to_dict()
        if debug == "1":
            body.update(_debug_block(cursor, tagId, tagIds, pinSlug, page, tag_id_list, feed_page, pin))

        headers = NO_STORE if tag_id_list or pinSlug else None
        return JSONResponse(content=body, headers=headers)
    except Exception as e:
        logger.exception("Error in articles API")
        return _error(500, "Failed to load articles", str(e) or type(e).__name__)


def _debug_block(
    cursor: str | None,
    tag_id: str | None,
    tag_ids: str | None,
    pin_slug: str | None,
    page: int,
    tag_id_list: list[int],
    feed_page: FeedPage,
    pin: PinResult | None,
) -> dict[str, Any]:
    return {
        "received": {
            "cursor": cursor,
            "tagId": tag_id,
            "tagIds": tag_ids,
            "pinSlug": pin_slug,
            "page": page,
            "tagIdsUsed": tag_id_list,
        },
        "pinned": (pin or PinResult()).to_dict(),
        "first5": [
            {"slug": a.slug, "rawDate": a.raw_date, "date": a.date}
            for a in feed_page.items[:5]
        ],
    }


@router.get("/articles/{slug}")
def get_article(slug: str) -> JSONResponse:
    """A single article, with entity names linked to their entity pages."""
    try:
        client = get_client()
        post = client.fetch_post_by_slug(slug)
        if post is None:
            return _error(404, "not_found", f"No article with slug {slug!r}")

        article = to_article(client, post)
        people = [
            PersonRef(name=tag.name, slug=tag.slug)
            for tag in embedded_tags(post)
            if is_allowlisted(tag.slug)
        ]
        content, link_count = link_entities(article.content, people, article.slug)
        logger.info("Article %s: linked %d entity mentions", slug, link_count)

        body = replace(article, content=content).to_dict()
        body["entities"] = [
            {"name": p.name, "slug": resolve_canonical_slug(p.slug)} for p in people
        ]
        return JSONResponse(content=body)
    except Exception as e:
        logger.exception("Error loading article %s", slug)
        return _error(500, "Failed to load article", str(e) or type(e).__name__)


@router.get("/entities/{slug}")
def get_entity(slug: str, request: Request) -> Response:
    """Entity page data: resolved tags plus the first feed page.

    Alias slugs redirect to the canonical slug. A slug that is not an
    entity but is an article redirects to the article.
    """
    try:
        return _entity_response(slug, request)
    except Exception as e:
        logger.exception("Error loading entity %s", slug)
        return _error(500, "Failed to load entity", str(e) or type(e).__name__)


def _entity_response(slug: str, request: Request) -> Response:
    if is_reserved(slug):
        return _error(404, "not_found", f"{slug!r} is reserved")

    canonical = resolve_canonical_slug(slug)
    if canonical != slug:
        kept = {k: request.query_params[k] for k in ("from", "debug") if request.query_params.get(k)}
        url = f"/api/entities/{canonical}"
        if kept:
            url += f"?{urlencode(kept)}"
        return RedirectResponse(url, status_code=307)

    client = get_client()
    entity: Entity | None = None
    try:
        entity = resolve_entity(client, slug)
    except EntityNotFound:
        pass

    if entity is not None and entity.count > 0 and is_allowlisted(slug):
        try:
            feed_page, pin = build_feed(
                client, entity.tag_ids, 1, ITEMS_PER_PAGE, request.query_params.get("from") or None
            )
        except Exception as e:
            logger.exception("Error building feed for entity %s", slug)
            return _error(500, "Failed to load entity feed", str(e) or type(e).__name__)

        body: dict[str, Any] = {
            "displayName": entity.display_name,
            "canonicalSlug": canonical,
            "tagIds": entity.tag_ids,
            "slugs": entity.slugs,
            "feed": feed_page.to_dict(),
        }
        if request.query_params.get("debug") == "1" and pin is not None:
            body["pinned"] = pin.to_dict()
        return JSONResponse(content=body, headers=NO_STORE)

    try:
        if client.fetch_post_by_slug(slug) is not None:
            return RedirectResponse(f"/api/articles/{slug}", status_code=307)
    except UpstreamUnavailable as e:
        logger.warning("Article fallback lookup for %s failed: %s", slug, e)

    return _error(404, "not_found", f"No entity or article for {slug!r}")


@router.get("/debug/entity")
def debug_entity(
    slug: str = Query(default="future"),
    expectedPostSlug: str | None = Query(default=None),
) -> JSONResponse:
    """Diagnostic report of how an entity slug resolves and what its feed holds."""
    timestamp = datetime.now(timezone.utc).isoformat()
    client = get_client()
    try:
        entity = resolve_entity(client, slug)
    except EntityNotFound:
        return JSONResponse(
            content={
                "entitySlugRequested": slug,
                "resolvedDisplayName": None,
                "resolvedTagIds": [],
                "resolvedSlugs": [],
                "error": "Could not resolve entity tag group",
                "timestamp": timestamp,
            },
            headers=NO_STORE,
        )
    except Exception as e:
        logger.exception("Debug entity %s failed", slug)
        return JSONResponse(
            status_code=500,
            content={"entitySlugRequested": slug, "error": str(e), "timestamp": timestamp},
            headers=NO_STORE,
        )

    batches = fetch_tag_batches(client, entity.tag_ids, _DEBUG_FETCH_PER_TAG)
    merged = sort_articles(dedupe_articles(batches))[:_DEBUG_PREVIEW_COUNT]
    first_posts = [
        {"slug": a.slug, "rawDate": a.raw_date, "tags": list(a.tags)} for a in merged
    ]

    expected_post = None
    if expectedPostSlug:
        try:
            post = client.fetch_post_by_slug(expectedPostSlug)
        except UpstreamUnavailable as e:
            logger.warning("Debug lookup of expected post %s failed: %s", expectedPostSlug, e)
            post = None
        if post is not None:
            post_tags = [t for t in post.get("tags") or [] if isinstance(t, int)]
            expected_post = {
                "expectedPostSlug": post.get("slug"),
                "expectedPostId": post.get("id"),
                "expectedPostTags": post_tags,
                "isExpectedTagsInGroup": any(t in entity.tag_ids for t in post_tags),
                "isReturnedInFirst20": any(p["slug"] == post.get("slug") for p in first_posts),
            }

    return JSONResponse(
        content={
            "entitySlugRequested": slug,
            "resolvedDisplayName": entity.display_name,
            "resolvedTagIds": entity.tag_ids,
            "resolvedSlugs": entity.slugs,
            "first20PostSlugs": first_posts,
            "expectedPost": expected_post,
            "timestamp": timestamp,
        },
        headers=NO_STORE,
    )
