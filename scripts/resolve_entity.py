#!/usr/bin/env python3
"""CLI to resolve an entity slug and print the first page of its feed."""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cms.client import WordPressClient
from config import ITEMS_PER_PAGE
from entities.canonical import resolve_canonical_slug
from entities.resolver import resolve_entity
from errors import EntityNotFound, UpstreamUnavailable
from feed.aggregate import build_feed


def main() -> int:
    parser = argparse.ArgumentParser(description="Resolve a rapnews entity and show its feed")
    parser.add_argument("slug", help="Entity slug, e.g. drake")
    parser.add_argument("--page", type=int, default=1, help="Feed page (1-based)")
    parser.add_argument("--pin", help="Article slug to pin to the front")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    slug = resolve_canonical_slug(args.slug)
    if slug != args.slug:
        logging.info("%s is an alias of %s", args.slug, slug)

    client = WordPressClient()
    try:
        entity = resolve_entity(client, slug)
        feed_page, pin = build_feed(client, entity.tag_ids, max(args.page, 1), ITEMS_PER_PAGE, args.pin)
    except EntityNotFound:
        logging.error("No tag found for %s", slug)
        return 1
    except UpstreamUnavailable:
        logging.exception("WordPress API unavailable")
        return 2

    print(f"{entity.display_name}  tags={entity.tag_ids}  slugs={entity.slugs}")
    if pin is not None:
        print(f"pin {pin.requested}: {pin.action}" + (f" ({pin.reason})" if pin.reason else ""))
    for i, article in enumerate(feed_page.items, start=1):
        print(f"{i:3d}. {article.raw_date or '?':25s} {article.slug}")
    print(f"next cursor: {feed_page.next_cursor}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
