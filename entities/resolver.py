"""Resolve an entity slug to every tag that represents the same entity.

WordPress ends up with duplicate tags for the same artist ("Drake" under
``drake`` and ``drake-2``). Rather than relying only on the hand-kept
alias table, the resolver searches tags by the primary tag's name and
keeps every candidate whose normalized name matches exactly.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from cms.models import Tag
from entities.canonical import alias_group
from errors import EntityNotFound, UpstreamUnavailable

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_PUNCTUATION_RE = re.compile(r"['\".,\-]")


class TagDirectory(Protocol):
    def fetch_tag_by_slug(self, slug: str) -> Tag | None: ...

    def search_tags(self, name: str) -> list[Tag]: ...


@dataclass
class Entity:
    """A de-duplicated real-world subject backed by one or more tags."""

    display_name: str
    tag_ids: list[int] = field(default_factory=list)
    slugs: list[str] = field(default_factory=list)
    count: int = 0  # published articles across all tags

    def add(self, tag: Tag) -> None:
        if tag.id not in self.tag_ids:
            self.tag_ids.append(tag.id)
            self.slugs.append(tag.slug)
            self.count += tag.count


def normalize_name(name: str) -> str:
    """Lowercase, trim, collapse whitespace and drop ' " , . - characters."""
    name = _WHITESPACE_RE.sub(" ", name.lower().strip())
    return _PUNCTUATION_RE.sub("", name)


def _discover_by_name(directory: TagDirectory, primary: Tag) -> list[Tag]:
    """Tags whose normalized name equals the primary tag's."""
    target = normalize_name(primary.name)
    candidates = directory.search_tags(primary.name)
    return [tag for tag in candidates if normalize_name(tag.name) == target]


def _discover_by_alias(directory: TagDirectory, slug: str, primary: Tag) -> list[Tag]:
    """Tags listed as aliases of the slug that carry the same name."""
    target = normalize_name(primary.name)
    found: list[Tag] = []
    for alias in alias_group(slug):
        if alias == primary.slug:
            continue
        try:
            tag = directory.fetch_tag_by_slug(alias)
        except UpstreamUnavailable as e:
            logger.warning("Alias lookup for %s failed: %s", alias, e)
            continue
        if tag and normalize_name(tag.name) == target:
            found.append(tag)
    return found


def resolve_entity(directory: TagDirectory, slug: str) -> Entity:
    """Resolve a user-facing slug into an Entity.

    Raises EntityNotFound when no tag has the slug or the tag lookup
    itself fails. If the name search fails or matches nothing, the entity
    is just the primary tag.
    """
    logger.info("Resolving entity: %s", slug)
    try:
        primary = directory.fetch_tag_by_slug(slug)
    except UpstreamUnavailable as e:
        logger.warning("Tag lookup for %s failed: %s", slug, e)
        raise EntityNotFound(slug) from e
    if primary is None:
        logger.info("No tag found for slug: %s", slug)
        raise EntityNotFound(slug)

    entity = Entity(display_name=primary.name)
    entity.add(primary)

    try:
        matches = _discover_by_name(directory, primary)
    except UpstreamUnavailable as e:
        logger.warning("Tag search for %r failed, using primary tag only: %s", primary.name, e)
        matches = []

    for tag in matches:
        entity.add(tag)
    for tag in _discover_by_alias(directory, slug, primary):
        entity.add(tag)

    logger.info(
        "Resolved %s -> %r tag_ids=%s slugs=%s",
        slug, entity.display_name, entity.tag_ids, entity.slugs,
    )
    return entity
