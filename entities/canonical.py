"""Canonical entity slugs and the entity allowlist.

Some artists have several WordPress tags (``drake``, ``drake-2``, ...)
created by editorial error. Each group below lists every slug for one
entity; the FIRST slug is canonical and is the one entity links and
redirects point to.
"""

ENTITY_ALIAS_GROUPS: list[list[str]] = [
    ["drake", "drake-2", "drake-3"],
    ["kendrick-lamar", "kendrick-lamar-2"],
    ["future"],
    ["big-sean"],
]

# Tag slugs allowed to render as entity (artist feed) pages.
# To add an artist, add their tag slug here.
ENTITY_ALLOWLIST: frozenset[str] = frozenset({
    "drake",
    "drake-2",
    "drake-3",
    "kendrick-lamar",
    "kendrick-lamar-2",
    "future",
    "big-sean",
})

# Top-level slugs that belong to WordPress or the app itself
RESERVED_SLUGS: frozenset[str] = frozenset({
    "wp-json", "wp-admin", "wp-content", "wp-includes",
    "feed", "comments", "search", "author", "category",
    "tag", "page", "attachment", "trackback", "robots.txt",
    "api", "_next", "favicon.ico", "sitemap.xml", "article",
})


def _build_index(groups: list[list[str]]) -> dict[str, tuple[str, ...]]:
    index: dict[str, tuple[str, ...]] = {}
    for group in groups:
        members = tuple(group)
        for slug in members:
            index.setdefault(slug, members)
    return index


_ALIAS_INDEX = _build_index(ENTITY_ALIAS_GROUPS)


def alias_group(slug: str) -> tuple[str, ...]:
    """All slugs of the slug's entity, canonical first; ``(slug,)`` if unknown."""
    return _ALIAS_INDEX.get(slug, (slug,))


def resolve_canonical_slug(slug: str) -> str:
    """Canonical slug for an entity; the slug itself when it isn't listed."""
    return alias_group(slug)[0]


def expand_aliases(slug: str) -> set[str]:
    """Every known alias of the slug's entity, or ``{slug}``."""
    return set(alias_group(slug))


def is_allowlisted(slug: str) -> bool:
    return slug in ENTITY_ALLOWLIST


def is_reserved(slug: str) -> bool:
    return slug.lower() in RESERVED_SLUGS
