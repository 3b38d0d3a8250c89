from entities.canonical import expand_aliases, is_allowlisted, resolve_canonical_slug
from entities.resolver import Entity, normalize_name, resolve_entity

__all__ = [
    "Entity",
    "expand_aliases",
    "is_allowlisted",
    "normalize_name",
    "resolve_canonical_slug",
    "resolve_entity",
]
