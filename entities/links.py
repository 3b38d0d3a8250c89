"""Link entity names inside article HTML to their entity pages."""

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

from bs4 import BeautifulSoup, Comment

from entities.canonical import resolve_canonical_slug

logger = logging.getLogger(__name__)

_SKIP_PARENTS = ["a", "script", "style", "iframe"]


@dataclass(frozen=True)
class PersonRef:
    name: str
    slug: str


def entity_href(slug: str, article_slug: str | None = None) -> str:
    """Path of an entity page; ``from`` pins the source article in its feed."""
    href = f"/{resolve_canonical_slug(slug)}"
    if article_slug:
        href += f"?from={quote(article_slug, safe='')}"
    return href


def _name_pattern(people: list[PersonRef]) -> re.Pattern[str]:
    parts = []
    for i, person in enumerate(people):
        tokens = [re.escape(t) for t in person.name.split()]
        body = r"\s+".join(tokens)
        parts.append(rf"(?P<p{i}>\b{body}(?:'s)?\b)")
    return re.compile("|".join(parts), re.IGNORECASE)


def link_entities(html: str, people: list[PersonRef], article_slug: str | None = None) -> tuple[str, int]:
    """Wrap every mention of a person's name in an entity link.

    Longer names win over shorter ones ("Fetty Wap" before "Fetty"), text
    already inside a link is left alone, and possessives ("Drake's") are
    linked whole. Returns the new HTML and the number of links added.
    """
    people = sorted(
        (p for p in people if p.name.strip() and p.slug),
        key=lambda p: len(p.name),
        reverse=True,
    )
    if not html or not people:
        return html, 0

    pattern = _name_pattern(people)
    soup = BeautifulSoup(html, "html.parser")
    link_count = 0

    for text_node in list(soup.find_all(string=True)):
        if isinstance(text_node, Comment) or text_node.find_parent(_SKIP_PARENTS):
            continue
        text = str(text_node)
        matches = list(pattern.finditer(text))
        if not matches:
            continue

        nodes: list = []
        last = 0
        for match in matches:
            person = people[int(match.lastgroup[1:])]
            if match.start() > last:
                nodes.append(text[last:match.start()])
            link = soup.new_tag(
                "a", attrs={"class": "person-link", "href": entity_href(person.slug, article_slug)}
            )
            link.string = match.group(0)
            nodes.append(link)
            last = match.end()
            link_count += 1
        if last < len(text):
            nodes.append(text[last:])
        text_node.replace_with(*nodes)

    logger.debug("Added %d entity links", link_count)
    return str(soup), link_count
