"""Plain-text helpers for CMS-supplied markup."""

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")


def decode_html_entities(text: str | None) -> str:
    """Decode HTML entities: ``&#8217;`` -> ``'``, ``&amp;`` -> ``&``."""
    if not text:
        return ""
    return html.unescape(text)


def strip_html(text: str | None) -> str:
    """Remove HTML tags, leaving entities untouched."""
    if not text:
        return ""
    return _TAG_RE.sub("", text)


def clean_text_for_display(text: str | None, max_length: int = 160) -> str:
    """Turn an HTML fragment into a single line of display text.

    Strips tags, decodes entities, drops markdown bold markers and stray
    backslash escapes, collapses whitespace and truncates with an ellipsis.
    """
    if not text:
        return ""

    cleaned = decode_html_entities(strip_html(text))
    cleaned = re.sub(r"\*\*+", "", cleaned)
    cleaned = re.sub(r'\\+"', '"', cleaned)
    cleaned = re.sub(r"\\+'", "'", cleaned)
    cleaned = cleaned.replace("\\", "")
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length].strip() + "..."
    return cleaned
