"""Tests for pinning an article to the front of a feed page."""

from feed.pin import apply_pin, resolve_pin
from fakes import FakeCMS, make_article, make_post


def _items():
    return [make_article(s, None) for s in ("a", "b", "c")]


def test_pin_already_first_is_noop():
    items = _items()
    pinned, action = apply_pin(items, make_article("a", None))
    assert [a.id for a in pinned] == ["a", "b", "c"]
    assert action == "kept"


def test_pin_moves_existing_article_to_front():
    items = _items()
    pinned, action = apply_pin(items, make_article("c", None))
    assert [a.id for a in pinned] == ["c", "a", "b"]
    assert len(pinned) == len(items)
    assert action == "moved"


def test_pin_inserts_missing_article():
    items = _items()
    pinned, action = apply_pin(items, make_article("z", None))
    assert [a.id for a in pinned] == ["z", "a", "b", "c"]
    assert action == "inserted"
    assert [a.id for a in items] == ["a", "b", "c"]


def test_moved_article_keeps_page_instance():
    items = [make_article("a", None), make_article("b", None, title="page copy")]
    pinned, _ = apply_pin(items, make_article("b", None, title="lookup copy"))
    assert pinned[0].title == "page copy"


def test_resolve_pin_not_found_leaves_feed_unchanged():
    items = _items()
    result_items, pin = resolve_pin(FakeCMS(), items, "missing")
    assert result_items == items
    assert not pin.found
    assert pin.action == "failed"
    assert pin.reason == "not found"


def test_resolve_pin_lookup_error_is_swallowed():
    cms = FakeCMS()
    cms.post_lookup_fails = True
    items = _items()
    result_items, pin = resolve_pin(cms, items, "a")
    assert result_items == items
    assert pin.action == "failed"
    assert "lookup failed" in pin.reason


def test_resolve_pin_inserts_fetched_article():
    cms = FakeCMS(extra_posts=[make_post("pinned-story", "2020-01-01T00:00:00")])
    result_items, pin = resolve_pin(cms, _items(), "pinned-story")
    assert result_items[0].id == "pinned-story"
    assert len(result_items) == 4
    assert pin.found
