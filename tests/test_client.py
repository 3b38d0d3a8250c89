"""Tests for the WordPress client (mocked HTTP)."""

import threading
from unittest.mock import MagicMock

import pytest
import requests

from cms.client import WordPressClient
from errors import UpstreamUnavailable


def _response(data, status=200, headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = data
    resp.headers = headers or {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        resp.raise_for_status = MagicMock()
    return resp


@pytest.fixture
def client():
    c = WordPressClient(base_url="https://cms.test/wp-json/wp/v2", timeout=5)
    c._session = MagicMock()
    return c


def test_fetch_tag_by_slug(client):
    client._session.get.return_value = _response(
        [{"id": 501, "name": "Kendrick Lamar", "slug": "kendrick-lamar", "count": 9}]
    )
    tag = client.fetch_tag_by_slug("kendrick-lamar")
    assert tag.id == 501
    assert tag.name == "Kendrick Lamar"
    assert tag.count == 9
    args, kwargs = client._session.get.call_args
    assert args[0] == "https://cms.test/wp-json/wp/v2/tags"
    assert kwargs["params"] == {"slug": "kendrick-lamar"}


def test_fetch_tag_by_slug_missing(client):
    client._session.get.return_value = _response([])
    assert client.fetch_tag_by_slug("nobody") is None


def test_search_tags_skips_malformed(client):
    client._session.get.return_value = _response([
        {"id": 1, "name": "Drake", "slug": "drake"},
        {"name": "no id"},
    ])
    tags = client.search_tags("Drake")
    assert [t.id for t in tags] == [1]
    assert client._session.get.call_args.kwargs["params"]["search"] == "Drake"


def test_fetch_posts_reads_total_pages(client):
    client._session.get.return_value = _response(
        [{"slug": "a"}, {"slug": "b"}], headers={"X-WP-TotalPages": "4"}
    )
    posts, total_pages = client.fetch_posts(page=2, per_page=2, tag_ids=[10, 20])
    assert [p["slug"] for p in posts] == ["a", "b"]
    assert total_pages == 4
    params = client._session.get.call_args.kwargs["params"]
    assert params["tags"] == "10,20"
    assert params["orderby"] == "date"
    assert params["order"] == "desc"


def test_fetch_posts_caps_per_page(client):
    client._session.get.return_value = _response([])
    client.fetch_posts(per_page=500)
    assert client._session.get.call_args.kwargs["params"]["per_page"] == 100


def test_fetch_posts_past_last_page_is_empty(client):
    resp = _response({"code": "rest_post_invalid_page_number"}, status=400)
    client._session.get.return_value = resp
    posts, total_pages = client.fetch_posts(page=9)
    assert posts == []
    assert total_pages == 8


def test_http_error_raises_upstream_unavailable(client):
    client._session.get.return_value = _response({"code": "oops"}, status=500)
    with pytest.raises(UpstreamUnavailable):
        client.fetch_posts()


def test_network_error_raises_upstream_unavailable(client):
    client._session.get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(UpstreamUnavailable):
        client.fetch_tag_by_slug("drake")


def test_non_json_raises_upstream_unavailable(client):
    resp = _response(None)
    resp.json.side_effect = ValueError("no json")
    client._session.get.return_value = resp
    with pytest.raises(UpstreamUnavailable):
        client.search_tags("Drake")


def test_fetch_post_by_slug(client):
    client._session.get.return_value = _response([{"slug": "story", "id": 3}])
    assert client.fetch_post_by_slug("story")["id"] == 3
    client._session.get.return_value = _response([])
    assert client.fetch_post_by_slug("gone") is None


def test_fetch_media_url_failure_returns_none(client):
    client._session.get.side_effect = requests.Timeout("slow")
    assert client.fetch_media_url(12) is None


def test_each_thread_gets_its_own_session():
    c = WordPressClient(base_url="https://cms.test/wp-json/wp/v2", timeout=5)
    seen = []
    workers = [threading.Thread(target=lambda: seen.append(c._session)) for _ in range(2)]
    for w in workers:
        w.start()
    for w in workers:
        w.join()

    assert len(seen) == 2
    assert seen[0] is not seen[1]
    assert c._session is c._session
    assert c._session.headers["Accept"] == "application/json"
