"""WordPress REST API client (tags, posts, media)."""

import logging
import threading
from typing import Any

import requests

from cms.models import Tag
from config import HTTP_TIMEOUT, USER_AGENT, WORDPRESS_API_URL, WP_MAX_PER_PAGE
from errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}

# Returned by WP when `page` is beyond the last page
_INVALID_PAGE_CODE = "rest_post_invalid_page_number"


class WordPressClient:
    """Read-only access to the WordPress REST API.

    Every network, HTTP-status or decoding failure is raised as
    UpstreamUnavailable; callers decide whether it is fatal.
    """

    def __init__(self, base_url: str = WORDPRESS_API_URL, timeout: int = HTTP_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._local = threading.local()

    @property
    def _session(self) -> requests.Session:
        """The calling thread's session; sessions are never shared across threads."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(_HEADERS)
            self._local.session = session
        return session

    @_session.setter
    def _session(self, session: requests.Session) -> None:
        self._local.session = session

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get(self, path: str, params: dict[str, Any] | None = None) -> requests.Response:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("WordPress request to %s failed: %s", path, e)
            raise UpstreamUnavailable(f"Request to {path} failed: {e}") from e

        if resp.status_code == 400 and _error_code(resp) == _INVALID_PAGE_CODE:
            return resp

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.error("WordPress API error for %s: %s", path, resp.status_code)
            raise UpstreamUnavailable(f"WordPress API error: {resp.status_code}") from e
        return resp

    @staticmethod
    def _json_list(resp: requests.Response, path: str) -> list[Any]:
        try:
            data = resp.json()
        except ValueError as e:
            logger.error("WordPress %s returned non-JSON response", path)
            raise UpstreamUnavailable(f"Invalid JSON from {path}") from e
        if not isinstance(data, list):
            raise UpstreamUnavailable(f"Expected a list from {path}, got {type(data).__name__}")
        return data

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def fetch_tag_by_slug(self, slug: str) -> Tag | None:
        """Exact slug lookup. Returns None when no tag has the slug."""
        resp = self._get("tags", {"slug": slug})
        data = self._json_list(resp, "tags")
        if not data:
            return None
        return Tag.from_api(data[0])

    def search_tags(self, name: str) -> list[Tag]:
        """Fuzzy name search. Returns a superset of exact-name matches."""
        resp = self._get("tags", {"search": name, "per_page": WP_MAX_PER_PAGE})
        tags: list[Tag] = []
        for item in self._json_list(resp, "tags"):
            try:
                tags.append(Tag.from_api(item))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed tag: %r", item)
        return tags

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def fetch_posts(
        self,
        page: int = 1,
        per_page: int = 10,
        tag_ids: list[int] | None = None,
    ) -> tuple[list[dict[str, Any]], int | None]:
        """Fetch one page of posts, newest first.

        Returns the raw posts and the total page count from the
        ``X-WP-TotalPages`` header (None when the header is missing).
        A page past the end yields no posts.
        """
        params: dict[str, Any] = {
            "_embed": 1,
            "per_page": min(per_page, WP_MAX_PER_PAGE),
            "page": page,
            "orderby": "date",
            "order": "desc",
        }
        if tag_ids:
            params["tags"] = ",".join(str(t) for t in tag_ids)

        resp = self._get("posts", params)
        if resp.status_code == 400:
            return [], page - 1

        posts = self._json_list(resp, "posts")
        total_pages = resp.headers.get("X-WP-TotalPages")
        try:
            return posts, int(total_pages) if total_pages is not None else None
        except ValueError:
            return posts, None

    def fetch_post_by_slug(self, slug: str) -> dict[str, Any] | None:
        """Exact slug lookup for a single post."""
        resp = self._get("posts", {"slug": slug, "_embed": 1})
        posts = self._json_list(resp, "posts")
        return posts[0] if posts else None

    def fetch_media_url(self, media_id: int) -> str | None:
        """Source URL for a media item, or None if it can't be fetched."""
        try:
            resp = self._get(f"media/{media_id}")
            data = resp.json()
        except (UpstreamUnavailable, ValueError):
            logger.warning("Could not fetch media %s", media_id)
            return None
        if not isinstance(data, dict):
            return None
        return data.get("source_url") or None


def _error_code(resp: requests.Response) -> str | None:
    try:
        data = resp.json()
    except ValueError:
        return None
    return data.get("code") if isinstance(data, dict) else None


_client: WordPressClient | None = None


def get_client() -> WordPressClient:
    """Get or create the shared WordPress client."""
    global _client
    if _client is None:
        _client = WordPressClient()
    return _client
