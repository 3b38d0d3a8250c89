"""Exceptions raised by the CMS client and the entity resolver."""


class FeedError(Exception):
    """Base class for rapnews-feed errors."""


class UpstreamUnavailable(FeedError):
    """The WordPress API could not be reached or returned a bad response."""


class EntityNotFound(FeedError):
    """No tag exists for the requested entity slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No tag found for slug {slug!r}")
        self.slug = slug
