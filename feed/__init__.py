from feed.aggregate import build_feed, fetch_feed_page
from feed.models import FeedPage, PinResult
from feed.pin import apply_pin

__all__ = ["FeedPage", "PinResult", "apply_pin", "build_feed", "fetch_feed_page"]
