from cms.client import WordPressClient, get_client
from cms.convert import convert_post
from cms.models import Article, Tag

__all__ = ["Article", "Tag", "WordPressClient", "convert_post", "get_client"]
