"""Services for the migration application."""

from .cleaner import clean_article, clean_blog, clean_collection, clean_page, clean_product
from .conflict import Action, ConflictResolver
from .matcher import Matcher, handle_matcher, metafield_matcher
from .shopify_client import ShopifyAPIError, ShopifyClient

__all__ = [
    "clean_article",
    "clean_blog",
    "clean_collection",
    "clean_page",
    "clean_product",
    "Action",
    "ConflictResolver",
    "Matcher",
    "handle_matcher",
    "metafield_matcher",
    "ShopifyAPIError",
    "ShopifyClient",
]
