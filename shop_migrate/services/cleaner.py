"""Strip store-local identity from records before they are written to another store."""

from typing import Any, Dict, Optional

# Identity and timestamp fields that only make sense on the store they came from
STORE_LOCAL_FIELDS = frozenset([
    "id",
    "admin_graphql_api_id",
    "created_at",
    "updated_at",
    "published_at",
])

OWNER_KEYS = frozenset(["shop_id", "blog_id", "product_id", "user_id"])

VARIANT_LOCAL_FIELDS = frozenset(["inventory_item_id", "image_id"])

COLLECTION_TYPE_FIELD = "_collection_type"


def _strip(record: Dict[str, Any], *extra: frozenset) -> Dict[str, Any]:
    drop = STORE_LOCAL_FIELDS | OWNER_KEYS
    for fields in extra:
        drop = drop | fields
    return {k: v for k, v in record.items() if k not in drop}


def _clean_image(image: Optional[Dict[str, Any]], with_position: bool = False) -> Optional[Dict[str, Any]]:
    if not image:
        return image
    cleaned = {"src": image.get("src"), "alt": image.get("alt")}
    if with_position:
        cleaned["position"] = image.get("position")
    return cleaned


def clean_product(product: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = _strip(product)
    if cleaned.get("variants"):
        cleaned["variants"] = [_strip(v, VARIANT_LOCAL_FIELDS) for v in cleaned["variants"]]
    if cleaned.get("images"):
        cleaned["images"] = [_clean_image(img, with_position=True) for img in cleaned["images"]]
    if cleaned.get("image"):
        cleaned["image"] = _clean_image(cleaned["image"])
    return cleaned


def clean_collection(collection: Dict[str, Any]) -> Dict[str, Any]:
    # The sub-type is implied by the endpoint the record is written to
    cleaned = _strip(collection, frozenset([COLLECTION_TYPE_FIELD, "type"]))
    if cleaned.get("image"):
        cleaned["image"] = _clean_image(cleaned["image"])
    return cleaned


def clean_page(page: Dict[str, Any]) -> Dict[str, Any]:
    return _strip(page)


def clean_article(article: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = _strip(article)
    if cleaned.get("image"):
        cleaned["image"] = _clean_image(cleaned["image"])
    return cleaned


def clean_blog(blog: Dict[str, Any]) -> Dict[str, Any]:
    """Blogs are created from their presentational fields only."""
    return {
        "title": blog.get("title"),
        "handle": blog.get("handle"),
        "commentable": blog.get("commentable"),
    }
