"""Data loaders for the target store."""

from .base import BaseLoader, LoadResult
from .entity_loader import BlogLoader, EntityLoader
from .metafield_loader import MetafieldLoader
from .metaobject_loader import DefinitionPhase, MetaobjectLoader

__all__ = [
    "BaseLoader",
    "LoadResult",
    "BlogLoader",
    "EntityLoader",
    "MetafieldLoader",
    "DefinitionPhase",
    "MetaobjectLoader",
]
