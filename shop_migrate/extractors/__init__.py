"""Data extractors for source and target stores."""

from .base import BaseExtractor
from .rest_extractor import RestExtractor
from .graphql_extractor import GraphQLExtractor

__all__ = [
    "BaseExtractor",
    "RestExtractor",
    "GraphQLExtractor",
]
