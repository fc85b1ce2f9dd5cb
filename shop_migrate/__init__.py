"""
Shop Migration Application

Migrates store data between two Shopify stores, matching existing entities by
natural key and applying an explicit conflict policy.

Supports:
- Products, custom and smart collections, pages
- Blogs with their articles
- Metaobject definitions and entries (definitions before entries)
- Metafields of products, collections, pages and blogs
- Dry runs that predict outcomes without writing
"""

__version__ = "0.1.0"
