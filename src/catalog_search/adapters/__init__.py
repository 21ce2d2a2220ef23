"""Adapters layer - collaborators owned outside this package.

Catalog metadata, schema caching and the search engine transport are all
reached through the abstract classes exported here.
"""

from .catalog import AttributeCatalog, InMemoryAttributeCatalog, InMemoryStoreRegistry, StoreRegistry
from .schema_cache import InMemorySchemaCache, SchemaCache
from .search_engine_client import HttpSearchEngineClient, SearchEngineClient


__all__ = [
    "AttributeCatalog",
    "HttpSearchEngineClient",
    "InMemoryAttributeCatalog",
    "InMemorySchemaCache",
    "InMemoryStoreRegistry",
    "SchemaCache",
    "SearchEngineClient",
    "StoreRegistry",
]
