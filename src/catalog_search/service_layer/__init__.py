"""Service layer - orchestration across the index lifecycle."""

from catalog_search.service_layer.rebuild_service import CatalogRecord, RebuildResult, RebuildService


__all__ = ["CatalogRecord", "RebuildResult", "RebuildService"]
