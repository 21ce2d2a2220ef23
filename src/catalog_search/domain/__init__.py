"""Domain layer - catalog metadata and generation lifecycle value objects.

No dependencies on infrastructure (no HTTP clients, no engine payloads).
"""

from catalog_search.domain.catalog import (
    AttributeDescriptor,
    BackendType,
    FrontendClass,
    SourceKind,
    Store,
)
from catalog_search.domain.lifecycle import (
    CatalogSearchError,
    GenerationBuildError,
    GenerationState,
    IndexConfigurationError,
    InstallResult,
    InvalidStateTransitionError,
    PreparedGeneration,
    SearchEngineError,
)


__all__ = [
    "AttributeDescriptor",
    "BackendType",
    "CatalogSearchError",
    "FrontendClass",
    "GenerationBuildError",
    "GenerationState",
    "IndexConfigurationError",
    "InstallResult",
    "InvalidStateTransitionError",
    "PreparedGeneration",
    "SearchEngineError",
    "SourceKind",
    "Store",
]
