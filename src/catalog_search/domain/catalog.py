"""Catalog metadata consumed by the schema builders.

Value objects only; the metadata store and the store registry that produce
them live behind the collaborators in ``catalog_search.adapters.catalog``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BackendType(str, Enum):
    """Storage backend of a catalog attribute."""

    STATIC = "static"
    VARCHAR = "varchar"
    INT = "int"
    TEXT = "text"
    DECIMAL = "decimal"
    DATETIME = "datetime"


class SourceKind(str, Enum):
    """Option source attached to an attribute."""

    NONE = "none"
    BOOLEAN = "boolean"
    TABLE = "table"
    CUSTOM = "custom"

    @property
    def uses_source(self) -> bool:
        return self is not SourceKind.NONE


class FrontendClass(str, Enum):
    """Frontend validation class of an attribute."""

    NONE = "none"
    DIGITS = "validate-digits"
    NUMBER = "validate-number"
    EMAIL = "validate-email"


# Backends whose field names carry a locale suffix.
LOCALIZED_BACKENDS = frozenset({BackendType.VARCHAR, BackendType.INT, BackendType.TEXT})


@dataclass(slots=True, frozen=True)
class AttributeDescriptor:
    """Read-only description of one catalog attribute.

    Args:
        code: Attribute code, unique within the catalog (e.g. "color")
        backend_type: Storage backend driving the mapping rules
        source_kind: Option source; a boolean source maps to a boolean field
        frontend_class: Frontend validation class
        search_weight: Configured search weight; non-positive means "unset"
        is_searchable: Attribute takes part in full-text search
        is_indexable: Attribute values are indexed
        is_sortable: Attribute is used for sorting product listings
    """

    code: str
    backend_type: BackendType
    source_kind: SourceKind = SourceKind.NONE
    frontend_class: FrontendClass = FrontendClass.NONE
    search_weight: float = 0.0
    is_searchable: bool = True
    is_indexable: bool = True
    is_sortable: bool = False

    @property
    def is_localized(self) -> bool:
        return self.backend_type in LOCALIZED_BACKENDS

    @property
    def boost(self) -> float:
        """Search weight when positive, otherwise the neutral boost of 1."""
        return self.search_weight if self.search_weight > 0 else 1


@dataclass(slots=True, frozen=True)
class Store:
    """A storefront with its resolved locale (e.g. ``en_GB``)."""

    store_id: int
    code: str
    locale_code: str

    @property
    def locale_suffix(self) -> str:
        return self.locale_code.lower()

    @property
    def language_code(self) -> str:
        return self.locale_code.split("_", 1)[0].lower()
