"""Deterministic field names.

A field name is a pure function of (attribute, locale, role). Localized
backends (varchar/int/text) carry the lowercased locale as suffix; the
"sortable" role lives under its own ``sort_by_`` namespace.
"""

from __future__ import annotations

from catalog_search.domain.catalog import AttributeDescriptor, Store


SORTABLE_PREFIX = "sort_by_"
SUGGEST_PREFIX = "_suggest_"  # attribute codes cannot start with "_"
UNTOUCHED_SUBFIELD = "untouched"
ANALYZER_PREFIX = "analyzer_"
SNOWBALL_PREFIX = "snowball_"


def attribute_field_name(attribute: AttributeDescriptor, locale_code: str | None = None) -> str:
    """Return the index field of ``attribute``, localized when its backend is."""
    if locale_code and attribute.is_localized:
        return f"{attribute.code}_{locale_code.lower()}"
    return attribute.code


def sortable_field_name(attribute: AttributeDescriptor, locale_code: str) -> str:
    """Sortable copies are always per-locale, e.g. ``sort_by_price_en_gb``."""
    return f"{SORTABLE_PREFIX}{attribute.code}_{locale_code.lower()}"


def suggest_field_name(store: Store) -> str:
    """Autocomplete field of a store, e.g. ``_suggest_en_gb``."""
    return f"{SUGGEST_PREFIX}{store.locale_suffix}"


def language_analyzer_name(language_code: str) -> str:
    return f"{ANALYZER_PREFIX}{language_code}"


def snowball_filter_name(language_code: str) -> str:
    return f"{SNOWBALL_PREFIX}{language_code}"
