"""Select the fields a full-text query runs against."""

from __future__ import annotations

from typing import Any

from catalog_search.search.naming import SORTABLE_PREFIX
from catalog_search.search.schema import FieldType, IndexMapping, MultiField


OPTIONS_FIELD = "_options"
_FUZZY_EXCLUDED_PREFIX = "edge_ngram"


def _query_accepts(field_type: FieldType, query: Any) -> bool:
    """Typed fields only take part when the query value has the matching type."""
    if field_type in {FieldType.DATE, FieldType.COMPLETION}:
        return False
    if field_type == FieldType.BOOLEAN:
        return isinstance(query, bool)
    if field_type == FieldType.INTEGER:
        return isinstance(query, int) and not isinstance(query, bool)
    if field_type == FieldType.DOUBLE:
        return isinstance(query, float)
    return True


def select_search_fields(
    mapping: IndexMapping,
    *,
    only_fuzzy: bool = False,
    query: Any = "",
    search_on_options: bool = False,
) -> list[str]:
    """Return queryable field paths for ``query``.

    Multi-fields expand to ``field.sub_field`` (edge n-gram variants excluded)
    unless ``only_fuzzy`` is set, in which case the bare field is used.
    Sortable copies are never searched.
    """
    fields: list[str] = []
    for key, field_mapping in mapping.items():
        if not _query_accepts(field_mapping.value_type, query):
            continue
        if not only_fuzzy and isinstance(field_mapping, MultiField):
            fields.extend(
                f"{key}.{sub_field}"
                for sub_field in field_mapping.fields
                if not sub_field.startswith(_FUZZY_EXCLUDED_PREFIX)
            )
        elif not key.startswith(SORTABLE_PREFIX):
            fields.append(key)

    if search_on_options:
        fields.append(OPTIONS_FIELD)
    return fields
