"""Derive the index field mappings from catalog metadata.

``SchemaBuilder.build_mappings`` is a pure function of the attributes, the
stores and the analysis settings. Rules run in a fixed order and a field
name claimed by an earlier rule is never overwritten by a later one:

1. searchable varchar/int attributes: scalar or multi-field per store locale
2. searchable text attributes: language-analyzed string per store locale
3. remaining indexable attributes: scalar mapping (dates carry a format)
4. sortable attributes: ``sort_by_`` copies, not analyzed
5. system fields: ``visibility``, ``store_id``, ``in_stock``
6. one completion field per store for autocomplete
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging

from catalog_search.domain.catalog import AttributeDescriptor, BackendType, SourceKind, Store
from catalog_search.search.analyzers import AnalysisSettings
from catalog_search.search.naming import (
    UNTOUCHED_SUBFIELD,
    attribute_field_name,
    sortable_field_name,
    suggest_field_name,
)
from catalog_search.search.schema import (
    NOT_ANALYZED,
    CompletionField,
    FieldMapping,
    FieldType,
    IndexMapping,
    MultiField,
    ScalarField,
)


logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "date"
SUGGEST_MAX_INPUT_LENGTH = 500

_SEARCH_FIELD_BACKENDS = frozenset({BackendType.VARCHAR, BackendType.INT})
_INDEXABLE_BACKENDS = frozenset({BackendType.STATIC, BackendType.VARCHAR, BackendType.DECIMAL, BackendType.DATETIME})

SYSTEM_FIELDS: dict[str, ScalarField] = {
    "visibility": ScalarField(FieldType.INTEGER),
    "store_id": ScalarField(FieldType.INTEGER),
    "in_stock": ScalarField(FieldType.BOOLEAN),
}


def attribute_type(attribute: AttributeDescriptor) -> FieldType:
    """Semantic field type of an attribute value."""
    if attribute.backend_type == BackendType.DECIMAL:
        return FieldType.DOUBLE
    if attribute.source_kind == SourceKind.BOOLEAN:
        return FieldType.BOOLEAN
    if attribute.backend_type == BackendType.DATETIME:
        return FieldType.DATE
    return FieldType.STRING


def sortable_type(attribute: AttributeDescriptor) -> FieldType:
    if attribute.backend_type == BackendType.DECIMAL:
        return FieldType.DOUBLE
    if attribute.backend_type == BackendType.DATETIME:
        return FieldType.DATE
    return FieldType.STRING


class SchemaBuilder:
    """Builds the ``properties`` of the catalog document type."""

    def __init__(self, *, date_format: str = DEFAULT_DATE_FORMAT) -> None:
        self.date_format = date_format

    def build_mappings(
        self,
        attributes: Iterable[AttributeDescriptor],
        stores: Iterable[Store],
        analysis: AnalysisSettings,
    ) -> IndexMapping:
        attributes = list(attributes)
        stores = list(stores)
        mapping = IndexMapping()

        self._add_search_fields(mapping, attributes, stores, analysis)
        self._add_fulltext_fields(mapping, attributes, stores, analysis)
        self._add_indexable_fields(mapping, attributes, stores)
        self._add_sortable_fields(mapping, attributes, stores)
        for name, system_field in SYSTEM_FIELDS.items():
            self._put(mapping, name, system_field)
        self._add_suggest_fields(mapping, stores, analysis)

        logger.debug(
            "Built %d field mappings from %d attributes for %d stores",
            len(mapping),
            len(attributes),
            len(stores),
        )
        return mapping

    def _add_search_fields(
        self,
        mapping: IndexMapping,
        attributes: Sequence[AttributeDescriptor],
        stores: Sequence[Store],
        analysis: AnalysisSettings,
    ) -> None:
        for attribute in attributes:
            if not (
                attribute.is_searchable
                and attribute.is_indexable
                and attribute.backend_type in _SEARCH_FIELD_BACKENDS
            ):
                continue
            field_type = attribute_type(attribute)
            for store in stores:
                key = attribute_field_name(attribute, store.locale_code)
                if field_type != FieldType.STRING:
                    self._put(mapping, key, ScalarField(field_type))
                else:
                    self._put(mapping, key, self._multi_field(key, attribute, analysis))

    def _multi_field(self, key: str, attribute: AttributeDescriptor, analysis: AnalysisSettings) -> MultiField:
        sub_fields: dict[str, ScalarField] = {
            key: ScalarField(FieldType.STRING, boost=attribute.boost),
            UNTOUCHED_SUBFIELD: ScalarField(FieldType.STRING, index=NOT_ANALYZED),
        }
        for analyzer in analysis.analyzer_names:
            sub_fields.setdefault(analyzer, ScalarField(FieldType.STRING, boost=attribute.boost, analyzer=analyzer))
        return MultiField(name=key, fields=sub_fields)

    def _add_fulltext_fields(
        self,
        mapping: IndexMapping,
        attributes: Sequence[AttributeDescriptor],
        stores: Sequence[Store],
        analysis: AnalysisSettings,
    ) -> None:
        for attribute in attributes:
            if not (attribute.is_searchable and attribute.backend_type == BackendType.TEXT):
                continue
            for store in stores:
                key = attribute_field_name(attribute, store.locale_code)
                analyzer = analysis.analyzer_for_language(store.language_code)
                self._put(mapping, key, ScalarField(FieldType.STRING, boost=attribute.boost, analyzer=analyzer))

    def _add_indexable_fields(
        self,
        mapping: IndexMapping,
        attributes: Sequence[AttributeDescriptor],
        stores: Sequence[Store],
    ) -> None:
        for attribute in attributes:
            if not (
                attribute.is_searchable
                and attribute.is_indexable
                and attribute.backend_type in _INDEXABLE_BACKENDS
            ):
                continue
            date_format = self.date_format if attribute.backend_type == BackendType.DATETIME else None
            scalar = ScalarField(attribute_type(attribute), boost=attribute.boost, format=date_format)
            for store in stores:
                key = attribute_field_name(attribute, store.locale_code)
                if key not in mapping:
                    mapping.add(key, scalar)

    def _add_sortable_fields(
        self,
        mapping: IndexMapping,
        attributes: Sequence[AttributeDescriptor],
        stores: Sequence[Store],
    ) -> None:
        for attribute in attributes:
            if not attribute.is_sortable:
                continue
            field_type = sortable_type(attribute)
            date_format = self.date_format if field_type == FieldType.DATE else None
            for store in stores:
                key = sortable_field_name(attribute, store.locale_code)
                self._put(mapping, key, ScalarField(field_type, index=NOT_ANALYZED, format=date_format))

    def _add_suggest_fields(
        self,
        mapping: IndexMapping,
        stores: Sequence[Store],
        analysis: AnalysisSettings,
    ) -> None:
        for store in stores:
            analyzer = analysis.analyzer_for_language(store.language_code)
            completion = CompletionField(
                analyzer=analyzer,
                search_analyzer=analyzer,
                payloads=True,
                max_input_length=SUGGEST_MAX_INPUT_LENGTH,
                preserve_separators=False,
            )
            self._put(mapping, suggest_field_name(store), completion)

    @staticmethod
    def _put(mapping: IndexMapping, key: str, field_mapping: FieldMapping) -> None:
        if not mapping.add(key, field_mapping):
            logger.debug("Field %s already mapped; keeping first definition", key)
