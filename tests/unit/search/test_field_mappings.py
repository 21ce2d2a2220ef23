"""Unit tests for field mapping value objects."""

import pytest

from catalog_search.search.schema import (
    NOT_ANALYZED,
    CompletionField,
    FieldMapping,
    FieldType,
    IndexMapping,
    MultiField,
    ScalarField,
)


pytestmark = pytest.mark.unit


class TestScalarField:
    def test_to_dict_omits_unset_options(self):
        assert ScalarField(FieldType.INTEGER).to_dict() == {"type": "integer"}

    def test_to_dict_with_all_options(self):
        field = ScalarField(FieldType.DATE, boost=2, index=NOT_ANALYZED, format="date")

        assert field.to_dict() == {"type": "date", "boost": 2, "index": "not_analyzed", "format": "date"}

    def test_rejects_non_scalar_type(self):
        with pytest.raises(ValueError, match="cannot have type 'multi_field'"):
            ScalarField(FieldType.MULTI_FIELD)

    def test_is_analyzed(self):
        assert ScalarField(FieldType.STRING).is_analyzed
        assert not ScalarField(FieldType.STRING, index=NOT_ANALYZED).is_analyzed
        assert not ScalarField(FieldType.DOUBLE).is_analyzed


class TestMultiField:
    def test_requires_canonical_sub_field(self):
        with pytest.raises(ValueError, match="canonical sub-field"):
            MultiField(name="color_en_gb", fields={"untouched": ScalarField()})

    def test_value_type_follows_canonical_sub_field(self):
        field = MultiField(
            name="qty",
            fields={"qty": ScalarField(FieldType.DOUBLE), "untouched": ScalarField(index=NOT_ANALYZED)},
        )

        assert field.field_type == FieldType.MULTI_FIELD
        assert field.value_type == FieldType.DOUBLE
        assert field.canonical == ScalarField(FieldType.DOUBLE)


class TestCompletionField:
    def test_search_analyzer_defaults_to_index_analyzer(self):
        data = CompletionField(analyzer="analyzer_de").to_dict()

        assert data["index_analyzer"] == "analyzer_de"
        assert data["search_analyzer"] == "analyzer_de"
        assert data["payloads"] is True
        assert data["preserve_separators"] is False


class TestIndexMapping:
    def test_first_writer_wins(self):
        mapping = IndexMapping()

        assert mapping.add("visibility", ScalarField(FieldType.INTEGER)) is True
        assert mapping.add("visibility", ScalarField(FieldType.STRING)) is False

        assert mapping["visibility"] == ScalarField(FieldType.INTEGER)
        assert len(mapping) == 1

    def test_preserves_insertion_order(self):
        mapping = IndexMapping({"b": ScalarField(), "a": ScalarField(), "c": ScalarField()})

        assert list(mapping) == ["b", "a", "c"]
        assert list(mapping.to_dict()) == ["b", "a", "c"]

    def test_get_and_contains(self):
        mapping = IndexMapping({"sku": ScalarField(boost=4)})

        assert "sku" in mapping
        assert mapping.get("missing") is None

    def test_from_dict_round_trip(self):
        data = {
            "color_en_gb": {
                "type": "multi_field",
                "fields": {
                    "color_en_gb": {"type": "string", "boost": 2},
                    "untouched": {"type": "string", "index": "not_analyzed"},
                    "whitespace": {"type": "string", "boost": 2, "analyzer": "whitespace"},
                },
            },
            "price": {"type": "double", "boost": 3},
            "_suggest_en_gb": CompletionField(analyzer="analyzer_en").to_dict(),
        }

        mapping = IndexMapping.from_dict(data)

        assert isinstance(mapping["color_en_gb"], MultiField)
        assert isinstance(mapping["_suggest_en_gb"], CompletionField)
        assert mapping.to_dict() == data

    def test_from_dict_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            FieldMapping.from_dict({"type": "geo_point"})
