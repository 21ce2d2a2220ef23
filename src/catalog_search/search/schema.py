"""
Field mapping definitions for the catalog index.

Each mapping serializes to the engine's ``properties`` entry:
- ScalarField: string/double/boolean/date/integer with optional boost,
  analyzer, date format or ``not_analyzed`` indexing
- MultiField: one logical attribute exposed as several sub-fields
  (canonical, ``untouched``, one per analyzer)
- CompletionField: prefix autocomplete with fuzzy matching

``IndexMapping`` collects mappings by field name with first-writer-wins
semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


NOT_ANALYZED = "not_analyzed"


class FieldType(str, Enum):
    """Semantic field types understood by the engine."""

    STRING = "string"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    INTEGER = "integer"
    MULTI_FIELD = "multi_field"
    COMPLETION = "completion"

    @property
    def is_scalar(self) -> bool:
        return self not in {FieldType.MULTI_FIELD, FieldType.COMPLETION}


@dataclass(frozen=True)
class FieldMapping(ABC):
    """Base class for all field mappings."""

    @property
    @abstractmethod
    def field_type(self) -> FieldType:
        """Return the field type."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serialize to the engine mapping format."""

    @property
    def value_type(self) -> FieldType:
        """Type of the indexed value (the canonical sub-field for multi-fields)."""
        return self.field_type

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, name: str | None = None) -> FieldMapping:
        """Deserialize a mapping; ``name`` identifies the canonical multi-field entry."""
        field_type = FieldType(data["type"])

        if field_type.is_scalar:
            return ScalarField(
                type=field_type,
                boost=data.get("boost"),
                index=data.get("index"),
                analyzer=data.get("analyzer"),
                format=data.get("format"),
            )
        if field_type == FieldType.MULTI_FIELD:
            sub_fields = {key: ScalarField.from_dict(value) for key, value in data.get("fields", {}).items()}
            return MultiField(name=name or next(iter(sub_fields), ""), fields=sub_fields)
        if field_type == FieldType.COMPLETION:
            return CompletionField(
                analyzer=data.get("index_analyzer", data.get("analyzer", "standard")),
                search_analyzer=data.get("search_analyzer"),
                payloads=data.get("payloads", True),
                max_input_length=data.get("max_input_length", 500),
                preserve_separators=data.get("preserve_separators", False),
            )
        msg = f"Unknown field type: {field_type}"
        raise ValueError(msg)


@dataclass(frozen=True)
class ScalarField(FieldMapping):
    """
    Single-valued field.

    Args:
        type: Scalar field type (string, double, boolean, date, integer)
        boost: Query-time weight; omitted from the mapping when None
        index: ``not_analyzed`` for exact-match/aggregation fields
        analyzer: Analyzer name for analyzed string fields
        format: Date format for date fields
    """

    type: FieldType = FieldType.STRING
    boost: float | None = None
    index: str | None = None
    analyzer: str | None = None
    format: str | None = None

    def __post_init__(self) -> None:
        if not self.type.is_scalar:
            msg = f"ScalarField cannot have type '{self.type.value}'"
            raise ValueError(msg)

    @property
    def field_type(self) -> FieldType:
        return self.type

    @property
    def is_analyzed(self) -> bool:
        return self.type == FieldType.STRING and self.index != NOT_ANALYZED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.boost is not None:
            data["boost"] = self.boost
        if self.index is not None:
            data["index"] = self.index
        if self.analyzer is not None:
            data["analyzer"] = self.analyzer
        if self.format is not None:
            data["format"] = self.format
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, name: str | None = None) -> ScalarField:
        mapping = FieldMapping.from_dict(data, name=name)
        if not isinstance(mapping, ScalarField):
            msg = f"Expected a scalar mapping, got '{data.get('type')}'"
            raise ValueError(msg)
        return mapping


@dataclass(frozen=True)
class MultiField(FieldMapping):
    """
    Multi-field mapping.

    The sub-field named like the parent field is the canonical one; the
    engine serves plain queries on ``name`` from it.
    """

    name: str = ""
    fields: dict[str, ScalarField] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.name not in self.fields:
            msg = f"Multi-field '{self.name}' must contain its canonical sub-field"
            raise ValueError(msg)

    @property
    def field_type(self) -> FieldType:
        return FieldType.MULTI_FIELD

    @property
    def canonical(self) -> ScalarField:
        return self.fields[self.name]

    @property
    def value_type(self) -> FieldType:
        return self.canonical.type

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": FieldType.MULTI_FIELD.value,
            "fields": {key: sub_field.to_dict() for key, sub_field in self.fields.items()},
        }


@dataclass(frozen=True)
class CompletionField(FieldMapping):
    """Completion-suggester field used for autocomplete."""

    analyzer: str = "standard"
    search_analyzer: str | None = None
    payloads: bool = True
    max_input_length: int = 500
    preserve_separators: bool = False

    @property
    def field_type(self) -> FieldType:
        return FieldType.COMPLETION

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": FieldType.COMPLETION.value,
            "payloads": self.payloads,
            "max_input_length": self.max_input_length,
            "index_analyzer": self.analyzer,
            "search_analyzer": self.search_analyzer or self.analyzer,
            "preserve_separators": self.preserve_separators,
        }


class IndexMapping:
    """
    Ordered field-name → mapping collection for one document type.

    ``add`` never overwrites: the first mapping registered under a name
    wins, so later derivation rules cannot clobber earlier ones.

    Example:
        mapping = IndexMapping()
        mapping.add("visibility", ScalarField(FieldType.INTEGER))
        mapping.to_dict()  # {"visibility": {"type": "integer"}}
    """

    def __init__(self, fields: Mapping[str, FieldMapping] | None = None) -> None:
        self._fields: dict[str, FieldMapping] = {}
        for name, mapping in (fields or {}).items():
            self.add(name, mapping)

    def add(self, name: str, mapping: FieldMapping) -> bool:
        """Register ``mapping`` under ``name``; returns False when the name is taken."""
        if name in self._fields:
            return False
        self._fields[name] = mapping
        return True

    def __getitem__(self, name: str) -> FieldMapping:
        return self._fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IndexMapping):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def items(self) -> Iterator[tuple[str, FieldMapping]]:
        return iter(self._fields.items())

    def get(self, name: str) -> FieldMapping | None:
        return self._fields.get(name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the engine ``properties`` object."""
        return {name: mapping.to_dict() for name, mapping in self._fields.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IndexMapping:
        return cls({name: FieldMapping.from_dict(value, name=name) for name, value in data.items()})
