"""Bulk-load wire format.

A bulk payload is newline-delimited JSON: an action header line, then the
document body line, repeated per document, with a trailing newline so the
payload ends in an empty line. Per-item results of the bulk call are not
inspected.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import orjson


DEFAULT_DOCUMENT_TYPE = "product"


@dataclass(frozen=True)
class BulkOperation:
    """One document write: action header + source body."""

    index: str
    doc_type: str
    doc_id: str
    source: Mapping[str, Any]

    @property
    def header(self) -> dict[str, Any]:
        return {"index": {"_index": self.index, "_type": self.doc_type, "_id": self.doc_id}}

    def to_lines(self) -> tuple[bytes, bytes]:
        return orjson.dumps(self.header), orjson.dumps(dict(self.source), default=_json_default)

    def to_ndjson(self) -> bytes:
        """Two-line record without the trailing newline."""
        return b"\n".join(self.to_lines())


class BulkEncoder:
    """Serializes catalog records into bulk operations and payloads."""

    def encode(
        self,
        doc_id: str | int,
        fields: Mapping[str, Any],
        doc_type: str = DEFAULT_DOCUMENT_TYPE,
        *,
        index: str,
    ) -> BulkOperation:
        return BulkOperation(index=index, doc_type=doc_type, doc_id=str(doc_id), source=fields)

    def encode_batch(self, operations: Iterable[BulkOperation]) -> bytes:
        """Concatenate operations in caller order; empty input yields an empty payload."""
        lines: list[bytes] = []
        for operation in operations:
            lines.extend(operation.to_lines())
        if not lines:
            return b""
        return b"\n".join(lines) + b"\n"


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")
