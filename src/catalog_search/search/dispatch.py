"""Search and autocomplete against the generation the manager targets.

Both dispatchers degrade to an empty response when the target does not
exist; transport errors on an existing target propagate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from catalog_search.search.bulk import DEFAULT_DOCUMENT_TYPE
from catalog_search.search.naming import suggest_field_name


if TYPE_CHECKING:
    from catalog_search.adapters.search_engine_client import SearchEngineClient
    from catalog_search.domain.catalog import Store
    from catalog_search.search.lifecycle import IndexLifecycleManager


logger = logging.getLogger(__name__)

SUGGESTION_NAME = "suggestions"
SUGGEST_FUZZINESS = 1


class SearchRequest(Protocol):
    """Query object that knows how to build engine search parameters."""

    def build_params(self, index: str) -> dict[str, Any]:  # pragma: no cover - interface definition
        ...


class FulltextQuery(BaseModel):
    """Value object for a multi-field full-text query.

    ``fields`` usually comes from ``select_search_fields``; ``filters`` are
    exact-match terms such as ``{"store_id": 1, "visibility": 4}``.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    fields: list[str] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)
    doc_type: str = DEFAULT_DOCUMENT_TYPE
    offset: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=0)

    def build_params(self, index: str) -> dict[str, Any]:
        match: dict[str, Any] = {"query": self.text}
        if self.fields:
            match["fields"] = list(self.fields)
        query: dict[str, Any] = {"multi_match": match}
        if self.filters:
            query = {
                "bool": {
                    "must": query,
                    "filter": [{"term": {name: value}} for name, value in self.filters.items()],
                }
            }
        return {
            "index": index,
            "type": self.doc_type,
            "body": {"query": query, "from": self.offset, "size": self.size},
        }


class SearchDispatcher:
    """Runs search requests against the manager's current target."""

    def __init__(self, client: SearchEngineClient, manager: IndexLifecycleManager) -> None:
        self.client = client
        self.manager = manager

    def search(self, query: SearchRequest) -> dict[str, Any]:
        index = self.manager.current_index_name
        if not self.client.index_exists(index):
            logger.debug("Search skipped: index %s does not exist", index)
            return {}
        return self.client.search(query.build_params(index))


class SuggestDispatcher:
    """Fuzzy completion-suggester requests for a store's autocomplete field."""

    def __init__(self, client: SearchEngineClient, manager: IndexLifecycleManager) -> None:
        self.client = client
        self.manager = manager

    def build_body(self, text: str, store: Store) -> dict[str, Any]:
        return {
            SUGGESTION_NAME: {
                "text": text,
                "completion": {
                    "field": suggest_field_name(store),
                    "fuzzy": {"fuzziness": SUGGEST_FUZZINESS, "unicode_aware": True},
                },
            }
        }

    def autocomplete(self, text: str, store: Store) -> dict[str, Any]:
        index = self.manager.current_index_name
        if not self.client.index_exists(index):
            logger.debug("Autocomplete skipped: index %s does not exist", index)
            return {}
        return self.client.suggest(index, self.build_body(text, store))
