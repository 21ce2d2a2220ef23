"""Zero-downtime index rebuilds behind an alias.

A rebuild is driven by the caller in three steps:

1. ``prepare_new_generation`` allocates a timestamped generation name and
   applies the current schema to it (create, or update in place when a
   generation of that name already exists);
2. the caller bulk-loads documents through ``create_doc``/``add_documents``;
3. ``install_pending_generation`` points the alias at the new generation and
   deletes every other generation still attached to the alias.

The manager keeps only the name of the generation it currently targets.
There is no fence against two rebuilds running at once: the last alias swap
wins and may delete the other caller's generation.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from catalog_search.config import DEFAULT_INDICES_PATTERN
from catalog_search.domain.lifecycle import (
    GenerationBuildError,
    GenerationState,
    IndexConfigurationError,
    InstallResult,
    InvalidStateTransitionError,
    PreparedGeneration,
    SearchEngineError,
)
from catalog_search.observability.context import bind_index_context
from catalog_search.observability.metrics import BULK_DOCUMENTS, GENERATIONS_DELETED
from catalog_search.search.analyzers import AnalysisSettings, AnalyzerConfigBuilder
from catalog_search.search.bulk import DEFAULT_DOCUMENT_TYPE, BulkEncoder, BulkOperation
from catalog_search.search.fields import select_search_fields
from catalog_search.search.schema import IndexMapping
from catalog_search.search.schema_builder import DEFAULT_DATE_FORMAT, SchemaBuilder


if TYPE_CHECKING:
    from catalog_search.adapters.catalog import AttributeCatalog, StoreRegistry
    from catalog_search.adapters.schema_cache import SchemaCache
    from catalog_search.adapters.search_engine_client import SearchEngineClient
    from catalog_search.config import Settings


logger = logging.getLogger(__name__)

BeforeCreateListener = Callable[[dict[str, Any]], None]

_PATTERN_TOKEN = re.compile(r"\{\{([^}]*)\}\}")
# Longest tokens first so "YYYY" wins over "YY".
_DATE_TOKENS: tuple[tuple[str, str], ...] = (
    ("YYYY", "%Y"),
    ("yyyy", "%Y"),
    ("YY", "%y"),
    ("yy", "%y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("dd", "%d"),
    ("HH", "%H"),
    ("hh", "%I"),
    ("mm", "%M"),
    ("ss", "%S"),
)


def _format_date_token(token: str, moment: datetime) -> str:
    parts: list[str] = []
    position = 0
    while position < len(token):
        for symbol, directive in _DATE_TOKENS:
            if token.startswith(symbol, position):
                parts.append(moment.strftime(directive))
                position += len(symbol)
                break
        else:
            char = token[position]
            if char.isalpha():
                raise IndexConfigurationError(f"Unsupported date token '{char}' in '{{{{{token}}}}}'")
            parts.append(char)
            position += 1
    return "".join(parts)


def generation_name(alias: str, pattern: str, moment: datetime) -> str:
    """Build ``{alias}-{pattern}`` with ``{{...}}`` tokens replaced by UTC date parts.

    Example:
        generation_name("catalog", "{{YYYYMMDD}}-{{HHmmss}}", moment)
        # -> "catalog-20240131-235959"
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    suffix = _PATTERN_TOKEN.sub(lambda match: _format_date_token(match.group(1), moment), pattern)
    return f"{alias}-{suffix}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IndexLifecycleManager:
    """Drives generation creation, schema application, alias swap and cleanup."""

    def __init__(
        self,
        client: SearchEngineClient,
        *,
        alias: str,
        attribute_catalog: AttributeCatalog,
        store_registry: StoreRegistry,
        schema_builder: SchemaBuilder | None = None,
        analyzer_builder: AnalyzerConfigBuilder | None = None,
        encoder: BulkEncoder | None = None,
        schema_cache: SchemaCache | None = None,
        indices_pattern: str = DEFAULT_INDICES_PATTERN,
        number_of_shards: int = 1,
        number_of_replicas: int = 0,
        icu_folding: bool = False,
        document_type: str = DEFAULT_DOCUMENT_TYPE,
        schema_cache_version: str = "1",
        rollback_failed_generation: bool = False,
        search_on_options: bool = False,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not alias or not alias.strip():
            raise IndexConfigurationError("Alias must be defined for search engine client.")

        self.client = client
        self.alias = alias.strip()
        self.attribute_catalog = attribute_catalog
        self.store_registry = store_registry
        self.schema_builder = schema_builder or SchemaBuilder()
        self.analyzer_builder = analyzer_builder or AnalyzerConfigBuilder()
        self.encoder = encoder or BulkEncoder()
        self.schema_cache = schema_cache
        self.indices_pattern = indices_pattern or DEFAULT_INDICES_PATTERN
        self.number_of_shards = number_of_shards
        self.number_of_replicas = number_of_replicas
        self.icu_folding = icu_folding
        self.document_type = document_type
        self.schema_cache_version = schema_cache_version
        self.rollback_failed_generation = rollback_failed_generation
        self.search_on_options = search_on_options
        self._clock = clock

        self._current_index_name = self.alias
        self._pending_install = False
        self._state = GenerationState.ACTIVE
        self._before_create: list[BeforeCreateListener] = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: SearchEngineClient,
        *,
        attribute_catalog: AttributeCatalog,
        store_registry: StoreRegistry,
        schema_cache: SchemaCache | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> IndexLifecycleManager:
        return cls(
            client,
            alias=settings.alias,
            attribute_catalog=attribute_catalog,
            store_registry=store_registry,
            schema_builder=SchemaBuilder(date_format=settings.date_format or DEFAULT_DATE_FORMAT),
            schema_cache=schema_cache,
            indices_pattern=settings.indices_pattern,
            number_of_shards=settings.number_of_shards,
            number_of_replicas=settings.number_of_replicas,
            icu_folding=settings.enable_icu_folding,
            document_type=settings.document_type,
            schema_cache_version=settings.schema_cache_version,
            rollback_failed_generation=settings.rollback_failed_generation,
            search_on_options=settings.search_on_options,
            clock=clock,
        )

    # --- state ---

    @property
    def current_index_name(self) -> str:
        """Generation (or alias) every read and write currently targets."""
        return self._current_index_name

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def has_pending_install(self) -> bool:
        return self._pending_install

    def is_icu_folding_enabled(self) -> bool:
        return self.icu_folding

    def on_before_create(self, listener: BeforeCreateListener) -> None:
        """Register a hook receiving the (mutable) create-index body of a fresh generation."""
        self._before_create.append(listener)

    def _transition(self, target: GenerationState) -> None:
        if not self._state.can_transition_to(target):
            raise InvalidStateTransitionError(f"Cannot move from {self._state.value} to {target.value}")
        logger.debug("Index %s: %s -> %s", self.alias, self._state.value, target.value)
        self._state = target

    # --- schema ---

    def _cache_key(self, part: str) -> str:
        return f"{self.alias}:{self.schema_cache_version}:{part}"

    def get_analysis(self) -> AnalysisSettings:
        key = self._cache_key("analysis")
        if self.schema_cache is not None:
            cached = self.schema_cache.load(key)
            if cached is not None:
                return AnalysisSettings.from_dict(cached)

        analysis = self.analyzer_builder.build_analysis(self.store_registry.list_stores(), self.icu_folding)
        if self.schema_cache is not None:
            self.schema_cache.save(key, analysis.to_dict())
        return analysis

    def get_index_settings(self) -> dict[str, Any]:
        """Settings applied to every generation (shard count is added on create only)."""
        return {
            "number_of_replicas": self.number_of_replicas,
            "analysis": self.get_analysis().to_dict(),
        }

    def get_index_mapping(self) -> IndexMapping:
        key = self._cache_key("properties")
        if self.schema_cache is not None:
            cached = self.schema_cache.load(key)
            if cached is not None:
                return IndexMapping.from_dict(cached)

        mapping = self.schema_builder.build_mappings(
            self.attribute_catalog.list_attributes(),
            self.store_registry.list_stores(),
            self.get_analysis(),
        )
        if self.schema_cache is not None:
            self.schema_cache.save(key, mapping.to_dict())
        return mapping

    def get_index_properties(self) -> dict[str, Any]:
        return self.get_index_mapping().to_dict()

    def get_search_fields(self, only_fuzzy: bool = False, query: Any = "") -> list[str]:
        return select_search_fields(
            self.get_index_mapping(),
            only_fuzzy=only_fuzzy,
            query=query,
            search_on_options=self.search_on_options,
        )

    # --- probes and pass-through operations ---

    def get_status(self) -> bool:
        """Liveness check; transport and engine errors report ``False``."""
        try:
            return bool(self.client.ping())
        except (httpx.HTTPError, SearchEngineError) as exc:
            logger.warning("Search engine status check failed: %s", exc)
            return False

    def target_exists(self) -> bool:
        return self.client.index_exists(self._current_index_name)

    def delete_index(self) -> bool:
        """Delete the current target if it exists; returns whether anything was deleted."""
        if not self.target_exists():
            return False
        self.client.delete_index(self._current_index_name)
        logger.info("Deleted index %s", self._current_index_name)
        return True

    def refresh_index(self) -> bool:
        if not self.target_exists():
            return False
        self.client.refresh_index(self._current_index_name)
        return True

    # --- rebuild protocol ---

    def prepare_new_generation(self) -> PreparedGeneration:
        """Allocate a new generation and apply the current schema to it.

        Raises:
            GenerationBuildError: the generation could not be created or updated.
                The manager falls back to its previous target; nothing is torn
                down unless ``rollback_failed_generation`` is enabled.

        Any other error (a failing ``on_before_create`` listener, say) restores
        the previous target the same way and propagates unchanged.
        """
        name = generation_name(self.alias, self.indices_pattern, self._clock())
        previous_target = self._current_index_name
        previous_pending = self._pending_install
        previous_state = self._state

        self._transition(GenerationState.BUILDING)
        self._current_index_name = name
        self._pending_install = True
        bind_index_context(alias=self.alias, generation=name)

        try:
            created = self._apply_schema(name)
        except BaseException as exc:
            logger.exception("Failed to prepare generation %s for alias %s", name, self.alias)
            self._current_index_name = previous_target
            self._pending_install = previous_pending
            self._state = previous_state
            if not isinstance(exc, SearchEngineError):
                raise
            raise GenerationBuildError(
                "prepare_new_generation",
                f"cannot build generation {name}: {exc}",
                status_code=exc.status_code,
                body=exc.body,
            ) from exc

        logger.info(
            "%s generation %s for alias %s",
            "Created" if created else "Updated",
            name,
            self.alias,
        )
        return PreparedGeneration(name=name, alias=self.alias, created=created)

    def _apply_schema(self, name: str) -> bool:
        """Create ``name`` or update it in place; returns True when created."""
        settings = self.get_index_settings()
        properties = self.get_index_properties()

        if self.client.index_exists(name):
            self.client.close_index(name)
            self.client.put_settings(name, settings)
            self.client.put_mapping(name, self.document_type, properties)
            self.client.open_index(name)
            return False

        body: dict[str, Any] = {
            "settings": {**settings, "number_of_shards": self.number_of_shards},
            "mappings": {self.document_type: {"properties": properties}},
        }
        for listener in self._before_create:
            listener(body)

        try:
            self.client.create_index(name, body)
        except SearchEngineError:
            if self.rollback_failed_generation:
                self._rollback(name)
            raise
        return True

    def _rollback(self, name: str) -> None:
        try:
            if self.client.index_exists(name):
                self.client.delete_index(name)
                logger.warning("Rolled back partially created generation %s", name)
        except SearchEngineError as exc:
            logger.error("Rollback of generation %s failed: %s", name, exc)

    def install_pending_generation(self) -> InstallResult | None:
        """Point the alias at the pending generation and delete all others.

        No-op returning None when no generation is pending.
        """
        if not self._pending_install:
            logger.debug("No pending generation for alias %s", self.alias)
            return None

        generation = self._current_index_name
        self._transition(GenerationState.INSTALLING)
        self.client.put_alias(generation, self.alias)

        deleted: list[str] = []
        for index in self.client.get_mapping(self.alias):
            if index != generation:
                self.client.delete_index(index)
                deleted.append(index)

        if deleted:
            GENERATIONS_DELETED.labels(alias=self.alias).inc(len(deleted))
        self._pending_install = False
        self._transition(GenerationState.ACTIVE)
        logger.info(
            "Alias %s now points to %s (deleted %d orphan generations)",
            self.alias,
            generation,
            len(deleted),
        )
        return InstallResult(alias=self.alias, generation=generation, deleted=tuple(deleted))

    # --- documents ---

    def create_doc(
        self,
        doc_id: str | int,
        data: dict[str, Any],
        doc_type: str | None = None,
    ) -> BulkOperation:
        """Encode one document against the current target."""
        return self.encoder.encode(
            doc_id,
            data,
            doc_type or self.document_type,
            index=self._current_index_name,
        )

    def add_documents(self, operations: Sequence[BulkOperation]) -> dict[str, Any] | None:
        """Send one bulk request; the per-item outcome is not inspected."""
        if not operations:
            return None
        payload = self.encoder.encode_batch(operations)
        response = self.client.bulk(payload)
        BULK_DOCUMENTS.labels(index=self._current_index_name).inc(len(operations))
        return response
