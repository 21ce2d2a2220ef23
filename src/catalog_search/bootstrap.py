"""Wire the index components from ``Settings``."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from catalog_search.adapters.catalog import AttributeCatalog, StoreRegistry
from catalog_search.adapters.schema_cache import InMemorySchemaCache, SchemaCache
from catalog_search.adapters.search_engine_client import HttpSearchEngineClient, SearchEngineClient
from catalog_search.config import Settings
from catalog_search.observability import configure_logging, configure_trace_exporter, init_tracing
from catalog_search.search.dispatch import SearchDispatcher, SuggestDispatcher
from catalog_search.search.lifecycle import IndexLifecycleManager
from catalog_search.service_layer.rebuild_service import RebuildService


logger = logging.getLogger(__name__)


@dataclass
class CatalogSearch:
    """Everything a caller needs to rebuild and query the catalog index."""

    settings: Settings
    client: SearchEngineClient
    manager: IndexLifecycleManager
    search: SearchDispatcher
    suggest: SuggestDispatcher
    rebuild: RebuildService

    def close(self) -> None:
        self.client.close()


def configure_observability(settings: Settings) -> None:
    configure_logging(settings.log_level, json_output=settings.json_logs)
    collector = settings.get_collector_config()
    if collector.enabled:
        configure_trace_exporter(collector, init_tracing())


def build_catalog_search(
    attribute_catalog: AttributeCatalog,
    store_registry: StoreRegistry,
    *,
    settings: Settings | None = None,
    client: SearchEngineClient | None = None,
    schema_cache: SchemaCache | None = None,
) -> CatalogSearch:
    """Build the components; settings come from the environment when omitted.

    Raises:
        pydantic.ValidationError: the environment does not define an alias.
    """
    settings = settings or Settings()  # type: ignore[call-arg]
    if client is None:
        client = HttpSearchEngineClient(settings.get_hosts(), timeout=settings.http_timeout)

    manager = IndexLifecycleManager.from_settings(
        settings,
        client,
        attribute_catalog=attribute_catalog,
        store_registry=store_registry,
        schema_cache=schema_cache if schema_cache is not None else InMemorySchemaCache(),
    )
    logger.info("Catalog search ready for alias %s", settings.alias)
    return CatalogSearch(
        settings=settings,
        client=client,
        manager=manager,
        search=SearchDispatcher(client, manager),
        suggest=SuggestDispatcher(client, manager),
        rebuild=RebuildService(manager),
    )
