"""Shared test fixtures and configuration."""

from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


# Complete test environment that overrides every config value
TEST_ENV = {
    "CATALOG_SEARCH_HOSTS": "http://search.test:9200",
    "CATALOG_SEARCH_ALIAS": "catalog",
    "CATALOG_SEARCH_INDICES_PATTERN": "{{YYYYMMDD}}-{{HHmmss}}",
    "CATALOG_SEARCH_NUMBER_OF_SHARDS": "1",
    "CATALOG_SEARCH_NUMBER_OF_REPLICAS": "0",
    "CATALOG_SEARCH_ENABLE_ICU_FOLDING": "false",
    "CATALOG_SEARCH_LOG_LEVEL": "info",
    "CATALOG_SEARCH_OTLP_ENDPOINT": "",
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


for key, value in TEST_ENV.items():
    os.environ[key] = value

from catalog_search.adapters.catalog import InMemoryAttributeCatalog, InMemoryStoreRegistry
from catalog_search.domain.catalog import AttributeDescriptor, BackendType, SourceKind, Store
from catalog_search.search.lifecycle import IndexLifecycleManager
from tests.fixtures.fake_search_engine import FakeSearchEngineClient


FIXED_NOW = datetime(2024, 1, 31, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset the environment to test defaults before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def stores() -> list[Store]:
    return [
        Store(store_id=1, code="uk", locale_code="en_GB"),
        Store(store_id=2, code="fr", locale_code="fr_FR"),
        Store(store_id=3, code="jp", locale_code="ja_JP"),
    ]


@pytest.fixture
def attributes() -> list[AttributeDescriptor]:
    return [
        AttributeDescriptor("color", BackendType.VARCHAR, search_weight=2),
        AttributeDescriptor("name", BackendType.VARCHAR, search_weight=5, is_sortable=True),
        AttributeDescriptor("manufacturer", BackendType.INT, source_kind=SourceKind.TABLE),
        AttributeDescriptor("is_new", BackendType.INT, source_kind=SourceKind.BOOLEAN),
        AttributeDescriptor("description", BackendType.TEXT, search_weight=0),
        AttributeDescriptor("price", BackendType.DECIMAL, search_weight=3, is_sortable=True),
        AttributeDescriptor("news_from_date", BackendType.DATETIME, is_sortable=True),
        AttributeDescriptor("sku", BackendType.STATIC, search_weight=4),
        AttributeDescriptor("internal_note", BackendType.VARCHAR, is_searchable=False),
    ]


@pytest.fixture
def attribute_catalog(attributes) -> InMemoryAttributeCatalog:
    return InMemoryAttributeCatalog(attributes)


@pytest.fixture
def store_registry(stores) -> InMemoryStoreRegistry:
    return InMemoryStoreRegistry(stores)


@pytest.fixture
def fake_client() -> FakeSearchEngineClient:
    return FakeSearchEngineClient()


@pytest.fixture
def clock():
    """Clock advancing one second per call, starting at FIXED_NOW."""
    ticks = {"count": 0}

    def _now() -> datetime:
        moment = FIXED_NOW + timedelta(seconds=ticks["count"])
        ticks["count"] += 1
        return moment

    return _now


@pytest.fixture
def make_manager(fake_client, attribute_catalog, store_registry, clock):
    def _make(**overrides) -> IndexLifecycleManager:
        options = {
            "alias": "catalog",
            "attribute_catalog": attribute_catalog,
            "store_registry": store_registry,
            "clock": clock,
        }
        options.update(overrides)
        client = options.pop("client", fake_client)
        return IndexLifecycleManager(client, **options)

    return _make
