"""Unit tests for full catalog rebuild orchestration."""

import pytest

from catalog_search.domain.lifecycle import GenerationBuildError, SearchEngineError
from catalog_search.service_layer.rebuild_service import CatalogRecord, RebuildService


pytestmark = pytest.mark.unit

GENERATION = "catalog-20240131-123045"


def make_records(count):
    return [CatalogRecord(doc_id=i, fields={"sku": f"SKU-{i}", "store_id": 1}) for i in range(count)]


class TestRebuildService:
    def test_rejects_invalid_batch_size(self, make_manager):
        with pytest.raises(ValueError, match="batch_size"):
            RebuildService(make_manager(), batch_size=0)

    def test_rebuild_runs_full_protocol(self, make_manager, fake_client):
        fake_client.add_index("catalog-20240101-000000", alias="catalog")
        service = RebuildService(make_manager(), batch_size=2)

        result = service.rebuild(make_records(5))

        assert result.generation == GENERATION
        assert result.documents_indexed == 5
        assert result.batches_sent == 3
        assert result.deleted_generations == ("catalog-20240101-000000",)
        assert result.duration_seconds >= 0
        assert fake_client.resolve("catalog") == [GENERATION]
        assert len(fake_client.indices[GENERATION].documents) == 5

    def test_protocol_order(self, make_manager, fake_client):
        RebuildService(make_manager()).rebuild(make_records(1))

        operations = [op for op in fake_client.operations() if op != "index_exists"]
        assert operations == ["create_index", "bulk", "refresh_index", "put_alias", "get_mapping"]

    def test_custom_document_type_per_record(self, make_manager, fake_client):
        record = CatalogRecord(doc_id="c-1", fields={"name": "Shirts"}, doc_type="category")

        RebuildService(make_manager()).rebuild([record])

        assert b'"_type":"category"' in fake_client.bulk_payloads[0]

    def test_empty_catalog_still_installs(self, make_manager, fake_client):
        result = RebuildService(make_manager()).rebuild([])

        assert result.documents_indexed == 0
        assert result.batches_sent == 0
        assert fake_client.bulk_payloads == []
        assert fake_client.resolve("catalog") == [GENERATION]

    def test_accepts_generators(self, make_manager, fake_client):
        records = (record for record in make_records(3))

        result = RebuildService(make_manager(), batch_size=10).rebuild(records)

        assert result.batches_sent == 1

    def test_prepare_failure_aborts_rebuild(self, make_manager, fake_client):
        fake_client.add_index("catalog-20240101-000000", alias="catalog")
        fake_client.failures["create_index"] = SearchEngineError("create_index", "boom", status_code=500)

        with pytest.raises(GenerationBuildError):
            RebuildService(make_manager()).rebuild(make_records(2))

        assert fake_client.bulk_payloads == []
        assert fake_client.resolve("catalog") == ["catalog-20240101-000000"]

    def test_bulk_failure_keeps_previous_generation_live(self, make_manager, fake_client):
        fake_client.add_index("catalog-20240101-000000", alias="catalog")
        fake_client.failures["bulk"] = SearchEngineError("bulk", "HTTP 413", status_code=413)
        manager = make_manager()

        with pytest.raises(SearchEngineError):
            RebuildService(manager).rebuild(make_records(2))

        assert "put_alias" not in fake_client.operations()
        assert fake_client.resolve("catalog") == ["catalog-20240101-000000"]
        assert manager.has_pending_install is True
