"""Unit tests for the generation lifecycle domain model."""

import pytest

from catalog_search.domain.lifecycle import (
    CatalogSearchError,
    GenerationBuildError,
    GenerationState,
    IndexConfigurationError,
    InstallResult,
    PreparedGeneration,
    SearchEngineError,
)


pytestmark = pytest.mark.unit


class TestGenerationState:
    @pytest.mark.parametrize(
        ("source", "target", "allowed"),
        [
            (GenerationState.ACTIVE, GenerationState.BUILDING, True),
            (GenerationState.ACTIVE, GenerationState.INSTALLING, False),
            (GenerationState.ACTIVE, GenerationState.ACTIVE, False),
            (GenerationState.BUILDING, GenerationState.BUILDING, True),
            (GenerationState.BUILDING, GenerationState.INSTALLING, True),
            (GenerationState.BUILDING, GenerationState.ACTIVE, False),
            (GenerationState.INSTALLING, GenerationState.ACTIVE, True),
            (GenerationState.INSTALLING, GenerationState.INSTALLING, True),
            (GenerationState.INSTALLING, GenerationState.BUILDING, True),
        ],
    )
    def test_transitions(self, source, target, allowed):
        assert source.can_transition_to(target) is allowed


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(IndexConfigurationError, CatalogSearchError)
        assert issubclass(SearchEngineError, CatalogSearchError)
        assert issubclass(GenerationBuildError, SearchEngineError)

    def test_search_engine_error_details(self):
        error = SearchEngineError("put_alias", "HTTP 404", status_code=404, body={"error": "missing"})

        assert str(error) == "put_alias: HTTP 404"
        assert error.operation == "put_alias"
        assert error.status_code == 404
        assert error.body == {"error": "missing"}


class TestOutcomes:
    def test_prepared_generation(self):
        prepared = PreparedGeneration(name="catalog-1", alias="catalog", created=False)

        assert prepared.updated is True

    def test_install_result_to_dict(self):
        result = InstallResult(alias="catalog", generation="catalog-2", deleted=("catalog-1",))

        assert result.to_dict() == {"alias": "catalog", "generation": "catalog-2", "deleted": ["catalog-1"]}
