"""Unit tests for the httpx-based search engine client."""

import httpx
import orjson
import pytest

from catalog_search.adapters.search_engine_client import HttpSearchEngineClient
from catalog_search.domain.lifecycle import SearchEngineError


pytestmark = pytest.mark.unit

HOST = "http://search.test:9200"


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response or httpx.Response(200, json={"acknowledged": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_client(handler, hosts=(HOST,)):
    return HttpSearchEngineClient(list(hosts), transport=httpx.MockTransport(handler))


class TestProbes:
    def test_ping(self):
        recorder = Recorder(httpx.Response(200))

        assert make_client(recorder).ping() is True
        assert recorder.last.method == "HEAD"
        assert recorder.last.url.path == "/"

    def test_ping_reports_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert make_client(refuse).ping() is False

    def test_ping_reports_error_status(self):
        assert make_client(Recorder(httpx.Response(503))).ping() is False

    @pytest.mark.parametrize(("status", "expected"), [(200, True), (404, False)])
    def test_index_exists(self, status, expected):
        recorder = Recorder(httpx.Response(status))

        assert make_client(recorder).index_exists("catalog") is expected
        assert recorder.last.method == "HEAD"
        assert recorder.last.url.path == "/catalog"


class TestIndexAdministration:
    def test_create_index_sends_json_body(self):
        recorder = Recorder()
        body = {"settings": {"number_of_shards": 1}, "mappings": {"product": {"properties": {}}}}

        make_client(recorder).create_index("catalog-20240131-123045", body)

        assert recorder.last.method == "PUT"
        assert recorder.last.url.path == "/catalog-20240131-123045"
        assert recorder.last.headers["content-type"] == "application/json"
        assert orjson.loads(recorder.last.content) == body

    def test_put_mapping_wraps_properties_in_document_type(self):
        recorder = Recorder()

        make_client(recorder).put_mapping("catalog-1", "product", {"sku": {"type": "string"}})

        assert recorder.last.url.path == "/catalog-1/_mapping/product"
        assert orjson.loads(recorder.last.content) == {"product": {"properties": {"sku": {"type": "string"}}}}

    def test_put_settings(self):
        recorder = Recorder()

        make_client(recorder).put_settings("catalog-1", {"number_of_replicas": 0})

        assert recorder.last.method == "PUT"
        assert recorder.last.url.path == "/catalog-1/_settings"
        assert orjson.loads(recorder.last.content) == {"settings": {"number_of_replicas": 0}}

    @pytest.mark.parametrize(
        ("method_name", "http_method", "path"),
        [
            ("delete_index", "DELETE", "/catalog-1"),
            ("refresh_index", "POST", "/catalog-1/_refresh"),
            ("close_index", "POST", "/catalog-1/_close"),
            ("open_index", "POST", "/catalog-1/_open"),
        ],
    )
    def test_index_operations(self, method_name, http_method, path):
        recorder = Recorder()

        getattr(make_client(recorder), method_name)("catalog-1")

        assert recorder.last.method == http_method
        assert recorder.last.url.path == path

    def test_put_alias(self):
        recorder = Recorder()

        make_client(recorder).put_alias("catalog-1", "catalog")

        assert recorder.last.method == "PUT"
        assert recorder.last.url.path == "/catalog-1/_alias/catalog"

    def test_get_mapping_decodes_response(self):
        payload = {"catalog-1": {"mappings": {}}, "catalog-0": {"mappings": {}}}

        mapping = make_client(Recorder(httpx.Response(200, json=payload))).get_mapping("catalog")

        assert set(mapping) == {"catalog-1", "catalog-0"}


class TestDocumentsAndQueries:
    def test_bulk_posts_ndjson(self):
        recorder = Recorder(httpx.Response(200, json={"errors": False, "items": []}))
        payload = b'{"index":{"_index":"catalog","_type":"product","_id":"1"}}\n{"sku":"A"}\n'

        response = make_client(recorder).bulk(payload)

        assert response == {"errors": False, "items": []}
        assert recorder.last.url.path == "/_bulk"
        assert recorder.last.headers["content-type"] == "application/x-ndjson"
        assert recorder.last.content == payload

    def test_search_builds_path_and_query_string(self):
        recorder = Recorder(httpx.Response(200, json={"hits": {"total": 0, "hits": []}}))

        make_client(recorder).search(
            {"index": "catalog", "type": "product", "body": {"query": {"match_all": {}}}, "routing": "1"}
        )

        assert recorder.last.method == "POST"
        assert recorder.last.url.path == "/catalog/product/_search"
        assert recorder.last.url.params["routing"] == "1"
        assert orjson.loads(recorder.last.content) == {"query": {"match_all": {}}}

    def test_search_without_type(self):
        recorder = Recorder(httpx.Response(200, json={}))

        make_client(recorder).search({"index": "catalog", "body": {}})

        assert recorder.last.url.path == "/catalog/_search"

    def test_suggest(self):
        recorder = Recorder(httpx.Response(200, json={"suggestions": []}))

        result = make_client(recorder).suggest("catalog", {"suggestions": {"text": "sh"}})

        assert result == {"suggestions": []}
        assert recorder.last.url.path == "/catalog/_suggest"


class TestErrors:
    def test_error_status_raises_with_body(self):
        recorder = Recorder(httpx.Response(400, json={"error": "MapperParsingException"}))

        with pytest.raises(SearchEngineError) as exc_info:
            make_client(recorder).create_index("catalog-1", {})

        assert exc_info.value.operation == "create_index"
        assert exc_info.value.status_code == 400
        assert exc_info.value.body == {"error": "MapperParsingException"}

    def test_non_json_error_body_is_kept_as_text(self):
        recorder = Recorder(httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(SearchEngineError) as exc_info:
            make_client(recorder).delete_index("catalog-1")

        assert exc_info.value.body == "Bad Gateway"

    def test_missing_index_on_delete_raises(self):
        with pytest.raises(SearchEngineError) as exc_info:
            make_client(Recorder(httpx.Response(404, json={"status": 404}))).delete_index("catalog-1")

        assert exc_info.value.status_code == 404

    def test_transport_failure_is_not_retried(self):
        attempts = []

        def timeout(request):
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SearchEngineError, match="transport failure") as exc_info:
            make_client(timeout).refresh_index("catalog-1")

        assert exc_info.value.status_code is None
        assert len(attempts) == 1


class TestConfiguration:
    def test_requires_a_host(self):
        with pytest.raises(ValueError, match="At least one"):
            HttpSearchEngineClient([])

    def test_uses_first_host_only(self):
        recorder = Recorder()

        make_client(recorder, hosts=("http://primary:9200", "http://secondary:9200")).refresh_index("catalog")

        assert recorder.last.url.host == "primary"
        assert recorder.last.url.port == 9200

    def test_context_manager_closes_client(self):
        with make_client(Recorder()) as client:
            client.refresh_index("catalog")

        assert client._client.is_closed
