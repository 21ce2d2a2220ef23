"""Search engine transport abstractions and the httpx implementation.

Defines the transport boundary following the Repository Pattern: the index
lifecycle manager and the dispatchers only talk to ``SearchEngineClient``.
``HttpSearchEngineClient`` speaks the Elasticsearch REST API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
import logging
from typing import Any
from urllib.parse import quote

import httpx
import orjson

from catalog_search.domain.lifecycle import SearchEngineError
from catalog_search.observability.metrics import SEARCH_ENGINE_LATENCY, SEARCH_ENGINE_REQUESTS, track_latency
from catalog_search.observability.tracing import create_span


logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}
_NDJSON_HEADERS = {"Content-Type": "application/x-ndjson"}


class SearchEngineClient(ABC):
    """Abstract transport to the document-search engine.

    Every method raises ``SearchEngineError`` on failure except ``ping``,
    which reports connectivity as a boolean.
    """

    @abstractmethod
    def ping(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def index_exists(self, index: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def create_index(self, index: str, body: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_index(self, index: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def refresh_index(self, index: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def close_index(self, index: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def open_index(self, index: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def put_settings(self, index: str, settings: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def put_mapping(self, index: str, doc_type: str, properties: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_mapping(self, index: str) -> dict[str, Any]:
        """Return mappings keyed by physical index name (aliases are resolved)."""
        raise NotImplementedError

    @abstractmethod
    def put_alias(self, index: str, alias: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def bulk(self, payload: bytes) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def search(self, params: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def suggest(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def close(self) -> None:
        """Optional hook releasing transport resources."""

        return


class HttpSearchEngineClient(SearchEngineClient):
    """Elasticsearch REST client on top of ``httpx.Client``.

    Requests go to the first configured host. Failures are not retried;
    they surface immediately as ``SearchEngineError``.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not hosts:
            raise ValueError("At least one search engine host is required")
        self.hosts = list(hosts)
        self._client = httpx.Client(
            base_url=self.hosts[0],
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            transport=transport,
        )

    def __enter__(self) -> HttpSearchEngineClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # --- probes ---

    def ping(self) -> bool:
        try:
            response = self._client.head("/")
        except httpx.HTTPError as exc:
            logger.warning("Search engine ping failed: %s", exc)
            return False
        return response.is_success

    def index_exists(self, index: str) -> bool:
        response = self._send("index_exists", "HEAD", f"/{_quote(index)}", allowed_status=(404,))
        return response.status_code == 200

    # --- index administration ---

    def create_index(self, index: str, body: dict[str, Any]) -> None:
        self._send("create_index", "PUT", f"/{_quote(index)}", json_body=body)

    def delete_index(self, index: str) -> None:
        self._send("delete_index", "DELETE", f"/{_quote(index)}")

    def refresh_index(self, index: str) -> None:
        self._send("refresh_index", "POST", f"/{_quote(index)}/_refresh")

    def close_index(self, index: str) -> None:
        self._send("close_index", "POST", f"/{_quote(index)}/_close")

    def open_index(self, index: str) -> None:
        self._send("open_index", "POST", f"/{_quote(index)}/_open")

    def put_settings(self, index: str, settings: dict[str, Any]) -> None:
        self._send("put_settings", "PUT", f"/{_quote(index)}/_settings", json_body={"settings": settings})

    def put_mapping(self, index: str, doc_type: str, properties: dict[str, Any]) -> None:
        self._send(
            "put_mapping",
            "PUT",
            f"/{_quote(index)}/_mapping/{_quote(doc_type)}",
            json_body={doc_type: {"properties": properties}},
        )

    def get_mapping(self, index: str) -> dict[str, Any]:
        response = self._send("get_mapping", "GET", f"/{_quote(index)}/_mapping")
        return _decode(response)

    def put_alias(self, index: str, alias: str) -> None:
        self._send("put_alias", "PUT", f"/{_quote(index)}/_alias/{_quote(alias)}")

    # --- documents and queries ---

    def bulk(self, payload: bytes) -> dict[str, Any]:
        response = self._send("bulk", "POST", "/_bulk", content=payload, headers=_NDJSON_HEADERS)
        return _decode(response)

    def search(self, params: dict[str, Any]) -> dict[str, Any]:
        """Run a search described by ``{"index", "type"?, "body", **query_params}``."""
        params = dict(params)
        index = params.pop("index")
        doc_type = params.pop("type", None)
        body = params.pop("body", {})
        path = f"/{_quote(index)}"
        if doc_type:
            path += f"/{_quote(doc_type)}"
        response = self._send("search", "POST", f"{path}/_search", json_body=body, params=params or None)
        return _decode(response)

    def suggest(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        response = self._send("suggest", "POST", f"/{_quote(index)}/_suggest", json_body=body)
        return _decode(response)

    def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        allowed_status: tuple[int, ...] = (),
    ) -> httpx.Response:
        if json_body is not None:
            content = orjson.dumps(json_body)
            headers = _JSON_HEADERS

        with create_span(f"search_engine.{operation}", attributes={"http.method": method, "http.route": path}):
            with track_latency(SEARCH_ENGINE_LATENCY, operation=operation):
                try:
                    response = self._client.request(method, path, content=content, headers=headers, params=params)
                except httpx.HTTPError as exc:
                    SEARCH_ENGINE_REQUESTS.labels(operation=operation, status="transport_error").inc()
                    raise SearchEngineError(operation, f"transport failure: {exc}") from exc

        if response.is_success or response.status_code in allowed_status:
            SEARCH_ENGINE_REQUESTS.labels(operation=operation, status="ok").inc()
            return response

        SEARCH_ENGINE_REQUESTS.labels(operation=operation, status="error").inc()
        body = _decode_lenient(response)
        raise SearchEngineError(
            operation,
            f"HTTP {response.status_code} from {method} {path}",
            status_code=response.status_code,
            body=body,
        )


def _quote(segment: str) -> str:
    return quote(segment, safe=",*")


def _decode(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    return orjson.loads(response.content)


def _decode_lenient(response: httpx.Response) -> Any:
    try:
        return _decode(response)
    except orjson.JSONDecodeError:
        return response.text
