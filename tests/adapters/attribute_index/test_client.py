from __future__ import annotations

import json

import httpx
import pytest

from geokeeper.adapters.attribute_index import (
    AttributeIndexAPIError,
    AttributeIndexClient,
    HttpAttributeCatalog,
)
from geokeeper.adapters.http_resilience import ResilientClient
from geokeeper.adapters.lookup_cache import ReadThroughCache
from geokeeper.config import AttributeIndexConfig, ResilienceConfig, RetryPolicy

PAYLOAD = {
    "A1": {"name": "Dogs allowed", "is_addable": True, "incompatible_acodes": ["A2"]},
    "A2": {"name": "No dogs", "incompatible_acodes": ["A1"], "icon_url": "ignored"},
    "A4": {"name": "Wheelchair accessible", "is_addable": False},
}


def build_client(
    handler: httpx.MockTransport,
    *,
    base_url: str | None = "https://opencaching.test/okapi/",
) -> AttributeIndexClient:
    config = AttributeIndexConfig(
        consumer_key="key-123",
        resilience=ResilienceConfig(
            name="attribute-index-test",
            base_url=base_url,
            retry=RetryPolicy(total=0),
            cache=None,
        ),
    )
    return AttributeIndexClient(
        config=config,
        client_factory=lambda resilience: ResilientClient(resilience, transport=handler),
    )


def test_fetch_index_sends_consumer_key_and_parses_entries() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=PAYLOAD)

    index = build_client(httpx.MockTransport(handler)).fetch_index(langpref="pl")

    (request,) = requests
    assert request.url.path == "/okapi/services/attrs/attribute_index"
    assert request.url.params["consumer_key"] == "key-123"
    assert request.url.params["only_locally_used"] == "true"
    assert request.url.params["langpref"] == "pl"
    assert request.headers["User-Agent"].startswith("geokeeper/")
    entries = index.to_domain()
    assert entries["A1"].incompatible_acodes == {"A2"}
    assert not entries["A4"].is_addable
    assert entries["A2"].is_addable


def test_fetch_index_rejects_non_object_payload() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["A1"]))

    with pytest.raises(AttributeIndexAPIError):
        build_client(transport).fetch_index()


def test_fetch_index_requires_base_url() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=PAYLOAD))

    with pytest.raises(AttributeIndexAPIError, match="base_url"):
        build_client(transport, base_url=None).fetch_index()


def test_fetch_index_raises_on_http_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(403, text="denied"))

    with pytest.raises(httpx.HTTPStatusError):
        build_client(transport).fetch_index()


def test_http_catalog_fetches_index_once() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, content=json.dumps(PAYLOAD).encode())

    catalog = HttpAttributeCatalog(build_client(httpx.MockTransport(handler)), ReadThroughCache())

    info = catalog.get("A1")
    assert info is not None
    assert info.name == "Dogs allowed"
    assert catalog.get("A9") is None
    assert len(calls) == 1
