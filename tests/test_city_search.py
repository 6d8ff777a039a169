import asyncio
from typing import Any, List

import httpx
import pytest

from vibe_planner.tools.city_search import CitySearchClient


class DummyResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://example.invalid")
            raise httpx.HTTPStatusError("error", request=request, response=httpx.Response(self.status_code, request=request))
        return None

    def json(self):
        return self._payload


class DummyAsyncClient:
    def __init__(self, response: DummyResponse, calls: List[tuple], *args, **kwargs):
        self.response = response
        self.calls = calls

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def get(self, url, headers=None):
        self.calls.append(("GET", url, None, headers))
        return self.response

    async def post(self, url, json=None, headers=None):
        self.calls.append(("POST", url, json, headers))
        return self.response


def _patch(monkeypatch, payload: Any, status_code: int = 200) -> List[tuple]:
    calls: List[tuple] = []
    response = DummyResponse(payload, status_code)
    monkeypatch.setattr(httpx, "AsyncClient", lambda *a, **kw: DummyAsyncClient(response, calls, *a, **kw))
    return calls


def _client() -> CitySearchClient:
    return CitySearchClient("APPID", "search-key", index_name="cities")


def test_fetch_city_by_id_validates_record(monkeypatch):
    calls = _patch(
        monkeypatch,
        {"objectID": "reykjavik", "city": "Reykjavik", "country": "Iceland", "nature_score": 10, "_geoloc": {"lat": 64.1, "lng": -21.9}},
    )

    city = asyncio.run(_client().fetch_city_by_id("reykjavik"))

    assert city.name == "Reykjavik"
    assert city.scores.nature == 10
    assert city.geo.lat == 64.1
    method, url, _, headers = calls[0]
    assert method == "GET"
    assert url == "https://APPID-dsn.algolia.net/1/indexes/cities/reykjavik"
    assert headers["X-Algolia-API-Key"] == "search-key"


def test_fetch_city_by_id_not_found_and_errors_are_none(monkeypatch):
    _patch(monkeypatch, {"message": "ObjectID does not exist"}, status_code=404)
    assert asyncio.run(_client().fetch_city_by_id("atlantis")) is None

    _patch(monkeypatch, {}, status_code=500)
    assert asyncio.run(_client().fetch_city_by_id("reykjavik")) is None


def test_fetch_cities_by_ids_keeps_order_and_skips_missing(monkeypatch):
    calls = _patch(
        monkeypatch,
        {
            "results": [
                {"objectID": "b", "city": "Bergen"},
                None,
                {"objectID": "a", "city": "Aarhus"},
                {"objectID": "broken"},
            ]
        },
    )

    cities = asyncio.run(_client().fetch_cities_by_ids(["b", "missing", "a", "broken"]))

    assert [c.object_id for c in cities] == ["b", "a"]
    _, url, body, _ = calls[0]
    assert url.endswith("/1/indexes/*/objects")
    assert body["requests"][0] == {"indexName": "cities", "objectID": "b"}


def test_fetch_cities_by_ids_without_ids_skips_network(monkeypatch):
    calls = _patch(monkeypatch, {"results": []})
    assert asyncio.run(_client().fetch_cities_by_ids([])) == []
    assert calls == []


def test_search_posts_query(monkeypatch):
    calls = _patch(monkeypatch, {"hits": [{"objectID": "oslo", "city": "Oslo"}]})

    cities = asyncio.run(_client().search("fjords", hits_per_page=3, filters="nature_score > 7"))

    assert [c.name for c in cities] == ["Oslo"]
    _, url, body, _ = calls[0]
    assert url.endswith("/cities/query")
    assert body == {"query": "fjords", "hitsPerPage": 3, "filters": "nature_score > 7"}


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("ALGOLIA_APP_ID", raising=False)
    monkeypatch.delenv("ALGOLIA_SEARCH_KEY", raising=False)
    client = CitySearchClient()
    with pytest.raises(RuntimeError):
        asyncio.run(client.search("anything"))
