from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from vibe_planner.config import Settings
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import City

logger = get_logger(__name__)


def _to_cities(records: Iterable[Any]) -> List[City]:
    cities: List[City] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        try:
            cities.append(City.model_validate(record))
        except ValidationError:
            logger.debug("Skipping malformed city record %s", record.get("objectID"))
    return cities


class CitySearchClient:
    """
    Async reader for the destination index (Algolia REST API).

    Lookups degrade to ``None``/``[]`` on network or HTTP errors so callers
    can treat "not found" and "unreachable" alike; missing credentials are a
    configuration error and raise.
    """

    def __init__(
        self,
        app_id: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        index_name: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        settings = Settings.from_env()
        self.app_id = app_id or settings.algolia_app_id
        self.api_key = api_key or settings.algolia_search_key
        self.index_name = index_name or settings.algolia_index_name
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return f"https://{self.app_id}-dsn.algolia.net/1/indexes"

    def _headers(self) -> Dict[str, str]:
        if not self.app_id or not self.api_key:
            raise RuntimeError("ALGOLIA_APP_ID and ALGOLIA_SEARCH_KEY must be configured")
        return {
            "X-Algolia-Application-Id": self.app_id,
            "X-Algolia-API-Key": self.api_key,
            "User-Agent": "vibe-planner/1.0",
        }

    async def fetch_city_by_id(self, city_id: str) -> Optional[City]:
        headers = self._headers()
        url = f"{self.base_url}/{self.index_name}/{city_id}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                data = response.json()
        except Exception:
            logger.warning("Failed to fetch city %s", city_id, exc_info=True)
            return None
        cities = _to_cities([data])
        return cities[0] if cities else None

    async def fetch_cities_by_ids(self, city_ids: Iterable[str]) -> List[City]:
        """Fetch several cities in one round trip, keeping the requested order."""
        ids = [city_id for city_id in city_ids if city_id]
        if not ids:
            return []
        headers = self._headers()
        payload = {"requests": [{"indexName": self.index_name, "objectID": city_id} for city_id in ids]}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/*/objects", json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except Exception:
            logger.warning("Failed to fetch cities %s", ", ".join(ids), exc_info=True)
            return []
        return _to_cities(result for result in data.get("results", []) if result)

    async def search(self, query: str, *, hits_per_page: int = 5, filters: Optional[str] = None) -> List[City]:
        headers = self._headers()
        payload: Dict[str, Any] = {"query": query, "hitsPerPage": hits_per_page}
        if filters:
            payload["filters"] = filters
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(f"{self.base_url}/{self.index_name}/query", json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except Exception:
            logger.warning("City search failed for %r", query, exc_info=True)
            return []
        return _to_cities(data.get("hits", []))
