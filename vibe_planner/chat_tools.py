"""Handlers for the tools the conversational agent can call.

Each handler fetches what it needs from the city index, dispatches the
corresponding action into the store and returns the tool output that is
handed back to the agent.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from vibe_planner.actions import AddTripStop, SetComparison
from vibe_planner.itinerary import generate_itinerary as build_itinerary
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import SCORE_DIMENSIONS, TRAVEL_STYLES, City, ItineraryInput
from vibe_planner.store import TripStore

logger = get_logger(__name__)

SCORE_ATTRIBUTES = [f"{dimension}_score" for dimension in SCORE_DIMENSIONS]


class CityFetcher(Protocol):
    async def fetch_city_by_id(self, city_id: str) -> Optional[City]:
        ...

    async def fetch_cities_by_ids(self, city_ids: Iterable[str]) -> List[City]:
        ...


def _trip_plan_summary(store: TripStore) -> List[Dict[str, Any]]:
    return [
        {"cityId": stop.city.object_id, "cityName": stop.city.name, "days": stop.duration_days}
        for stop in store.state.trip_stops
    ]


def _attribute_value(city: City, attribute: str) -> Any:
    if attribute in SCORE_ATTRIBUTES:
        return city.scores.as_dict()[attribute[: -len("_score")]]
    return getattr(city, attribute, None)


def _recommendation(cities: Sequence[City], attributes: Sequence[str]) -> Optional[str]:
    """Name what each of exactly two cities scores higher on."""
    if len(cities) != 2:
        return None
    first, second = cities
    advantages: Dict[str, List[str]] = {first.name: [], second.name: []}
    for attribute in attributes:
        if attribute not in SCORE_ATTRIBUTES:
            continue
        a, b = _attribute_value(first, attribute), _attribute_value(second, attribute)
        label = attribute[: -len("_score")]
        if a > b:
            advantages[first.name].append(label)
        elif b > a:
            advantages[second.name].append(label)
    summaries = [f"{name} excels in {', '.join(attrs)}" for name, attrs in advantages.items() if attrs]
    return ". ".join(summaries) + "." if summaries else None


def save_preference(store: TripStore, category: str, value: str, priority: Optional[str] = None) -> Dict[str, Any]:
    store.dispatch(
        {"type": "SAVE_PREFERENCE", "payload": {"category": category, "value": value, "priority": priority or "nice_to_have"}}
    )
    saved = any(p.category == category and p.value == value for p in store.state.preferences)
    if not saved:
        return {"success": False, "message": f'Could not save preference {category} = "{value}"'}
    return {
        "success": True,
        "message": f'Saved preference: {category} = "{value}"',
        "currentPreferences": [f"{p.category}: {p.value}" for p in store.state.preferences],
    }


async def compare_cities(
    store: TripStore,
    fetcher: CityFetcher,
    city_ids: Sequence[str],
    focus_attributes: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    if not city_ids:
        return {"cities": [], "comparison": {"attributes": [], "data": {}, "recommendation": "No cities specified"}}

    cities = await fetcher.fetch_cities_by_ids(city_ids)
    if len(cities) < 2:
        logger.info("Comparison needs two cities; found %d of %d", len(cities), len(city_ids))
        return {
            "cities": [],
            "comparison": {"attributes": [], "data": {}, "recommendation": "Could not find enough cities to compare."},
        }

    attributes = list(focus_attributes) if focus_attributes else list(SCORE_ATTRIBUTES)
    data = {
        attribute: {city.object_id: _attribute_value(city, attribute) for city in cities}
        for attribute in attributes
    }
    store.dispatch(SetComparison(cities=tuple(cities), focus_attributes=tuple(attributes)))
    return {
        "cities": [city.model_dump(mode="json", by_alias=True) for city in cities],
        "comparison": {
            "attributes": attributes,
            "data": data,
            "recommendation": _recommendation(cities, attributes),
        },
    }


async def add_to_trip_plan(
    store: TripStore,
    fetcher: CityFetcher,
    city_id: str,
    duration_days: Optional[int] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    if not city_id:
        return {"success": False, "message": "No city specified", "tripPlan": _trip_plan_summary(store)}

    city = await fetcher.fetch_city_by_id(city_id)
    if city is None:
        return {
            "success": False,
            "message": f'Could not find city with ID "{city_id}"',
            "tripPlan": _trip_plan_summary(store),
        }

    store.dispatch(AddTripStop(city=city, duration_days=duration_days, notes=notes))
    suffix = f" for {duration_days} days" if duration_days else ""
    return {
        "success": True,
        "message": f"Added {city.name} to your trip plan{suffix}",
        "tripPlan": _trip_plan_summary(store),
    }


async def generate_itinerary(
    fetcher: CityFetcher,
    city_id: str,
    duration_days: int,
    interests: Optional[Sequence[str]] = None,
    travel_style: Optional[str] = None,
) -> Dict[str, Any]:
    if not city_id:
        return {"cityId": "", "cityName": "Unknown", "days": []}

    city = await fetcher.fetch_city_by_id(city_id)
    if city is None:
        return {"cityId": city_id, "cityName": "Unknown", "days": []}

    itinerary = build_itinerary(
        ItineraryInput(
            city=city,
            duration_days=duration_days,
            interests=list(interests or []),
            travel_style=travel_style if travel_style in TRAVEL_STYLES else "balanced",
        )
    )
    payload = itinerary.model_dump(mode="json", by_alias=True)
    return {"cityId": city.object_id, "cityName": city.name, "days": payload["days"], "itinerary": payload}


def clear_preferences(store: TripStore, category: Optional[str] = None) -> Dict[str, Any]:
    clear_all = category in (None, "all")
    preferences = store.state.preferences
    cleared = len(preferences) if clear_all else sum(1 for p in preferences if p.category == category)

    store.dispatch({"type": "CLEAR_PREFERENCES", "payload": {"category": "all" if clear_all else category}})

    if clear_all:
        message = f"Cleared all {cleared} preferences. Starting fresh!"
    else:
        message = f"Cleared {cleared} {category} preference{'' if cleared == 1 else 's'}"
    return {"success": True, "message": message, "clearedCount": cleared}
