from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from vibe_planner.actions import AddTripStop, RemoveTripStop, SetHoveredCity, SetMapBounds
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import City, GeoPoint, Itinerary, MapBounds
from vibe_planner.store import TripStore
from vibe_planner.surfaces import ChatSurface

logger = get_logger(__name__)


@dataclass(frozen=True)
class MapMarker:
    city_id: str
    name: str
    position: GeoPoint
    hovered: bool = False
    in_chat_results: bool = False
    trip_order: Optional[int] = None
    wishlisted: bool = False


@dataclass(frozen=True)
class MapPopup:
    city_id: str
    name: str
    country: str
    description: str
    vibe_tags: Tuple[str, ...]
    scores: Dict[str, int]
    in_trip: bool
    itinerary_summary: Optional[str] = None


class MapChatSyncAdapter:
    """Derives what the map renders from the store and routes map/card events back.

    The hovered city is a relation held by the store, so the map and the chat
    cards never reference each other directly. Popups are transient and live
    here, not in the store.
    """

    def __init__(self, store: TripStore, chat_surface: Optional[ChatSurface] = None) -> None:
        self.store = store
        self.chat_surface = chat_surface
        self.popup: Optional[MapPopup] = None
        self._itineraries: Dict[str, Itinerary] = {}

    # ------- reads -------
    def markers(self) -> List[MapMarker]:
        state = self.store.state
        chat_ids = {city.object_id for city in state.chat_results}
        trip_orders = {stop.city.object_id: stop.order for stop in state.trip_stops}
        wishlisted = {item.city.object_id for item in state.wishlist}

        cities: List[City] = list(state.chat_results)
        cities.extend(stop.city for stop in state.trip_stops)
        cities.extend(item.city for item in state.wishlist)
        cities.extend(state.comparison.cities)

        markers: List[MapMarker] = []
        seen = set()
        for city in cities:
            if city.object_id in seen or city.geo is None:
                continue
            seen.add(city.object_id)
            markers.append(
                MapMarker(
                    city_id=city.object_id,
                    name=city.name,
                    position=city.geo,
                    hovered=city.object_id == state.hovered_city_id,
                    in_chat_results=city.object_id in chat_ids,
                    trip_order=trip_orders.get(city.object_id),
                    wishlisted=city.object_id in wishlisted,
                )
            )
        return markers

    def hovered_city_id(self) -> Optional[str]:
        """The marker to draw highlighted, if the hovered city is on the map at all."""
        for marker in self.markers():
            if marker.hovered:
                return marker.city_id
        return None

    def fit_bounds(self, padding: float = 1.0) -> Optional[MapBounds]:
        """Bounds enclosing the current chat results that have coordinates."""
        points = [city.geo for city in self.store.state.chat_results if city.geo is not None]
        if not points:
            return None
        return MapBounds(
            north=min(90.0, max(p.lat for p in points) + padding),
            south=max(-90.0, min(p.lat for p in points) - padding),
            east=min(180.0, max(p.lng for p in points) + padding),
            west=max(-180.0, min(p.lng for p in points) - padding),
        )

    def route(self) -> List[GeoPoint]:
        """Coordinates of the trip stops in visiting order; empty when there is nothing to connect."""
        stops = sorted(self.store.state.trip_stops, key=lambda stop: stop.order)
        points = [stop.city.geo for stop in stops if stop.city.geo is not None]
        return points if len(points) >= 2 else []

    def attach_itinerary(self, itinerary: Itinerary) -> None:
        self._itineraries[itinerary.destination.object_id] = itinerary

    # ------- writes -------
    def on_marker_hover(self, city_id: Optional[str]) -> None:
        self.store.dispatch(SetHoveredCity(city_id=city_id))

    def on_card_hover(self, city_id: Optional[str]) -> None:
        self.on_marker_hover(city_id)

    def on_marker_click(self, city_id: str, *, toggle_trip: bool = False) -> Optional[MapPopup]:
        state = self.store.state
        city = state.find_city(city_id)
        if city is None:
            logger.debug("Marker click for unknown city %s", city_id)
            self.popup = None
            return None

        in_trip = any(stop.city.object_id == city_id for stop in state.trip_stops)
        if toggle_trip:
            if in_trip:
                self.store.dispatch(RemoveTripStop(city_id=city_id))
            else:
                self.store.dispatch(AddTripStop(city=city))
            in_trip = not in_trip

        self.popup = MapPopup(
            city_id=city.object_id,
            name=city.name,
            country=city.country,
            description=city.description,
            vibe_tags=city.vibe_tags[:3],
            scores=city.scores.as_dict(),
            in_trip=in_trip,
            itinerary_summary=self._itinerary_summary(city.object_id),
        )
        return self.popup

    def close_popup(self) -> None:
        self.popup = None

    def on_viewport_settled(self, bounds: Union[MapBounds, Mapping[str, Any]]) -> None:
        if not isinstance(bounds, MapBounds):
            try:
                bounds = MapBounds.model_validate(bounds)
            except ValidationError as exc:
                logger.debug("Dropping malformed viewport bounds: %s", exc.errors()[:1])
                return
        self.store.dispatch(SetMapBounds(bounds=bounds))

    def ask_about(self, city_id: str) -> bool:
        """Originate a chat turn about a city from its popup."""
        city = self.store.state.find_city(city_id)
        if city is None or self.chat_surface is None:
            return False
        self.chat_surface.submit_query(f"Tell me more about {city.name}, {city.country}".rstrip(", "))
        return True

    def _itinerary_summary(self, city_id: str) -> Optional[str]:
        itinerary = self._itineraries.get(city_id)
        if itinerary is None or not itinerary.days:
            return None
        return (
            f"{itinerary.total_days}-day itinerary, about "
            f"{itinerary.estimated_total_cost} {itinerary.currency} in activities"
        )
