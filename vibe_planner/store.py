"""Trip state store: the single source of truth shared by chat, map and wizard."""
from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from vibe_planner.actions import (
    ACTION_CLASSES,
    AddChatResult,
    AddConversationSummary,
    AddToWishlist,
    AddTripStop,
    ClearComparison,
    ClearPreferences,
    ClearTrip,
    InvalidActionError,
    LoadWishlist,
    RemoveFromWishlist,
    RemovePreference,
    RemoveTripStop,
    ReorderTripStop,
    ResetAll,
    SavePreference,
    SetChatResults,
    SetComparison,
    SetHoveredCity,
    SetMapBounds,
    parse_action,
)
from vibe_planner.config import DEFAULT_CHAT_RESULTS_CAP
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import (
    City,
    ComparisonState,
    MapBounds,
    TravelPreference,
    TripStop,
    WishlistItem,
)

logger = get_logger(__name__)

MAX_CONVERSATION_SUMMARY = 10


class TripState(BaseModel):
    model_config = ConfigDict(frozen=True)

    wishlist: Tuple[WishlistItem, ...] = ()
    preferences: Tuple[TravelPreference, ...] = ()
    chat_results: Tuple[City, ...] = ()
    comparison: ComparisonState = ComparisonState()
    hovered_city_id: Optional[str] = None
    map_bounds: Optional[MapBounds] = None
    trip_stops: Tuple[TripStop, ...] = ()
    conversation_summary: Tuple[str, ...] = ()

    @property
    def active_preferences_text(self) -> str:
        return ", ".join(f"{p.category}: {p.value}" for p in self.preferences)

    @property
    def has_preferences(self) -> bool:
        return bool(self.preferences)

    @property
    def has_trip_plan(self) -> bool:
        return bool(self.trip_stops)

    @property
    def total_trip_days(self) -> int:
        return sum(stop.duration_days or 0 for stop in self.trip_stops)

    def find_city(self, city_id: str) -> Optional[City]:
        """Look a city up by objectID among every collection the store references."""
        candidates: List[City] = list(self.chat_results)
        candidates.extend(stop.city for stop in self.trip_stops)
        candidates.extend(item.city for item in self.wishlist)
        candidates.extend(self.comparison.cities)
        for city in candidates:
            if city.object_id == city_id:
                return city
        return None


INITIAL_STATE = TripState()

_Handler = Callable[..., TripState]
_HANDLERS: Dict[type, _Handler] = {}


def _handles(action_cls: type) -> Callable[[_Handler], _Handler]:
    def register(fn: _Handler) -> _Handler:
        _HANDLERS[action_cls] = fn
        return fn
    return register


def _renumber(stops) -> Tuple[TripStop, ...]:
    return tuple(
        stop if stop.order == index else stop.model_copy(update={"order": index})
        for index, stop in enumerate(stops)
    )


# ------- wishlist -------
@_handles(AddToWishlist)
def _add_to_wishlist(state: TripState, action: AddToWishlist, **_: Any) -> TripState:
    entry = WishlistItem(city=action.city, notes=action.notes)
    wishlist = list(state.wishlist)
    for index, item in enumerate(wishlist):
        if item.city.object_id == action.city.object_id:
            wishlist[index] = entry
            break
    else:
        wishlist.append(entry)
    return state.model_copy(update={"wishlist": tuple(wishlist)})


@_handles(RemoveFromWishlist)
def _remove_from_wishlist(state: TripState, action: RemoveFromWishlist, **_: Any) -> TripState:
    wishlist = tuple(item for item in state.wishlist if item.city.object_id != action.city_id)
    if len(wishlist) == len(state.wishlist):
        return state
    return state.model_copy(update={"wishlist": wishlist})


@_handles(LoadWishlist)
def _load_wishlist(state: TripState, action: LoadWishlist, **_: Any) -> TripState:
    by_id: Dict[str, WishlistItem] = {}
    for item in action.items:
        by_id[item.city.object_id] = item
    return state.model_copy(update={"wishlist": tuple(by_id.values())})


# ------- chat results -------
@_handles(SetChatResults)
def _set_chat_results(state: TripState, action: SetChatResults, **_: Any) -> TripState:
    return state.model_copy(update={"chat_results": tuple(action.cities)})


@_handles(AddChatResult)
def _add_chat_result(
    state: TripState,
    action: AddChatResult,
    *,
    max_chat_results: int = DEFAULT_CHAT_RESULTS_CAP,
    **_: Any,
) -> TripState:
    key = action.city.name_key
    if any(city.name_key == key for city in state.chat_results):
        return state
    results = (*state.chat_results, action.city)
    if len(results) > max_chat_results:
        results = results[len(results) - max_chat_results:]
    return state.model_copy(update={"chat_results": results})


# ------- map relations -------
@_handles(SetHoveredCity)
def _set_hovered_city(state: TripState, action: SetHoveredCity, **_: Any) -> TripState:
    if state.hovered_city_id == action.city_id:
        return state
    return state.model_copy(update={"hovered_city_id": action.city_id})


@_handles(SetMapBounds)
def _set_map_bounds(state: TripState, action: SetMapBounds, **_: Any) -> TripState:
    return state.model_copy(update={"map_bounds": action.bounds})


# ------- trip stops -------
@_handles(AddTripStop)
def _add_trip_stop(state: TripState, action: AddTripStop, **_: Any) -> TripState:
    stops = list(state.trip_stops)
    for index, stop in enumerate(stops):
        if stop.city.object_id == action.city.object_id:
            stops[index] = TripStop(
                city=action.city,
                order=index,
                duration_days=action.duration_days,
                notes=action.notes,
            )
            break
    else:
        stops.append(
            TripStop(
                city=action.city,
                order=len(stops),
                duration_days=action.duration_days,
                notes=action.notes,
            )
        )
    return state.model_copy(update={"trip_stops": _renumber(stops)})


@_handles(RemoveTripStop)
def _remove_trip_stop(state: TripState, action: RemoveTripStop, **_: Any) -> TripState:
    stops = [stop for stop in state.trip_stops if stop.city.object_id != action.city_id]
    if len(stops) == len(state.trip_stops):
        return state
    return state.model_copy(update={"trip_stops": _renumber(stops)})


@_handles(ReorderTripStop)
def _reorder_trip_stop(state: TripState, action: ReorderTripStop, **_: Any) -> TripState:
    count = len(state.trip_stops)
    if not (0 <= action.from_index < count and 0 <= action.to_index < count):
        return state
    if action.from_index == action.to_index:
        return state
    stops = list(state.trip_stops)
    moved = stops.pop(action.from_index)
    stops.insert(action.to_index, moved)
    return state.model_copy(update={"trip_stops": _renumber(stops)})


@_handles(ClearTrip)
def _clear_trip(state: TripState, action: ClearTrip, **_: Any) -> TripState:
    if not state.trip_stops:
        return state
    return state.model_copy(update={"trip_stops": ()})


# ------- preferences -------
@_handles(SavePreference)
def _save_preference(state: TripState, action: SavePreference, **_: Any) -> TripState:
    for pref in state.preferences:
        if pref.category == action.category and pref.value == action.value:
            return state
    preference = TravelPreference(category=action.category, value=action.value, priority=action.priority)
    return state.model_copy(update={"preferences": (*state.preferences, preference)})


@_handles(RemovePreference)
def _remove_preference(state: TripState, action: RemovePreference, **_: Any) -> TripState:
    preferences = tuple(
        p for p in state.preferences
        if not (p.category == action.category and p.value == action.value)
    )
    if len(preferences) == len(state.preferences):
        return state
    return state.model_copy(update={"preferences": preferences})


@_handles(ClearPreferences)
def _clear_preferences(state: TripState, action: ClearPreferences, **_: Any) -> TripState:
    if action.category in (None, "all"):
        preferences: Tuple[TravelPreference, ...] = ()
    else:
        preferences = tuple(p for p in state.preferences if p.category != action.category)
    return state.model_copy(update={"preferences": preferences})


# ------- comparison and conversation -------
@_handles(SetComparison)
def _set_comparison(state: TripState, action: SetComparison, **_: Any) -> TripState:
    comparison = ComparisonState(
        cities=action.cities,
        focus_attributes=action.focus_attributes,
        is_active=action.is_active,
    )
    return state.model_copy(update={"comparison": comparison})


@_handles(ClearComparison)
def _clear_comparison(state: TripState, action: ClearComparison, **_: Any) -> TripState:
    return state.model_copy(update={"comparison": ComparisonState()})


@_handles(AddConversationSummary)
def _add_conversation_summary(state: TripState, action: AddConversationSummary, **_: Any) -> TripState:
    summary = (*state.conversation_summary, action.text)[-MAX_CONVERSATION_SUMMARY:]
    return state.model_copy(update={"conversation_summary": summary})


@_handles(ResetAll)
def _reset_all(state: TripState, action: ResetAll, **_: Any) -> TripState:
    # The wishlist is persisted on its own and the viewport belongs to the map.
    return TripState(wishlist=state.wishlist, map_bounds=state.map_bounds)


_unhandled = [cls.__name__ for cls in ACTION_CLASSES if cls not in _HANDLERS]
if _unhandled:  # pragma: no cover - guards against adding an action without a handler
    raise RuntimeError(f"trip_reducer has no handler for: {', '.join(_unhandled)}")


def trip_reducer(
    state: TripState,
    action: Any,
    *,
    max_chat_results: int = DEFAULT_CHAT_RESULTS_CAP,
) -> TripState:
    """Return the state that results from applying ``action`` to ``state``.

    Unknown actions return ``state`` itself, so callers can detect a no-op by
    identity.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        logger.debug("Ignoring unknown action %r", action)
        return state
    return handler(state, action, max_chat_results=max_chat_results)


Listener = Callable[[TripState, TripState], None]
RawAction = Union[Mapping[str, Any], Any]


class TripStore:
    """Holds the current :class:`TripState` and applies actions in dispatch order.

    A listener that dispatches while being notified does not interleave with
    the action being processed: its action is queued and applied after every
    listener has seen the current change.
    """

    def __init__(
        self,
        initial_state: Optional[TripState] = None,
        *,
        max_chat_results: int = DEFAULT_CHAT_RESULTS_CAP,
    ) -> None:
        self._state = initial_state or INITIAL_STATE
        self._max_chat_results = max_chat_results
        self._listeners: List[Listener] = []
        self._pending: Deque[RawAction] = deque()
        self._dispatching = False

    @property
    def state(self) -> TripState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(previous, current)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: RawAction) -> TripState:
        self._pending.append(action)
        if self._dispatching:
            return self._state
        self._dispatching = True
        try:
            while self._pending:
                self._apply(self._pending.popleft())
        finally:
            self._dispatching = False
        return self._state

    def _apply(self, raw: RawAction) -> None:
        if isinstance(raw, Mapping):
            try:
                action = parse_action(raw)
            except (InvalidActionError, ValidationError) as exc:
                logger.debug("Dropping malformed action %s: %s", raw.get("type"), exc)
                return
        else:
            action = raw

        previous = self._state
        current = trip_reducer(previous, action, max_chat_results=self._max_chat_results)
        if current is previous:
            return
        self._state = current
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                logger.warning("Store listener %r failed", listener, exc_info=True)
