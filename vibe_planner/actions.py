"""Action values accepted by the trip state store.

Every action is a frozen pydantic model tagged by its ``type`` field. External
surfaces (the chat agent, the map widget) emit plain mappings shaped like
``{"type": "ADD_CHAT_RESULT", "payload": {...}}``; :func:`parse_action` turns
those into action models or raises when they are malformed.
"""
from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from vibe_planner.schemas import (
    City,
    MapBounds,
    PreferenceCategory,
    PreferencePriority,
    WishlistItem,
)


class InvalidActionError(ValueError):
    """Raised when a raw action cannot be turned into an action model."""


class UnknownActionError(InvalidActionError):
    """Raised when a raw action names a type the store does not handle."""


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    # When set, a raw ``payload`` is the value of this single field rather
    # than a mapping of field names.
    payload_field: ClassVar[Optional[str]] = None


# ------- wishlist -------
class AddToWishlist(_Action):
    type: Literal["ADD_TO_WISHLIST"] = "ADD_TO_WISHLIST"
    city: City
    notes: Optional[str] = None


class RemoveFromWishlist(_Action):
    type: Literal["REMOVE_FROM_WISHLIST"] = "REMOVE_FROM_WISHLIST"
    city_id: str


class LoadWishlist(_Action):
    type: Literal["LOAD_WISHLIST"] = "LOAD_WISHLIST"
    payload_field: ClassVar[Optional[str]] = "items"
    items: Tuple[WishlistItem, ...] = ()


# ------- chat results -------
class SetChatResults(_Action):
    type: Literal["SET_CHAT_RESULTS"] = "SET_CHAT_RESULTS"
    payload_field: ClassVar[Optional[str]] = "cities"
    cities: Tuple[City, ...] = ()


class AddChatResult(_Action):
    type: Literal["ADD_CHAT_RESULT"] = "ADD_CHAT_RESULT"
    payload_field: ClassVar[Optional[str]] = "city"
    city: City


# ------- map relations -------
class SetHoveredCity(_Action):
    type: Literal["SET_HOVERED_CITY"] = "SET_HOVERED_CITY"
    payload_field: ClassVar[Optional[str]] = "city_id"
    city_id: Optional[str] = None


class SetMapBounds(_Action):
    type: Literal["SET_MAP_BOUNDS"] = "SET_MAP_BOUNDS"
    payload_field: ClassVar[Optional[str]] = "bounds"
    bounds: MapBounds


# ------- trip stops -------
class AddTripStop(_Action):
    type: Literal["ADD_TRIP_STOP"] = "ADD_TRIP_STOP"
    city: City
    duration_days: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class RemoveTripStop(_Action):
    type: Literal["REMOVE_TRIP_STOP"] = "REMOVE_TRIP_STOP"
    city_id: str


class ReorderTripStop(_Action):
    type: Literal["REORDER_TRIP_STOP"] = "REORDER_TRIP_STOP"
    from_index: int
    to_index: int


class ClearTrip(_Action):
    type: Literal["CLEAR_TRIP"] = "CLEAR_TRIP"


# ------- preferences -------
class SavePreference(_Action):
    type: Literal["SAVE_PREFERENCE"] = "SAVE_PREFERENCE"
    category: PreferenceCategory
    value: str = Field(..., min_length=1)
    priority: PreferencePriority = "nice_to_have"


class RemovePreference(_Action):
    type: Literal["REMOVE_PREFERENCE"] = "REMOVE_PREFERENCE"
    category: PreferenceCategory
    value: str


class ClearPreferences(_Action):
    type: Literal["CLEAR_PREFERENCES"] = "CLEAR_PREFERENCES"
    category: Optional[Union[PreferenceCategory, Literal["all"]]] = "all"


# ------- comparison and conversation -------
class SetComparison(_Action):
    type: Literal["SET_COMPARISON"] = "SET_COMPARISON"
    cities: Tuple[City, ...]
    focus_attributes: Tuple[str, ...] = ()
    is_active: bool = True


class ClearComparison(_Action):
    type: Literal["CLEAR_COMPARISON"] = "CLEAR_COMPARISON"


class AddConversationSummary(_Action):
    type: Literal["ADD_CONVERSATION_SUMMARY"] = "ADD_CONVERSATION_SUMMARY"
    payload_field: ClassVar[Optional[str]] = "text"
    text: str


class ResetAll(_Action):
    type: Literal["RESET_ALL"] = "RESET_ALL"


ACTION_CLASSES: Tuple[type, ...] = (
    AddToWishlist,
    RemoveFromWishlist,
    LoadWishlist,
    SetChatResults,
    AddChatResult,
    SetHoveredCity,
    SetMapBounds,
    AddTripStop,
    RemoveTripStop,
    ReorderTripStop,
    ClearTrip,
    SavePreference,
    RemovePreference,
    ClearPreferences,
    SetComparison,
    ClearComparison,
    AddConversationSummary,
    ResetAll,
)

Action = Annotated[
    Union[
        AddToWishlist,
        RemoveFromWishlist,
        LoadWishlist,
        SetChatResults,
        AddChatResult,
        SetHoveredCity,
        SetMapBounds,
        AddTripStop,
        RemoveTripStop,
        ReorderTripStop,
        ClearTrip,
        SavePreference,
        RemovePreference,
        ClearPreferences,
        SetComparison,
        ClearComparison,
        AddConversationSummary,
        ResetAll,
    ],
    Field(discriminator="type"),
]

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)
_CLASSES_BY_TYPE = {cls.model_fields["type"].default: cls for cls in ACTION_CLASSES}
ACTION_TYPES = frozenset(_CLASSES_BY_TYPE)


def parse_action(raw: Mapping[str, Any]) -> _Action:
    """Validate a raw action mapping.

    Raises ``UnknownActionError`` for unrecognised types and pydantic's
    ``ValidationError`` for malformed payloads.
    """
    if not isinstance(raw, Mapping):
        raise InvalidActionError(f"action must be a mapping, got {type(raw).__name__}")
    action_type = raw.get("type")
    cls = _CLASSES_BY_TYPE.get(action_type)  # type: ignore[arg-type]
    if cls is None:
        raise UnknownActionError(f"unknown action type {action_type!r}")

    if "payload" not in raw:
        body = {key: value for key, value in raw.items() if key != "type"}
    elif cls.payload_field is not None:
        body = {cls.payload_field: raw["payload"]}
    elif isinstance(raw["payload"], Mapping):
        body = dict(raw["payload"])
    elif raw["payload"] is None:
        body = {}
    else:
        raise InvalidActionError(f"{action_type} expects a mapping payload")

    return _ACTION_ADAPTER.validate_python({**body, "type": action_type})
