from __future__ import annotations

import time
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Tuple, get_args

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

SCORE_DIMENSIONS: Tuple[str, ...] = ("culture", "adventure", "nature", "beach", "nightlife")

TimeSlot = Literal["morning", "afternoon", "evening", "night"]
CostTier = Literal["free", "budget", "moderate", "expensive"]
TravelStyle = Literal["relaxed", "balanced", "active"]
Pace = Literal["relaxed", "moderate", "packed"]
PreferenceCategory = Literal["vibe", "geography", "budget", "activity", "travel_style", "constraint"]
PreferencePriority = Literal["must_have", "nice_to_have"]

TRAVEL_STYLES: Tuple[str, ...] = get_args(TravelStyle)


# ------- City records -------
class ScoreVector(BaseModel):
    model_config = ConfigDict(frozen=True)

    culture: int = 5
    adventure: int = 5
    nature: int = 5
    beach: int = 5
    nightlife: int = 5

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        # Index records occasionally carry floats or 0; pin them into 1..10.
        try:
            number = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"score must be numeric, got {value!r}") from exc
        return max(1, min(10, int(round(number))))

    def as_dict(self) -> Dict[str, int]:
        return {dim: getattr(self, dim) for dim in SCORE_DIMENSIONS}


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class City(BaseModel):
    """A destination record as returned by the search index or the chat agent.

    Flat index fields (``culture_score``, ``latitude``/``longitude``,
    ``_geoloc``) are folded into ``scores`` and ``geo`` on validation so both
    the raw index shape and the nested shape are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    object_id: str = Field(..., alias="objectID", min_length=1)
    name: str = Field(..., validation_alias=AliasChoices("name", "city"), min_length=1)
    country: str = ""
    continent: Optional[str] = None
    description: str = ""
    vibe_tags: Tuple[str, ...] = Field(default_factory=tuple, validation_alias=AliasChoices("vibe_tags", "vibeTags"))
    scores: ScoreVector = Field(default_factory=ScoreVector)
    geo: Optional[GeoPoint] = None
    image_url: Optional[str] = Field(None, validation_alias=AliasChoices("image_url", "imageUrl", "image"))

    @model_validator(mode="before")
    @classmethod
    def _fold_index_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "scores" not in data:
            scores = {
                dim: data[f"{dim}_score"]
                for dim in SCORE_DIMENSIONS
                if data.get(f"{dim}_score") is not None
            }
            if scores:
                data["scores"] = scores
        if data.get("geo") is None:
            geoloc = data.get("_geoloc")
            if isinstance(geoloc, dict) and geoloc.get("lat") is not None and geoloc.get("lng") is not None:
                data["geo"] = {"lat": geoloc["lat"], "lng": geoloc["lng"]}
            elif data.get("latitude") is not None and data.get("longitude") is not None:
                data["geo"] = {"lat": data["latitude"], "lng": data["longitude"]}
        return data

    @property
    def name_key(self) -> str:
        return self.name.strip().casefold()


# ------- Store collections -------
class WishlistItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: City
    notes: Optional[str] = None
    added_at: float = Field(default_factory=time.time, alias="addedAt")


class TripStop(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: City
    order: int = Field(..., ge=0)
    duration_days: Optional[int] = Field(None, ge=0, alias="durationDays")
    notes: Optional[str] = None


class MapBounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    north: float = Field(..., ge=-90, le=90)
    south: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)
    west: float = Field(..., ge=-180, le=180)

    def contains(self, point: GeoPoint) -> bool:
        if not (self.south <= point.lat <= self.north):
            return False
        if self.west <= self.east:
            return self.west <= point.lng <= self.east
        # viewport crosses the antimeridian
        return point.lng >= self.west or point.lng <= self.east


class TravelPreference(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: PreferenceCategory
    value: str = Field(..., min_length=1)
    priority: PreferencePriority = "nice_to_have"
    added_at: float = Field(default_factory=time.time, alias="addedAt")


class ComparisonState(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cities: Tuple[City, ...] = ()
    focus_attributes: Tuple[str, ...] = Field((), alias="focusAttributes")
    is_active: bool = Field(False, alias="isActive")


# ------- Itinerary -------
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Activity(_CamelModel):
    id: str
    name: str
    description: str
    time_slot: TimeSlot
    start_time: Optional[str] = None
    duration: int = Field(..., ge=0)
    cost: CostTier
    category: str
    vibe_tags: List[str] = Field(default_factory=list)
    reservation_required: Optional[bool] = None


class MealSuggestion(_CamelModel):
    meal_type: Literal["breakfast", "lunch", "dinner", "snack"]
    suggestion: str
    cuisine_type: str
    price_range: str


class Day(_CamelModel):
    day_number: int = Field(..., ge=1)
    date: Optional[str] = None
    theme: str
    activities: List[Activity] = Field(default_factory=list)
    meals: List[MealSuggestion] = Field(default_factory=list)
    transport_tips: List[str] = Field(default_factory=list)
    estimated_cost: int = 0


class DestinationRef(_CamelModel):
    city: str
    country: str
    object_id: str = Field(..., alias="objectID")


class Itinerary(_CamelModel):
    destination: DestinationRef
    total_days: int
    interests: List[str] = Field(default_factory=list)
    travel_style: TravelStyle
    days: List[Day] = Field(default_factory=list)
    estimated_total_cost: int = 0
    currency: str = "USD"
    generated_at: str

    @model_validator(mode="after")
    def _total_matches_days(self) -> "Itinerary":
        expected = sum(day.estimated_cost for day in self.days)
        if self.estimated_total_cost != expected:
            raise ValueError(
                f"estimated_total_cost {self.estimated_total_cost} does not match day total {expected}"
            )
        return self


class ItineraryInput(_CamelModel):
    city: City
    duration_days: int = 0
    interests: List[str] = Field(default_factory=list)
    travel_style: TravelStyle = "balanced"
    pace: Pace = "moderate"
    start_date: Optional[date] = None

    @field_validator("duration_days", mode="before")
    @classmethod
    def _non_negative(cls, value: Any) -> int:
        try:
            days = int(value or 0)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"duration must be a whole number of days, got {value!r}") from exc
        return max(0, days)
