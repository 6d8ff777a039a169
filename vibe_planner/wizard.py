"""Trip setup wizard: turns the collected answers into a generated itinerary."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from vibe_planner.itinerary import generate_itinerary
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import City, Itinerary, ItineraryInput, Pace, TravelStyle

logger = get_logger(__name__)

BudgetLevel = Literal["budget", "moderate", "luxury", "unlimited"]
Mobility = Literal["full", "limited", "wheelchair"]

DEFAULT_TRIP_STYLE = "Cultural Immersion"

# trip style option -> itinerary interests
STYLE_INTERESTS: Dict[str, List[str]] = {
    "Cultural Immersion": ["culture"],
    "Adventure & Outdoors": ["adventure", "nature"],
    "Food & Culinary": ["food"],
    "Relaxation & Wellness": ["beach", "nature"],
    "Nightlife & Entertainment": ["nightlife"],
    "Shopping & Markets": ["shopping"],
    "Photography & Sightseeing": ["culture", "nature"],
    "Family-Friendly": ["nature", "culture"],
    "Romantic Getaway": ["food", "culture"],
    "Business + Leisure": ["culture", "food"],
}


class Travelers(BaseModel):
    adults: int = Field(2, ge=1)
    children: int = Field(0, ge=0)
    children_ages: Optional[List[int]] = Field(None, alias="childrenAges")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("children_ages")
    @classmethod
    def _ages_in_range(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        if value and any(age < 0 or age > 17 for age in value):
            raise ValueError("children ages must be between 0 and 17")
        return value


def _as_date(value: Any) -> Any:
    # wizard dates arrive as ISO datetimes; only the calendar day matters
    if isinstance(value, str) and len(value) > 10 and value[10] == "T":
        return value[:10]
    return value


class TripSetup(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    destination_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    travelers: Travelers = Field(default_factory=Travelers)
    budget_level: BudgetLevel = "moderate"
    trip_style: List[str] = Field(default_factory=lambda: [DEFAULT_TRIP_STYLE])
    pace: Pace = "moderate"
    interests: List[str] = Field(default_factory=list)
    mobility: Mobility = "full"

    @model_validator(mode="before")
    @classmethod
    def _unfold_dates(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("dates"), dict):
            data = dict(data)
            dates = data.pop("dates")
            data.setdefault("startDate", dates.get("start"))
            data.setdefault("endDate", dates.get("end"))
        return data

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        return _as_date(value)

    @field_validator("trip_style")
    @classmethod
    def _known_styles(cls, value: List[str]) -> List[str]:
        unknown = [style for style in value if style not in STYLE_INTERESTS]
        if unknown:
            raise ValueError(f"unknown trip style(s): {', '.join(unknown)}")
        return value or [DEFAULT_TRIP_STYLE]

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "TripSetup":
        if self.end_date < self.start_date:
            raise ValueError("end date must not be before start date")
        return self

    @property
    def duration_days(self) -> int:
        """Both the first and the last day count."""
        return (self.end_date - self.start_date).days + 1


def travel_style_for(trip_styles: List[str]) -> TravelStyle:
    if "Relaxation & Wellness" in trip_styles:
        return "relaxed"
    if "Adventure & Outdoors" in trip_styles:
        return "active"
    return "balanced"


def interests_for(setup: TripSetup) -> List[str]:
    interests: Dict[str, None] = {}
    for style in setup.trip_style:
        for interest in STYLE_INTERESTS[style]:
            interests.setdefault(interest)
    for interest in setup.interests:
        interests.setdefault(interest.strip().lower())
    return [interest for interest in interests if interest]


def complete_wizard(setup: TripSetup, city: City) -> Itinerary:
    if city.object_id != setup.destination_id:
        raise ValueError(f"wizard was set up for {setup.destination_id!r}, got city {city.object_id!r}")

    itinerary_input = ItineraryInput(
        city=city,
        duration_days=setup.duration_days,
        interests=interests_for(setup),
        travel_style=travel_style_for(setup.trip_style),
        pace=setup.pace,
        start_date=setup.start_date,
    )
    logger.info(
        "Wizard completed for %s: %d days, styles=%s",
        city.name,
        setup.duration_days,
        ", ".join(setup.trip_style),
    )
    return generate_itinerary(itinerary_input)
