"""Deterministic day-by-day itinerary generation."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set

from vibe_planner.itinerary.catalog import (
    ACTIVITY_TEMPLATES,
    CATEGORIES,
    COST_VALUES,
    INTEREST_BONUS,
    MEALS,
    PACE_ACTIVITY_COUNT,
    SLOT_SOURCES,
    THEMES,
    VIBE_TAG_BONUS,
    ActivityTemplate,
    categories_for_terms,
    transport_tips_for,
)
from vibe_planner.logging_utils import get_logger
from vibe_planner.schemas import (
    Activity,
    City,
    Day,
    DestinationRef,
    Itinerary,
    ItineraryInput,
    MealSuggestion,
)

logger = get_logger(__name__)

# Order in which slots are filled as the day's activity count grows.
_SLOT_SEQUENCE = ("morning", "afternoon", "evening", "afternoon", "morning", "evening", "afternoon")
_TOP_CATEGORY_COUNT = 3


def category_weights(city: City, interests: Iterable[str]) -> Dict[str, int]:
    """Score every category from the city's score vector plus interest and vibe-tag bonuses."""
    weights = {category: 0 for category in CATEGORIES}
    weights.update(city.scores.as_dict())
    for category in categories_for_terms(interests):
        weights[category] += INTEREST_BONUS
    for category in categories_for_terms(city.vibe_tags):
        weights[category] += VIBE_TAG_BONUS
    return weights


def ranked_categories(city: City, interests: Iterable[str]) -> List[str]:
    interests = list(interests)
    weights = category_weights(city, interests)
    ranked = sorted(
        (category for category in CATEGORIES if weights[category] > 0),
        key=lambda category: (-weights[category], CATEGORIES.index(category)),
    )
    # top categories by weight, plus anything the traveller explicitly asked for
    wanted = set(ranked[:_TOP_CATEGORY_COUNT]) | set(categories_for_terms(interests))
    return [category for category in ranked if category in wanted]


def get_day_theme(city: City, day_number: int, interests: Iterable[str]) -> str:
    categories = ranked_categories(city, interests) or ["culture"]
    category = categories[(day_number - 1) % len(categories)]
    themes = THEMES.get(category, THEMES["culture"])
    return themes[((day_number - 1) // len(categories)) % len(themes)]


def calculate_day_cost(activities: Iterable[Activity]) -> int:
    return sum(COST_VALUES[activity.cost] for activity in activities)


def activities_per_day(pace: str, travel_style: str, day_number: int) -> int:
    low, high = PACE_ACTIVITY_COUNT[pace]
    if travel_style == "relaxed":
        return low
    if travel_style == "active":
        return high
    return low + (day_number - 1) % (high - low + 1)


def _slot_candidates(categories: List[str], lead: str) -> Dict[str, List[ActivityTemplate]]:
    ordered = [lead] + [category for category in categories if category != lead] + ["general"]
    candidates: Dict[str, List[ActivityTemplate]] = {}
    for slot, sources in SLOT_SOURCES.items():
        seen: Set[str] = set()
        pool: List[ActivityTemplate] = []
        for category in ordered:
            for source in sources:
                for template in ACTIVITY_TEMPLATES.get((category, source), ()):
                    if template.id not in seen:
                        seen.add(template.id)
                        pool.append(template)
        candidates[slot] = pool
    return candidates


def _pick(
    pool: List[ActivityTemplate],
    used: Set[str],
    today: Set[str],
    day_number: int,
) -> Optional[ActivityTemplate]:
    fresh = [t for t in pool if t.id not in used and t.id not in today]
    if fresh:
        return fresh[0]
    # pool exhausted across the trip: allow repeats, but never twice in one day
    reusable = [t for t in pool if t.id not in today]
    if reusable:
        return reusable[(day_number - 1) % len(reusable)]
    return None


def _build_activity(template: ActivityTemplate, day_number: int) -> Activity:
    return Activity(
        id=f"{template.id}-day{day_number}",
        name=template.name,
        description=template.description,
        time_slot=template.time_slot,
        start_time=template.start_time,
        duration=template.duration,
        cost=template.cost,
        category=template.category,
        vibe_tags=list(template.vibe_tags),
        reservation_required=template.reservation_required,
    )


def select_activities_for_day(
    city: City,
    day_number: int,
    interests: List[str],
    pace: str,
    travel_style: str,
    used: Set[str],
) -> List[Activity]:
    """Pick the day's activities, recording chosen template ids in ``used``."""
    categories = ranked_categories(city, interests) or ["culture"]
    lead = categories[(day_number - 1) % len(categories)]
    candidates = _slot_candidates(categories, lead)
    target = activities_per_day(pace, travel_style, day_number)

    chosen: List[ActivityTemplate] = []
    today: Set[str] = set()
    exhausted: Set[str] = set()
    index = 0
    while len(chosen) < target and len(exhausted) < len(SLOT_SOURCES):
        slot = _SLOT_SEQUENCE[index % len(_SLOT_SEQUENCE)]
        index += 1
        if slot in exhausted:
            continue
        template = _pick(candidates[slot], used, today, day_number)
        if template is None:
            exhausted.add(slot)
            continue
        chosen.append(template)
        today.add(template.id)

    used.update(today)
    chosen.sort(key=lambda template: template.start_time)
    return [_build_activity(template, day_number) for template in chosen]


def generate_itinerary(
    itinerary_input: ItineraryInput,
    *,
    generated_at: Optional[datetime] = None,
) -> Itinerary:
    """Turn a destination and trip parameters into a day-by-day schedule.

    The same input always yields the same days. A zero duration yields an
    itinerary with no days.
    """
    city = itinerary_input.city
    interests = list(itinerary_input.interests)
    used: Set[str] = set()
    days: List[Day] = []

    for day_number in range(1, itinerary_input.duration_days + 1):
        activities = select_activities_for_day(
            city,
            day_number,
            interests,
            itinerary_input.pace,
            itinerary_input.travel_style,
            used,
        )
        date = None
        if itinerary_input.start_date is not None:
            date = (itinerary_input.start_date + timedelta(days=day_number - 1)).isoformat()
        days.append(
            Day(
                day_number=day_number,
                date=date,
                theme=get_day_theme(city, day_number, interests),
                activities=activities,
                meals=[MealSuggestion(**meal) for meal in MEALS],
                transport_tips=list(transport_tips_for(city.continent)) if day_number == 1 else [],
                estimated_cost=calculate_day_cost(activities),
            )
        )

    stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
    itinerary = Itinerary(
        destination=DestinationRef(city=city.name, country=city.country, object_id=city.object_id),
        total_days=itinerary_input.duration_days,
        interests=interests,
        travel_style=itinerary_input.travel_style,
        days=days,
        estimated_total_cost=sum(day.estimated_cost for day in days),
        currency="USD",
        generated_at=stamp,
    )
    logger.info(
        "Generated %d-day itinerary for %s (%s pace, %s style) costing %d %s",
        itinerary.total_days,
        city.name,
        itinerary_input.pace,
        itinerary_input.travel_style,
        itinerary.estimated_total_cost,
        itinerary.currency,
    )
    return itinerary
