from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from vibe_planner.itinerary import calculate_day_cost, generate_itinerary, get_day_theme
from vibe_planner.itinerary.generator import category_weights, ranked_categories
from vibe_planner.schemas import City, Itinerary, ItineraryInput

FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _kyoto(**extra) -> City:
    return City.model_validate(
        {
            "objectID": "kyoto-jp",
            "city": "Kyoto",
            "country": "Japan",
            "continent": "Asia",
            "vibe_tags": ["historic", "spiritual", "foodie"],
            "culture_score": 10,
            "adventure_score": 4,
            "nature_score": 8,
            "beach_score": 1,
            "nightlife_score": 5,
            **extra,
        }
    )


def _generate(**overrides) -> Itinerary:
    params = {"city": _kyoto(), "duration_days": 3, "interests": ["culture", "food"]}
    params.update(overrides)
    return generate_itinerary(ItineraryInput(**params), generated_at=FIXED_NOW)


def test_total_cost_is_exact_sum_of_days():
    for pace in ("relaxed", "moderate", "packed"):
        for style in ("relaxed", "balanced", "active"):
            itinerary = _generate(duration_days=6, pace=pace, travel_style=style)
            assert itinerary.estimated_total_cost == sum(d.estimated_cost for d in itinerary.days)
            for day in itinerary.days:
                assert day.estimated_cost == calculate_day_cost(day.activities)


def test_packed_pace_yields_more_activities_than_relaxed():
    for style in ("relaxed", "balanced", "active"):
        packed = _generate(pace="packed", travel_style=style)
        relaxed = _generate(pace="relaxed", travel_style=style)
        assert len(packed.days[0].activities) > len(relaxed.days[0].activities)


def test_zero_duration_yields_empty_days():
    itinerary = _generate(duration_days=0)
    assert itinerary.days == []
    assert itinerary.estimated_total_cost == 0


def test_negative_duration_is_clamped_to_zero():
    assert _generate(duration_days=-3).days == []


def test_dates_follow_start_date():
    itinerary = _generate(duration_days=2, start_date=date(2026, 6, 15))
    assert [d.date for d in itinerary.days] == ["2026-06-15", "2026-06-16"]


def test_dates_omitted_without_start_date():
    assert all(day.date is None for day in _generate().days)


def test_transport_tips_only_on_first_day():
    itinerary = _generate(duration_days=3)
    assert itinerary.days[0].transport_tips
    assert "metro" in " ".join(itinerary.days[0].transport_tips)
    assert all(day.transport_tips == [] for day in itinerary.days[1:])


def test_activity_ids_never_repeat():
    itinerary = _generate(duration_days=10, pace="packed", travel_style="active")
    ids = [activity.id for day in itinerary.days for activity in day.activities]
    assert len(ids) == len(set(ids))


def test_templates_are_exhausted_before_reuse():
    itinerary = _generate(duration_days=2)
    templates = [a.id.rsplit("-day", 1)[0] for day in itinerary.days for a in day.activities]
    assert len(templates) == len(set(templates))


def test_activities_are_in_chronological_order():
    for day in _generate(duration_days=4, pace="packed").days:
        times = [activity.start_time for activity in day.activities]
        assert times == sorted(times)


def test_generation_is_deterministic():
    first = _generate(duration_days=5).model_dump()
    second = _generate(duration_days=5).model_dump()
    assert first == second


def test_unknown_interests_are_ignored():
    baseline = _generate(interests=[])
    with_noise = _generate(interests=["underwater basket weaving", "zzz"])
    assert [d.model_dump() for d in baseline.days] == [d.model_dump() for d in with_noise.days]


def test_interest_bonus_raises_category_weight():
    city = _kyoto()
    plain = category_weights(city, [])
    boosted = category_weights(city, ["beach holidays"])
    assert boosted["beach"] == plain["beach"] + 5
    assert "beach" in ranked_categories(city, ["beach holidays"])


def test_vibe_tags_contribute_weight():
    weights = category_weights(_kyoto(), [])
    assert weights["culture"] == 10 + 2
    assert weights["food"] == 2


def test_day_theme_rotates_over_ranked_categories():
    city = _kyoto()
    themes = [get_day_theme(city, n, ["food"]) for n in range(1, 4)]
    assert themes[0] == "Cultural Exploration"
    assert len(set(themes)) == 3


def test_itinerary_serialises_camel_case():
    payload = _generate(duration_days=1).model_dump(mode="json", by_alias=True)
    assert set(payload) >= {"destination", "totalDays", "travelStyle", "days", "estimatedTotalCost", "generatedAt"}
    assert payload["destination"] == {"city": "Kyoto", "country": "Japan", "objectID": "kyoto-jp"}
    day = payload["days"][0]
    assert {"dayNumber", "theme", "activities", "meals", "transportTips", "estimatedCost"} <= set(day)
    assert {"timeSlot", "startTime", "duration", "cost", "category"} <= set(day["activities"][0])
    assert [meal["mealType"] for meal in day["meals"]] == ["breakfast", "lunch", "dinner"]


def test_itinerary_rejects_inconsistent_total():
    payload = _generate(duration_days=1).model_dump()
    payload["estimated_total_cost"] += 1
    with pytest.raises(ValidationError):
        Itinerary.model_validate(payload)
