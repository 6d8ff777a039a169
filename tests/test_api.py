from unittest.mock import Mock

from fastapi.testclient import TestClient

from vibe_planner.main import app
from vibe_planner.tools.query_enhancement import QueryEnhancementResult


def _itinerary_payload(**overrides) -> dict:
    payload = {
        "city": {
            "objectID": "marrakech-ma",
            "city": "Marrakech",
            "country": "Morocco",
            "continent": "Africa",
            "vibe_tags": ["vibrant", "historic", "markets"],
            "culture_score": 9,
            "adventure_score": 6,
            "nature_score": 4,
            "beach_score": 1,
            "nightlife_score": 6,
        },
        "durationDays": 3,
        "interests": ["food", "shopping"],
        "travelStyle": "active",
        "pace": "packed",
        "startDate": "2026-06-15",
    }
    payload.update(overrides)
    return payload


def test_api_itinerary_endpoint():
    client = TestClient(app)

    response = client.post("/api/itinerary", json=_itinerary_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["destination"]["objectID"] == "marrakech-ma"
    assert body["totalDays"] == 3
    assert [day["date"] for day in body["days"]] == ["2026-06-15", "2026-06-16", "2026-06-17"]
    assert body["estimatedTotalCost"] == sum(day["estimatedCost"] for day in body["days"])
    assert body["days"][0]["transportTips"]
    assert len(body["days"][0]["activities"]) == 7


def test_api_itinerary_zero_days_is_empty():
    client = TestClient(app)
    response = client.post("/api/itinerary", json=_itinerary_payload(durationDays=0))
    assert response.status_code == 200
    assert response.json()["days"] == []


def test_api_itinerary_rejects_invalid_payload():
    client = TestClient(app)

    response = client.post("/api/itinerary", json=_itinerary_payload(pace="frantic"))
    assert response.status_code == 422
    assert any(error["loc"][-1] == "pace" for error in response.json()["detail"])

    response = client.post("/api/itinerary", json=_itinerary_payload(durationDays="many"))
    assert response.status_code == 422


def test_api_enhance_query_endpoint(monkeypatch):
    client = TestClient(app)
    enhancer = Mock(
        return_value=QueryEnhancementResult(
            original_query="cozy coffee city",
            enhanced_query="cozy coffee city charming",
            expanded_terms=["charming"],
            confidence=0.7,
        )
    )
    monkeypatch.setattr("vibe_planner.main.enhance_query", enhancer)

    response = client.post("/api/enhance-query", json={"query": "  cozy coffee city ", "useLLM": False})

    assert response.status_code == 200
    enhancer.assert_called_once_with("cozy coffee city", use_llm=False)
    assert response.json()["expandedTerms"] == ["charming"]
    assert response.json()["suggestedFilters"] == {}


def test_api_enhance_query_requires_query():
    client = TestClient(app)
    response = client.post("/api/enhance-query", json={"query": ""})
    assert response.status_code == 400
