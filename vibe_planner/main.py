from __future__ import annotations

from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from vibe_planner.config import Settings
from vibe_planner.itinerary import generate_itinerary
from vibe_planner.schemas import ItineraryInput
from vibe_planner.tools.query_enhancement import enhance_query

app = FastAPI(title="Vibe Planner API")

# The chat/map frontend is served from its own dev server; scope origins with
# VIBE_PLANNER_ALLOWED_ORIGINS when deploying.
app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/itinerary")
async def api_itinerary(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Generate a day-by-day itinerary for one city."""
    try:
        itinerary_input = ItineraryInput.model_validate(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc

    itinerary = generate_itinerary(itinerary_input)
    return itinerary.model_dump(mode="json", by_alias=True)


@app.post("/api/enhance-query")
async def api_enhance_query(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    query = payload.get("query")
    if not isinstance(query, str) or not query.strip():
        raise HTTPException(status_code=400, detail="Query is required")
    use_llm = payload.get("useLLM", True) is not False
    result = enhance_query(query.strip(), use_llm=use_llm)
    return result.model_dump(by_alias=True)
