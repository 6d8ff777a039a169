# vibe_planner/llm.py
import json
from typing import Any, Dict, Optional

from openai import OpenAI

from vibe_planner.config import Settings
from vibe_planner.logging_utils import get_logger

logger = get_logger(__name__)

_settings = Settings.from_env()
if _settings.openai_api_key:
    _client: Optional[OpenAI] = OpenAI(api_key=_settings.openai_api_key)
else:  # pragma: no cover - exercised indirectly in tests without API key
    _client = None
    logger.info("OPENAI_API_KEY not set; query enhancement stays local")

QUERY_ENHANCEMENT_SYSTEM = """You expand short travel-vibe queries for a destination search index.
Respond ONLY in JSON with the schema:
  {"enhancedQuery": "", "expandedTerms": [], "suggestedFilters": {}, "confidence": 0.0}
- enhancedQuery: the original query followed by up to 8 extra search words.
- expandedTerms: the extra words you added, taken from the known vibe tags:
  romantic, cultural, historic, artistic, foodie, culinary, nightlife, vibrant,
  relaxing, peaceful, adventure, outdoor, beach, coastal, tropical, nature,
  scenic, modern, urban, luxury, budget, family-friendly, welcoming, charming,
  quaint, photogenic, cosmopolitan, bohemian, spiritual, ancient.
- suggestedFilters: optional numeric filters on culture_score, adventure_score,
  nature_score, beach_score or nightlife_score written as ">N" (N a single digit).
- confidence: 0.5 to 1.0, how well you understood the query.
Do not invent destinations.
"""


def llm_available() -> bool:
    return _client is not None


def enhance_query_llm(query: str, *, model: str = "gpt-4o-mini") -> Optional[Dict[str, Any]]:
    """Ask the hosted model to expand a vibe query; ``None`` when unavailable or unusable."""
    if _client is None:
        logger.info("Skipping LLM query enhancement (missing client or API key)")
        return None

    logger.info("Invoking LLM model %s for query enhancement", model)
    resp = _client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": QUERY_ENHANCEMENT_SYSTEM},
            {"role": "user", "content": query},
        ],
        temperature=0.2,
        response_format={"type": "json_object"},
    )

    raw = resp.choices[0].message.content
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning("LLM query enhancement returned non-JSON payload; ignoring")
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed
