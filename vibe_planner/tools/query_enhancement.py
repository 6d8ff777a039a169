"""Expansion of short vibe queries ("cozy coffee city") into searchable terms."""
from __future__ import annotations

import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vibe_planner import llm
from vibe_planner.logging_utils import get_logger

logger = get_logger(__name__)

LLM_CONFIDENCE_THRESHOLD = 0.8
SCORE_ATTRIBUTES = ("culture_score", "adventure_score", "nature_score", "beach_score", "nightlife_score")
_FILTER_PATTERN = re.compile(r"^>[0-9]$")

VIBE_TAG_MAPPINGS: Dict[str, List[str]] = {
    "scenic": ["scenic", "views", "panoramic", "nature", "beautiful", "picturesque"],
    "cozy": ["cozy", "charming", "intimate", "quaint", "romantic", "welcoming"],
    "cafe": ["culinary", "foodie", "gastronomy", "european", "charming"],
    "coffee": ["culinary", "foodie", "european", "charming", "cozy"],
    "views": ["scenic", "nature", "panoramic", "mountains", "coastal"],
    "charming": ["romantic", "historic", "european", "quaint", "charming"],
    "beautiful": ["scenic", "picturesque", "photogenic", "stunning"],
    "quiet": ["peaceful", "relaxing", "tranquil", "serene"],
    "lively": ["vibrant", "nightlife", "entertainment", "energetic"],
    "cheap": ["budget", "affordable", "backpacker", "economical"],
    "expensive": ["luxury", "upscale", "premium", "exclusive"],
    "old": ["historic", "ancient", "heritage", "cultural"],
    "modern": ["contemporary", "urban", "cosmopolitan", "sleek"],
    "food": ["culinary", "foodie", "gastronomy", "cuisine"],
    "art": ["artistic", "cultural", "creative", "galleries"],
    "nature": ["nature", "outdoor", "wilderness", "scenic", "green"],
    "party": ["nightlife", "vibrant", "entertainment", "clubs"],
    "relax": ["relaxing", "peaceful", "tranquil", "spa", "wellness"],
    "adventure": ["adventure", "active", "outdoor", "hiking", "exploration"],
    "romantic": ["romantic", "couples", "honeymoon", "intimate"],
    "family": ["family-friendly", "safe", "welcoming", "fun"],
    "beach": ["beach", "coastal", "tropical", "seaside", "ocean"],
    "mountain": ["mountains", "alpine", "hiking", "nature", "scenic"],
    "historic": ["historic", "heritage", "cultural", "ancient", "museums"],
    "instagram": ["photogenic", "beautiful", "stunning", "picturesque"],
}

SCORE_MAPPINGS: Dict[str, tuple] = {
    "scenic": ("nature_score", 7),
    "nature": ("nature_score", 7),
    "views": ("nature_score", 6),
    "cultural": ("culture_score", 7),
    "historic": ("culture_score", 7),
    "art": ("culture_score", 6),
    "museums": ("culture_score", 7),
    "nightlife": ("nightlife_score", 7),
    "party": ("nightlife_score", 7),
    "clubs": ("nightlife_score", 6),
    "beach": ("beach_score", 7),
    "coastal": ("beach_score", 6),
    "tropical": ("beach_score", 6),
    "adventure": ("adventure_score", 7),
    "hiking": ("adventure_score", 6),
    "outdoor": ("adventure_score", 6),
}


class QueryEnhancementResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_query: str
    enhanced_query: str
    expanded_terms: List[str] = Field(default_factory=list)
    suggested_filters: Dict[str, str] = Field(default_factory=dict)
    confidence: float = Field(0.3, ge=0.0, le=1.0)


def local_enhancement(query: str) -> QueryEnhancementResult:
    words = [word for word in re.split(r"[\s,]+", query.lower()) if len(word) > 2]
    expanded: Dict[str, None] = {}
    filters: Dict[str, str] = {}

    for word in words:
        for key, terms in VIBE_TAG_MAPPINGS.items():
            if word.startswith(key):
                for term in terms:
                    expanded.setdefault(term)
        if word in SCORE_MAPPINGS:
            attribute, minimum = SCORE_MAPPINGS[word]
            current = filters.get(attribute)
            if current is None or int(current[1:]) < minimum:
                filters[attribute] = f">{minimum}"

    terms = list(expanded)
    return QueryEnhancementResult(
        original_query=query,
        enhanced_query=f"{query} {' '.join(terms)}" if terms else query,
        expanded_terms=terms,
        suggested_filters=filters,
        confidence=0.7 if terms else 0.3,
    )


def _clean_llm_payload(payload: Dict[str, Any], query: str) -> QueryEnhancementResult:
    raw_terms = payload.get("expandedTerms")
    if not isinstance(raw_terms, list):
        raw_terms = []
    terms = [t for t in raw_terms if isinstance(t, str) and t.strip()]
    raw_filters = payload.get("suggestedFilters")
    if not isinstance(raw_filters, dict):
        raw_filters = {}
    filters = {
        key: value
        for key, value in raw_filters.items()
        if key in SCORE_ATTRIBUTES and isinstance(value, str) and _FILTER_PATTERN.match(value)
    }
    confidence = payload.get("confidence")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        confidence = min(1.0, max(0.5, float(confidence)))
    else:
        confidence = 0.7
    enhanced = payload.get("enhancedQuery")
    if not isinstance(enhanced, str) or not enhanced.strip():
        enhanced = f"{query} {' '.join(terms)}".strip()
    return QueryEnhancementResult(
        original_query=query,
        enhanced_query=enhanced,
        expanded_terms=terms,
        suggested_filters=filters,
        confidence=confidence,
    )


def enhance_query(query: str, *, use_llm: bool = True) -> QueryEnhancementResult:
    """Expand ``query`` locally and, when the local guess is weak, with the hosted model.

    Any LLM failure falls back to the local expansion.
    """
    local = local_enhancement(query)
    if not use_llm or local.confidence >= LLM_CONFIDENCE_THRESHOLD:
        return local

    try:
        payload = llm.enhance_query_llm(query)
    except Exception:
        logger.warning("LLM query enhancement failed; using local expansion", exc_info=True)
        return local
    if payload is None:
        return local

    remote = _clean_llm_payload(payload, query)
    merged_terms = list(dict.fromkeys([*local.expanded_terms, *remote.expanded_terms]))
    return QueryEnhancementResult(
        original_query=query,
        enhanced_query=remote.enhanced_query,
        expanded_terms=merged_terms,
        suggested_filters={**local.suggested_filters, **remote.suggested_filters},
        confidence=max(local.confidence, remote.confidence),
    )
