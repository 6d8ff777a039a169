from unittest.mock import Mock

from vibe_planner.tools import query_enhancement
from vibe_planner.tools.query_enhancement import enhance_query, local_enhancement


def test_local_enhancement_expands_vibe_words():
    result = local_enhancement("cozy scenic town")

    assert "charming" in result.expanded_terms
    assert "panoramic" in result.expanded_terms
    assert result.suggested_filters == {"nature_score": ">7"}
    assert result.confidence == 0.7
    assert result.enhanced_query.startswith("cozy scenic town ")


def test_local_enhancement_keeps_highest_filter():
    result = local_enhancement("views and nature")
    assert result.suggested_filters["nature_score"] == ">7"


def test_local_enhancement_without_matches_has_low_confidence():
    result = local_enhancement("xyz qq")
    assert result.expanded_terms == []
    assert result.enhanced_query == "xyz qq"
    assert result.confidence == 0.3


def test_enhance_query_merges_llm_result(monkeypatch):
    fake = Mock(
        return_value={
            "enhancedQuery": "cozy town charming quaint bohemian",
            "expandedTerms": ["bohemian", "charming", ""],
            "suggestedFilters": {"culture_score": ">6", "nature_score": ">9", "vibes": ">5", "beach_score": ">10"},
            "confidence": 0.92,
        }
    )
    monkeypatch.setattr(query_enhancement.llm, "enhance_query_llm", fake)

    result = enhance_query("cozy town")

    fake.assert_called_once_with("cozy town")
    assert result.enhanced_query == "cozy town charming quaint bohemian"
    assert result.expanded_terms.count("charming") == 1
    assert result.expanded_terms[-1] == "bohemian"
    assert result.suggested_filters == {"culture_score": ">6", "nature_score": ">9"}
    assert result.confidence == 0.92


def test_enhance_query_falls_back_on_llm_failure(monkeypatch):
    monkeypatch.setattr(query_enhancement.llm, "enhance_query_llm", Mock(side_effect=RuntimeError("quota")))
    result = enhance_query("cozy town")
    assert result == local_enhancement("cozy town")


def test_enhance_query_stays_local_when_disabled_or_unavailable(monkeypatch):
    fake = Mock(return_value=None)
    monkeypatch.setattr(query_enhancement.llm, "enhance_query_llm", fake)

    assert enhance_query("beach party", use_llm=False).confidence == 0.7
    fake.assert_not_called()

    assert enhance_query("beach party") == local_enhancement("beach party")
    fake.assert_called_once()


def test_result_serialises_camel_case():
    payload = local_enhancement("beach").model_dump(by_alias=True)
    assert set(payload) == {"originalQuery", "enhancedQuery", "expandedTerms", "suggestedFilters", "confidence"}


def test_local_enhancement_matches_word_prefixes_only():
    result = local_enhancement("art museums")
    assert "galleries" in result.expanded_terms
    assert "nightlife" not in result.expanded_terms

    assert "coastal" in local_enhancement("sandy beaches").expanded_terms


def test_enhance_query_ignores_malformed_llm_fields(monkeypatch):
    monkeypatch.setattr(
        query_enhancement.llm,
        "enhance_query_llm",
        Mock(return_value={"suggestedFilters": ["nature_score>7"], "expandedTerms": "romantic"}),
    )

    result = enhance_query("zzzz")

    assert result.expanded_terms == []
    assert result.suggested_filters == {}
    assert result.enhanced_query == "zzzz"
    assert result.confidence == 0.7
