"""Extractor for the ``opportunity`` phase.

The opportunity artifact looks roughly like::

    {
        "originalIdea": str,
        "refinedOpportunities": [
            {"idea", "description", "revenuePotential", "customerUrgency",
             "competitionDensity", "feasibility", "agenticScore", "reasoning",
             "sources": [{"claim", "url", "snippet"}]}
        ],
        "recommendedIndex": int,
        "keyInsight": str,
        "unknowns": [str],
    }

Every key may be absent or null.
"""
from __future__ import annotations

from typing import Any, Mapping

from ..types import (
    Confidence,
    Decision,
    Evidence,
    Impact,
    Reversibility,
    Takeaway,
    TakeawayCategory,
    Unknown,
)
from ..values import as_index, as_list, as_mapping, as_str
from .base import PhaseExtractor, determine_importance

_TOP_REVENUE = ("VERY_HIGH", "HIGH")
_MAX_REVENUE_TAKEAWAYS = 3
_MAX_LOW_COMPETITION_TAKEAWAYS = 2
# Unknowns raised while refining the idea get answered by customer research.
_UNKNOWN_FOLLOW_UP_PHASE = "customer-intel"


def _variants(content: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    # Non-object entries keep their slot so indices still line up with recommendedIndex.
    return [as_mapping(item) for item in as_list(content.get("refinedOpportunities"))]


def _recommended(content: Mapping[str, Any]) -> tuple[int, Mapping[str, Any]] | None:
    index = as_index(content.get("recommendedIndex"))
    variants = _variants(content)
    if index is None or index >= len(variants):
        return None
    variant = variants[index]
    if as_str(variant.get("idea")) is None or as_str(variant.get("reasoning")) is None:
        return None
    return index, variant


def extract_opportunity_takeaways(content: Any) -> list[Takeaway]:
    opp = as_mapping(content)
    takeaways: list[Takeaway] = []

    key_insight = as_str(opp.get("keyInsight"))
    if key_insight:
        takeaways.append(
            Takeaway(id="key-insight", text=key_insight, category=TakeawayCategory.insight, impact=Impact.high)
        )

    recommended = _recommended(opp)
    if recommended is not None:
        _, variant = recommended
        takeaways.append(
            Takeaway(
                id="recommended",
                text=f"Recommended: {variant['idea']} - {variant['reasoning']}",
                category=TakeawayCategory.opportunity,
                impact=Impact.high,
            )
        )

    variants = _variants(opp)
    high_revenue = [v for v in variants if v.get("revenuePotential") in _TOP_REVENUE][:_MAX_REVENUE_TAKEAWAYS]
    for i, variant in enumerate(high_revenue):
        idea = as_str(variant.get("idea"))
        if idea:
            takeaways.append(
                Takeaway(
                    id=f"revenue-{i}",
                    text=f"High revenue potential: {idea}",
                    category=TakeawayCategory.opportunity,
                    impact=Impact.high,
                )
            )

    low_competition = [v for v in variants if v.get("competitionDensity") == "LOW"][:_MAX_LOW_COMPETITION_TAKEAWAYS]
    for i, variant in enumerate(low_competition):
        idea = as_str(variant.get("idea"))
        if idea:
            takeaways.append(
                Takeaway(
                    id=f"competition-{i}",
                    text=f"Low competition opportunity: {idea}",
                    category=TakeawayCategory.opportunity,
                    impact=Impact.medium,
                )
            )

    return takeaways


def extract_opportunity_decisions(content: Any) -> list[Decision]:
    recommended = _recommended(as_mapping(content))
    if recommended is None:
        return []
    index, variant = recommended
    top_tier = (
        variant.get("revenuePotential") in _TOP_REVENUE
        and variant.get("feasibility") == "HIGH"
        and variant.get("agenticScore") == "HIGH"
    )
    return [
        Decision(
            id="recommended-variant",
            decision=f"Pursue opportunity variant #{index + 1}: {variant['idea']}",
            rationale=variant["reasoning"],
            confidence=Confidence.high if top_tier else Confidence.medium,
            # picking a variant this early can still be revisited
            reversibility=Reversibility.reversible,
        )
    ]


def extract_opportunity_unknowns(content: Any) -> list[Unknown]:
    unknowns: list[Unknown] = []
    for i, question in enumerate(as_list(as_mapping(content).get("unknowns"))):
        text = as_str(question)
        if text is None:
            continue
        unknowns.append(
            Unknown(
                id=f"unknown-{i}",
                question=text,
                importance=determine_importance(text),
                investigation_phase=_UNKNOWN_FOLLOW_UP_PHASE,
            )
        )
    return unknowns


def extract_opportunity_evidence(content: Any, phase: str) -> list[Evidence]:
    evidence: list[Evidence] = []
    for vi, variant in enumerate(_variants(as_mapping(content))):
        for si, source in enumerate(as_list(variant.get("sources"))):
            record = as_mapping(source)
            claim = as_str(record.get("claim"))
            if claim is None:
                continue
            evidence.append(
                Evidence(
                    id=f"evidence-{vi}-{si}",
                    claim=claim,
                    phase_origin=phase,
                    url=as_str(record.get("url")),
                    snippet=as_str(record.get("snippet")),
                )
            )
    return evidence


class OpportunityExtractor(PhaseExtractor):
    def extract_takeaways(self, content: Any) -> list[Takeaway]:
        return extract_opportunity_takeaways(content)

    def extract_decisions(self, content: Any) -> list[Decision]:
        return extract_opportunity_decisions(content)

    def extract_unknowns(self, content: Any) -> list[Unknown]:
        return extract_opportunity_unknowns(content)

    def extract_evidence(self, content: Any, phase: str) -> list[Evidence]:
        return extract_opportunity_evidence(content, phase)


__all__ = [
    "OpportunityExtractor",
    "extract_opportunity_decisions",
    "extract_opportunity_evidence",
    "extract_opportunity_takeaways",
    "extract_opportunity_unknowns",
]
