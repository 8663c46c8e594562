"""Extractor contract shared by every phase."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..keywords import IMPACT_LADDER, IMPORTANCE_LADDER, TAKEAWAY_CATEGORY_LADDER, classify
from ..types import Decision, Evidence, Impact, Importance, Takeaway, TakeawayCategory, Unknown


class PhaseExtractor(ABC):
    """Turns one phase's raw artifact content into normalized collections.

    Implementations must accept any JSON value as ``content``: every field is
    optional, and a missing or malformed field only drops the entity that
    depended on it.
    """

    @abstractmethod
    def extract_takeaways(self, content: Any) -> list[Takeaway]:
        ...

    @abstractmethod
    def extract_decisions(self, content: Any) -> list[Decision]:
        ...

    @abstractmethod
    def extract_unknowns(self, content: Any) -> list[Unknown]:
        ...

    @abstractmethod
    def extract_evidence(self, content: Any, phase: str) -> list[Evidence]:
        ...


class GenericExtractor(PhaseExtractor):
    """Fallback for phases without a dedicated extractor."""

    def extract_takeaways(self, content: Any) -> list[Takeaway]:
        return []

    def extract_decisions(self, content: Any) -> list[Decision]:
        return []

    def extract_unknowns(self, content: Any) -> list[Unknown]:
        return []

    def extract_evidence(self, content: Any, phase: str) -> list[Evidence]:
        return []


def determine_importance(question: str | None) -> Importance:
    return Importance(classify(question, IMPORTANCE_LADDER, Importance.medium.value))


def categorize_takeaway(text: str | None) -> TakeawayCategory:
    return TakeawayCategory(classify(text, TAKEAWAY_CATEGORY_LADDER, TakeawayCategory.insight.value))


def determine_impact(text: str | None) -> Impact:
    return Impact(classify(text, IMPACT_LADDER, Impact.medium.value))


__all__ = [
    "GenericExtractor",
    "PhaseExtractor",
    "categorize_takeaway",
    "determine_impact",
    "determine_importance",
]
