"""Domain-level dataclasses for normalized phase data."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from .values import as_mapping, as_number, as_str


class TakeawayCategory(enum.Enum):
    insight = "insight"
    risk = "risk"
    opportunity = "opportunity"
    blocker = "blocker"


class Impact(enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class Confidence(enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class Reversibility(enum.Enum):
    reversible = "reversible"
    one_way_door = "one-way-door"


class Importance(enum.Enum):
    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


@dataclass(frozen=True)
class PhaseArtifact:
    """Read-only planning artifact as delivered by the planning service."""

    phase: str
    content: Mapping[str, Any] = field(default_factory=dict)
    id: str | None = None
    overall_score: float | None = field(default=None, metadata={"alias": "overall_score"})
    review_verdict: str | None = field(default=None, metadata={"alias": "review_verdict"})
    review_iterations: int | None = field(default=None, metadata={"alias": "review_iterations"})

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], phase: str | None = None) -> "PhaseArtifact":
        """Build an artifact from the planning service's JSON shape.

        ``phase`` overrides the embedded phase name, which is how phase-keyed
        maps are read. A non-mapping ``content`` is treated as empty.
        """
        record = as_mapping(raw)
        score = as_number(record.get("overall_score", record.get("overallScore")))
        iterations = as_number(record.get("review_iterations", record.get("reviewIterations")))
        return cls(
            phase=phase or as_str(record.get("phase")) or "",
            content=as_mapping(record.get("content")),
            id=as_str(record.get("id")),
            overall_score=score,
            review_verdict=as_str(record.get("review_verdict", record.get("reviewVerdict"))),
            review_iterations=int(iterations) if iterations is not None else None,
        )


@dataclass(frozen=True)
class Takeaway:
    id: str
    text: str
    category: TakeawayCategory
    impact: Impact


@dataclass(frozen=True)
class Decision:
    id: str
    decision: str
    rationale: str
    confidence: Confidence
    reversibility: Reversibility


@dataclass(frozen=True)
class Unknown:
    id: str
    question: str
    importance: Importance
    investigation_phase: str | None = None


@dataclass(frozen=True)
class Evidence:
    id: str
    claim: str
    phase_origin: str
    url: str | None = None
    snippet: str | None = None


__all__ = [
    "Confidence",
    "Decision",
    "Evidence",
    "Impact",
    "Importance",
    "PhaseArtifact",
    "Reversibility",
    "Takeaway",
    "TakeawayCategory",
    "Unknown",
]
