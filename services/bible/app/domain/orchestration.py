"""Detection and scoring of multi-model ensemble results.

An orchestrated phase runs several models in parallel and has one synthesizer
model merge their answers. The artifact either carries that result under an
``orchestration`` key or *is* the result. Only an exact structural match is
accepted; anything else is simply not an orchestration result.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping

from .types import PhaseArtifact
from .values import as_mapping, as_number, as_str

WILD_IDEA_PENALTY = 15
FAILED_MODEL_PENALTY = 10

_REQUIRED_FIELDS: tuple[tuple[str, type | tuple[type, ...]], ...] = (
    ("finalText", str),
    ("modelOutputs", (list, tuple)),
    ("wildIdeas", (list, tuple)),
    ("synthesizerModel", str),
)


class ConsensusLevel(enum.Enum):
    high = "high"
    moderate = "moderate"
    low = "low"


@dataclass(frozen=True)
class ModelOutput:
    model: str
    text: str
    duration_ms: float = 0
    error: str | None = None

    @classmethod
    def from_value(cls, value: Any) -> "ModelOutput":
        record = as_mapping(value)
        raw_error = record.get("error")
        if isinstance(raw_error, str):
            error = raw_error or None
        else:
            error = str(raw_error) if raw_error else None
        return cls(
            model=as_str(record.get("model")) or "",
            text=as_str(record.get("text")) or "",
            duration_ms=as_number(record.get("durationMs")) or 0,
            error=error,
        )


@dataclass(frozen=True)
class WildIdea:
    model: str
    wild_idea: str
    reasoning: str

    @classmethod
    def from_value(cls, value: Any) -> "WildIdea":
        record = as_mapping(value)
        return cls(
            model=as_str(record.get("model")) or "",
            wild_idea=as_str(record.get("wildIdea")) or "",
            reasoning=as_str(record.get("reasoning")) or "",
        )


@dataclass(frozen=True)
class OrchestrationResult:
    final_text: str
    synthesizer_model: str
    model_outputs: list[ModelOutput] = field(default_factory=list)
    wild_ideas: list[WildIdea] = field(default_factory=list)
    total_duration_ms: float | None = None

    @classmethod
    def from_structure(cls, value: Mapping[str, Any]) -> "OrchestrationResult":
        return cls(
            final_text=value["finalText"],
            synthesizer_model=value["synthesizerModel"],
            model_outputs=[ModelOutput.from_value(item) for item in value["modelOutputs"]],
            wild_ideas=[WildIdea.from_value(item) for item in value["wildIdeas"]],
            total_duration_ms=as_number(value.get("totalDurationMs")),
        )


def is_orchestration_structure(value: Any) -> bool:
    if not isinstance(value, Mapping):
        return False
    for key, expected in _REQUIRED_FIELDS:
        if key not in value or not isinstance(value[key], expected):
            return False
    return True


def detect_orchestration(artifact: PhaseArtifact | Mapping[str, Any] | None) -> OrchestrationResult | None:
    """Return the orchestration result carried by ``artifact``, if any.

    Accepts a :class:`PhaseArtifact` or raw artifact content.
    """
    if artifact is None:
        return None
    content = artifact.content if isinstance(artifact, PhaseArtifact) else artifact
    if not isinstance(content, Mapping) or not content:
        return None

    nested = content.get("orchestration")
    if is_orchestration_structure(nested):
        return OrchestrationResult.from_structure(nested)
    if is_orchestration_structure(content):
        return OrchestrationResult.from_structure(content)
    return None


def consensus_score(result: OrchestrationResult) -> int:
    """100 for full agreement, minus penalties for divergent ideas and failed models."""
    score = 100
    score -= len(result.wild_ideas) * WILD_IDEA_PENALTY
    score -= len(failed_outputs(result)) * FAILED_MODEL_PENALTY
    return max(0, min(100, score))


def consensus_level(score: int) -> ConsensusLevel:
    if score >= 70:
        return ConsensusLevel.high
    if score >= 40:
        return ConsensusLevel.moderate
    return ConsensusLevel.low


def successful_outputs(result: OrchestrationResult) -> list[ModelOutput]:
    return [output for output in result.model_outputs if not output.error]


def failed_outputs(result: OrchestrationResult) -> list[ModelOutput]:
    return [output for output in result.model_outputs if output.error]


def has_wild_ideas(result: OrchestrationResult) -> bool:
    return bool(result.wild_ideas)


def all_models_succeeded(result: OrchestrationResult) -> bool:
    return not failed_outputs(result)


__all__ = [
    "ConsensusLevel",
    "ModelOutput",
    "OrchestrationResult",
    "WildIdea",
    "all_models_succeeded",
    "consensus_level",
    "consensus_score",
    "detect_orchestration",
    "failed_outputs",
    "has_wild_ideas",
    "is_orchestration_structure",
    "successful_outputs",
]
