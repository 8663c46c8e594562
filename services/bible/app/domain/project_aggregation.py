"""Resolution of one authoritative artifact per phase across a project's runs.

A project accumulates several planning runs. For each phase the configured
strategy decides which run's artifact the project views are built from.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

from .normalizer import ArtifactsInput, artifacts_to_map
from .phases import normalize_planning_phase, ordered_phases
from .types import PhaseArtifact

DEFAULT_MAX_RUNS = 3


class AggregationStrategy(enum.Enum):
    latest = "latest"
    best_score = "best_score"
    # Reserved for field-level union; no configured phase uses it yet and it
    # currently selects like ``latest``.
    merge = "merge"


PHASE_AGGREGATION_STRATEGIES: Mapping[str, AggregationStrategy] = MappingProxyType(
    {
        "synthesis": AggregationStrategy.latest,
        "kill-test": AggregationStrategy.latest,
        "opportunity": AggregationStrategy.best_score,
        "customer-intel": AggregationStrategy.best_score,
        "market-research": AggregationStrategy.best_score,
        "competitive-intel": AggregationStrategy.best_score,
        "revenue-expansion": AggregationStrategy.best_score,
        "strategy": AggregationStrategy.best_score,
        "business-model": AggregationStrategy.best_score,
        "product-design": AggregationStrategy.best_score,
        "gtm-marketing": AggregationStrategy.best_score,
        "content-engine": AggregationStrategy.best_score,
        "tech-arch": AggregationStrategy.best_score,
        "analytics": AggregationStrategy.best_score,
        "launch-execution": AggregationStrategy.latest,
        "task-reconciliation": AggregationStrategy.latest,
    }
)


@dataclass(frozen=True)
class PlanningRun:
    id: str
    created_at: int
    artifacts: Mapping[str, PhaseArtifact] = field(default_factory=dict)

    @classmethod
    def build(cls, id: str, created_at: int, artifacts: ArtifactsInput) -> "PlanningRun":
        return cls(id=id, created_at=created_at, artifacts=artifacts_to_map(artifacts))


Candidate = tuple[PlanningRun, PhaseArtifact]


def by_recency(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Most recent run first; equal timestamps keep their given order."""
    return sorted(candidates, key=lambda candidate: candidate[0].created_at, reverse=True)


def select_artifact(strategy: AggregationStrategy, candidates: Sequence[Candidate]) -> Candidate | None:
    ordered = by_recency(candidates)
    if not ordered:
        return None
    if strategy is AggregationStrategy.best_score:
        scored = [candidate for candidate in ordered if candidate[1].overall_score is not None]
        if scored:
            # max() keeps the first of equal scores, i.e. the most recent run
            return max(scored, key=lambda candidate: candidate[1].overall_score)
    return ordered[0]


def strategy_for_phase(
    phase: str,
    strategies: Mapping[str, AggregationStrategy] = PHASE_AGGREGATION_STRATEGIES,
    default: AggregationStrategy = AggregationStrategy.best_score,
) -> AggregationStrategy:
    canonical = normalize_planning_phase(phase) or phase
    return strategies.get(canonical, default)


def aggregate_project_artifacts(
    runs: Iterable[PlanningRun],
    strategies: Mapping[str, AggregationStrategy] = PHASE_AGGREGATION_STRATEGIES,
    max_runs: int = DEFAULT_MAX_RUNS,
    default_strategy: AggregationStrategy = AggregationStrategy.best_score,
) -> dict[str, PhaseArtifact]:
    """Pick the authoritative artifact for every phase seen in the newest ``max_runs`` runs."""
    recent = sorted(runs, key=lambda run: run.created_at, reverse=True)[: max(max_runs, 0)]
    candidates: dict[str, list[Candidate]] = {}
    for run in recent:
        for phase, artifact in run.artifacts.items():
            candidates.setdefault(phase, []).append((run, artifact))

    resolved: dict[str, PhaseArtifact] = {}
    for phase in ordered_phases(candidates):
        strategy = strategy_for_phase(phase, strategies, default_strategy)
        winner = select_artifact(strategy, candidates[phase])
        if winner is not None:
            resolved[phase] = winner[1]
    return resolved


__all__ = [
    "DEFAULT_MAX_RUNS",
    "PHASE_AGGREGATION_STRATEGIES",
    "AggregationStrategy",
    "Candidate",
    "PlanningRun",
    "aggregate_project_artifacts",
    "by_recency",
    "select_artifact",
    "strategy_for_phase",
]
