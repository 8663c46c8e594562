"""Canonical planning phase ontology.

Single source of truth for the ordered phase list, the legacy alias table and
the stage grouping used by the bible views.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, TypeVar

PLANNING_AGENT_PHASE_ORDER: tuple[str, ...] = (
    "opportunity",
    "customer-intel",
    "market-research",
    "competitive-intel",
    "kill-test",
    "revenue-expansion",
    "strategy",
    "business-model",
    "product-design",
    "gtm-marketing",
    "content-engine",
    "tech-arch",
    "analytics",
    "launch-execution",
    "synthesis",
    "task-reconciliation",
    "diagram-generation",
    "validation",
)

INTAKE_PHASE = "phase-0-intake"

PLANNING_WORKFLOW_PHASE_ORDER: tuple[str, ...] = (INTAKE_PHASE, *PLANNING_AGENT_PHASE_ORDER)

# Run after the main pipeline has completed.
POST_PIPELINE_PHASES: tuple[str, ...] = ("architecture-advisor",)

LEGACY_PHASE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "intake": INTAKE_PHASE,
        "phase-1-opportunity": "opportunity",
        "phase-2-customer-intel": "customer-intel",
        "phase-3-market-research": "market-research",
        "phase-4-competitive-intel": "competitive-intel",
        "phase-5-kill-test": "kill-test",
        "phase-6-revenue-expansion": "revenue-expansion",
        "phase-7-strategy": "strategy",
        "phase-8-business-model": "business-model",
        "phase-9-product-design": "product-design",
        "phase-10-gtm": "gtm-marketing",
        "phase-11-content-engine": "content-engine",
        "phase-12-tech-arch": "tech-arch",
        "phase-13-analytics": "analytics",
        "phase-14-launch": "launch-execution",
        "phase-15-synthesis": "synthesis",
        "phase-16-task-reconciliation": "task-reconciliation",
        "phase-17-diagram-generation": "diagram-generation",
        "phase-18-validation": "validation",
        "gtm": "gtm-marketing",
        "launch": "launch-execution",
        "diagrams": "diagram-generation",
    }
)

_AGENT_PHASES = frozenset(PLANNING_AGENT_PHASE_ORDER)
_WORKFLOW_PHASES = frozenset(PLANNING_WORKFLOW_PHASE_ORDER)


@dataclass(frozen=True)
class Stage:
    id: str
    title: str
    phases: tuple[str, ...]


STAGES: tuple[Stage, ...] = (
    Stage("discovery", "Discovery", ("opportunity", "customer-intel", "market-research", "competitive-intel")),
    Stage("validation", "Validation", ("kill-test",)),
    Stage("strategy", "Strategy", ("revenue-expansion", "strategy", "business-model")),
    Stage("design", "Design", ("product-design", "gtm-marketing", "content-engine")),
    Stage("execution", "Execution", ("tech-arch", "analytics", "launch-execution", "synthesis")),
)


def is_planning_agent_phase(phase: object) -> bool:
    return isinstance(phase, str) and phase in _AGENT_PHASES


def is_planning_workflow_phase(phase: object) -> bool:
    return isinstance(phase, str) and phase in _WORKFLOW_PHASES


def normalize_planning_phase(phase: object) -> str | None:
    """Map a canonical, legacy or alternate phase name onto its canonical name.

    Returns ``None`` for anything that is neither canonical nor aliased.
    """
    if not isinstance(phase, str):
        return None
    if phase in _WORKFLOW_PHASES:
        return phase
    return LEGACY_PHASE_ALIASES.get(phase)


def phase_index(phase: str) -> int:
    """Position of a phase in workflow order; unknown phases sort last."""
    canonical = normalize_planning_phase(phase)
    if canonical is None:
        return len(PLANNING_WORKFLOW_PHASE_ORDER)
    return PLANNING_WORKFLOW_PHASE_ORDER.index(canonical)


def stage_for_phase(phase: str) -> Stage | None:
    canonical = normalize_planning_phase(phase)
    for stage in STAGES:
        if canonical in stage.phases:
            return stage
    return None


_V = TypeVar("_V")


def normalize_artifact_map(artifacts: Mapping[str, _V] | None) -> dict[str, _V]:
    """Re-key a phase-keyed mapping onto canonical phase names.

    A canonical key always wins over an alias for the same phase; among aliases
    the first one seen wins. Unrecognized keys are carried over verbatim so that
    callers still see them, but no canonical lookup will ever hit them.
    """
    normalized: dict[str, _V] = {}
    for key, value in (artifacts or {}).items():
        if value is None:
            continue
        canonical = normalize_planning_phase(key)
        if canonical is None:
            normalized.setdefault(key, value)
        elif canonical == key or canonical not in normalized:
            normalized[canonical] = value
    return normalized


def ordered_phases(phases: Iterable[str]) -> list[str]:
    return sorted(phases, key=phase_index)


__all__ = [
    "INTAKE_PHASE",
    "LEGACY_PHASE_ALIASES",
    "PLANNING_AGENT_PHASE_ORDER",
    "PLANNING_WORKFLOW_PHASE_ORDER",
    "POST_PIPELINE_PHASES",
    "STAGES",
    "Stage",
    "is_planning_agent_phase",
    "is_planning_workflow_phase",
    "normalize_artifact_map",
    "normalize_planning_phase",
    "ordered_phases",
    "phase_index",
    "stage_for_phase",
]
