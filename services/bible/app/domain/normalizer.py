"""Phase artifact normalization."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union

from .orchestration import OrchestrationResult, detect_orchestration
from .phases import normalize_artifact_map, normalize_planning_phase
from .registry import get_display_adapter_for_phase, get_extractor_for_phase
from .types import Decision, Evidence, PhaseArtifact, Takeaway, Unknown

ArtifactInput = Union[PhaseArtifact, Mapping[str, Any]]
ArtifactsInput = Union[Mapping[str, ArtifactInput], Iterable[ArtifactInput], None]


@dataclass(frozen=True)
class PhaseModel:
    phase: str
    artifact: PhaseArtifact
    takeaways: list[Takeaway] = field(default_factory=list)
    decisions: list[Decision] = field(default_factory=list)
    unknowns: list[Unknown] = field(default_factory=list)
    evidence: list[Evidence] = field(default_factory=list)
    orchestration: OrchestrationResult | None = field(default=None, metadata={"nullable": True})
    display_adapter: str | None = field(default=None, metadata={"nullable": True})


def _coerce(artifact: ArtifactInput, phase: str | None = None) -> PhaseArtifact:
    if isinstance(artifact, PhaseArtifact):
        return artifact
    return PhaseArtifact.from_mapping(artifact, phase=phase)


def artifacts_to_map(artifacts: ArtifactsInput) -> dict[str, PhaseArtifact]:
    """Key artifacts by canonical phase name.

    Accepts either a phase-keyed mapping or a flat list of artifacts. In a list
    a later artifact for the same phase replaces an earlier one; entries with
    no phase name are dropped.
    """
    if artifacts is None:
        return {}
    if isinstance(artifacts, Mapping):
        keyed = {
            phase: _coerce(artifact, phase)
            for phase, artifact in artifacts.items()
            if isinstance(artifact, (PhaseArtifact, Mapping))
        }
        return normalize_artifact_map(keyed)

    by_phase: dict[str, PhaseArtifact] = {}
    for item in artifacts:
        if not isinstance(item, (PhaseArtifact, Mapping)):
            continue
        artifact = _coerce(item)
        if not artifact.phase:
            continue
        key = normalize_planning_phase(artifact.phase) or artifact.phase
        by_phase[key] = artifact
    return by_phase


def normalize_phase_artifact(phase: str, artifact: ArtifactInput) -> PhaseModel:
    """Run the phase's extractor and the orchestration detector over one artifact.

    Legacy phase names are folded onto their canonical name; an unrecognized
    name keeps its spelling and goes through the generic extractor.
    """
    artifact = _coerce(artifact, phase)
    canonical = normalize_planning_phase(phase) or phase
    extractor = get_extractor_for_phase(canonical)
    content = artifact.content
    return PhaseModel(
        phase=canonical,
        artifact=artifact,
        takeaways=extractor.extract_takeaways(content),
        decisions=extractor.extract_decisions(content),
        unknowns=extractor.extract_unknowns(content),
        evidence=extractor.extract_evidence(content, canonical),
        orchestration=detect_orchestration(artifact),
        display_adapter=get_display_adapter_for_phase(canonical),
    )


__all__ = ["ArtifactInput", "ArtifactsInput", "PhaseModel", "artifacts_to_map", "normalize_phase_artifact"]
