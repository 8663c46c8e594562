"""Bible assembly service: wires settings, logging and tracing around the pure core."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import structlog

from ..config import BibleSettings, get_settings
from ..observability.otel import get_meter, get_tracer
from .aggregator import aggregate_departments, epoch_ms
from .departments import DepartmentView
from .handoff import ExecutionPayload, generate_handoff
from .normalizer import ArtifactInput, ArtifactsInput, PhaseModel, artifacts_to_map, normalize_phase_artifact
from .project_aggregation import AggregationStrategy, PlanningRun, aggregate_project_artifacts
from .serialization import to_document
from .types import PhaseArtifact

logger = structlog.get_logger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

_views_built = meter.create_counter("bible.department_views", description="Department views assembled")
_handoffs_built = meter.create_counter("bible.handoffs", description="Execution payloads generated")


@dataclass(frozen=True)
class PlanningBible:
    departments: list[DepartmentView]
    agent_json: ExecutionPayload

    def to_document(self) -> dict[str, Any]:
        return {"departments": to_document(self.departments), "agentJSON": to_document(self.agent_json)}


@dataclass(frozen=True)
class ProjectBible:
    artifacts: dict[str, PhaseArtifact]
    departments: list[DepartmentView]

    def to_document(self) -> dict[str, Any]:
        return {"artifacts": to_document(self.artifacts), "departments": to_document(self.departments)}


class BibleService:
    def __init__(self, settings: BibleSettings | None = None) -> None:
        self._settings = settings or get_settings()

    def departments(self, artifacts: ArtifactsInput, now: int | None = None) -> list[DepartmentView]:
        keyed = artifacts_to_map(artifacts)
        with tracer.start_as_current_span("bible.departments") as span:
            span.set_attribute("bible.phase_count", len(keyed))
            views = aggregate_departments(keyed, now=now)
        _views_built.add(len(views))
        logger.info(
            "bible.departments.built",
            phases=len(keyed),
            departments=len(views),
            completeness={view.id.value: view.completeness for view in views},
        )
        return views

    def handoff(self, artifacts: ArtifactsInput, run_id: str, now: int | None = None) -> ExecutionPayload:
        keyed = artifacts_to_map(artifacts)
        with tracer.start_as_current_span("bible.handoff") as span:
            span.set_attribute("bible.run_id", run_id)
            span.set_attribute("bible.phase_count", len(keyed))
            payload = generate_handoff(
                keyed,
                run_id,
                now=now,
                total_phases=self._settings.aggregation.handoff_phase_total,
            )
        _handoffs_built.add(1)
        logger.info(
            "bible.handoff.generated",
            run_id=run_id,
            confidence=payload.metadata.confidence,
            completeness=payload.metadata.completeness,
            tasks=len(payload.execution.tasks),
        )
        return payload

    def bible(self, artifacts: ArtifactsInput, run_id: str, now: int | None = None) -> PlanningBible:
        timestamp = epoch_ms() if now is None else now
        keyed = artifacts_to_map(artifacts)
        return PlanningBible(
            departments=self.departments(keyed, now=timestamp),
            agent_json=self.handoff(keyed, run_id, now=timestamp),
        )

    def normalize_phase(self, phase: str, artifact: ArtifactInput) -> PhaseModel:
        with tracer.start_as_current_span("bible.normalize_phase") as span:
            span.set_attribute("bible.phase", phase)
            model = normalize_phase_artifact(phase, artifact)
        logger.debug(
            "bible.phase.normalized",
            phase=model.phase,
            takeaways=len(model.takeaways),
            decisions=len(model.decisions),
            unknowns=len(model.unknowns),
            evidence=len(model.evidence),
            orchestrated=model.orchestration is not None,
        )
        return model

    def project(self, runs: Iterable[PlanningRun], now: int | None = None) -> ProjectBible:
        tuning = self._settings.aggregation
        runs = list(runs)
        with tracer.start_as_current_span("bible.project_aggregate") as span:
            span.set_attribute("bible.run_count", len(runs))
            artifacts = aggregate_project_artifacts(
                runs,
                max_runs=tuning.max_runs_per_project,
                default_strategy=AggregationStrategy(tuning.default_strategy),
            )
        logger.info(
            "bible.project.aggregated",
            runs=len(runs),
            considered=min(len(runs), tuning.max_runs_per_project),
            phases=len(artifacts),
        )
        return ProjectBible(artifacts=artifacts, departments=self.departments(artifacts, now=now))


__all__ = ["BibleService", "PlanningBible", "ProjectBible"]
