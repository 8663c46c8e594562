"""Planning bible API."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from ..domain.bible_service import BibleService
from ..domain.phases import POST_PIPELINE_PHASES, normalize_planning_phase
from ..domain.project_aggregation import PlanningRun
from ..domain.serialization import to_document
from .deps import get_bible_service

router = APIRouter(tags=["bible"])

# A flat list of artifacts, or a mapping keyed by phase name.
ArtifactsPayload = Union[List[Dict[str, Any]], Dict[str, Optional[Dict[str, Any]]]]


class DepartmentsRequest(BaseModel):
    artifacts: ArtifactsPayload = Field(default_factory=list)


class RunBibleRequest(BaseModel):
    run_id: str = Field(alias="runId")
    artifacts: ArtifactsPayload = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class RunPayload(BaseModel):
    id: str
    created_at: Union[int, datetime] = Field(alias="createdAt", description="Epoch milliseconds or ISO-8601")
    artifacts: ArtifactsPayload = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def created_at_ms(self) -> int:
        if isinstance(self.created_at, datetime):
            created_at = self.created_at
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            return int(created_at.timestamp() * 1000)
        return self.created_at

    def to_run(self) -> PlanningRun:
        return PlanningRun.build(id=self.id, created_at=self.created_at_ms(), artifacts=self.artifacts)


class ProjectAggregateRequest(BaseModel):
    runs: List[RunPayload] = Field(default_factory=list)


@router.post("/bible/departments")
async def build_departments(payload: DepartmentsRequest, service: BibleService = Depends(get_bible_service)):
    views = service.departments(payload.artifacts)
    return {"departments": to_document(views)}


@router.post("/bible/handoff")
async def build_handoff(payload: RunBibleRequest, service: BibleService = Depends(get_bible_service)):
    return to_document(service.handoff(payload.artifacts, payload.run_id))


@router.post("/bible")
async def build_bible(payload: RunBibleRequest, service: BibleService = Depends(get_bible_service)):
    return service.bible(payload.artifacts, payload.run_id).to_document()


@router.post("/bible/phases/{phase}/normalize")
async def normalize_phase(
    phase: str,
    artifact: Dict[str, Any] = Body(...),
    service: BibleService = Depends(get_bible_service),
):
    if normalize_planning_phase(phase) is None and phase not in POST_PIPELINE_PHASES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown planning phase {phase}")
    return to_document(service.normalize_phase(phase, artifact))


@router.post("/projects/aggregate")
async def aggregate_project(payload: ProjectAggregateRequest, service: BibleService = Depends(get_bible_service)):
    project = service.project(run.to_run() for run in payload.runs)
    return project.to_document()


__all__ = ["router"]
