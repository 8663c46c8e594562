"""Department aggregation: pulls mapped phase fields into display views."""
from __future__ import annotations

import time
from typing import Any, Mapping

from .departments import (
    DEPARTMENT_CONFIGS,
    DEPARTMENT_MAPPINGS,
    NO_DATA_PLACEHOLDER,
    DepartmentConfig,
    DepartmentId,
    DepartmentMapping,
    DepartmentSection,
    DepartmentView,
    ListContent,
    MarkdownContent,
    PhaseSourceReference,
    SectionContent,
    SectionMapping,
    department_description,
    department_title,
)
from .normalizer import ArtifactsInput, artifacts_to_map
from .types import PhaseArtifact
from .values import get_path, percentage, stringify


def epoch_ms() -> int:
    return int(time.time() * 1000)


def split_source(source: str) -> tuple[str, str]:
    """Split ``"<phase>.<field.path>"`` on the first dot."""
    phase, _, field_path = source.partition(".")
    return phase, field_path


def resolve_source(artifacts: Mapping[str, PhaseArtifact], source: str) -> Any:
    """Value behind a source path, or ``None`` when any link is missing.

    Empty strings are treated the same as a missing value.
    """
    phase, field_path = split_source(source)
    artifact = artifacts.get(phase)
    if artifact is None or not field_path:
        return None
    value = get_path(artifact.content, field_path)
    if value is None or value == "":
        return None
    return value


def render_values(values: list[Any]) -> SectionContent:
    items = [stringify(value) for value in values]
    if not items:
        return MarkdownContent(text=NO_DATA_PLACEHOLDER)
    if len(items) == 1:
        return MarkdownContent(text=items[0])
    return ListContent(items=items)


def build_section(section: SectionMapping, artifacts: Mapping[str, PhaseArtifact]) -> DepartmentSection:
    resolved = [resolve_source(artifacts, source) for source in section.sources]
    present = [value for value in resolved if value is not None]
    content = section.transform(present) if section.transform is not None else render_values(present)
    references = []
    for source, value in zip(section.sources, resolved):
        phase, field_path = split_source(source)
        references.append(PhaseSourceReference(phase=phase, field=field_path, extracted=value))
    return DepartmentSection(name=section.name, content=content, sources=references)


def department_completeness(mapping: DepartmentMapping, artifacts: Mapping[str, PhaseArtifact]) -> int:
    phases = mapping.all_phases
    if not phases:
        return 0
    present = sum(1 for phase in phases if phase in artifacts)
    return percentage(present, len(phases))


def aggregate_department(
    dept: DepartmentId,
    mapping: DepartmentMapping,
    artifacts: Mapping[str, PhaseArtifact],
    configs: Mapping[DepartmentId, DepartmentConfig] = DEPARTMENT_CONFIGS,
    now: int | None = None,
) -> DepartmentView:
    return DepartmentView(
        id=dept,
        title=department_title(dept, configs),
        summary=department_description(dept, configs),
        sections=[build_section(section, artifacts) for section in mapping.sections],
        completeness=department_completeness(mapping, artifacts),
        last_updated=epoch_ms() if now is None else now,
    )


def aggregate_departments(
    artifacts: ArtifactsInput,
    mappings: Mapping[DepartmentId, DepartmentMapping] = DEPARTMENT_MAPPINGS,
    configs: Mapping[DepartmentId, DepartmentConfig] = DEPARTMENT_CONFIGS,
    now: int | None = None,
) -> list[DepartmentView]:
    """Build one view per department mapping, in mapping order.

    ``artifacts`` may be a phase-keyed mapping or a list; phase names are
    normalized before lookup. ``now`` (epoch milliseconds) pins
    ``last_updated`` for every view.
    """
    keyed = artifacts_to_map(artifacts)
    timestamp = epoch_ms() if now is None else now
    return [
        aggregate_department(dept, mapping, keyed, configs=configs, now=timestamp)
        for dept, mapping in mappings.items()
    ]


__all__ = [
    "aggregate_department",
    "aggregate_departments",
    "build_section",
    "department_completeness",
    "epoch_ms",
    "render_values",
    "resolve_source",
    "split_source",
]
