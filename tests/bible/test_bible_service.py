from services.bible.app.config import AggregationTuning, BibleSettings
from services.bible.app.domain.bible_service import BibleService
from services.bible.app.domain.project_aggregation import PlanningRun
from services.bible.app.domain.types import PhaseArtifact

NOW = 1_700_000_000_000


def test_settings_read_nested_env(monkeypatch):
    monkeypatch.setenv("BIBLE_AGGREGATION__MAX_RUNS_PER_PROJECT", "5")
    monkeypatch.setenv("BIBLE_OBSERVABILITY__LOG_LEVEL", "debug")

    settings = BibleSettings()

    assert settings.aggregation.max_runs_per_project == 5
    assert settings.aggregation.handoff_phase_total == 16
    assert settings.observability.log_level == "debug"


def test_handoff_uses_configured_phase_total():
    service = BibleService(BibleSettings(aggregation=AggregationTuning(handoff_phase_total=4)))
    artifacts = [PhaseArtifact(phase="opportunity"), PhaseArtifact(phase="strategy")]

    payload = service.handoff(artifacts, "run-1", now=NOW)

    assert payload.metadata.completeness == 50


def test_project_respects_configured_run_window_and_strategy():
    settings = BibleSettings(aggregation=AggregationTuning(max_runs_per_project=1, default_strategy="latest"))
    service = BibleService(settings)
    runs = [
        PlanningRun(id="old", created_at=1, artifacts={"validation": PhaseArtifact(phase="validation", id="v-old")}),
        PlanningRun(id="new", created_at=2, artifacts={"opportunity": PhaseArtifact(phase="opportunity", id="o-new")}),
    ]

    project = service.project(runs, now=NOW)

    assert list(project.artifacts) == ["opportunity"]
    document = project.to_document()
    assert document["artifacts"]["opportunity"]["id"] == "o-new"
    assert len(document["departments"]) == 15


def test_bible_document_shape():
    service = BibleService(BibleSettings())

    document = service.bible([], "run-empty", now=NOW).to_document()

    assert document["agentJSON"]["metadata"]["generatedAt"] == NOW
    assert all(view["completeness"] == 0 for view in document["departments"])
