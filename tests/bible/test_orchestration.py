import pytest

from services.bible.app.domain.normalizer import normalize_phase_artifact
from services.bible.app.domain.orchestration import (
    ConsensusLevel,
    ModelOutput,
    OrchestrationResult,
    all_models_succeeded,
    consensus_level,
    consensus_score,
    detect_orchestration,
    failed_outputs,
    has_wild_ideas,
    is_orchestration_structure,
    successful_outputs,
)
from services.bible.app.domain.types import PhaseArtifact


def _structure(**overrides):
    value = {
        "finalText": "Merged answer",
        "modelOutputs": [
            {"model": "model-a", "text": "A", "durationMs": 1200},
            {"model": "model-b", "text": "", "durationMs": 30, "error": "timeout"},
        ],
        "wildIdeas": [{"model": "model-a", "wildIdea": "Go B2C", "reasoning": "Bigger market"}],
        "synthesizerModel": "model-s",
        "totalDurationMs": 1500,
    }
    value.update(overrides)
    return value


def test_detects_nested_orchestration_first():
    content = {"orchestration": _structure(finalText="nested"), **_structure(finalText="outer")}

    result = detect_orchestration(PhaseArtifact(phase="strategy", content=content))

    assert result is not None
    assert result.final_text == "nested"


def test_detects_content_itself():
    result = detect_orchestration(_structure())

    assert result.synthesizer_model == "model-s"
    assert result.total_duration_ms == 1500
    assert [output.model for output in result.model_outputs] == ["model-a", "model-b"]
    assert result.wild_ideas[0].wild_idea == "Go B2C"


@pytest.mark.parametrize("missing", ["finalText", "modelOutputs", "wildIdeas", "synthesizerModel"])
def test_three_of_four_fields_is_not_a_match(missing):
    value = _structure()
    del value[missing]

    assert not is_orchestration_structure(value)
    assert detect_orchestration(value) is None
    assert detect_orchestration({"orchestration": value}) is None


def test_wrong_field_type_is_not_a_match():
    assert detect_orchestration(_structure(modelOutputs="a,b")) is None
    assert detect_orchestration(_structure(synthesizerModel=None)) is None


def test_empty_or_missing_artifact():
    assert detect_orchestration(None) is None
    assert detect_orchestration({}) is None
    assert detect_orchestration(PhaseArtifact(phase="strategy")) is None


def test_consensus_score_penalties():
    result = detect_orchestration(_structure())

    # one wild idea and one failed model
    assert consensus_score(result) == 75
    assert consensus_level(consensus_score(result)) is ConsensusLevel.high


def test_consensus_score_is_clamped_and_monotonic():
    previous = 101
    for count in range(10):
        result = OrchestrationResult(
            final_text="",
            synthesizer_model="s",
            wild_ideas=detect_orchestration(_structure()).wild_ideas * count,
        )
        score = consensus_score(result)
        assert 0 <= score <= 100
        assert score <= previous
        previous = score
    assert previous == 0


def _failed(count):
    return [ModelOutput(model="m", text="", error="x")] * count


def test_consensus_score_never_rises_with_failed_outputs():
    scores = [
        consensus_score(OrchestrationResult(final_text="", synthesizer_model="s", model_outputs=_failed(count)))
        for count in range(12)
    ]

    assert scores[0] == 100
    assert all(0 <= score <= 100 for score in scores)
    assert all(later <= earlier for earlier, later in zip(scores, scores[1:]))
    assert scores[-1] == 0


@pytest.mark.parametrize(
    "wild, failed, expected",
    [(0, 0, 100), (1, 0, 85), (0, 3, 70), (2, 2, 50), (3, 6, 0), (7, 11, 0)],
)
def test_consensus_score_with_mixed_penalties(wild, failed, expected):
    wild_ideas = detect_orchestration(_structure()).wild_ideas * wild
    result = OrchestrationResult(
        final_text="", synthesizer_model="s", model_outputs=_failed(failed), wild_ideas=wild_ideas
    )

    assert consensus_score(result) == expected


@pytest.mark.parametrize("score, level", [(100, "high"), (70, "high"), (69, "moderate"), (40, "moderate"), (39, "low")])
def test_consensus_levels(score, level):
    assert consensus_level(score).value == level


def test_output_helpers():
    result = detect_orchestration(_structure())

    assert [o.model for o in successful_outputs(result)] == ["model-a"]
    assert [o.model for o in failed_outputs(result)] == ["model-b"]
    assert has_wild_ideas(result)
    assert not all_models_succeeded(result)


def test_normalizer_attaches_orchestration():
    model = normalize_phase_artifact("strategy", {"content": {"orchestration": _structure()}})

    assert model.orchestration is not None
    assert model.orchestration.final_text == "Merged answer"
