"""Tests for survey_synth/output.py."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from survey_synth.models import Answer, BatchTiming, GeneratedResponse, GenerationResult, Trait, TraitScore
from survey_synth.output import _slug, print_generation_summary, save_to_file, trait_averages

_START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_slug_basic():
    assert _slug("Dinner habits: 2026 edition!") == "dinner-habits-2026-edition"


def test_slug_max_len():
    assert len(_slug("a" * 100)) <= 40


def test_slug_empty_falls_back():
    assert _slug("???") == "survey"


def _response(score: int, fallback: bool = False) -> GeneratedResponse:
    return GeneratedResponse(
        answers=[Answer(1, "daily"), Answer(2, 7)],
        demographics={"age": 25},
        traits=[TraitScore(t, score) for t in Trait],
        started_at=_START,
        completed_at=_START + timedelta(seconds=90),
        used_fallback=fallback,
    )


@pytest.fixture
def sample_result() -> GenerationResult:
    return GenerationResult(
        responses=[_response(40), _response(60, fallback=True)],
        batch_timings=[BatchTiming(1, _START, _START + timedelta(seconds=2), 2000, 2)],
    )


def test_trait_averages(sample_result):
    averages = trait_averages(sample_result)
    assert list(averages) == [t.label for t in Trait]
    assert all(v == 50 for v in averages.values())


def test_trait_averages_empty():
    assert trait_averages(GenerationResult(responses=[])) == {}


def test_save_to_file_creates_output_dir(tmp_path: Path, sample_result):
    output_dir = tmp_path / "nested" / "output"
    saved = save_to_file(sample_result, output_dir, "Dinner habits")
    assert saved.exists()
    assert saved.suffix == ".json"
    assert "dinner-habits" in saved.name


def test_save_to_file_content(tmp_path: Path, sample_result):
    saved = save_to_file(sample_result, tmp_path, "Dinner habits")
    document = json.loads(saved.read_text(encoding="utf-8"))
    assert document["survey"] == "Dinner habits"
    assert len(document["responses"]) == 2
    first = document["responses"][0]
    assert first["responses"] == [{"questionId": 1, "answer": "daily"}, {"questionId": 2, "answer": 7}]
    assert first["demographics"] == {"age": 25}
    assert first["traits"][0] == {"name": "Innovation", "score": 40, "category": "behavioral"}
    assert first["startTime"] == _START.isoformat()
    assert document["batchTimings"] == [{
        "batchNumber": 1,
        "batchStartTime": _START.isoformat(),
        "batchCompleteTime": (_START + timedelta(seconds=2)).isoformat(),
        "batchDurationMs": 2000,
        "responseCount": 2,
    }]


def test_print_generation_summary_runs(sample_result, capsys):
    print_generation_summary(sample_result)
    out = capsys.readouterr().out
    assert "Generation Summary" in out
    assert "Fallbacks: 1" in out
