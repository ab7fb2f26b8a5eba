"""Integration tests: real API calls, no mocks. Requires GEMINI_API_KEY in .env."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

load_dotenv()

pytestmark = pytest.mark.integration

if not os.environ.get("GEMINI_API_KEY", "").strip():
    pytestmark = pytest.mark.skip(reason="GEMINI_API_KEY not set")

SAMPLE_SURVEY = Path(__file__).parent.parent / "surveys" / "sample_survey.yaml"


async def test_full_generation_pipeline(tmp_path: Path):
    """Generate a small batch against the live provider, verify every answer is in-domain."""
    import json

    from config.config_loader import load_config
    from survey_synth.engine import build_engine
    from survey_synth.models import QuestionKind, Trait
    from survey_synth.output import save_to_file
    from survey_synth.survey_loader import load_survey

    config = load_config()
    survey = load_survey(SAMPLE_SURVEY)
    engine = build_engine(config, "gemini")

    result = await engine.generate(survey.questions, survey.business_context, survey.demographics, 6)

    assert len(result.responses) == 6
    assert [t.response_count for t in result.batch_timings] == [5, 1]
    for response in result.responses:
        assert [t.trait for t in response.traits] == list(Trait)
        assert set(response.demographics) <= set(survey.demographics.enabled_fields())
        for question in survey.questions:
            value = response.answer_for(question.id)
            if question.kind is QuestionKind.OPTION:
                assert value in question.option_values
            elif question.kind is QuestionKind.NUMERIC:
                low, high = question.numeric_range
                assert low <= value <= high
            elif question.kind is QuestionKind.RANKING:
                assert len(json.loads(value)) == len(question.options)
            else:
                assert value.strip()

    saved = save_to_file(result, tmp_path / "output", survey.title)
    assert saved.exists()
