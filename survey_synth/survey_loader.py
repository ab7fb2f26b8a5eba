"""Survey definition files: YAML with questions, business context and demographics."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from survey_synth.models import BusinessContext, DemographicsConfig, Question


@dataclass
class SurveyDefinition:
    title: str
    questions: list[Question]
    business_context: BusinessContext = field(default_factory=BusinessContext)
    demographics: DemographicsConfig = field(default_factory=DemographicsConfig)


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def parse_survey(raw: dict[str, Any]) -> SurveyDefinition:
    """Build a SurveyDefinition from an already-decoded mapping.

    Raises:
        ValueError: If the survey has no questions.
    """
    questions = [Question.from_dict(q) for q in raw.get("questions") or []]
    if not questions:
        raise ValueError("Survey definition has no questions")

    ctx = raw.get("business_context") or {}
    demo = raw.get("demographics") or {}
    title = str(raw.get("title") or "Untitled")
    return SurveyDefinition(
        title=title,
        questions=questions,
        business_context=BusinessContext(
            product_name=ctx.get("product_name"),
            product_description=ctx.get("product_description"),
            industry=ctx.get("industry"),
            target_market=_as_list(ctx.get("target_market")),
            pain_points=_as_list(ctx.get("pain_points")),
            title=title,
            survey_type=raw.get("survey_type"),
        ),
        demographics=DemographicsConfig(
            collect_age=bool(demo.get("age", False)),
            collect_gender=bool(demo.get("gender", False)),
            collect_location=bool(demo.get("location", False)),
            collect_education=bool(demo.get("education", False)),
            collect_income=bool(demo.get("income", False)),
        ),
    )


def load_survey(path: Path) -> SurveyDefinition:
    """Read and parse a survey definition YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a mapping or has no questions.
    """
    if not path.exists():
        raise FileNotFoundError(f"Survey file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Survey file must contain a mapping: {path}")
    return parse_survey(raw)
