"""Dataclasses for survey definitions and generated responses."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

_OPTION_FREE_TYPES = {"text", "slider", "ranking"}


def _optional_int(value: Any) -> int | None:
    """Slider bound as an int; None when missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


class QuestionKind(Enum):
    OPTION = "option"
    NUMERIC = "numeric"
    RANKING = "ranking"
    TEXT = "text"


class Trait(Enum):
    """The five canonical traits, each paired with its category."""

    INNOVATION = ("Innovation", "behavioral")
    ANALYTICAL_THINKING = ("Analytical Thinking", "cognitive")
    LEADERSHIP = ("Leadership", "social")
    ADAPTABILITY = ("Adaptability", "behavioral")
    CREATIVITY = ("Creativity", "cognitive")

    def __init__(self, label: str, category: str) -> None:
        self.label = label
        self.category = category

    @classmethod
    def from_label(cls, label: str) -> "Trait | None":
        for trait in cls:
            if trait.label == label:
                return trait
        return None


@dataclass(frozen=True)
class QuestionOption:
    value: str   # option identifier
    label: str

    @classmethod
    def from_raw(cls, raw: Any, index: int) -> "QuestionOption":
        if isinstance(raw, dict):
            value = raw.get("value") or raw.get("id") or f"option_{index}"
            label = raw.get("text") or raw.get("label") or raw.get("value") or str(value)
            return cls(value=str(value), label=str(label))
        return cls(value=str(raw), label=str(raw))


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    question_type: str
    order: int = 0
    required: bool = False
    options: tuple[QuestionOption, ...] = ()
    help_text: str | None = None
    scenario_text: str | None = None
    slider_min: int | None = None
    slider_max: int | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Question":
        """Build a Question from the survey-definition shape.

        ``options`` may be a list or a JSON-encoded list; slider bounds come
        from ``sliderConfig``.
        """
        raw_options = raw.get("options") or []
        if isinstance(raw_options, str):
            raw_options = json.loads(raw_options)
        slider = raw.get("sliderConfig") or raw.get("slider_config") or {}
        if not isinstance(slider, dict):
            slider = {}
        return cls(
            id=int(raw["id"]),
            text=str(raw.get("question") or raw.get("text") or ""),
            question_type=str(raw.get("questionType") or raw.get("question_type") or "text"),
            order=int(raw.get("order", 0)),
            required=bool(raw.get("required", False)),
            options=tuple(QuestionOption.from_raw(o, i) for i, o in enumerate(raw_options)),
            help_text=raw.get("helpText") or raw.get("help_text"),
            scenario_text=raw.get("scenarioText") or raw.get("scenario_text"),
            slider_min=_optional_int(slider.get("min")),
            slider_max=_optional_int(slider.get("max")),
        )

    @property
    def kind(self) -> QuestionKind:
        if self.question_type == "slider":
            return QuestionKind.NUMERIC
        if self.question_type == "ranking" and self.options:
            return QuestionKind.RANKING
        if self.options and self.question_type not in _OPTION_FREE_TYPES:
            return QuestionKind.OPTION
        return QuestionKind.TEXT

    @property
    def option_values(self) -> list[str]:
        return [o.value for o in self.options]

    @property
    def numeric_range(self) -> tuple[int, int]:
        low = _optional_int(self.slider_min)
        high = _optional_int(self.slider_max)
        low = 1 if low is None else low
        high = 10 if high is None else high
        return min(low, high), max(low, high)


@dataclass
class BusinessContext:
    product_name: str | None = None
    product_description: str | None = None
    industry: str | None = None
    target_market: list[str] = field(default_factory=list)
    pain_points: list[str] = field(default_factory=list)
    title: str | None = None        # submission trait scoring only
    survey_type: str | None = None  # submission trait scoring only


@dataclass
class DemographicsConfig:
    collect_age: bool = False
    collect_gender: bool = False
    collect_location: bool = False
    collect_education: bool = False
    collect_income: bool = False

    def enabled_fields(self) -> list[str]:
        flags = {
            "age": self.collect_age,
            "gender": self.collect_gender,
            "location": self.collect_location,
            "education": self.collect_education,
            "income": self.collect_income,
        }
        return [name for name, enabled in flags.items() if enabled]


@dataclass(frozen=True)
class PersonaSeed:
    age: int
    gender: str
    location: str
    education: str
    income: str


@dataclass(frozen=True)
class TraitScore:
    trait: Trait
    score: int  # 0-100

    @property
    def name(self) -> str:
        return self.trait.label

    @property
    def category(self) -> str:
        return self.trait.category

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": self.score, "category": self.category}


@dataclass
class Completion:
    provider: str          # "gemini", "claude", "openai"
    model: str             # actual model string used
    content: str
    latency_sec: float
    token_count: int | None


@dataclass
class Answer:
    question_id: int
    value: Any


@dataclass
class GeneratedResponse:
    answers: list[Answer]
    demographics: dict[str, Any]
    traits: list[TraitScore]
    started_at: datetime
    completed_at: datetime
    used_fallback: bool = False

    def answer_for(self, question_id: int) -> Any:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer.value
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "responses": [{"questionId": a.question_id, "answer": a.value} for a in self.answers],
            "demographics": dict(self.demographics),
            "traits": [t.to_dict() for t in self.traits],
            "startTime": self.started_at.isoformat(),
            "completeTime": self.completed_at.isoformat(),
        }


@dataclass
class BatchTiming:
    batch_number: int      # 1-indexed
    started_at: datetime
    completed_at: datetime
    duration_ms: int
    response_count: int


@dataclass
class BatchReport:
    """Passed to the per-batch callback once a batch is finalized."""

    batch_index: int       # 0-indexed
    responses: list[GeneratedResponse]
    started_at: datetime
    completed_at: datetime
    response_count: int


@dataclass
class GenerationResult:
    responses: list[GeneratedResponse]
    batch_timings: list[BatchTiming] = field(default_factory=list)
