"""Shared pytest fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, EngineSettings, ModelConfig
from survey_synth.models import (
    BusinessContext,
    Completion,
    DemographicsConfig,
    Question,
    QuestionOption,
)
from survey_synth.providers.base import AIProvider

TRAITS_PAYLOAD = [
    {"name": "Innovation", "score": 75, "category": "behavioral"},
    {"name": "Analytical Thinking", "score": 80, "category": "cognitive"},
    {"name": "Leadership", "score": 65, "category": "social"},
    {"name": "Adaptability", "score": 70, "category": "behavioral"},
    {"name": "Creativity", "score": 60, "category": "cognitive"},
]


def completion(content: str, provider: str = "mock") -> Completion:
    return Completion(provider=provider, model="mock-model", content=content, latency_sec=0.1, token_count=10)


def model_payload(answers: dict[int, object], demographics: dict | None = None, traits: list | None = None) -> str:
    """JSON text shaped like a well-behaved model reply."""
    return json.dumps({
        "responses": [{"questionId": qid, "answer": value} for qid, value in answers.items()],
        "demographics": demographics if demographics is not None else {},
        "traits": traits if traits is not None else TRAITS_PAYLOAD,
    })


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_content: str = "{}") -> None:
        self._name = provider_name
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because complete is defined in the class body below.
        self.complete = AsyncMock(return_value=completion(response_content, provider_name))  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def complete(self, prompt: str) -> Completion:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return completion(self._response_content, self._name)


@pytest.fixture
def choice_question() -> Question:
    return Question(
        id=1,
        text="How often do you cook at home?",
        question_type="multiple-choice",
        order=1,
        required=True,
        options=(QuestionOption("rarely", "Rarely"), QuestionOption("daily", "Daily")),
    )


@pytest.fixture
def slider_question() -> Question:
    return Question(
        id=2,
        text="How likely are you to recommend us?",
        question_type="slider",
        order=2,
        slider_min=1,
        slider_max=10,
    )


@pytest.fixture
def ranking_question() -> Question:
    return Question(
        id=3,
        text="Rank these features.",
        question_type="ranking",
        order=3,
        options=(
            QuestionOption("price", "Price"),
            QuestionOption("quality", "Quality"),
            QuestionOption("variety", "Variety"),
        ),
    )


@pytest.fixture
def text_question() -> Question:
    return Question(id=4, text="Anything else?", question_type="text", order=4)


@pytest.fixture
def scenario_question() -> Question:
    return Question(
        id=5,
        text="Tuesday evening, what do you do?",
        question_type="scenario",
        order=5,
        scenario_text="You get home at 7pm.",
        options=(
            QuestionOption("takeout", "Order takeout"),
            QuestionOption("kit", "Cook a meal kit"),
            QuestionOption("skip", "Skip dinner"),
        ),
    )


@pytest.fixture
def sample_questions(choice_question, slider_question, ranking_question, text_question, scenario_question) -> list[Question]:
    return [choice_question, slider_question, ranking_question, text_question, scenario_question]


@pytest.fixture
def sample_context() -> BusinessContext:
    return BusinessContext(
        product_name="FreshCrate",
        product_description="Weekly meal kits",
        industry="Food",
        target_market=["busy professionals"],
        pain_points=["no time to plan meals"],
    )


@pytest.fixture
def all_demographics() -> DemographicsConfig:
    return DemographicsConfig(True, True, True, True, True)


@pytest.fixture
def partial_demographics() -> DemographicsConfig:
    return DemographicsConfig(collect_age=True, collect_income=True)


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="gemini",
        sdk="google-genai",
        model="gemini-2.5-flash",
        api_key_env="TEST_GEMINI_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )


@pytest.fixture
def sample_app_config(sample_model_config: ModelConfig, tmp_path: Path) -> AppConfig:
    return AppConfig(
        engine=EngineSettings(provider="gemini", output_dir=tmp_path / "output"),
        models={"gemini": sample_model_config},
        available_providers=set(),
    )


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
