"""Public entry points of the synthetic response engine."""

import logging
import random
from typing import Any

from config.config_loader import AppConfig, EngineSettings
from survey_synth.extraction import MalformedOutputError, parse_model_json, preview
from survey_synth.generator import ResponseGenerator
from survey_synth.models import (
    Answer,
    BusinessContext,
    DemographicsConfig,
    GenerationResult,
    Question,
    TraitScore,
)
from survey_synth.prompts import build_trait_scoring_prompt
from survey_synth.providers.anthropic import AnthropicProvider
from survey_synth.providers.base import AIProvider, ProviderError
from survey_synth.providers.gemini import GeminiProvider
from survey_synth.providers.openai_provider import OpenAIProvider
from survey_synth.scheduler import BatchCallback, run_batches
from survey_synth.traits import default_traits, normalize_traits

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "gemini": GeminiProvider,
    "claude": AnthropicProvider,
    "openai": OpenAIProvider,
}


def _as_questions(questions: list[Question | dict[str, Any]]) -> list[Question]:
    return [q if isinstance(q, Question) else Question.from_dict(q) for q in questions]


class SyntheticResponseEngine:
    """Generates schema-valid synthetic survey responses through one provider."""

    def __init__(
        self,
        provider: AIProvider,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or EngineSettings()
        self._rng = rng

    @property
    def provider(self) -> AIProvider:
        return self._provider

    async def generate(
        self,
        questions: list[Question | dict[str, Any]],
        business_context: BusinessContext,
        demographics: DemographicsConfig,
        count: int,
        on_batch_complete: BatchCallback | None = None,
    ) -> GenerationResult:
        """Generate ``count`` responses; always returns exactly ``count``."""
        survey = _as_questions(questions)
        generator = ResponseGenerator(
            self._provider,
            survey,
            business_context,
            demographics,
            trait_jitter=self._settings.trait_jitter,
            timeout_retries=self._settings.timeout_retries,
            strict_demographics=self._settings.validate_demographics,
            rng=self._rng,
        )
        logger.info(
            "Generating %d responses for %d questions via %s (%d concurrent batches)",
            count, len(survey), self._provider.name(), self._settings.max_concurrent_batches,
        )
        return await run_batches(
            generator.generate,
            survey,
            count,
            max_concurrent_batches=self._settings.max_concurrent_batches,
            enforce_diversity=self._settings.enforce_diversity,
            on_batch_complete=on_batch_complete,
        )

    async def score_traits_from_submission(
        self,
        questions: list[Question | dict[str, Any]],
        answers: list[Answer],
        context: BusinessContext,
    ) -> list[TraitScore]:
        """Score the five canonical traits for a real submission.

        The model must return a bare JSON array. Any failure yields neutral
        scores rather than an exception.
        """
        text: str | None = None
        try:
            prompt = build_trait_scoring_prompt(_as_questions(questions), answers, context)
            completion = await self._provider.complete(prompt)
            text = completion.content
            parsed = parse_model_json(text, opener="[")
            if not isinstance(parsed, list):
                raise MalformedOutputError(f"Expected a JSON array, got {type(parsed).__name__}")
        except ProviderError as exc:
            logger.error("Trait scoring failed, using neutral traits: %s", exc)
            return default_traits()
        except MalformedOutputError as exc:
            logger.error("Trait scoring: %s. Preview: %s", exc, preview(text))
            return default_traits()
        except Exception as exc:
            logger.error("Trait scoring: unexpected %s, using neutral traits: %s", type(exc).__name__, exc)
            return default_traits()
        return normalize_traits(parsed)


def build_provider(config: AppConfig, provider_name: str | None = None) -> AIProvider:
    """Instantiate the configured provider.

    Raises:
        KeyError: If the provider is unknown or has no model config.
        MissingCredentialError: If its API key is not set.
    """
    name = provider_name or config.engine.provider
    if name not in PROVIDER_CLASSES:
        raise KeyError(f"Unknown provider '{name}', expected one of {sorted(PROVIDER_CLASSES)}")
    if name not in config.models:
        raise KeyError(f"No model configured for provider '{name}'")
    return PROVIDER_CLASSES[name](config.models[name])


def build_engine(config: AppConfig, provider_name: str | None = None) -> SyntheticResponseEngine:
    return SyntheticResponseEngine(build_provider(config, provider_name), config.engine)
