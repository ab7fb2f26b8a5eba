"""Single-response generation: prompt, model call, repair, validation, fallback."""

import logging
import random
from datetime import datetime, timedelta, timezone

from survey_synth.demographics import default_demographics, filter_demographics
from survey_synth.extraction import MalformedOutputError, parse_model_json, preview
from survey_synth.models import (
    BusinessContext,
    DemographicsConfig,
    GeneratedResponse,
    Question,
)
from survey_synth.persona import build_persona_seed
from survey_synth.prompts import build_generation_prompt
from survey_synth.providers.base import AIProvider, ProviderError, ProviderTimeoutError
from survey_synth.traits import DEFAULT_JITTER, default_traits, jitter_traits, normalize_traits
from survey_synth.validation import fallback_answers, validate_answers

logger = logging.getLogger(__name__)

# Simulated respondent pacing, in seconds
_BASE_SECONDS_PER_QUESTION = 35.0
_JITTER_SECONDS_PER_QUESTION = 40.0
_MIN_COMPLETION_SECONDS = 30.0
_MAX_COMPLETION_SECONDS = 600.0


def realistic_completion_seconds(question_count: int, rng: random.Random | None = None) -> float:
    """How long a human would plausibly take, clamped to 30s..10min."""
    rng = rng or random
    total = sum(
        _BASE_SECONDS_PER_QUESTION + rng.random() * _JITTER_SECONDS_PER_QUESTION
        for _ in range(question_count)
    )
    return max(_MIN_COMPLETION_SECONDS, min(_MAX_COMPLETION_SECONDS, total))


def _timestamps(question_count: int, rng: random.Random | None) -> tuple[datetime, datetime]:
    started = datetime.now(timezone.utc)
    return started, started + timedelta(seconds=realistic_completion_seconds(question_count, rng))


def build_fallback_response(
    questions: list[Question],
    demographics: DemographicsConfig,
    rng: random.Random | None = None,
) -> GeneratedResponse:
    """Complete, domain-valid response built without any model call."""
    started, completed = _timestamps(len(questions), rng)
    return GeneratedResponse(
        answers=validate_answers(
            [{"questionId": a.question_id, "answer": a.value} for a in fallback_answers(questions, rng)],
            questions,
            rng,
        ),
        demographics=default_demographics(demographics, rng),
        traits=default_traits(),
        started_at=started,
        completed_at=completed,
        used_fallback=True,
    )


class ResponseGenerator:
    """Produces one GeneratedResponse per ordinal. Never raises."""

    def __init__(
        self,
        provider: AIProvider,
        questions: list[Question],
        context: BusinessContext,
        demographics: DemographicsConfig,
        *,
        trait_jitter: int = DEFAULT_JITTER,
        timeout_retries: int = 1,
        strict_demographics: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self._provider = provider
        self._questions = sorted(questions, key=lambda q: q.order)
        self._context = context
        self._demographics = demographics
        self._trait_jitter = trait_jitter
        self._timeout_retries = timeout_retries
        self._strict_demographics = strict_demographics
        self._rng = rng

    async def _complete_with_retry(self, prompt: str, ordinal: int) -> str:
        retries_left = max(0, self._timeout_retries)
        while True:
            try:
                completion = await self._provider.complete(prompt)
                return completion.content
            except ProviderTimeoutError:
                if retries_left == 0:
                    raise
                retries_left -= 1
                logger.warning(
                    "Provider %s timed out for response #%d, retrying (%d retries left)",
                    self._provider.name(), ordinal, retries_left,
                )

    def _from_text(self, text: str) -> GeneratedResponse:
        parsed = parse_model_json(text)
        if not isinstance(parsed, dict):
            raise MalformedOutputError(f"Expected a JSON object, got {type(parsed).__name__}")

        started, completed = _timestamps(len(self._questions), self._rng)
        return GeneratedResponse(
            answers=validate_answers(parsed.get("responses"), self._questions, self._rng),
            demographics=filter_demographics(
                parsed.get("demographics"), self._demographics, strict=self._strict_demographics
            ),
            traits=jitter_traits(normalize_traits(parsed.get("traits")), self._trait_jitter, self._rng),
            started_at=started,
            completed_at=completed,
        )

    async def generate(self, ordinal: int) -> GeneratedResponse:
        """Generate response number ``ordinal`` (1-based), falling back on any failure."""
        text: str | None = None
        try:
            prompt = build_generation_prompt(
                self._questions,
                self._context,
                self._demographics,
                build_persona_seed(ordinal),
                ordinal,
            )
            text = await self._complete_with_retry(prompt, ordinal)
            return self._from_text(text)
        except ProviderError as exc:
            logger.error("Response #%d: provider failure, using fallback: %s", ordinal, exc)
        except MalformedOutputError as exc:
            logger.error("Response #%d: %s. Preview: %s", ordinal, exc, preview(text))
        except Exception as exc:
            logger.error("Response #%d: unexpected %s, using fallback: %s", ordinal, type(exc).__name__, exc)
        return build_fallback_response(self._questions, self._demographics, self._rng)
