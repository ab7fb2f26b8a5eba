"""Normalize model-supplied trait scores onto the fixed five-trait taxonomy."""

import random
import re
from typing import Any

from survey_synth.models import Trait, TraitScore

NEUTRAL_SCORE = 50
DEFAULT_JITTER = 8

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def _parse_score(raw: Any) -> int:
    """Integer-prefix parse; anything unparseable scores 0."""
    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, (int, float)):
        try:
            return int(raw)
        except (OverflowError, ValueError):
            return 0
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else 0


def default_traits() -> list[TraitScore]:
    return [TraitScore(trait, NEUTRAL_SCORE) for trait in Trait]


def normalize_traits(raw: Any) -> list[TraitScore]:
    """Map arbitrary trait input onto exactly five canonical traits.

    Unknown names are dropped, known scores are clamped to 0-100 and any
    trait missing from the input gets the neutral score.
    """
    if not isinstance(raw, list):
        return default_traits()

    scores: dict[Trait, int] = {}
    for item in raw:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        trait = Trait.from_label(name) if isinstance(name, str) else None
        if trait is not None:
            scores[trait] = _clamp(_parse_score(item.get("score", 0)))

    return [TraitScore(trait, scores.get(trait, NEUTRAL_SCORE)) for trait in Trait]


def jitter_traits(
    traits: list[TraitScore],
    amplitude: int = DEFAULT_JITTER,
    rng: random.Random | None = None,
) -> list[TraitScore]:
    """Add uniform noise in [-amplitude, amplitude] to each score, clamped."""
    rng = rng or random
    return [
        TraitScore(t.trait, _clamp(t.score + rng.randint(-amplitude, amplitude)))
        for t in traits
    ]
