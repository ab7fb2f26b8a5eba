"""Demographics allow-listing and fallback demographics."""

import logging
import random
from typing import Any

from survey_synth.models import DemographicsConfig
from survey_synth.persona import EDUCATION_LEVELS, GENDERS, INCOME_BANDS

logger = logging.getLogger(__name__)

# Age bucket lower bounds; 0 means "prefer not to say"
AGE_CHOICES = [0, 18, 25, 35, 45, 55, 65]
FALLBACK_LOCATIONS = ["United States", "Canada", "United Kingdom", "Australia", "Germany", "France"]

_ENUMERATED: dict[str, list] = {
    "age": AGE_CHOICES,
    "gender": GENDERS,
    "education": EDUCATION_LEVELS,
    "income": INCOME_BANDS,
}


def _present(key: str, value: Any) -> bool:
    # age may legitimately be 0; the other fields need a truthy value
    if key == "age":
        return value is not None
    return bool(value)


def filter_demographics(
    data: Any,
    config: DemographicsConfig,
    *,
    strict: bool = False,
) -> dict[str, Any]:
    """Keep only enabled, present demographic fields.

    Values are passed through unchanged. With ``strict`` set, enumerated
    fields whose value is outside the prompted enum are dropped as well.
    """
    if not isinstance(data, dict):
        return {}

    filtered: dict[str, Any] = {}
    for key in config.enabled_fields():
        value = data.get(key)
        if not _present(key, value):
            continue
        if strict and key in _ENUMERATED and value not in _ENUMERATED[key]:
            logger.warning("Dropping out-of-range demographic %s=%r", key, value)
            continue
        filtered[key] = value
    return filtered


def default_demographics(config: DemographicsConfig, rng: random.Random | None = None) -> dict[str, Any]:
    """Random in-domain demographics for every enabled field."""
    rng = rng or random
    choices = {
        "age": AGE_CHOICES,
        "gender": GENDERS,
        "location": FALLBACK_LOCATIONS,
        "education": EDUCATION_LEVELS,
        "income": INCOME_BANDS,
    }
    return {key: rng.choice(choices[key]) for key in config.enabled_fields()}
