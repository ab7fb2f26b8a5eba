"""Deterministic persona seeds: one demographic tuple per response ordinal."""

from survey_synth.models import PersonaSeed

AGE_BUCKETS = [18, 25, 35, 45, 55, 65]
GENDERS = ["", "male", "female", "non-binary", "other"]
LOCATIONS = [
    "Seattle, WA, USA",
    "Chicago, IL, USA",
    "Austin, TX, USA",
    "Miami, FL, USA",
    "Toronto, ON, Canada",
    "London, UK",
    "Berlin, Germany",
    "Sydney, Australia",
]
EDUCATION_LEVELS = ["high-school", "associate", "bachelor", "master", "doctorate", "other"]
INCOME_BANDS = ["under-25k", "25k-50k", "50k-75k", "75k-100k", "100k-150k", "150k-plus"]


def _pick(values: list, seed: int):
    return values[abs(seed) % len(values)]


def build_persona_seed(ordinal: int) -> PersonaSeed:
    """Return the persona seed for a 1-based response ordinal.

    Each field uses its own offset so consecutive ordinals move every field.
    """
    return PersonaSeed(
        age=_pick(AGE_BUCKETS, ordinal + 1),
        gender=_pick(GENDERS, ordinal + 2),
        location=_pick(LOCATIONS, ordinal + 3),
        education=_pick(EDUCATION_LEVELS, ordinal + 4),
        income=_pick(INCOME_BANDS, ordinal + 5),
    )
