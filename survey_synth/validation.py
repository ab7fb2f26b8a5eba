"""Per-question-type answer validation, coercion and fallback answers.

Every answer that leaves the engine passes through ``validate_answers``,
whether it came from the model or from the fallback path.
"""

import json
import logging
import random
from typing import Any

from survey_synth.models import Answer, Question, QuestionKind

logger = logging.getLogger(__name__)

CANNED_TEXT_ANSWERS = [
    "I find this product very useful for my daily tasks.",
    "The quality is good but could be improved in some areas.",
    "I would recommend this to others based on my experience.",
    "It meets my needs well and I'm satisfied with the purchase.",
    "There are some features I really like and some that could be better.",
    "Overall, I'm happy with this product and would buy it again.",
    "The product works as expected and provides good value.",
    "I have mixed feelings - some aspects are great, others need work.",
    "This product has helped me solve a specific problem I had.",
    "I appreciate the attention to detail in the design and functionality.",
]

PLACEHOLDER_ANSWERS = {
    "this is a realistic text response.",
    "[text response]",
    "text response",
    "n/a",
    "...",
}


def random_ranking(question: Question, rng: random.Random | None = None) -> str:
    """Serialized random permutation of all options with ranks 1..K."""
    rng = rng or random
    shuffled = list(question.options)
    rng.shuffle(shuffled)
    return json.dumps(
        [{"rank": i + 1, "option": opt.label, "value": opt.value} for i, opt in enumerate(shuffled)]
    )


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else None
    try:
        return int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return None


def coerce_option(question: Question, answer: Any, rng: random.Random | None = None) -> str:
    values = question.option_values
    if answer is not None and not isinstance(answer, bool) and str(answer) in values:
        return str(answer)
    rng = rng or random
    logger.warning(
        "Question %s: invalid option %r for %s, selecting random option",
        question.id, answer, question.question_type,
    )
    return rng.choice(values)


def coerce_numeric(question: Question, answer: Any, rng: random.Random | None = None) -> int:
    low, high = question.numeric_range
    number = _as_int(answer)
    if number is not None and low <= number <= high:
        return number
    rng = rng or random
    logger.warning("Question %s: %r outside [%d, %d], selecting random value", question.id, answer, low, high)
    return rng.randint(low, high)


def _normalize_ranking(question: Question, answer: Any) -> str | None:
    """Canonical ranking JSON if ``answer`` ranks every option exactly once."""
    items = answer
    if isinstance(answer, str):
        try:
            items = json.loads(answer)
        except json.JSONDecodeError:
            return None
    if not isinstance(items, list) or len(items) != len(question.options):
        return None

    by_value = {opt.value: opt for opt in question.options}
    ranked: list[tuple[int, str]] = []
    for item in items:
        if not isinstance(item, dict):
            return None
        rank = _as_int(item.get("rank"))
        value = item.get("value")
        if rank is None or not isinstance(value, str) or value not in by_value:
            return None
        ranked.append((rank, value))

    if sorted(r for r, _ in ranked) != list(range(1, len(by_value) + 1)):
        return None
    if {v for _, v in ranked} != set(by_value):
        return None

    ranked.sort()
    return json.dumps(
        [{"rank": rank, "option": by_value[value].label, "value": value} for rank, value in ranked]
    )


def coerce_ranking(question: Question, answer: Any, rng: random.Random | None = None) -> str:
    normalized = _normalize_ranking(question, answer)
    if normalized is not None:
        return normalized
    logger.warning("Question %s: incomplete ranking, generating random order", question.id)
    return random_ranking(question, rng)


def coerce_text(question: Question, answer: Any, rng: random.Random | None = None) -> str:
    text = "" if answer is None else str(answer).strip()
    if text and text.lower() not in PLACEHOLDER_ANSWERS:
        return text
    rng = rng or random
    logger.warning("Question %s: empty or placeholder text, using canned answer", question.id)
    return rng.choice(CANNED_TEXT_ANSWERS)


_COERCERS = {
    QuestionKind.OPTION: coerce_option,
    QuestionKind.NUMERIC: coerce_numeric,
    QuestionKind.RANKING: coerce_ranking,
    QuestionKind.TEXT: coerce_text,
}


def _collect_answers(raw: Any) -> dict[Any, Any]:
    """questionId -> answer from the model's ``responses`` array."""
    collected: dict[Any, Any] = {}
    if not isinstance(raw, list):
        return collected
    for item in raw:
        if not isinstance(item, dict) or "questionId" not in item:
            continue
        key = _as_int(item["questionId"])
        if key is not None and key not in collected:
            collected[key] = item.get("answer")
    return collected


def validate_answers(
    raw_responses: Any,
    questions: list[Question],
    rng: random.Random | None = None,
) -> list[Answer]:
    """One domain-valid answer per question, in question order."""
    collected = _collect_answers(raw_responses)
    return [
        Answer(q.id, _COERCERS[q.kind](q, collected.get(q.id), rng))
        for q in questions
    ]


def fallback_answers(questions: list[Question], rng: random.Random | None = None) -> list[Answer]:
    """Random in-domain answers for every question, without any model call."""
    rng = rng or random
    answers: list[Answer] = []
    for q in questions:
        kind = q.kind
        if kind is QuestionKind.OPTION:
            value: Any = rng.choice(q.option_values)
        elif kind is QuestionKind.NUMERIC:
            low, high = q.numeric_range
            value = rng.randint(low, high)
        elif kind is QuestionKind.RANKING:
            value = random_ranking(q, rng)
        else:
            value = rng.choice(CANNED_TEXT_ANSWERS)
        answers.append(Answer(q.id, value))
    return answers
