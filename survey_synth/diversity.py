"""Per-batch rebalancing of over-concentrated option choices."""

import logging
import math

from survey_synth.models import GeneratedResponse, Question, QuestionKind

logger = logging.getLogger(__name__)


def fairness_threshold(batch_size: int, option_count: int) -> int:
    return math.ceil(batch_size / max(1, option_count))


def enforce_option_diversity(batch: list[GeneratedResponse], questions: list[Question]) -> int:
    """Reassign answers whose option is already used more than its fair share.

    Single forward pass over the batch: when a response's answer pushes its
    option's running count past ``ceil(len(batch) / option_count)``, it is
    moved to the least-used option (first in declaration order on ties).
    Already-processed responses are not revisited. Mutates ``batch`` in place
    and returns the number of reassigned answers.
    """
    option_questions = {q.id: q for q in questions if q.kind is QuestionKind.OPTION}
    counts: dict[int, dict[str, int]] = {}
    reassigned = 0

    for response in batch:
        for answer in response.answers:
            question = option_questions.get(answer.question_id)
            if question is None:
                continue
            values = question.option_values
            used = counts.setdefault(question.id, {})
            current = str(answer.value)
            used[current] = used.get(current, 0) + 1

            if used[current] <= fairness_threshold(len(batch), len(values)):
                continue
            alternative = min(values, key=lambda v: used.get(v, 0))
            if alternative == current:
                continue
            used[current] -= 1
            used[alternative] = used.get(alternative, 0) + 1
            answer.value = alternative
            reassigned += 1

    if reassigned:
        logger.debug("Diversity pass reassigned %d answers across %d responses", reassigned, len(batch))
    return reassigned
