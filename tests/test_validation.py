"""Tests for survey_synth/validation.py."""

import json
import logging
import random

from survey_synth.validation import (
    CANNED_TEXT_ANSWERS,
    coerce_numeric,
    coerce_option,
    coerce_ranking,
    coerce_text,
    fallback_answers,
    random_ranking,
    validate_answers,
)


def _ranks(answer: str) -> tuple[list[int], set[str]]:
    items = json.loads(answer)
    return [i["rank"] for i in items], {i["value"] for i in items}


def test_valid_option_kept(choice_question):
    assert coerce_option(choice_question, "daily") == "daily"


def test_invalid_option_replaced_and_logged(choice_question, caplog):
    with caplog.at_level(logging.WARNING):
        result = coerce_option(choice_question, "Daily, I love cooking")
    assert result in choice_question.option_values
    assert any("invalid option" in msg for msg in caplog.messages)


def test_option_matches_numeric_identifier():
    from survey_synth.models import Question, QuestionOption

    q = Question(id=9, text="Q", question_type="image", options=(QuestionOption("1", "One"), QuestionOption("2", "Two")))
    assert coerce_option(q, 2) == "2"


def test_numeric_in_range_kept(slider_question):
    assert coerce_numeric(slider_question, 7) == 7
    assert coerce_numeric(slider_question, "4") == 4
    assert coerce_numeric(slider_question, 6.8) == 6


def test_numeric_out_of_range_or_garbage_coerced(slider_question):
    for bad in (0, 11, "lots", None, True, [5]):
        value = coerce_numeric(slider_question, bad)
        assert isinstance(value, int)
        assert 1 <= value <= 10


def test_valid_ranking_normalized(ranking_question):
    answer = json.dumps([
        {"rank": 2, "option": "Quality", "value": "quality"},
        {"rank": 1, "option": "Price", "value": "price"},
        {"rank": 3, "option": "Variety", "value": "variety"},
    ])
    result = json.loads(coerce_ranking(ranking_question, answer))
    assert [i["value"] for i in result] == ["price", "quality", "variety"]
    assert [i["rank"] for i in result] == [1, 2, 3]


def test_ranking_accepts_list(ranking_question):
    answer = [{"rank": r, "value": v} for r, v in ((1, "variety"), (2, "price"), (3, "quality"))]
    ranks, values = _ranks(coerce_ranking(ranking_question, answer))
    assert ranks == [1, 2, 3]
    assert values == {"price", "quality", "variety"}


def test_incomplete_or_duplicate_ranking_replaced(ranking_question):
    bad_answers = [
        None,
        "not json",
        json.dumps([{"rank": 1, "value": "price"}]),
        json.dumps([{"rank": 1, "value": "price"}, {"rank": 1, "value": "quality"}, {"rank": 3, "value": "variety"}]),
        json.dumps([{"rank": 1, "value": "price"}, {"rank": 2, "value": "price"}, {"rank": 3, "value": "variety"}]),
        json.dumps([{"rank": 1, "value": "price"}, {"rank": 2, "value": "other"}, {"rank": 3, "value": "variety"}]),
    ]
    for bad in bad_answers:
        ranks, values = _ranks(coerce_ranking(ranking_question, bad))
        assert ranks == [1, 2, 3]
        assert values == {"price", "quality", "variety"}


def test_text_kept_when_meaningful(text_question):
    assert coerce_text(text_question, "  Love the recipes.  ") == "Love the recipes."


def test_text_placeholder_or_empty_replaced(text_question):
    for bad in (None, "", "   ", "This is a realistic text response.", "N/A"):
        assert coerce_text(text_question, bad) in CANNED_TEXT_ANSWERS


def test_validate_answers_one_per_question_in_order(sample_questions):
    raw = [
        {"questionId": 4, "answer": "Great value"},
        {"questionId": "1", "answer": "rarely"},
        {"questionId": 2, "answer": 99},
        {"answer": "no id"},
        "junk",
    ]
    answers = validate_answers(raw, sample_questions)
    assert [a.question_id for a in answers] == [q.id for q in sample_questions]
    by_id = {a.question_id: a.value for a in answers}
    assert by_id[1] == "rarely"
    assert 1 <= by_id[2] <= 10
    assert by_id[4] == "Great value"
    assert by_id[5] in {"takeout", "kit", "skip"}


def test_validate_answers_tolerates_non_list(sample_questions):
    answers = validate_answers({"not": "a list"}, sample_questions)
    assert len(answers) == len(sample_questions)


def test_fallback_answers_in_domain(sample_questions):
    rng = random.Random(7)
    for _ in range(20):
        by_id = {a.question_id: a.value for a in fallback_answers(sample_questions, rng)}
        assert by_id[1] in {"rarely", "daily"}
        assert 1 <= by_id[2] <= 10
        assert _ranks(by_id[3]) == ([1, 2, 3], {"price", "quality", "variety"})
        assert by_id[4] in CANNED_TEXT_ANSWERS
        assert by_id[5] in {"takeout", "kit", "skip"}


def test_random_ranking_uses_labels(ranking_question):
    items = json.loads(random_ranking(ranking_question, random.Random(1)))
    labels = {i["value"]: i["option"] for i in items}
    assert labels == {"price": "Price", "quality": "Quality", "variety": "Variety"}
