import uuid
from itertools import product
from types import SimpleNamespace

import pytest

from app.exceptions import InvalidInputError
from app.services.scoring_service import ScoringService, scoring_service


def make_questions(correct_answers, options=4):
    return [
        SimpleNamespace(
            id=uuid.uuid4(),
            options=[f"Option {i}" for i in range(options)],
            correct_answer=answer,
        )
        for answer in correct_answers
    ]


def answers_for(questions, chosen):
    return {str(q.id): choice for q, choice in zip(questions, chosen) if choice is not None}


def test_three_of_four_correct_scores_75():
    questions = make_questions([0, 1, 2, 3])
    answers = answers_for(questions, [0, 1, 9, 3])

    assert scoring_service.score(questions, answers) == 75


def test_all_correct_scores_100():
    questions = make_questions([2, 0, 1])
    answers = answers_for(questions, [2, 0, 1])

    assert scoring_service.score(questions, answers) == 100


def test_none_correct_scores_0():
    questions = make_questions([2, 0, 1])
    answers = answers_for(questions, [0, 1, 2])

    assert scoring_service.score(questions, answers) == 0


def test_missing_answers_count_as_wrong():
    questions = make_questions([0, 0, 0, 0])
    answers = answers_for(questions, [0, None, None, 0])

    assert scoring_service.score(questions, answers) == 50
    assert scoring_service.score(questions, {}) == 0


def test_non_integer_answers_count_as_wrong():
    questions = make_questions([0, 1])
    answers = {str(questions[0].id): "0", str(questions[1].id): 1.0}

    assert scoring_service.score(questions, answers) == 0


def test_uuid_keys_are_accepted():
    questions = make_questions([1, 1])
    answers = {questions[0].id: 1, questions[1].id: 0}

    assert scoring_service.score(questions, answers) == 50


def test_dict_questions_are_accepted():
    questions = [
        {"id": "q1", "options": ["a", "b"], "correct_answer": 1},
        {"id": "q2", "options": ["a", "b"], "correct_answer": 0},
    ]

    assert scoring_service.score(questions, {"q1": 1, "q2": 1}) == 50


def test_empty_question_set_is_rejected():
    with pytest.raises(InvalidInputError):
        scoring_service.score([], {})


def test_correct_answer_outside_options_is_rejected():
    questions = make_questions([4], options=4)

    with pytest.raises(InvalidInputError):
        scoring_service.score(questions, {})


@pytest.mark.parametrize("correct,total,expected", [
    (1, 8, 13),   # 12.5 rounds up
    (3, 8, 38),   # 37.5 rounds up
    (5, 8, 63),   # 62.5 rounds up
    (1, 3, 33),
    (2, 3, 67),
    (1, 6, 17),
    (0, 7, 0),
    (7, 7, 100),
])
def test_percent_rounds_half_up(correct, total, expected):
    assert ScoringService.percent(correct, total) == expected


def test_score_uses_half_up_rounding():
    questions = make_questions([0] * 8)
    answers = answers_for(questions, [0, 1, 1, 1, 1, 1, 1, 1])

    assert scoring_service.score(questions, answers) == 13


def test_score_is_bounded_for_every_answer_combination():
    questions = make_questions([0, 1, 2], options=3)

    for chosen in product([0, 1, 2, None], repeat=3):
        result = scoring_service.score(questions, answers_for(questions, chosen))
        assert 0 <= result <= 100


def test_score_is_idempotent():
    questions = make_questions([3, 2, 1, 0, 1])
    answers = answers_for(questions, [3, 0, 1, 0, 2])

    first = scoring_service.score(questions, answers)
    second = scoring_service.score(questions, answers)

    assert first == second == 60


def test_review_reports_each_question():
    questions = make_questions([0, 1])
    answers = answers_for(questions, [0, 3])

    review = scoring_service.review(questions, answers)

    assert [item["is_correct"] for item in review] == [True, False]
    assert review[1]["user_answer"] == 3
    assert review[1]["correct_answer"] == 1
    assert review[0]["question_id"] == str(questions[0].id)


@pytest.mark.parametrize("score,badge", [
    (100, "Excellent!"),
    (90, "Excellent!"),
    (85, "Great Job!"),
    (70, "Good Work!"),
    (60, "Not Bad!"),
    (59, "Keep Trying!"),
    (0, "Keep Trying!"),
])
def test_badge_thresholds(score, badge):
    assert scoring_service.badge(score) == badge
