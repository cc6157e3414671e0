"""
Tests for data models: correct-answer variants, ruleset parameters, cleanup
"""
import math

import pytest
from pydantic import ValidationError

from quizgo.models import (
    BilingualText,
    ChoiceAnswer,
    NumberAnswer,
    Quiz,
    Round,
    Ruleset,
    Submission,
    coerce_correct_answer,
    to_finite_number,
)


@pytest.mark.parametrize(
    "value,expected",
    [(10, 10.0), (2.5, 2.5), (" 12 ", 12.0), ("1e3", 1000.0), ("-4", -4.0), (".5", 0.5), ("3.", 3.0)],
)
def test_to_finite_number_parses(value, expected):
    assert to_finite_number(value) == expected


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "abc", True, math.nan, math.inf, "inf", "nan", "1e999", [1], {},
     # only plain ASCII decimal literals count
     "١٢", "1_000", "0x10", "1 2"],
)
def test_to_finite_number_rejects(value):
    assert to_finite_number(value) is None


def test_coerce_correct_answer_per_ruleset():
    assert coerce_correct_answer(Ruleset.MULTIPLE_CHOICE, " c ") == ChoiceAnswer(label="C")
    assert coerce_correct_answer(Ruleset.MULTIPLE_CHOICE, "Г") == ChoiceAnswer(label="D")
    assert coerce_correct_answer(Ruleset.MULTIPLE_CHOICE, 3) == ChoiceAnswer(label="")
    assert coerce_correct_answer(Ruleset.NUMBER, "42") == NumberAnswer(value=42.0)
    assert coerce_correct_answer(Ruleset.NUMBER, "forty") == NumberAnswer(value=None)
    assert coerce_correct_answer(Ruleset.FREE_TEXT, "Rome") == BilingualText(bg="Rome", en="Rome")
    assert coerce_correct_answer(Ruleset.FREE_TEXT, {"en": "Rome"}) == BilingualText(bg="", en="Rome")
    assert coerce_correct_answer(Ruleset.FREE_TEXT, 5) == BilingualText()


def test_round_defaults_per_ruleset():
    number_round = Round(roundNumber=1, ruleset="number")
    assert number_round.points_exact_match == 3
    assert number_round.points_closest_without_exact_match == 1
    assert number_round.points_per_correct_answer is None

    mc_round = Round(roundNumber=2, ruleset="multiple-choice", pointsExactMatch=9)
    assert mc_round.points_per_correct_answer == 1
    assert mc_round.points_exact_match is None


def test_round_missing_ruleset_is_free_text():
    assert Round(roundNumber=1).ruleset == Ruleset.FREE_TEXT
    assert Round.model_validate({"roundNumber": 1, "ruleset": None}).ruleset == Ruleset.FREE_TEXT


def test_round_unknown_ruleset_rejected():
    with pytest.raises(ValidationError):
        Round(roundNumber=1, ruleset="essay")


def test_round_non_finite_points_fall_back_to_defaults():
    rnd = Round.model_validate(
        {"roundNumber": 1, "ruleset": "number", "pointsExactMatch": "lots", "pointsClosestWithoutExactMatch": math.inf}
    )
    assert rnd.points_exact_match == 3
    assert rnd.points_closest_without_exact_match == 1


def test_round_keeps_explicit_zero_points():
    rnd = Round(roundNumber=1, ruleset="free-text", pointsPerCorrectAnswer=0)
    assert rnd.points_per_correct_answer == 0


def test_switch_ruleset_resets_parameters_and_answers():
    rnd = Round(
        roundNumber=4,
        ruleset="number",
        pointsExactMatch=10,
        questions=[{"number": 1, "text": "Year?", "correctAnswer": 1066}],
    )
    switched = rnd.switch_ruleset(Ruleset.FREE_TEXT)
    assert switched.ruleset == Ruleset.FREE_TEXT
    assert switched.points_per_correct_answer == 1
    assert switched.points_exact_match is None
    assert switched.questions[0].correct_answer == BilingualText()

    back = switched.switch_ruleset(Ruleset.NUMBER)
    assert back.points_exact_match == 3


def test_round_serializes_correct_answers_in_stored_shape():
    quiz = Quiz(
        id="q",
        rounds=[
            Round(roundNumber=1, ruleset="multiple-choice", questions=[{"number": 1, "correctAnswer": "b"}]),
            Round(roundNumber=2, ruleset="number", questions=[{"number": 1, "correctAnswer": "7"}]),
            Round(roundNumber=3, ruleset="free-text", questions=[{"number": 1, "correctAnswer": "Rome"}]),
        ],
    )
    data = quiz.model_dump(mode="json", by_alias=True, exclude_none=True)
    answers = [r["questions"][0]["correctAnswer"] for r in data["rounds"]]
    assert answers == ["B", 7.0, {"bg": "Rome", "en": "Rome"}]
    assert "pointsPerCorrectAnswer" not in data["rounds"][1]

    reloaded = Quiz.model_validate(data)
    assert reloaded.rounds[1].questions[0].correct_answer == NumberAnswer(value=7.0)


def test_quiz_cleans_id_and_teams():
    quiz = Quiz(id="  q1 ", teams=[" Owls", "Foxes", "", "Owls", 3, "  "])
    assert quiz.id == "q1"
    assert quiz.teams == ["Owls", "Foxes"]
    assert Quiz(teams=None).teams == []


def test_quiz_get_round():
    quiz = Quiz(id="q", rounds=[Round(roundNumber=5), Round(roundNumber=2)])
    assert quiz.get_round(2).round_number == 2
    assert quiz.get_round(3) is None


def test_submission_trims_and_truncates():
    sub = Submission(quizId=" q1 ", teamName=" Owls ", roundNumber=2.9, answers=[{"number": 1, "answer": "B"}])
    assert (sub.quiz_id, sub.team_name, sub.round_number) == ("q1", "Owls", 2)
    assert sub.answer_for(1).answer == "B"
    assert sub.answer_for(2) is None


def test_submission_requires_quiz_and_team():
    with pytest.raises(ValidationError):
        Submission(quizId=" ", teamName="Owls", roundNumber=1)
    with pytest.raises(ValidationError):
        Submission(quizId="q1", teamName="", roundNumber=1)


def test_submission_answer_keeps_number_type():
    sub = Submission(quizId="q", teamName="t", roundNumber=1, answers=[{"number": 1, "answer": 42}])
    assert sub.answers[0].answer == 42
    assert isinstance(sub.answers[0].answer, int)
