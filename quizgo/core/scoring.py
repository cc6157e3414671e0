"""
Quiz Scoring Engine

Rulesets:
  - multiple-choice: submitted label must equal the correct label exactly
    (case-sensitive) -> pointsPerCorrectAnswer
  - free-text: fuzzy match, see quizgo.core.matching -> pointsPerCorrectAnswer
  - number:
      * every exact match gets pointsExactMatch; nobody else scores
      * with no exact match, every team at the minimum |submitted - correct|
        gets pointsClosestWithoutExactMatch
      * ties share the full award (no splitting)

Aggregation:
  - team universe = quiz roster + every team that submitted anything
  - scope "all" scores every round, an int scores only that round number
  - order: points descending, then team name ascending (ordinal)

Malformed values are skipped rather than raised: a bad correct answer or a
bad submitted number simply fails to score.
"""
import logging
from typing import Dict, Iterable, List, Union

from quizgo.core.matching import is_free_text_correct
from quizgo.models import (
    DEFAULT_POINTS_CLOSEST,
    DEFAULT_POINTS_EXACT,
    DEFAULT_POINTS_PER_CORRECT,
    ChoiceAnswer,
    NumberAnswer,
    Question,
    Quiz,
    Round,
    Ruleset,
    ScoreEntry,
    Submission,
    to_finite_number,
)


logger = logging.getLogger(__name__)

SCOPE_ALL = "all"

Scope = Union[str, int]


def parse_scope(raw: Union[str, int, None]) -> Scope:
    """
    Parse a scope query value

    Returns "all" for None, "" or "all"; otherwise the round number.

    Raises:
        ValueError: If the value is neither "all" nor an integer
    """
    if raw is None:
        return SCOPE_ALL
    if isinstance(raw, int):
        return raw
    text = raw.strip().lower()
    if text in ("", SCOPE_ALL):
        return SCOPE_ALL
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Invalid scope: {raw!r}. Expected 'all' or a round number")


def _award(points: Dict[str, float], team_name: str, amount: float) -> None:
    points[team_name] = points.get(team_name, 0.0) + amount


def score_multiple_choice_question(
    question: Question,
    submissions: Iterable[Submission],
    points_per_correct: float,
    points: Dict[str, float],
) -> None:
    correct = question.correct_answer
    label = correct.label if isinstance(correct, ChoiceAnswer) else ""

    for submission in submissions:
        entry = submission.answer_for(question.number)
        if entry is None:
            continue
        if isinstance(entry.answer, str) and entry.answer == label:
            _award(points, submission.team_name, points_per_correct)


def score_free_text_question(
    question: Question,
    submissions: Iterable[Submission],
    points_per_correct: float,
    points: Dict[str, float],
) -> None:
    for submission in submissions:
        entry = submission.answer_for(question.number)
        if entry is None:
            continue
        if is_free_text_correct(entry.answer, question.correct_answer):
            _award(points, submission.team_name, points_per_correct)


def score_number_question(
    question: Question,
    submissions: Iterable[Submission],
    points_exact: float,
    points_closest: float,
    points: Dict[str, float],
) -> None:
    """
    Score one number question: exact matches win outright, otherwise the
    closest finite answers win. Non-finite answers are ignored.
    """
    correct = question.correct_answer
    target = correct.value if isinstance(correct, NumberAnswer) else to_finite_number(correct)
    if target is None:
        logger.debug(f"Q{question.number}: no finite correct answer, skipped")
        return

    exact_teams: List[str] = []
    diffs: List[tuple] = []

    for submission in submissions:
        entry = submission.answer_for(question.number)
        value = to_finite_number(entry.answer) if entry is not None else None
        if value is None:
            continue
        if value == target:
            exact_teams.append(submission.team_name)
        else:
            diffs.append((submission.team_name, abs(value - target)))

    if exact_teams:
        for team_name in exact_teams:
            _award(points, team_name, points_exact)
        return

    if not diffs:
        return

    min_diff = min(diff for _, diff in diffs)
    for team_name, diff in diffs:
        if diff == min_diff:
            _award(points, team_name, points_closest)


def score_round(rnd: Round, submissions: List[Submission]) -> Dict[str, float]:
    """
    Score one round

    Precondition: every submission belongs to this round. Submissions are
    not filtered by round number here; the aggregator does that.

    Args:
        rnd: Round definition
        submissions: Submissions for this round

    Returns:
        Mapping team_name -> points, with an entry (possibly 0) for every
        team that submitted
    """
    points: Dict[str, float] = {s.team_name: 0.0 for s in submissions}

    for question in rnd.questions:
        if rnd.ruleset == Ruleset.NUMBER:
            score_number_question(
                question,
                submissions,
                DEFAULT_POINTS_EXACT if rnd.points_exact_match is None else rnd.points_exact_match,
                DEFAULT_POINTS_CLOSEST
                if rnd.points_closest_without_exact_match is None
                else rnd.points_closest_without_exact_match,
                points,
            )
            continue

        per_correct = (
            DEFAULT_POINTS_PER_CORRECT
            if rnd.points_per_correct_answer is None
            else rnd.points_per_correct_answer
        )
        if rnd.ruleset == Ruleset.MULTIPLE_CHOICE:
            score_multiple_choice_question(question, submissions, per_correct, points)
        elif rnd.ruleset == Ruleset.FREE_TEXT:
            score_free_text_question(question, submissions, per_correct, points)

    return points


def score_quiz(quiz: Quiz, scope: Scope, submissions: List[Submission]) -> List[ScoreEntry]:
    """
    Build the ranked leaderboard for a quiz

    Args:
        quiz: Quiz definition (rounds + roster)
        scope: "all" or a single round number
        submissions: Current, de-duplicated submissions for the quiz

    Returns:
        ScoreEntry list, points descending then team name ascending
    """
    totals: Dict[str, float] = {}
    for team_name in quiz.teams:
        totals.setdefault(team_name, 0.0)
    for submission in submissions:
        totals.setdefault(submission.team_name, 0.0)

    if scope == SCOPE_ALL:
        rounds = list(quiz.rounds)
    else:
        rounds = [r for r in quiz.rounds if r.round_number == scope]

    for rnd in rounds:
        round_submissions = [s for s in submissions if s.round_number == rnd.round_number]
        for team_name, pts in score_round(rnd, round_submissions).items():
            totals[team_name] = totals.get(team_name, 0.0) + pts

    ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [ScoreEntry(team_name=name, points=pts) for name, pts in ranked]
