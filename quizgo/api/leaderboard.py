"""
Leaderboard endpoint
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from quizgo import state
from quizgo.core.scoring import parse_scope
from quizgo.errors import QuizNotFoundError
from quizgo.services.leaderboard import get_leaderboard


router = APIRouter(tags=["leaderboard"])


@router.get("/api/quizzes/{quiz_id}/leaderboard")
def get_leaderboard_data(quiz_id: str, scope: Optional[str] = Query(default="all")):
    """
    Ranked leaderboard for a quiz

    scope=all scores every round; scope=<n> scores round n only. Every roster
    team and every team that submitted appears, even with 0 points.
    """
    try:
        parsed_scope = parse_scope(scope)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        return get_leaderboard(state.get_store(), quiz_id, parsed_scope)
    except QuizNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Quiz not found") from exc
