"""
Quiz management endpoints
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
import logging

from quizgo import state
from quizgo.errors import QuizNotFoundError, RoundNotFoundError
from quizgo.models import Quiz, Ruleset
from quizgo.services import quizzes as quiz_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


class RulesetChange(BaseModel):
    ruleset: Ruleset


def quiz_payload(quiz: Quiz) -> dict:
    """{id, title, data: {rounds, teams}} - the shape the manage UI reads"""
    data = quiz.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {
        "id": quiz.id,
        "title": quiz.title,
        "data": {"rounds": data.get("rounds", []), "teams": data.get("teams", [])},
    }


@router.get("")
def list_quizzes():
    """List all quizzes, most recently updated first"""
    return [quiz_payload(q) for q in quiz_service.list_quizzes(state.get_store())]


@router.get("/{quiz_id}")
def get_quiz(quiz_id: str):
    quiz = quiz_service.get_quiz(state.get_store(), quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return quiz_payload(quiz)


@router.post("", status_code=201)
def upsert_quiz(quiz: Quiz):
    """
    Create or overwrite a quiz

    Request:
        {
            "id": "quiz_...",          # optional, generated when missing
            "title": "Friday quiz",
            "rounds": [{"roundNumber": 1, "ruleset": "number", "questions": [...]}],
            "teams": ["Owls", "Foxes"]
        }
    """
    saved = quiz_service.upsert_quiz(state.get_store(), quiz)
    return {"id": saved.id}


@router.delete("/{quiz_id}/rounds/{round_number}")
def delete_round(quiz_id: str, round_number: int):
    try:
        removed = quiz_service.delete_round(state.get_store(), quiz_id, round_number)
    except QuizNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Quiz not found") from exc
    return {"ok": True, "removed": removed}


@router.delete("/{quiz_id}/rounds/{round_number}/questions/{question_number}")
def delete_question(quiz_id: str, round_number: int, question_number: int):
    try:
        removed = quiz_service.delete_question(state.get_store(), quiz_id, round_number, question_number)
    except QuizNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Quiz not found") from exc
    return {"ok": True, "removed": removed}


@router.put("/{quiz_id}/rounds/{round_number}/ruleset")
def set_round_ruleset(quiz_id: str, round_number: int, change: RulesetChange):
    """Switch a round's ruleset; scoring parameters reset to the new ruleset's defaults"""
    try:
        _, rnd = quiz_service.set_round_ruleset(state.get_store(), quiz_id, round_number, change.ruleset)
    except (QuizNotFoundError, RoundNotFoundError) as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return rnd.model_dump(mode="json", by_alias=True, exclude_none=True)
