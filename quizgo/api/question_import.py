"""
Question import endpoint: pasted round text -> questions ready to add to a round
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
import logging

from quizgo import state
from quizgo.errors import QuestionImportError, QuestionImportNotConfiguredError
from quizgo.models import Ruleset
from quizgo.services.question_import import QuestionImportClient


router = APIRouter(prefix="/api/question-import", tags=["question-import"])
logger = logging.getLogger(__name__)


class QuestionImportRequest(BaseModel):
    ruleset: Ruleset
    text: str = ""


@router.post("")
async def import_questions(request: QuestionImportRequest):
    """
    Split pasted text into questions for a round of the given ruleset

    Request:
        {"ruleset": "multiple-choice", "text": "1. Capital of Italy? A) Rome B) Milan ... Answer: A"}

    Response:
        {"questions": [{"text": "Capital of Italy?", "options": ["Rome", ...], "correctAnswer": "A"}]}
    """
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="text is required")

    client = QuestionImportClient(state.SETTINGS.vertex)
    try:
        questions = await client.parse_round_questions(request.ruleset, request.text)
    except QuestionImportNotConfiguredError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except QuestionImportError as exc:
        raise HTTPException(
            status_code=exc.status_code, detail={"error": str(exc), "details": exc.details}
        ) from exc

    return {"questions": [q.model_dump(by_alias=True, exclude_none=True) for q in questions]}
