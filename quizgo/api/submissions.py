"""
Submission endpoints for team answers
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
import logging

from quizgo import state
from quizgo.errors import SubmissionNotFoundError
from quizgo.models import Submission
from quizgo.services import submissions as submission_service


router = APIRouter(prefix="/api/submissions", tags=["submissions"])
logger = logging.getLogger(__name__)


def submission_payload(submission: Submission) -> dict:
    return submission.model_dump(mode="json", by_alias=True, exclude={"updated_at"})


@router.get("")
def list_submissions(
    quiz_id: Optional[str] = Query(default=None, alias="quizId"),
    team_name: Optional[str] = Query(default=None, alias="teamName"),
    round_number: Optional[int] = Query(default=None, alias="roundNumber"),
):
    """List submissions, filtered by any of quizId / teamName / roundNumber"""
    submissions = submission_service.list_submissions(
        state.get_store(), quiz_id=quiz_id, team_name=team_name, round_number=round_number
    )
    return [submission_payload(s) for s in submissions]


@router.get("/one")
def get_submission(
    quiz_id: str = Query(alias="quizId"),
    team_name: str = Query(alias="teamName"),
    round_number: int = Query(alias="roundNumber"),
):
    try:
        submission = submission_service.require_submission(state.get_store(), quiz_id, team_name, round_number)
    except SubmissionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return submission_payload(submission)


@router.post("", status_code=201)
def upsert_submission(submission: Submission):
    """
    Save a team's answers for one round (overwrites any earlier submission)

    Request:
        {
            "quizId": "quiz_...",
            "teamName": "Owls",
            "roundNumber": 2,
            "answers": [{"number": 1, "answer": "B"}, {"number": 2, "answer": 42}]
        }
    """
    saved = submission_service.upsert_submission(state.get_store(), submission)
    return {"id": saved.id}
