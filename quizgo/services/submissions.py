"""Submission persistence, one document per (quizId, teamName, roundNumber)"""
import logging
from typing import List, Optional

from quizgo.errors import SubmissionNotFoundError
from quizgo.models import Submission
from quizgo.services.quizzes import utc_now_iso
from quizgo.storage import JsonBlobStore, stable_submission_id


logger = logging.getLogger(__name__)


def upsert_submission(store: JsonBlobStore, submission: Submission) -> Submission:
    """
    Store a team's answers for a round

    A resubmission for the same (quizId, teamName, roundNumber) overwrites the
    previous document under the same stable id.
    """
    submission.id = stable_submission_id(submission.quiz_id, submission.team_name, submission.round_number)
    submission.updated_at = utc_now_iso()
    store.put(
        store.submission_pathname(submission.quiz_id, submission.team_name, submission.round_number),
        submission.model_dump(mode="json", by_alias=True),
    )
    logger.info(
        f"📥 Submission {submission.id} | quiz={submission.quiz_id} team={submission.team_name} "
        f"round={submission.round_number} answers={len(submission.answers)}"
    )
    return submission


def get_submission(
    store: JsonBlobStore, quiz_id: str, team_name: str, round_number: int
) -> Optional[Submission]:
    document = store.get(store.submission_pathname(quiz_id, team_name, round_number))
    return Submission.model_validate(document) if document is not None else None


def require_submission(store: JsonBlobStore, quiz_id: str, team_name: str, round_number: int) -> Submission:
    submission = get_submission(store, quiz_id, team_name, round_number)
    if submission is None:
        raise SubmissionNotFoundError(quiz_id, team_name, round_number)
    return submission


def list_submissions(
    store: JsonBlobStore,
    quiz_id: Optional[str] = None,
    team_name: Optional[str] = None,
    round_number: Optional[int] = None,
) -> List[Submission]:
    """
    Submissions matching every given filter, most recently updated first

    Args:
        store: Document store
        quiz_id: Only this quiz
        team_name: Only this team (narrows the listing only together with quiz_id)
        round_number: Only this round
    """
    prefix = store.submission_prefix(quiz_id, team_name)
    submissions = [Submission.model_validate(doc) for doc in store.load_all(prefix)]

    filtered = [
        s for s in submissions
        if (not quiz_id or s.quiz_id == quiz_id.strip())
        and (not team_name or s.team_name == team_name.strip())
        and (round_number is None or s.round_number == round_number)
    ]
    filtered.sort(key=lambda s: s.updated_at or "", reverse=True)
    return filtered
