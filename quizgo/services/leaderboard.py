"""
Leaderboard service - Assemble and format leaderboard data
"""
import logging
from typing import Dict

from quizgo.core.scoring import SCOPE_ALL, Scope, score_quiz
from quizgo.services.quizzes import require_quiz
from quizgo.services.submissions import list_submissions
from quizgo.storage import JsonBlobStore


logger = logging.getLogger(__name__)


def get_leaderboard(store: JsonBlobStore, quiz_id: str, scope: Scope = SCOPE_ALL) -> Dict:
    """
    Get leaderboard data for display

    Args:
        store: Document store
        quiz_id: Quiz to score
        scope: "all" or a single round number

    Returns:
        Formatted leaderboard data

    Raises:
        QuizNotFoundError: If the quiz does not exist
    """
    quiz = require_quiz(store, quiz_id)
    round_filter = None if scope == SCOPE_ALL else scope
    submissions = list_submissions(store, quiz_id=quiz.id, round_number=round_filter)

    results = score_quiz(quiz, scope, submissions)
    logger.info(
        f"🏆 Leaderboard quiz={quiz.id} scope={scope} | "
        f"{len(results)} teams from {len(submissions)} submissions"
    )

    return {
        "quizId": quiz.id,
        "title": quiz.title,
        "scope": scope,
        "teams": [entry.model_dump(by_alias=True) for entry in results],
        "totalTeams": len(results),
    }
