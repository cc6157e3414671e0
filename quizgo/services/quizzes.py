"""Quiz persistence: upsert, load, list and structural deletes"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from quizgo.errors import QuizNotFoundError, RoundNotFoundError
from quizgo.models import Quiz, Round, Ruleset
from quizgo.storage import JsonBlobStore, make_quiz_id


logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _save(store: JsonBlobStore, quiz: Quiz) -> Quiz:
    quiz.updated_at = utc_now_iso()
    store.put(store.quiz_pathname(quiz.id), quiz.model_dump(mode="json", by_alias=True, exclude_none=True))
    return quiz


def upsert_quiz(store: JsonBlobStore, quiz: Quiz) -> Quiz:
    """Create or overwrite a quiz; assigns an id when the quiz has none"""
    if not quiz.id:
        quiz.id = make_quiz_id()
    _save(store, quiz)
    logger.info(f"💾 Saved quiz {quiz.id} ({len(quiz.rounds)} rounds, {len(quiz.teams)} teams)")
    return quiz


def get_quiz(store: JsonBlobStore, quiz_id: str) -> Optional[Quiz]:
    document = store.get(store.quiz_pathname(quiz_id))
    return Quiz.model_validate(document) if document is not None else None


def require_quiz(store: JsonBlobStore, quiz_id: str) -> Quiz:
    quiz = get_quiz(store, quiz_id)
    if quiz is None:
        raise QuizNotFoundError(quiz_id)
    return quiz


def list_quizzes(store: JsonBlobStore) -> List[Quiz]:
    """All quizzes, most recently updated first"""
    quizzes = [Quiz.model_validate(doc) for doc in store.load_all(store.quizzes_prefix)]
    quizzes.sort(key=lambda q: q.updated_at or "", reverse=True)
    return quizzes


def delete_round(store: JsonBlobStore, quiz_id: str, round_number: int) -> bool:
    """Remove a round; returns whether anything was removed"""
    quiz = require_quiz(store, quiz_id)
    before = len(quiz.rounds)
    quiz.rounds = [r for r in quiz.rounds if r.round_number != round_number]
    removed = len(quiz.rounds) != before
    _save(store, quiz)
    logger.info(f"🗑️ Quiz {quiz_id}: delete round {round_number} (removed={removed})")
    return removed


def delete_question(store: JsonBlobStore, quiz_id: str, round_number: int, question_number: int) -> bool:
    """Remove a question from a round; returns whether anything was removed"""
    quiz = require_quiz(store, quiz_id)
    removed = False
    for rnd in quiz.rounds:
        if rnd.round_number != round_number:
            continue
        before = len(rnd.questions)
        rnd.questions = [q for q in rnd.questions if q.number != question_number]
        removed = removed or len(rnd.questions) != before
    _save(store, quiz)
    logger.info(
        f"🗑️ Quiz {quiz_id}: delete question {question_number} in round {round_number} (removed={removed})"
    )
    return removed


def set_round_ruleset(
    store: JsonBlobStore, quiz_id: str, round_number: int, ruleset: Ruleset
) -> Tuple[Quiz, Round]:
    """
    Switch a round's ruleset

    The new ruleset's scoring parameters start from their defaults and the
    previous ruleset's parameters are discarded.

    Raises:
        QuizNotFoundError: If the quiz does not exist
        RoundNotFoundError: If the quiz has no such round
    """
    quiz = require_quiz(store, quiz_id)
    for idx, rnd in enumerate(quiz.rounds):
        if rnd.round_number == round_number:
            quiz.rounds[idx] = rnd.switch_ruleset(ruleset)
            _save(store, quiz)
            logger.info(f"🔁 Quiz {quiz_id}: round {round_number} ruleset -> {Ruleset(ruleset).value}")
            return quiz, quiz.rounds[idx]
    raise RoundNotFoundError(quiz_id, round_number)
