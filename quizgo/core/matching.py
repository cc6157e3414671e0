"""
Fuzzy matching for free-text rounds

Rule:
  An answer is correct when, for any candidate c among the normalized bg/en
  correct answers,

      levenshtein(answer, c) / max(len(answer), len(c)) <= 0.15

  Empty answers and questions without any usable candidate never match.
  The tolerance absorbs OCR noise and small spelling variance; for short
  answers it still requires an exact match (e.g. 1 edit on 6 chars = 0.167).
"""
from typing import Any, List, Mapping

from quizgo.core.normalizer import normalize_text
from quizgo.models import BilingualText


FREE_TEXT_THRESHOLD = 0.15


def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character inserts, deletes and substitutions
    turning `a` into `b`. Compares raw code points; uses two rolling rows.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
        prev = curr
    return prev[-1]


def free_text_candidates(correct: Any) -> List[str]:
    """
    Normalized, non-empty, de-duplicated candidate answers (bg first)

    Accepts a BilingualText, a {bg, en} mapping or a legacy bare string.
    """
    if isinstance(correct, BilingualText):
        raw = [correct.bg, correct.en]
    elif isinstance(correct, Mapping):
        raw = [correct.get("bg"), correct.get("en")]
        raw = [value if isinstance(value, str) else "" for value in raw]
    elif isinstance(correct, str):
        raw = [correct]
    else:
        raw = []

    candidates = []
    for value in raw:
        normalized = normalize_text(value)
        if normalized and normalized not in candidates:
            candidates.append(normalized)
    return candidates


def is_free_text_correct(answer: Any, correct: Any) -> bool:
    """
    Decide whether a submitted free-text answer matches the correct answer

    Args:
        answer: Submitted value (normalized here; non-strings are stringified)
        correct: BilingualText, {bg, en} mapping or bare string

    Returns:
        True if any candidate is within the normalized edit-ratio threshold
    """
    normalized = normalize_text(answer)
    if not normalized:
        return False

    for candidate in free_text_candidates(correct):
        denominator = max(len(normalized), len(candidate))
        if denominator == 0:
            continue
        ratio = levenshtein_distance(normalized, candidate) / denominator
        if ratio <= FREE_TEXT_THRESHOLD:
            return True
    return False
