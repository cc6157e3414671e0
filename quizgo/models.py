"""
Data models for the quiz scoring server

Correct answers are stored as a tagged variant chosen by the round's ruleset:
  - multiple-choice -> ChoiceAnswer  (label "A".."D")
  - number          -> NumberAnswer  (finite float, or None when unusable)
  - free-text       -> BilingualText ({bg, en}; legacy bare strings fill both)

Raw JSON is coerced into that variant when a Round is validated, so the scoring
code never has to duck-type stored documents.
"""
import math
import re
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


DEFAULT_POINTS_PER_CORRECT = 1.0
DEFAULT_POINTS_EXACT = 3.0
DEFAULT_POINTS_CLOSEST = 1.0

CHOICE_LABELS = ("A", "B", "C", "D")
# Bulgarian sheets label options а/б/в/г
CYRILLIC_CHOICES = {"А": "A", "Б": "B", "В": "C", "Г": "D"}

# Plain decimal literals only: no "_" separators, no non-ASCII digits, no inf/nan
DECIMAL_PATTERN = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


class Ruleset(str, Enum):
    """Answer-evaluation mode of a round"""
    MULTIPLE_CHOICE = "multiple-choice"
    NUMBER = "number"
    FREE_TEXT = "free-text"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def to_finite_number(value: Any) -> Optional[float]:
    """
    Parse a stored or submitted value as a finite number

    Returns None for anything that is not a finite number: None, bools,
    empty/blank strings, anything but a plain ASCII decimal literal, NaN and
    infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not DECIMAL_PATTERN.match(text):
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def _points_or_default(value: Optional[float], default: float) -> float:
    return default if value is None else value


# ==================== CORRECT ANSWER VARIANTS ====================

class ChoiceAnswer(BaseModel):
    kind: Literal["choice"] = "choice"
    label: str = ""


class NumberAnswer(BaseModel):
    kind: Literal["number"] = "number"
    value: Optional[float] = None


class BilingualText(BaseModel):
    kind: Literal["text"] = "text"
    bg: str = ""
    en: str = ""


CorrectAnswer = Union[ChoiceAnswer, NumberAnswer, BilingualText]


def correct_answer_to_json(answer: Any) -> Any:
    """Inverse of coerce_correct_answer: back to the stored document shape"""
    if isinstance(answer, ChoiceAnswer):
        return answer.label
    if isinstance(answer, NumberAnswer):
        return answer.value
    if isinstance(answer, BilingualText):
        return {"bg": answer.bg, "en": answer.en}
    return answer


def coerce_correct_answer(ruleset: Ruleset, raw: Any) -> CorrectAnswer:
    """
    Convert a raw correctAnswer value into the variant for the given ruleset

    Args:
        ruleset: Round ruleset
        raw: Value as found in the stored JSON document (or an already
             coerced variant)

    Returns:
        ChoiceAnswer | NumberAnswer | BilingualText
    """
    raw = correct_answer_to_json(raw)

    if ruleset == Ruleset.MULTIPLE_CHOICE:
        if isinstance(raw, dict):
            raw = raw.get("label")
        if not isinstance(raw, str):
            return ChoiceAnswer(label="")
        label = raw.strip().upper()
        label = CYRILLIC_CHOICES.get(label, label)
        return ChoiceAnswer(label=label if label in CHOICE_LABELS else raw)

    if ruleset == Ruleset.NUMBER:
        if isinstance(raw, dict):
            raw = raw.get("value")
        return NumberAnswer(value=to_finite_number(raw))

    if isinstance(raw, dict):
        bg = raw.get("bg")
        en = raw.get("en")
        return BilingualText(
            bg=bg if isinstance(bg, str) else "",
            en=en if isinstance(en, str) else "",
        )
    if isinstance(raw, str):
        return BilingualText(bg=raw, en=raw)
    return BilingualText()


# ==================== QUIZ STRUCTURE ====================

class Question(CamelModel):
    number: int
    text: str = ""
    options: Optional[List[str]] = None
    correct_answer: Optional[Any] = Field(default=None, alias="correctAnswer")

    @field_serializer("correct_answer")
    def _serialize_correct_answer(self, value: Any) -> Any:
        return correct_answer_to_json(value)


class Round(CamelModel):
    """One scored segment of a quiz"""
    round_number: int = Field(alias="roundNumber")
    ruleset: Ruleset = Ruleset.FREE_TEXT
    points_per_correct_answer: Optional[float] = Field(default=None, alias="pointsPerCorrectAnswer")
    points_exact_match: Optional[float] = Field(default=None, alias="pointsExactMatch")
    points_closest_without_exact_match: Optional[float] = Field(
        default=None, alias="pointsClosestWithoutExactMatch"
    )
    questions: List[Question] = []

    @field_validator("ruleset", mode="before")
    @classmethod
    def _default_ruleset(cls, value: Any) -> Any:
        return Ruleset.FREE_TEXT if value is None else value

    @field_validator(
        "points_per_correct_answer",
        "points_exact_match",
        "points_closest_without_exact_match",
        mode="before",
    )
    @classmethod
    def _finite_points(cls, value: Any) -> Optional[float]:
        # Strings, bools and non-finite values fall back to the ruleset default
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value) if math.isfinite(value) else None

    @model_validator(mode="after")
    def _apply_ruleset(self) -> "Round":
        # Only the active ruleset's parameters are meaningful
        if self.ruleset == Ruleset.NUMBER:
            self.points_exact_match = _points_or_default(self.points_exact_match, DEFAULT_POINTS_EXACT)
            self.points_closest_without_exact_match = _points_or_default(
                self.points_closest_without_exact_match, DEFAULT_POINTS_CLOSEST
            )
            self.points_per_correct_answer = None
        else:
            self.points_per_correct_answer = _points_or_default(
                self.points_per_correct_answer, DEFAULT_POINTS_PER_CORRECT
            )
            self.points_exact_match = None
            self.points_closest_without_exact_match = None

        for question in self.questions:
            question.correct_answer = coerce_correct_answer(self.ruleset, question.correct_answer)
        return self

    def switch_ruleset(self, ruleset: Ruleset) -> "Round":
        """Return a copy under a new ruleset with that ruleset's parameters at their defaults"""
        data = self.model_dump(by_alias=True)
        data["ruleset"] = Ruleset(ruleset)
        data["pointsPerCorrectAnswer"] = None
        data["pointsExactMatch"] = None
        data["pointsClosestWithoutExactMatch"] = None
        return Round.model_validate(data)


class Quiz(CamelModel):
    id: str = ""
    title: Optional[str] = None
    rounds: List[Round] = []
    teams: List[str] = []
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _strip_id(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("teams", mode="before")
    @classmethod
    def _clean_teams(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        seen: Dict[str, None] = {}
        for team in value:
            if isinstance(team, str) and team.strip():
                seen.setdefault(team.strip(), None)
        return list(seen)

    def get_round(self, round_number: int) -> Optional[Round]:
        for rnd in self.rounds:
            if rnd.round_number == round_number:
                return rnd
        return None


class ImportedQuestion(CamelModel):
    """A question recovered from pasted text, not yet numbered or attached to a round"""
    text: str
    options: Optional[List[str]] = None
    correct_answer: Optional[Any] = Field(default=None, alias="correctAnswer")


# ==================== SUBMISSIONS & RESULTS ====================

class Answer(CamelModel):
    number: int
    answer: Union[str, int, float, None] = None


class Submission(CamelModel):
    """One team's answers for one round"""
    id: Optional[str] = None
    quiz_id: str = Field(alias="quizId")
    team_name: str = Field(alias="teamName")
    round_number: int = Field(alias="roundNumber")
    answers: List[Answer] = []
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("quiz_id", "team_name")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("round_number", mode="before")
    @classmethod
    def _truncate_round(cls, value: Any) -> Any:
        if isinstance(value, float) and math.isfinite(value):
            return math.trunc(value)
        return value

    def answer_for(self, number: int) -> Optional[Answer]:
        for entry in self.answers:
            if entry.number == number:
                return entry
        return None


class ScoreEntry(CamelModel):
    team_name: str = Field(alias="teamName")
    points: float = 0.0


# ==================== OCR ====================

class OcrEntity(CamelModel):
    """Entity extracted by the document-extraction service; extra fields ignored"""
    type: Optional[str] = None
    mention_text: Optional[str] = Field(default=None, alias="mentionText")


class ParsedAnswer(BaseModel):
    number: int
    text: str = ""
