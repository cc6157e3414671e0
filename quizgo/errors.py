"""Domain exceptions raised by the service layer"""
from typing import Optional


class QuizgoError(Exception):
    pass


class QuizNotFoundError(QuizgoError):
    def __init__(self, quiz_id: str):
        super().__init__(f"Quiz not found: {quiz_id}")
        self.quiz_id = quiz_id


class SubmissionNotFoundError(QuizgoError):
    def __init__(self, quiz_id: str, team_name: str, round_number: int):
        super().__init__(f"No submission from {team_name} for round {round_number} of quiz {quiz_id}")
        self.quiz_id = quiz_id
        self.team_name = team_name
        self.round_number = round_number


class OcrNotConfiguredError(QuizgoError):
    pass


class OcrUpstreamError(QuizgoError):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class RoundNotFoundError(QuizgoError):
    def __init__(self, quiz_id: str, round_number: int):
        super().__init__(f"Round {round_number} not found in quiz {quiz_id}")
        self.quiz_id = quiz_id
        self.round_number = round_number


class QuestionImportNotConfiguredError(QuizgoError):
    pass


class QuestionImportError(QuizgoError):
    """The model call failed or its output could not be turned into questions"""

    def __init__(self, message: str, status_code: int = 502, details: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
