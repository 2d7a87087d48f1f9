"""Error Taxonomy
Exceptions raised while locating, analyzing and answering a quiz.
"""
from typing import Any, Optional


class QuizAutofillError(Exception):
    """Base class for all quiz autofiller failures"""


class NetworkSettleTimeoutError(QuizAutofillError):
    """The embedded quiz document did not reach network idle in time."""

    def __init__(self, message: str, document: Any = None, timeout_ms: Optional[int] = None):
        super().__init__(message)
        self.document = document
        self.timeout_ms = timeout_ms


class QuizAnalysisError(QuizAutofillError):
    """Question extraction failed; fatal for the whole run."""


class AnswerAttemptError(QuizAutofillError):
    """Both the primary and the fallback answer attempts failed for one question."""

    def __init__(self, question, primary_error: BaseException, fallback_error: BaseException):
        super().__init__(
            f"Could not answer question {question.text!r}: "
            f"primary failed ({primary_error}), fallback failed ({fallback_error})"
        )
        self.question = question
        self.primary_error = primary_error
        self.fallback_error = fallback_error


class ActionError(QuizAutofillError):
    """The AI actor could not carry out a natural-language instruction."""
