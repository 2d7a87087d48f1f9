"""
Quiz Autofiller
Finds quiz questions on an LMS page (or its embedded quiz frame), answers them and submits
"""
from .models import Question, QuestionType, AnswerOutcome, AnswerStatus
from .errors import (
    QuizAutofillError,
    NetworkSettleTimeoutError,
    QuizAnalysisError,
    AnswerAttemptError,
    ActionError,
)
from .locator import DocumentLocator
from .extractor import QuestionExtractor, ModalityClassifier
from .dispatcher import AnswerDispatcher
from .runner import QuizRunner, RunReport, RunState

__all__ = [
    'Question', 'QuestionType', 'AnswerOutcome', 'AnswerStatus',
    'QuizAutofillError', 'NetworkSettleTimeoutError', 'QuizAnalysisError',
    'AnswerAttemptError', 'ActionError',
    'DocumentLocator', 'QuestionExtractor', 'ModalityClassifier',
    'AnswerDispatcher', 'QuizRunner', 'RunReport', 'RunState',
]
