"""
Answer Strategy Dispatcher
Answers one question against the Working Document, falling back to the AI actor once
"""
import json
from typing import Awaitable, Callable, Dict, Optional

from loguru import logger

from .actor import PageActor
from .errors import AnswerAttemptError, QuizAutofillError
from .events import EventLogger
from .extractor import QUESTION_SELECTOR
from .models import AnswerOutcome, AnswerStatus, Profile, Question, QuestionType
from .config import PLACEHOLDER_ANSWER
from .telemetry import RunTelemetry


def anchored(question: Question, relative_xpath: str) -> str:
    """Selector for elements reached from the node holding the prompt text"""
    return f"text={json.dumps(question.text)} >> xpath={relative_xpath}"


def error_detail(error: BaseException) -> Dict:
    return {"error": {"value": str(error) or error.__class__.__name__, "type": "string"}}


class AnswerDispatcher:
    """
    Maps each question modality to a primary answering action.

    Primary actions run against the Working Document; the single fallback runs
    an AI instruction against the whole page. Nothing raises past dispatch().
    """

    def __init__(self, page, actor: PageActor, events: EventLogger,
                 placeholder_answer: str = PLACEHOLDER_ANSWER,
                 question_wait_timeout_ms: int = 5000,
                 fallback_cooldown_ms: int = 2000,
                 matching_pause_ms: int = 500,
                 profile: Optional[Profile] = None,
                 telemetry: Optional[RunTelemetry] = None,
                 category: str = "quiz-autofiller"):
        self.page = page
        self.actor = actor
        self.events = events
        self.placeholder_answer = placeholder_answer
        self.question_wait_timeout_ms = question_wait_timeout_ms
        self.fallback_cooldown_ms = fallback_cooldown_ms
        self.matching_pause_ms = matching_pause_ms
        self.profile = profile
        self.telemetry = telemetry
        self.category = category

        self.strategies: Dict[QuestionType, Callable[..., Awaitable[Optional[str]]]] = {
            QuestionType.MULTIPLE_CHOICE: self.answer_multiple_choice,
            QuestionType.WRITTEN: self.answer_written,
            QuestionType.TRUE_FALSE: self.answer_true_false,
            QuestionType.MATCHING: self.answer_matching,
        }

    # ---- primary strategies -------------------------------------------------

    async def answer_multiple_choice(self, document, question: Question) -> Optional[str]:
        await document.click(anchored(question, "../..//input[contains(@class, 'answer')]"))
        return question.options[0] if question.options else None

    async def answer_written(self, document, question: Question) -> Optional[str]:
        await document.fill(anchored(question, "../..//textarea"), self.placeholder_answer)
        return self.placeholder_answer

    async def answer_true_false(self, document, question: Question) -> Optional[str]:
        await document.click(anchored(question, '../..//input[@type="radio"]'))
        return question.options[0] if question.options else None

    async def answer_matching(self, document, question: Question) -> Optional[str]:
        items = await document.query_selector_all(
            anchored(question, "../..//*[contains(@class, 'matching-item')]")
        )
        for item in items:
            await item.click()
            # let drag/drop or assignment widgets settle
            await document.wait_for_timeout(self.matching_pause_ms)
        return f"{len(items)} items matched"

    # ---- dispatch -------------------------------------------------------------

    def fallback_instruction(self, question: Question) -> str:
        instruction = f'Try again to answer the question: "{question.text}"'
        if question.modality == QuestionType.WRITTEN and self.profile is not None:
            instruction += f". Write the answer as this student ({self.profile.describe()})"
        return instruction

    async def _primary(self, document, question: Question) -> Optional[str]:
        if not question.text:
            # an empty text= anchor would resolve inside some other question block
            raise QuizAutofillError("Question has no prompt text to anchor on")
        # Wait for the question to be visible
        await document.wait_for_selector(QUESTION_SELECTOR, timeout=self.question_wait_timeout_ms)
        strategy = self.strategies[question.modality]
        return await strategy(document, question)

    async def _answer(self, document, question: Question) -> AnswerOutcome:
        try:
            answer = await self._primary(document, question)
            return AnswerOutcome(question=question, status=AnswerStatus.ANSWERED, answer=answer)
        except Exception as primary_error:
            self.events.log(self.category, f"Error answering question: {question.text}",
                            error_detail(primary_error), level="WARNING")

            # Wait a bit longer and retry once
            await self.page.wait_for_timeout(self.fallback_cooldown_ms)
            if self.telemetry is not None:
                self.telemetry.increment("fallback_attempts")
            try:
                acted = await self.actor.act(self.fallback_instruction(question))
            except Exception as fallback_error:
                raise AnswerAttemptError(question, primary_error, fallback_error) from fallback_error

            if not acted:
                self.events.log(self.category, f"Fallback found nothing to act on: {question.text}",
                                level="WARNING")
                return AnswerOutcome(question=question, status=AnswerStatus.FALLBACK_NO_ACTION,
                                     error=str(primary_error))
            return AnswerOutcome(question=question, status=AnswerStatus.ANSWERED_BY_FALLBACK,
                                 error=str(primary_error))

    async def dispatch(self, document, question: Question) -> AnswerOutcome:
        """Answer one question; failures are logged and reported in the outcome"""
        try:
            outcome = await self._answer(document, question)
        except AnswerAttemptError as e:
            self.events.log(self.category, f"Failed to retry question: {question.text}",
                            error_detail(e.fallback_error), level="ERROR")
            outcome = AnswerOutcome(question=question, status=AnswerStatus.ABANDONED, error=str(e))
        except Exception as e:
            # the cooldown wait itself failed (page closed or crashed)
            self.events.log(self.category, f"Failed to retry question: {question.text}",
                            error_detail(e), level="ERROR")
            outcome = AnswerOutcome(question=question, status=AnswerStatus.ABANDONED, error=str(e))

        if self.telemetry is not None:
            self.telemetry.increment(f"questions_{outcome.status.value}")
        logger.debug(f"Question outcome: {outcome.status.value} ({question.modality.value})")
        return outcome
