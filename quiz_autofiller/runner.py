"""
Quiz Runner
Drives a quiz from navigation through answering to submission
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .actor import PageActor
from .config import Settings
from .dispatcher import AnswerDispatcher, error_detail
from .errors import NetworkSettleTimeoutError
from .events import EventLogger
from .extractor import ModalityClassifier, QuestionExtractor
from .locator import DocumentLocator
from .models import AnswerOutcome, Question
from .telemetry import RunTelemetry


class RunState(str, Enum):
    IDLE = "idle"
    NAVIGATED = "navigated"
    SETTLING = "settling"
    ANALYZING = "analyzing"
    ANSWERING = "answering"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    DONE = "done"


@dataclass
class RunReport:
    state: RunState
    questions: Tuple[Question, ...] = ()
    outcomes: List[AnswerOutcome] = field(default_factory=list)
    submit_issued: bool = False
    confirm_issued: bool = False
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def answered(self) -> List[Question]:
        """Questions with their advisory answers attached"""
        return [o.question.with_answer(o.answer) for o in self.outcomes]


class QuizRunner:
    """
    Owns the page and the Working Document for the duration of one run.

    Errors while locating or analyzing end the run; errors answering a
    question are absorbed by the dispatcher.
    """

    def __init__(self, page, settings: Settings, events: EventLogger, actor: PageActor,
                 locator: Optional[DocumentLocator] = None,
                 extractor: Optional[QuestionExtractor] = None,
                 dispatcher: Optional[AnswerDispatcher] = None,
                 telemetry: Optional[RunTelemetry] = None,
                 category: str = "quiz-autofiller"):
        self.page = page
        self.settings = settings
        self.events = events
        self.actor = actor
        self.category = category
        self.telemetry = telemetry or RunTelemetry()
        self.state = RunState.IDLE

        self.locator = locator or DocumentLocator(
            events,
            keywords=settings.frame_keywords,
            settle_ms=settings.frame_settle_ms,
            ready_timeout_ms=settings.frame_ready_timeout_ms,
            category=category,
        )
        self.extractor = extractor or QuestionExtractor(
            events,
            classifier=ModalityClassifier.from_markers(settings.modality_markers),
            category=category,
        )
        self.dispatcher = dispatcher or AnswerDispatcher(
            page, actor, events,
            placeholder_answer=settings.placeholder_answer,
            question_wait_timeout_ms=settings.question_wait_timeout_ms,
            fallback_cooldown_ms=settings.fallback_cooldown_ms,
            matching_pause_ms=settings.matching_pause_ms,
            profile=settings.profile,
            telemetry=self.telemetry,
            category=category,
        )

    def _enter(self, state: RunState, **auxiliary):
        self.state = state
        self.telemetry.trace("states", state.value)
        self.events.log(self.category, f"State -> {state.value}", auxiliary or None, level="DEBUG")

    async def _working_document(self):
        try:
            return await self.locator.locate(self.page)
        except NetworkSettleTimeoutError as e:
            if not self.settings.proceed_on_settle_timeout or e.document is None:
                raise
            self.events.log(self.category, "Proceeding on a quiz frame that never went idle",
                            error_detail(e), level="WARNING")
            self.telemetry.record("settle_timeout", True)
            return e.document

    async def _pause_between_questions(self):
        try:
            await self.page.wait_for_timeout(self.settings.between_questions_ms)
        except Exception as e:
            self.events.log(self.category, "Pause between questions failed",
                            error_detail(e), level="WARNING")

    async def _instruct(self, instruction: str) -> bool:
        """Issue a best-effort instruction; True once issued without raising"""
        try:
            acted = await self.actor.act(instruction)
        except Exception as e:
            self.events.log(self.category, f"Instruction failed: {instruction}",
                            error_detail(e), level="WARNING")
            return False
        if not acted:
            self.events.log(self.category, f"Instruction issued, nothing to act on: {instruction}",
                            level="WARNING")
        return True

    async def run(self, url: Optional[str] = None) -> RunReport:
        url = url or self.settings.quiz_url

        await self.page.goto(url)
        self._enter(RunState.NAVIGATED, url=url)

        # Wait for page load and user verification
        self.events.log(self.category, "Waiting for page load and user verification...")
        await self.page.wait_for_timeout(self.settings.verification_wait_ms)
        self.events.log(self.category, "Page loaded, proceeding with quiz analysis...")
        await self.page.wait_for_timeout(self.settings.load_wait_ms)

        self._enter(RunState.SETTLING)
        document = await self._working_document()

        self._enter(RunState.ANALYZING)
        questions = await self.extractor.extract(document)
        self.telemetry.record("questions_total", len(questions))

        outcomes = []
        for index, question in enumerate(questions):
            self._enter(RunState.ANSWERING, index=index)
            self.events.log(self.category, f"Processing question: {question.text}",
                            {"questionType": {"value": question.modality.value, "type": "string"}})
            self.telemetry.increment(f"modality_{question.modality.value}")

            outcomes.append(await self.dispatcher.dispatch(document, question))
            await self._pause_between_questions()

        self._enter(RunState.SUBMITTING)
        submit_issued = await self._instruct("Submit the quiz")

        # Handle any confirmation dialogs
        self._enter(RunState.CONFIRMING)
        confirm_issued = await self._instruct("Confirm submission if prompted")

        self.telemetry.record("submit_issued", submit_issued)
        self.telemetry.record("confirm_issued", confirm_issued)
        self._enter(RunState.DONE)

        metrics = self.telemetry.snapshot()
        self.events.log(self.category, "Quiz completed",
                        {"metrics": {"value": json.dumps(metrics), "type": "object"}})

        return RunReport(
            state=self.state,
            questions=questions,
            outcomes=outcomes,
            submit_issued=submit_issued,
            confirm_issued=confirm_issued,
            metrics=metrics,
        )
