"""
Quiz Data Models
Question records, answer outcomes and AI action plans
"""
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    WRITTEN = "written"
    TRUE_FALSE = "true_false"
    MATCHING = "matching"


class Question(BaseModel):
    """
    One quiz question as found on the page.

    Records are frozen: the modality and options are fixed at extraction time.
    `answer` is advisory telemetry and is only ever set on copies.
    """
    model_config = ConfigDict(frozen=True)

    modality: QuestionType
    text: str = ""
    options: Tuple[str, ...] = ()
    answer: Optional[str] = None

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    def with_answer(self, answer: Optional[str]) -> "Question":
        """Return a copy carrying the resolved answer value"""
        return self.model_copy(update={"answer": answer})


class AnswerStatus(str, Enum):
    ANSWERED = "answered"
    ANSWERED_BY_FALLBACK = "answered_by_fallback"
    FALLBACK_NO_ACTION = "fallback_no_action"
    ABANDONED = "abandoned"


@dataclass
class AnswerOutcome:
    question: Question
    status: AnswerStatus
    answer: Optional[str] = None
    error: Optional[str] = None

    @property
    def attempted(self) -> bool:
        return self.status != AnswerStatus.ABANDONED


class ActionPlan(BaseModel):
    """Parsed reply from the LLM describing a single page interaction"""
    action: Literal["click", "fill", "select", "none"]
    element: Optional[str] = Field(default=None, description="Element id in 'frame:index' form")
    value: Optional[str] = None
    reason: str = ""


class Profile(BaseModel):
    """Student profile used to flavour AI-written answers"""
    name: str = ""
    background: str = ""
    goals: str = ""
    writing_style: str = ""

    def describe(self) -> str:
        parts = []
        if self.name:
            parts.append(f"name: {self.name}")
        if self.background:
            parts.append(f"background: {self.background}")
        if self.goals:
            parts.append(f"goals: {self.goals}")
        if self.writing_style:
            parts.append(f"writing style: {self.writing_style}")
        return "; ".join(parts)
