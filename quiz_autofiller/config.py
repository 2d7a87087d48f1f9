"""
Configuration
Runtime settings loaded from environment variables and .env
"""
from typing import List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Profile, QuestionType


DEFAULT_QUIZ_URL = (
    "https://canvas.cmu.edu/courses/44865/pages/"
    "step-3-make-a-plan-how-to-study?module_item_id=6003850"
)

PLACEHOLDER_ANSWER = "Comprehensive answer based on the question context"

DEFAULT_MODALITY_MARKERS: List[Tuple[str, str]] = [
    ("multiple_choice", QuestionType.MULTIPLE_CHOICE.value),
    ("true_false", QuestionType.TRUE_FALSE.value),
    ("matching", QuestionType.MATCHING.value),
]


class Settings(BaseSettings):
    """Application settings with validation"""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    quiz_url: str = Field(default=DEFAULT_QUIZ_URL, description="Page hosting the quiz")

    # LLM endpoint driving the natural-language actions
    aipipe_token: str = Field(default="", description="AIPipe / OpenAI API token")
    aipipe_base_url: str = Field(default="https://aipipe.org/openai/v1", description="AIPipe base URL")
    openai_model: str = Field(default="gpt-4o-mini", description="Model name without provider prefix")

    headless: bool = True

    # Waits, all in milliseconds
    verification_wait_ms: int = 10000
    load_wait_ms: int = 10000
    frame_settle_ms: int = 5000
    frame_ready_timeout_ms: int = 30000
    question_wait_timeout_ms: int = 5000
    fallback_cooldown_ms: int = 2000
    matching_pause_ms: int = 500
    between_questions_ms: int = 1000
    action_timeout_ms: int = 5000

    frame_keywords: List[str] = Field(default_factory=lambda: ["quiz", "assessment", "canvas"])
    modality_markers: List[Tuple[str, str]] = Field(default_factory=lambda: list(DEFAULT_MODALITY_MARKERS))
    placeholder_answer: str = PLACEHOLDER_ANSWER

    proceed_on_settle_timeout: bool = False

    profile_name: str = ""
    profile_background: str = ""
    profile_goals: str = ""
    profile_writing_style: str = ""

    log_dir: str = "logs"
    log_level: str = "INFO"

    @field_validator("openai_model")
    @classmethod
    def remove_provider_prefix(cls, v):
        """Remove provider prefix like 'openai/' if present"""
        if "/" in v:
            return v.split("/")[-1]
        return v

    @field_validator(
        "verification_wait_ms", "load_wait_ms", "frame_settle_ms", "frame_ready_timeout_ms",
        "question_wait_timeout_ms", "fallback_cooldown_ms", "matching_pause_ms",
        "between_questions_ms", "action_timeout_ms",
    )
    @classmethod
    def non_negative_wait(cls, v, info):
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @field_validator("frame_keywords")
    @classmethod
    def keywords_required(cls, v):
        if not v:
            raise ValueError("frame_keywords must contain at least one keyword")
        return v

    @field_validator("modality_markers")
    @classmethod
    def known_modalities(cls, v):
        known = {t.value for t in QuestionType}
        for marker, modality in v:
            if modality not in known:
                raise ValueError(f"Unknown modality {modality!r} for marker {marker!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v):
        return v.upper()

    @property
    def profile(self) -> Optional[Profile]:
        profile = Profile(
            name=self.profile_name,
            background=self.profile_background,
            goals=self.profile_goals,
            writing_style=self.profile_writing_style,
        )
        if not profile.describe():
            return None
        return profile
