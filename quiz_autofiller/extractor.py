"""
Question Extractor
Parses the Working Document's HTML into typed Question records
"""
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag
from loguru import logger

from .config import DEFAULT_MODALITY_MARKERS
from .errors import QuizAnalysisError
from .events import EventLogger
from .models import Question, QuestionType

QUESTION_SELECTOR = ".question, .quiz_question"
PROMPT_SELECTORS = (".question_text", ".question-text")
OPTION_SELECTOR = '.answer, .answer_option, input[type="radio"]'

Predicate = Callable[[Tag], bool]


def has_class(marker: str) -> Predicate:
    """Predicate matching blocks whose class list contains marker"""
    def predicate(block: Tag) -> bool:
        return marker in (block.get("class") or [])
    predicate.__name__ = f"has_class_{marker}"
    return predicate


class ModalityClassifier:
    """
    Ordered (predicate, modality) rules; the first matching rule wins.
    Blocks matching no rule are written questions.
    """

    def __init__(self, rules: Sequence[Tuple[Predicate, QuestionType]],
                 default: QuestionType = QuestionType.WRITTEN):
        self.rules = list(rules)
        self.default = default

    @classmethod
    def from_markers(cls, markers: Iterable[Tuple[str, str]] = DEFAULT_MODALITY_MARKERS) -> "ModalityClassifier":
        return cls([(has_class(marker), QuestionType(modality)) for marker, modality in markers])

    def classify(self, block: Tag) -> QuestionType:
        for predicate, modality in self.rules:
            if predicate(block):
                return modality
        return self.default


def text_content(element: Tag) -> str:
    """Trimmed text content with inner whitespace collapsed, as Playwright's text engine sees it"""
    return " ".join(element.get_text().split())


def read_prompt(block: Tag) -> str:
    for selector in PROMPT_SELECTORS:
        element = block.select_one(selector)
        if element is not None:
            text = text_content(element)
            if text:
                return text
    return ""


def read_options(block: Tag) -> List[str]:
    # select() walks the union of selectors in document order
    options = []
    for element in block.select(OPTION_SELECTOR):
        text = text_content(element)
        if text:
            options.append(text)
    return options


class QuestionExtractor:
    """Turns a document snapshot into the run's question list"""

    def __init__(self, events: EventLogger, classifier: Optional[ModalityClassifier] = None,
                 category: str = "quiz-autofiller"):
        self.events = events
        self.classifier = classifier or ModalityClassifier.from_markers()
        self.category = category

    def parse(self, html: str) -> Tuple[Question, ...]:
        soup = BeautifulSoup(html, "html.parser")
        questions = []
        for block in soup.select(QUESTION_SELECTOR):
            questions.append(Question(
                modality=self.classifier.classify(block),
                text=read_prompt(block),
                options=read_options(block),
            ))
        logger.debug(f"Parsed {len(questions)} question blocks")
        return tuple(questions)

    async def extract(self, document) -> Tuple[Question, ...]:
        """Snapshot the document and extract every question block; all or nothing"""
        try:
            html = await document.content()
            questions = self.parse(html)
        except Exception as e:
            self.events.log(
                self.category,
                "Error analyzing quiz page",
                {"error": {"value": str(e) or e.__class__.__name__, "type": "string"}},
                level="ERROR",
            )
            raise QuizAnalysisError(f"Quiz analysis failed: {e}") from e

        self.events.log(self.category, f"Extracted {len(questions)} questions",
                        {"modalities": [q.modality.value for q in questions]})
        return questions
