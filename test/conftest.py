"""
Shared test doubles: HTML-backed documents, pages, a recording logger and a scripted actor
"""
from typing import Callable, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from quiz_autofiller.config import Settings


class FakeElement:
    def __init__(self, log: list, name: str):
        self.log = log
        self.name = name

    async def click(self, **kwargs):
        self.log.append(("click", self.name))


class FakeDocument:
    """Stands in for a Playwright Page or Frame, recording every interaction"""

    def __init__(self, html: str = "", url: str = "about:blank",
                 fail_selectors=(), content_error: Optional[Exception] = None,
                 has_questions: bool = True, settle_timeout: bool = False,
                 matching_items: int = 0):
        self.html = html
        self.url = url
        self.fail_selectors = tuple(fail_selectors)
        self.content_error = content_error
        self.has_questions = has_questions
        self.settle_timeout = settle_timeout
        self.matching_items = matching_items
        self.actions: list = []
        self.waits: List[int] = []
        self.load_states: list = []

    def _check(self, selector: str):
        for fragment in self.fail_selectors:
            if fragment in selector:
                raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")

    async def content(self) -> str:
        if self.content_error is not None:
            raise self.content_error
        return self.html

    async def wait_for_selector(self, selector, timeout=None):
        self.actions.append(("wait_for_selector", selector, timeout))
        if not self.has_questions:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def click(self, selector, **kwargs):
        self._check(selector)
        self.actions.append(("click", selector))

    async def fill(self, selector, value, **kwargs):
        self._check(selector)
        self.actions.append(("fill", selector, value))

    async def query_selector_all(self, selector):
        self._check(selector)
        return [FakeElement(self.actions, f"item-{i}") for i in range(self.matching_items)]

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def wait_for_load_state(self, state="load", timeout=None):
        self.load_states.append((state, timeout))
        if self.settle_timeout:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")


class FakePage(FakeDocument):
    """A page whose frame list starts with its own main frame"""

    def __init__(self, html: str = "", url: str = "https://canvas.example.edu/courses/1/pages/quiz",
                 embedded: Optional[list] = None, **kwargs):
        super().__init__(html=html, url=url, **kwargs)
        self.main_frame = FakeDocument(html=html, url=url)
        self.frames = [self.main_frame] + list(embedded or [])
        self.visited: List[str] = []

    async def goto(self, url, **kwargs):
        self.visited.append(url)


class RecordingLogger:
    def __init__(self):
        self.events: list = []

    def log(self, category, message, auxiliary=None, level="INFO"):
        self.events.append({"category": category, "message": message,
                            "auxiliary": auxiliary, "level": level})

    def messages(self) -> List[str]:
        return [e["message"] for e in self.events]


class ScriptedActor:
    """Records instructions; the responder decides the result or raises"""

    def __init__(self, responder: Optional[Callable[[str], object]] = None):
        self.instructions: List[str] = []
        self.responder = responder

    async def act(self, instruction: str) -> bool:
        self.instructions.append(instruction)
        if self.responder is None:
            return True
        result = self.responder(instruction)
        if isinstance(result, Exception):
            raise result
        return result


MC_BLOCK = """
<div class="question multiple_choice">
  <div class="question_text">2+2=?</div>
  <div class="answer">3</div>
  <div class="answer">4</div>
  <div class="answer">5</div>
</div>
"""


def quiz_html(*blocks: str) -> str:
    return "<html><body><form id='quiz'>" + "".join(blocks) + "</form></body></html>"


@pytest.fixture
def events():
    return RecordingLogger()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        verification_wait_ms=10,
        load_wait_ms=10,
        frame_settle_ms=5,
        frame_ready_timeout_ms=100,
        aipipe_token="test-token",
    )
