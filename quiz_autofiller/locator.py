"""
Document Locator
Finds the embedded quiz document (iframe) or falls back to the main page
"""
from typing import Any, Iterable, Optional, Sequence

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import NetworkSettleTimeoutError
from .events import EventLogger

DEFAULT_FRAME_KEYWORDS = ("quiz", "assessment", "canvas")


def select_quiz_frame(frames: Iterable[Any], keywords: Sequence[str] = DEFAULT_FRAME_KEYWORDS) -> Optional[Any]:
    """Return the first frame whose URL contains any keyword (case-sensitive), else None"""
    for frame in frames:
        url = frame.url or ""
        if any(keyword in url for keyword in keywords):
            return frame
    return None


class DocumentLocator:
    """
    Resolves the Working Document for a run.

    Every frame in page.frames (nested frames included) is a candidate except
    the main frame; the page itself is the fallback instead.
    """

    def __init__(self, events: EventLogger, keywords: Sequence[str] = DEFAULT_FRAME_KEYWORDS,
                 settle_ms: int = 5000, ready_timeout_ms: int = 30000,
                 category: str = "quiz-autofiller"):
        self.events = events
        self.keywords = tuple(keywords)
        self.settle_ms = settle_ms
        self.ready_timeout_ms = ready_timeout_ms
        self.category = category

    async def locate(self, page):
        """Wait for embedded content to attach, then pick the quiz frame or the page"""
        # Wait for any iframes to load
        await page.wait_for_timeout(self.settle_ms)

        embedded = [frame for frame in page.frames if frame is not page.main_frame]
        quiz_frame = select_quiz_frame(embedded, self.keywords)

        if quiz_frame is None:
            self.events.log(self.category, "No quiz iframe found, trying main page...",
                            {"embedded_frames": len(embedded)})
            return page

        self.events.log(self.category, "Found quiz iframe, switching context...",
                        {"frame_url": quiz_frame.url})
        try:
            await quiz_frame.wait_for_load_state("networkidle", timeout=self.ready_timeout_ms)
        except PlaywrightTimeoutError as e:
            self.events.log(
                self.category,
                "Quiz iframe did not reach network idle",
                {"frame_url": quiz_frame.url, "timeout_ms": self.ready_timeout_ms, "error": str(e)},
                level="WARNING",
            )
            raise NetworkSettleTimeoutError(
                f"Quiz frame {quiz_frame.url} not idle after {self.ready_timeout_ms} ms",
                document=quiz_frame,
                timeout_ms=self.ready_timeout_ms,
            ) from e

        return quiz_frame
