"""
AI Page Actor
Carries out natural-language instructions ("Submit the quiz") against the live page
"""
from typing import Any, Dict, List, Protocol, Tuple

from bs4 import BeautifulSoup
from loguru import logger

from .errors import ActionError
from .events import EventLogger
from .llm_client import LLMClient
from .models import ActionPlan

INTERACTIVE_SELECTOR = (
    'a[href], button, input:not([type="hidden"]), textarea, select, label, '
    '[role="button"], [role="radio"], [role="checkbox"]'
)


class PageActor(Protocol):
    async def act(self, instruction: str) -> bool:
        """Perform instruction; True when an interaction was issued"""
        ...


def inventory_elements(html: str, frame_index: int = 0, limit: int = 150) -> List[Dict[str, Any]]:
    """
    Describe interactive elements of one frame in document order.

    Ids are "frame:index" where index is the element's position among
    INTERACTIVE_SELECTOR matches, so Playwright's locator(...).nth(index)
    resolves the same element.
    """
    soup = BeautifulSoup(html, "html.parser")
    elements = []
    for index, element in enumerate(soup.select(INTERACTIVE_SELECTOR)):
        if len(elements) >= limit:
            break
        text = element.get_text(" ", strip=True)
        described = {"id": f"{frame_index}:{index}", "tag": element.name}
        for attr in ("type", "name", "value", "placeholder", "aria-label"):
            if element.get(attr):
                described[attr] = element.get(attr)
        if text:
            described["text"] = text[:120]
        elements.append(described)
    return elements


def parse_element_id(element_id: str) -> Tuple[int, int]:
    try:
        frame_part, index_part = element_id.split(":", 1)
        return int(frame_part), int(index_part)
    except (AttributeError, ValueError) as e:
        raise ActionError(f"Malformed element id: {element_id!r}") from e


class LLMPageActor:
    """
    Natural-language action capability backed by an LLM.

    Works on the whole page (every frame), not just the Working Document.
    """

    def __init__(self, page, llm: LLMClient, events: EventLogger,
                 action_timeout_ms: int = 5000, max_elements: int = 150,
                 category: str = "quiz-autofiller"):
        self.page = page
        self.llm = llm
        self.events = events
        self.action_timeout_ms = action_timeout_ms
        self.max_elements = max_elements
        self.category = category

    async def _inventory(self) -> List[Dict[str, Any]]:
        elements = []
        for frame_index, frame in enumerate(self.page.frames):
            try:
                html = await frame.content()
            except Exception as e:
                # detached frames are skipped, the rest of the page is still usable
                logger.debug(f"Skipping frame {frame_index} ({frame.url}): {e}")
                continue
            remaining = self.max_elements - len(elements)
            if remaining <= 0:
                break
            elements.extend(inventory_elements(html, frame_index, remaining))
        return elements

    def _resolve(self, element_id: str):
        frame_index, index = parse_element_id(element_id)
        frames = self.page.frames
        if frame_index >= len(frames):
            raise ActionError(f"Unknown frame in element id {element_id!r}")
        return frames[frame_index].locator(INTERACTIVE_SELECTOR).nth(index)

    async def _perform(self, plan: ActionPlan):
        if not plan.element:
            raise ActionError(f"Action {plan.action!r} has no target element")
        target = self._resolve(plan.element)
        try:
            if plan.action == "click":
                await target.click(timeout=self.action_timeout_ms)
            elif plan.action == "fill":
                await target.fill(plan.value or "", timeout=self.action_timeout_ms)
            elif plan.action == "select":
                await target.select_option(plan.value or "", timeout=self.action_timeout_ms)
        except Exception as e:
            raise ActionError(f"{plan.action} on {plan.element} failed: {e}") from e

    async def act(self, instruction: str) -> bool:
        elements = await self._inventory()
        plan = await self.llm.plan_action(instruction, elements)

        if plan.action == "none":
            self.events.log(self.category, f"No action taken for: {instruction}",
                            {"reason": plan.reason}, level="WARNING")
            return False

        await self._perform(plan)
        self.events.log(self.category, f"Performed {plan.action} for: {instruction}",
                        {"element": plan.element, "reason": plan.reason})
        return True
