"""
Tests for the LLM client and the natural-language page actor
"""
import json
from types import SimpleNamespace

import pytest

from conftest import RecordingLogger
from quiz_autofiller.actor import INTERACTIVE_SELECTOR, LLMPageActor, inventory_elements, parse_element_id
from quiz_autofiller.errors import ActionError
from quiz_autofiller.llm_client import LLMClient, strip_json_fences
from quiz_autofiller.telemetry import RunTelemetry


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        content = self.replies.pop(0)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(prompt_tokens=120, completion_tokens=30),
        )


def fake_openai(*replies):
    completions = FakeCompletions(replies)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class FakeLocator:
    def __init__(self, log, frame_index, index):
        self.log = log
        self.key = (frame_index, index)

    async def click(self, timeout=None):
        self.log.append(("click", self.key))

    async def fill(self, value, timeout=None):
        self.log.append(("fill", self.key, value))

    async def select_option(self, value, timeout=None):
        self.log.append(("select", self.key, value))


class FakeLocatorSet:
    def __init__(self, log, frame_index, selector):
        self.log = log
        self.frame_index = frame_index
        self.selector = selector

    def nth(self, index):
        return FakeLocator(self.log, self.frame_index, index)


class FakeFrame:
    def __init__(self, html, log, frame_index, url="about:blank"):
        self.html = html
        self.log = log
        self.frame_index = frame_index
        self.url = url

    async def content(self):
        return self.html

    def locator(self, selector):
        assert selector == INTERACTIVE_SELECTOR
        return FakeLocatorSet(self.log, self.frame_index, selector)


def make_page(*htmls):
    log = []
    frames = [FakeFrame(html, log, i) for i, html in enumerate(htmls)]
    return SimpleNamespace(frames=frames), log


PAGE_HTML = """
<html><body>
  <a href="/courses">Courses</a>
  <input type="hidden" name="csrf" value="x">
  <textarea name="essay" placeholder="Your answer"></textarea>
</body></html>
"""

QUIZ_HTML = """
<form>
  <label>Paris</label>
  <button type="submit">Submit Quiz</button>
</form>
"""


class TestLLMClient:

    @pytest.mark.asyncio
    async def test_plan_action_parses_fenced_json(self):
        client, completions = fake_openai(
            '```json\n{"action": "click", "element": "1:1", "reason": "submit button"}\n```'
        )
        telemetry = RunTelemetry()
        llm = LLMClient("token", telemetry=telemetry, client=client)

        plan = await llm.plan_action("Submit the quiz", [{"id": "1:1", "tag": "button", "text": "Submit Quiz"}])

        assert plan.action == "click"
        assert plan.element == "1:1"
        assert completions.calls[0]["messages"][0]["role"] == "system"
        assert "Submit the quiz" in completions.calls[0]["messages"][1]["content"]
        assert telemetry.get("llm_calls") == 1
        assert telemetry.get("prompt_tokens") == 120

    @pytest.mark.asyncio
    async def test_plan_action_rejects_non_json(self):
        client, _ = fake_openai("I would click the submit button.")
        llm = LLMClient("token", client=client)

        with pytest.raises(ActionError):
            await llm.plan_action("Submit the quiz", [])

    @pytest.mark.asyncio
    async def test_plan_action_rejects_unknown_action(self):
        client, _ = fake_openai('{"action": "drag", "element": "0:0"}')
        llm = LLMClient("token", client=client)

        with pytest.raises(ActionError):
            await llm.plan_action("Match the terms", [])

    def test_strip_json_fences(self):
        assert strip_json_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


class TestInventory:

    def test_ids_follow_document_order(self):
        elements = inventory_elements(PAGE_HTML, frame_index=0)

        assert [e["id"] for e in elements] == ["0:0", "0:1"]
        assert elements[0]["text"] == "Courses"
        assert elements[1]["placeholder"] == "Your answer"

    def test_limit(self):
        assert len(inventory_elements(QUIZ_HTML, frame_index=2, limit=1)) == 1

    def test_parse_element_id(self):
        assert parse_element_id("3:14") == (3, 14)
        with pytest.raises(ActionError):
            parse_element_id("submit")


class TestLLMPageActor:

    @pytest.mark.asyncio
    async def test_click_across_frames(self):
        page, log = make_page(PAGE_HTML, QUIZ_HTML)
        client, completions = fake_openai('{"action": "click", "element": "1:1", "reason": "submit"}')
        events = RecordingLogger()
        actor = LLMPageActor(page, LLMClient("token", client=client), events)

        assert await actor.act("Submit the quiz") is True

        assert log == [("click", (1, 1))]
        prompt = completions.calls[0]["messages"][1]["content"]
        assert json.dumps({"id": "1:1", "tag": "button", "type": "submit", "text": "Submit Quiz"}) in prompt
        assert events.messages() == ["Performed click for: Submit the quiz"]

    @pytest.mark.asyncio
    async def test_fill(self):
        page, log = make_page(PAGE_HTML)
        client, _ = fake_openai('{"action": "fill", "element": "0:1", "value": "My plan is..."}')
        actor = LLMPageActor(page, LLMClient("token", client=client), RecordingLogger())

        await actor.act('Try again to answer the question: "Describe your plan"')

        assert log == [("fill", (0, 1), "My plan is...")]

    @pytest.mark.asyncio
    async def test_none_returns_false(self):
        page, log = make_page(PAGE_HTML)
        client, _ = fake_openai('{"action": "none", "reason": "no dialog"}')
        actor = LLMPageActor(page, LLMClient("token", client=client), RecordingLogger())

        assert await actor.act("Confirm submission if prompted") is False
        assert log == []

    @pytest.mark.asyncio
    async def test_unknown_frame_raises(self):
        page, _ = make_page(PAGE_HTML)
        client, _ = fake_openai('{"action": "click", "element": "4:0"}')
        actor = LLMPageActor(page, LLMClient("token", client=client), RecordingLogger())

        with pytest.raises(ActionError):
            await actor.act("Submit the quiz")
