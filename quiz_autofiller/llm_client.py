"""
LLM Client Component
Handles LLM interactions via OpenAI/AIPipe for natural-language page actions
"""
import json
import re
from typing import Dict, Any, List, Optional
from loguru import logger
from openai import AsyncOpenAI
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from .errors import ActionError
from .models import ActionPlan
from .telemetry import RunTelemetry


ACTION_SYSTEM_PROMPT = """You operate a web browser on behalf of a student taking a quiz.
You are given an instruction and a numbered list of interactive elements on the page.
Choose the ONE interaction that best carries out the instruction.

Respond with ONLY valid JSON of the form:
{"action": "click|fill|select|none", "element": "<element id>", "value": "<text to type or option to select>", "reason": "<short reason>"}

Rules:
- "element" must be one of the ids from the list.
- Use "fill" for text boxes and text areas, "select" for drop-downs, "click" for everything else.
- Use "none" only when nothing on the page can carry out the instruction."""


def strip_json_fences(text: str) -> str:
    text = re.sub(r'```json\n?', '', text)
    text = re.sub(r'```\n?', '', text)
    return text.strip()


class LLMClient:
    """
    Manages LLM interactions for planning page actions
    """

    def __init__(self, aipipe_token: str,
                 aipipe_base_url: str = "https://aipipe.org/openai/v1",
                 model_name: str = "gpt-4o-mini",
                 temperature: float = 0.1,
                 telemetry: Optional[RunTelemetry] = None,
                 client=None):
        self.model_name = model_name
        self.temperature = temperature
        self.telemetry = telemetry

        # OpenAI client setup with AIPipe
        self.client = client or AsyncOpenAI(
            api_key=aipipe_token,
            base_url=aipipe_base_url
        )

        logger.info(f"LLM Client initialized with model: {model_name}")

    def _record_usage(self, response):
        if self.telemetry is None:
            return
        self.telemetry.increment("llm_calls")
        usage = getattr(response, "usage", None)
        if usage is not None:
            self.telemetry.increment("prompt_tokens", getattr(usage, "prompt_tokens", 0) or 0)
            self.telemetry.increment("completion_tokens", getattr(usage, "completion_tokens", 0) or 0)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True
    )
    async def raw_chat(self, messages: List[Dict[str, str]], system_prompt: Optional[str] = None,
                       temperature: Optional[float] = None) -> str:
        """Raw chat helper.

        messages: list of {"role": "system|user|assistant", "content": str}
        system_prompt: optional system message prepended when messages carry none
        temperature: optional override of default temperature

        Returns the assistant's final message content as a string.
        """
        logger.debug(f"raw_chat invoked with {len(messages)} messages")

        temp = temperature if temperature is not None else self.temperature
        if not any(m.get("role") == "system" for m in messages):
            messages = [{"role": "system", "content": system_prompt or "You are a helpful assistant."}] + messages

        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=temp
            )
            self._record_usage(response)
            content = (response.choices[0].message.content or "").strip()
            logger.success("raw_chat response received")
            return content
        except Exception as e:
            logger.error(f"raw_chat error: {e}")
            raise

    async def plan_action(self, instruction: str, elements: List[Dict[str, Any]]) -> ActionPlan:
        """Ask the LLM which element to interact with to carry out instruction"""
        logger.info(f"Planning action for instruction: {instruction}")

        listing = "\n".join(json.dumps(element, ensure_ascii=False) for element in elements)
        prompt = f"""Instruction:
{instruction}

Interactive elements ({len(elements)}):
{listing or "(none)"}

IMPORTANT: Respond with ONLY valid JSON, no other text."""

        result_text = await self.raw_chat(
            [{"role": "user", "content": prompt}],
            system_prompt=ACTION_SYSTEM_PROMPT,
        )

        try:
            plan = ActionPlan.model_validate(json.loads(strip_json_fences(result_text)))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse action plan: {e}")
            logger.error(f"Response was: {result_text}")
            raise ActionError(f"Unusable action plan from LLM: {result_text[:200]}") from e

        logger.success(f"Action planned: {plan.action} {plan.element or ''} ({plan.reason})")
        return plan
