"""
Command-line entry point
Launches a browser, fills in the quiz at the configured URL and submits it
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from .actor import LLMPageActor
from .browser import BrowserSession
from .config import Settings
from .events import QuizEventLogger, configure_logging
from .llm_client import LLMClient
from .runner import QuizRunner, RunReport, RunState
from .telemetry import RunTelemetry


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz-autofiller",
        description="Answer and submit an LMS quiz in a Playwright-driven browser",
    )
    parser.add_argument("url", nargs="?", help="Quiz page URL (defaults to QUIZ_URL)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--log-level", help="Console log level (defaults to LOG_LEVEL)")
    return parser


async def run_quiz(settings: Settings, url: Optional[str] = None) -> RunReport:
    """Run one quiz end to end inside a fresh browser session"""
    events = QuizEventLogger()
    telemetry = RunTelemetry()
    llm = LLMClient(
        settings.aipipe_token,
        aipipe_base_url=settings.aipipe_base_url,
        model_name=settings.openai_model,
        telemetry=telemetry,
    )

    async with BrowserSession(headless=settings.headless) as page:
        actor = LLMPageActor(page, llm, events, action_timeout_ms=settings.action_timeout_ms)
        runner = QuizRunner(page, settings, events, actor, telemetry=telemetry)
        return await runner.run(url)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Load and validate settings at startup
    try:
        settings = Settings()
    except ValidationError as e:
        logger.error(f"✗ Configuration error: {e}")
        return 1

    overrides = {}
    if args.headed:
        overrides["headless"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(settings.log_dir, settings.log_level)

    if not settings.aipipe_token:
        logger.warning("AIPIPE_TOKEN is not set; fallback answers and submission will fail")

    try:
        report = asyncio.run(run_quiz(settings, args.url))
    except Exception as e:
        logger.opt(exception=e).error(f"✗ Quiz run failed: {e}")
        return 1

    answered = sum(1 for o in report.outcomes if o.attempted)
    logger.success(f"✓ Done: {answered}/{len(report.questions)} questions answered, "
                   f"submit issued={report.submit_issued}")
    return 0 if report.state == RunState.DONE else 1


if __name__ == "__main__":
    sys.exit(main())
