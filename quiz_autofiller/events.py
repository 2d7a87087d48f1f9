"""
Event Logging
Loguru sink setup and the structured event logger used by every component
"""
import os
import sys
from typing import Any, Dict, Optional, Protocol

from loguru import logger


DEFAULT_CATEGORY = "quiz-autofiller"


def configure_logging(log_dir: str = "logs", level: str = "INFO"):
    """Replace loguru's default sink with console + rotating file sinks"""
    os.makedirs(log_dir, exist_ok=True)

    # Remove default logger
    logger.remove()
    logger.configure(extra={"category": DEFAULT_CATEGORY})

    # Console logger with colors
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
               "<magenta>{extra[category]}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - "
               "<level>{message}</level>",
        level=level,
        colorize=True,
    )

    # Full debug log with rotation
    logger.add(
        os.path.join(log_dir, "autofill_{time:YYYY-MM-DD}.log"),
        rotation="50 MB",
        retention="10 days",
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[category]} | {name}:{function}:{line} - {message} | {extra}",
        enqueue=True,
    )

    # Error-only file
    logger.add(
        os.path.join(log_dir, "errors_{time:YYYY-MM-DD}.log"),
        rotation="20 MB",
        retention="30 days",
        level="ERROR",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[category]} | {name}:{function}:{line} - {message}\n{exception}",
        enqueue=True,
    )

    logger.info(f"✓ Logging configured (level={level}, dir={log_dir})")


class EventLogger(Protocol):
    def log(self, category: str, message: str, auxiliary: Optional[Dict[str, Any]] = None,
            level: str = "INFO") -> None:
        ...


class QuizEventLogger:
    """
    Structured logger handed to the locator, extractor, dispatcher and runner.

    Each event carries a category, a human readable message and an optional
    auxiliary mapping, all bound onto the loguru record. Logging never raises.
    """

    def __init__(self, default_category: str = DEFAULT_CATEGORY):
        self.default_category = default_category

    def log(self, category: Optional[str], message: str, auxiliary: Optional[Dict[str, Any]] = None,
            level: str = "INFO") -> None:
        bound = logger.bind(category=category or self.default_category, auxiliary=auxiliary or {})
        try:
            bound.log(level, message)
        except ValueError:
            # unknown level name
            bound.info(message)
