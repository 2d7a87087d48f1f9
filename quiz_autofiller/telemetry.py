"""Run Telemetry
Counters, flags and the state path produced during a single quiz run.
"""
from typing import Any, Dict, List

from loguru import logger


class RunTelemetry:
    def __init__(self):
        self._store: Dict[str, Any] = {}

    def record(self, key: str, value: Any):
        """Set a flag or total; a later record for the same key replaces it"""
        self._store[key] = value
        logger.debug(f"Telemetry recorded: {key} -> {value}")

    def trace(self, key: str, value: Any) -> List[Any]:
        """Append value to the path under key unless it repeats the last step"""
        path = self._store.setdefault(key, [])
        if not path or path[-1] != value:
            path.append(value)
        return path

    def increment(self, key: str, amount: int = 1) -> int:
        """Add amount to a numeric counter, starting from zero"""
        self._store[key] = self._store.get(key, 0) + amount
        return self._store[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    def snapshot(self) -> Dict[str, Any]:
        # paths are the only mutable values
        return {key: list(value) if isinstance(value, list) else value
                for key, value in self._store.items()}

    def reset(self):
        self._store.clear()
