"""Submits the builder's markdown and tracks the save state the UI shows."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from mirai.core.errors import SaveInProgressError

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = "Resume saved successfully!"
SAVE_FAILURE_MESSAGE = "Failed to save resume"

Saver = Callable[[str], Awaitable[Any]]
Notifier = Callable[[str, str], None]


class SaveState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class SaveResult:
    ok: bool
    resume: Optional[Any] = None
    error: Optional[str] = None
    # field path -> message, when the form blocked the save
    errors: Dict[str, str] = field(default_factory=dict)


class PersistenceClient:
    """One save at a time, never retried automatically.

    A failed save stays failed until the user submits again.
    """

    def __init__(self, saver: Saver, notify: Optional[Notifier] = None):
        self._saver = saver
        self._notify = notify or (lambda level, message: None)
        self.state = SaveState.IDLE
        self.last_result: Optional[SaveResult] = None

    async def save(self, markdown: str) -> SaveResult:
        if self.state is SaveState.IN_FLIGHT:
            raise SaveInProgressError("A save is already in progress")

        self.state = SaveState.IN_FLIGHT
        try:
            saved = await self._saver(markdown)
        except Exception as e:
            logger.error(f"Save error: {e}")
            message = str(e) or SAVE_FAILURE_MESSAGE
            self.state = SaveState.FAILURE
            self.last_result = SaveResult(ok=False, error=message)
            self._notify("error", message)
            return self.last_result

        self.state = SaveState.SUCCESS
        self.last_result = SaveResult(ok=True, resume=saved)
        self._notify("success", SAVE_SUCCESS_MESSAGE)
        return self.last_result
