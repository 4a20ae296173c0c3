"""User-visible feedback port: the "toast" shown after a cart action.

UI layers plug in their own implementation; the default just logs, and
``RecordingFeedback`` keeps messages in memory for test assertions.
"""

from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class Feedback(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingFeedback:
    def success(self, message: str) -> None:
        logger.info("User feedback", level="success", message=message)

    def error(self, message: str) -> None:
        logger.warning("User feedback", level="error", message=message)


class RecordingFeedback:
    """Feedback sink that records messages in memory."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [message for level, message in self.messages if level == "error"]

    @property
    def successes(self) -> list[str]:
        return [message for level, message in self.messages if level == "success"]

    def reset(self):
        self.messages.clear()
