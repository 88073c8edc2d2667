"""
Notification sinks.

The core reports success and validation messages to a sink and never waits
on it; rendering them (toasts, chat messages) is the application's job.
"""
from typing import List, Protocol, Tuple

from bakery.logging import get_logger

logger = get_logger(__name__)


class NotificationSink(Protocol):
    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingNotificationSink:
    """Default sink: writes messages to the log."""

    def success(self, message: str) -> None:
        logger.info(f"[notify] {message}")

    def error(self, message: str) -> None:
        logger.info(f"[notify:error] {message}")


class RecordingNotificationSink:
    """Keeps every message so a UI layer can drain and render them."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [text for level, text in self.messages if level == "error"]

    def drain(self) -> List[Tuple[str, str]]:
        messages, self.messages = self.messages, []
        return messages
