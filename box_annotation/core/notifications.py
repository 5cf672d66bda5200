"""
Notification sink.

Fire-and-forget channel for user facing success/info/error messages
(the toasts of a web front-end, a status line in the OpenCV window).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.ERROR: logging.ERROR,
}


@dataclass
class Notification:
    level: NotificationLevel
    message: str


class NotificationSink:
    """
    Default sink: logs every notification and remembers the last one.

    Pass `callback` to forward notifications to a UI as well.
    """

    def __init__(self, callback: Optional[Callable[[Notification], None]] = None):
        self.callback = callback
        self.last: Optional[Notification] = None

    def notify(self, level: NotificationLevel, message: str):
        notification = Notification(level=level, message=message)
        self.last = notification
        logger.log(_LOG_LEVELS[level], "[%s] %s", level.value, message)
        if self.callback is not None:
            self.callback(notification)

    def success(self, message: str):
        self.notify(NotificationLevel.SUCCESS, message)

    def info(self, message: str):
        self.notify(NotificationLevel.INFO, message)

    def error(self, message: str):
        self.notify(NotificationLevel.ERROR, message)


class CollectingNotificationSink(NotificationSink):
    """Sink that keeps every notification, used by the CLI and tests."""

    def __init__(self, callback: Optional[Callable[[Notification], None]] = None):
        super().__init__(callback)
        self.history: List[Notification] = []

    def notify(self, level: NotificationLevel, message: str):
        super().notify(level, message)
        self.history.append(self.last)

    def messages(self, level: Optional[NotificationLevel] = None) -> List[str]:
        return [n.message for n in self.history if level is None or n.level == level]
