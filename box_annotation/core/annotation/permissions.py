"""
Permission gate: annotation input is accepted only for tasks In Progress.
"""

import logging
from gettext import gettext as _
from typing import Optional

from ..notifications import NotificationSink
from .errors import PermissionDenied
from .events import AnnotationEvent, EventEmitter, EventType
from .state import TaskStatus

logger = logging.getLogger(__name__)


def can_draw(status) -> bool:
    """True iff the task status is In Progress."""
    return TaskStatus.parse(status) is TaskStatus.IN_PROGRESS


def rejection_message() -> str:
    return _("You can only annotate when the task is in 'In Progress' state.")


class PermissionGate:
    """
    Checks task status before drawing input is accepted.

    A denied check notifies the hosting context once and touches no state.
    """

    def __init__(
        self,
        notifications: Optional[NotificationSink] = None,
        events: Optional[EventEmitter] = None,
    ):
        self.notifications = notifications
        self.events = events

    def allows(self, status) -> bool:
        if can_draw(status):
            return True

        logger.debug("Drawing rejected, task status is %s", status)
        if self.notifications is not None:
            self.notifications.info(rejection_message())
        if self.events is not None:
            self.events.emit(
                AnnotationEvent(
                    EventType.DRAWING_REJECTED,
                    {"status": TaskStatus.parse(status).value},
                )
            )
        return False

    def require(self, status, action: str = "annotate"):
        """
        Raise PermissionDenied unless the task is In Progress.

        Args:
            status: Current task status
            action: What was attempted, for the error message
        """
        if not can_draw(status):
            raise PermissionDenied(
                _("Cannot {action}: task is {status}, not In Progress").format(
                    action=action, status=TaskStatus.parse(status).value
                ),
                status=TaskStatus.parse(status),
            )
