import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Change the status of a task")


def command(subparser):
    subparser.add_argument("task_id", help=_("Task to update"))
    subparser.add_argument(
        "status", type=str, help=_("Pending, 'In Progress' or Completed")
    )

    def handle(args):
        from box_annotation.cli.common import get_context, get_store
        from box_annotation.core.annotation import (
            AnnotationSession,
            PersistenceError,
            StatusTransitionError,
            TaskStatus,
        )

        session = AnnotationSession(get_store(args), context=get_context(args))
        try:
            session.open(args.task_id, load_image=False)
            ok = session.update_status(TaskStatus.parse(args.status))
        except (PersistenceError, StatusTransitionError, ValueError) as e:
            logger.error(str(e))
            return 1
        return 0 if ok else 1

    return handle
