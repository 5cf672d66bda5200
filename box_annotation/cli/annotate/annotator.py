import logging
from gettext import gettext as _

from box_annotation.cli.common import get_cfg, get_context, get_store
from box_annotation.core.annotation import (
    AnnotationSession,
    PersistenceError,
    TaskStatus,
)
from box_annotation.core.notifications import NotificationSink
from box_annotation.interfaces import GUIAnnotationAdapter

logger = logging.getLogger(__name__)


def pick_task_id(store, user_id):
    """First In Progress task of the user, else the first of any status."""
    tasks = store.list_tasks(assigned_to=user_id)
    for task in tasks:
        if task.status is TaskStatus.IN_PROGRESS:
            return task.task_id
    return tasks[0].task_id if tasks else None


def handle(args):
    cfg = get_cfg(args)
    store = get_store(args)
    context = get_context(args)

    task_id = args.task_id or pick_task_id(store, context.user_id)
    if task_id is None:
        logger.error(_("No tasks found, upload an image first"))
        return 1

    session = AnnotationSession(
        store,
        context=context,
        notifications=NotificationSink(),
        cfg=cfg.render,
    )
    ui_cfg = cfg.ui
    if args.window_name:
        ui_cfg.window_name = args.window_name
    adapter = GUIAnnotationAdapter(session, cfg=ui_cfg)

    try:
        session.open(task_id)
    except PersistenceError:
        return 1

    if session.renderer.error is not None:
        return 1

    adapter.run()
    session.close()
    return 0
