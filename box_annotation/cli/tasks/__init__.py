import logging
from gettext import gettext as _

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("List tasks, optionally filtered by status")


def command(subparser):
    subparser.add_argument(
        "-s",
        "--status",
        dest="status",
        type=str,
        default="all",
        help=_("Pending, 'In Progress', Completed or all"),
    )
    subparser.add_argument(
        "--all-users",
        dest="all_users",
        action="store_true",
        help=_("Show tasks of every user, not only the current one"),
    )

    def handle(args):
        from box_annotation.cli.common import get_context, get_store
        from box_annotation.core.annotation import TaskStatus
        from box_annotation.core.annotation.utils import compute_annotation_statistics

        try:
            status = None if args.status == "all" else TaskStatus.parse(args.status)
        except ValueError as e:
            logger.error(str(e))
            return 1
        user_id = None if args.all_users else get_context(args).user_id
        tasks = get_store(args).list_tasks(assigned_to=user_id, status=status)

        if not tasks:
            print(_("No tasks found."))
            return 0

        for task in tasks:
            stats = compute_annotation_statistics(task.annotations)
            labels = ", ".join(f"{k}={v}" for k, v in sorted(stats["labels"].items()))
            print(
                f"{task.task_id}\t{task.status.value}\t{stats['num_total']}\t"
                f"{task.image_source}\t{labels}"
            )
        return 0

    return handle
