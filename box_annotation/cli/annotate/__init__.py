# flake8: noqa E501

from gettext import gettext as _

COMMAND_DESCRIPTION = _("Interactively annotate a task in an OpenCV window")


def command(subparser):
    subparser.add_argument(
        "task_id",
        nargs="?",
        help=_("Task to open (default: first task of the user that is In Progress)"),
    )
    subparser.add_argument(
        "--window-name",
        dest="window_name",
        type=str,
        help=_("Title of the annotation window"),
    )

    def handle(args):
        from .annotator import handle as annotator_handle

        return annotator_handle(args)

    return handle
