import logging
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Draw the annotations of a task over its image")


def command(subparser):
    subparser.add_argument("task_id", help=_("Task to render"))
    subparser.add_argument("output", type=Path, help=_("Where to write the image"))

    def handle(args):
        import cv2

        from box_annotation.cli.common import get_cfg, get_context, get_store
        from box_annotation.core.annotation import AnnotationSession, PersistenceError

        session = AnnotationSession(
            get_store(args), context=get_context(args), cfg=get_cfg(args).render
        )
        try:
            session.open(args.task_id)
        except PersistenceError:
            return 1

        frame = session.renderer.frame
        if frame is None:
            logger.error(_("Nothing to render for task {task_id}").format(task_id=args.task_id))
            return 1

        args.output.parent.mkdir(exist_ok=True, parents=True)
        if not cv2.imwrite(str(args.output), cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)):
            logger.error(_("Could not write {output}").format(output=args.output))
            return 1
        logger.info(
            _("Rendered {n} annotations to {output}").format(
                n=len(session.annotations), output=args.output
            )
        )
        return 0

    return handle
