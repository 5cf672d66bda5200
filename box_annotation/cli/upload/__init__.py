import logging
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Register images as new Pending tasks")


def command(subparser):
    subparser.add_argument(
        "images", type=str, nargs="+", help=_("Image files or http(s) URLs")
    )
    subparser.add_argument(
        "--no-check",
        dest="check",
        action="store_false",
        help=_("Do not verify that the images can be decoded"),
    )

    def handle(args):
        from box_annotation.cli.common import get_context, get_store
        from box_annotation.core.annotation import ImageLoadError
        from box_annotation.core.annotation.utils import load_image_from_source
        from box_annotation.utils.misc import progress

        store = get_store(args)
        user_id = get_context(args).user_id
        failed = 0

        for image in progress(args.images, desc=_("Uploading images...")):
            source = image
            if not image.startswith(("http://", "https://")):
                source = str(Path(image).resolve())
            if args.check:
                try:
                    load_image_from_source(source)
                except ImageLoadError as e:
                    logger.error(str(e))
                    failed += 1
                    continue
            task = store.create_task(source, assigned_to=user_id)
            print(task.task_id)

        return 1 if failed else 0

    return handle
