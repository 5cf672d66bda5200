import logging
import time
from gettext import gettext as _
from pathlib import Path

from box_annotation.utils.misc import incrf, progress

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Export task annotations as a COCO bounding box dataset")


def build_coco(tasks, description, image_size=None):
    """
    Build a COCO detection dataset from tasks.

    Args:
        tasks: Tasks to export, tasks without annotations are skipped
        description: Dataset description
        image_size: Callable returning (width, height) for an image source,
            or None to leave the image size out

    Returns:
        COCO dictionary
    """
    images_idx = incrf()
    annotations_idx = incrf()
    data = dict(
        info=dict(
            contributor="Created with box_annotation",
            description=description,
            date_created=time.strftime("%Y/%m/%d"),
            version="1.0",
            year=time.strftime("%Y"),
        ),
        licenses=[],
        images=[],
        annotations=[],
        categories=[],
    )

    labels = sorted({a.annotation for task in tasks for a in task.annotations})
    categories = {label: i + 1 for i, label in enumerate(labels)}
    for label, i in categories.items():
        data["categories"].append(dict(id=i, name=label, supercategory=None))

    for task in progress(tasks, desc=_("Exporting tasks...")):
        if not task.annotations:
            continue
        image_id = next(images_idx)
        image_entry = dict(file_name=task.image_source, id=image_id, task_id=task.task_id)
        if image_size is not None:
            image_entry["width"], image_entry["height"] = image_size(task.image_source)
        data["images"].append(image_entry)

        for ann in task.annotations:
            rect = ann.rectangle
            if rect.is_empty:
                continue  # nothing to export
            data["annotations"].append(
                dict(
                    id=next(annotations_idx),
                    image_id=image_id,
                    category_id=categories[ann.annotation],
                    bbox=[rect.x, rect.y, rect.width, rect.height],
                    area=rect.area,
                    iscrowd=0,
                    segmentation=[],
                )
            )
    return data


def command(subparser):
    subparser.add_argument(
        "output", type=Path, help=_("Where to save the COCO dataset JSON")
    )
    subparser.add_argument(
        "--overwrite",
        action="store_true",
        help=_("Overwrite JSON file if it exists"),
    )
    subparser.add_argument(
        "-s",
        "--status",
        dest="status",
        type=str,
        default="Completed",
        help=_("Only export tasks with this status, or all"),
    )
    subparser.add_argument(
        "--probe-size",
        dest="probe_size",
        action="store_true",
        help=_("Decode every image to record its width and height"),
    )
    subparser.add_argument(
        "--description",
        type=str,
        help=_("Description for the COCO dataset"),
        default=_("Created with box_annotation"),
    )

    def handle(args):
        from json import dump

        from box_annotation.cli.common import get_store
        from box_annotation.core.annotation import TaskStatus
        from box_annotation.core.annotation.utils import load_image_from_source

        if not args.overwrite and args.output.exists():
            logger.error(_("COCO dataset exists, use --overwrite to ignore this"))
            return 1

        try:
            status = None if args.status == "all" else TaskStatus.parse(args.status)
        except ValueError as e:
            logger.error(str(e))
            return 1
        tasks = get_store(args).list_tasks(status=status)

        image_size = None
        if args.probe_size:

            def image_size(source):
                h, w = load_image_from_source(source).shape[:2]
                return w, h

        data = build_coco(tasks, args.description, image_size=image_size)
        args.output.parent.mkdir(exist_ok=True, parents=True)
        with args.output.open("w") as f:
            dump(data, f)
        logger.info(
            _("Exported {n} annotations from {m} images").format(
                n=len(data["annotations"]), m=len(data["images"])
            )
        )
        return 0

    return handle
