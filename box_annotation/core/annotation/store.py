"""
Annotation store for one task-editing session.

Wraps the pure `append`/`replace_all` operations and announces every change
so the render pipeline knows to redraw.
"""

import logging
from typing import Iterable, Iterator, List, Optional

from ..geometry import Rectangle
from .events import AnnotationEvent, EventEmitter, EventType
from .state import Annotation, AnnotationList, append, replace_all

logger = logging.getLogger(__name__)


class AnnotationStore:
    """
    Ordered, append-only list of annotations.

    Existing entries are never edited in place; the only ways to change the
    list are appending one entry or replacing the whole list.
    """

    def __init__(self, events: Optional[EventEmitter] = None):
        self.events = events if events is not None else EventEmitter()
        self._annotations: AnnotationList = ()

    @property
    def annotations(self) -> AnnotationList:
        return self._annotations

    def __len__(self):
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self._annotations)

    def append(self, rectangle: Rectangle, label: Optional[str]) -> Annotation:
        """
        Commit a rectangle with its label.

        Raises:
            ValidationError: If the label is empty or the rectangle has no area
        """
        self._annotations = append(self._annotations, rectangle, label)
        added = self._annotations[-1]
        logger.debug("Annotation added: %s", added)

        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATION_ADDED,
                {
                    "annotation": added.to_dict(),
                    "index": len(self._annotations) - 1,
                    "num_annotations": len(self._annotations),
                },
            )
        )
        return added

    def replace_all(self, entries: Iterable) -> AnnotationList:
        """Replace every annotation, e.g. after loading from the task store."""
        self._annotations = replace_all(self._annotations, entries)
        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATIONS_REPLACED,
                {"num_annotations": len(self._annotations)},
            )
        )
        return self._annotations

    def to_list(self) -> List[dict]:
        """Serializable form, as stored on the task."""
        return [a.to_dict() for a in self._annotations]
