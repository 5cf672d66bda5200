"""
State management for annotation sessions.

Contains data classes representing the state of a task-editing session:
the committed annotations, the task status and the transient drag state.
"""

from dataclasses import dataclass
from enum import Enum
from gettext import gettext as _
from typing import Iterable, Optional, Tuple

from ..geometry import Point, Rectangle, normalize
from .errors import ValidationError


class TaskStatus(Enum):
    """Lifecycle status of a task."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value) -> "TaskStatus":
        """
        Parse a status from its value or name.

        Accepts "In Progress", "IN_PROGRESS", "in_progress", "InProgress"
        and "in-progress" for the same member.
        """
        if isinstance(value, cls):
            return value
        wanted = "".join(ch for ch in str(value).lower() if ch.isalnum())
        for member in cls:
            if wanted in (
                "".join(ch for ch in member.value.lower() if ch.isalnum()),
                member.name.lower().replace("_", ""),
            ):
                return member
        raise ValueError(_("Unknown task status: {value}").format(value=value))

    def __str__(self):
        return self.value


class DrawingState(Enum):
    """States of the drawing state machine."""

    IDLE = "idle"
    DRAGGING = "dragging"
    AWAITING_LABEL = "awaiting_label"


@dataclass(frozen=True)
class Annotation:
    """A labeled rectangular region over the task image."""

    rectangle: Rectangle
    annotation: str

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "rectangle": self.rectangle.to_dict(),
            "annotation": self.annotation,
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary, normalizing the stored rectangle."""
        return cls(
            rectangle=normalize(Rectangle.from_dict(data["rectangle"])),
            annotation=str(data["annotation"]),
        )


AnnotationList = Tuple[Annotation, ...]


def append(
    annotations: AnnotationList, rectangle: Rectangle, label: Optional[str]
) -> AnnotationList:
    """
    Return a new list with one more annotation at the end.

    Args:
        annotations: Current annotations, in drawing order
        rectangle: Rectangle to commit, normalized before storing
        label: Free-form label text

    Raises:
        ValidationError: If the label is empty or the rectangle has no area
    """
    if label is None or not label.strip():
        raise ValidationError(_("Annotation label must not be empty"))
    rectangle = normalize(rectangle)
    if rectangle.is_empty:
        raise ValidationError(_("Annotation rectangle must have a non-zero area"))
    return tuple(annotations) + (Annotation(rectangle=rectangle, annotation=label),)


def replace_all(annotations: AnnotationList, entries: Iterable) -> AnnotationList:
    """
    Replace the whole list, e.g. with annotations loaded from the task store.

    Entries may be Annotation objects or their dictionary form.
    """
    replaced = []
    for entry in entries:
        if isinstance(entry, dict):
            entry = Annotation.from_dict(entry)
        replaced.append(
            Annotation(rectangle=normalize(entry.rectangle), annotation=entry.annotation)
        )
    return tuple(replaced)


@dataclass
class DrawingSession:
    """
    Transient state of one drag.

    Lives from pointer-down until the label request is resolved.
    """

    origin: Point
    current: Optional[Rectangle] = None
    active: bool = True


@dataclass
class SessionContext:
    """Who is editing. Passed explicitly into the session."""

    user_id: Optional[str] = None
