"""
Drawing state machine.

Turns a pointer-down / pointer-move / pointer-up sequence into a committed
rectangle annotation:

    IDLE --pointer_down--> DRAGGING --pointer_up--> AWAITING_LABEL
    AWAITING_LABEL --submit_label--> IDLE
    DRAGGING | AWAITING_LABEL --cancel--> IDLE

Pointer-down is only meaningful from IDLE; every other pointer input
outside its state is ignored.
"""

import logging
from typing import Callable, Optional, Tuple

from ..geometry import (
    Point,
    Rectangle,
    clip_to_bounds,
    normalize,
    rectangle_from_points,
)
from .errors import ValidationError
from .events import AnnotationEvent, EventEmitter, EventType
from .permissions import PermissionGate
from .state import Annotation, DrawingSession, DrawingState, TaskStatus
from .store import AnnotationStore

logger = logging.getLogger(__name__)


class DrawingStateMachine:
    """
    Tracks the interactive drag that produces a new rectangle.

    The label request is an explicit AWAITING_LABEL state so the host can
    answer it asynchronously with `submit_label`. When `label_prompt` is
    given it is called synchronously on pointer-up instead, which mimics a
    blocking modal prompt.
    """

    def __init__(
        self,
        store: AnnotationStore,
        gate: PermissionGate,
        status: Callable[[], TaskStatus],
        events: Optional[EventEmitter] = None,
        label_prompt: Optional[Callable[[], Optional[str]]] = None,
        bounds: Optional[Callable[[], Optional[Tuple[int, int]]]] = None,
    ):
        """
        Args:
            store: Where labeled rectangles are committed
            gate: Permission gate consulted on pointer-down
            status: Returns the current task status
            events: Emitter for dirty notifications
            label_prompt: Optional synchronous label prompt
            bounds: Returns the (width, height) of the image, or None while
                no image is loaded
        """
        self.store = store
        self.gate = gate
        self.status = status
        self.events = events if events is not None else store.events
        self.label_prompt = label_prompt
        self.bounds = bounds

        self.state = DrawingState.IDLE
        self.session: Optional[DrawingSession] = None

    @property
    def current(self) -> Optional[Rectangle]:
        """The in-progress rectangle, unnormalized, or None."""
        return self.session.current if self.session is not None else None

    @property
    def is_idle(self) -> bool:
        return self.state is DrawingState.IDLE

    def pointer_down(self, pos: Point) -> bool:
        """
        Start a drag at `pos`.

        Returns:
            True if a drag was started
        """
        if self.state is not DrawingState.IDLE:
            logger.debug("Ignoring pointer-down while %s", self.state.value)
            return False

        if not self.gate.allows(self.status()):
            return False

        self.session = DrawingSession(
            origin=pos, current=Rectangle(x=pos.x, y=pos.y, width=0, height=0)
        )
        self.state = DrawingState.DRAGGING

        self.events.emit(
            AnnotationEvent(
                EventType.DRAWING_STARTED, {"origin": {"x": pos.x, "y": pos.y}}
            )
        )
        return True

    def pointer_move(self, pos: Point) -> bool:
        """Grow the in-progress rectangle towards `pos`."""
        if self.state is not DrawingState.DRAGGING:
            return False

        self.session.current = rectangle_from_points(self.session.origin, pos)
        self.events.emit(
            AnnotationEvent(
                EventType.RECTANGLE_CHANGED,
                {"rectangle": self.session.current.to_dict()},
            )
        )
        return True

    def pointer_up(self, pos: Optional[Point] = None) -> Optional[Annotation]:
        """
        Finish the drag and request a label.

        Args:
            pos: Final pointer position, applied as a last move if given

        Returns:
            The committed annotation when a synchronous prompt produced one,
            otherwise None
        """
        if self.state is not DrawingState.DRAGGING:
            return None

        if pos is not None:
            self.pointer_move(pos)

        self.state = DrawingState.AWAITING_LABEL
        self.session.active = False
        self.events.emit(
            AnnotationEvent(
                EventType.LABEL_REQUESTED,
                {"rectangle": normalize(self.session.current).to_dict()},
            )
        )

        if self.label_prompt is not None:
            return self.submit_label(self.label_prompt())
        return None

    def submit_label(self, label: Optional[str]) -> Optional[Annotation]:
        """
        Resolve the pending label request.

        A non-empty label commits the normalized rectangle, clipped to the
        image when its size is known; anything else discards it. Either way
        the machine returns to IDLE.
        """
        if self.state is not DrawingState.AWAITING_LABEL:
            logger.debug("No label was requested, ignoring %r", label)
            return None

        rectangle = self.session.current
        self._reset()

        if not label:
            self._discarded(rectangle, "no label")
            return None

        size = self.bounds() if self.bounds is not None else None
        if size is not None:
            clipped = clip_to_bounds(rectangle, *size)
            if clipped is None:
                self._discarded(rectangle, "outside the image")
                return None
            rectangle = clipped

        try:
            return self.store.append(rectangle, label)
        except ValidationError as e:
            self._discarded(rectangle, str(e))
            return None

    def cancel(self) -> bool:
        """Abandon the drag, e.g. when the pointer leaves the canvas."""
        if self.state is DrawingState.IDLE:
            return False

        rectangle = self.session.current if self.session is not None else None
        self._reset()
        self._discarded(rectangle, "cancelled")
        return True

    def _reset(self):
        self.session = None
        self.state = DrawingState.IDLE

    def _discarded(self, rectangle: Optional[Rectangle], reason: str):
        logger.debug("Discarding rectangle %s: %s", rectangle, reason)
        self.events.emit(
            AnnotationEvent(
                EventType.RECTANGLE_DISCARDED,
                {
                    "rectangle": rectangle.to_dict() if rectangle else None,
                    "reason": reason,
                },
            )
        )
