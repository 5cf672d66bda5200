"""
Annotation session management.

Core logic for editing one task: loading it from the task store, routing
pointer input through the drawing state machine, saving, and moving the
task through its status lifecycle.
UI-agnostic - can be used with any interface (GUI, Web, CLI).
"""

import logging
from gettext import gettext as _
from typing import Callable, Optional, Tuple

import numpy as np
from easydict import EasyDict as edict

from ..geometry import Point
from ..notifications import NotificationSink
from .drawing import DrawingStateMachine
from .errors import PersistenceError, StatusTransitionError
from .events import AnnotationEvent, EventEmitter, EventType
from .permissions import PermissionGate, can_draw
from .render import RenderPipeline
from .state import DrawingState, SessionContext, TaskStatus
from .store import AnnotationStore

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    Manages the state and logic of a task-editing session.

    This class handles:
    - Loading the task (status, image, persisted annotations)
    - Pointer input through the permission gate and drawing state machine
    - Saving annotations and changing the task status
    - Navigation between the tasks assigned to the current user
    - Event emission for UI updates

    The session is UI-agnostic - it emits events that UI components
    can listen to, rather than directly manipulating UI elements.
    """

    def __init__(
        self,
        task_store,
        context: Optional[SessionContext] = None,
        notifications: Optional[NotificationSink] = None,
        label_prompt: Optional[Callable[[], Optional[str]]] = None,
        cfg: Optional[edict] = None,
        image_loader: Optional[Callable[[str], np.ndarray]] = None,
        on_frame: Optional[Callable[[np.ndarray], None]] = None,
        auto_flush: bool = True,
    ):
        """
        Initialize annotation session.

        Args:
            task_store: TaskStore holding the durable tasks
            context: Who is editing
            notifications: Sink for user facing messages
            label_prompt: Optional synchronous label prompt
            cfg: Render configuration
            image_loader: Override for turning an image source into pixels
            on_frame: Called with every rendered frame
            auto_flush: Redraw immediately on every change
        """
        self.task_store = task_store
        self.context = context or SessionContext()
        self.notifications = notifications or NotificationSink()

        self.task_id: Optional[str] = None
        self.status: TaskStatus = TaskStatus.PENDING
        self.image_source: Optional[str] = None

        # Event emitter for UI notifications
        self.events = EventEmitter()

        self.store = AnnotationStore(self.events)
        self.gate = PermissionGate(self.notifications, self.events)
        self.drawing = DrawingStateMachine(
            self.store,
            self.gate,
            status=lambda: self.status,
            events=self.events,
            label_prompt=label_prompt,
            bounds=lambda: self.renderer.canvas_size,
        )
        self.renderer = RenderPipeline(
            self.store,
            self.drawing,
            events=self.events,
            cfg=cfg,
            image_loader=image_loader,
            on_frame=on_frame,
            auto_flush=auto_flush,
        )

        # Set when local annotations differ from the last saved copy
        self.has_unsaved_changes = False
        self.events.on(EventType.ANNOTATION_ADDED, self._on_annotation_added)

    @property
    def annotations(self):
        return self.store.annotations

    @property
    def can_draw(self) -> bool:
        return can_draw(self.status)

    def open(self, task_id: str, load_image: bool = True):
        """
        Load a task for editing, discarding any unsaved local state.

        Raises:
            PersistenceError: If the task cannot be loaded
        """
        try:
            task = self.task_store.get_task(task_id)
        except PersistenceError as e:
            self.notifications.error(
                _("Failed to fetch task. Please try again.") + f" ({e})"
            )
            raise

        self.drawing.cancel()
        token = None
        if load_image:
            # Reset the canvas before the new annotations arrive
            token = self.renderer.begin_image_load(task.image_source)

        self.task_id = task.task_id
        self.status = task.status
        self.image_source = task.image_source
        self.store.replace_all(task.annotations)
        self.has_unsaved_changes = False

        self.events.emit(
            AnnotationEvent(
                EventType.SESSION_STARTED,
                {
                    "task_id": self.task_id,
                    "status": self.status.value,
                    "num_annotations": len(self.store),
                },
            )
        )

        if token is not None:
            if not self.renderer.load_image(task.image_source, token=token):
                self.notifications.error(
                    _("Could not load image: {error}").format(error=self.renderer.error)
                )
        return task

    # Pointer input

    def pointer_down(self, pos: Point) -> bool:
        return self.drawing.pointer_down(pos)

    def pointer_move(self, pos: Point) -> bool:
        return self.drawing.pointer_move(pos)

    def pointer_up(self, pos: Optional[Point] = None):
        return self.drawing.pointer_up(pos)

    def submit_label(self, label: Optional[str]):
        return self.drawing.submit_label(label)

    def cancel(self) -> bool:
        return self.drawing.cancel()

    # Persistence

    def save(self) -> bool:
        """
        Save the local annotations to the task store.

        Local annotations are kept when saving fails, so the user can retry.

        Returns:
            True on success
        """
        self._require_open()
        self.gate.require(self.status, action=_("save annotations"))

        try:
            self.task_store.save_annotations(self.task_id, self.store.annotations)
        except PersistenceError as e:
            logger.error("Saving annotations of task %s failed: %s", self.task_id, e)
            self.notifications.error(
                _("Failed to save annotations. Please try again.")
            )
            self.events.emit(
                AnnotationEvent(
                    EventType.SAVE_FAILED, {"task_id": self.task_id, "error": str(e)}
                )
            )
            return False

        self.has_unsaved_changes = False
        self.notifications.success(_("Annotations saved successfully!"))
        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATIONS_SAVED,
                {"task_id": self.task_id, "num_annotations": len(self.store)},
            )
        )
        return True

    def update_status(self, new_status) -> bool:
        """
        Move the task to `new_status`, saving the annotations with it.

        Raises:
            StatusTransitionError: Completing without annotations, or changing
                a Completed task
        """
        self._require_open()
        new_status = TaskStatus.parse(new_status)

        if self.status is TaskStatus.COMPLETED:
            raise StatusTransitionError(
                _("A Completed task can no longer change its status.")
            )
        if new_status is TaskStatus.COMPLETED and len(self.store) == 0:
            raise StatusTransitionError(
                _(
                    "You must add at least one annotation before marking "
                    "the task as Completed."
                )
            )

        try:
            self.task_store.set_status(
                self.task_id, new_status, annotations=self.store.annotations
            )
        except PersistenceError as e:
            logger.error("Updating status of task %s failed: %s", self.task_id, e)
            self.notifications.error(
                _("Failed to update task status. Please try again.")
            )
            return False

        previous = self.status
        self.status = new_status
        self.has_unsaved_changes = False
        if not can_draw(new_status):
            self.drawing.cancel()

        self.notifications.success(
            _("Status updated to {status}").format(status=new_status.value)
        )
        self.events.emit(
            AnnotationEvent(
                EventType.STATUS_CHANGED,
                {
                    "task_id": self.task_id,
                    "previous": previous.value,
                    "status": new_status.value,
                },
            )
        )
        return True

    # Navigation

    def neighbours(self) -> Tuple[Optional[str], Optional[str]]:
        """
        Ids of the previous and next task assigned to the current user.

        Returns:
            (previous_id, next_id), either may be None
        """
        self._require_open()
        ids = [
            t.task_id
            for t in self.task_store.list_tasks(assigned_to=self.context.user_id)
        ]
        if self.task_id not in ids:
            return (None, None)
        index = ids.index(self.task_id)
        previous_id = ids[index - 1] if index > 0 else None
        next_id = ids[index + 1] if index < len(ids) - 1 else None
        return (previous_id, next_id)

    def next_task(self) -> bool:
        _previous, next_id = self.neighbours()
        if next_id is None:
            return False
        self.open(next_id)
        return True

    def previous_task(self) -> bool:
        previous_id, _next = self.neighbours()
        if previous_id is None:
            return False
        self.open(previous_id)
        return True

    def get_visualization_data(self) -> dict:
        """
        Get data needed for visualization.

        Returns:
            Dictionary with visualization data
        """
        return {
            "image": self.renderer.image,
            "frame": self.renderer.frame,
            "annotations": self.store.annotations,
            "current_rectangle": self.drawing.current,
            "drawing_state": self.drawing.state,
            "awaiting_label": self.drawing.state is DrawingState.AWAITING_LABEL,
            "status": self.status,
            "can_draw": self.can_draw,
            "image_error": self.renderer.error,
        }

    def close(self):
        self.drawing.cancel()
        self.events.emit(
            AnnotationEvent(EventType.SESSION_CLOSED, {"task_id": self.task_id})
        )
        self.renderer.close()
        self.events.clear()

    def _require_open(self):
        if self.task_id is None:
            raise ValueError("No task opened")

    def _on_annotation_added(self, event: AnnotationEvent):
        self.has_unsaved_changes = True

