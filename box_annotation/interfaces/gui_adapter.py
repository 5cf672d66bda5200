"""
GUI adapter for annotation session.

Bridges the AnnotationSession with an OpenCV HighGUI window: mouse events
become pointer input, key presses answer the label request, save the task
or change its status.
"""

import logging
from gettext import gettext as _
from typing import Optional

import cv2
import numpy as np
from easydict import EasyDict as edict

from ..core.annotation import (
    AnnotationEvent,
    AnnotationSession,
    DrawingState,
    EventType,
    PermissionDenied,
    StatusTransitionError,
    TaskStatus,
)
from ..core.geometry import CanvasElement, PointerEvent, to_canvas_coordinates
from ..core.notifications import Notification

logger = logging.getLogger(__name__)

KEY_ENTER = (10, 13)
KEY_ESCAPE = 27
KEY_BACKSPACE = (8, 127)

STATUS_KEYS = {
    ord("1"): TaskStatus.PENDING,
    ord("2"): TaskStatus.IN_PROGRESS,
    ord("3"): TaskStatus.COMPLETED,
}

HELP_TEXT = "drag: draw  s: save  1/2/3: status  n/b: next/prev  q: quit"


class GUIAnnotationAdapter:
    """
    Adapter connecting AnnotationSession to an OpenCV window.

    Provides a layer that:
    - Translates mouse callbacks into pointer input in image pixels
    - Collects the label text while the session awaits a label
    - Shows notifications in a status line
    - Coalesces redraws to one per UI tick
    """

    def __init__(
        self,
        session: AnnotationSession,
        cfg: Optional[edict] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core annotation session
            cfg: UI configuration (window name, colors, frame delay)
        """
        self.session = session
        self.cfg = cfg or edict(
            window_name="box_annotation", prompt_color=[255, 255, 255], frame_delay_ms=20
        )

        self.label_buffer = ""
        self.status_line = HELP_TEXT
        self.running = False
        self._quit_requested = False

        # Redraw once per tick instead of on every pointer move
        self.session.renderer.auto_flush = False

        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        self.session.events.on(EventType.LABEL_REQUESTED, self._on_label_requested)
        self.session.events.on(EventType.STATUS_CHANGED, self._on_status_changed)
        previous = self.session.notifications.callback

        def forward(notification: Notification):
            if previous is not None:
                previous(notification)
            self._on_notification(notification)

        self.session.notifications.callback = forward

    def _on_label_requested(self, event: AnnotationEvent):
        self.label_buffer = ""
        self._quit_requested = False

    def _on_status_changed(self, event: AnnotationEvent):
        self.session.renderer.mark_dirty()

    def _on_notification(self, notification: Notification):
        self.status_line = notification.message

    @property
    def canvas(self) -> CanvasElement:
        size = self.session.renderer.canvas_size
        if size is None:
            return CanvasElement()
        w, h = size
        return CanvasElement(width=w, height=h)

    def handle_mouse(self, event: int, x: int, y: int, flags: int = 0, param=None):
        """cv2 mouse callback."""
        pos = to_canvas_coordinates(PointerEvent(x, y), self.canvas)

        if event == cv2.EVENT_LBUTTONDOWN:
            self.session.pointer_down(pos)
        elif event == cv2.EVENT_MOUSEMOVE:
            self.session.pointer_move(pos)
        elif event == cv2.EVENT_LBUTTONUP:
            self.session.pointer_up(pos)
        elif event == cv2.EVENT_RBUTTONDOWN:
            self.session.cancel()

    def handle_key(self, key: int) -> bool:
        """
        Handle a key code from cv2.waitKey.

        Returns:
            False when the window should close
        """
        if key < 0 or key == 255:
            return True

        if self.session.drawing.state is DrawingState.AWAITING_LABEL:
            self._handle_label_key(key)
            return True

        if key == KEY_ESCAPE and self.session.drawing.state is DrawingState.DRAGGING:
            self.session.cancel()
            return True

        if key in (ord("q"), KEY_ESCAPE):
            if self.session.has_unsaved_changes and not self._quit_requested:
                self._quit_requested = True
                self.status_line = _("Unsaved annotations, press q again to quit")
                return True
            return False

        self._quit_requested = False
        try:
            if key == ord("s"):
                self.session.save()
            elif key in STATUS_KEYS:
                self.session.update_status(STATUS_KEYS[key])
            elif key == ord("n"):
                self.session.next_task()
            elif key == ord("b"):
                self.session.previous_task()
        except PermissionDenied as e:
            self.session.notifications.info(str(e))
        except StatusTransitionError as e:
            self.session.notifications.error(str(e))
        return True

    def _handle_label_key(self, key: int):
        if key in KEY_ENTER:
            label, self.label_buffer = self.label_buffer, ""
            self.session.submit_label(label)
        elif key == KEY_ESCAPE:
            self.label_buffer = ""
            self.session.submit_label(None)
        elif key in KEY_BACKSPACE:
            self.label_buffer = self.label_buffer[:-1]
        elif 32 <= key < 127:
            self.label_buffer += chr(key)

    def get_visualization(self) -> Optional[np.ndarray]:
        """
        Get the frame to display, with the prompt and status line on top.

        Returns:
            BGR image for cv2.imshow, or None while no frame is available
        """
        self.session.renderer.flush()
        frame = self.session.renderer.frame
        if frame is None:
            return None

        vis = frame.copy()
        color = tuple(int(c) for c in self.cfg.prompt_color)
        h = vis.shape[0]

        if self.session.drawing.state is DrawingState.AWAITING_LABEL:
            text = _("Enter annotation: {text}_").format(text=self.label_buffer)
            self._draw_text_line(vis, text, 20, color)

        status = f"[{self.session.status.value}] {self.status_line}"
        self._draw_text_line(vis, status, h - 8, color)

        return cv2.cvtColor(vis, cv2.COLOR_RGB2BGR)

    @staticmethod
    def _draw_text_line(image: np.ndarray, text: str, y: int, color):
        (tw, th), baseline = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        cv2.rectangle(image, (0, y - th - 4), (tw + 8, y + baseline), (0, 0, 0), -1)
        cv2.putText(
            image, text, (4, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1, cv2.LINE_AA
        )

    def run(self):  # pragma: no cover
        """Show the window until the user quits."""
        window = self.cfg.window_name
        cv2.namedWindow(window, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(window, self.handle_mouse)
        self.running = True
        logger.info(_("Annotating task {task_id}").format(task_id=self.session.task_id))

        try:
            while self.running:
                vis = self.get_visualization()
                if vis is not None:
                    cv2.imshow(window, vis)
                key = cv2.waitKey(int(self.cfg.frame_delay_ms))
                if not self.handle_key(key & 0xFF if key >= 0 else key):
                    self.running = False
                if cv2.getWindowProperty(window, cv2.WND_PROP_VISIBLE) < 1:
                    self.running = False
        finally:
            cv2.destroyWindow(window)
