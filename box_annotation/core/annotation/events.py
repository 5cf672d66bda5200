"""
Event system for annotation workflow.

Every component that owns drawable state (annotation store, drawing state
machine, image loader) announces its changes through these events. The
render pipeline subscribes to them instead of tracking dependencies itself.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Image events
    IMAGE_LOAD_STARTED = "image_load_started"
    IMAGE_LOADED = "image_loaded"
    IMAGE_LOAD_FAILED = "image_load_failed"

    # Drawing events
    DRAWING_STARTED = "drawing_started"
    DRAWING_REJECTED = "drawing_rejected"
    RECTANGLE_CHANGED = "rectangle_changed"
    LABEL_REQUESTED = "label_requested"
    RECTANGLE_DISCARDED = "rectangle_discarded"

    # Annotation store events
    ANNOTATION_ADDED = "annotation_added"
    ANNOTATIONS_REPLACED = "annotations_replaced"

    # Persistence events
    ANNOTATIONS_SAVED = "annotations_saved"
    SAVE_FAILED = "save_failed"
    STATUS_CHANGED = "status_changed"

    # Session events
    SESSION_STARTED = "session_started"
    SESSION_CLOSED = "session_closed"
    FRAME_RENDERED = "frame_rendered"


# Events after which the canvas must be redrawn
DIRTY_EVENTS = (
    EventType.IMAGE_LOADED,
    EventType.DRAWING_STARTED,
    EventType.RECTANGLE_CHANGED,
    EventType.RECTANGLE_DISCARDED,
    EventType.ANNOTATION_ADDED,
    EventType.ANNOTATIONS_REPLACED,
)


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def on_many(self, event_types, callback: Callable[[AnnotationEvent], None]):
        """Subscribe one callback to several event types."""
        for event_type in event_types:
            self.on(event_type, callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        logger.debug("Emitting %s %s", event.event_type.value, event.data)
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception(
                    "Error in event listener for %s", event.event_type.value
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
