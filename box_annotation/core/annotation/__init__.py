"""
Core annotation module - UI-agnostic annotation logic.

This module provides the rectangle annotation editor (drawing state machine,
annotation store, render pipeline and permission gate) that can be used
with any UI framework (OpenCV window, Web, CLI, etc).
"""

from .session import AnnotationSession
from .events import AnnotationEvent, EventType, EventEmitter
from .state import (
    Annotation,
    DrawingSession,
    DrawingState,
    SessionContext,
    TaskStatus,
)
from .store import AnnotationStore
from .drawing import DrawingStateMachine
from .render import RenderPipeline
from .permissions import PermissionGate, can_draw
from .errors import (
    AnnotationError,
    ImageLoadError,
    PermissionDenied,
    PersistenceError,
    StatusTransitionError,
    TaskNotFound,
    ValidationError,
)

__all__ = [
    "AnnotationSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "Annotation",
    "DrawingSession",
    "DrawingState",
    "SessionContext",
    "TaskStatus",
    "AnnotationStore",
    "DrawingStateMachine",
    "RenderPipeline",
    "PermissionGate",
    "can_draw",
    "AnnotationError",
    "ImageLoadError",
    "PermissionDenied",
    "PersistenceError",
    "StatusTransitionError",
    "TaskNotFound",
    "ValidationError",
]
