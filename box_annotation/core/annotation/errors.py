"""
Error taxonomy for the annotation core.

None of these errors is fatal: each one is recovered at the session level
(see AnnotationSession for where they are caught and surfaced).
"""


class AnnotationError(Exception):
    """Base class for all annotation core errors."""


class ValidationError(AnnotationError, ValueError):
    """Empty label or zero-area rectangle at commit time."""


class StatusTransitionError(ValidationError):
    """Requested task status change is not allowed."""


class PermissionDenied(AnnotationError):
    """Annotation input attempted while the task is not In Progress."""

    def __init__(self, message: str, status=None):
        super().__init__(message)
        self.status = status


class ImageLoadError(AnnotationError):
    """The image source could not be fetched or decoded."""

    def __init__(self, message: str, source=None):
        super().__init__(message)
        self.source = source


class PersistenceError(AnnotationError):
    """Saving to or loading from the task store failed."""


class TaskNotFound(PersistenceError, KeyError):
    """No task with the requested id exists in the task store."""

    def __init__(self, task_id: str):
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self):
        return f"Task not found: {self.task_id}"
