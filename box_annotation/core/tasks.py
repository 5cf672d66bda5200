"""
Tasks and the task store collaborator.

A task is one image plus its annotations and lifecycle status. The task
store is the durable owner of tasks; the annotation core only talks to it
through the small TaskStore interface.
"""

import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

from .annotation.errors import PersistenceError, TaskNotFound
from .annotation.state import AnnotationList, TaskStatus, replace_all

logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A unit of work: one image, its annotations and its status."""

    task_id: str
    image_source: str
    status: TaskStatus = TaskStatus.PENDING
    assigned_to: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    annotations: AnnotationList = ()

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "id": self.task_id,
            "imageURL": self.image_source,
            "status": self.status.value,
            "assignedTo": self.assigned_to,
            "createdAt": self.created_at,
            "annotations": [a.to_dict() for a in self.annotations],
        }

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            task_id=str(data["id"]),
            image_source=data["imageURL"],
            status=TaskStatus.parse(data.get("status", TaskStatus.PENDING)),
            assigned_to=data.get("assignedTo"),
            created_at=data.get("createdAt") or time.time(),
            annotations=replace_all((), data.get("annotations") or []),
        )


class TaskStore(ABC):
    """Durable task storage used by annotation sessions."""

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        """Raises TaskNotFound for unknown ids."""

    @abstractmethod
    def list_tasks(
        self, assigned_to: Optional[str] = None, status: Optional[TaskStatus] = None
    ) -> List[Task]:
        """Tasks in creation order, optionally filtered."""

    @abstractmethod
    def _put(self, task: Task):
        """Store a new version of a task."""

    def load_annotations(self, task_id: str) -> AnnotationList:
        return self.get_task(task_id).annotations

    def save_annotations(self, task_id: str, annotations) -> None:
        task = self.get_task(task_id)
        self._put(replace(task, annotations=tuple(annotations)))

    def get_status(self, task_id: str) -> TaskStatus:
        return self.get_task(task_id).status

    def set_status(
        self, task_id: str, status: TaskStatus, annotations: Optional[AnnotationList] = None
    ) -> None:
        """Change the status, optionally saving annotations in the same write."""
        task = self.get_task(task_id)
        task = replace(task, status=TaskStatus.parse(status))
        if annotations is not None:
            task = replace(task, annotations=tuple(annotations))
        self._put(task)

    def create_task(self, image_source: str, assigned_to: Optional[str] = None) -> Task:
        """Register an uploaded image as a new Pending task."""
        task = Task(
            task_id=uuid.uuid4().hex,
            image_source=str(image_source),
            status=TaskStatus.PENDING,
            assigned_to=assigned_to,
        )
        self._put(task)
        logger.info("Created task %s for %s", task.task_id, image_source)
        return task


def _filter_tasks(tasks, assigned_to, status) -> List[Task]:
    if status is not None:
        status = TaskStatus.parse(status)
    return [
        t
        for t in tasks
        if (assigned_to is None or t.assigned_to == assigned_to)
        and (status is None or t.status is status)
    ]


class InMemoryTaskStore(TaskStore):
    """Task store kept in a dictionary."""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self._tasks: Dict[str, Task] = {}
        for task in tasks or []:
            self._tasks[task.task_id] = task

    def get_task(self, task_id: str) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskNotFound(task_id) from None

    def list_tasks(self, assigned_to=None, status=None) -> List[Task]:
        return _filter_tasks(self._tasks.values(), assigned_to, status)

    def _put(self, task: Task):
        self._tasks[task.task_id] = task


class JsonTaskStore(TaskStore):
    """
    Task store backed by a single JSON file.

    The file holds `{"tasks": [...]}` with each task in the same field
    layout the web front-end used (`imageURL`, `assignedTo`, ...).
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> List[Task]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("expected an object with a \"tasks\" list")
            return [Task.from_dict(t) for t in data.get("tasks", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"Could not read task store {self.path}: {e}") from e

    def _write(self, tasks: List[Task]):
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(exist_ok=True, parents=True)
            with tmp_path.open("w") as f:
                json.dump({"tasks": [t.to_dict() for t in tasks]}, f, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write task store {self.path}: {e}") from e

    def get_task(self, task_id: str) -> Task:
        for task in self._read():
            if task.task_id == task_id:
                return task
        raise TaskNotFound(task_id)

    def list_tasks(self, assigned_to=None, status=None) -> List[Task]:
        return _filter_tasks(self._read(), assigned_to, status)

    def _put(self, task: Task):
        tasks = self._read()
        for i, existing in enumerate(tasks):
            if existing.task_id == task.task_id:
                tasks[i] = task
                break
        else:
            tasks.append(task)
        self._write(tasks)
