"""
Test fixtures and utilities for box_annotation tests.

Provides reusable fixtures for images, task stores and sessions.
"""

import pytest
import numpy as np
from unittest.mock import Mock

from box_annotation.core.annotation import AnnotationSession, SessionContext, TaskStatus
from box_annotation.core.geometry import Rectangle
from box_annotation.core.annotation.state import Annotation
from box_annotation.core.notifications import CollectingNotificationSink
from box_annotation.core.tasks import InMemoryTaskStore, Task

GRAY = 128


@pytest.fixture
def test_image():
    """Create a uniform gray RGB image (200 wide, 150 high)."""
    return np.full((150, 200, 3), GRAY, dtype=np.uint8)


@pytest.fixture
def image_loader(test_image):
    """Image loader that serves the test image for any source."""
    return Mock(side_effect=lambda source: test_image.copy())


@pytest.fixture
def task_store():
    """Task store with three tasks assigned to alice and one to bob."""
    return InMemoryTaskStore(
        [
            Task("t1", "images/one.png", TaskStatus.PENDING, "alice", 1.0),
            Task("t2", "images/two.png", TaskStatus.IN_PROGRESS, "alice", 2.0),
            Task(
                "t3",
                "images/three.png",
                TaskStatus.COMPLETED,
                "alice",
                3.0,
                (Annotation(Rectangle(10, 10, 20, 20), "dog"),),
            ),
            Task("t4", "images/four.png", TaskStatus.IN_PROGRESS, "bob", 4.0),
        ]
    )


@pytest.fixture
def notifications():
    return CollectingNotificationSink()


@pytest.fixture
def make_session(task_store, notifications, image_loader):
    """Factory for sessions over the shared task store."""

    def factory(task_id=None, **kwargs):
        kwargs.setdefault("context", SessionContext(user_id="alice"))
        kwargs.setdefault("notifications", notifications)
        kwargs.setdefault("image_loader", image_loader)
        session = AnnotationSession(task_store, **kwargs)
        if task_id is not None:
            session.open(task_id)
        return session

    return factory


@pytest.fixture
def session(make_session):
    """Session on the In Progress task t2."""
    return make_session("t2")


def drag(session, start, end, label=None):
    """Perform pointer-down, move, up and answer the label request."""
    from box_annotation.core.geometry import Point

    session.pointer_down(Point(*start))
    session.pointer_move(Point(*end))
    session.pointer_up()
    return session.submit_label(label)
