"""
End-to-end tests.

Complete drag-and-label workflows against a JSON task store and a real
image file on disk.
"""

import cv2
import numpy as np
import pytest

from box_annotation.core.annotation import (
    AnnotationSession,
    DrawingState,
    SessionContext,
    TaskStatus,
)
from box_annotation.core.geometry import Point, Rectangle
from box_annotation.core.notifications import CollectingNotificationSink, NotificationLevel
from box_annotation.core.tasks import JsonTaskStore
from box_annotation.tests.conftest import drag


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "street.png"
    image = np.full((240, 320, 3), 200, dtype=np.uint8)
    assert cv2.imwrite(str(path), image)
    return path


@pytest.fixture
def json_store(tmp_path):
    return JsonTaskStore(tmp_path / "tasks.json")


@pytest.fixture
def sink():
    return CollectingNotificationSink()


def open_session(store, task_id, sink, **kwargs):
    session = AnnotationSession(
        store, context=SessionContext(user_id="alice"), notifications=sink, **kwargs
    )
    session.open(task_id)
    return session


@pytest.fixture
def in_progress(json_store, image_path):
    task = json_store.create_task(str(image_path), assigned_to="alice")
    json_store.set_status(task.task_id, TaskStatus.IN_PROGRESS)
    return task.task_id


class TestScenarios:
    def test_pending_task_rejects_drawing(self, json_store, image_path, sink):
        task = json_store.create_task(str(image_path), assigned_to="alice")
        session = open_session(json_store, task.task_id, sink)

        assert not session.pointer_down(Point(10, 10))
        assert session.drawing.state is DrawingState.IDLE
        assert session.annotations == ()
        assert len(sink.messages(NotificationLevel.INFO)) == 1

    def test_drag_and_label(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        drag(session, (50, 50), (150, 120), "car")

        assert [a.to_dict() for a in session.annotations] == [
            {
                "rectangle": {"x": 50, "y": 50, "width": 100, "height": 70},
                "annotation": "car",
            }
        ]

    def test_reversed_drag_gives_same_entry(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        drag(session, (150, 120), (50, 50), "car")

        assert session.annotations[0].rectangle == Rectangle(50, 50, 100, 70)
        assert session.annotations[0].annotation == "car"

    def test_empty_label_appends_nothing(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        drag(session, (50, 50), (60, 60), "")

        assert session.annotations == ()
        assert session.drawing.state is DrawingState.IDLE

    def test_two_cycles_keep_order(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        drag(session, (10, 10), (40, 40), "first")
        drag(session, (100, 100), (60, 80), "second")

        assert [a.annotation for a in session.annotations] == ["first", "second"]
        assert session.annotations[1].rectangle == Rectangle(60, 80, 40, 20)

    def test_list_never_shrinks_during_session(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        lengths = []
        for label in ["a", "", None, "b", "c"]:
            drag(session, (10, 10), (30, 30), label)
            lengths.append(len(session.annotations))
        assert lengths == sorted(lengths)
        assert lengths[-1] == 3


class TestWorkflow:
    def test_annotate_save_complete_and_reload(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink, label_prompt=lambda: "car")

        session.pointer_down(Point(50, 50))
        session.pointer_move(Point(150, 120))
        session.pointer_up()
        assert session.save()
        assert session.update_status(TaskStatus.COMPLETED)
        session.close()

        reopened = open_session(json_store, in_progress, sink)
        assert reopened.status is TaskStatus.COMPLETED
        assert reopened.annotations[0].rectangle == Rectangle(50, 50, 100, 70)
        assert not reopened.pointer_down(Point(1, 1))

    def test_rendered_frame_matches_image(self, json_store, in_progress, sink):
        session = open_session(json_store, in_progress, sink)
        drag(session, (50, 50), (150, 120), "car")

        frame = session.renderer.frame
        assert frame.shape == (240, 320, 3)
        assert tuple(int(c) for c in frame[85, 50]) == (255, 0, 0)
        assert tuple(int(c) for c in frame[200, 300]) == (200, 200, 200)

    def test_missing_image_is_reported(self, json_store, tmp_path, sink):
        task = json_store.create_task(str(tmp_path / "gone.png"), assigned_to="alice")
        session = open_session(json_store, task.task_id, sink)

        assert session.renderer.error is not None
        assert session.renderer.frame is None
        assert sink.messages(NotificationLevel.ERROR)
