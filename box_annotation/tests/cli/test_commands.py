"""
Tests for CLI sub-command handlers.
"""

import json
from argparse import ArgumentParser

import cv2
import numpy as np
import pytest

from box_annotation.cli import common_flags
from box_annotation.cli.common import get_store
from box_annotation.core.annotation import TaskStatus
from box_annotation.core.annotation.state import Annotation
from box_annotation.core.geometry import Rectangle
from box_annotation.utils.config import load_config


def run(module, argv):
    parser = ArgumentParser()
    common_flags(parser)
    handler = module.command(parser)
    args = parser.parse_args(argv)
    args.cfg = load_config({})
    return handler(args)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "tasks.json"


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "img.png"
    cv2.imwrite(str(path), np.full((60, 80, 3), 90, dtype=np.uint8))
    return path


def test_upload_and_list(store_path, image_path, capsys):
    from box_annotation.cli import tasks, upload

    assert run(upload, ["--store", str(store_path), "-u", "alice", str(image_path)]) == 0
    task_id = capsys.readouterr().out.strip()

    assert run(tasks, ["--store", str(store_path), "-u", "alice", "-s", "Pending"]) == 0
    out = capsys.readouterr().out
    assert task_id in out
    assert "Pending" in out

    assert run(tasks, ["--store", str(store_path), "-u", "bob"]) == 0
    assert task_id not in capsys.readouterr().out


def test_upload_rejects_undecodable(store_path, tmp_path):
    from box_annotation.cli import upload

    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    assert run(upload, ["--store", str(store_path), str(bad)]) == 1
    assert not store_path.exists()


def test_set_status_and_render(store_path, image_path, tmp_path):
    from box_annotation.cli import render, set_status

    args = type("Args", (), {"store": store_path, "cfg": load_config({})})()
    store = get_store(args)
    task = store.create_task(str(image_path), assigned_to="alice")

    assert run(set_status, ["--store", str(store_path), task.task_id, "completed"]) == 1
    assert run(set_status, ["--store", str(store_path), task.task_id, "in_progress"]) == 0
    assert store.get_status(task.task_id) is TaskStatus.IN_PROGRESS

    store.save_annotations(task.task_id, (Annotation(Rectangle(10, 20, 30, 20), "car"),))
    output = tmp_path / "out" / "render.png"
    assert run(render, ["--store", str(store_path), task.task_id, str(output)]) == 0

    rendered = cv2.imread(str(output))
    assert rendered.shape == (60, 80, 3)
    # BGR on disk
    assert tuple(int(c) for c in rendered[30, 10]) == (0, 0, 255)


def test_convert_to_coco(store_path, image_path, tmp_path):
    from box_annotation.cli import convert_to_coco

    args = type("Args", (), {"store": store_path, "cfg": load_config({})})()
    store = get_store(args)
    done = store.create_task(str(image_path))
    store.set_status(
        done.task_id,
        TaskStatus.COMPLETED,
        annotations=(
            Annotation(Rectangle(1, 2, 3, 4), "dog"),
            Annotation(Rectangle(5, 6, 7, 8), "car"),
        ),
    )
    store.create_task(str(image_path))

    output = tmp_path / "coco.json"
    argv = ["--store", str(store_path), "--probe-size", str(output)]
    assert run(convert_to_coco, argv) == 0
    data = json.loads(output.read_text())

    assert [c["name"] for c in data["categories"]] == ["car", "dog"]
    assert len(data["images"]) == 1
    assert data["images"][0]["width"] == 80
    assert data["images"][0]["height"] == 60
    assert data["annotations"][0]["bbox"] == [1, 2, 3, 4]
    assert data["annotations"][0]["category_id"] == 2
    assert data["annotations"][1]["area"] == 56

    # Refuses to overwrite
    assert run(convert_to_coco, argv) == 1


def test_annotate_picks_in_progress_task(task_store):
    from box_annotation.cli.annotate.annotator import pick_task_id

    assert pick_task_id(task_store, "alice") == "t2"
    assert pick_task_id(task_store, "bob") == "t4"
    assert pick_task_id(task_store, "carol") is None


@pytest.mark.parametrize("module_name", ["tasks", "convert_to_coco"])
def test_unknown_status_filter(module_name, store_path, tmp_path, caplog):
    import importlib

    module = importlib.import_module(f"box_annotation.cli.{module_name}")
    argv = ["--store", str(store_path), "-s", "Archived"]
    if module_name == "convert_to_coco":
        argv.append(str(tmp_path / "coco.json"))

    assert run(module, argv) == 1
    assert "Archived" in caplog.text
    assert not (tmp_path / "coco.json").exists()
