import pytest  # noqa: F401
from box_annotation.utils.misc import incrf, progress


def test_incrf():
    counter = incrf()
    assert next(counter) == 1
    assert next(counter) == 2
    assert next(counter) == 3


def test_progress_basic():
    items = [1, 2, 3]
    result = progress(items, desc="Testing")
    assert list(result) == items


def test_progress_kwargs_support():
    items = range(5)
    result = progress(items, desc="Testing", leave=False)
    assert list(result) == list(items)
