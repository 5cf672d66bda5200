import importlib.util
import itertools
import logging
import sys
from pathlib import Path

from tqdm import tqdm

logger = logging.getLogger(__name__)


def load_module(script_path: Path, module_name: str = "module"):
    """Import a Python file as `module_name`."""
    spec = importlib.util.spec_from_file_location(module_name, str(script_path))
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def incrf(start: int = 1):
    """Counter yielding start, start + 1, ... used for sequential ids."""
    return itertools.count(start)


def progress(iterable, **kwargs):
    """Wrap `iterable` in a tqdm progress bar writing to stderr."""
    kwargs.setdefault("file", sys.stderr)
    kwargs.setdefault("disable", None)  # no bar when stderr is not a tty
    return tqdm(iterable, **kwargs)
