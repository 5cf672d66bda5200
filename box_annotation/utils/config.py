"""
Application configuration.

Defaults live here as an EasyDict; every entry can be overridden from the
environment, e.g. `BOXANNO_render__line_width=3` or
`BOXANNO_store__path=/data/tasks.json`.
"""

import copy
import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

DEFAULT_CONFIG = edict(
    render=edict(
        # RGB
        annotation_color=[255, 0, 0],
        drawing_color=[0, 0, 255],
        line_width=2,
        font_scale=0.5,
        label_thickness=1,
        label_offset=5,
    ),
    store=edict(
        path="tasks.json",
    ),
    ui=edict(
        window_name="box_annotation",
        prompt_color=[255, 255, 255],
        frame_delay_ms=20,
    ),
    user=edict(
        id=None,
    ),
)


def load_config(env: Optional[Dict[str, str]] = None) -> edict:
    """Defaults merged with overrides from `env` (os.environ by default)."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    return load_cfg_from_env(cfg, os.environ if env is None else env)
