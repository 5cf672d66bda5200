import logging
from gettext import gettext as _
from typing import Dict

from easydict import EasyDict as edict

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOXANNO_"


def coerce_value(current, value):
    """Convert a string from the environment to the type of `current`."""
    if not isinstance(value, str) or current is None:
        return value
    if isinstance(current, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, (list, tuple)):
        items = [v.strip() for v in value.split(",") if v.strip()]
        if current:
            items = [coerce_value(current[0], v) for v in items]
        return items
    return value


def load_cfg_from_env(cfg: edict, env: Dict[str, str], prefix: str = ENV_PREFIX):
    for k, v in env.items():
        if k.startswith(prefix):
            cfgkey = k[len(prefix):].replace("__", ".")
            logger.warning(
                _(
                    "Changing configuration entry from environment variable: {k}={v}"
                ).format(
                    k=cfgkey, v=v
                )  # noqa:E501
            )  # noqa: E501
            *parts, last = cfgkey.split(".")
            this_cfg = cfg
            for part in parts:
                if this_cfg.get(part) is None:
                    this_cfg[part] = edict()
                this_cfg = this_cfg[part]
            this_cfg[last] = coerce_value(this_cfg.get(last), v)
    return cfg
