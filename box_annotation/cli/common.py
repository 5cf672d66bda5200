"""Helpers shared by the sub-commands."""

from box_annotation.core.annotation import SessionContext
from box_annotation.core.tasks import JsonTaskStore
from box_annotation.utils.config import load_config


def get_cfg(args):
    cfg = getattr(args, "cfg", None)
    return cfg if cfg is not None else load_config()


def get_store(args) -> JsonTaskStore:
    cfg = get_cfg(args)
    return JsonTaskStore(args.store or cfg.store.path)


def get_context(args) -> SessionContext:
    cfg = get_cfg(args)
    return SessionContext(user_id=args.user or cfg.user.id)
