"""CLI interface for box_annotation project.

Every folder next to this file with an `__init__.py` exposing
`COMMAND_DESCRIPTION` and `command(subparser)` becomes a sub-command.
"""

import logging
import sys
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

from box_annotation.utils.config import load_config
from box_annotation.utils.misc import load_module

logger = logging.getLogger(__name__)


def add_subcommand(subparsers, name: str, submodule):
    subparser = subparsers.add_parser(name, help=submodule.COMMAND_DESCRIPTION)
    common_flags(subparser)
    handler = submodule.command(subparser)
    subparser.set_defaults(fn=handler)


def common_flags(parser):
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        help=_("Give more details about what is happening"),
    )  # noqa: E501
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        help=_("Print version and exit"),
    )  # noqa: E501
    parser.add_argument(
        "--store",
        dest="store",
        type=Path,
        help=_("Task store JSON file (default: BOXANNO_store__path or tasks.json)"),
    )  # noqa: E501
    parser.add_argument(
        "-u",
        "--user",
        dest="user",
        type=str,
        help=_("User the tasks are assigned to (default: BOXANNO_user__id)"),
    )  # noqa: E501


def main():  # pragma: no cover
    """
    The main function executes on commands:
    `python -m box_annotation` and `$ box_annotation `.
    """
    logging.basicConfig()
    parser = ArgumentParser(
        prog="box_annotation", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for module in sorted(Path(__file__).parent.glob("*/__init__.py")):
        if str(module).find("pycache") > 0:
            continue
        module_name = module.parent.name
        subcommand_module = load_module(
            module, module_name=f"box_annotation.cli.{module_name}"
        )
        add_subcommand(subparsers, module_name, subcommand_module)

    args = parser.parse_args()

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = (Path(__file__).parent.parent / "VERSION").read_text().strip()
    if args.is_show_version:
        print(version)
        sys.exit(0)
    logger.debug(f"{_('Starting')} box_annotation v{version}")

    args.cfg = load_config()

    fn = args.__dict__.get("fn")
    args.__dict__["fn"] = None
    if fn is not None:
        sys.exit(fn(args) or 0)
    else:
        parser.parse_args([*sys.argv[1:], "--help"])
