"""
Auto-discovery CLI dispatcher for docschema.

Scans ``cli/commands`` and registers every module that exposes ``SUMMARY``,
``register_args(parser)`` and ``main(args) -> int``. Adding a command means
adding a .py file there.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any

from docschema.core.errors import ConfigError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def discover_commands() -> dict[str, dict[str, Any]]:
    """Discover commands under cli/commands."""
    commands_dir = Path(__file__).parent / "commands"
    commands: dict[str, dict[str, Any]] = {}

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue

        cmd_name = item.stem
        module = importlib.import_module(f"docschema.cli.commands.{cmd_name}")
        commands[cmd_name] = {
            "module": module,
            "summary": getattr(module, "SUMMARY", cmd_name),
            "register_args": getattr(module, "register_args", None),
            "main": getattr(module, "main", None),
        }

    return commands


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with auto-discovered commands."""
    parser = argparse.ArgumentParser(
        prog="docschema",
        description="docschema - compile the document model into a wire schema, validators and documentation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    for cmd_name, cmd_info in sorted(discover_commands().items()):
        primary_name = cmd_name.replace("_", "-")
        aliases = [cmd_name] if primary_name != cmd_name else []
        cmd_parser = subparsers.add_parser(
            primary_name,
            aliases=aliases,
            help=cmd_info["summary"],
        )
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])

    return parser


def _get_version() -> str:
    from docschema import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the docschema CLI.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command or not getattr(args, "_func", None):
        parser.print_help()
        return 0

    from docschema.cli._utils import get_repo_root, setup_logging

    try:
        setup_logging(get_repo_root(args))
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    logger.debug("Running command %s", args.command)
    return int(args._func(args) or 0)


if __name__ == "__main__":
    sys.exit(main())
