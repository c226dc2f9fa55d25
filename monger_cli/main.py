from __future__ import annotations

import logging
import os
import sys
from argparse import ArgumentParser
from typing import Callable, Sequence

from monger_core import Monger, MongerError, SubprocessFailed

from .commands import COMMANDS

LOG_LEVEL_ENV = "MONGER_LOG_LEVEL"


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="monger", description="Manage local MongoDB versions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name, command_cls in COMMANDS.items():
        command_parser = sub.add_parser(name, help=(command_cls.__doc__ or "").strip())
        command_cls.configure(command_parser)
    return parser


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else (os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )


def _exit_status(code: int | None) -> int:
    if not code:
        return 1
    if code < 0:
        # Killed by signal n; report it the way a shell does.
        return 128 - code
    return code


def main(
    argv: Sequence[str] | None = None,
    *,
    monger_factory: Callable[[], Monger] | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if not args.command:
        parser.print_help()
        return 2

    _configure_logging(args.verbose)
    command = COMMANDS[args.command](monger_factory or Monger.from_env)
    try:
        return command.run(args)
    except SubprocessFailed as exc:
        command.say(str(exc))
        return _exit_status(exc.exit_code)
    except (MongerError, OSError, ValueError) as exc:
        command.say(str(exc))
        return 1
