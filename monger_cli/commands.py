"""Builtin monger commands."""

from __future__ import annotations

import shlex
from argparse import REMAINDER, ArgumentParser
from typing import Any, Callable

from monger_core import Monger
from monger_core.platform import OS_NAMES
from monger_core.process import LaunchMode

COMMANDS: dict[str, type["MongerCommand"]] = {}


def mongercommand(name: str) -> Callable[[type["MongerCommand"]], type["MongerCommand"]]:
    def register(cls: type["MongerCommand"]) -> type["MongerCommand"]:
        cls.name = name
        COMMANDS[name] = cls
        return cls

    return register


class MongerCommand:
    name = ""

    def __init__(self, monger_factory: Callable[[], Monger]) -> None:
        self._factory = monger_factory
        self._instance: Monger | None = None

    @property
    def monger(self) -> Monger:
        if self._instance is None:
            self._instance = self._factory()
        return self._instance

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        return None

    def run(self, argv: Any) -> int:
        raise NotImplementedError

    def say(self, message: str) -> None:
        print(f"[monger:{self.name}] {message}")


def _trailing_args(values: list[str] | None) -> list[str]:
    args = list(values or [])
    if args and args[0] == "--":
        args = args[1:]
    return args


def _launch_mode(argv: Any) -> LaunchMode:
    if getattr(argv, "background", False):
        return LaunchMode.DETACHED
    if getattr(argv, "wait", False):
        return LaunchMode.FOREGROUND
    return LaunchMode.REPLACE


def _add_mode_flags(parser: ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--background", action="store_true", help="Spawn the binary and return immediately")
    group.add_argument("--wait", action="store_true", help="Run the binary and wait for it to exit")


@mongercommand(name="clear")
class ClearCommand(MongerCommand):
    """Clear the database files for an installed MongoDB version."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("id", help="ID of the MongoDB version whose files should be cleared")

    def run(self, argv: Any) -> int:
        if self.monger.clear_database_files(argv.id):
            self.say(f"cleared database files of {argv.id}")
        else:
            self.say(f"no database files for {argv.id}")
        return 0


@mongercommand(name="delete")
class DeleteCommand(MongerCommand):
    """Delete an installed MongoDB version."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("id", help="ID of the MongoDB version to delete")

    def run(self, argv: Any) -> int:
        if self.monger.delete(argv.id):
            self.say(f"deleted version {argv.id}")
        else:
            self.say(f"version {argv.id} is not installed")
        return 0


@mongercommand(name="defaults")
class DefaultsCommand(MongerCommand):
    """Get, set or clear the default arguments passed to mongod."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("action", choices=["get", "set", "clear"])
        parser.add_argument("args", nargs=REMAINDER, help="Default mongod arguments (for `set`)")

    def run(self, argv: Any) -> int:
        if argv.action == "clear":
            if self.monger.clear_default_args():
                self.say("cleared default args")
            return 0

        if argv.action == "get":
            current = self.monger.get_default_args()
            if current is None:
                self.say("no default arguments exist")
            else:
                self.say(f"default arguments:\n    {current}")
            return 0

        text = shlex.join(_trailing_args(argv.args))
        if not text:
            self.say("no arguments given; defaults unchanged")
            return 1
        self.monger.set_default_args(text)
        self.say(f"default arguments set to:\n    {text}")
        return 0


@mongercommand(name="download")
class DownloadCommand(MongerCommand):
    """Download and install a MongoDB archive from an arbitrary URL."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("url", help="URL of a .tgz/.tar.gz MongoDB archive")
        parser.add_argument("--id", required=True, help="Identifier to install the archive under")
        parser.add_argument("-f", "--force", action="store_true", help="Replace an existing install with the same ID")

    def run(self, argv: Any) -> int:
        installed = self.monger.download_from_url(argv.url, argv.id, force=argv.force)
        if installed is None:
            self.say(f"{argv.id} already installed (use --force to replace it)")
        else:
            self.say(f"installed {installed}")
        return 0


@mongercommand(name="get")
class GetCommand(MongerCommand):
    """Download a MongoDB version (x.y.z, x.y, or latest)."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("version", help="MongoDB version to download")
        parser.add_argument("-f", "--force", action="store_true", help="Download even if already installed")
        parser.add_argument("--os", choices=OS_NAMES, help="OS build to download instead of the detected one")
        parser.add_argument(
            "--id",
            help="Unique identifier for the installed version; defaults to the version string (x.y.z)",
        )
        parser.add_argument("--dry-run", action="store_true", help="Print the download URL without installing")

    def run(self, argv: Any) -> int:
        if argv.dry_run:
            target = self.monger.download_target(argv.version, argv.os)
            self.say(f"url={target.url}")
            self.say(f"file={target.filename} dir={target.dirname}")
            return 0

        installed = self.monger.get(argv.version, force=argv.force, os_name=argv.os, identifier=argv.id)
        if installed is None:
            self.say(f"{argv.version} already installed")
        else:
            self.say(f"installed {installed}")
        return 0


@mongercommand(name="list")
class ListCommand(MongerCommand):
    """List installed MongoDB versions."""

    def run(self, argv: Any) -> int:
        versions = self.monger.list_versions()
        if not versions:
            print("installed versions: none")
            return 0
        print("installed versions:")
        for version in versions:
            print(f"    {version}")
        return 0


@mongercommand(name="list-remote")
class ListRemoteCommand(MongerCommand):
    """List stable MongoDB releases published upstream."""

    def run(self, argv: Any) -> int:
        stable, development = self.monger.list_remote()
        if not stable:
            print("(no releases)")
        for release in stable:
            print(release)
        if development is not None:
            print(f"development: {development}")
        return 0


@mongercommand(name="prune")
class PruneCommand(MongerCommand):
    """Delete versions superseded by a newer stable patch of the same minor version."""

    def run(self, argv: Any) -> int:
        pruned = self.monger.prune()
        for item in pruned:
            self.say(f"deleted {item.identifier} (because {item.kept} is installed)")
        self.say(f"removed={len(pruned)}")
        return 0


@mongercommand(name="run")
class RunCommand(MongerCommand):
    """Run a binary of a downloaded MongoDB version."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("id", help="ID of the MongoDB version of the binary being run")
        parser.add_argument("bin", help="MongoDB binary to run")
        _add_mode_flags(parser)
        parser.add_argument("bin_args", nargs=REMAINDER, help="Arguments for the binary (after --)")

    def run(self, argv: Any) -> int:
        outcome = self.monger.run(argv.id, argv.bin, _trailing_args(argv.bin_args), _launch_mode(argv))
        if _launch_mode(argv) is LaunchMode.DETACHED:
            self.say(f"started {argv.bin} pid={outcome.pid}")
        return 0


@mongercommand(name="start")
class StartCommand(MongerCommand):
    """Start an installed mongod against its own data directory."""

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        parser.add_argument("id", help="ID of the mongod version to start")
        _add_mode_flags(parser)
        parser.add_argument("mongod_args", nargs=REMAINDER, help="Extra mongod arguments (after --)")

    def run(self, argv: Any) -> int:
        outcome = self.monger.start(argv.id, _trailing_args(argv.mongod_args), _launch_mode(argv))
        if _launch_mode(argv) is LaunchMode.DETACHED:
            self.say(f"started mongod pid={outcome.pid}")
        return 0
