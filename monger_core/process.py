from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import sys
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from .errors import BinaryNotFound, SubprocessFailed

logger = logging.getLogger(__name__)

DBPATH_FLAG = "--dbpath"


class LaunchMode(str, Enum):
    DETACHED = "detached"
    FOREGROUND = "foreground"
    REPLACE = "replace"


def binary_on_path(name: str) -> bool:
    return shutil.which(name) is not None


def with_data_directory(args: Sequence[str], data_dir: Callable[[], Path]) -> list[str]:
    """Append ``--dbpath <dir>`` unless the caller already passed their own."""
    processed: list[str] = []
    for index, arg in enumerate(args):
        if arg == DBPATH_FLAG or arg.startswith(f"{DBPATH_FLAG}="):
            processed.extend(args[index:])
            return processed
        processed.append(arg)
    processed.extend([DBPATH_FLAG, str(data_dir())])
    return processed


class ProcessLauncher:
    """Spawn, wait on, or exec a managed binary."""

    def launch(
        self,
        binary: str,
        args: Sequence[str],
        cwd: Path | None = None,
        mode: LaunchMode = LaunchMode.FOREGROUND,
        *,
        version: str = "system",
    ) -> subprocess.Popen | int:
        command = [binary, *args]
        workdir = str(cwd) if cwd is not None else None
        logger.debug("launch mode=%s cmd=%s", mode.value, shlex.join(command))
        if mode is LaunchMode.REPLACE:
            # A missing working directory is an ordinary OSError, not a missing binary.
            self._prepare_exec(workdir)
        try:
            if mode is LaunchMode.REPLACE:
                self._exec(command)
            if mode is LaunchMode.DETACHED:
                return subprocess.Popen(
                    command,
                    cwd=workdir,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                )
            result = subprocess.run(command, cwd=workdir, check=False)
        except FileNotFoundError as exc:
            # subprocess names the cwd in exc.filename when chdir failed in the child.
            if exc.filename not in (None, binary):
                raise
            raise BinaryNotFound(Path(binary).name, version) from exc

        if result.returncode != 0:
            raise SubprocessFailed(binary, result.returncode)
        return result.returncode

    def _prepare_exec(self, workdir: str | None) -> None:
        sys.stdout.flush()
        sys.stderr.flush()
        if workdir is not None:
            os.chdir(workdir)

    def _exec(self, command: list[str]) -> None:
        if os.sep in command[0]:
            os.execv(command[0], command)
        else:
            os.execvp(command[0], command)
