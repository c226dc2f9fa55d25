"""On-disk store of installed server versions, their data directories and default arguments.

Layout under the store root::

    mongodb-versions/<identifier>/bin/...   one tree per installed version
    db/<identifier>/...                      one data directory per identifier
    default-args                             optional flat text file

A version is installed iff its directory exists; there is no separate index.
Mutations hold an advisory file lock so separate invocations do not interleave.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from filelock import FileLock

from .archive import extract_archive
from .errors import ExtractionFailed, VersionNotFound
from .release import Release, newest_plain_matching, parse_major_minor, try_parse_release

logger = logging.getLogger(__name__)

DEFAULT_BIN_DIR = "mongodb-versions"
DEFAULT_DB_DIR = "db"
DEFAULT_ARGS_FILE = "default-args"
LOCK_FILE = ".monger.lock"
STAGING_PREFIX = ".install-"
SYSTEM = "system"

Extractor = Callable[[Path, Path], None]


@dataclass(frozen=True)
class PrunedVersion:
    identifier: str
    kept: str


def _check_identifier(identifier: str) -> str:
    value = (identifier or "").strip()
    if not value or value in {".", ".."} or "/" in value or os.sep in value:
        raise ValueError(f"invalid version identifier: {identifier!r}")
    if value.startswith(STAGING_PREFIX):
        raise ValueError(f"invalid version identifier: {identifier!r}")
    return value


class VersionStore:
    def __init__(
        self,
        root: Path,
        *,
        bin_dir: str = DEFAULT_BIN_DIR,
        db_dir: str = DEFAULT_DB_DIR,
        extractor: Extractor = extract_archive,
        lock_timeout: float = -1.0,
    ) -> None:
        self.root = root
        self.bin_root = root / bin_dir
        self.db_root = root / db_dir
        self.default_args_file = root / DEFAULT_ARGS_FILE
        self.extractor = extractor
        self._lock = FileLock(str(root / LOCK_FILE), timeout=lock_timeout)

    def create(self) -> None:
        self.bin_root.mkdir(parents=True, exist_ok=True)
        self.db_root.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def locked(self) -> Iterator[None]:
        self.root.mkdir(parents=True, exist_ok=True)
        with self._lock:
            yield

    # ----------------------------
    # Lookup
    # ----------------------------
    def version_dir(self, identifier: str) -> Path:
        return self.bin_root / _check_identifier(identifier)

    def bin_dir(self, identifier: str) -> Path:
        return self.version_dir(self.resolve_identifier(identifier)) / "bin"

    def version_exists(self, identifier: str) -> bool:
        return self.version_dir(identifier).is_dir()

    def list_installed(self) -> list[str]:
        self.create()
        return sorted(
            entry.name
            for entry in self.bin_root.iterdir()
            if entry.is_dir() and not entry.name.startswith(STAGING_PREFIX)
        )

    def installed_releases(self) -> dict[str, Release]:
        out: dict[str, Release] = {}
        for identifier in self.list_installed():
            release = try_parse_release(identifier)
            if release is not None:
                out[identifier] = release
        return out

    def newest_installed_matching(self, major: int, minor: int) -> str | None:
        by_release = {release: identifier for identifier, release in self.installed_releases().items()}
        newest = newest_plain_matching(by_release, major, minor)
        return by_release[newest] if newest is not None else None

    def resolve_identifier(self, identifier: str) -> str:
        """Map an identifier or ``major.minor`` shorthand onto an installed identifier."""
        if identifier == SYSTEM:
            return identifier
        if self.version_exists(identifier):
            return identifier
        pair = parse_major_minor(identifier)
        if pair is not None:
            matched = self.newest_installed_matching(*pair)
            if matched is not None:
                return matched
        raise VersionNotFound(identifier)

    # ----------------------------
    # Install / delete / prune
    # ----------------------------
    def install(self, filename: str, dirname: str, data: bytes, identifier: str) -> Path:
        """Stage ``data``, unpack it and rename the archive root to ``identifier``.

        Each install unpacks into its own hidden staging directory, so a failed or
        interrupted extraction never touches ``<bin_root>/<identifier>``. The rename
        out of staging is the commit point.
        """
        identifier = _check_identifier(identifier)
        filename = _check_identifier(filename)
        dirname = _check_identifier(dirname)
        target = self.bin_root / identifier

        with self.locked():
            self.create()
            self._remove_stale_staging()
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=self.bin_root))
            try:
                archive = staging / filename
                logger.info("writing %s...", archive)
                archive.write_bytes(data)

                logger.info("decompressing...")
                unpacked = staging / "unpacked"
                self.extractor(archive, unpacked)
                extracted = unpacked / dirname
                if not extracted.is_dir():
                    raise ExtractionFailed(filename, f"archive has no top-level directory {dirname!r}")

                extracted.rename(target)
            finally:
                logger.info("cleaning up...")
                shutil.rmtree(staging, ignore_errors=True)
        return target

    def _remove_stale_staging(self) -> None:
        # Left behind only when a previous install was killed outright.
        for entry in self.bin_root.glob(f"{STAGING_PREFIX}*"):
            logger.info("removing stale partial extraction %s", entry)
            shutil.rmtree(entry, ignore_errors=True)

    def _delete_tree(self, path: Path) -> bool:
        if not path.exists():
            return False
        shutil.rmtree(path)
        return True

    def delete(self, identifier: str) -> bool:
        with self.locked():
            return self._delete_tree(self.version_dir(identifier))

    def prune(self) -> list[PrunedVersion]:
        """Within each major.minor line keep only the newest plain release."""
        pruned: list[PrunedVersion] = []
        with self.locked():
            groups: dict[tuple[int, int], dict[str, Release]] = defaultdict(dict)
            for identifier, release in self.installed_releases().items():
                groups[release.major_minor][identifier] = release

            for members in groups.values():
                stable = [(release, identifier) for identifier, release in members.items() if release.is_plain]
                if not stable:
                    continue
                _, kept = max(stable)
                for identifier in sorted(members):
                    if identifier == kept:
                        continue
                    self._delete_tree(self.version_dir(identifier))
                    logger.info("Deleted %s (because %s is installed)", identifier, kept)
                    pruned.append(PrunedVersion(identifier=identifier, kept=kept))
        return pruned

    # ----------------------------
    # Data directories
    # ----------------------------
    def data_dir(self, identifier: str) -> Path:
        return self.db_root / _check_identifier(identifier)

    def clear_data_directory(self, identifier: str) -> bool:
        with self.locked():
            return self._delete_tree(self.data_dir(identifier))

    def create_or_get_data_directory(self, identifier: str) -> Path:
        db_dir = self.data_dir(self.resolve_identifier(identifier))
        db_dir.mkdir(parents=True, exist_ok=True)
        return db_dir

    # ----------------------------
    # Default arguments
    # ----------------------------
    def set_default_args(self, text: str) -> None:
        self.create()
        self.default_args_file.write_text(text, encoding="utf-8")

    def get_default_args(self) -> str | None:
        if not self.default_args_file.is_file():
            return None
        return self.default_args_file.read_text(encoding="utf-8")

    def clear_default_args(self) -> bool:
        if not self.default_args_file.exists():
            return False
        self.default_args_file.unlink()
        return True
