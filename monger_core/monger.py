"""High-level operations behind the ``monger`` commands."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Sequence

from .catalog import VersionCatalog, catalog_from_settings
from .client import HttpClient
from .config import MongerSettings, load_settings
from .errors import VersionNotFound
from .platform import PlatformTag, identify, platform_from_name
from .process import LaunchMode, ProcessLauncher, binary_on_path, with_data_directory
from .release import Release
from .resolver import InstalledVersion, PinnedRelease, SystemVersion, VersionResolver
from .store import SYSTEM, PrunedVersion, VersionStore
from .urls import DownloadTarget, build_download_target, target_from_url

logger = logging.getLogger(__name__)

MONGOD = "mongod"


class Monger:
    def __init__(
        self,
        settings: MongerSettings,
        *,
        client: HttpClient | None = None,
        store: VersionStore | None = None,
        catalog: VersionCatalog | None = None,
        launcher: ProcessLauncher | None = None,
    ) -> None:
        self.settings = settings
        self.client = client or HttpClient(timeout=settings.http_timeout_seconds)
        self.store = store or VersionStore(settings.home, lock_timeout=settings.lock_timeout_seconds)
        self.catalog = catalog or catalog_from_settings(settings, self.client)
        self.resolver = VersionResolver(self.store, self.catalog)
        self.launcher = launcher or ProcessLauncher()

    @classmethod
    def from_env(cls) -> "Monger":
        return cls(load_settings())

    # ----------------------------
    # Installing
    # ----------------------------
    def get(
        self,
        version: str,
        *,
        force: bool = False,
        os_name: str | None = None,
        identifier: str | None = None,
    ) -> str | None:
        """Download and install ``version``; returns the new identifier, or None if already present."""
        resolved = self.resolver.resolve(version, prefer_installed=not force and identifier is None)
        if isinstance(resolved, SystemVersion):
            raise VersionNotFound(version)
        if isinstance(resolved, InstalledVersion):
            logger.info("%s already installed as %s", version, resolved.identifier)
            return None

        release = resolved.release
        target_id = identifier or str(release)
        if not self._make_room(target_id, force):
            return None

        tag = platform_from_name(os_name) if os_name else identify(release)
        target = build_download_target(tag, release, base_url=self.settings.download_base_url)
        self._install(target, target_id)
        return target_id

    def download_from_url(self, url: str, identifier: str, *, force: bool = False) -> str | None:
        if not self._make_room(identifier, force):
            return None
        self._install(target_from_url(url), identifier)
        return identifier

    def _make_room(self, identifier: str, force: bool) -> bool:
        if not self.store.version_exists(identifier):
            return True
        if not force:
            logger.info("%s is already installed", identifier)
            return False
        self.store.delete(identifier)
        return True

    def _install(self, target: DownloadTarget, identifier: str) -> None:
        data = self.client.download(target.url)
        self.store.install(target.filename, target.dirname, data, identifier)

    def download_target(self, version: str, os_name: str | None = None) -> DownloadTarget:
        resolved = self.resolver.resolve(version, prefer_installed=False)
        if not isinstance(resolved, PinnedRelease):
            raise VersionNotFound(version)
        tag: PlatformTag = platform_from_name(os_name) if os_name else identify(resolved.release)
        return build_download_target(tag, resolved.release, base_url=self.settings.download_base_url)

    # ----------------------------
    # Store management
    # ----------------------------
    def delete(self, identifier: str) -> bool:
        return self.store.delete(identifier)

    def clear_database_files(self, identifier: str) -> bool:
        return self.store.clear_data_directory(identifier)

    def list_versions(self) -> list[str]:
        versions = self.store.list_installed()
        if binary_on_path(MONGOD):
            versions.append(SYSTEM)
        return versions

    def list_remote(self) -> tuple[list[Release], Release | None]:
        return self.catalog.list_stable(), self.catalog.list_development()

    def prune(self) -> list[PrunedVersion]:
        return self.store.prune()

    def get_default_args(self) -> str | None:
        return self.store.get_default_args()

    def set_default_args(self, text: str) -> None:
        self.store.set_default_args(text)

    def clear_default_args(self) -> bool:
        return self.store.clear_default_args()

    # ----------------------------
    # Running binaries
    # ----------------------------
    def binary_path(self, binary: str, identifier: str) -> str:
        if identifier == SYSTEM:
            return binary
        return str(self.store.bin_dir(identifier) / binary)

    def run(
        self,
        identifier: str,
        binary: str,
        args: Sequence[str],
        mode: LaunchMode = LaunchMode.REPLACE,
    ) -> subprocess.Popen | int:
        return self.launcher.launch(
            self.binary_path(binary, identifier),
            list(args),
            Path.cwd(),
            mode,
            version=identifier,
        )

    def start(
        self,
        identifier: str,
        args: Sequence[str] = (),
        mode: LaunchMode = LaunchMode.REPLACE,
    ) -> subprocess.Popen | int:
        mongod_args = list(args)
        if not mongod_args:
            defaults = self.store.get_default_args()
            if defaults:
                mongod_args = shlex.split(defaults)
        processed = with_data_directory(
            mongod_args,
            lambda: self.store.create_or_get_data_directory(identifier),
        )
        return self.run(identifier, MONGOD, processed, mode)
