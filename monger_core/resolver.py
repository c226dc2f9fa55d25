"""Turn a user version specifier into an installed identifier or a pinned release."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from .catalog import VersionCatalog
from .errors import NoReleasesFound, VersionNotFound
from .release import Release, is_stable, parse_major_minor, select_newer, try_parse_release
from .store import SYSTEM, VersionStore

logger = logging.getLogger(__name__)

LATEST = "latest"


@dataclass(frozen=True)
class SystemVersion:
    """Use whichever binary is already on PATH."""

    def __str__(self) -> str:
        return SYSTEM


@dataclass(frozen=True)
class InstalledVersion:
    identifier: str

    def __str__(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class PinnedRelease:
    release: Release

    def __str__(self) -> str:
        return str(self.release)


ResolvedVersion = Union[SystemVersion, InstalledVersion, PinnedRelease]

SYSTEM_VERSION = SystemVersion()


class VersionResolver:
    def __init__(self, store: VersionStore, catalog: VersionCatalog) -> None:
        self.store = store
        self.catalog = catalog

    def resolve(self, specifier: str, *, prefer_installed: bool = True) -> ResolvedVersion:
        spec = (specifier or "").strip()
        if spec == SYSTEM:
            return SYSTEM_VERSION
        if spec == LATEST:
            return PinnedRelease(self.latest())

        pair = parse_major_minor(spec)
        if pair is not None:
            major, minor = pair
            if prefer_installed:
                installed = self.store.newest_installed_matching(major, minor)
                if installed is not None:
                    logger.debug("%s satisfied by installed %s", spec, installed)
                    return InstalledVersion(installed)
            release = self.catalog.newest_matching(major, minor)
            if release is None:
                raise VersionNotFound(spec)
            return PinnedRelease(release)

        release = try_parse_release(spec)
        if release is not None:
            return PinnedRelease(release)
        raise VersionNotFound(spec)

    def latest(self) -> Release:
        """Newest stable release, stopping once the active development line is seen.

        Only one development line is open at a time, and the newest stable line is
        exactly one minor behind it, so the scan can end at that point.
        """
        newest_stable: Release | None = None
        newest_dev: Release | None = None
        for release in self.catalog.releases():
            if is_stable(release):
                newest_stable = select_newer(newest_stable, release)
            else:
                newest_dev = select_newer(newest_dev, release)

            if (
                newest_stable is not None
                and newest_dev is not None
                and newest_dev.major == newest_stable.major
                and newest_dev.minor == newest_stable.minor + 1
            ):
                return newest_stable

        if newest_stable is None:
            raise NoReleasesFound(self.catalog.url)
        return newest_stable
