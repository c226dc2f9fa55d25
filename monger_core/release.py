"""Semantic versions of the managed server and their release channels."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable

_IDENT = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENT}))?"
    rf"(?:\+({_IDENT}))?$"
)
_MAJOR_MINOR_RE = re.compile(r"^(\d+)\.(\d+)$")

STABLE = "stable"
DEVELOPMENT = "development"


def _pre_key(pre: tuple[str, ...]) -> tuple:
    # A version without pre-release identifiers outranks any version that has them.
    if not pre:
        return (1,)
    parts = []
    for item in pre:
        if item.isdigit():
            parts.append((0, int(item), ""))
        else:
            parts.append((1, 0, item))
    return (0, tuple(parts))


@total_ordering
@dataclass(frozen=True)
class Release:
    major: int
    minor: int
    patch: int
    pre: tuple[str, ...] = field(default=())
    build: tuple[str, ...] = field(default=())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def _sort_key(self) -> tuple:
        return (self.major, self.minor, self.patch, _pre_key(self.pre), self.build)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Release):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    @property
    def is_plain(self) -> bool:
        """True when the release carries no pre-release or build metadata."""
        return not self.pre and not self.build

    @property
    def major_minor(self) -> tuple[int, int]:
        return self.major, self.minor


def parse_release(value: str) -> Release:
    match = _SEMVER_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"invalid semantic version: {value!r}")
    major, minor, patch, pre, build = match.groups()
    return Release(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        pre=tuple(pre.split(".")) if pre else (),
        build=tuple(build.split(".")) if build else (),
    )


def try_parse_release(value: str) -> Release | None:
    try:
        return parse_release(value)
    except ValueError:
        return None


def parse_major_minor(value: str) -> tuple[int, int] | None:
    """Parse the ``major.minor`` shorthand; any other shape returns None."""
    match = _MAJOR_MINOR_RE.match((value or "").strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def is_stable(release: Release) -> bool:
    return release.minor % 2 == 0 and release.is_plain


def channel_of(release: Release) -> str:
    return STABLE if is_stable(release) else DEVELOPMENT


def select_newer(existing: Release | None, found: Release) -> Release:
    if existing is not None and existing > found:
        return existing
    return found


def newest_plain_matching(releases: Iterable[Release], major: int, minor: int) -> Release | None:
    """Highest patch of ``major.minor`` ignoring pre-release and build-tagged entries."""
    newest: Release | None = None
    for release in releases:
        if release.major_minor != (major, minor) or not release.is_plain:
            continue
        newest = select_newer(newest, release)
    return newest
