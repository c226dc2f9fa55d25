"""Download URL, filename and archive directory naming for release artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable
from urllib.parse import urlsplit

from .platform import OSX, PlatformTag
from .release import Release, parse_release

DEFAULT_DOWNLOAD_BASE = "https://fastdl.mongodb.org"

# Releases in [3.5.4, 3.6.0) unpack into a "macOS" directory while keeping "osx" in the filename.
FIRST_MACOS_DIRNAME = parse_release("3.5.4")
LAST_MACOS_DIRNAME = parse_release("3.6.0")
# From 4.1.1 the SSL macOS build is published as "mongodb-macos-..." in both places.
NEW_MACOS_NAME = parse_release("4.1.1")


@dataclass(frozen=True)
class DownloadTarget:
    url: str
    filename: str
    dirname: str


@dataclass
class _Naming:
    filename: list[str]
    dirname: list[str]


@dataclass(frozen=True)
class NamingRule:
    """A naming-era rule; rules run in the order of ``NAMING_RULES``."""

    name: str
    applies_if: Callable[[Release, PlatformTag, list[str]], bool]
    transform: Callable[[_Naming], None]


def _renamed_macos(release: Release, tag: PlatformTag, elements: list[str]) -> bool:
    return release >= NEW_MACOS_NAME and elements[1:3] == [OSX, "ssl"]


def _use_macos_token(naming: _Naming) -> None:
    rest = naming.filename[3:]
    naming.filename = ["mongodb", "macos", *rest]
    naming.dirname = list(naming.filename)


def _always(release: Release, tag: PlatformTag, elements: list[str]) -> bool:
    return True


def _drop_ssl_from_dirname(naming: _Naming) -> None:
    naming.dirname = [item for item in naming.dirname if item != "ssl"]


def _macos_dirname_era(release: Release, tag: PlatformTag, elements: list[str]) -> bool:
    return FIRST_MACOS_DIRNAME <= release < LAST_MACOS_DIRNAME


def _use_macos_dirname(naming: _Naming) -> None:
    naming.dirname = ["macOS" if item == OSX else item for item in naming.dirname]


NAMING_RULES: tuple[NamingRule, ...] = (
    NamingRule("macos-filename", _renamed_macos, _use_macos_token),
    NamingRule("ssl-not-in-dirname", _always, _drop_ssl_from_dirname),
    NamingRule("macos-dirname", _macos_dirname_era, _use_macos_dirname),
)


def build_download_target(
    tag: PlatformTag,
    release: Release,
    *,
    base_url: str = DEFAULT_DOWNLOAD_BASE,
    rules: tuple[NamingRule, ...] = NAMING_RULES,
) -> DownloadTarget:
    elements = ["mongodb", tag.os_family, *tag.path_elements(release)]
    naming = _Naming(filename=list(elements), dirname=list(elements))
    for rule in rules:
        if rule.applies_if(release, tag, elements):
            rule.transform(naming)
    filename = f"{'-'.join(naming.filename)}.{tag.extension}"
    return DownloadTarget(
        url=f"{base_url.rstrip('/')}/{tag.os_family}/{filename}",
        filename=filename,
        dirname="-".join(naming.dirname),
    )


def target_from_url(url: str) -> DownloadTarget:
    """Target for an arbitrary archive URL; the directory is the filename minus its extension."""
    path = urlsplit(url).path
    filename = path.rstrip("/").rsplit("/", 1)[-1]
    if not filename:
        raise ValueError(f"URL has no filename: {url!r}")
    dirname = filename
    for suffix in (".tar.gz", ".tgz"):
        if dirname.endswith(suffix):
            dirname = dirname[: -len(suffix)]
            break
    return DownloadTarget(url=url, filename=filename, dirname=dirname)
