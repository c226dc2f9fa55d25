"""Host platform detection and the table of supported download platforms."""

from __future__ import annotations

import logging
import platform as _host
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from .errors import UnknownOperatingSystem, UnsupportedPlatform
from .release import Release

logger = logging.getLogger(__name__)

OS_RELEASE_PATHS: tuple[Path, ...] = (Path("/etc/os-release"), Path("/usr/lib/os-release"))

LINUX = "linux"
OSX = "osx"
WINDOWS = "win32"


class Architecture(str, Enum):
    X86_64 = "x86_64"
    ARM = "arm64"


@dataclass(frozen=True)
class PlatformTag:
    """One downloadable build flavour: OS family, distro, architecture and SSL linkage."""

    name: str
    os_family: str
    distro: str | None = None
    arch: Architecture = Architecture.X86_64
    ssl: bool = False
    variant: str | None = None

    @property
    def extension(self) -> str:
        return "msi" if self.os_family == WINDOWS else "tgz"

    def path_elements(self, release: Release) -> list[str]:
        """Platform-specific URL path elements that follow ``mongodb-<os>``."""
        version = str(release)
        if self.os_family == OSX:
            elements = ["ssl"] if self.ssl else []
            return [*elements, self.arch.value, version]
        if self.os_family == WINDOWS:
            elements = [self.arch.value]
            if self.variant:
                elements.append(self.variant)
            if self.ssl:
                elements.append("ssl")
            return [*elements, version, "signed"]
        elements = [self.arch.value]
        if self.distro:
            elements.append(self.distro)
        return [*elements, version]


def _linux(name: str, distro: str | None, arch: Architecture = Architecture.X86_64) -> PlatformTag:
    return PlatformTag(name=name, os_family=LINUX, distro=distro, arch=arch)


AMAZON = _linux("amazon", "amazon")
DEBIAN7 = _linux("debian71", "debian71")
DEBIAN8 = _linux("debian81", "debian81")
LEGACY = _linux("legacy", None)
RHEL6 = _linux("rhel62", "rhel62")
RHEL7 = _linux("rhel70", "rhel70")
SUSE11 = _linux("suse11", "suse11")
SUSE12 = _linux("suse12", "suse12")
UBUNTU1204 = _linux("ubuntu1204", "ubuntu1204")
UBUNTU1404 = _linux("ubuntu1404", "ubuntu1404")
UBUNTU1604 = _linux("ubuntu1604", "ubuntu1604")
UBUNTU1604_ARM = _linux("ubuntu1604-arm", "ubuntu1604", Architecture.ARM)
UBUNTU1804 = _linux("ubuntu1804", "ubuntu1804")
OSX_SSL = PlatformTag(name="osx", os_family=OSX, ssl=True)
OSX_NOSSL = PlatformTag(name="osx-nossl", os_family=OSX, ssl=False)

# Windows builds are named but not installable (msi packages cannot be unpacked into the store).
WINDOWS_2008 = PlatformTag(name="win32", os_family=WINDOWS)
WINDOWS_2008R2 = PlatformTag(name="win32-2008plus", os_family=WINDOWS, variant="2008plus")
WINDOWS_2008R2_SSL = PlatformTag(name="win32-2008plus-ssl", os_family=WINDOWS, variant="2008plus", ssl=True)

OS_MAP: Mapping[str, PlatformTag] = MappingProxyType(
    {
        tag.name: tag
        for tag in (
            AMAZON,
            DEBIAN7,
            DEBIAN8,
            LEGACY,
            OSX_SSL,
            OSX_NOSSL,
            RHEL6,
            RHEL7,
            SUSE11,
            SUSE12,
            UBUNTU1204,
            UBUNTU1404,
            UBUNTU1604,
            UBUNTU1604_ARM,
            UBUNTU1804,
        )
    }
)
OS_NAMES: tuple[str, ...] = tuple(sorted(OS_MAP))


def platform_from_name(name: str) -> PlatformTag:
    tag = OS_MAP.get(name)
    if tag is None:
        raise UnsupportedPlatform(name)
    return tag


def read_os_release(paths: Sequence[Path] = OS_RELEASE_PATHS) -> dict[str, str]:
    """Parse the first readable os-release file into a ``KEY -> value`` mapping."""
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            continue
        except OSError as exc:
            raise UnknownOperatingSystem(f"unable to read {path}: {exc}") from exc
        info: dict[str, str] = {}
        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
                value = value[1:-1]
            info[key.strip()] = value
        return info
    raise UnknownOperatingSystem("no os-release file found")


def _major(version_id: str | None) -> int | None:
    if not version_id:
        return None
    head = version_id.split(".", 1)[0].strip()
    return int(head) if head.isdigit() else None


def _check_ubuntu(distro_id: str, version_id: str | None, arch: Architecture) -> PlatformTag | None:
    if distro_id != "ubuntu":
        return None
    major = _major(version_id)
    if major is None:
        return None
    if major >= 18:
        return UBUNTU1804
    if major >= 16:
        return UBUNTU1604_ARM if arch is Architecture.ARM else UBUNTU1604
    if major >= 14:
        return UBUNTU1404
    if major >= 12:
        return UBUNTU1204
    return None


def _check_amazon(distro_id: str, version_id: str | None, arch: Architecture) -> PlatformTag | None:
    return AMAZON if distro_id == "amzn" else None


def _check_rhel(distro_id: str, version_id: str | None, arch: Architecture) -> PlatformTag | None:
    if distro_id not in {"rhel", "centos"}:
        return None
    major = _major(version_id)
    if major is None:
        return None
    if major >= 7:
        return RHEL7
    if major >= 6:
        return RHEL6
    return None


def _check_suse(distro_id: str, version_id: str | None, arch: Architecture) -> PlatformTag | None:
    if distro_id not in {"suse", "sles"}:
        return None
    major = _major(version_id)
    if major is None:
        return None
    if major >= 12:
        return SUSE12
    if major >= 11:
        return SUSE11
    return None


def _check_debian(distro_id: str, version_id: str | None, arch: Architecture) -> PlatformTag | None:
    if distro_id != "debian":
        return None
    major = _major(version_id)
    if major == 8:
        return DEBIAN8
    if major == 7:
        return DEBIAN7
    return None


DistroPredicate = Callable[[str, "str | None", Architecture], "PlatformTag | None"]

LINUX_PREDICATES: tuple[DistroPredicate, ...] = (
    _check_ubuntu,
    _check_amazon,
    _check_rhel,
    _check_suse,
    _check_debian,
)


def _machine_arch(machine: str) -> Architecture:
    return Architecture.ARM if machine.lower() in {"aarch64", "arm64"} else Architecture.X86_64


def detect_linux(os_release: Mapping[str, str], machine: str = "x86_64") -> PlatformTag:
    distro_id = (os_release.get("ID") or "").strip()
    if not distro_id:
        raise UnknownOperatingSystem("os-release has no ID field")
    version_id = os_release.get("VERSION_ID")
    arch = _machine_arch(machine)
    for predicate in LINUX_PREDICATES:
        tag = predicate(distro_id, version_id, arch)
        if tag is not None:
            return tag
    logger.debug("no distro build for id=%s version=%s; using legacy", distro_id, version_id)
    return LEGACY


def identify(
    release: Release,
    *,
    system: str | None = None,
    machine: str | None = None,
    os_release_reader: Callable[[], Mapping[str, str]] = read_os_release,
) -> PlatformTag:
    """Pick the build for the running host. The release matters only on macOS."""
    system_name = (system if system is not None else _host.system()).lower()
    if system_name == "linux":
        return detect_linux(os_release_reader(), machine if machine is not None else _host.machine())
    if system_name in {"darwin", "macos"}:
        # Releases before 3.0 for macOS did not link to an SSL library.
        return OSX_NOSSL if release.major < 3 else OSX_SSL
    raise UnsupportedPlatform(system_name or "unknown")
